"""
隔离渲染器 - 单编组的 隔离→取景→渲染→还原 周期

状态机（每个导出对象一个完整周期）：
    NORMAL → ISOLATING → FRAMED → RENDERED → RESTORING → NORMAL
    渲染前任一步失败：→ SKIPPED → RESTORING → NORMAL
    RENDERED 之后无论渲染成败都进入 RESTORING

职责：
1. ISOLATING: 快照全部图层可见性，仅目标图层可见；快照目标图层全部对象隐藏标记，再全部隐藏
2. FRAMED: 显示目标编组，按编组边界新建临时画板并激活
3. RENDERED: 按 thumb_size / maxDim 统一缩放，透明背景导出PNG
4. RESTORING: 还原对象隐藏标记、图层可见性，删除临时画板，激活原画板（无条件执行）

测试要点：
- test_scale_percent: 缩放百分比
- test_cycle_trace: 状态机轨迹
- test_restore_after_render_failure: 渲染失败后可见性逐位还原
- test_restore_after_isolation_failure: 隔离中途失败后还原
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..interfaces import IGeometryHost, IRenderHost, RenderError
from ..models import GroupGeometry, RenderState, VisibilitySnapshot

logger = logging.getLogger(__name__)


def compute_scale_percent(thumb_size: float, width: float, height: float) -> float:
    """
    计算统一缩放百分比

    scalePercent = thumb_size / max(|width|, |height|) * 100

    Raises:
        ValueError: 最大边长<=0
    """
    max_dim = max(abs(width), abs(height))
    if max_dim <= 0:
        raise ValueError(f"退化尺寸: {width} x {height}")
    return (thumb_size / max_dim) * 100


class IsolationRenderer:
    """单编组隔离渲染"""

    def __init__(
        self,
        host: IGeometryHost,
        renderer: IRenderHost,
        transparent: bool = True,
    ):
        self.host = host
        self.renderer = renderer
        self.transparent = transparent
        self.state = RenderState.NORMAL
        self.trace: list[RenderState] = []

    def render(
        self,
        layer_index: int,
        group_index: int,
        geometry: GroupGeometry,
        thumb_path: Path,
        thumb_size: int,
    ) -> Path:
        """
        执行一次完整隔离周期

        Args:
            layer_index: 目标图层下标
            group_index: 目标编组下标
            geometry: 编组几何（取其边界作为临时画板）
            thumb_path: PNG输出路径
            thumb_size: 缩略图最长边像素

        Returns:
            写出的PNG路径

        Raises:
            RenderError: 任一步失败（此时文档状态已还原）
        """
        self.trace = []
        self._enter(RenderState.NORMAL)

        if thumb_size <= 0 or geometry.max_dim <= 0:
            self._enter(RenderState.SKIPPED)
            self._enter(RenderState.NORMAL)
            raise RenderError(
                f"编组 {group_index} 无法渲染: thumb_size={thumb_size}, maxDim={geometry.max_dim}"
            )

        snapshot = VisibilitySnapshot(layer_index=layer_index)
        previous_frame = self.host.active_frame_index()
        temp_frame: int | None = None
        error: Exception | None = None

        try:
            self._enter(RenderState.ISOLATING)
            self._isolate(layer_index, snapshot)

            self._enter(RenderState.FRAMED)
            self._show_group(layer_index, group_index)
            temp_frame = self.host.add_frame(geometry.bounds)
            self.host.set_active_frame(temp_frame)

            self._enter(RenderState.RENDERED)
            scale_percent = compute_scale_percent(thumb_size, geometry.width, geometry.height)
            thumb_path.parent.mkdir(parents=True, exist_ok=True)
            self.renderer.render_png(thumb_path, scale_percent, transparent=self.transparent)

        except Exception as e:
            error = e
            if self.state != RenderState.RENDERED:
                self._enter(RenderState.SKIPPED)

        finally:
            self._enter(RenderState.RESTORING)
            self._restore(snapshot, temp_frame, previous_frame)
            self._enter(RenderState.NORMAL)

        if error is not None:
            raise RenderError(f"编组 {group_index} ({geometry.name}) 渲染失败: {error}") from error

        return thumb_path

    def _enter(self, state: RenderState) -> None:
        self.state = state
        self.trace.append(state)

    def _isolate(self, layer_index: int, snapshot: VisibilitySnapshot) -> None:
        """快照后隔离：仅目标图层可见，图层内对象全部隐藏"""
        layer_total = self.host.layer_count()
        snapshot.layer_visible = [self.host.get_layer_visible(i) for i in range(layer_total)]

        item_total = self.host.item_count(layer_index)
        snapshot.item_hidden = [
            self.host.get_item_hidden(layer_index, i) for i in range(item_total)
        ]

        for i in range(layer_total):
            self.host.set_layer_visible(i, i == layer_index)

        for i in range(item_total):
            try:
                self.host.set_item_hidden(layer_index, i, True)
            except Exception as e:
                # 锁定对象可能拒绝隐藏，继续处理其余对象
                logger.debug(f"对象 {i} 无法隐藏: {e}")

    def _show_group(self, layer_index: int, group_index: int) -> None:
        try:
            self.host.set_group_hidden(layer_index, group_index, False)
        except Exception as e:
            logger.debug(f"编组 {group_index} 无法取消隐藏: {e}")

    def _restore(
        self,
        snapshot: VisibilitySnapshot,
        temp_frame: int | None,
        previous_frame: int,
    ) -> None:
        """还原快照中记录的全部状态，逐项保护"""
        layer_index = snapshot.layer_index

        try:
            item_total = min(self.host.item_count(layer_index), len(snapshot.item_hidden))
        except Exception as e:
            logger.warning(f"还原对象隐藏标记失败: {e}")
            item_total = 0
        for i in range(item_total):
            try:
                self.host.set_item_hidden(layer_index, i, snapshot.item_hidden[i])
            except Exception as e:
                logger.warning(f"还原对象 {i} 隐藏标记失败: {e}")

        try:
            layer_total = min(self.host.layer_count(), len(snapshot.layer_visible))
        except Exception as e:
            logger.warning(f"还原图层可见性失败: {e}")
            layer_total = 0
        for i in range(layer_total):
            try:
                self.host.set_layer_visible(i, snapshot.layer_visible[i])
            except Exception as e:
                logger.warning(f"还原图层 {i} 可见性失败: {e}")

        if temp_frame is not None:
            try:
                if temp_frame < self.host.frame_count():
                    self.host.remove_frame(temp_frame)
            except Exception as e:
                logger.warning(f"删除临时画板失败: {e}")

        try:
            self.host.set_active_frame(previous_frame)
        except Exception as e:
            logger.warning(f"恢复原画板失败: {e}")
