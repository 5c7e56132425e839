"""
几何提取器 - 计算编组边界/中心/尺寸/旋转/相对位置与文件安全名

职责：
1. 过滤不可导出的编组（锁定/隐藏/空编组/无边界/退化边界）
2. 计算相对参考框左上角的中心位置（纵轴翻转为自上而下）
3. 防御式读取旋转（失败按0处理）
4. 名称清洗（非 [A-Za-z0-9_-] 字符替换为 _）

测试要点：
- test_sanitize_name: 名称清洗与空名占位
- test_compute_geometry: 中心与相对坐标
- test_reject_ineligible: 过滤规则
- test_rotation_fallback: 旋转读取失败
"""

from __future__ import annotations

import logging
import math
import re

from ..interfaces import IGeometryHost
from ..models import Bounds, GroupGeometry, GroupInfo

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


def sanitize_name(name: str | None, index: int) -> tuple[str, str]:
    """
    生成显示名与文件安全名

    Returns:
        (显示名, 安全名)；空名替换为 Group_<index>
    """
    display_name = name if name else f"Group_{index}"
    return display_name, _UNSAFE_CHARS.sub("_", display_name)


def compute_geometry(
    bounds: Bounds,
    frame_left: float,
    frame_top: float,
    index: int,
    name: str,
    safe_name: str,
    rotation: float = 0.0,
) -> GroupGeometry:
    """由边界框与参考框原点计算几何（纯函数）"""
    width = bounds.right - bounds.left
    height = bounds.top - bounds.bottom

    center_x = bounds.left + width / 2
    center_y = bounds.top - height / 2

    return GroupGeometry(
        index=index,
        name=name,
        safe_name=safe_name,
        bounds=bounds,
        width=width,
        height=height,
        center_x=center_x,
        center_y=center_y,
        x=center_x - frame_left,
        y=frame_top - center_y,
        rotation=rotation,
        zorder=index,
    )


def rejection_reason(info: GroupInfo) -> str | None:
    """编组状态校验，不可导出时返回原因"""
    if info.locked:
        return "locked"
    if info.hidden:
        return "hidden"
    if info.item_count <= 0:
        return "empty"
    return None


class GeometryExtractor:
    """编组几何提取器"""

    def __init__(self, host: IGeometryHost):
        self.host = host
        self._used_safe_names: set[str] = set()
        self.last_skip_reason: str | None = None  # 最近一次返回None的原因

    def extract(
        self,
        layer_index: int,
        group_index: int,
        frame: Bounds,
    ) -> GroupGeometry | None:
        """
        提取单个编组的几何

        Args:
            layer_index: 图层下标
            group_index: 编组下标（同时作为zorder）
            frame: 参考框（取其 left/top 作为原点）

        Returns:
            GroupGeometry；需要跳过时返回None
        """
        self.last_skip_reason = None
        info = self.host.group_info(layer_index, group_index)
        reason = rejection_reason(info)
        if reason is None:
            bounds = self.host.group_bounds(layer_index, group_index)
            if bounds is None:
                reason = "no bounds"
            elif bounds.is_degenerate:
                reason = "degenerate bounds"

        if reason:
            self.last_skip_reason = reason
            logger.info(f"跳过编组 {group_index} ({info.name or 'unnamed'}): {reason}")
            return None

        name, safe_name = sanitize_name(info.name, group_index)
        safe_name = self._unique_safe_name(safe_name, group_index)

        return compute_geometry(
            bounds,
            frame.left,
            frame.top,
            index=group_index,
            name=name,
            safe_name=safe_name,
            rotation=self._read_rotation(layer_index, group_index),
        )

    def _unique_safe_name(self, safe_name: str, group_index: int) -> str:
        """重名时追加 _<index>，仍冲突再追加序号"""
        candidate = safe_name
        if candidate in self._used_safe_names:
            candidate = f"{safe_name}_{group_index}"
            n = 2
            while candidate in self._used_safe_names:
                candidate = f"{safe_name}_{group_index}_{n}"
                n += 1
        self._used_safe_names.add(candidate)
        return candidate

    def _read_rotation(self, layer_index: int, group_index: int) -> float:
        """读取旋转，失败返回0"""
        try:
            rotation = float(self.host.group_rotation(layer_index, group_index) or 0.0)
        except Exception as e:
            logger.debug(f"编组 {group_index} 旋转不可读，按0处理: {e}")
            return 0.0
        return rotation if math.isfinite(rotation) else 0.0
