"""
布局导出器 - 编排一次完整导出

职责：
1. 前置条件检查（无文档/无图层/无编组/无输出目录/无法创建文件 → 中止，无副作用）
2. 逐编组：几何提取 → 隔离渲染 → 追加记录
3. 失败隔离（单个编组失败只计入跳过，不中断批次）
4. 全部处理完后写出交换文件，返回汇总

测试要点：
- test_export_full_run: 完整导出
- test_zorder_gaps: 跳过编组后zorder保留原始下标
- test_precondition_abort: 前置条件中止
- test_bad_group_isolated: 单编组失败不影响批次
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import (
    ExportAbortedError,
    IGeometryHost,
    InterchangeError,
    IRenderHost,
)
from ..models import ExportBatch, ExportSummary, LayoutObject
from .geometry_extractor import GeometryExtractor
from .interchange_writer import InterchangeWriter, thumbnail_ref
from .isolation_renderer import IsolationRenderer

logger = logging.getLogger(__name__)


def list_layer_names(host: IGeometryHost) -> list[str]:
    """图层名列表，空名显示为 Layer <n>"""
    names = []
    for i in range(host.layer_count()):
        name = host.layer_name(i)
        names.append(name if name else f"Layer {i + 1}")
    return names


class LayoutExporter:
    """布局导出器"""

    def __init__(
        self,
        host: IGeometryHost | None,
        renderer: IRenderHost | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.config = config or get_config()
        self.host = host
        self.renderer = renderer if renderer is not None else host
        self.writer = InterchangeWriter(self.config.export.json_name)

    def export(
        self,
        layer_index: int,
        output_dir: Path | str | None,
        thumbnail_size: int | None = None,
    ) -> ExportSummary:
        """
        导出指定图层的全部顶层编组

        Args:
            layer_index: 图层下标
            output_dir: 输出目录（export.json + thumbnails/）
            thumbnail_size: 缩略图最长边像素，缺省取配置

        Returns:
            导出汇总

        Raises:
            ExportAbortedError: 前置条件不满足
            InterchangeError: 最终写出失败
        """
        host = self._require_host()
        thumb_size = thumbnail_size or self.config.export.thumbnail_size
        self._check_preconditions(host, layer_index, output_dir, thumb_size)

        output_dir = Path(output_dir)
        thumb_dir = output_dir / self.config.export.thumbnail_dir
        try:
            thumb_dir.mkdir(parents=True, exist_ok=True)
            self.writer.check_writable(output_dir)
        except (OSError, InterchangeError) as e:
            raise ExportAbortedError(f"输出目录不可用: {e}") from e

        layer_name = host.layer_name(layer_index)
        frame = host.frame_rect(host.active_frame_index())

        extractor = GeometryExtractor(host)
        isolation = IsolationRenderer(host, self.renderer, transparent=self.config.export.transparent)
        summary = ExportSummary(layer=layer_name, thumbnail_size=thumb_size)
        objects: list[LayoutObject] = []

        for group_index in range(host.group_count(layer_index)):
            try:
                geometry = extractor.extract(layer_index, group_index, frame)
                if geometry is None:
                    summary.skipped += 1
                    summary.skipped_groups.append(f"{group_index}: {extractor.last_skip_reason}")
                    continue

                thumb_path = thumb_dir / f"{geometry.safe_name}.png"
                isolation.render(layer_index, group_index, geometry, thumb_path, thumb_size)

                objects.append(
                    LayoutObject(
                        name=geometry.name,
                        x=geometry.x,
                        y=geometry.y,
                        width=geometry.width,
                        height=geometry.height,
                        rotation=geometry.rotation,
                        zorder=geometry.zorder,
                        thumbnail=thumbnail_ref(geometry.safe_name, self.config.export.thumbnail_dir),
                    )
                )
                summary.exported += 1

            except Exception as e:
                summary.skipped += 1
                summary.skipped_groups.append(f"{group_index}: {e}")
                logger.warning(f"跳过编组 {group_index}: {e}")

        batch = ExportBatch(layer=layer_name, objects=objects)
        summary.json_path = self.writer.write(batch, output_dir)

        logger.info(summary.message())
        return summary

    def _require_host(self) -> IGeometryHost:
        if self.host is None:
            raise ExportAbortedError("No document open.")
        if self.renderer is None:
            raise ExportAbortedError("未配置渲染宿主")
        return self.host

    def _check_preconditions(
        self,
        host: IGeometryHost,
        layer_index: int,
        output_dir: Path | str | None,
        thumb_size: int,
    ) -> None:
        """前置条件：任一不满足即中止"""
        layer_total = host.layer_count()
        if layer_total == 0:
            raise ExportAbortedError("The document has no layers.")
        if not 0 <= layer_index < layer_total:
            raise ExportAbortedError(f"图层下标越界: {layer_index}")
        if host.group_count(layer_index) == 0:
            raise ExportAbortedError("Selected layer has no top-level groups.")
        if not output_dir:
            raise ExportAbortedError("未选择输出目录")
        if thumb_size <= 0:
            raise ExportAbortedError(f"缩略图尺寸无效: {thumb_size}")
