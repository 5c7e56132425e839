"""
DXF文档宿主 - 以 ezdxf 图纸作为导出源

映射关系：
- 图层: DXF图层表（on/off = 可见性，locked = 编组锁定）
- 页面对象: 模型空间中位于该图层的实体（invisible 标记 = 隐藏）
- 编组: 该图层上的块参照 INSERT（块名 = 编组名，绘制顺序 = 模型空间顺序，0 为最底层）
- 画板: 初始为图形界限 $LIMMIN/$LIMMAX（或模型空间范围），临时画板仅存在于宿主内存

依赖：
- ezdxf: DXF解析、包围盒、drawing 插件
- matplotlib: drawing 插件的 Agg 画布，输出透明PNG

测试要点：
- test_layers_and_groups: 图层/编组枚举
- test_group_bounds_rotation: 包围盒与旋转
- test_hidden_flags: invisible 标记读写
"""

from __future__ import annotations

import logging
from pathlib import Path

import ezdxf
from ezdxf import bbox as ezbbox
from ezdxf.addons.drawing import Frontend, RenderContext
from ezdxf.addons.drawing.matplotlib import MatplotlibBackend
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from ..interfaces import ExportAbortedError, IGeometryHost, IRenderHost, RenderError
from ..models import Bounds, GroupInfo

logger = logging.getLogger(__name__)


class DxfDocumentHost(IGeometryHost, IRenderHost):
    """ezdxf 图纸宿主实现"""

    def __init__(self, doc, render_dpi: int = 100, frame_from_extents: bool = False):
        self.doc = doc
        self.msp = doc.modelspace()
        self.render_dpi = render_dpi
        self.frames: list[Bounds] = [self._initial_frame(frame_from_extents)]
        self.active_frame = 0

    @classmethod
    def open(cls, dxf_path: Path, render_dpi: int = 100, frame_from_extents: bool = False) -> DxfDocumentHost:
        """读取DXF文件"""
        if not dxf_path.exists():
            raise ExportAbortedError(f"DXF文件不存在: {dxf_path}")
        try:
            doc = ezdxf.readfile(str(dxf_path))
        except Exception as e:
            raise ExportAbortedError(f"DXF解析失败: {e}") from e
        return cls(doc, render_dpi=render_dpi, frame_from_extents=frame_from_extents)

    def save(self, dxf_path: Path) -> None:
        self.doc.saveas(str(dxf_path))

    # --- 内部查询 ---

    def _layers(self) -> list:
        return list(self.doc.layers)

    def _layer(self, layer_index: int):
        return self._layers()[layer_index]

    def _items(self, layer_index: int) -> list:
        name = self._layer(layer_index).dxf.name.lower()
        return [e for e in self.msp if e.dxf.get("layer", "0").lower() == name]

    def _groups(self, layer_index: int) -> list:
        return [e for e in self._items(layer_index) if e.dxftype() == "INSERT"]

    def _group(self, layer_index: int, group_index: int):
        return self._groups(layer_index)[group_index]

    def _initial_frame(self, from_extents: bool) -> Bounds:
        if from_extents:
            extents = ezbbox.extents(self.msp, fast=True)
            if extents.has_data:
                return self._to_bounds(extents)
        limmin = self.doc.header.get("$LIMMIN", (0.0, 0.0))
        limmax = self.doc.header.get("$LIMMAX", (420.0, 297.0))
        return Bounds(left=limmin[0], top=limmax[1], right=limmax[0], bottom=limmin[1])

    @staticmethod
    def _to_bounds(box) -> Bounds:
        return Bounds(
            left=box.extmin.x,
            top=box.extmax.y,
            right=box.extmax.x,
            bottom=box.extmin.y,
        )

    # --- 图层 ---

    def layer_count(self) -> int:
        return len(self._layers())

    def layer_name(self, layer_index: int) -> str:
        return self._layer(layer_index).dxf.name

    def get_layer_visible(self, layer_index: int) -> bool:
        return self._layer(layer_index).is_on()

    def set_layer_visible(self, layer_index: int, visible: bool) -> None:
        layer = self._layer(layer_index)
        if visible:
            layer.on()
        else:
            layer.off()

    # --- 页面对象 ---

    def item_count(self, layer_index: int) -> int:
        return len(self._items(layer_index))

    def get_item_hidden(self, layer_index: int, item_index: int) -> bool:
        return bool(self._items(layer_index)[item_index].dxf.get("invisible", 0))

    def set_item_hidden(self, layer_index: int, item_index: int, hidden: bool) -> None:
        self._items(layer_index)[item_index].dxf.invisible = int(hidden)

    # --- 编组 ---

    def group_count(self, layer_index: int) -> int:
        return len(self._groups(layer_index))

    def group_info(self, layer_index: int, group_index: int) -> GroupInfo:
        insert = self._group(layer_index, group_index)
        block = self.doc.blocks.get(insert.dxf.name)
        return GroupInfo(
            name=insert.dxf.name,
            locked=self._layer(layer_index).is_locked(),
            hidden=bool(insert.dxf.get("invisible", 0)),
            item_count=len(block) if block is not None else 0,
        )

    def group_bounds(self, layer_index: int, group_index: int) -> Bounds | None:
        insert = self._group(layer_index, group_index)
        extents = ezbbox.extents([insert], fast=True)
        if not extents.has_data:
            return None
        return self._to_bounds(extents)

    def group_rotation(self, layer_index: int, group_index: int) -> float:
        return float(self._group(layer_index, group_index).dxf.get("rotation", 0.0))

    def set_group_hidden(self, layer_index: int, group_index: int, hidden: bool) -> None:
        self._group(layer_index, group_index).dxf.invisible = int(hidden)

    # --- 画板 ---

    def frame_count(self) -> int:
        return len(self.frames)

    def active_frame_index(self) -> int:
        return self.active_frame

    def frame_rect(self, frame_index: int) -> Bounds:
        return self.frames[frame_index]

    def add_frame(self, rect: Bounds) -> int:
        self.frames.append(rect.model_copy())
        return len(self.frames) - 1

    def set_active_frame(self, frame_index: int) -> None:
        if not 0 <= frame_index < len(self.frames):
            raise IndexError(f"画板下标越界: {frame_index}")
        self.active_frame = frame_index

    def remove_frame(self, frame_index: int) -> None:
        del self.frames[frame_index]
        if self.active_frame >= len(self.frames):
            self.active_frame = max(0, len(self.frames) - 1)

    # --- 渲染 ---

    def _is_drawn(self, entity) -> bool:
        if entity.dxf.get("invisible", 0):
            return False
        layer_name = entity.dxf.get("layer", "0")
        if self.doc.layers.has_entry(layer_name):
            return self.doc.layers.get(layer_name).is_on()
        return True

    def render_png(self, path: Path, scale_percent: float, transparent: bool = True) -> Path:
        """用 drawing 插件将当前画板范围渲染为PNG"""
        frame = self.frames[self.active_frame]
        scale = scale_percent / 100
        width_px = max(1, round(abs(frame.width) * scale))
        height_px = max(1, round(abs(frame.height) * scale))
        dpi = self.render_dpi

        try:
            fig = Figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
            FigureCanvasAgg(fig)
            ax = fig.add_axes((0, 0, 1, 1))

            ctx = RenderContext(self.doc)
            ctx.set_current_layout(self.msp)
            frontend = Frontend(ctx, MatplotlibBackend(ax))
            frontend.draw_entities(e for e in self.msp if self._is_drawn(e))

            ax.set_xlim(frame.left, frame.right)
            ax.set_ylim(frame.bottom, frame.top)
            ax.set_axis_off()
            fig.savefig(str(path), dpi=dpi, transparent=transparent)
        except Exception as e:
            raise RenderError(f"DXF渲染失败: {path}: {e}") from e

        logger.debug(f"渲染 {path.name}: {width_px}x{height_px}px, scale={scale_percent:.2f}%")
        return path
