"""
内存文档 - 显式传入的文档状态（图层/对象/画板），同时实现几何与渲染宿主接口

用途：
- 单元测试中替代真实设计工具
- 脚本化构建布局并导出

渲染：使用 Pillow 将当前画板范围内可见对象的边界矩形栅格化为RGBA PNG
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from PIL import Image, ImageDraw
from pydantic import BaseModel, Field

from ..interfaces import IGeometryHost, IRenderHost, RenderError
from ..models import Bounds, GroupInfo


class MemoryItem(BaseModel):
    """页面对象（编组或普通路径）"""
    name: str = ""
    kind: Literal["group", "path"] = "group"
    hidden: bool = False
    locked: bool = False
    bounds: Bounds | None = None
    rotation: float | None = 0.0  # None 表示宿主无法读取
    item_count: int = 1
    color: str = "#3366cc"


class MemoryLayer(BaseModel):
    """图层"""
    name: str = ""
    visible: bool = True
    items: list[MemoryItem] = Field(default_factory=list)

    def group_item_indices(self) -> list[int]:
        return [i for i, item in enumerate(self.items) if item.kind == "group"]


class RenderCall(BaseModel):
    """一次渲染调用的记录"""
    path: Path
    scale_percent: float
    transparent: bool
    frame: Bounds
    visible_items: list[str] = Field(default_factory=list)


class MemoryDocument(IGeometryHost, IRenderHost):
    """内存文档宿主"""

    def __init__(
        self,
        layers: list[MemoryLayer] | None = None,
        frames: list[Bounds] | None = None,
        active_frame: int = 0,
    ):
        self.layers = layers or []
        self.frames = frames or [Bounds(left=0, top=0, right=800, bottom=-600)]
        self.active_frame = active_frame
        self.render_calls: list[RenderCall] = []

    # --- 辅助 ---

    def visibility_state(self) -> tuple[list[bool], list[list[bool]]]:
        """(图层可见性, 每图层对象隐藏标记)"""
        return (
            [layer.visible for layer in self.layers],
            [[item.hidden for item in layer.items] for layer in self.layers],
        )

    def _group(self, layer_index: int, group_index: int) -> MemoryItem:
        layer = self.layers[layer_index]
        return layer.items[layer.group_item_indices()[group_index]]

    # --- 图层 ---

    def layer_count(self) -> int:
        return len(self.layers)

    def layer_name(self, layer_index: int) -> str:
        return self.layers[layer_index].name

    def get_layer_visible(self, layer_index: int) -> bool:
        return self.layers[layer_index].visible

    def set_layer_visible(self, layer_index: int, visible: bool) -> None:
        self.layers[layer_index].visible = visible

    # --- 页面对象 ---

    def item_count(self, layer_index: int) -> int:
        return len(self.layers[layer_index].items)

    def get_item_hidden(self, layer_index: int, item_index: int) -> bool:
        return self.layers[layer_index].items[item_index].hidden

    def set_item_hidden(self, layer_index: int, item_index: int, hidden: bool) -> None:
        item = self.layers[layer_index].items[item_index]
        if item.locked:
            raise PermissionError(f"对象已锁定: {item.name}")
        item.hidden = hidden

    # --- 编组 ---

    def group_count(self, layer_index: int) -> int:
        return len(self.layers[layer_index].group_item_indices())

    def group_info(self, layer_index: int, group_index: int) -> GroupInfo:
        group = self._group(layer_index, group_index)
        return GroupInfo(
            name=group.name,
            locked=group.locked,
            hidden=group.hidden,
            item_count=group.item_count,
        )

    def group_bounds(self, layer_index: int, group_index: int) -> Bounds | None:
        return self._group(layer_index, group_index).bounds

    def group_rotation(self, layer_index: int, group_index: int) -> float:
        rotation = self._group(layer_index, group_index).rotation
        if rotation is None:
            raise RuntimeError("rotation unavailable")
        return rotation

    def set_group_hidden(self, layer_index: int, group_index: int, hidden: bool) -> None:
        group = self._group(layer_index, group_index)
        if group.locked:
            raise PermissionError(f"编组已锁定: {group.name}")
        group.hidden = hidden

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

    def render_png(self, path: Path, scale_percent: float, transparent: bool = True) -> Path:
        """将当前画板内可见对象的边界栅格化为PNG"""
        frame = self.frames[self.active_frame]
        scale = scale_percent / 100
        width_px = max(1, round(abs(frame.width) * scale))
        height_px = max(1, round(abs(frame.height) * scale))

        background = (0, 0, 0, 0) if transparent else (255, 255, 255, 255)
        image = Image.new("RGBA", (width_px, height_px), background)
        draw = ImageDraw.Draw(image)

        visible_items = []
        for layer in self.layers:
            if not layer.visible:
                continue
            for item in layer.items:
                if item.hidden or item.bounds is None:
                    continue
                if not item.bounds.intersects(frame):
                    continue
                visible_items.append(item.name)
                b = item.bounds
                x0 = (b.left - frame.left) * scale
                y0 = (frame.top - b.top) * scale
                x1 = (b.right - frame.left) * scale
                y1 = (frame.top - b.bottom) * scale
                draw.rectangle([min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)], fill=item.color)

        try:
            image.save(path, format="PNG")
        except OSError as e:
            raise RenderError(f"PNG写出失败: {path}: {e}") from e

        self.render_calls.append(
            RenderCall(
                path=path,
                scale_percent=scale_percent,
                transparent=transparent,
                frame=frame.model_copy(),
                visible_items=visible_items,
            )
        )
        return path
