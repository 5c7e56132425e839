"""
模块接口契约 - 定义宿主能力的抽象接口

设计原则：
1. 核心逻辑只依赖这些窄接口，不直接依赖具体宿主（设计工具/场景编辑器）
2. 宿主绑定是可替换的适配器（内存文档、DXF文档、内存场景）
3. 便于单元测试和fake替换

使用方式：
    from layout_bridge.interfaces import IGeometryHost

    class MyDocument(IGeometryHost):
        def layer_count(self) -> int:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Bounds, GroupInfo, TemplateRef, Vec3


# ============================================================================
# 导出端宿主接口
# ============================================================================

class IGeometryHost(ABC):
    """文档宿主接口 - 图层/对象可见性、编组几何、画板（参考框）

    所有索引都是稳定的整数下标：
    - 图层下标: 0..layer_count()-1
    - 对象下标: 图层内全部页面对象（含编组），0..item_count(layer)-1
    - 编组下标: 图层内顶层编组，0..group_count(layer)-1，0 为最底层
    """

    # --- 图层 ---

    @abstractmethod
    def layer_count(self) -> int:
        """图层数量"""
        ...

    @abstractmethod
    def layer_name(self, layer_index: int) -> str:
        """图层名（可能为空字符串）"""
        ...

    @abstractmethod
    def get_layer_visible(self, layer_index: int) -> bool:
        """图层是否可见"""
        ...

    @abstractmethod
    def set_layer_visible(self, layer_index: int, visible: bool) -> None:
        """设置图层可见性"""
        ...

    # --- 页面对象 ---

    @abstractmethod
    def item_count(self, layer_index: int) -> int:
        """图层内页面对象数量"""
        ...

    @abstractmethod
    def get_item_hidden(self, layer_index: int, item_index: int) -> bool:
        """页面对象是否隐藏"""
        ...

    @abstractmethod
    def set_item_hidden(self, layer_index: int, item_index: int, hidden: bool) -> None:
        """设置页面对象隐藏标记（宿主可能拒绝，例如锁定对象）"""
        ...

    # --- 编组 ---

    @abstractmethod
    def group_count(self, layer_index: int) -> int:
        """图层内顶层编组数量"""
        ...

    @abstractmethod
    def group_info(self, layer_index: int, group_index: int) -> GroupInfo:
        """编组的名称/锁定/隐藏/子对象数量"""
        ...

    @abstractmethod
    def group_bounds(self, layer_index: int, group_index: int) -> Bounds | None:
        """
        编组几何边界

        Returns:
            Bounds（left/top/right/bottom，y轴向上），无法获取时返回None
        """
        ...

    @abstractmethod
    def group_rotation(self, layer_index: int, group_index: int) -> float:
        """
        编组旋转角度（度）

        Raises:
            任意异常: 宿主无法读取旋转时（调用方按0处理）
        """
        ...

    @abstractmethod
    def set_group_hidden(self, layer_index: int, group_index: int, hidden: bool) -> None:
        """设置编组隐藏标记"""
        ...

    # --- 画板（参考框） ---

    @abstractmethod
    def frame_count(self) -> int:
        """画板数量"""
        ...

    @abstractmethod
    def active_frame_index(self) -> int:
        """当前激活画板下标"""
        ...

    @abstractmethod
    def frame_rect(self, frame_index: int) -> Bounds:
        """画板矩形"""
        ...

    @abstractmethod
    def add_frame(self, rect: Bounds) -> int:
        """新增画板，返回其下标"""
        ...

    @abstractmethod
    def set_active_frame(self, frame_index: int) -> None:
        """激活画板"""
        ...

    @abstractmethod
    def remove_frame(self, frame_index: int) -> None:
        """删除画板"""
        ...


class IRenderHost(ABC):
    """位图渲染接口"""

    @abstractmethod
    def render_png(self, path: Path, scale_percent: float, transparent: bool = True) -> Path:
        """
        将当前激活画板范围内的可见内容渲染为PNG

        Args:
            path: 输出文件路径
            scale_percent: 统一缩放百分比（水平=垂直）
            transparent: 是否透明背景

        Returns:
            写出的PNG路径

        Raises:
            RenderError: 渲染失败
        """
        ...


# ============================================================================
# 导入端宿主接口
# ============================================================================

class ISceneHost(ABC):
    """场景宿主接口 - 实体创建、变换、绘制顺序、撤销分组"""

    @abstractmethod
    def create_entity(self, name: str) -> Any:
        """创建空实体，返回实体句柄"""
        ...

    @abstractmethod
    def instantiate_template(self, template: TemplateRef) -> Any:
        """由模板（预制体）实例化实体，返回实体句柄"""
        ...

    @abstractmethod
    def set_name(self, entity: Any, name: str) -> None:
        ...

    @abstractmethod
    def set_parent(self, entity: Any, parent: Any) -> None:
        """挂到父节点下（不保持世界坐标，局部变换原样保留）"""
        ...

    @abstractmethod
    def set_local_position(self, entity: Any, position: Vec3) -> None:
        ...

    @abstractmethod
    def set_world_position(self, entity: Any, position: Vec3) -> None:
        ...

    @abstractmethod
    def get_world_position(self, entity: Any) -> Vec3:
        ...

    @abstractmethod
    def transform_point(self, node: Any, point: Vec3) -> Vec3:
        """将node局部空间的点变换到世界空间"""
        ...

    @abstractmethod
    def set_world_rotation_z(self, entity: Any, degrees: float) -> None:
        """设置绕法线(Z)轴的世界旋转"""
        ...

    @abstractmethod
    def has_sorting_order(self, entity: Any) -> bool:
        """实体（或其子节点）是否带2D绘制顺序属性"""
        ...

    @abstractmethod
    def set_sorting_order(self, entity: Any, order: int) -> None:
        ...

    @abstractmethod
    def begin_undo_group(self, label: str) -> int:
        """开启撤销分组，返回分组ID"""
        ...

    @abstractmethod
    def collapse_undo_group(self, group_id: int) -> None:
        """把分组ID之后的全部操作合并为一步撤销"""
        ...

    @abstractmethod
    def mark_dirty(self) -> None:
        """标记场景已修改"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class LayoutBridgeError(Exception):
    """基础异常"""
    pass


class ExportAbortedError(LayoutBridgeError):
    """导出前置条件不满足，整次导出中止（无副作用）"""
    pass


class RenderError(LayoutBridgeError):
    """单个编组隔离/取景/渲染失败（跳过该编组）"""
    pass


class InterchangeError(LayoutBridgeError):
    """交换文件读写错误"""
    pass


class PlacementError(LayoutBridgeError):
    """放置/实例化错误"""
    pass
