"""
内存场景 - ISceneHost 的内存实现

节点变换：局部位置 + 绕Z旋转 + 缩放，父链逐级变换到世界空间。
模板注册表模拟预制体；撤销分组记录分组内创建的节点，可整组撤销。
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field

from ..interfaces import ISceneHost, PlacementError
from ..models import TemplateRef, Vec3


class SceneNode(BaseModel):
    """场景节点"""
    node_id: int
    name: str
    parent: int | None = None
    local_position: Vec3 = Field(default_factory=Vec3)
    local_rotation_z: float = 0.0
    local_scale: Vec3 = Field(default_factory=lambda: Vec3(x=1.0, y=1.0, z=1.0))
    sorting_order: int | None = None  # None 表示无2D绘制顺序属性
    template: str | None = None


class TemplateSpec(BaseModel):
    """模板定义"""
    name: str
    sorting_order: int | None = None
    local_scale: Vec3 = Field(default_factory=lambda: Vec3(x=1.0, y=1.0, z=1.0))


class UndoGroup(BaseModel):
    """撤销分组"""
    group_id: int
    label: str
    created: list[int] = Field(default_factory=list)
    closed: bool = False


class MemoryScene(ISceneHost):
    """内存场景宿主"""

    def __init__(self):
        self.nodes: dict[int, SceneNode] = {}
        self.templates: dict[str, TemplateSpec] = {}
        self.undo_groups: list[UndoGroup] = []
        self.dirty = False
        self._next_id = 1

    # --- 构建 ---

    def add_node(
        self,
        name: str,
        parent: int | None = None,
        position: Vec3 | None = None,
        rotation_z: float = 0.0,
        scale: Vec3 | None = None,
        sorting_order: int | None = None,
        template: str | None = None,
    ) -> int:
        """新增节点（局部变换），返回节点ID"""
        if parent is not None and parent not in self.nodes:
            raise PlacementError(f"父节点不存在: {parent}")

        node_id = self._next_id
        self._next_id += 1
        self.nodes[node_id] = SceneNode(
            node_id=node_id,
            name=name,
            parent=parent,
            local_position=position or Vec3(),
            local_rotation_z=rotation_z,
            local_scale=scale or Vec3(x=1.0, y=1.0, z=1.0),
            sorting_order=sorting_order,
            template=template,
        )

        open_group = self._open_undo_group()
        if open_group is not None:
            open_group.created.append(node_id)
        return node_id

    def register_template(
        self,
        name: str,
        sorting_order: int | None = None,
        scale: Vec3 | None = None,
    ) -> TemplateRef:
        """注册模板（sorting_order 非None 表示模板带2D绘制顺序属性）"""
        self.templates[name] = TemplateSpec(
            name=name,
            sorting_order=sorting_order,
            local_scale=scale or Vec3(x=1.0, y=1.0, z=1.0),
        )
        return TemplateRef(name=name, asset=f"memory://{name}")

    def node(self, node_id: int) -> SceneNode:
        try:
            return self.nodes[node_id]
        except KeyError as e:
            raise PlacementError(f"节点不存在: {node_id}") from e

    def find(self, name: str) -> int | None:
        for node in self.nodes.values():
            if node.name == name:
                return node.node_id
        return None

    def children(self, node_id: int) -> list[int]:
        return [n.node_id for n in self.nodes.values() if n.parent == node_id]

    # --- 变换 ---

    def transform_point(self, node: Any, point: Vec3) -> Vec3:
        """node局部空间 → 世界空间"""
        n = self.node(node)
        x = point.x * n.local_scale.x
        y = point.y * n.local_scale.y
        z = point.z * n.local_scale.z

        rad = math.radians(n.local_rotation_z)
        c, s = math.cos(rad), math.sin(rad)
        result = Vec3(
            x=x * c - y * s + n.local_position.x,
            y=x * s + y * c + n.local_position.y,
            z=z + n.local_position.z,
        )

        if n.parent is not None:
            return self.transform_point(n.parent, result)
        return result

    def inverse_transform_point(self, node: Any, point: Vec3) -> Vec3:
        """世界空间 → node局部空间"""
        n = self.node(node)
        if n.parent is not None:
            point = self.inverse_transform_point(n.parent, point)

        x = point.x - n.local_position.x
        y = point.y - n.local_position.y
        z = point.z - n.local_position.z

        rad = math.radians(-n.local_rotation_z)
        c, s = math.cos(rad), math.sin(rad)
        x, y = x * c - y * s, x * s + y * c

        return Vec3(
            x=x / n.local_scale.x,
            y=y / n.local_scale.y,
            z=z / n.local_scale.z,
        )

    def world_rotation_z(self, node_id: int) -> float:
        n = self.node(node_id)
        rotation = n.local_rotation_z
        if n.parent is not None:
            rotation += self.world_rotation_z(n.parent)
        return rotation

    # --- ISceneHost ---

    def create_entity(self, name: str) -> Any:
        return self.add_node(name)

    def instantiate_template(self, template: TemplateRef) -> Any:
        spec = self.templates.get(template.name)
        if spec is None:
            raise PlacementError(f"模板未注册: {template.name}")
        return self.add_node(
            spec.name,
            scale=spec.local_scale,
            sorting_order=spec.sorting_order,
            template=spec.name,
        )

    def set_name(self, entity: Any, name: str) -> None:
        self.node(entity).name = name

    def set_parent(self, entity: Any, parent: Any) -> None:
        if parent is not None:
            self.node(parent)
        self.node(entity).parent = parent

    def set_local_position(self, entity: Any, position: Vec3) -> None:
        self.node(entity).local_position = position

    def set_world_position(self, entity: Any, position: Vec3) -> None:
        n = self.node(entity)
        if n.parent is None:
            n.local_position = position
        else:
            n.local_position = self.inverse_transform_point(n.parent, position)

    def get_world_position(self, entity: Any) -> Vec3:
        n = self.node(entity)
        if n.parent is None:
            return n.local_position
        return self.transform_point(n.parent, n.local_position)

    def set_world_rotation_z(self, entity: Any, degrees: float) -> None:
        n = self.node(entity)
        parent_rotation = self.world_rotation_z(n.parent) if n.parent is not None else 0.0
        n.local_rotation_z = degrees - parent_rotation

    def _sorting_node(self, node_id: int) -> SceneNode | None:
        """自身或子孙中第一个带绘制顺序的节点"""
        n = self.node(node_id)
        if n.sorting_order is not None:
            return n
        for child in self.children(node_id):
            found = self._sorting_node(child)
            if found is not None:
                return found
        return None

    def has_sorting_order(self, entity: Any) -> bool:
        return self._sorting_node(entity) is not None

    def set_sorting_order(self, entity: Any, order: int) -> None:
        target = self._sorting_node(entity)
        if target is None:
            raise PlacementError(f"节点无绘制顺序属性: {entity}")
        target.sorting_order = order

    def begin_undo_group(self, label: str) -> int:
        group_id = len(self.undo_groups) + 1
        self.undo_groups.append(UndoGroup(group_id=group_id, label=label))
        return group_id

    def collapse_undo_group(self, group_id: int) -> None:
        """合并 group_id 之后开启的分组并关闭"""
        keep = [g for g in self.undo_groups if g.group_id <= group_id]
        merged = [g for g in self.undo_groups if g.group_id > group_id]
        if not keep or keep[-1].group_id != group_id:
            raise PlacementError(f"撤销分组不存在: {group_id}")
        target = keep[-1]
        for g in merged:
            target.created.extend(g.created)
        target.closed = True
        self.undo_groups = keep

    def mark_dirty(self) -> None:
        self.dirty = True

    # --- 撤销/导出 ---

    def _open_undo_group(self) -> UndoGroup | None:
        if self.undo_groups and not self.undo_groups[-1].closed:
            return self.undo_groups[-1]
        return None

    def undo_last_group(self) -> int:
        """撤销最近一个分组，返回删除的节点数"""
        if not self.undo_groups:
            return 0
        group = self.undo_groups.pop()
        removed = 0
        for node_id in reversed(group.created):
            removed += self._remove_subtree(node_id)
        return removed

    def _remove_subtree(self, node_id: int) -> int:
        if node_id not in self.nodes:
            return 0
        removed = 0
        for child in self.children(node_id):
            removed += self._remove_subtree(child)
        del self.nodes[node_id]
        return removed + 1

    def to_dict(self) -> dict[str, Any]:
        """场景快照（世界坐标一并输出）"""
        nodes = []
        for n in self.nodes.values():
            data = n.model_dump(mode="json")
            data["world_position"] = self.get_world_position(n.node_id).model_dump(mode="json")
            data["world_rotation_z"] = self.world_rotation_z(n.node_id)
            nodes.append(data)
        return {"nodes": nodes, "dirty": self.dirty}
