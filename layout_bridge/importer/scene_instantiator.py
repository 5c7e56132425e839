"""
场景实例化器 - 按解析结果创建实体

职责：
1. 创建空实体或由模板实例化，设置名称
2. 应用父节点、位置、旋转（不做额外决策）
3. 应用层级：有绘制顺序属性 → sorting_order，否则调整世界深度
4. 批量创建合并为一个撤销步骤，并标记场景已修改
"""

from __future__ import annotations

import logging
from typing import Any

from ..interfaces import ISceneHost
from ..models import PositionSpace, ResolvedPlacement

logger = logging.getLogger(__name__)


class SceneInstantiator:
    """场景实例化器"""

    def __init__(self, scene: ISceneHost, depth_step: float = 0.01):
        self.scene = scene
        self.depth_step = depth_step

    def instantiate(self, placement: ResolvedPlacement) -> Any:
        """创建单个实体并应用变换"""
        scene = self.scene

        if placement.template is not None:
            entity = scene.instantiate_template(placement.template)
            scene.set_name(entity, placement.name)
        else:
            entity = scene.create_entity(placement.name)

        if placement.space == PositionSpace.LOCAL:
            scene.set_parent(entity, placement.parent)
            scene.set_local_position(entity, placement.position)
        elif placement.space == PositionSpace.PARENT_RELATIVE:
            scene.set_parent(entity, placement.parent)
            scene.set_world_position(entity, scene.transform_point(placement.parent, placement.position))
        else:
            scene.set_world_position(entity, placement.position)

        scene.set_world_rotation_z(entity, placement.rotation_z)
        self.apply_stacking(entity, placement)
        return entity

    def apply_stacking(self, entity: Any, placement: ResolvedPlacement) -> None:
        if self.scene.has_sorting_order(entity):
            self.scene.set_sorting_order(entity, placement.sorting_order)
            return

        position = self.scene.get_world_position(entity)
        self.scene.set_world_position(entity, position.with_z(placement.depth))

    def instantiate_all(self, placements: list[ResolvedPlacement], undo_label: str) -> list[Any]:
        """批量创建（单一撤销分组）"""
        undo_group = self.scene.begin_undo_group(undo_label)
        entities = []
        try:
            for placement in placements:
                entities.append(self.instantiate(placement))
        finally:
            self.scene.collapse_undo_group(undo_group)
            if entities:
                self.scene.mark_dirty()

        logger.debug(f"已创建 {len(entities)} 个实体")
        return entities
