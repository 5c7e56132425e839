"""
导入模块 - 交换文件读取/放置解析/场景实例化

子模块：
- interchange_reader: export.json 解析与缩略图加载
- placement_resolver: 模板/名称/位置/旋转/层级解析（纯函数）
- scene_instantiator: 按解析结果创建实体
- placement_session: 会话状态与批量创建
- memory_scene: 内存场景宿主
"""

from .interchange_reader import InterchangeReader, load_thumbnail, resolve_thumbnail_path
from .memory_scene import MemoryScene, SceneNode
from .placement_resolver import (
    PlacementResolver,
    default_name,
    resolve_name,
    resolve_position,
    resolve_rotation,
    resolve_stacking,
    resolve_template,
)
from .placement_session import PlacementSession
from .scene_instantiator import SceneInstantiator

__all__ = [
    "InterchangeReader",
    "load_thumbnail",
    "resolve_thumbnail_path",
    "PlacementResolver",
    "default_name",
    "resolve_name",
    "resolve_position",
    "resolve_rotation",
    "resolve_stacking",
    "resolve_template",
    "SceneInstantiator",
    "PlacementSession",
    "MemoryScene",
    "SceneNode",
]
