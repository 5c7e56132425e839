"""
放置模型 - 导入端的会话级覆盖、全局设置与解析结果

PlacementOverrides 只存在于当前会话，不写回交换文件；
解析逻辑是 (记录, 覆盖, 全局设置) 的纯函数。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .geometry import Vec3
from .interchange import LayoutObject


class TemplateRef(BaseModel):
    """模板（预制体）引用"""
    name: str
    asset: str | None = Field(None, description="宿主侧资源标识，如预制体路径")

    model_config = {"frozen": True}


class PlacementOverrides(BaseModel):
    """单对象的用户覆盖"""
    create: bool = True
    use_custom_name: bool = False
    custom_name: str | None = None
    template: TemplateRef | None = None


class PlacementSettings(BaseModel):
    """全局放置设置"""
    global_template: TemplateRef | None = None
    position_scale: float = 0.00651041666  # 每单位153.6像素
    flip_y: bool = True
    use_local_position: bool = False
    parent: Any = Field(None, description="父节点句柄（宿主定义）")

    model_config = {"arbitrary_types_allowed": True}


class PositionSpace(str, Enum):
    """解析后位置所在的空间"""
    WORLD = "world"                      # 无父节点，直接作为世界坐标
    LOCAL = "local"                      # 父节点下的局部偏移
    PARENT_RELATIVE = "parent_relative"  # 先按父空间表达，再经父变换转世界坐标


class ResolvedPlacement(BaseModel):
    """单对象的最终放置结果"""
    name: str
    template: TemplateRef | None = None
    position: Vec3
    space: PositionSpace = PositionSpace.WORLD
    parent: Any = None
    rotation_z: float = 0.0
    zorder: int = 0
    sorting_order: int = 0
    depth: float = 0.0

    model_config = {"arbitrary_types_allowed": True}


class PlacementView(BaseModel):
    """导入会话中的一条对象视图：记录 + 覆盖 + 预览图"""
    record: LayoutObject
    overrides: PlacementOverrides = Field(default_factory=PlacementOverrides)
    thumbnail_path: Path | None = None
    thumbnail: Any = Field(None, description="已加载的预览图（PIL.Image）")

    model_config = {"arbitrary_types_allowed": True}


class ImportSummary(BaseModel):
    """导入创建汇总"""
    requested: int = 0
    created: int = 0
    skipped: int = 0
    entities: list[Any] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}
