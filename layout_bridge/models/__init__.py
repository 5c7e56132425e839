"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Bounds/GroupGeometry: 编组几何与提取结果
- LayoutObject/ExportBatch: 交换文件记录
- VisibilitySnapshot/ExportSummary: 隔离渲染状态与导出汇总
- PlacementView/ResolvedPlacement: 导入端放置视图与解析结果
"""

from .export_state import ExportSummary, RenderState, VisibilitySnapshot
from .geometry import Bounds, GroupGeometry, GroupInfo, Vec3
from .interchange import ExportBatch, LayoutObject
from .placement import (
    ImportSummary,
    PlacementOverrides,
    PlacementSettings,
    PlacementView,
    PositionSpace,
    ResolvedPlacement,
    TemplateRef,
)

__all__ = [
    "Bounds",
    "GroupInfo",
    "GroupGeometry",
    "Vec3",
    "LayoutObject",
    "ExportBatch",
    "RenderState",
    "VisibilitySnapshot",
    "ExportSummary",
    "TemplateRef",
    "PlacementOverrides",
    "PlacementSettings",
    "PositionSpace",
    "ResolvedPlacement",
    "PlacementView",
    "ImportSummary",
]
