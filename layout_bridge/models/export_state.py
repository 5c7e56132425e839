"""
导出运行期模型 - 隔离渲染状态机、可见性快照、导出汇总
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class RenderState(str, Enum):
    """隔离渲染状态机"""
    NORMAL = "NORMAL"
    ISOLATING = "ISOLATING"
    FRAMED = "FRAMED"
    RENDERED = "RENDERED"
    RESTORING = "RESTORING"
    SKIPPED = "SKIPPED"


class VisibilitySnapshot(BaseModel):
    """可见性快照（按稳定下标排列的布尔列表）"""
    layer_index: int
    layer_visible: list[bool] = Field(default_factory=list)
    item_hidden: list[bool] = Field(default_factory=list)


class ExportSummary(BaseModel):
    """导出汇总"""
    layer: str
    thumbnail_size: int
    exported: int = 0
    skipped: int = 0
    json_path: Path | None = None
    skipped_groups: list[str] = Field(default_factory=list, description="跳过原因")

    def message(self) -> str:
        """面向用户的汇总文本"""
        return (
            "Export complete.\n"
            f"Layer: {self.layer}\n"
            f"Thumbnail size: {self.thumbnail_size} px\n"
            f"Exported groups: {self.exported}\n"
            f"Skipped (locked/empty/error): {self.skipped}"
        )
