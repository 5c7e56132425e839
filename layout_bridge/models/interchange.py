"""
交换文件模型 - 导出端与导入端之间的结构化记录

对应 export.json：
    {"layer": ..., "objects": [{"name", "x", "y", "width", "height",
                                "rotation", "zorder", "thumbnail"}, ...]}
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LayoutObject(BaseModel):
    """单个对象记录（写出后不可变）

    缺省字段按0/空串处理，读取时不因缺字段而失败。
    """
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    rotation: float = 0.0
    zorder: int = Field(0, description="原始枚举下标（0 = 最底层），跳过的编组留下空档")
    thumbnail: str = Field("", description="相对交换文件的缩略图路径")

    model_config = {"frozen": True}


class ExportBatch(BaseModel):
    """一次导出的全部记录"""
    layer: str = ""
    objects: list[LayoutObject] = Field(default_factory=list)

    def zorders(self) -> list[int]:
        return [obj.zorder for obj in self.objects]
