"""
几何模型 - 文档空间边界框与编组提取结果

文档空间约定：y轴向上，top > bottom（与设计工具的 geometricBounds 一致）
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field


class Bounds(BaseModel):
    """边界框 [left, top, right, bottom]"""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top - self.height / 2

    @property
    def max_dim(self) -> float:
        """最大边长（取绝对值）"""
        return max(abs(self.width), abs(self.height))

    @property
    def is_degenerate(self) -> bool:
        return self.max_dim <= 0

    def as_list(self) -> list[float]:
        return [self.left, self.top, self.right, self.bottom]

    @classmethod
    def from_sequence(cls, values: Sequence[float] | None) -> Bounds | None:
        """从 [left, top, right, bottom] 构建，长度不是4时返回None"""
        if values is None or len(values) != 4:
            return None
        left, top, right, bottom = (float(v) for v in values)
        return cls(left=left, top=top, right=right, bottom=bottom)

    def intersects(self, other: Bounds) -> bool:
        """判断是否相交"""
        return not (
            self.right < other.left or
            self.left > other.right or
            self.top < other.bottom or
            self.bottom > other.top
        )


class GroupInfo(BaseModel):
    """宿主报告的编组状态"""
    name: str = ""
    locked: bool = False
    hidden: bool = False
    item_count: int = 0


class GroupGeometry(BaseModel):
    """单个编组的几何提取结果"""
    index: int = Field(..., description="编组在图层中的枚举下标")
    name: str = Field(..., description="显示名（空名已替换为Group_<index>）")
    safe_name: str = Field(..., description="文件安全名")
    bounds: Bounds

    width: float
    height: float
    center_x: float
    center_y: float

    # 相对参考框左上角
    x: float
    y: float

    rotation: float = 0.0
    zorder: int

    @property
    def max_dim(self) -> float:
        return max(abs(self.width), abs(self.height))


class Vec3(BaseModel):
    """三维向量（场景空间）"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    model_config = {"frozen": True}

    def with_z(self, z: float) -> Vec3:
        return Vec3(x=self.x, y=self.y, z=z)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)
