"""
放置解析器 - 由 (记录, 覆盖, 全局设置) 计算最终放置

解析顺序：
1. 模板: 单对象覆盖 > 全局模板 > 无（空实体）
2. 名称: 自定义名（开启且非空） > 单对象模板名 > 全局模板名 > 记录名 > "Object"
3. 位置: (x*scale, y*scale)，flipY 时 y 取反；父节点 + 局部模式 → 局部偏移，
   父节点 + 非局部 → 父空间经父变换转世界坐标，无父节点 → 世界坐标
4. 旋转: 绕Z轴取记录旋转的相反数
5. 层级: 绘制顺序 = -zorder；无绘制顺序属性时深度 = -zorder * depth_step

测试要点：
- test_resolve_name: 名称优先级
- test_resolve_position: 缩放/翻转/空间
- test_resolve_stacking: 层级映射
- test_create_false: 不创建
"""

from __future__ import annotations

from ..models import (
    ExportBatch,
    LayoutObject,
    PlacementOverrides,
    PlacementSettings,
    PositionSpace,
    ResolvedPlacement,
    TemplateRef,
    Vec3,
)

DEFAULT_DEPTH_STEP = 0.01
FALLBACK_NAME = "Object"


def resolve_template(overrides: PlacementOverrides, settings: PlacementSettings) -> TemplateRef | None:
    """单对象模板 > 全局模板 > None"""
    if overrides.template is not None:
        return overrides.template
    return settings.global_template


def default_name(
    record: LayoutObject,
    overrides: PlacementOverrides,
    settings: PlacementSettings,
    fallback: str = FALLBACK_NAME,
) -> str:
    """默认名：单对象模板名 > 全局模板名 > 记录名 > 兜底名"""
    if overrides.template is not None:
        return overrides.template.name
    if settings.global_template is not None:
        return settings.global_template.name
    if record.name:
        return record.name
    return fallback


def resolve_name(
    record: LayoutObject,
    overrides: PlacementOverrides,
    settings: PlacementSettings,
    fallback: str = FALLBACK_NAME,
) -> str:
    if overrides.use_custom_name and overrides.custom_name:
        return overrides.custom_name
    return default_name(record, overrides, settings, fallback)


def resolve_position(record: LayoutObject, settings: PlacementSettings) -> tuple[Vec3, PositionSpace]:
    """缩放/翻转后的位置及其所在空间"""
    x = record.x * settings.position_scale
    y = record.y * settings.position_scale
    if settings.flip_y:
        y = -y

    if settings.parent is None:
        space = PositionSpace.WORLD
    elif settings.use_local_position:
        space = PositionSpace.LOCAL
    else:
        space = PositionSpace.PARENT_RELATIVE

    return Vec3(x=x, y=y, z=0.0), space


def resolve_rotation(record: LayoutObject) -> float:
    """源工具旋转方向与场景相反"""
    return -record.rotation


def resolve_stacking(zorder: int, depth_step: float = DEFAULT_DEPTH_STEP) -> tuple[int, float]:
    """
    (绘制顺序, 深度)

    原始 0 = 最底层，越大越靠前：绘制顺序 -zorder，深度 -zorder*step
    """
    return -zorder, -zorder * depth_step


class PlacementResolver:
    """放置解析器"""

    def __init__(
        self,
        settings: PlacementSettings | None = None,
        depth_step: float = DEFAULT_DEPTH_STEP,
        fallback_name: str = FALLBACK_NAME,
    ):
        self.settings = settings or PlacementSettings()
        self.depth_step = depth_step
        self.fallback_name = fallback_name

    def resolve(
        self,
        record: LayoutObject,
        overrides: PlacementOverrides | None = None,
    ) -> ResolvedPlacement | None:
        """解析单个对象，create=False 时返回None"""
        overrides = overrides or PlacementOverrides()
        if not overrides.create:
            return None

        position, space = resolve_position(record, self.settings)
        sorting_order, depth = resolve_stacking(record.zorder, self.depth_step)

        return ResolvedPlacement(
            name=resolve_name(record, overrides, self.settings, self.fallback_name),
            template=resolve_template(overrides, self.settings),
            position=position,
            space=space,
            parent=self.settings.parent,
            rotation_z=resolve_rotation(record),
            zorder=record.zorder,
            sorting_order=sorting_order,
            depth=depth,
        )

    def resolve_batch(
        self,
        batch: ExportBatch,
        overrides_by_index: dict[int, PlacementOverrides] | None = None,
    ) -> list[ResolvedPlacement]:
        """按记录顺序解析，跳过不创建的对象"""
        overrides_by_index = overrides_by_index or {}
        resolved = []
        for i, record in enumerate(batch.objects):
            placement = self.resolve(record, overrides_by_index.get(i))
            if placement is not None:
                resolved.append(placement)
        return resolved
