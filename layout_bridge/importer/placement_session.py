"""
放置会话 - 导入端一次编辑会话的状态（无界面部分）

职责：
1. 加载交换文件与缩略图，生成放置视图（失败时清空已加载状态）
2. 持有会话级覆盖（创建开关/自定义名/单对象模板），不写回交换文件
3. 批量解析并实例化，返回汇总

测试要点：
- test_load_views: 视图初始化
- test_load_failure_clears_state: 加载失败清空
- test_create_objects: 批量创建与单步撤销
- test_create_nothing_loaded: 未加载时创建
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import ISceneHost, PlacementError
from ..models import (
    ExportBatch,
    ImportSummary,
    PlacementOverrides,
    PlacementSettings,
    PlacementView,
)
from .interchange_reader import InterchangeReader, load_thumbnail, resolve_thumbnail_path
from .placement_resolver import PlacementResolver, default_name
from .scene_instantiator import SceneInstantiator

logger = logging.getLogger(__name__)


class PlacementSession:
    """放置会话"""

    def __init__(
        self,
        scene: ISceneHost,
        settings: PlacementSettings | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.config = config or get_config()
        self.scene = scene
        self.settings = settings or PlacementSettings(
            position_scale=self.config.placement.position_scale,
            flip_y=self.config.placement.flip_y,
            use_local_position=self.config.placement.use_local_position,
        )
        self.reader = InterchangeReader()

        self.json_path: Path | None = None
        self.batch: ExportBatch | None = None
        self.views: list[PlacementView] = []

    @property
    def loaded(self) -> bool:
        return self.batch is not None

    @property
    def layer(self) -> str | None:
        return self.batch.layer if self.batch else None

    def clear(self) -> None:
        self.json_path = None
        self.batch = None
        self.views = []

    def load(self, json_path: Path | str) -> list[PlacementView]:
        """
        加载交换文件并生成视图

        Raises:
            InterchangeError: 加载失败（已加载状态被清空）
        """
        path = Path(json_path)
        try:
            batch = self.reader.load(path)
        except Exception:
            self.clear()
            raise

        views = []
        for record in batch.objects:
            thumb_path = resolve_thumbnail_path(path, record)
            views.append(
                PlacementView(
                    record=record,
                    overrides=PlacementOverrides(custom_name=record.name),
                    thumbnail_path=thumb_path,
                    thumbnail=load_thumbnail(thumb_path),
                )
            )

        self.json_path = path
        self.batch = batch
        self.views = views
        logger.info(f"已生成 {len(views)} 个放置视图")
        return views

    def view(self, index: int) -> PlacementView:
        return self.views[index]

    def overrides_map(self) -> dict[int, PlacementOverrides]:
        """按记录下标索引的覆盖表"""
        return {i: v.overrides for i, v in enumerate(self.views)}

    def default_name(self, view: PlacementView) -> str:
        return default_name(view.record, view.overrides, self.settings, self.config.placement.fallback_name)

    def create_objects(self) -> ImportSummary:
        """
        批量创建实体（单一撤销步骤）

        Raises:
            PlacementError: 尚未加载
        """
        if self.batch is None:
            raise PlacementError("Nothing loaded.")

        resolver = PlacementResolver(
            self.settings,
            depth_step=self.config.placement.depth_step,
            fallback_name=self.config.placement.fallback_name,
        )
        placements = resolver.resolve_batch(self.batch, self.overrides_map())

        summary = ImportSummary(
            requested=len(self.views),
            skipped=len(self.views) - len(placements),
        )
        if placements:
            instantiator = SceneInstantiator(self.scene, depth_step=self.config.placement.depth_step)
            summary.entities = instantiator.instantiate_all(placements, self.config.placement.undo_label)
        summary.created = len(summary.entities)

        logger.info(f"创建完成: {summary.created} 个实体，跳过 {summary.skipped} 个")
        return summary
