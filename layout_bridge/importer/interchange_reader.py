"""
交换文件读取器 - 解析 export.json 并加载缩略图

职责：
1. 文件不存在/无法解析/缺少objects → InterchangeError
2. 缺省的几何/旋转字段按0处理
3. 缩略图缺失或损坏只告警，不影响对象

测试要点：
- test_load_batch: 正常解析
- test_missing_fields_default: 缺省字段
- test_invalid_document: 各类错误
- test_thumbnail_missing: 缩略图缺失告警
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from PIL import Image
from pydantic import ValidationError

from ..interfaces import InterchangeError
from ..models import ExportBatch, LayoutObject

logger = logging.getLogger(__name__)


def resolve_thumbnail_path(json_path: Path, record: LayoutObject) -> Path | None:
    """缩略图路径（相对交换文件所在目录）"""
    if not record.thumbnail:
        return None
    return json_path.parent / record.thumbnail.replace("\\", "/")


def load_thumbnail(path: Path | None) -> Image.Image | None:
    """加载缩略图，失败返回None并告警"""
    if path is None:
        return None
    if not path.exists():
        logger.warning(f"缩略图不存在: {path}")
        return None
    try:
        with Image.open(path) as image:
            image.load()
            return image.copy()
    except (OSError, ValueError) as e:
        logger.warning(f"缩略图加载失败: {path}: {e}")
        return None


class InterchangeReader:
    """交换文件读取器"""

    def load(self, json_path: Path | str) -> ExportBatch:
        """
        解析交换文件

        Raises:
            InterchangeError: 文件不存在/JSON无效/结构无效
        """
        path = Path(json_path)
        if not path.exists():
            raise InterchangeError(f"JSON file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise InterchangeError(f"JSON parse error: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("objects"), list):
            raise InterchangeError("Invalid JSON format.")

        try:
            batch = ExportBatch(
                layer=data.get("layer") or "",
                objects=[LayoutObject(**self._clean(obj)) for obj in data["objects"]],
            )
        except (TypeError, ValidationError) as e:
            raise InterchangeError(f"Invalid JSON format: {e}") from e

        logger.info(f"已加载 {len(batch.objects)} 个对象: {path.name}")
        return batch

    @staticmethod
    def _clean(obj: dict) -> dict:
        """去掉null字段，交给模型默认值"""
        if not isinstance(obj, dict):
            raise TypeError(f"对象记录不是字典: {obj!r}")
        return {k: v for k, v in obj.items() if v is not None}
