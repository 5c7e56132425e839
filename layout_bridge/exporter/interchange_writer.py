"""
交换文件写出器 - 生成 export.json

职责：
1. 固定结构：layer + objects（字段顺序固定）
2. 浮点字段保留2位小数，zorder为整数
3. 字符串只转义反斜杠与双引号
4. 全部对象处理完后一次性写出（临时文件 + 原子替换）

测试要点：
- test_escape: 转义规则
- test_format_batch: 文档结构与数值格式
- test_write_atomic: 写出后无残留临时文件
"""

from __future__ import annotations

import os
from pathlib import Path

from ..interfaces import InterchangeError
from ..models import ExportBatch, LayoutObject

THUMBNAIL_DIR = "thumbnails"
JSON_NAME = "export.json"


def escape_json_string(value: str | None) -> str:
    """仅转义反斜杠和双引号"""
    if not value:
        return ""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def thumbnail_ref(safe_name: str, thumbnail_dir: str = THUMBNAIL_DIR) -> str:
    """缩略图相对路径 thumbnails/<safeName>.png"""
    return f"{thumbnail_dir}/{safe_name}.png"


def format_object(obj: LayoutObject) -> str:
    """单条对象记录（一行）"""
    return (
        '    { "name": "' + escape_json_string(obj.name) + '", '
        f'"x": {obj.x:.2f}, '
        f'"y": {obj.y:.2f}, '
        f'"width": {obj.width:.2f}, '
        f'"height": {obj.height:.2f}, '
        f'"rotation": {obj.rotation:.2f}, '
        f'"zorder": {int(obj.zorder)}, '
        '"thumbnail": "' + escape_json_string(obj.thumbnail) + '" }'
    )


def format_batch(batch: ExportBatch) -> str:
    """完整文档文本"""
    lines = [
        "{",
        '  "layer": "' + escape_json_string(batch.layer) + '",',
        '  "objects": [',
    ]

    records = [format_object(obj) for obj in batch.objects]
    for i, record in enumerate(records):
        suffix = "," if i < len(records) - 1 else ""
        lines.append(record + suffix)

    lines.append("  ]")
    lines.append("}")
    return "\n".join(lines) + "\n"


class InterchangeWriter:
    """交换文件写出器"""

    def __init__(self, json_name: str = JSON_NAME):
        self.json_name = json_name

    def target_path(self, output_dir: Path) -> Path:
        return output_dir / self.json_name

    def check_writable(self, output_dir: Path) -> Path:
        """
        前置检查：目标文件可创建

        Raises:
            InterchangeError: 无法创建
        """
        json_path = self.target_path(output_dir)
        probe = json_path.with_name(json_path.name + ".probe")
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            with open(probe, "w", encoding="utf-8"):
                pass
            probe.unlink()
        except OSError as e:
            raise InterchangeError(f"无法创建交换文件: {json_path}: {e}") from e
        return json_path

    def write(self, batch: ExportBatch, output_dir: Path) -> Path:
        """一次性写出交换文件"""
        json_path = self.target_path(output_dir)
        tmp_path = json_path.with_name(json_path.name + ".tmp")

        try:
            with open(tmp_path, "w", encoding="utf-8", newline="\n") as f:
                f.write(format_batch(batch))
            os.replace(tmp_path, json_path)
        except OSError as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise InterchangeError(f"写出交换文件失败: {json_path}: {e}") from e

        return json_path
