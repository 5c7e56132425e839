"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(sample_document, temp_dir):
        summary = LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from layout_bridge.config import RuntimeConfig
from layout_bridge.exporter import MemoryDocument, MemoryItem, MemoryLayer
from layout_bridge.importer import MemoryScene
from layout_bridge.models import Bounds, ExportBatch, LayoutObject


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config() -> RuntimeConfig:
    """运行期配置（默认值）"""
    return RuntimeConfig()


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# 导出端 Fixtures
# ============================================================================

@pytest.fixture
def artboard() -> Bounds:
    """默认画板（左上角为原点，y向上为正）"""
    return Bounds(left=0, top=0, right=800, bottom=-600)


@pytest.fixture
def sample_document(artboard: Bounds) -> MemoryDocument:
    """
    示例文档

    图层1 "Art" 的编组（下标 = zorder）：
    - 0 Hero      200x100，旋转15
    - 1 (无名)    64x64
    - 2 Locked    锁定 → 跳过
    - 3 A/B C     256x256，旋转不可读
    - 4 Empty     无子对象 → 跳过
    """
    background = MemoryLayer(
        name="Background",
        items=[
            MemoryItem(
                name="bg",
                kind="path",
                bounds=Bounds(left=0, top=0, right=800, bottom=-600),
                color="#eeeeee",
            ),
        ],
    )
    art = MemoryLayer(
        name="Art",
        items=[
            MemoryItem(
                name="Hero",
                bounds=Bounds(left=100, top=-100, right=300, bottom=-200),
                rotation=15.0,
                item_count=3,
            ),
            MemoryItem(
                name="note",
                kind="path",
                hidden=True,
                bounds=Bounds(left=120, top=-120, right=140, bottom=-140),
            ),
            MemoryItem(
                name="",
                bounds=Bounds(left=400, top=-300, right=464, bottom=-364),
            ),
            MemoryItem(
                name="Locked",
                locked=True,
                bounds=Bounds(left=600, top=-500, right=700, bottom=-580),
            ),
            MemoryItem(
                name="A/B C",
                bounds=Bounds(left=500, top=-50, right=756, bottom=-306),
                rotation=None,
            ),
            MemoryItem(name="Empty", item_count=0),
        ],
    )
    hidden = MemoryLayer(
        name="Hidden",
        visible=False,
        items=[
            MemoryItem(name="ghost", bounds=Bounds(left=0, top=0, right=50, bottom=-50)),
        ],
    )
    return MemoryDocument(layers=[background, art, hidden], frames=[artboard])


# ============================================================================
# 导入端 Fixtures
# ============================================================================

@pytest.fixture
def scene() -> MemoryScene:
    """空内存场景"""
    return MemoryScene()


@pytest.fixture
def sample_record() -> LayoutObject:
    """示例对象记录"""
    return LayoutObject(
        name="Hero",
        x=200.0,
        y=100.0,
        width=200.0,
        height=100.0,
        rotation=15.0,
        zorder=3,
        thumbnail="thumbnails/Hero.png",
    )


@pytest.fixture
def sample_batch() -> ExportBatch:
    """示例批次（zorder 有空档）"""
    return ExportBatch(
        layer="Art",
        objects=[
            LayoutObject(name="Hero", x=200, y=150, width=200, height=100, rotation=15, zorder=0,
                         thumbnail="thumbnails/Hero.png"),
            LayoutObject(name="Group_1", x=432, y=332, width=64, height=64, zorder=1,
                         thumbnail="thumbnails/Group_1.png"),
            LayoutObject(name="A/B C", x=628, y=178, width=256, height=256, zorder=3,
                         thumbnail="thumbnails/A_B_C.png"),
        ],
    )


@pytest.fixture
def export_json(temp_dir: Path, sample_batch: ExportBatch) -> Path:
    """写到临时目录的 export.json（不含缩略图）"""
    path = temp_dir / "export.json"
    path.write_text(json.dumps(sample_batch.model_dump(mode="json")), encoding="utf-8")
    return path
