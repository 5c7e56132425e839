"""
布局导出单元测试

每个模块完成后必须运行：pytest tests/unit/test_layout_exporter.py -v
"""

import json
from pathlib import Path

import pytest

from layout_bridge.config import RuntimeConfig
from layout_bridge.exporter import LayoutExporter, MemoryDocument, MemoryLayer, list_layer_names
from layout_bridge.interfaces import ExportAbortedError, IRenderHost
from layout_bridge.models import Bounds


class SelectiveFailRenderer(IRenderHost):
    """对指定文件名渲染失败，其余委托给文档"""

    def __init__(self, doc: MemoryDocument, fail_names: set[str]):
        self.doc = doc
        self.fail_names = fail_names

    def render_png(self, path: Path, scale_percent: float, transparent: bool = True) -> Path:
        if path.stem in self.fail_names:
            raise RuntimeError(f"render failed: {path.stem}")
        return self.doc.render_png(path, scale_percent, transparent)


class TestLayoutExporter:
    """导出编排测试"""

    def test_export_full_run(self, sample_document, runtime_config: RuntimeConfig, temp_dir: Path):
        """测试完整导出"""
        before = sample_document.visibility_state()
        summary = LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir, 128)

        assert summary.exported == 3
        assert summary.skipped == 2
        assert summary.layer == "Art"
        assert summary.json_path == temp_dir / "export.json"
        assert "Exported groups: 3" in summary.message()

        data = json.loads((temp_dir / "export.json").read_text(encoding="utf-8"))
        assert data["layer"] == "Art"
        assert [o["name"] for o in data["objects"]] == ["Hero", "Group_1", "A/B C"]
        assert [o["rotation"] for o in data["objects"]] == [15.0, 0.0, 0.0]

        assert sample_document.visibility_state() == before
        assert sample_document.frame_count() == 1

    def test_zorder_keeps_enumeration_index(self, sample_document, runtime_config, temp_dir: Path):
        """测试zorder为原始枚举下标（跳过处留空档）"""
        LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
        data = json.loads((temp_dir / "export.json").read_text(encoding="utf-8"))

        zorders = [o["zorder"] for o in data["objects"]]
        assert zorders == [0, 1, 3]
        assert zorders == sorted(set(zorders))

    def test_skipped_groups_keep_reason(self, sample_document, runtime_config, temp_dir: Path):
        """测试汇总记录跳过原因"""
        summary = LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
        assert summary.skipped_groups == ["2: locked", "4: empty"]

    def test_colliding_names_get_distinct_thumbnails(self, sample_document, runtime_config, temp_dir: Path):
        """测试重名编组的缩略图路径互不相同"""
        items = sample_document.layers[1].items
        items[0].name = "A"
        items[2].name = "A_3"
        items[4].name = "A"

        LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
        data = json.loads((temp_dir / "export.json").read_text(encoding="utf-8"))

        thumbs = [o["thumbnail"] for o in data["objects"]]
        assert thumbs == ["thumbnails/A.png", "thumbnails/A_3.png", "thumbnails/A_3_2.png"]
        assert all((temp_dir / t).exists() for t in thumbs)

    def test_thumbnail_exists_for_every_record(self, sample_document, runtime_config, temp_dir: Path):
        """测试记录存在则缩略图存在"""
        LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
        data = json.loads((temp_dir / "export.json").read_text(encoding="utf-8"))

        for obj in data["objects"]:
            assert obj["thumbnail"]
            assert (temp_dir / obj["thumbnail"]).exists()
        assert sorted(p.name for p in (temp_dir / "thumbnails").iterdir()) == [
            "A_B_C.png", "Group_1.png", "Hero.png",
        ]

    def test_relative_position(self, sample_document, runtime_config, temp_dir: Path):
        """测试相对画板左上角的位置"""
        LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
        hero = json.loads((temp_dir / "export.json").read_text(encoding="utf-8"))["objects"][0]

        assert (hero["x"], hero["y"]) == (200.0, 150.0)
        assert (hero["width"], hero["height"]) == (200.0, 100.0)

    def test_bad_group_isolated(self, sample_document, runtime_config, temp_dir: Path):
        """测试单编组渲染失败不影响批次，且状态还原"""
        before = sample_document.visibility_state()
        renderer = SelectiveFailRenderer(sample_document, {"Group_1"})

        summary = LayoutExporter(sample_document, renderer, config=runtime_config).export(1, temp_dir)

        assert summary.exported == 2
        assert summary.skipped == 3
        data = json.loads((temp_dir / "export.json").read_text(encoding="utf-8"))
        assert [o["zorder"] for o in data["objects"]] == [0, 3]
        assert not (temp_dir / "thumbnails" / "Group_1.png").exists()
        assert sample_document.visibility_state() == before

    def test_default_thumbnail_size(self, sample_document, runtime_config, temp_dir: Path):
        summary = LayoutExporter(sample_document, config=runtime_config).export(1, temp_dir)
        assert summary.thumbnail_size == 128


class TestPreconditions:
    """前置条件测试"""

    def test_no_document(self, runtime_config, temp_dir: Path):
        with pytest.raises(ExportAbortedError):
            LayoutExporter(None, config=runtime_config).export(0, temp_dir)

    def test_no_layers(self, runtime_config, temp_dir: Path):
        with pytest.raises(ExportAbortedError):
            LayoutExporter(MemoryDocument(), config=runtime_config).export(0, temp_dir)

    def test_no_groups(self, sample_document, runtime_config, temp_dir: Path):
        """测试图层无编组（背景图层只有路径）"""
        with pytest.raises(ExportAbortedError):
            LayoutExporter(sample_document, config=runtime_config).export(0, temp_dir)
        assert list(temp_dir.iterdir()) == []

    def test_layer_out_of_range(self, sample_document, runtime_config, temp_dir: Path):
        with pytest.raises(ExportAbortedError):
            LayoutExporter(sample_document, config=runtime_config).export(9, temp_dir)

    def test_no_output_dir(self, sample_document, runtime_config):
        with pytest.raises(ExportAbortedError):
            LayoutExporter(sample_document, config=runtime_config).export(1, None)

    def test_output_dir_blocked(self, sample_document, runtime_config, temp_dir: Path):
        """测试输出目录不可创建"""
        blocker = temp_dir / "blocker"
        blocker.write_text("x")
        with pytest.raises(ExportAbortedError):
            LayoutExporter(sample_document, config=runtime_config).export(1, blocker / "out")


class TestLayerNames:
    def test_fallback_names(self):
        """测试空图层名显示为 Layer <n>"""
        doc = MemoryDocument(
            layers=[MemoryLayer(name="Art"), MemoryLayer(name="")],
            frames=[Bounds(left=0, top=0, right=10, bottom=-10)],
        )
        assert list_layer_names(doc) == ["Art", "Layer 2"]
