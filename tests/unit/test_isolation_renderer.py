"""
隔离渲染单元测试

每个模块完成后必须运行：pytest tests/unit/test_isolation_renderer.py -v
"""

from pathlib import Path

import pytest
from PIL import Image

from layout_bridge.exporter import GeometryExtractor, IsolationRenderer, MemoryDocument, compute_scale_percent
from layout_bridge.interfaces import IRenderHost, RenderError
from layout_bridge.models import Bounds, RenderState

S = RenderState


class FailingRenderer(IRenderHost):
    """渲染时抛异常"""

    def __init__(self):
        self.calls = 0

    def render_png(self, path: Path, scale_percent: float, transparent: bool = True) -> Path:
        self.calls += 1
        raise RuntimeError("export failed")


class FrameFailingDocument(MemoryDocument):
    """新建画板时抛异常"""

    def add_frame(self, rect: Bounds) -> int:
        raise RuntimeError("cannot create artboard")


class TestScalePercent:
    """缩放百分比测试"""

    def test_scale_percent(self):
        """测试 128 / 256 → 50%"""
        assert compute_scale_percent(128, 256, 100) == 50.0

    def test_scale_uses_abs(self):
        """测试取绝对值"""
        assert compute_scale_percent(64, -32, 16) == 200.0

    def test_degenerate(self):
        """测试退化尺寸"""
        with pytest.raises(ValueError):
            compute_scale_percent(128, 0, 0)


class TestIsolationCycle:
    """隔离周期测试"""

    def _geometry(self, doc: MemoryDocument, artboard: Bounds, group_index: int = 0):
        return GeometryExtractor(doc).extract(1, group_index, artboard)

    def test_render_success(self, sample_document: MemoryDocument, artboard: Bounds, temp_dir: Path):
        """测试正常周期：只渲染目标编组，状态机轨迹完整"""
        before = sample_document.visibility_state()
        renderer = IsolationRenderer(sample_document, sample_document)

        out = renderer.render(1, 0, self._geometry(sample_document, artboard), temp_dir / "Hero.png", 128)

        assert out.exists()
        assert renderer.trace == [S.NORMAL, S.ISOLATING, S.FRAMED, S.RENDERED, S.RESTORING, S.NORMAL]
        assert renderer.state == S.NORMAL

        call = sample_document.render_calls[-1]
        assert call.visible_items == ["Hero"]
        assert call.scale_percent == pytest.approx(64.0)
        assert call.transparent is True
        assert call.frame == Bounds(left=100, top=-100, right=300, bottom=-200)

        assert sample_document.visibility_state() == before
        assert sample_document.frame_count() == 1
        assert sample_document.active_frame_index() == 0

    def test_thumbnail_size(self, sample_document: MemoryDocument, artboard: Bounds, temp_dir: Path):
        """测试缩略图最长边等于thumb_size"""
        renderer = IsolationRenderer(sample_document, sample_document)
        out = renderer.render(1, 0, self._geometry(sample_document, artboard), temp_dir / "Hero.png", 128)

        with Image.open(out) as image:
            assert image.size == (128, 64)
            assert image.mode == "RGBA"

    def test_restore_after_render_failure(
        self, sample_document: MemoryDocument, artboard: Bounds, temp_dir: Path
    ):
        """测试渲染失败后可见性逐位还原"""
        before = sample_document.visibility_state()
        failing = FailingRenderer()
        renderer = IsolationRenderer(sample_document, failing)

        with pytest.raises(RenderError):
            renderer.render(1, 0, self._geometry(sample_document, artboard), temp_dir / "Hero.png", 128)

        assert failing.calls == 1
        assert renderer.trace == [S.NORMAL, S.ISOLATING, S.FRAMED, S.RENDERED, S.RESTORING, S.NORMAL]
        assert sample_document.visibility_state() == before
        assert sample_document.frame_count() == 1
        assert sample_document.active_frame_index() == 0

    def test_restore_after_framing_failure(self, sample_document: MemoryDocument, artboard: Bounds, temp_dir: Path):
        """测试取景失败：进入SKIPPED，仍然还原"""
        doc = FrameFailingDocument(layers=sample_document.layers, frames=[artboard])
        before = doc.visibility_state()
        renderer = IsolationRenderer(doc, doc)

        with pytest.raises(RenderError):
            renderer.render(1, 0, self._geometry(doc, artboard), temp_dir / "Hero.png", 128)

        assert renderer.trace == [S.NORMAL, S.ISOLATING, S.FRAMED, S.SKIPPED, S.RESTORING, S.NORMAL]
        assert doc.visibility_state() == before
        assert doc.render_calls == []

    def test_invalid_thumb_size_skipped(self, sample_document: MemoryDocument, artboard: Bounds, temp_dir: Path):
        """测试校验失败直接SKIPPED，不改动文档"""
        before = sample_document.visibility_state()
        renderer = IsolationRenderer(sample_document, sample_document)

        with pytest.raises(RenderError):
            renderer.render(1, 0, self._geometry(sample_document, artboard), temp_dir / "Hero.png", 0)

        assert renderer.trace == [S.NORMAL, S.SKIPPED, S.NORMAL]
        assert sample_document.visibility_state() == before

    def test_preexisting_hidden_item_stays_hidden(
        self, sample_document: MemoryDocument, artboard: Bounds, temp_dir: Path
    ):
        """测试原本隐藏的对象周期后仍隐藏、其他图层可见性不变"""
        renderer = IsolationRenderer(sample_document, sample_document)
        renderer.render(1, 0, self._geometry(sample_document, artboard), temp_dir / "Hero.png", 64)

        art = sample_document.layers[1]
        assert art.items[1].hidden is True
        assert art.items[0].hidden is False
        assert sample_document.layers[0].visible is True
        assert sample_document.layers[2].visible is False
