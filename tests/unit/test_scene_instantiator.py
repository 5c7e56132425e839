"""
场景实例化单元测试

每个模块完成后必须运行：pytest tests/unit/test_scene_instantiator.py -v
"""

import pytest

from layout_bridge.importer import MemoryScene, PlacementResolver, SceneInstantiator
from layout_bridge.models import LayoutObject, PlacementOverrides, PlacementSettings, Vec3


def _place(scene: MemoryScene, record: LayoutObject, settings: PlacementSettings, overrides=None):
    placement = PlacementResolver(settings).resolve(record, overrides)
    return SceneInstantiator(scene).instantiate(placement)


class TestStacking:
    """层级映射测试"""

    def test_depth_offset_without_sorting_order(self, scene: MemoryScene):
        """测试无绘制顺序属性时 zorder 3 → 深度 -0.03"""
        node = _place(scene, LayoutObject(name="a", zorder=3), PlacementSettings())

        assert scene.get_world_position(node).z == pytest.approx(-0.03)
        assert scene.node(node).sorting_order is None

    def test_sorting_order(self, scene: MemoryScene):
        """测试带绘制顺序属性时 zorder 3 → 顺序 -3，深度不变"""
        sprite = scene.register_template("Sprite", sorting_order=0)
        node = _place(scene, LayoutObject(name="a", zorder=3), PlacementSettings(global_template=sprite))

        assert scene.node(node).sorting_order == -3
        assert scene.get_world_position(node).z == 0.0
        assert scene.node(node).name == "Sprite"
        assert scene.node(node).template == "Sprite"


class TestTransform:
    """变换测试"""

    def test_world_position_and_rotation(self, scene: MemoryScene):
        record = LayoutObject(name="a", x=200, y=100, rotation=30)
        node = _place(scene, record, PlacementSettings(position_scale=0.01, flip_y=True))

        position = scene.get_world_position(node)
        assert (position.x, position.y) == (pytest.approx(2.0), pytest.approx(-1.0))
        assert scene.world_rotation_z(node) == pytest.approx(-30)
        assert scene.node(node).parent is None

    def test_local_position_under_parent(self, scene: MemoryScene):
        """测试局部模式：位置作为父节点下的局部偏移"""
        parent = scene.add_node("Root", position=Vec3(x=10, y=5), rotation_z=90)
        settings = PlacementSettings(position_scale=1, flip_y=False, parent=parent, use_local_position=True)
        node = _place(scene, LayoutObject(name="a", x=1, y=0, zorder=0), settings)

        n = scene.node(node)
        assert n.parent == parent
        assert n.local_position.x == pytest.approx(1)
        assert n.local_position.y == pytest.approx(0)

    def test_parent_relative_position(self, scene: MemoryScene):
        """测试非局部模式：父空间位置经父变换转为世界坐标"""
        parent = scene.add_node("Root", position=Vec3(x=10, y=5), rotation_z=90)
        settings = PlacementSettings(position_scale=1, flip_y=False, parent=parent)
        node = _place(scene, LayoutObject(name="a", x=1, y=0, zorder=2, rotation=15), settings)

        world = scene.get_world_position(node)
        assert world.x == pytest.approx(10)
        assert world.y == pytest.approx(6)
        assert world.z == pytest.approx(-0.02)
        assert scene.world_rotation_z(node) == pytest.approx(-15)
        assert scene.node(node).parent == parent


class TestBatch:
    """批量创建测试"""

    def test_single_undo_group(self, scene: MemoryScene):
        records = [LayoutObject(name=f"o{i}", zorder=i) for i in range(3)]
        placements = [PlacementResolver().resolve(r) for r in records]

        entities = SceneInstantiator(scene).instantiate_all(placements, "Create Illustrator Object")

        assert len(entities) == 3
        assert scene.dirty is True
        assert len(scene.undo_groups) == 1
        assert scene.undo_groups[0].created == entities

        assert scene.undo_last_group() == 3
        assert scene.nodes == {}

    def test_custom_name_with_template(self, scene: MemoryScene):
        button = scene.register_template("Button")
        overrides = PlacementOverrides(template=button, use_custom_name=True, custom_name="Play")
        node = _place(scene, LayoutObject(name="a"), PlacementSettings(), overrides)

        assert scene.node(node).name == "Play"
        assert scene.node(node).template == "Button"
