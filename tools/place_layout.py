import argparse
import json

from layout_bridge.config import configure_logging, get_config, reload_config
from layout_bridge.importer import MemoryScene, PlacementSession
from layout_bridge.interfaces import LayoutBridgeError
from layout_bridge.models import PlacementSettings


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Place objects from export.json into an in-memory scene and dump it as JSON."
    )
    parser.add_argument("json", help="export.json 路径")
    parser.add_argument("--out", default="scene.json", help="场景输出文件（默认：scene.json）")
    parser.add_argument("--scale", type=float, default=None, help="位置缩放，缺省取配置")
    parser.add_argument("--no-flip-y", action="store_true", help="不翻转Y轴")
    parser.add_argument("--parent", default="", help="可选：父节点名（创建在原点）")
    parser.add_argument("--local", action="store_true", help="位置作为父节点下的局部偏移")
    parser.add_argument("--template", default="", help="可选：全局模板名（带绘制顺序属性）")
    parser.add_argument("--config", default="", help="可选：运行期配置YAML")
    args = parser.parse_args()

    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config)

    scene = MemoryScene()
    parent = scene.add_node(args.parent) if args.parent else None
    template = scene.register_template(args.template, sorting_order=0) if args.template else None

    settings = PlacementSettings(
        global_template=template,
        position_scale=args.scale if args.scale is not None else config.placement.position_scale,
        flip_y=config.placement.flip_y and not args.no_flip_y,
        use_local_position=args.local or config.placement.use_local_position,
        parent=parent,
    )

    session = PlacementSession(scene, settings=settings, config=config)
    try:
        session.load(args.json)
        summary = session.create_objects()
    except LayoutBridgeError as exc:
        print(f"ERROR {exc}")
        return 1

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(scene.to_dict(), f, ensure_ascii=False, indent=2)

    print(f"layer={session.layer} created={summary.created} skipped={summary.skipped} -> {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
