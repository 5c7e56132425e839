import argparse
from pathlib import Path

from layout_bridge.config import configure_logging, get_config, reload_config
from layout_bridge.exporter import DxfDocumentHost, LayoutExporter, list_layer_names
from layout_bridge.interfaces import LayoutBridgeError


def _pick_layer(names: list[str], layer: str) -> int | None:
    if layer.isdigit():
        index = int(layer)
        return index if 0 <= index < len(names) else None
    return names.index(layer) if layer in names else None


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Export top-level block references of a DXF layer to export.json + thumbnails."
    )
    parser.add_argument("dxf", help="DXF文件路径")
    parser.add_argument("--layer", default="0", help="图层名或下标（默认：0）")
    parser.add_argument("--out-dir", required=True, help="输出目录（export.json + thumbnails/）")
    parser.add_argument("--size", type=int, default=None, help="缩略图尺寸（64/128/256）")
    parser.add_argument("--config", default="", help="可选：运行期配置YAML")
    parser.add_argument("--list-layers", action="store_true", help="仅列出图层")
    args = parser.parse_args()

    config = reload_config(args.config) if args.config else get_config()
    configure_logging(config)

    if args.size and args.size not in config.export.thumbnail_sizes:
        print(f"缩略图尺寸必须是 {config.export.thumbnail_sizes} 之一")
        return 2

    try:
        host = DxfDocumentHost.open(
            Path(args.dxf),
            render_dpi=config.dxf.render_dpi,
            frame_from_extents=config.dxf.frame_from_extents,
        )
        names = list_layer_names(host)
        if args.list_layers:
            for i, name in enumerate(names):
                print(f"{i}: {name}")
            return 0

        layer_index = _pick_layer(names, args.layer)
        if layer_index is None:
            print(f"图层不存在: {args.layer}")
            return 2

        summary = LayoutExporter(host, config=config).export(layer_index, Path(args.out_dir), args.size)
    except LayoutBridgeError as exc:
        print(f"ERROR {exc}")
        return 1

    print(summary.message())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
