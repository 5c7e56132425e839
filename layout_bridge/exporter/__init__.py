"""
导出模块 - 编组几何提取/隔离渲染/交换文件写出

子模块：
- geometry_extractor: 边界/中心/相对坐标/旋转/名称清洗
- isolation_renderer: 隔离→取景→渲染→还原 状态机
- interchange_writer: export.json 固定结构写出
- layout_exporter: 整次导出编排与汇总
- memory_document: 内存文档宿主（Pillow渲染）
- dxf_host: ezdxf 图纸宿主（matplotlib渲染）
"""

from .dxf_host import DxfDocumentHost
from .geometry_extractor import GeometryExtractor, compute_geometry, sanitize_name
from .interchange_writer import InterchangeWriter, escape_json_string, format_batch, thumbnail_ref
from .isolation_renderer import IsolationRenderer, compute_scale_percent
from .layout_exporter import LayoutExporter, list_layer_names
from .memory_document import MemoryDocument, MemoryItem, MemoryLayer

__all__ = [
    "GeometryExtractor",
    "compute_geometry",
    "sanitize_name",
    "IsolationRenderer",
    "compute_scale_percent",
    "InterchangeWriter",
    "escape_json_string",
    "format_batch",
    "thumbnail_ref",
    "LayoutExporter",
    "list_layer_names",
    "MemoryDocument",
    "MemoryItem",
    "MemoryLayer",
    "DxfDocumentHost",
]
