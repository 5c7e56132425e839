"""
Layout Bridge - 矢量设计稿布局 → 实时场景 的导出/导入核心

模块结构：
- config/     运行期配置加载
- models/     数据模型定义（几何/交换文件/放置）
- exporter/   导出端（几何提取/隔离渲染/交换文件写出）
- importer/   导入端（交换文件读取/放置解析/场景实例化）
"""

__version__ = "0.1.0"
