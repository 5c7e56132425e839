"""
运行期配置 - 读取 config/runtime.yaml

职责：
- 加载导出（缩略图尺寸/输出命名）与导入（缩放/翻转/层级步长）默认参数
- 提供环境变量覆盖机制
- 类型安全的配置访问
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ExportConfig(BaseModel):
    """导出配置"""

    thumbnail_size: int = 128
    thumbnail_sizes: list[int] = Field(default_factory=lambda: [64, 128, 256])
    json_name: str = "export.json"
    thumbnail_dir: str = "thumbnails"
    transparent: bool = True


class PlacementConfig(BaseModel):
    """导入放置配置"""

    position_scale: float = 0.00651041666
    flip_y: bool = True
    use_local_position: bool = False
    depth_step: float = 0.01
    fallback_name: str = "Object"
    undo_label: str = "Create Illustrator Object"


class DxfConfig(BaseModel):
    """DXF宿主配置"""

    render_dpi: int = 100
    frame_from_extents: bool = False


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "layout_bridge.log"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    base_dir: Path = Path(".")
    config_path: Path = Path("config/runtime.yaml")

    export: ExportConfig = Field(default_factory=ExportConfig)
    placement: PlacementConfig = Field(default_factory=PlacementConfig)
    dxf: DxfConfig = Field(default_factory=DxfConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "LAYOUT_BRIDGE_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {}) or {}

        config = cls(
            base_dir=path.parent,
            config_path=path,
            export=ExportConfig(**cls._extract(runtime_opts, "export")),
            placement=PlacementConfig(**cls._extract(runtime_opts, "placement")),
            dxf=DxfConfig(**cls._extract(runtime_opts, "dxf")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置（支持 {default: 值} 写法）"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """日志文件相对路径基于配置文件所在目录"""
        log_file = Path(self.logging.log_file)
        if not log_file.is_absolute():
            self.logging.log_file = str((base_dir / log_file).resolve())


def configure_logging(config: RuntimeConfig | None = None) -> None:
    """按配置初始化根日志（命令行工具入口调用）"""
    config = config or get_config()
    level = getattr(logging, config.logging.log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.logging.log_to_file:
        handlers.append(logging.FileHandler(config.logging.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(Path("config/runtime.yaml"))
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or "config/runtime.yaml"
    _config = RuntimeConfig.from_yaml(path)
    return _config
