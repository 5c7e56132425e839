"""
配置层 - 加载运行期配置

职责：
- 加载 config/runtime.yaml（导出/导入默认参数、日志）
- 提供环境变量覆盖机制（LAYOUT_BRIDGE_ 前缀）
- 提供类型安全的配置访问接口
"""

from .runtime_config import (
    DxfConfig,
    ExportConfig,
    LoggingConfig,
    PlacementConfig,
    RuntimeConfig,
    configure_logging,
    get_config,
    reload_config,
)

__all__ = [
    "RuntimeConfig",
    "ExportConfig",
    "PlacementConfig",
    "DxfConfig",
    "LoggingConfig",
    "configure_logging",
    "get_config",
    "reload_config",
]
