"""
核心模块
提供配置管理、凭据解析和终端输出功能
"""

from .config import (
    ClientSettings,
    CliConfig,
    ConfigManager,
    default_config_dir,
)
from .output import ConsoleDisplay

__all__ = [
    "ClientSettings",
    "CliConfig",
    "ConfigManager",
    "default_config_dir",
    "ConsoleDisplay",
]
