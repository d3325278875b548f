"""配置和 Schema 模块

提供模块元数据和构建设置的加载与验证功能。
"""

from .schema import BuildSettings, ModuleMetadata, COMPATIBILITY_KEYS
from .loader import (
    ConfigLoader,
    ConfigValidationError,
    ConfigError,
    METADATA_FILENAME,
    load_metadata,
    load_settings,
    config_loader,
)

__all__ = [
    # 主要类
    "ModuleMetadata",
    "BuildSettings",
    "ConfigLoader",

    # 异常类
    "ConfigError",
    "ConfigValidationError",

    # 常量
    "COMPATIBILITY_KEYS",
    "METADATA_FILENAME",

    # 便捷函数
    "load_metadata",
    "load_settings",

    # 单例
    "config_loader",
]
