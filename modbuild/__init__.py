"""
modbuild - 模块打包工具

将模块源码目录打包为可发布的 <name>-<version>.tar.gz。
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .build import Builder, BuildError
from .config import ConfigError, ModuleMetadata

__all__ = ["Builder", "BuildError", "ConfigError", "ModuleMetadata", "__version__"]
