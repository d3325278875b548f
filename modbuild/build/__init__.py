"""构建服务模块

提供模块打包的核心功能。
"""

from .builder import Builder
from .errors import (
    BuildError,
    PathConstraintError,
    PathTooLongError,
    PathNotSplittableError,
)
from .collector import EntryKind, FileCollector, StagingEntry
from .ignore import IgnoreRuleSet, DEFAULT_IGNORED, IGNORE_FILENAMES, find_ignore_file
from .staging import StagingDirectory
from .ustar import TarHeaderPath, split_ustar_path, validate_ustar_path
from .archiver import Archiver, ArchiveResult, normalize_mode

__all__ = [
    # 主构建器
    "Builder",

    # 异常
    "BuildError",
    "PathConstraintError",
    "PathTooLongError",
    "PathNotSplittableError",

    # 文件收集
    "EntryKind",
    "FileCollector",
    "StagingEntry",

    # 忽略规则
    "IgnoreRuleSet",
    "DEFAULT_IGNORED",
    "IGNORE_FILENAMES",
    "find_ignore_file",

    # 暂存与打包
    "StagingDirectory",
    "TarHeaderPath",
    "split_ustar_path",
    "validate_ustar_path",
    "Archiver",
    "ArchiveResult",
    "normalize_mode",
]
