"""通用工具模块"""

from .logging import (
    get_stage_logger,
    OutputLevel,
    Reporter,
    StageLogger,
    LogStage,
    stage_logger,
    archive_logger,
)

from .paths import (
    expand_path,
    is_subpath,
    format_size,
)

__all__ = [
    # 日志相关
    "get_stage_logger",
    "OutputLevel",
    "Reporter",
    "StageLogger",
    "LogStage",
    "stage_logger",
    "archive_logger",

    # 路径相关
    "expand_path",
    "is_subpath",
    "format_size",
]
