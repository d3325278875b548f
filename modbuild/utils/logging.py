"""
日志工具 - 统一输出门面

提供带时间戳的统一输出接口，封装底层的 Rich Console。
构建核心不直接依赖全局输出，而是接收一个 Reporter 对象，默认使用阶段日志器。
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol, Union

from rich.console import Console
from rich.markup import escape


class OutputLevel:
    """输出级别常量"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogStage:
    """日志阶段标记"""
    INIT = "INIT"
    COLLECT = "COLLECT"
    STAGE = "STAGE"
    ARCHIVE = "ARCHIVE"
    DONE = "DONE"

    # 错误阶段
    ERROR = "ERROR"
    WARNING = "WARNING"


_LEVEL_ORDER = {
    OutputLevel.DEBUG: 0,
    OutputLevel.INFO: 1,
    OutputLevel.SUCCESS: 1,
    OutputLevel.WARNING: 2,
    OutputLevel.ERROR: 3,
}

_LEVEL_STYLES = {
    OutputLevel.DEBUG: "dim",
    OutputLevel.INFO: "default",
    OutputLevel.SUCCESS: "green",
    OutputLevel.WARNING: "yellow",
    OutputLevel.ERROR: "red bold",
}


class Reporter(Protocol):
    """构建过程的事件上报接口"""

    def debug(self, message: str, **kwargs: Any) -> None: ...

    def info(self, message: str, **kwargs: Any) -> None: ...

    def success(self, message: str, **kwargs: Any) -> None: ...

    def warning(self, message: str, **kwargs: Any) -> None: ...


class OutputFacade:
    """输出门面

    统一封装所有输出操作，所有输出都包含时间戳，支持彩色输出和日志文件。
    """

    def __init__(self, stdout: Any = None, stderr: Any = None):
        self._lock = threading.RLock()
        self._file_handle = None  # type: Optional[Any]
        self._log_level = OutputLevel.INFO
        self._date_format = "%Y-%m-%d %H:%M:%S"
        self._time_format = "%H:%M:%S"

        # file 为 None 时 Rich 在每次输出时才取 sys.stdout / sys.stderr
        self._console = Console(
            file=stdout,
            highlight=False,  # 关闭语法高亮，路径不需要着色
            log_time=False,
            log_path=False,
        )
        self._error_console = Console(file=stderr, stderr=stderr is None, highlight=False)

    def _get_timestamp(self, include_date: bool = False) -> str:
        """获取格式化的时间戳"""
        now = datetime.now()
        if include_date:
            return now.strftime(self._date_format)
        return now.strftime(self._time_format)

    def _should_output(self, level: str) -> bool:
        """判断是否应该输出该级别的消息"""
        current_level = _LEVEL_ORDER.get(self._log_level, 1)
        msg_level = _LEVEL_ORDER.get(level, 1)
        return msg_level >= current_level

    def _format_message(self, message: str, level: str = OutputLevel.INFO,
                        stage: Optional[str] = None, include_date: bool = False) -> str:
        """格式化纯文本消息（用于日志文件）"""
        timestamp = self._get_timestamp(include_date)

        if stage:
            return f"[{timestamp}] [{level}] [{stage}] {message}"
        return f"[{timestamp}] [{level}] {message}"

    def _emit(self, message: str, level: str, stage: Optional[str] = None, **kwargs):
        if not self._should_output(level):
            return

        console = self._error_console if level == OutputLevel.ERROR else self._console
        timestamp = self._get_timestamp()
        # 消息中可能含有方括号（路径、模式），需要转义
        text = escape(message)

        if stage:
            formatted = f"[dim]{timestamp}[/dim] [bold]{level}[/bold] [cyan]{stage}[/cyan] {text}"
        else:
            formatted = f"[dim]{timestamp}[/dim] [bold]{level}[/bold] {text}"

        with self._lock:
            console.print(formatted, style=_LEVEL_STYLES.get(level, "default"), **kwargs)
            self._write_to_file(message, level, stage)

    def set_level(self, level: str):
        """设置输出级别"""
        with self._lock:
            if level in _LEVEL_ORDER:
                self._log_level = level

    def get_level(self) -> str:
        return self._log_level

    def set_log_file(self, file_path: Union[str, Path]):
        """设置日志文件

        Raises:
            OSError: 日志文件无法打开
        """
        with self._lock:
            self._close_file()
            log_path = Path(file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_path, 'a', encoding='utf-8')

    def _write_to_file(self, message: str, level: str, stage: Optional[str] = None):
        """写入日志文件"""
        if not self._file_handle:
            return

        formatted = self._format_message(message, level, stage, include_date=True)
        self._file_handle.write(formatted + "\n")
        self._file_handle.flush()

    def _close_file(self):
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None

    def debug(self, message: str, stage: Optional[str] = None, **kwargs):
        """调试信息"""
        self._emit(message, OutputLevel.DEBUG, stage, **kwargs)

    def info(self, message: str, stage: Optional[str] = None, **kwargs):
        """普通信息"""
        self._emit(message, OutputLevel.INFO, stage, **kwargs)

    def success(self, message: str, stage: Optional[str] = None, **kwargs):
        """成功信息"""
        self._emit(message, OutputLevel.SUCCESS, stage, **kwargs)

    def warning(self, message: str, stage: Optional[str] = None, **kwargs):
        """警告信息"""
        self._emit(message, OutputLevel.WARNING, stage, **kwargs)

    def error(self, message: str, stage: Optional[str] = None, **kwargs):
        """错误信息，输出到 stderr"""
        self._emit(message, OutputLevel.ERROR, stage, **kwargs)

    def close(self):
        """关闭输出门面"""
        with self._lock:
            self._close_file()


# 全局输出门面实例
_output_facade: Optional[OutputFacade] = None


def get_output_facade() -> OutputFacade:
    """获取全局输出门面实例"""
    global _output_facade
    if _output_facade is None:
        _output_facade = OutputFacade()
    return _output_facade


def debug(message: str, stage: Optional[str] = None, **kwargs):
    """调试信息输出"""
    get_output_facade().debug(message, stage, **kwargs)


def info(message: str, stage: Optional[str] = None, **kwargs):
    """普通信息输出"""
    get_output_facade().info(message, stage, **kwargs)


def success(message: str, stage: Optional[str] = None, **kwargs):
    """成功信息输出"""
    get_output_facade().success(message, stage, **kwargs)


def warning(message: str, stage: Optional[str] = None, **kwargs):
    """警告信息输出"""
    get_output_facade().warning(message, stage, **kwargs)


def error(message: str, stage: Optional[str] = None, **kwargs):
    """错误信息输出"""
    get_output_facade().error(message, stage, **kwargs)


def set_log_level(level: str):
    """设置全局日志级别"""
    get_output_facade().set_level(level)


def set_log_file(file_path: Union[str, Path]):
    """设置全局日志文件"""
    get_output_facade().set_log_file(file_path)


def close_logger():
    """关闭日志系统"""
    global _output_facade
    if _output_facade:
        _output_facade.close()
        _output_facade = None


class StageLogger:
    """阶段日志器

    满足 Reporter 接口，将消息带上阶段标记转发给全局输出门面。
    """

    def __init__(self, stage: str):
        self.stage = stage

    def debug(self, message: str, **kwargs):
        debug(message, self.stage, **kwargs)

    def info(self, message: str, **kwargs):
        info(message, self.stage, **kwargs)

    def success(self, message: str, **kwargs):
        success(message, self.stage, **kwargs)

    def warning(self, message: str, **kwargs):
        warning(message, self.stage, **kwargs)

    def error(self, message: str, **kwargs):
        error(message, self.stage, **kwargs)


def get_stage_logger(stage: str) -> StageLogger:
    """获取阶段日志器"""
    return StageLogger(stage)


stage_logger = get_stage_logger(LogStage.STAGE)
archive_logger = get_stage_logger(LogStage.ARCHIVE)


import atexit
atexit.register(close_logger)
