"""
文件收集器

遍历模块目录，应用忽略规则，产出需要暂存的条目。
被忽略的目录整棵子树都会被跳过，不再检查其中的条目。
"""

import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from ..utils.logging import Reporter, get_stage_logger, LogStage
from .ignore import IgnoreRuleSet


class EntryKind(str, Enum):
    """条目类型"""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass
class StagingEntry:
    """待暂存的条目"""
    relative_path: Path  # 相对于模块根目录的路径
    source_path: Path  # 绝对路径
    kind: EntryKind
    mode: int  # 权限位
    mtime_ns: int  # 修改时间（纳秒）

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class FileCollector:
    """模块文件收集器"""

    def __init__(self, module_dir: Path, ignore_rules: IgnoreRuleSet,
                 reporter: Optional[Reporter] = None):
        self.module_dir = Path(module_dir)
        self.ignore_rules = ignore_rules
        self.reporter = reporter or get_stage_logger(LogStage.COLLECT)

    def walk(self) -> Iterator[StagingEntry]:
        """深度优先遍历模块目录

        目录先于其内容产出，同级条目按名称排序；模块根目录本身不产出。
        符号链接不会被跟随。

        Yields:
            StagingEntry: 未被忽略的条目
        """
        stack = sorted(self.module_dir.iterdir(), reverse=True)

        while stack:
            path = stack.pop()
            relative_path = path.relative_to(self.module_dir)

            # is_dir() 跟随符号链接，指向目录的链接也按目录模式匹配
            if self.ignore_rules.is_ignored(relative_path, is_directory=path.is_dir()):
                self.reporter.debug(f"忽略: {relative_path.as_posix()}")
                continue

            entry = self._create_entry(path, relative_path)
            if entry is None:
                continue

            yield entry

            if entry.is_directory:
                stack.extend(sorted(path.iterdir(), reverse=True))

    def _create_entry(self, path: Path, relative_path: Path) -> Optional[StagingEntry]:
        st = path.lstat()

        if stat.S_ISLNK(st.st_mode):
            kind = EntryKind.SYMLINK
        elif stat.S_ISDIR(st.st_mode):
            kind = EntryKind.DIRECTORY
        elif stat.S_ISREG(st.st_mode):
            kind = EntryKind.FILE
        else:
            # FIFO、设备文件等无法打包
            self.reporter.warning(f"不支持的文件类型，已跳过: {relative_path.as_posix()}")
            return None

        return StagingEntry(
            relative_path=relative_path,
            source_path=Path(os.path.abspath(path)),
            kind=kind,
            mode=stat.S_IMODE(st.st_mode),
            mtime_ns=st.st_mtime_ns,
        )
