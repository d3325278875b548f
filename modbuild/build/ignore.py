"""
忽略规则

根据模块根目录中的忽略文件决定哪些路径不进入包中。
只读取优先级最高的一个忽略文件，不会合并多个文件。
"""

import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

from pathspec import GitIgnoreSpec

from ..utils.paths import is_subpath

# 按优先级排列
IGNORE_FILENAMES = (".pdkignore", ".pmtignore", ".gitignore")

DEFAULT_IGNORED = (
    "/pkg/",
    "~*",
    "/coverage",
    "/checksums.json",
    "/REVISION",
    "/spec/fixtures/modules/",
    "/vendor/",
)


def find_ignore_file(module_dir: Union[str, Path]) -> Optional[Path]:
    """选择模块目录中最合适的忽略文件

    依次尝试 .pdkignore、.pmtignore、.gitignore，返回第一个可读的普通文件。
    """
    for filename in IGNORE_FILENAMES:
        candidate = Path(module_dir) / filename
        if candidate.is_file() and os.access(candidate, os.R_OK):
            return candidate
    return None


class IgnoreRuleSet:
    """有序的忽略模式集合

    模式按 gitignore 语义匹配，后出现的模式优先（包括 ! 取反）。
    内置默认规则和输出目录规则追加在用户规则之后，因此用户无法用取反把它们重新包含进来。
    """

    def __init__(self, patterns: Sequence[str], ignore_file: Optional[Path] = None):
        self.patterns: List[str] = list(patterns)
        self.ignore_file = ignore_file
        self._spec = GitIgnoreSpec.from_lines(self.patterns)

    @classmethod
    def for_module(
        cls,
        module_dir: Union[str, Path],
        target_dir: Optional[Union[str, Path]] = None,
    ) -> "IgnoreRuleSet":
        """为模块目录构建忽略规则

        Args:
            module_dir: 模块根目录
            target_dir: 包输出目录；位于模块目录内时自动排除

        Raises:
            OSError: 忽略文件读取失败
        """
        ignore_file = find_ignore_file(module_dir)

        patterns: List[str] = []
        if ignore_file is not None:
            patterns.extend(ignore_file.read_text(encoding="utf-8").splitlines())

        if target_dir is not None and is_subpath(target_dir, module_dir):
            relative = Path(os.path.relpath(os.path.realpath(target_dir), os.path.realpath(module_dir)))
            patterns.append(f"/{relative.as_posix()}/")

        patterns.extend(DEFAULT_IGNORED)

        return cls(patterns, ignore_file=ignore_file)

    def is_ignored(self, path: Union[str, Path], is_directory: bool = False) -> bool:
        """判断相对于模块根目录的路径是否被忽略

        目录带上末尾的 '/' 再匹配，使只针对目录的模式（如 build/）生效。
        """
        path = Path(path).as_posix()
        if is_directory and not path.endswith("/"):
            path += "/"
        return self._spec.match_file(path)

    def __len__(self) -> int:
        return len(self.patterns)
