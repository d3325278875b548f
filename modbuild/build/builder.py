"""
构建器主类

负责整个构建流程的协调：读取元数据、创建暂存目录、按忽略规则暂存模块文件、
打包为 tar.gz，并且无论成功与否都删除暂存目录。
"""

import os
import shutil
import time
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from ..config.loader import config_loader
from ..config.schema import COMPATIBILITY_KEYS, ModuleMetadata
from ..utils.logging import Reporter, stage_logger
from ..utils.paths import expand_path, format_size
from .archiver import Archiver, ArchiveResult
from .collector import EntryKind, FileCollector, StagingEntry
from .errors import BuildError, PathConstraintError
from .ignore import IgnoreRuleSet
from .staging import StagingDirectory
from .ustar import validate_ustar_path

DEFAULT_TARGET_DIRNAME = "pkg"

# 暂存时目录至少保留属主的读写执行权限，否则无法向其中复制文件或在清理时删除
_OWNER_RWX = 0o700


class Builder:
    """模块包构建器

    Args:
        module_dir: 模块根目录，默认为当前工作目录
        target_dir: 包输出目录，默认为 <module_dir>/pkg
        reporter: 事件上报对象，默认输出到全局日志
        metadata: 已解析的元数据；未提供时读取 <module_dir>/metadata.json
    """

    def __init__(
        self,
        module_dir: Optional[Union[str, Path]] = None,
        target_dir: Optional[Union[str, Path]] = None,
        reporter: Optional[Reporter] = None,
        metadata: Optional[Union[ModuleMetadata, Mapping[str, Any]]] = None,
    ):
        self.module_dir = expand_path(module_dir or os.getcwd())
        self.target_dir = expand_path(target_dir or self.module_dir / DEFAULT_TARGET_DIRNAME)
        self.reporter = reporter or stage_logger

        if metadata is not None and not isinstance(metadata, ModuleMetadata):
            metadata = config_loader.metadata_from_dict(dict(metadata))
        self._metadata: Optional[ModuleMetadata] = metadata
        self._ignore_rules: Optional[IgnoreRuleSet] = None

    @classmethod
    def invoke(cls, **options) -> Path:
        """创建构建器并执行构建"""
        return cls(**options).build()

    @property
    def metadata(self) -> ModuleMetadata:
        """模块元数据

        Raises:
            ConfigError: metadata.json 缺失或无效
        """
        if self._metadata is None:
            self._metadata = config_loader.load_metadata(self.module_dir)
        return self._metadata

    @property
    def release_name(self) -> str:
        return self.metadata.release_name

    @property
    def package_file(self) -> Path:
        """输出包路径"""
        return self.target_dir / f"{self.release_name}.tar.gz"

    @property
    def build_dir(self) -> Path:
        """暂存目录，位于输出目录内，名称与发布名一致"""
        return self.target_dir / self.release_name

    @property
    def ignore_rules(self) -> IgnoreRuleSet:
        if self._ignore_rules is None:
            self._ignore_rules = IgnoreRuleSet.for_module(self.module_dir, self.target_dir)
        return self._ignore_rules

    def package_already_exists(self) -> bool:
        """输出目录中是否已存在同名包"""
        return self.package_file.exists()

    def module_is_compatible(self) -> bool:
        """元数据中是否带有模板工具写入的兼容性标记"""
        return any(self.metadata.has_key(key) for key in COMPATIBILITY_KEYS)

    def build(self) -> Path:
        """构建模块包

        Returns:
            Path: 生成的包文件路径

        Raises:
            ConfigError: 元数据缺失或无效（此时不会创建暂存目录）
            PathConstraintError: 有文件路径无法写入 ustar 头部
            OSError: 暂存或打包时的文件系统错误
        """
        release_name = self.release_name
        start_time = time.time()

        self.reporter.info(f"开始构建 {release_name}: {self.module_dir}")
        if self.ignore_rules.ignore_file is not None:
            self.reporter.debug(f"使用忽略文件: {self.ignore_rules.ignore_file}")

        with StagingDirectory(self.build_dir):
            staged = self.stage_module()
            result = self.build_package()

        self.reporter.success(f"构建完成: {result.package_file}")
        self.reporter.info(
            f"  暂存条目: {staged}，包大小: {format_size(result.package_file.stat().st_size)}，"
            f"用时: {time.time() - start_time:.1f}秒"
        )
        return result.package_file

    def stage_module(self) -> int:
        """将模块中未被忽略的条目复制到暂存目录

        复制完成后把源目录的修改时间写回暂存目录，由深到浅，
        使源文件不变时两次构建的包字节一致。

        Returns:
            int: 已暂存的条目数
        """
        collector = FileCollector(self.module_dir, self.ignore_rules, self.reporter)
        staged = 0
        directories: List[StagingEntry] = []
        for entry in collector.walk():
            if self.stage_entry(entry):
                staged += 1
                if entry.is_directory:
                    directories.append(entry)

        # 先序遍历的逆序保证子目录先于父目录
        for entry in reversed(directories):
            self.restore_mtime(self.build_dir / entry.relative_path, entry.mtime_ns)
        self.restore_mtime(self.build_dir, self.module_dir.stat().st_mtime_ns)
        return staged

    @staticmethod
    def restore_mtime(path: Path, mtime_ns: int) -> None:
        os.utime(path, ns=(mtime_ns, mtime_ns))

    def stage_entry(self, entry: StagingEntry) -> bool:
        """暂存单个条目

        普通文件按包内路径 <发布名>/<相对路径> 校验 ustar 长度限制，
        而不是只校验相对于模块根目录的路径。

        Returns:
            bool: 条目是否被暂存（符号链接返回 False）
        """
        dest_path = self.build_dir / entry.relative_path

        if entry.kind is EntryKind.SYMLINK:
            self.warn_symlink(entry)
            return False

        if entry.kind is EntryKind.DIRECTORY:
            dest_path.mkdir(parents=True, exist_ok=True)
            os.chmod(dest_path, entry.mode | _OWNER_RWX)
            return True

        try:
            validate_ustar_path(f"{self.release_name}/{entry.relative_path.as_posix()}")
        except PathConstraintError as e:
            raise e.with_remediation() from e

        shutil.copy2(entry.source_path, dest_path, follow_symlinks=False)
        return True

    def warn_symlink(self, entry: StagingEntry) -> None:
        """提示符号链接不会被打包"""
        target = Path(os.path.relpath(os.path.realpath(entry.source_path),
                                      os.path.realpath(self.module_dir)))
        self.reporter.warning(
            "模块中的符号链接不受支持，不会包含在包中。"
            f"请检查符号链接 {entry.relative_path.as_posix()} -> {target.as_posix()}。"
        )

    def build_package(self) -> ArchiveResult:
        """将暂存目录打包为 tar.gz"""
        return Archiver(self.reporter).create(self.build_dir, self.package_file)


__all__ = ["Builder", "BuildError"]
