"""
归档器

将暂存目录打包为 gzip 压缩的 ustar 格式 tar 包。
"""

import gzip
import os
import stat
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple

from ..utils.logging import Reporter, archive_logger
from ..utils.paths import format_size
from .errors import BuildError, PathConstraintError
from .ustar import split_ustar_path

# 打包时补齐的最低权限，只增加不减少
MIN_DIRECTORY_MODE = 0o755
MIN_FILE_MODE = 0o644

PARTIAL_SUFFIX = ".partial"


@dataclass
class ArchiveResult:
    """归档结果"""
    package_file: Path
    directories: int = 0
    files: int = 0
    size: int = 0


def normalize_mode(mode: int, is_directory: bool) -> int:
    """按位或上最低权限"""
    min_mode = MIN_DIRECTORY_MODE if is_directory else MIN_FILE_MODE
    return stat.S_IMODE(mode) | min_mode


def walk_tree(root: Path) -> Iterator[Tuple[Path, os.stat_result]]:
    """深度优先遍历目录树，目录先于其内容返回，同级条目按名称排序

    符号链接不会被跟随，也不会被返回。
    """
    stack = [root]
    while stack:
        path = stack.pop()
        st = path.lstat()
        if stat.S_ISLNK(st.st_mode):
            continue

        yield path, st

        if stat.S_ISDIR(st.st_mode):
            # 逆序压栈，保证按名称顺序出栈
            stack.extend(sorted(path.iterdir(), reverse=True))


class Archiver:
    """tar.gz 归档器

    条目依次写入同一个压缩流；输出先写到临时文件，tar 和 gzip 都关闭后才移动到目标位置。
    """

    def __init__(self, reporter: Optional[Reporter] = None):
        self.reporter = reporter or archive_logger

    def create(self, source_dir: Path, package_file: Path) -> ArchiveResult:
        """打包目录

        包内只有一个顶层目录，即 source_dir 本身。

        Args:
            source_dir: 暂存目录
            package_file: 输出包路径，已存在时先删除

        Returns:
            ArchiveResult: 归档统计

        Raises:
            OSError: 读取或写入失败
        """
        source_dir = Path(source_dir)
        package_file = Path(package_file)
        partial_file = package_file.with_name(package_file.name + PARTIAL_SUFFIX)
        base_dir = source_dir.parent

        package_file.unlink(missing_ok=True)

        result = ArchiveResult(package_file=package_file)

        try:
            with open(partial_file, "wb") as raw:
                # 固定 gzip 头部的文件名和时间，内容不变时输出字节一致
                with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
                    with tarfile.open(fileobj=gz, mode="w", format=tarfile.USTAR_FORMAT) as tar:
                        for path, st in walk_tree(source_dir):
                            self._add_entry(tar, path, st, path.relative_to(base_dir).as_posix(), result)
        except BaseException:
            partial_file.unlink(missing_ok=True)
            raise

        os.replace(partial_file, package_file)
        self.reporter.debug(
            f"已写入 {package_file}（{result.directories} 个目录，{result.files} 个文件，"
            f"原始大小 {format_size(result.size)}）"
        )
        return result

    def _add_entry(self, tar: tarfile.TarFile, path: Path, st: os.stat_result,
                   arcname: str, result: ArchiveResult) -> None:
        is_directory = stat.S_ISDIR(st.st_mode)
        orig_mode = stat.S_IMODE(st.st_mode)
        new_mode = normalize_mode(orig_mode, is_directory)

        # tarfile 写入目录条目时会在名称末尾补 '/'
        header_path = f"{arcname}/" if is_directory else arcname
        try:
            header = split_ustar_path(header_path)
        except PathConstraintError as e:
            raise e.with_remediation() from e
        if header.is_split:
            self.reporter.debug(f"打包条目 '{arcname}' 使用 ustar prefix 字段: {header.prefix}")

        if new_mode != orig_mode:
            self.reporter.debug(f"已将打包条目 '{arcname}' 的权限更新为 {new_mode:o}")

        tarinfo = tar.gettarinfo(str(path), arcname=arcname)
        tarinfo.mode = new_mode

        try:
            if is_directory:
                tar.addfile(tarinfo)
                result.directories += 1
            else:
                with open(path, "rb") as f:
                    tar.addfile(tarinfo, f)
                result.files += 1
                result.size += st.st_size
        except ValueError as e:
            # 数值字段溢出等：修改时间超出范围或文件不小于 8 GiB
            raise BuildError(f"无法将 '{arcname}' 写入 ustar 头部: {e}") from e
