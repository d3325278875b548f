"""
路径工具

提供路径处理相关的工具函数。
"""

import os
from pathlib import Path
from typing import Optional, Union


def expand_path(path: Union[str, Path], base: Optional[Path] = None) -> Path:
    """扩展路径（处理环境变量和用户目录）并转换为绝对路径

    Args:
        path: 原始路径
        base: 相对路径的基准目录，默认为当前工作目录

    Returns:
        Path: 扩展后的绝对路径
    """
    if isinstance(path, str):
        path = os.path.expandvars(path)
        path = os.path.expanduser(path)

    path = Path(path)
    if not path.is_absolute() and base is not None:
        path = base / path

    # 与 File.expand_path 一致：规范化但不解析符号链接
    return Path(os.path.abspath(path))


def is_subpath(path: Union[str, Path], parent: Union[str, Path]) -> bool:
    """判断 path 的真实路径是否严格位于 parent 的真实路径之内"""
    real_path = Path(os.path.realpath(path))
    real_parent = Path(os.path.realpath(parent))
    return real_parent in real_path.parents


def format_size(size_bytes: int) -> str:
    """格式化文件大小

    Args:
        size_bytes: 字节数

    Returns:
        str: 格式化的大小字符串
    """
    if size_bytes == 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    unit_index = 0
    size = float(size_bytes)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"
