"""
ustar 路径校验

POSIX.1-1988 (ustar) 头部中 name 字段最多 100 字节，prefix 字段最多 155 字节。
超过 100 字节的路径必须能在某个目录分隔符处拆分为两段，否则无法写入包中。
"""

from dataclasses import dataclass

from .errors import PathNotSplittableError, PathTooLongError

NAME_MAX_BYTES = 100
PREFIX_MAX_BYTES = 155
PATH_MAX_BYTES = 256

SEPARATOR = "/"


@dataclass(frozen=True)
class TarHeaderPath:
    """拆分后的 ustar 头部路径"""
    original: str
    prefix: str
    name: str

    @property
    def is_split(self) -> bool:
        return bool(self.prefix)


def _bytesize(value: str) -> int:
    return len(value.encode("utf-8"))


def split_ustar_path(path: str) -> TarHeaderPath:
    """计算路径在 ustar 头部中的 prefix/name 拆分

    Args:
        path: 相对于包根目录的路径，使用 '/' 分隔

    Returns:
        TarHeaderPath: 拆分结果，路径不超过 100 字节时 prefix 为空

    Raises:
        PathTooLongError: 路径超过 256 字节
        PathNotSplittableError: 不存在满足长度限制的拆分位置
    """
    if _bytesize(path) > PATH_MAX_BYTES:
        raise PathTooLongError(
            f"路径 '{path}' 超过 {PATH_MAX_BYTES} 字节。", path
        )

    if _bytesize(path) <= NAME_MAX_BYTES:
        return TarHeaderPath(original=path, prefix="", name=path)

    parts = path.split(SEPARATOR)
    name = parts.pop()

    # 从末尾向前逐段并入 name，直到再并入一段就会达到 100 字节
    while True:
        nxt = parts.pop() if parts else ""
        if _bytesize(name) + 1 + _bytesize(nxt) >= NAME_MAX_BYTES:
            break
        name = f"{nxt}{SEPARATOR}{name}"

    prefix = SEPARATOR.join(parts + [nxt])

    if _bytesize(name) > NAME_MAX_BYTES or _bytesize(prefix) > PREFIX_MAX_BYTES:
        raise PathNotSplittableError(
            f"'{path}' 无法在目录分隔符处拆分为两部分（前一部分最多 "
            f"{PREFIX_MAX_BYTES} 字节，后一部分最多 {NAME_MAX_BYTES} 字节）。",
            path,
        )

    return TarHeaderPath(original=path, prefix=prefix, name=name)


def validate_ustar_path(path: str) -> None:
    """校验路径能否写入 ustar 头部，失败时抛出 PathConstraintError"""
    split_ustar_path(path)
