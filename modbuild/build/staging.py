"""
暂存目录

构建期间用于存放待打包文件的临时目录，每次构建前清空重建，构建结束后必定删除。
"""

import shutil
from pathlib import Path
from typing import Union


def _remove_tree(path: Path) -> None:
    """删除路径，不跟随符号链接

    路径本身是符号链接或普通文件时只删除该条目；
    shutil.rmtree 在支持的平台上使用基于 fd 的实现，不会穿过子目录中的符号链接。
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


class StagingDirectory:
    """暂存目录的生命周期管理

    用作上下文管理器时，进入时创建，退出时（无论成功或异常）清理。
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def create(self) -> Path:
        """删除已有内容后重新创建目录"""
        self.cleanup()
        self.path.mkdir(parents=True)
        return self.path

    def cleanup(self) -> None:
        """递归删除目录，目录不存在时静默返回"""
        _remove_tree(self.path)

    def __enter__(self) -> Path:
        return self.create()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()
