"""构建错误类型"""

REMEDIATION = "请重命名该文件，或将其加入模块的 .pdkignore 文件以从包中排除。"


class BuildError(Exception):
    """构建错误"""
    pass


class PathConstraintError(BuildError):
    """路径无法写入 ustar 头部"""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path

    def with_remediation(self) -> "PathConstraintError":
        """附加处理建议后返回同类型的新异常"""
        return type(self)(f"{self} {REMEDIATION}", self.path)


class PathTooLongError(PathConstraintError):
    """路径超过 256 字节"""
    pass


class PathNotSplittableError(PathConstraintError):
    """路径无法在目录分隔符处拆分为 prefix/name 两部分"""
    pass
