"""
modbuild CLI 主入口

提供命令行接口。
"""

from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from .commands import build


# 创建主应用
app = typer.Typer(
    name="modbuild",
    help="modbuild - 模块打包工具",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# 控制台输出
console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"modbuild v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息"
    ),
) -> None:
    """modbuild - 将模块目录打包为 <name>-<version>.tar.gz

    使用 --help 查看可用命令的详细信息。
    """
    pass


# 注册子命令
app.command("build", help="构建模块包")(build.build_command)


if __name__ == "__main__":
    app()
