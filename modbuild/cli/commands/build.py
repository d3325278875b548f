"""
Build 命令实现

构建模块包的核心命令。
"""

import traceback
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...build import Builder, BuildError
from ...config import ConfigError, ConfigValidationError, load_settings
from ...utils.logging import OutputLevel, set_log_file, set_log_level


console = Console()


def build_command(
    module_dir: Optional[str] = typer.Option(None, "--module-dir", "-m", help="模块目录，默认为当前目录"),
    target_dir: Optional[str] = typer.Option(None, "--target-dir", "-t", help="包输出目录，默认为 <模块目录>/pkg"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="构建设置文件 (YAML)"),
    force: bool = typer.Option(False, "--force", "-f", help="不询问，直接覆盖已存在的包"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="日志输出文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出详细调试日志 (DEBUG 级别)"),
) -> None:
    """构建模块包

    暂存模块中未被忽略的文件，并打包为 <name>-<version>.tar.gz。

    示例:
        modbuild build
        modbuild build --target-dir /tmp/pkg --force
    """
    try:
        settings = load_settings(config, module_dir=module_dir or ".")

        # 初始化日志：命令行参数优先于设置文件
        set_log_level(OutputLevel.DEBUG if verbose else settings.log.level)
        log_path = log_file or settings.log.file
        if log_path:
            try:
                set_log_file(log_path)
            except OSError as e:
                console.print(f"[yellow]无法写入日志文件 {escape(str(log_path))}: {escape(str(e))}[/yellow]")

        builder = Builder(
            module_dir=module_dir,
            target_dir=target_dir or settings.build.target_dir,
        )

        if not builder.module_is_compatible():
            console.print(
                "[yellow]该模块的元数据中没有兼容性标记 (pdk-version / template-url)，"
                "建议先转换模块再构建。[/yellow]"
            )

        if builder.package_already_exists() and not force:
            overwrite = typer.confirm(f"包 {builder.package_file} 已存在，是否覆盖？", default=False)
            if not overwrite:
                console.print("已取消构建")
                raise typer.Exit(0)

        package_file = builder.build()
        console.print(f"[green]✓ 模块包构建完成[/green]: {escape(str(package_file))}")

    except ConfigValidationError as e:
        console.print("[red]配置验证失败:[/red]")
        console.print(escape(e.format_errors()))
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]配置错误[/red]: {escape(str(e))}")
        raise typer.Exit(1)
    except BuildError as e:
        console.print(f"[red]✗ 构建失败[/red]: {escape(str(e))}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]✗ 构建过程中发生文件系统错误[/red]: {escape(str(e))}")
        if verbose:
            console.print(f"[yellow]详细错误信息:[/yellow]\n{escape(traceback.format_exc())}")
        raise typer.Exit(1)
