"""
配置加载器

负责读取模块元数据（metadata.json）和可选的构建设置文件（YAML）并进行验证。
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import BuildSettings, ModuleMetadata

METADATA_FILENAME = "metadata.json"
SETTINGS_FILENAMES = ("modbuild.yml", "modbuild.yaml")


class ConfigError(Exception):
    """配置错误基类"""
    pass


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def __init__(self, message: str, errors: List[Dict[str, Any]]):
        super().__init__(message)
        self.errors = errors

    def format_errors(self) -> str:
        """格式化错误信息为人类可读的格式"""
        formatted = []
        for error in self.errors:
            loc = " -> ".join(str(item) for item in error.get('loc', []))
            msg = error.get('msg', '未知错误')

            if loc:
                formatted.append(f"字段 '{loc}': {msg}")
            else:
                formatted.append(f"根级别: {msg}")

        return "\n".join(formatted)

    def __str__(self) -> str:
        details = self.format_errors()
        message = super().__str__()
        return f"{message}\n{details}" if details else message


class ConfigLoader:
    """配置加载器"""

    def __init__(self):
        self.yaml = YAML(typ="safe")

    def load_metadata(self, module_dir: Union[str, Path]) -> ModuleMetadata:
        """读取模块目录下的 metadata.json

        Args:
            module_dir: 模块根目录

        Returns:
            ModuleMetadata: 验证后的元数据

        Raises:
            ConfigError: 文件缺失、不可读或内容无效
        """
        metadata_path = Path(module_dir) / METADATA_FILENAME

        if not metadata_path.is_file():
            raise ConfigError(f"'{metadata_path}' 不存在或不是文件")

        try:
            with open(metadata_path, 'r', encoding='utf-8') as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"无法解析 '{metadata_path}': {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"无法读取 '{metadata_path}': {e}") from e

        return self.metadata_from_dict(raw_data, source=metadata_path)

    def metadata_from_dict(self, data: Any, source: Optional[Path] = None) -> ModuleMetadata:
        """从字典构建元数据

        Raises:
            ConfigError: 数据不是对象或缺少必需字段
        """
        where = f" '{source}'" if source else ""

        if not isinstance(data, dict):
            raise ConfigError(f"模块元数据{where}根级别必须是对象")

        try:
            return ModuleMetadata.from_dict(data)
        except ValidationError as e:
            raise ConfigValidationError(f"模块元数据{where}验证失败", e.errors()) from e

    def find_settings_file(self, module_dir: Union[str, Path]) -> Optional[Path]:
        """在模块目录中查找构建设置文件"""
        for filename in SETTINGS_FILENAMES:
            candidate = Path(module_dir) / filename
            if candidate.is_file():
                return candidate
        return None

    def load_settings(self, settings_path: Union[str, Path]) -> BuildSettings:
        """从 YAML 文件加载构建设置

        Args:
            settings_path: 设置文件路径

        Returns:
            BuildSettings: 相对路径已解析的设置

        Raises:
            ConfigError: 文件读取、解析或验证错误
        """
        settings_path = Path(settings_path)

        if not settings_path.is_file():
            raise ConfigError(f"设置文件不存在: {settings_path}")

        if settings_path.suffix.lower() not in ('.yaml', '.yml'):
            raise ConfigError(f"设置文件必须是 .yaml 或 .yml 格式: {settings_path}")

        try:
            with open(settings_path, 'r', encoding='utf-8') as f:
                raw_data = self.yaml.load(f)
        except YAMLError as e:
            raise ConfigError(f"YAML 解析错误: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"文件读取错误: {e}") from e

        # 空文件等价于全部使用默认值
        if raw_data is None:
            raw_data = {}

        if not isinstance(raw_data, dict):
            raise ConfigError("设置文件根级别必须是对象/字典格式")

        try:
            settings = BuildSettings.from_dict(raw_data)
        except ValidationError as e:
            raise ConfigValidationError("设置文件验证失败", e.errors()) from e

        return settings.resolve_paths(settings_path.parent)


# 全局加载器实例
config_loader = ConfigLoader()


def load_metadata(module_dir: Union[str, Path]) -> ModuleMetadata:
    """便捷函数：加载模块元数据"""
    return config_loader.load_metadata(module_dir)


def load_settings(settings_path: Optional[Union[str, Path]] = None,
                  module_dir: Optional[Union[str, Path]] = None) -> BuildSettings:
    """便捷函数：加载构建设置

    未显式指定文件时在模块目录中查找，找不到则返回默认设置。
    """
    if settings_path is None and module_dir is not None:
        settings_path = config_loader.find_settings_file(module_dir)

    if settings_path is None:
        return BuildSettings()

    return config_loader.load_settings(settings_path)
