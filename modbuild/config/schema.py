"""
配置 Schema 定义

使用 Pydantic 定义模块元数据（metadata.json）和构建设置（modbuild.yml）模型。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 存在任一键即表示模块由模板工具生成，可直接构建
COMPATIBILITY_KEYS = ("pdk-version", "template-url")


class ModuleMetadata(BaseModel):
    """模块元数据模型

    只校验构建所需的 name 和 version，其余字段原样保留。
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="模块名称", min_length=1)
    version: str = Field(..., description="版本号", min_length=1)

    @field_validator('name', 'version')
    @classmethod
    def validate_no_separator(cls, v: str) -> str:
        """名称和版本会成为目录名，不能包含路径分隔符"""
        v = v.strip()
        if not v:
            raise ValueError("不能为空")
        if '/' in v or '\\' in v:
            raise ValueError(f"不能包含路径分隔符: {v}")
        return v

    @property
    def release_name(self) -> str:
        """名称和版本用短横线连接，作为暂存目录名和包文件名"""
        return f"{self.name}-{self.version}"

    def has_key(self, key: str) -> bool:
        return key in self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（包含额外字段）"""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ModuleMetadata':
        """从字典创建元数据"""
        return cls.model_validate(data)


class LogModel(BaseModel):
    """日志设置"""
    level: str = Field("INFO", description="输出级别")
    file: Optional[Path] = Field(None, description="日志文件路径")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError("日志级别必须是 DEBUG、INFO、WARNING 或 ERROR")
        return level


class BuildModel(BaseModel):
    """构建设置"""
    target_dir: Optional[Path] = Field(None, description="输出目录，默认为 <模块目录>/pkg")


class BuildSettings(BaseModel):
    """构建设置文件根模型"""
    model_config = ConfigDict(extra="forbid")

    build: BuildModel = Field(default_factory=BuildModel)
    log: LogModel = Field(default_factory=LogModel)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildSettings':
        """从字典创建设置"""
        return cls.model_validate(data)

    def resolve_paths(self, base_path: Union[str, Path]) -> 'BuildSettings':
        """将相对路径解析为相对于设置文件所在目录的绝对路径"""
        base_path = Path(base_path)
        target_dir = self.build.target_dir
        if target_dir is not None and not target_dir.is_absolute():
            self.build.target_dir = base_path / target_dir
        log_file = self.log.file
        if log_file is not None and not log_file.is_absolute():
            self.log.file = base_path / log_file
        return self
