"""
配置模块单元测试

测试元数据和构建设置的加载与验证。
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from modbuild.config import (
    BuildSettings,
    ConfigError,
    ConfigValidationError,
    ModuleMetadata,
    load_metadata,
    load_settings,
)


class TestModuleMetadata:
    """ModuleMetadata 测试"""

    def test_release_name(self):
        """测试发布名"""
        metadata = ModuleMetadata(name="acme-ntp", version="1.2.3")
        assert metadata.release_name == "acme-ntp-1.2.3"

    def test_extra_fields_preserved(self):
        """测试额外字段原样保留"""
        metadata = ModuleMetadata.from_dict({
            "name": "acme-ntp",
            "version": "1.2.3",
            "pdk-version": "3.0.0",
            "dependencies": [],
        })

        assert metadata.has_key("pdk-version")
        assert not metadata.has_key("template-url")
        assert metadata.to_dict()["dependencies"] == []

    @pytest.mark.parametrize("data", [
        {"version": "1.0.0"},
        {"name": "acme-ntp"},
        {"name": "", "version": "1.0.0"},
        {"name": "acme-ntp", "version": "  "},
        {"name": "acme/ntp", "version": "1.0.0"},
        {"name": "acme-ntp", "version": "..\\1.0"},
    ])
    def test_invalid_metadata(self, data):
        """测试缺失或无效的 name/version"""
        with pytest.raises(ValidationError):
            ModuleMetadata.from_dict(data)


class TestLoadMetadata:
    """load_metadata 测试"""

    def test_load(self, module_dir):
        """测试读取 metadata.json"""
        metadata = load_metadata(module_dir)
        assert metadata.name == "acme-ntp"
        assert metadata.version == "1.2.3"

    def test_missing_file(self, tmp_path):
        """测试文件不存在"""
        with pytest.raises(ConfigError, match="metadata.json"):
            load_metadata(tmp_path)

    def test_invalid_json(self, tmp_path):
        """测试 JSON 语法错误"""
        (tmp_path / "metadata.json").write_text("{ not json")
        with pytest.raises(ConfigError, match="无法解析"):
            load_metadata(tmp_path)

    def test_root_must_be_object(self, tmp_path):
        """测试根级别不是对象"""
        (tmp_path / "metadata.json").write_text(json.dumps(["acme-ntp", "1.2.3"]))
        with pytest.raises(ConfigError, match="对象"):
            load_metadata(tmp_path)

    def test_missing_version(self, tmp_path):
        """测试缺少 version 字段"""
        (tmp_path / "metadata.json").write_text(json.dumps({"name": "acme-ntp"}))

        with pytest.raises(ConfigValidationError) as exc_info:
            load_metadata(tmp_path)

        assert "version" in exc_info.value.format_errors()


class TestBuildSettings:
    """BuildSettings 测试"""

    def test_defaults(self):
        """测试默认设置"""
        settings = BuildSettings()
        assert settings.build.target_dir is None
        assert settings.log.level == "INFO"
        assert settings.log.file is None

    def test_level_is_normalized(self):
        """测试日志级别大小写"""
        settings = BuildSettings.from_dict({"log": {"level": "debug"}})
        assert settings.log.level == "DEBUG"

    def test_invalid_level(self):
        """测试无效日志级别"""
        with pytest.raises(ValidationError):
            BuildSettings.from_dict({"log": {"level": "LOUD"}})

    def test_unknown_section(self):
        """测试未知配置节"""
        with pytest.raises(ValidationError):
            BuildSettings.from_dict({"publish": {"token": "x"}})


class TestLoadSettings:
    """load_settings 测试"""

    def test_no_settings_file(self, tmp_path):
        """测试没有设置文件时使用默认值"""
        settings = load_settings(module_dir=tmp_path)
        assert settings == BuildSettings()

    def test_found_in_module_dir(self, tmp_path):
        """测试在模块目录中查找 modbuild.yml"""
        (tmp_path / "modbuild.yml").write_text(
            "build:\n"
            "  target_dir: dist\n"
            "log:\n"
            "  level: WARNING\n"
            "  file: logs/build.log\n",
            encoding="utf-8",
        )

        settings = load_settings(module_dir=tmp_path)

        assert settings.build.target_dir == tmp_path / "dist"
        assert settings.log.level == "WARNING"
        assert settings.log.file == tmp_path / "logs" / "build.log"

    def test_explicit_file_wins(self, tmp_path):
        """测试显式指定的设置文件"""
        (tmp_path / "modbuild.yml").write_text("build:\n  target_dir: dist\n")
        other = tmp_path / "conf" / "release.yaml"
        other.parent.mkdir()
        other.write_text("build:\n  target_dir: /srv/packages\n")

        settings = load_settings(other, module_dir=tmp_path)

        assert settings.build.target_dir == Path("/srv/packages")

    def test_empty_file(self, tmp_path):
        """测试空文件等价于默认值"""
        (tmp_path / "modbuild.yml").write_text("")
        assert load_settings(module_dir=tmp_path) == BuildSettings()

    def test_missing_explicit_file(self, tmp_path):
        """测试指定的文件不存在"""
        with pytest.raises(ConfigError, match="不存在"):
            load_settings(tmp_path / "nope.yml")

    def test_wrong_extension(self, tmp_path):
        """测试非 YAML 扩展名"""
        path = tmp_path / "settings.json"
        path.write_text("{}")
        with pytest.raises(ConfigError, match="yaml"):
            load_settings(path)

    def test_invalid_yaml(self, tmp_path):
        """测试 YAML 语法错误"""
        path = tmp_path / "modbuild.yml"
        path.write_text("build: [unclosed\n")
        with pytest.raises(ConfigError, match="YAML"):
            load_settings(path)

    def test_root_must_be_mapping(self, tmp_path):
        """测试根级别不是字典"""
        path = tmp_path / "modbuild.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="字典"):
            load_settings(path)

    def test_validation_error(self, tmp_path):
        """测试验证错误包含字段位置"""
        path = tmp_path / "modbuild.yml"
        path.write_text("log:\n  level: LOUD\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(path)

        assert "log -> level" in exc_info.value.format_errors()
