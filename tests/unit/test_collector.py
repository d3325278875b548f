"""
文件收集器单元测试

测试遍历顺序、忽略目录的整棵剪枝、条目类型识别。
"""

import os
import stat

import pytest

from modbuild.build.collector import EntryKind, FileCollector
from modbuild.build.ignore import IgnoreRuleSet


def _paths(entries):
    return [e.relative_path.as_posix() for e in entries]


class TestFileCollector:
    """FileCollector 测试"""

    def test_walk_order(self, module_dir, reporter):
        """测试目录先于内容，同级按名称排序，不包含根目录"""
        entries = list(FileCollector(module_dir, IgnoreRuleSet([]), reporter).walk())

        assert _paths(entries) == ["README.md", "manifests", "manifests/init.pp", "metadata.json"]
        assert entries[1].kind is EntryKind.DIRECTORY
        assert entries[2].source_path == module_dir / "manifests" / "init.pp"

    def test_ignored_directory_is_pruned(self, module_dir, reporter):
        """测试被忽略的目录不再向下遍历"""
        (module_dir / "spec" / "fixtures").mkdir(parents=True)
        (module_dir / "spec" / "fixtures" / "site.pp").write_text("")
        (module_dir / "notes.bak").write_text("")

        collector = FileCollector(module_dir, IgnoreRuleSet(["/spec/", "*.bak"]), reporter)
        paths = _paths(collector.walk())

        assert "spec" not in paths
        assert "spec/fixtures/site.pp" not in paths
        assert "notes.bak" not in paths
        assert reporter.of_level("debug") == ["忽略: notes.bak", "忽略: spec"]

    def test_directory_pattern_does_not_match_file(self, module_dir, reporter):
        """测试目录模式不匹配同名文件"""
        (module_dir / "build").write_text("")

        paths = _paths(FileCollector(module_dir, IgnoreRuleSet(["build/"]), reporter).walk())

        assert "build" in paths

    def test_records_mode_and_mtime(self, module_dir, reporter):
        """测试记录权限位和修改时间"""
        os.chmod(module_dir / "README.md", 0o600)
        os.utime(module_dir / "manifests", (1500000000, 1500000000))

        entries = {e.relative_path.as_posix(): e for e in
                   FileCollector(module_dir, IgnoreRuleSet([]), reporter).walk()}

        assert entries["README.md"].mode == 0o600
        assert entries["manifests"].mtime_ns == 1500000000 * 10**9

    @pytest.mark.skipif(os.name != "posix", reason="需要符号链接支持")
    def test_symlinks_are_not_followed(self, module_dir, reporter):
        """测试符号链接作为单独条目产出且不跟随"""
        (module_dir / "linked").symlink_to(module_dir / "manifests")

        entries = list(FileCollector(module_dir, IgnoreRuleSet([]), reporter).walk())
        by_path = {e.relative_path.as_posix(): e for e in entries}

        assert by_path["linked"].kind is EntryKind.SYMLINK
        assert "linked/init.pp" not in by_path

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="需要命名管道支持")
    def test_special_files_skipped(self, module_dir, reporter):
        """测试命名管道被跳过并给出警告"""
        os.mkfifo(module_dir / "events")

        entries = list(FileCollector(module_dir, IgnoreRuleSet([]), reporter).walk())

        assert "events" not in _paths(entries)
        assert any("events" in m for m in reporter.of_level("warning"))
        assert stat.S_ISFIFO((module_dir / "events").lstat().st_mode)
