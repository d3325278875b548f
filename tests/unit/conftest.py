"""
单元测试公共夹具
"""

import json
from pathlib import Path

import pytest


class RecordingReporter:
    """记录上报消息的 Reporter"""

    def __init__(self):
        self.messages = []

    def _record(self, level, message):
        self.messages.append((level, message))

    def debug(self, message, **kwargs):
        self._record("debug", message)

    def info(self, message, **kwargs):
        self._record("info", message)

    def success(self, message, **kwargs):
        self._record("success", message)

    def warning(self, message, **kwargs):
        self._record("warning", message)

    def of_level(self, level):
        return [message for lvl, message in self.messages if lvl == level]


@pytest.fixture
def reporter():
    return RecordingReporter()


def write_metadata(module_dir: Path, **extra) -> Path:
    data = {"name": "acme-ntp", "version": "1.2.3"}
    data.update(extra)
    path = module_dir / "metadata.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def module_dir(tmp_path):
    """最小的模块目录"""
    root = tmp_path / "ntp"
    root.mkdir()
    write_metadata(root)
    (root / "manifests").mkdir()
    (root / "manifests" / "init.pp").write_text("class ntp {}\n")
    (root / "README.md").write_text("# ntp\n")
    return root


@pytest.fixture
def metadata_writer():
    """改写模块的 metadata.json"""
    return write_metadata
