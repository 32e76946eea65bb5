"""Installer 单元测试"""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from brewkit.core.exceptions import InstallError
from brewkit.services.install.installer import Installer


def _artifact(tmp_path: Path, content: bytes = b"#!/bin/sh\necho aicommit v1\n") -> Path:
    p = tmp_path / "src" / "bin" / "aicommit"
    p.parent.mkdir(parents=True)
    p.write_bytes(content)
    p.chmod(0o755)
    return p


class TestInstaller:
    def test_install(self, tmp_path: Path) -> None:
        art = _artifact(tmp_path)
        target = Installer().install(art, tmp_path / "prefix" / "bin")
        assert target == tmp_path / "prefix" / "bin" / "aicommit"
        assert target.read_bytes() == art.read_bytes()
        assert os.stat(target).st_mode & stat.S_IXUSR

    def test_reinstall_idempotent(self, tmp_path: Path) -> None:
        art = _artifact(tmp_path)
        dest = tmp_path / "prefix" / "bin"
        first = Installer().install(art, dest).read_bytes()
        second = Installer().install(art, dest).read_bytes()
        assert first == second
        # 没有残留临时文件
        assert sorted(p.name for p in dest.iterdir()) == ["aicommit"]

    def test_overwrites_previous_version(self, tmp_path: Path) -> None:
        dest = tmp_path / "prefix" / "bin"
        dest.mkdir(parents=True)
        (dest / "aicommit").write_bytes(b"old")
        art = _artifact(tmp_path, b"new")
        assert Installer().install(art, dest).read_bytes() == b"new"

    def test_missing_artifact(self, tmp_path: Path) -> None:
        with pytest.raises(InstallError, match="构建产物不存在"):
            Installer().install(tmp_path / "bin" / "aicommit", tmp_path / "prefix")

    def test_destination_is_file(self, tmp_path: Path) -> None:
        art = _artifact(tmp_path)
        blocker = tmp_path / "prefix"
        blocker.write_text("not a dir")
        with pytest.raises(InstallError, match="安装失败"):
            Installer().install(art, blocker / "bin")

    def test_uninstall(self, tmp_path: Path) -> None:
        art = _artifact(tmp_path)
        dest = tmp_path / "prefix" / "bin"
        Installer().install(art, dest)
        assert Installer().uninstall("aicommit", dest) is True
        assert not (dest / "aicommit").exists()
        assert Installer().uninstall("aicommit", dest) is False
