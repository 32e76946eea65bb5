"""测试辅助 — 假命令执行器 + 配方 / 归档构造"""

from __future__ import annotations

import hashlib
import io
import tarfile
from collections.abc import Callable
from pathlib import Path

from brewkit.core.models import (
    ArchiveFetch,
    BuildCommand,
    BuildDependency,
    InstallStep,
    PackageDescriptor,
    RevisionFetch,
    VerifyStep,
)
from brewkit.utils.shell import CommandResult

Handler = Callable[[list[str], str, "dict[str, str] | None"], CommandResult]


class FakeExecutor:
    """按命令前缀返回预设结果的 CommandExecutor，记录所有调用"""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self._rules: list[tuple[tuple[str, ...], Handler | CommandResult]] = []

    def on(self, *prefix: str, result: Handler | CommandResult) -> None:
        self._rules.append((prefix, result))

    def execute(self, cmd, *, cwd=".", env=None, timeout=None) -> CommandResult:
        import shlex
        args = shlex.split(cmd) if isinstance(cmd, str) else list(cmd)
        self.calls.append({"args": args, "cwd": cwd, "env": env, "timeout": timeout})
        for prefix, result in reversed(self._rules):
            if tuple(args[:len(prefix)]) == prefix:
                if isinstance(result, CommandResult):
                    return result
                return result(args, cwd, env)
        return CommandResult(returncode=0, stdout="", stderr="")

    def commands(self) -> list[str]:
        return [" ".join(c["args"]) for c in self.calls]


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(returncode=0, stdout=stdout, stderr="")


def fail(rc: int = 1, stderr: str = "boom") -> CommandResult:
    return CommandResult(returncode=rc, stdout="", stderr=stderr)


def make_descriptor(**overrides) -> PackageDescriptor:
    """aicommit 风格的配方，字段可覆盖"""
    fields: dict = {
        "name": "aicommit",
        "description": "AI-powered commit message generator",
        "homepage": "https://github.com/coder/aicommit",
        "license": "CC0-1.0",
        "version": "0.0.0",
        "source": RevisionFetch(url="https://github.com/coder/aicommit.git"),
        "dependencies": (
            BuildDependency(name="go", min_version="1.21", version_args=("version",)),
            BuildDependency(name="make", build_only=True),
        ),
        "build": BuildCommand(args=("make", "build")),
        "install": InstallStep(source="bin/aicommit"),
        "verify": VerifyStep(
            command="{bin}/aicommit version", expected=r"aicommit \S+", match="regex",
        ),
    }
    fields.update(overrides)
    return PackageDescriptor(**fields)


def make_tarball(files: dict[str, str], top: str = "aicommit-0.6.3") -> bytes:
    """内存中生成 tar.gz，所有文件放在 top/ 目录下"""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for rel, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name=f"{top}/{rel}")
            info.size = len(data)
            info.mode = 0o755
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def archive_descriptor(payload: bytes, **overrides) -> PackageDescriptor:
    fields: dict = {
        "version": "0.6.3",
        "source": ArchiveFetch(
            url="https://github.com/coder/aicommit/archive/refs/tags/v0.6.3.tar.gz",
            sha256=hashlib.sha256(payload).hexdigest(),
        ),
        "build": BuildCommand(args=("make", "build"), env={"VERSION": "v{version}"}),
        "verify": VerifyStep(
            command="{bin}/aicommit version", expected="aicommit v{version}",
        ),
    }
    fields.update(overrides)
    return make_descriptor(**fields)


class FakeDownloader:
    """把预设字节写到目标路径，记录下载次数"""

    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.urls: list[str] = []

    def __call__(self, url: str, dest: Path) -> Path:
        self.urls.append(url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(self.payload)
        return dest
