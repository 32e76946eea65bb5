"""Evaluator 单元测试 — 步骤顺序、失败即中止"""

from __future__ import annotations

from pathlib import Path

import pytest

from brewkit.core.config import Config
from brewkit.core.exceptions import (
    BrewkitError,
    BuildError,
    DependencyError,
    IntegrityError,
    VerificationError,
)
from brewkit.core.models import EvaluationReport
from brewkit.services.container import ServiceContainer
from brewkit.services.deps.checker import DependencyChecker
from brewkit.services.evaluator import Evaluator
from brewkit.services.fetch.fetcher import SourceFetcher
from brewkit.services.fetch.sources import ArchiveSource
from tests.helpers import (
    FakeDownloader,
    FakeExecutor,
    archive_descriptor,
    fail,
    make_tarball,
    ok,
)

PAYLOAD = make_tarball({"Makefile": "build:\n\tgo build -o bin/aicommit ./cmd/aicommit\n"})


def _write_binary(args, cwd, env):
    out = Path(cwd) / "bin" / "aicommit"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(f"#!/bin/sh\necho aicommit {env['VERSION']}\n")
    return ok("go build -o bin/aicommit ./cmd/aicommit\n")


class _Setup:
    def __init__(self, tmp_path: Path, payload: bytes = PAYLOAD) -> None:
        self.config = Config(
            formula_dir=str(tmp_path / "formulae"),
            cache_dir=str(tmp_path / "cache"),
            build_root=str(tmp_path / "build"),
            prefix=str(tmp_path / "prefix"),
        )
        self.executor = FakeExecutor()
        self.executor.on("/usr/bin/go", result=ok("go version go1.22.1 linux/amd64\n"))
        self.executor.on("make", result=_write_binary)
        self.installed = (tmp_path / "prefix" / "bin" / "aicommit").resolve()
        self.executor.on(str(self.installed), result=ok("aicommit v0.6.3\n"))

        self.downloader = FakeDownloader(payload)
        self.container = ServiceContainer(config=self.config, executor=self.executor)
        self.container._instances["deps"] = DependencyChecker(
            executor=self.executor, which=lambda name: f"/usr/bin/{name}",
        )
        self.container._instances["fetcher"] = SourceFetcher(
            build_root=self.config.build_root,
            cache_dir=self.config.cache_dir,
            archive_source=ArchiveSource(Path(self.config.cache_dir), downloader=self.downloader),
        )
        self.evaluator = Evaluator(self.container)


class TestEvaluatorRun:
    def test_full_pipeline(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        report = s.evaluator.run(archive_descriptor(PAYLOAD))

        assert report.success
        assert report.version == "0.6.3"
        assert [st["step"] for st in report.steps] == [
            "check_deps", "fetch", "resolve_version", "build", "install", "verify",
        ]
        assert report.installed_path == tmp_path / "prefix" / "bin" / "aicommit"
        assert report.installed_path.read_text().endswith("echo aicommit v0.6.3\n")
        assert report.verification.matched == "aicommit v0.6.3"

    def test_build_runs_inside_source_tree(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        s.evaluator.run(archive_descriptor(PAYLOAD))
        make = next(c for c in s.executor.calls if c["args"][0] == "make")
        assert make["cwd"] == str(tmp_path / "build" / "aicommit" / "0.6.3" / "aicommit-0.6.3")
        assert make["env"]["VERSION"] == "v0.6.3"

    def test_prefix_override(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        other = tmp_path / "other"
        s.executor.on(str((other / "bin" / "aicommit").resolve()), result=ok("aicommit v0.6.3\n"))
        report = s.evaluator.run(archive_descriptor(PAYLOAD), prefix=other)
        assert report.installed_path == other / "bin" / "aicommit"

    def test_missing_dependency_stops_before_fetch(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        s.container._instances["deps"] = DependencyChecker(
            executor=s.executor, which=lambda name: None if name == "go" else f"/usr/bin/{name}",
        )
        with pytest.raises(DependencyError, match="go"):
            s.evaluator.run(archive_descriptor(PAYLOAD))
        assert s.downloader.urls == []
        assert not (tmp_path / "build").exists()

    def test_old_dependency_stops_before_fetch(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        s.executor.on("/usr/bin/go", result=ok("go version go1.20.14 linux/amd64\n"))
        with pytest.raises(DependencyError, match="1.20.14 < 1.21"):
            s.evaluator.run(archive_descriptor(PAYLOAD))
        assert s.downloader.urls == []

    def test_checksum_mismatch_skips_build(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path, payload=PAYLOAD[:-1] + bytes([PAYLOAD[-1] ^ 0xFF]))
        with pytest.raises(IntegrityError):
            s.evaluator.run(archive_descriptor(PAYLOAD))
        assert not any(c["args"][0] == "make" for c in s.executor.calls)
        assert not (tmp_path / "prefix").exists()

    def test_build_failure_skips_install(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        s.executor.on("make", result=fail(2, "compile error"))
        with pytest.raises(BuildError):
            s.evaluator.run(archive_descriptor(PAYLOAD))
        assert not (tmp_path / "prefix").exists()

    def test_verification_failure_keeps_installed_file(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        s.executor.on(str(s.installed), result=ok("aicommit v0.6.2\n"))
        with pytest.raises(VerificationError):
            s.evaluator.run(archive_descriptor(PAYLOAD))
        # 不回滚
        assert (tmp_path / "prefix" / "bin" / "aicommit").is_file()

    def test_no_dependencies_skipped(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        report = s.evaluator.run(archive_descriptor(PAYLOAD, dependencies=()))
        assert report.steps[0] == {"step": "check_deps", "status": "skipped"}


class TestEvaluatorPartial:
    def test_fetch_only(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        report = s.evaluator.fetch_only(archive_descriptor(PAYLOAD))
        assert report.tree is not None
        assert (report.tree.path / "Makefile").is_file()
        assert report.artifact is None
        assert not report.success

    def test_verify_installed(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        report = s.evaluator.verify_installed(archive_descriptor(PAYLOAD))
        assert report.success
        assert report.version == "0.6.3"

    def test_verify_installed_explicit_version(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        with pytest.raises(VerificationError):
            s.evaluator.verify_installed(archive_descriptor(PAYLOAD), version="0.7.0")


class TestStepPreconditions:
    @pytest.mark.parametrize(("step", "missing"), [
        ("resolve_version", "源码树"),
        ("build", "源码树"),
    ])
    def test_step_without_tree(self, tmp_path: Path, step: str, missing: str) -> None:
        s = _Setup(tmp_path)
        report = EvaluationReport(descriptor=archive_descriptor(PAYLOAD))
        with pytest.raises(BrewkitError, match=missing):
            getattr(s.evaluator.steps, step)(report)
        assert s.executor.calls == []

    def test_install_without_artifact(self, tmp_path: Path) -> None:
        s = _Setup(tmp_path)
        report = EvaluationReport(descriptor=archive_descriptor(PAYLOAD))
        with pytest.raises(BrewkitError, match="构建产物"):
            s.evaluator.steps.install(report, tmp_path / "prefix")
        assert not (tmp_path / "prefix").exists()
