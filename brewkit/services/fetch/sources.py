"""源码来源适配器 - 支持 Git 版本 / 归档包

职责:
- Git 仓库 clone / fetch 到指定版本
- 归档包下载、SHA-256 校验、解压
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import tarfile
from collections.abc import Callable
from pathlib import Path

from brewkit.core.exceptions import FetchError, IntegrityError
from brewkit.core.models import ArchiveFetch, RevisionFetch, SourceTree
from brewkit.utils.net import download, filename_from_url
from brewkit.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


def sha256_file(path: Path) -> str:
    """分块计算文件 SHA-256"""
    sha256 = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


class GitSource:
    """Git 版本来源，只信任传输层，不做内容校验"""

    def __init__(self, executor: CommandExecutor | None = None) -> None:
        self.executor = executor or get_executor()

    def fetch(self, locator: RevisionFetch, workspace: Path) -> SourceTree:
        """把 locator.revision 检出到 workspace"""
        try:
            self._clone_or_fetch(locator.url, locator.revision, workspace)
        except OSError as e:
            raise FetchError(f"git 执行失败: {e}") from e
        sha = self.commit_sha(workspace)
        logger.info("Git 就绪: %s@%s (%s) -> %s", locator.url, locator.revision, sha, workspace)
        return SourceTree(path=workspace, locator=locator, commit_sha=sha)

    def _git(self, args: list[str], cwd: Path | None = None, action: str = "") -> None:
        r = self.executor.execute(["git", *args], cwd=str(cwd) if cwd else ".")
        if not r.success:
            raise FetchError(
                f"git {action or args[0]} 失败 (rc={r.returncode}): {r.stderr[:300]}"
            )

    def _clone_or_fetch(self, url: str, ref: str, workspace: Path) -> None:
        if (workspace / ".git").exists():
            self._git(["fetch", "--depth", "1", "origin", ref], cwd=workspace)
            self._git(["checkout", "--force", "FETCH_HEAD"], cwd=workspace)
            return

        # 残留的非 git 目录无法 clone，清掉重来
        if workspace.exists():
            shutil.rmtree(workspace)
        workspace.parent.mkdir(parents=True, exist_ok=True)

        if ref == "HEAD":
            self._git(["clone", "--depth", "1", url, str(workspace)], action="clone")
            return

        r = self.executor.execute(
            ["git", "clone", "--depth", "1", "--branch", ref, url, str(workspace)],
        )
        if r.success:
            return
        # 回退: ref 可能是 commit SHA，完整 clone + checkout
        shutil.rmtree(workspace, ignore_errors=True)
        self._git(["clone", url, str(workspace)], action="clone")
        self._git(["checkout", ref], cwd=workspace)

    def commit_sha(self, workspace: Path) -> str:
        """当前 commit SHA（前 12 位），失败返回空串"""
        try:
            r = self.executor.execute(["git", "rev-parse", "HEAD"], cwd=str(workspace))
        except OSError:
            return ""
        return r.stdout.strip()[:12] if r.success else ""

    def describe(self, workspace: Path) -> str:
        """git describe --tags --always --dirty，失败返回空串"""
        try:
            r = self.executor.execute(
                ["git", "describe", "--tags", "--always", "--dirty"],
                cwd=str(workspace),
            )
        except OSError:
            return ""
        return r.stdout.strip() if r.success else ""


class ArchiveSource:
    """归档包来源 — 下载 → 校验 → 解压"""

    def __init__(
        self,
        cache_dir: Path,
        downloader: Callable[[str, Path], Path] = download,
    ) -> None:
        self.cache_dir = cache_dir
        self._download = downloader

    def fetch(
        self, locator: ArchiveFetch, name: str, workspace: Path,
    ) -> SourceTree:
        archive = self.cache_dir / name / filename_from_url(locator.url)
        if archive.exists():
            logger.info("  缓存命中: %s", archive)
        else:
            self._download(locator.url, archive)

        self.verify_checksum(archive, locator.sha256)
        root = self._extract(archive, workspace)
        logger.info("归档就绪: %s -> %s", archive.name, root)
        return SourceTree(path=root, locator=locator, archive_sha256=locator.sha256)

    @staticmethod
    def verify_checksum(path: Path, expected: str) -> None:
        """校验和不匹配时删除下载文件（下次重新下载）并抛 IntegrityError"""
        actual = sha256_file(path)
        if actual != expected:
            path.unlink(missing_ok=True)
            raise IntegrityError(
                f"校验和不匹配 {path.name}: 期望 {expected}, 实际 {actual}",
                expected=expected, actual=actual,
            )
        logger.info("  校验和通过: %s", path.name)

    @staticmethod
    def _extract(archive: Path, workspace: Path) -> Path:
        """解压到干净的 workspace；只有一个顶层目录时返回该目录"""
        if workspace.exists():
            shutil.rmtree(workspace)
        workspace.mkdir(parents=True)
        try:
            with tarfile.open(archive) as tf:
                tf.extractall(path=str(workspace), filter="data")  # noqa: S202
        except (OSError, tarfile.TarError) as e:
            raise FetchError(f"解压失败 {archive.name}: {e}") from e

        entries = [p for p in workspace.iterdir() if not p.name.startswith(".")]
        if len(entries) == 1 and entries[0].is_dir():
            return entries[0]
        return workspace
