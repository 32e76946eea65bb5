"""源码拉取协调器

职责:
- 按源码定位类型分派到 GitSource / ArchiveSource
- 计算源码树目录
- 解析本次构建的实际版本（占位版本 → git describe）
"""

from __future__ import annotations

import logging
from pathlib import Path

from brewkit.core.exceptions import FetchError
from brewkit.core.models import ArchiveFetch, PackageDescriptor, RevisionFetch, SourceTree
from brewkit.services.fetch.sources import ArchiveSource, GitSource

logger = logging.getLogger(__name__)


class SourceFetcher:
    """源码拉取器"""

    def __init__(
        self,
        build_root: str | Path,
        cache_dir: str | Path,
        git_source: GitSource | None = None,
        archive_source: ArchiveSource | None = None,
    ) -> None:
        self.build_root = Path(build_root)
        self.cache_dir = Path(cache_dir)
        self._git = git_source or GitSource()
        self._archive = archive_source or ArchiveSource(self.cache_dir)

    def workspace_for(self, desc: PackageDescriptor) -> Path:
        """源码树目录: <build_root>/<name>/<revision|version>

        归档包未声明具体版本时用 sha256 前 12 位作为目录名。
        """
        if isinstance(desc.source, RevisionFetch):
            return self.build_root / desc.name / desc.source.revision.replace("/", "_")
        if desc.is_version_placeholder:
            return self.build_root / desc.name / desc.source.sha256[:12]
        return self.build_root / desc.name / desc.version

    def fetch(self, desc: PackageDescriptor) -> SourceTree:
        workspace = self.workspace_for(desc)
        if isinstance(desc.source, ArchiveFetch):
            return self._archive.fetch(desc.source, desc.name, workspace)
        if isinstance(desc.source, RevisionFetch):
            return self._git.fetch(desc.source, workspace)
        raise FetchError(f"不支持的源码定位类型: {type(desc.source).__name__}")

    def resolve_version(self, desc: PackageDescriptor, tree: SourceTree) -> str:
        """占位版本在 git 源码树上用 git describe 决定，否则沿用配方版本

        返回不带 v 前缀的版本号（v0.6.3 -> 0.6.3），与配方中 version 字段同一形式
        """
        if not desc.is_version_placeholder:
            return desc.version
        if isinstance(tree.locator, RevisionFetch):
            described = _strip_v(self._git.describe(tree.path))
            if described:
                logger.info("版本由 git describe 决定: %s", described)
                return described
        logger.warning("无法解析实际版本，沿用占位版本: %s", desc.version or "0.0.0")
        return desc.version or "0.0.0"


def _strip_v(tag: str) -> str:
    """去掉标签前缀 v / V（v0.6.3-4-gabc1234 -> 0.6.3-4-gabc1234）"""
    if tag[:1] in ("v", "V") and tag[1:2].isdigit():
        return tag[1:]
    return tag
