"""源码拉取模块

- sources.py: 来源适配器 Git / Archive
- fetcher.py: 按源码定位类型分派 + 版本解析
"""

from brewkit.services.fetch.fetcher import SourceFetcher
from brewkit.services.fetch.sources import ArchiveSource, GitSource, sha256_file

__all__ = ["SourceFetcher", "GitSource", "ArchiveSource", "sha256_file"]
