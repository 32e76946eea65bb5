"""构建依赖检查器

职责:
- 检查依赖工具是否在 PATH 中
- 探测工具版本并与 min_version 比较

在任何网络拉取之前执行，缺失或版本过低立即抛 DependencyError。
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Iterable

from brewkit.core.exceptions import DependencyError
from brewkit.core.models import BuildDependency
from brewkit.core.version import extract_version, version_satisfies
from brewkit.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)

# 版本探测只是打印版本号，给一个较短的固定超时
_PROBE_TIMEOUT = 30


class DependencyChecker:
    """构建依赖检查器"""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.executor = executor or get_executor()
        self._which = which

    def check(self, dependencies: Iterable[BuildDependency]) -> dict[str, str]:
        """逐个检查依赖，返回 {name: 探测到的版本}（未要求版本时为空串）"""
        found: dict[str, str] = {}
        for dep in dependencies:
            found[dep.name] = self.check_one(dep)
        return found

    def check_one(self, dep: BuildDependency) -> str:
        path = self._which(dep.name)
        if path is None:
            raise DependencyError(f"缺少构建依赖: {dep.name}（未在 PATH 中找到）")
        if not dep.min_version:
            logger.info("  依赖就绪: %s -> %s", dep.name, path)
            return ""

        detected = self._probe_version(dep, path)
        if not version_satisfies(detected, dep.min_version):
            raise DependencyError(
                f"构建依赖版本过低: {dep.name} {detected} < {dep.min_version}"
            )
        logger.info("  依赖就绪: %s %s (>= %s)", dep.name, detected, dep.min_version)
        return detected

    def _probe_version(self, dep: BuildDependency, path: str) -> str:
        try:
            r = self.executor.execute(
                [path, *dep.version_args], timeout=_PROBE_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise DependencyError(f"无法执行依赖 {dep.name}: {e}") from e
        version = extract_version(r.stdout) or extract_version(r.stderr)
        if not version:
            raise DependencyError(
                f"无法识别 {dep.name} 的版本 (rc={r.returncode}): {r.output[:200]}"
            )
        return version
