"""构建执行器

职责:
- 在源码树中执行外部构建命令
- 注入 VERSION 等环境变量
- 非零退出码 / 超时 / 工具缺失统一转换为 BuildError
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time

from brewkit.core.exceptions import BuildError
from brewkit.core.models import BuildArtifact, PackageDescriptor, SourceTree
from brewkit.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


class BuildExecutor:
    """构建执行器"""

    def __init__(
        self, executor: CommandExecutor | None = None, timeout: int | None = None,
    ) -> None:
        self.executor = executor or get_executor()
        self.timeout = timeout

    def build(
        self, tree: SourceTree, desc: PackageDescriptor, version: str,
    ) -> BuildArtifact:
        """执行构建命令，返回产物路径（产物是否存在由安装步骤判断）"""
        args = desc.build_args(version)
        overrides = desc.build_env(version)
        env = {**os.environ, **overrides}
        if not tree.path.is_dir():
            raise BuildError(f"源码树不存在: {tree.path}")
        label = shlex.join(args)
        logger.info("  build: %s (cwd=%s, VERSION=%s)", label, tree.path, overrides["VERSION"])

        start = time.monotonic()
        try:
            r = self.executor.execute(
                args, cwd=str(tree.path), env=env, timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise BuildError(f"构建工具不存在: {args[0]}") from e
        except OSError as e:
            raise BuildError(f"构建命令无法执行: {label} - {e}") from e
        except subprocess.TimeoutExpired as e:
            raise BuildError(f"构建超时 ({self.timeout}s): {label}") from e
        duration = time.monotonic() - start

        if not r.success:
            logger.error("构建失败 %s (rc=%d)", desc.name, r.returncode)
            raise BuildError(
                f"构建失败 (rc={r.returncode}): {label}\n{r.output[-2000:]}",
                returncode=r.returncode, stdout=r.stdout, stderr=r.stderr,
            )

        logger.info("构建完成: %s %s (%.1fs)", desc.name, version, duration)
        return BuildArtifact(
            path=tree.path / desc.install.source,
            version=version, duration=duration, stdout=r.stdout,
        )
