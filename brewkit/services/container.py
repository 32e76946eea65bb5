"""服务容器 — 统一依赖注入

CLI 通过容器获取各求值组件，同一容器内的实例共享同一个 Config 和 CommandExecutor。

依赖关系图（→ 表示依赖）:
  evaluator → deps, fetcher, builder, installer, verifier
  deps / fetcher / builder / verifier → executor

用法:
    container = ServiceContainer()
    desc = container.formulae.get("aicommit")
    report = container.evaluator.run(desc)

    # 测试中注入假执行器
    container = ServiceContainer(config=cfg, executor=FakeExecutor())
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from brewkit.core.config import Config
    from brewkit.formula.registry import FormulaRegistry
    from brewkit.services.build.executor import BuildExecutor
    from brewkit.services.deps.checker import DependencyChecker
    from brewkit.services.evaluator.evaluator import Evaluator
    from brewkit.services.fetch.fetcher import SourceFetcher
    from brewkit.services.install.installer import Installer
    from brewkit.services.verify.verifier import Verifier
    from brewkit.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器"""

    def __init__(
        self, config: Config | None = None, executor: CommandExecutor | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from brewkit.core.config import get_config
            config = get_config()
        if executor is None:
            from brewkit.utils.shell import get_executor
            executor = get_executor()
        self._config = config
        self._executor = executor

    @property
    def config(self) -> Config:
        return self._config

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    @property
    def formulae(self) -> FormulaRegistry:
        if "formulae" not in self._instances:
            from brewkit.formula.registry import FormulaRegistry
            self._instances["formulae"] = FormulaRegistry(self._config.formula_dir)
        return self._instances["formulae"]  # type: ignore[return-value]

    @property
    def deps(self) -> DependencyChecker:
        if "deps" not in self._instances:
            from brewkit.services.deps.checker import DependencyChecker
            self._instances["deps"] = DependencyChecker(executor=self._executor)
        return self._instances["deps"]  # type: ignore[return-value]

    @property
    def fetcher(self) -> SourceFetcher:
        if "fetcher" not in self._instances:
            from brewkit.services.fetch.fetcher import SourceFetcher
            from brewkit.services.fetch.sources import ArchiveSource, GitSource
            cache_dir = Path(self._config.cache_dir)
            self._instances["fetcher"] = SourceFetcher(
                build_root=self._config.build_root,
                cache_dir=cache_dir,
                git_source=GitSource(executor=self._executor),
                archive_source=ArchiveSource(cache_dir),
            )
        return self._instances["fetcher"]  # type: ignore[return-value]

    @property
    def builder(self) -> BuildExecutor:
        if "builder" not in self._instances:
            from brewkit.services.build.executor import BuildExecutor
            self._instances["builder"] = BuildExecutor(
                executor=self._executor, timeout=self._config.timeout,
            )
        return self._instances["builder"]  # type: ignore[return-value]

    @property
    def installer(self) -> Installer:
        if "installer" not in self._instances:
            from brewkit.services.install.installer import Installer
            self._instances["installer"] = Installer()
        return self._instances["installer"]  # type: ignore[return-value]

    @property
    def verifier(self) -> Verifier:
        if "verifier" not in self._instances:
            from brewkit.services.verify.verifier import Verifier
            self._instances["verifier"] = Verifier(
                executor=self._executor, timeout=self._config.timeout,
            )
        return self._instances["verifier"]  # type: ignore[return-value]

    @property
    def evaluator(self) -> Evaluator:
        if "evaluator" not in self._instances:
            from brewkit.services.evaluator.evaluator import Evaluator
            self._instances["evaluator"] = Evaluator(container=self)
        return self._instances["evaluator"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（CLI 切换配置或测试时使用）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
