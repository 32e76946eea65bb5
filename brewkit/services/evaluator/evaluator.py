"""配方求值器 - 协调 6 步流水线

依赖 → 拉取 → 版本 → 构建 → 安装 → 校验，严格顺序，无重试、无回滚。
失败时已拉取 / 已构建的文件保留在磁盘上，清理策略由调用方决定。
"""

from __future__ import annotations

import logging
from pathlib import Path

from brewkit.core.models import EvaluationReport, PackageDescriptor
from brewkit.services.container import ServiceContainer
from brewkit.services.evaluator.steps import EvaluationSteps

logger = logging.getLogger(__name__)


class Evaluator:
    """配方求值器"""

    def __init__(self, container: ServiceContainer | None = None) -> None:
        self.c = container or ServiceContainer()
        self.steps = EvaluationSteps(self.c)

    def _prefix(self, prefix: str | Path | None) -> Path:
        return Path(prefix) if prefix else Path(self.c.config.prefix)

    def run(
        self, desc: PackageDescriptor, prefix: str | Path | None = None,
    ) -> EvaluationReport:
        """完整安装流程，返回报告；任一步骤的异常直接抛给调用方"""
        root = self._prefix(prefix)
        report = EvaluationReport(descriptor=desc)
        logger.info("开始安装: %s %s -> %s", desc.name, desc.version, root)

        self.steps.check_deps(report)
        self.steps.fetch(report)
        self.steps.resolve_version(report)
        self.steps.build(report)
        self.steps.install(report, root)
        self.steps.verify(report, root)

        logger.info("安装成功: %s %s", desc.name, report.version)
        return report

    def fetch_only(self, desc: PackageDescriptor) -> EvaluationReport:
        """只执行依赖检查和源码拉取"""
        report = EvaluationReport(descriptor=desc)
        self.steps.check_deps(report)
        self.steps.fetch(report)
        self.steps.resolve_version(report)
        return report

    def verify_installed(
        self, desc: PackageDescriptor, prefix: str | Path | None = None,
        version: str = "",
    ) -> EvaluationReport:
        """对已安装的二进制单独执行校验"""
        root = self._prefix(prefix)
        report = EvaluationReport(descriptor=desc, version=version or desc.version)
        self.steps.verify(report, root)
        return report
