"""求值步骤实现

步骤顺序:
1. check_deps - 检查构建依赖（任何网络访问之前）
2. fetch - 拉取源码
3. resolve_version - 解析实际版本
4. build - 执行构建
5. install - 安装产物
6. verify - 安装后校验

每个步骤只尝试一次，异常原样向上传播。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from brewkit.services.container import ServiceContainer

from brewkit.core.exceptions import BrewkitError
from brewkit.core.models import EvaluationReport

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EvaluationSteps:
    """求值步骤集合"""

    def __init__(self, container: ServiceContainer) -> None:
        self.c = container

    def _log(self, report: EvaluationReport, step: str, msg: str, *args: object) -> None:
        logger.info(msg, *args, extra={"formula": report.descriptor.name, "step": step})

    def check_deps(self, report: EvaluationReport) -> None:
        """步骤1: 检查构建依赖"""
        desc = report.descriptor
        if not desc.dependencies:
            report.steps.append({"step": "check_deps", "status": "skipped"})
            return
        found = self.c.deps.check(desc.dependencies)
        report.steps.append({"step": "check_deps", "status": "done", "deps": found})
        self._log(report, "check_deps", "[Step 1] 依赖检查通过: %s", sorted(found))

    def fetch(self, report: EvaluationReport) -> None:
        """步骤2: 拉取源码"""
        tree = self.c.fetcher.fetch(report.descriptor)
        report.tree = tree
        report.steps.append({
            "step": "fetch", "status": "done",
            "source": tree.locator.kind, "path": str(tree.path),
            "commit": tree.commit_sha, "sha256": tree.archive_sha256,
        })
        self._log(report, "fetch", "[Step 2] 源码就绪: %s", tree.path)

    def resolve_version(self, report: EvaluationReport) -> None:
        """步骤3: 解析实际版本（占位版本由源码树决定）"""
        tree = _require(report.tree, "源码树", "resolve_version")
        report.version = self.c.fetcher.resolve_version(report.descriptor, tree)
        report.steps.append({
            "step": "resolve_version", "status": "done", "version": report.version,
        })
        self._log(report, "resolve_version", "[Step 3] 版本: %s", report.version)

    def build(self, report: EvaluationReport) -> None:
        """步骤4: 执行构建命令"""
        tree = _require(report.tree, "源码树", "build")
        artifact = self.c.builder.build(tree, report.descriptor, report.version)
        report.artifact = artifact
        report.steps.append({
            "step": "build", "status": "done",
            "artifact": str(artifact.path), "duration": round(artifact.duration, 3),
        })
        self._log(report, "build", "[Step 4] 构建完成: %s", artifact.path)

    def install(self, report: EvaluationReport, prefix: Path) -> None:
        """步骤5: 复制产物到 <prefix>/<destination>"""
        artifact = _require(report.artifact, "构建产物", "install")
        dest = prefix / report.descriptor.install.destination
        report.installed_path = self.c.installer.install(artifact.path, dest)
        report.steps.append({
            "step": "install", "status": "done", "path": str(report.installed_path),
        })
        self._log(report, "install", "[Step 5] 安装完成: %s", report.installed_path)

    def verify(self, report: EvaluationReport, prefix: Path) -> None:
        """步骤6: 运行校验命令并匹配输出"""
        bin_dir = prefix / report.descriptor.install.destination
        result = self.c.verifier.verify(report.descriptor, bin_dir.resolve(), report.version)
        report.verification = result
        report.steps.append({
            "step": "verify", "status": "done", "matched": result.matched,
        })
        self._log(report, "verify", "[Step 6] 校验通过: %s", result.matched)


def _require(value: T | None, what: str, step: str) -> T:
    """前置步骤未产出所需结果时中止"""
    if value is None:
        raise BrewkitError(f"步骤 {step} 缺少{what}，前置步骤未执行")
    return value
