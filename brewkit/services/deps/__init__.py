"""构建依赖检查"""

from brewkit.services.deps.checker import DependencyChecker

__all__ = ["DependencyChecker"]
