"""构建模块"""

from brewkit.services.build.executor import BuildExecutor

__all__ = ["BuildExecutor"]
