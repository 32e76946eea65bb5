"""配方注册表 — formulae/<name>.yml 目录

每个配方一个 YAML 文件，文件名即配方名。
"""

from __future__ import annotations

import logging
from pathlib import Path

from brewkit.core.exceptions import ConfigError, ValidationError
from brewkit.core.models import PackageDescriptor
from brewkit.formula.loader import load_descriptor

logger = logging.getLogger(__name__)

_SUFFIXES = (".yml", ".yaml")


class FormulaRegistry:
    """配方注册表（只读）"""

    def __init__(self, formula_dir: str = "") -> None:
        if not formula_dir:
            from brewkit.core.config import get_config
            formula_dir = get_config().formula_dir
        self.formula_dir = Path(formula_dir)

    def path_of(self, name: str) -> Path:
        """配方文件路径，不存在抛 ConfigError"""
        for suffix in _SUFFIXES:
            p = self.formula_dir / f"{name}{suffix}"
            if p.is_file():
                return p
        raise ConfigError(
            f"配方不存在: {name}。可用: {self.names()}"
        )

    def get(self, name: str) -> PackageDescriptor:
        """加载并校验配方"""
        desc = load_descriptor(self.path_of(name))
        if desc.name != name:
            raise ValidationError(
                f"配方名与文件名不一致: {desc.name} != {name}",
            )
        return desc

    def names(self) -> list[str]:
        if not self.formula_dir.is_dir():
            return []
        return sorted(
            p.stem for p in self.formula_dir.iterdir()
            if p.suffix in _SUFFIXES and not p.name.startswith(".")
        )

    def list_all(self) -> list[dict[str, str]]:
        """列出所有配方摘要，损坏的配方以 error 字段标出"""
        results: list[dict[str, str]] = []
        for name in self.names():
            try:
                desc = self.get(name)
            except (ConfigError, ValidationError) as e:
                logger.warning("配方加载失败: %s - %s", name, e)
                results.append({"name": name, "error": str(e)})
                continue
            results.append({
                "name": desc.name,
                "version": desc.version,
                "source": desc.source.kind,
                "description": desc.description,
            })
        return results
