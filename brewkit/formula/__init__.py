"""配方模块

- loader.py: YAML <-> PackageDescriptor 解析与校验
- registry.py: formulae/ 目录注册表
"""

from brewkit.formula.loader import dump_descriptor, load_descriptor, parse_descriptor
from brewkit.formula.registry import FormulaRegistry

__all__ = [
    "FormulaRegistry",
    "dump_descriptor",
    "load_descriptor",
    "parse_descriptor",
]
