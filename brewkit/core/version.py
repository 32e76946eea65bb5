"""版本号解析与比较

只处理点分数字版本（1.21 / 1.21.5 / v0.6.3），足以覆盖构建工具的版本输出。
"""

from __future__ import annotations

import re

_DOTTED_RE = re.compile(r"\d+(?:\.\d+)+")
_NUMBER_RE = re.compile(r"\d+")


def extract_version(text: str) -> str:
    """从工具输出中提取第一个版本号，点分形式优先

    例: "go version go1.21.5 linux/amd64" -> "1.21.5"
        "GNU Make 4.3" -> "4.3"
    未找到返回空字符串。
    """
    m = _DOTTED_RE.search(text) or _NUMBER_RE.search(text)
    return m.group(0) if m else ""


def parse_version(version: str) -> tuple[int, ...]:
    """"v1.21.5" -> (1, 21, 5)，非法输入抛 ValueError"""
    v = version.strip().lstrip("vV")
    m = re.match(r"^(\d+(?:\.\d+)*)", v)
    if not m:
        raise ValueError(f"无法解析版本号: {version!r}")
    return tuple(int(p) for p in m.group(1).split("."))


def version_satisfies(actual: str, minimum: str) -> bool:
    """actual >= minimum，缺失的分量按 0 补齐（1.21 == 1.21.0）"""
    a = parse_version(actual)
    b = parse_version(minimum)
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)) >= b + (0,) * (width - len(b))
