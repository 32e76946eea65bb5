"""配方文件解析与校验

YAML 字典 <-> PackageDescriptor。
所有字段问题收集到 ValidationError.details 中一次性报告。
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from brewkit.core.exceptions import ConfigError, ValidationError
from brewkit.core.models import (
    PLACEHOLDER_VERSIONS,
    ArchiveFetch,
    BuildCommand,
    BuildDependency,
    InstallStep,
    PackageDescriptor,
    RevisionFetch,
    VerifyStep,
)
from brewkit.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")
_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@\-]+$")
_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9_.+\-]*$")
_MATCH_MODES = ("literal", "regex")


def load_descriptor(path: str | Path) -> PackageDescriptor:
    """从 YAML 文件加载配方"""
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"配方文件不存在: {p}")
    try:
        data = load_yaml(p)
    except (yaml.YAMLError, ValueError) as e:
        raise ValidationError(f"配方文件无法解析: {p}", details=[str(e)]) from e
    if not data:
        raise ValidationError(f"配方文件为空: {p}")
    desc = parse_descriptor(data)
    logger.debug("配方已加载: %s (%s)", desc.name, p)
    return desc


def parse_descriptor(data: dict[str, Any]) -> PackageDescriptor:
    """字典 -> PackageDescriptor，字段错误汇总后抛 ValidationError"""
    errors: list[str] = []

    name = str(data.get("name") or "")
    if not _NAME_RE.match(name):
        errors.append(f"name: 非法配方名 {name!r}")

    source = _parse_source(data.get("source"), errors)
    version = str(data.get("version", "0.0.0"))
    if isinstance(source, ArchiveFetch) and version in PLACEHOLDER_VERSIONS:
        errors.append(f"version: 归档包必须声明具体版本: {version!r}")
    deps = _parse_dependencies(data.get("depends_on") or [], errors)
    build = _parse_build(data.get("build"), errors)
    install = _parse_install(data.get("install"), errors)
    verify = _parse_verify(data.get("verify"), errors)

    if errors:
        raise ValidationError(f"配方 {name or '<unnamed>'} 校验失败", details=errors)

    desc = PackageDescriptor(
        name=name,
        description=str(data.get("description", "")),
        homepage=str(data.get("homepage", "")),
        license=str(data.get("license", "")),
        version=version,
        source=source,  # type: ignore[arg-type]
        dependencies=tuple(deps),
        build=build,  # type: ignore[arg-type]
        install=install,  # type: ignore[arg-type]
        verify=verify,  # type: ignore[arg-type]
    )
    check_version_consistency(desc)
    return desc


def check_version_consistency(desc: PackageDescriptor) -> None:
    """具体版本必须同时出现在构建变量 VERSION 和字面量期望输出中"""
    if desc.is_version_placeholder or desc.verify.match != "literal":
        return
    embedded = desc.build_env(desc.version)["VERSION"]
    expected = desc.expected_output(desc.version)
    if embedded not in expected:
        raise ValidationError(
            f"配方 {desc.name} 版本不一致",
            details=[
                f"verify.expected: {expected!r} 未包含构建版本 {embedded!r}",
            ],
        )


def dump_descriptor(desc: PackageDescriptor) -> dict[str, Any]:
    """PackageDescriptor -> 可序列化字典（与配方文件格式一致）"""
    if isinstance(desc.source, ArchiveFetch):
        source: dict[str, str] = {"url": desc.source.url, "sha256": desc.source.sha256}
    else:
        source = {"url": desc.source.url, "revision": desc.source.revision}
    deps: list[dict[str, Any]] = []
    for d in desc.dependencies:
        entry: dict[str, Any] = {"name": d.name}
        if d.min_version:
            entry["min_version"] = d.min_version
        if d.build_only:
            entry["build_only"] = True
        if d.version_args != ("--version",):
            entry["version_args"] = list(d.version_args)
        deps.append(entry)
    return {
        "name": desc.name,
        "description": desc.description,
        "homepage": desc.homepage,
        "license": desc.license,
        "version": desc.version,
        "source": source,
        "depends_on": deps,
        "build": {"command": list(desc.build.args), "env": dict(desc.build.env)},
        "install": {"source": desc.install.source, "destination": desc.install.destination},
        "verify": {
            "command": desc.verify.command,
            "expected": desc.verify.expected,
            "match": desc.verify.match,
        },
    }


# ---- 分段解析 ----

def _parse_source(raw: Any, errors: list[str]) -> RevisionFetch | ArchiveFetch | None:
    if not isinstance(raw, dict) or not raw.get("url"):
        errors.append("source: 必须包含 url")
        return None
    url = str(raw["url"])
    has_sha = "sha256" in raw
    has_rev = "revision" in raw
    if has_sha and has_rev:
        errors.append("source: revision 与 sha256 只能指定其一")
        return None
    if has_sha:
        sha = str(raw["sha256"]).lower()
        if not _SHA256_RE.match(sha):
            errors.append(f"source.sha256: 需要 64 位十六进制字符串: {raw['sha256']!r}")
            return None
        if not url.startswith(("http://", "https://")):
            errors.append(f"source.url: 归档包仅支持 http/https: {url}")
            return None
        return ArchiveFetch(url=url, sha256=sha)
    revision = str(raw.get("revision") or "HEAD")
    if not _SAFE_REF_RE.match(revision):
        errors.append(f"source.revision: 包含非法字符: {revision}")
        return None
    return RevisionFetch(url=url, revision=revision)


def _parse_dependencies(raw: Any, errors: list[str]) -> list[BuildDependency]:
    if not isinstance(raw, list):
        errors.append("depends_on: 必须是列表")
        return []
    deps: list[BuildDependency] = []
    for i, item in enumerate(raw):
        # 允许简写: - make
        if isinstance(item, str):
            item = {"name": item}
        if not isinstance(item, dict) or not item.get("name"):
            errors.append(f"depends_on[{i}]: 必须包含 name")
            continue
        version_args = item.get("version_args", ["--version"])
        if isinstance(version_args, str):
            version_args = version_args.split()
        deps.append(BuildDependency(
            name=str(item["name"]),
            min_version=str(item.get("min_version", "") or ""),
            build_only=bool(item.get("build_only", False)),
            version_args=tuple(str(a) for a in version_args),
        ))
    return deps


def _parse_build(raw: Any, errors: list[str]) -> BuildCommand | None:
    if not isinstance(raw, dict) or not raw.get("command"):
        errors.append("build: 必须包含 command")
        return None
    command = raw["command"]
    if isinstance(command, str):
        command = command.split()
    env = raw.get("env") or {}
    if not isinstance(env, dict):
        errors.append("build.env: 必须是字典")
        return None
    return BuildCommand(
        args=tuple(str(a) for a in command),
        env={str(k): str(v) for k, v in env.items()},
    )


def _parse_install(raw: Any, errors: list[str]) -> InstallStep | None:
    if not isinstance(raw, dict) or not raw.get("source"):
        errors.append("install: 必须包含 source")
        return None
    source = str(raw["source"])
    destination = str(raw.get("destination", "bin"))
    for label, value in (("source", source), ("destination", destination)):
        p = Path(value)
        if p.is_absolute() or ".." in p.parts:
            errors.append(f"install.{label}: 必须是不含 .. 的相对路径: {value}")
            return None
    return InstallStep(source=source, destination=destination)


def _parse_verify(raw: Any, errors: list[str]) -> VerifyStep | None:
    if not isinstance(raw, dict) or not raw.get("command") or not raw.get("expected"):
        errors.append("verify: 必须包含 command 与 expected")
        return None
    match = str(raw.get("match", "literal"))
    if match not in _MATCH_MODES:
        errors.append(f"verify.match: 仅支持 {'/'.join(_MATCH_MODES)}: {match}")
        return None
    expected = str(raw["expected"])
    if match == "regex":
        try:
            re.compile(expected)
        except re.error as e:
            errors.append(f"verify.expected: 非法正则 {expected!r}: {e}")
            return None
    return VerifyStep(command=str(raw["command"]), expected=expected, match=match)
