"""统一数据模型

配方描述（不可变）:
- RevisionFetch / ArchiveFetch: 源码定位
- BuildDependency: 构建依赖
- BuildCommand / InstallStep / VerifyStep: 构建 / 安装 / 校验步骤
- PackageDescriptor: 完整配方

执行结果:
- SourceTree / BuildArtifact / VerifyResult / EvaluationReport
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

# 占位版本：构建时由源码树的 git describe 决定
PLACEHOLDER_VERSIONS = frozenset(("", "0.0.0"))


# =========================================================================
# 配方描述
# =========================================================================


@dataclass(frozen=True)
class RevisionFetch:
    """按 git 版本拉取（HEAD 表示远端默认分支），不做内容校验"""

    url: str
    revision: str = "HEAD"

    kind = "revision"


@dataclass(frozen=True)
class ArchiveFetch:
    """按固定 URL 下载归档包，SHA-256 必须匹配"""

    url: str
    sha256: str

    kind = "archive"


SourceLocator = Union[RevisionFetch, ArchiveFetch]


@dataclass(frozen=True)
class BuildDependency:
    """构建依赖，min_version 为空表示只要求存在"""

    name: str
    min_version: str = ""
    build_only: bool = False
    version_args: tuple[str, ...] = ("--version",)


@dataclass(frozen=True)
class BuildCommand:
    """外部构建命令，args / env 的值可以包含 {version} 占位符"""

    args: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class InstallStep:
    """构建产物（相对源码树） → 安装目录（相对 prefix）"""

    source: str
    destination: str = "bin"


@dataclass(frozen=True)
class VerifyStep:
    """安装后校验: command 可包含 {bin} / {version}，expected 可包含 {version}"""

    command: str
    expected: str
    match: str = "literal"  # literal / regex


@dataclass(frozen=True)
class PackageDescriptor:
    """软件包配方 — 求值期间不可变"""

    name: str
    source: SourceLocator
    build: BuildCommand
    install: InstallStep
    verify: VerifyStep
    version: str = "0.0.0"
    description: str = ""
    homepage: str = ""
    license: str = ""
    dependencies: tuple[BuildDependency, ...] = ()

    @property
    def is_version_placeholder(self) -> bool:
        return self.version in PLACEHOLDER_VERSIONS

    def build_env(self, version: str) -> dict[str, str]:
        """渲染构建环境变量，未声明 VERSION 时注入实际版本"""
        env = {k: render(v, version=version) for k, v in self.build.env.items()}
        env.setdefault("VERSION", version)
        return env

    def build_args(self, version: str) -> list[str]:
        return [render(a, version=version) for a in self.build.args]

    def verify_command(self, version: str, bin_dir: Path) -> str:
        return render(self.verify.command, version=version, bin=shlex.quote(str(bin_dir)))

    def expected_output(self, version: str) -> str:
        """渲染期望输出；正则模式下插入的版本号会被转义"""
        if self.verify.match == "regex":
            return render(self.verify.expected, version=re.escape(version))
        return render(self.verify.expected, version=version)


_PLACEHOLDER_RE = re.compile(r"\{(version|bin)\}")


def render(template: str, **values: str) -> str:
    """只替换 {version} / {bin}，其他花括号（如正则量词 {2,3}）原样保留"""
    return _PLACEHOLDER_RE.sub(
        lambda m: values.get(m.group(1), m.group(0)), template,
    )


# =========================================================================
# 执行结果
# =========================================================================


@dataclass
class SourceTree:
    """拉取后的本地源码树"""

    path: Path
    locator: SourceLocator
    commit_sha: str = ""
    archive_sha256: str = ""


@dataclass
class BuildArtifact:
    """构建产物"""

    path: Path
    version: str
    duration: float = 0.0
    stdout: str = ""


@dataclass
class VerifyResult:
    """安装后校验结果"""

    command: str
    output: str
    matched: str


@dataclass
class EvaluationReport:
    """一次完整求值（依赖 → 拉取 → 构建 → 安装 → 校验）的报告"""

    descriptor: PackageDescriptor
    steps: list[dict[str, Any]] = field(default_factory=list)
    version: str = ""
    tree: SourceTree | None = None
    artifact: BuildArtifact | None = None
    installed_path: Path | None = None
    verification: VerifyResult | None = None

    @property
    def success(self) -> bool:
        return self.verification is not None
