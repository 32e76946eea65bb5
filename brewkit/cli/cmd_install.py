"""CLI — 安装流程命令（install / fetch / deps / verify / uninstall）"""

from __future__ import annotations

from pathlib import Path

import click

from brewkit.cli import _svc


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(fetch)
    group.add_command(deps)
    group.add_command(verify)
    group.add_command(uninstall)


@click.command()
@click.argument("name")
@click.option("--prefix", default="", help="安装前缀（默认取配置 prefix）")
def install(name: str, prefix: str) -> None:
    """完整安装: 依赖 → 拉取 → 构建 → 安装 → 校验"""
    svc = _svc()
    desc = svc.formulae.get(name)
    report = svc.evaluator.run(desc, prefix=prefix or None)
    click.echo(f"已安装: {desc.name} {report.version} -> {report.installed_path}")
    click.echo(f"校验: {report.verification.matched}")  # type: ignore[union-attr]


@click.command()
@click.argument("name")
def fetch(name: str) -> None:
    """检查依赖并拉取源码（不构建）"""
    svc = _svc()
    report = svc.evaluator.fetch_only(svc.formulae.get(name))
    click.echo(f"源码就绪: {name} {report.version} -> {report.tree.path}")  # type: ignore[union-attr]


@click.command()
@click.argument("name")
def deps(name: str) -> None:
    """检查构建依赖"""
    svc = _svc()
    desc = svc.formulae.get(name)
    if not desc.dependencies:
        click.echo(f"{name} 没有声明构建依赖。")
        return
    found = svc.deps.check(desc.dependencies)
    for dep in desc.dependencies:
        req = f">= {dep.min_version}" if dep.min_version else "任意版本"
        kind = " [build]" if dep.build_only else ""
        detected = found.get(dep.name) or "已安装"
        click.echo(f"  {dep.name:12s} {req:12s} {detected}{kind}")


@click.command()
@click.argument("name")
@click.option("--prefix", default="", help="安装前缀（默认取配置 prefix）")
@click.option("--version", "version", default="", help="期望版本（覆盖配方版本）")
def verify(name: str, prefix: str, version: str) -> None:
    """对已安装的二进制执行校验"""
    svc = _svc()
    report = svc.evaluator.verify_installed(
        svc.formulae.get(name), prefix=prefix or None, version=version,
    )
    click.echo(f"校验通过: {report.verification.matched}")  # type: ignore[union-attr]


@click.command()
@click.argument("name")
@click.option("--prefix", default="", help="安装前缀（默认取配置 prefix）")
def uninstall(name: str, prefix: str) -> None:
    """删除已安装的二进制"""
    svc = _svc()
    desc = svc.formulae.get(name)
    dest = Path(prefix or svc.config.prefix) / desc.install.destination
    if svc.installer.uninstall(Path(desc.install.source).name, dest):
        click.echo(f"已卸载: {name}")
    else:
        click.echo(f"未安装: {name}")
