"""CLI — 配方查询命令（list / info / audit）"""

from __future__ import annotations

import click

from brewkit.cli import _svc
from brewkit.formula.loader import dump_descriptor
from brewkit.utils.yaml_io import dump_yaml


def register(group: click.Group) -> None:
    group.add_command(list_formulae)
    group.add_command(info)
    group.add_command(audit)


@click.command(name="list")
def list_formulae() -> None:
    """列出所有配方"""
    items = _svc().formulae.list_all()
    if not items:
        click.echo("没有可用的配方。")
        return
    for item in items:
        if "error" in item:
            click.echo(f"  {item['name']:20s} [损坏] {item['error']}")
            continue
        click.echo(
            f"  {item['name']:20s} {item['version']:10s} "
            f"[{item['source']:8s}] {item['description']}"
        )


@click.command()
@click.argument("name")
def info(name: str) -> None:
    """显示配方详情"""
    desc = _svc().formulae.get(name)
    click.echo(dump_yaml(dump_descriptor(desc)), nl=False)


@click.command()
@click.argument("name")
def audit(name: str) -> None:
    """校验配方文件（字段、校验和格式、版本一致性）"""
    desc = _svc().formulae.get(name)
    click.echo(f"配方有效: {desc.name} ({desc.source.kind})")
