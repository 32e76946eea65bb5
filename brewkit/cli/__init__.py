"""brewkit 命令行接口

CLI 即宿主包管理器：负责把求值过程中抛出的 BrewkitError 展示给用户。
命令按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import os
from typing import Any

import click

from brewkit import __version__
from brewkit.core.exceptions import BrewkitError, ValidationError
from brewkit.services.container import get_container, reset_container
from brewkit.utils.logger import setup_logging


def _svc() -> Any:
    """获取全局服务容器的快捷方式"""
    return get_container()


class BrewkitGroup(click.Group):
    """把 BrewkitError 转换为 `[CODE] message` 形式的 CLI 错误"""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except BrewkitError as e:
            message = f"[{e.code}] {e}"
            if isinstance(e, ValidationError) and e.details:
                message += "\n" + "\n".join(f"  - {d}" for d in e.details)
            raise click.ClickException(message) from e


@click.group(cls=BrewkitGroup)
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default="configs/default.yml", help="配置文件路径")
def main(config_path: str) -> None:
    """brewkit - 声明式软件包安装与校验"""
    setup_logging(
        level=os.getenv("BREWKIT_LOG_LEVEL", "INFO"),
        json_output=os.getenv("BREWKIT_LOG_JSON", "") == "1",
    )
    from brewkit.core.config import init_config
    init_config(config_path)
    reset_container()


# 注册各领域子命令
from brewkit.cli.cmd_formula import register as _reg_formula  # noqa: E402
from brewkit.cli.cmd_install import register as _reg_install  # noqa: E402

_reg_install(main)
_reg_formula(main)
