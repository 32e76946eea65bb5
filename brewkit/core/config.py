"""集中配置管理

所有目录与执行参数的统一入口。
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import yaml

from brewkit.core.exceptions import ConfigError
from brewkit.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """全局配置"""

    # 目录
    formula_dir: str = "formulae"
    cache_dir: str = "var/cache"
    build_root: str = "var/build"
    prefix: str = "var/prefix"

    # 执行（0 表示不限时）
    command_timeout: int = 0

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @property
    def timeout(self) -> int | None:
        """子进程超时秒数，未配置时返回 None（无限等待）"""
        return self.command_timeout if self.command_timeout > 0 else None

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认；内容无法解析抛 ConfigError"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise ConfigError(f"配置文件无法解析: {path} - {e}") from e
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        if not isinstance(cfg.command_timeout, int) or cfg.command_timeout < 0:
            raise ConfigError(f"command_timeout 必须是非负整数: {cfg.command_timeout!r}")
        cfg.extra = extra
        return cfg


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/default.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
