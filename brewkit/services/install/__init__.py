"""安装模块"""

from brewkit.services.install.installer import Installer

__all__ = ["Installer"]
