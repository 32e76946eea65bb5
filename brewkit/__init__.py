"""brewkit - 声明式软件包描述与安装校验"""

__version__ = "0.1.0"
