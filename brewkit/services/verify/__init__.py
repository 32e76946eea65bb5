"""安装后校验模块"""

from brewkit.services.verify.verifier import Verifier

__all__ = ["Verifier"]
