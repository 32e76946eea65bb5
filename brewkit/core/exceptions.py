"""统一异常体系

所有业务异常继承 BrewkitError，每个安装步骤对应一种异常类型。
异常只向上传播，不在本地恢复；由 CLI（宿主包管理器）负责展示给用户。
"""

from __future__ import annotations


class BrewkitError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(BrewkitError):
    """配置文件或配方文件缺失"""

    code = "CONFIG_ERROR"


class ValidationError(BrewkitError):
    """配方内容校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class DependencyError(BrewkitError):
    """构建依赖缺失或版本过低（在拉取前检查）"""

    code = "DEPENDENCY_ERROR"


class FetchError(BrewkitError):
    """源码拉取失败（网络 / git）"""

    code = "FETCH_ERROR"


class IntegrityError(BrewkitError):
    """归档包 SHA-256 校验和不匹配"""

    code = "INTEGRITY_ERROR"

    def __init__(self, message: str, expected: str = "", actual: str = "") -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class BuildError(BrewkitError):
    """构建命令返回非零"""

    code = "BUILD_ERROR"

    def __init__(
        self, message: str, *,
        returncode: int = -1, stdout: str = "", stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class InstallError(BrewkitError):
    """产物复制到目标目录失败"""

    code = "INSTALL_ERROR"


class VerificationError(BrewkitError):
    """安装后校验输出不匹配"""

    code = "VERIFICATION_ERROR"

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output
