"""产物安装器

先复制到目标目录下的临时文件，再原子 rename 覆盖：
重复安装得到相同内容，中途失败不会留下写了一半的二进制。
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from brewkit.core.exceptions import InstallError

logger = logging.getLogger(__name__)


class Installer:
    """产物安装器"""

    def install(self, artifact: Path, destination_dir: Path) -> Path:
        """复制产物到 destination_dir，返回安装后的路径"""
        if not artifact.is_file():
            raise InstallError(f"构建产物不存在: {artifact}")

        target = destination_dir / artifact.name
        tmp = ""
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(destination_dir), prefix=f".{artifact.name}.")
            os.close(fd)
            shutil.copy2(artifact, tmp)
            os.replace(tmp, target)
        except OSError as e:
            if tmp:
                try:
                    os.unlink(tmp)
                except OSError:
                    # 临时文件清理失败不影响原异常抛出
                    pass
            raise InstallError(f"安装失败 {artifact.name} -> {destination_dir}: {e}") from e

        logger.info("已安装: %s -> %s", artifact.name, target)
        return target

    def uninstall(self, name: str, destination_dir: Path) -> bool:
        """删除已安装的文件，不存在返回 False"""
        target = destination_dir / name
        if not target.exists():
            return False
        try:
            target.unlink()
        except OSError as e:
            raise InstallError(f"卸载失败 {target}: {e}") from e
        logger.info("已卸载: %s", target)
        return True
