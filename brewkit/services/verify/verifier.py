"""安装后校验器

执行已安装的二进制（如 `aicommit version`），捕获 stdout 并与期望输出匹配:
  - literal: 期望文本必须作为子串出现
  - regex: re.search 命中即可

命令必须以 0 退出，否则视为校验失败。
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from brewkit.core.exceptions import VerificationError
from brewkit.core.models import PackageDescriptor, VerifyResult
from brewkit.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


def match_output(output: str, expected: str, mode: str) -> str | None:
    """返回命中的文本，未命中返回 None"""
    if mode == "regex":
        m = re.search(expected, output)
        return m.group(0) if m else None
    return expected if expected in output else None


class Verifier:
    """安装后校验器"""

    def __init__(
        self, executor: CommandExecutor | None = None, timeout: int | None = None,
    ) -> None:
        self.executor = executor or get_executor()
        self.timeout = timeout

    def verify(
        self, desc: PackageDescriptor, bin_dir: Path, version: str,
    ) -> VerifyResult:
        command = desc.verify_command(version, bin_dir)
        expected = desc.expected_output(version)
        logger.info("  verify: %s (期望 %s %r)", command, desc.verify.match, expected)

        try:
            r = self.executor.execute(command, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as e:
            raise VerificationError(f"校验命令无法执行: {command} - {e}") from e
        if not r.success:
            raise VerificationError(
                f"校验命令失败 (rc={r.returncode}): {command}", output=r.output,
            )

        matched = match_output(r.stdout, expected, desc.verify.match)
        if matched is None:
            raise VerificationError(
                f"输出不匹配: 期望 {expected!r}, 实际 {r.stdout.strip()!r}",
                output=r.stdout,
            )
        logger.info("校验通过: %s", matched)
        return VerifyResult(command=command, output=r.stdout, matched=matched)
