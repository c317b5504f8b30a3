"""执行单个外部转换命令的工作单元。"""

from __future__ import annotations

import logging
import subprocess

from media_gallery.core.models import ConversionCommand, ConversionOutcome

LOGGER = logging.getLogger(__name__)


def run_command(command: ConversionCommand) -> ConversionOutcome:
    """在独立进程组中运行命令并收集合并后的输出。

    转换失败只记录结果，不抛出异常。
    """

    try:
        completed = subprocess.run(
            list(command.argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
            start_new_session=True,
            check=False,
        )
    except OSError as exc:
        return ConversionOutcome(
            command=command,
            status="error-launch",
            message=str(exc),
        )

    output = (completed.stdout or "").strip()
    if completed.returncode != 0:
        return ConversionOutcome(
            command=command,
            status="error-exit",
            returncode=completed.returncode,
            message=output or None,
        )

    return ConversionOutcome(
        command=command,
        status="converted",
        returncode=completed.returncode,
        message=output or None,
    )
