"""Blocking subprocess execution for the external provisioning tools."""

from __future__ import annotations

import shutil
import subprocess
from typing import Iterable, Sequence

from win_usb_creator.logging import LoggerFactory
from win_usb_creator.storage.exceptions import ToolNotFoundError


log = LoggerFactory.for_system()


def run_command(
    command: Sequence[str],
    *,
    stream_output: bool = False,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """Run a command and wait for it to exit.

    Captured output is logged at debug level. With ``stream_output`` the
    child writes straight to the terminal so the operator sees tool progress,
    and the returned result carries no output.

    Never raises on a non-zero exit; callers map the return code to their own
    error. ``subprocess.TimeoutExpired`` and ``OSError`` propagate.
    """
    command = list(command)
    log.debug(f"Running command: {' '.join(command)}")
    result = subprocess.run(
        command,
        check=False,
        text=True,
        capture_output=not stream_output,
        timeout=timeout,
    )
    if result.stdout:
        log.debug(f"stdout: {result.stdout.strip()}")
    if result.stderr:
        log.debug(f"stderr: {result.stderr.strip()}")
    log.debug(f"Command completed with return code {result.returncode}")
    return result


def combined_output(result: subprocess.CompletedProcess) -> str:
    return (result.stdout or "") + (result.stderr or "")


def check_required_tools(tools: Iterable[str]) -> None:
    """Raise ToolNotFoundError listing every tool missing from PATH."""
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise ToolNotFoundError(missing)
