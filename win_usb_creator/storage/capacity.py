"""Free space queries for the formatted target volume."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from win_usb_creator.logging import LoggerFactory
from win_usb_creator.storage.commands import combined_output, run_command
from win_usb_creator.storage.disks import human_size
from win_usb_creator.storage.exceptions import CapacityQueryError, InsufficientSpaceError
from win_usb_creator.storage.parsers import parse_df_available_bytes


DF = "df"

log = LoggerFactory.for_disk()


def available_bytes(volume_path: Path | str, timeout: float | None = None) -> int:
    """Return free bytes on ``volume_path`` as reported by ``df -k``.

    Raises:
        CapacityQueryError: If df fails or cannot be run
        OutputParseError: If df output does not have the expected layout
    """
    try:
        result = run_command([DF, "-k", str(volume_path)], timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        raise CapacityQueryError(volume_path, str(error)) from error
    output = combined_output(result)
    if result.returncode != 0:
        raise CapacityQueryError(volume_path, output)
    available = parse_df_available_bytes(result.stdout or "")
    log.info(f"Available space on {volume_path}: {available // (1024 * 1024)} MB")
    return available


def tree_size_bytes(root: Path) -> int:
    """Total size of regular files under ``root``, not following symlinks."""
    total = 0
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            file_path = Path(dirpath) / filename
            if file_path.is_symlink():
                continue
            total += file_path.stat().st_size
    return total


def ensure_fits(source_root: Path, target: Path, available: int) -> int:
    """Raise InsufficientSpaceError if ``source_root`` will not fit in ``available``."""
    required = tree_size_bytes(source_root)
    log.info(
        f"Source content {human_size(required)}, "
        f"target free space {human_size(available)}"
    )
    if required > available:
        raise InsufficientSpaceError(target, available, required)
    return required
