"""Copy the mounted image tree to the target volume with ``rsync``."""

from __future__ import annotations

import subprocess

from win_usb_creator.domain.models import SourceMount, TargetVolume
from win_usb_creator.logging import LoggerFactory
from win_usb_creator.storage.commands import run_command
from win_usb_creator.storage.exceptions import NotFoundError, TransferFailedError


RSYNC = "rsync"

log = LoggerFactory.for_transfer()


def build_rsync_command(source: str, destination: str, excluded: str) -> list[str]:
    # Trailing slashes copy the contents of source, not the directory itself
    return [
        RSYNC,
        "-avh",
        "--progress",
        "--exclude",
        excluded,
        source.rstrip("/") + "/",
        destination.rstrip("/") + "/",
    ]


def copy_excluding(
    source_mount: SourceMount,
    target_volume: TargetVolume,
    excluded_relative_path: str,
    *,
    timeout: float | None = None,
) -> None:
    """Mirror ``source_mount`` onto ``target_volume`` minus one relative path.

    Permissions and timestamps are preserved. Output streams to the terminal.
    A transfer that fails partway is reported as one failure; nothing is
    kept for resuming.

    Raises:
        NotFoundError: If the source mount vanished since it was mounted
        TransferFailedError: If rsync exits non-zero or cannot be run
    """
    if not source_mount.path.exists():
        raise NotFoundError(source_mount.path, what="Source path")

    log.info(f"Copying files to {target_volume.path} (excluding {excluded_relative_path})...")
    command = build_rsync_command(
        str(source_mount.path), str(target_volume.path), excluded_relative_path
    )
    try:
        result = run_command(command, stream_output=True, timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        raise TransferFailedError(source_mount.path, target_volume.path) from error
    if result.returncode != 0:
        raise TransferFailedError(source_mount.path, target_volume.path, result.returncode)
