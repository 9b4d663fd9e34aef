"""Disk image attach and detach via ``hdiutil``."""

from __future__ import annotations

import subprocess
from pathlib import Path

from win_usb_creator.config.settings import DEFAULT_VOLUMES_ROOT
from win_usb_creator.domain.models import SourceImage, SourceMount
from win_usb_creator.logging import LoggerFactory
from win_usb_creator.storage.commands import combined_output, run_command
from win_usb_creator.storage.exceptions import MountFailedError, MountPointNotFoundError
from win_usb_creator.storage.parsers import find_mount_point


HDIUTIL = "hdiutil"

log = LoggerFactory.for_image()


def mount_image(
    image: SourceImage,
    volumes_root: Path | str = DEFAULT_VOLUMES_ROOT,
    *,
    timeout: float | None = None,
) -> SourceMount:
    """Mount ``image`` read-only and return where it was mounted.

    The mount point is the first token in hdiutil's output under
    ``volumes_root``; it must exist on disk.

    Raises:
        MountFailedError: If hdiutil fails or cannot be run
        MountPointNotFoundError: If no mount point is reported or it is missing
    """
    log.info(f"Mounting {image.name}...")
    try:
        result = run_command([HDIUTIL, "mount", str(image.path)], timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        raise MountFailedError(image.path, str(error)) from error
    output = combined_output(result)
    if result.returncode != 0:
        raise MountFailedError(image.path, output)

    prefix = str(volumes_root).rstrip("/") + "/"
    mount_point = find_mount_point(output, prefix)
    if mount_point is None:
        raise MountPointNotFoundError(image.path, "no mount point in output", output)
    mount_path = Path(mount_point)
    if not mount_path.exists():
        raise MountPointNotFoundError(image.path, f"{mount_path} does not exist")

    log.info(f"Image mounted at: {mount_path}")
    return SourceMount(path=mount_path)


def unmount_image(mount: SourceMount, timeout: float | None = None) -> str | None:
    """Detach a mounted image. Returns a warning message on failure."""
    log.info(f"Unmounting {mount.path}...")
    try:
        result = run_command([HDIUTIL, "unmount", str(mount.path)], timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        message = f"Failed to unmount {mount.path}: {error}"
        log.warning(message)
        return message
    if result.returncode != 0:
        output = combined_output(result).strip()
        message = f"Failed to unmount {mount.path}"
        if output:
            message += f": {output}"
        log.warning(message)
        return message
    return None
