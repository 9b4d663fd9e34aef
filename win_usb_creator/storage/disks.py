"""Disk manager operations for the target USB device.

Wraps ``diskutil`` for the four things the pipeline needs from it:

    - list_disks():     show attached disks to the operator
    - unmount_disk():   unmount every partition of a device
    - format_target():  erase to FAT32 on a GPT scheme with a fixed label
    - eject_volume():   eject the finished volume

Formatting is irreversible. It must only be called after the operator has
confirmed the target device.

Example:
    >>> from win_usb_creator.storage.disks import format_target
    >>> volume = format_target(TargetDevice("/dev/disk4"), "WINUSB")
    >>> volume.path
    PosixPath('/Volumes/WINUSB')
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from win_usb_creator.config.settings import DEFAULT_VOLUMES_ROOT
from win_usb_creator.domain.models import TargetDevice, TargetVolume
from win_usb_creator.logging import LoggerFactory
from win_usb_creator.storage.commands import combined_output, run_command
from win_usb_creator.storage.exceptions import FormatFailedError, UnmountFailedError


DISKUTIL = "diskutil"
FILESYSTEM = "FAT32"
PARTITION_SCHEME = "GPT"

log = LoggerFactory.for_disk()


def human_size(size_bytes):
    if size_bytes is None:
        return "0B"
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}PB"


def list_disks(timeout: float | None = None) -> bool:
    """Print attached disks to the terminal. Returns False on failure."""
    try:
        result = run_command([DISKUTIL, "list"], stream_output=True, timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        log.warning(f"Failed to list disks: {error}")
        return False
    if result.returncode != 0:
        log.warning(f"Failed to list disks (exit code {result.returncode})")
        return False
    return True


def unmount_disk(device: TargetDevice, timeout: float | None = None) -> None:
    """Unmount all partitions of ``device``; a no-op if none are mounted.

    Raises:
        UnmountFailedError: If diskutil fails or cannot be run
    """
    log.info(f"Unmounting all partitions on {device}...")
    try:
        result = run_command([DISKUTIL, "unmountDisk", device.identifier], timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        raise UnmountFailedError(device.identifier, str(error)) from error
    if result.returncode != 0:
        raise UnmountFailedError(device.identifier, combined_output(result))


def erase_disk(device: TargetDevice, volume_label: str, timeout: float | None = None) -> None:
    """Erase ``device`` and create a single labelled FAT32 volume on GPT.

    Raises:
        FormatFailedError: If diskutil fails or cannot be run
    """
    log.info(f"Formatting {device} as {FILESYSTEM} with {PARTITION_SCHEME}...")
    command = [
        DISKUTIL,
        "eraseDisk",
        FILESYSTEM,
        volume_label,
        PARTITION_SCHEME,
        device.identifier,
    ]
    try:
        result = run_command(command, timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        raise FormatFailedError(device.identifier, str(error)) from error
    if result.returncode != 0:
        raise FormatFailedError(device.identifier, combined_output(result))


def format_target(
    device: TargetDevice,
    volume_label: str,
    volumes_root: Path | str = DEFAULT_VOLUMES_ROOT,
    *,
    timeout: float | None = None,
) -> TargetVolume:
    """Unmount, then erase ``device`` and return the new volume.

    The returned path is the conventional mount point for ``volume_label``;
    diskutil mounts it before returning, so it is not checked here.
    """
    unmount_disk(device, timeout=timeout)
    erase_disk(device, volume_label, timeout=timeout)
    volume = TargetVolume(path=Path(volumes_root) / volume_label, label=volume_label)
    log.info(f"Formatted {device}, volume at {volume.path}")
    return volume


def eject_volume(volume: TargetVolume, timeout: float | None = None) -> str | None:
    """Eject the target volume. Returns a warning message on failure."""
    log.info(f"Ejecting {volume.path}...")
    try:
        result = run_command([DISKUTIL, "eject", str(volume.path)], timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        message = f"Failed to eject {volume.path}: {error}"
        log.warning(message)
        return message
    if result.returncode != 0:
        output = combined_output(result).strip()
        message = f"Failed to eject {volume.path}"
        if output:
            message += f": {output}"
        log.warning(message)
        return message
    return None
