"""Split an oversized WIM archive into FAT32-sized chunks with wimlib.

``wimlib-imagex split`` names its output ``install.swm``, ``install2.swm``,
``install3.swm`` and so on, next to the first chunk path it is given.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from win_usb_creator.domain.models import SourceMount, TargetVolume
from win_usb_creator.logging import LoggerFactory
from win_usb_creator.storage.commands import run_command
from win_usb_creator.storage.exceptions import SourceObjectMissingError, SplitFailedError


WIMLIB = "wimlib-imagex"
CHUNK_SUFFIX = ".swm"

log = LoggerFactory.for_transfer()


def chunk_destination(target_volume: TargetVolume, relative_path: str) -> Path:
    """Path of the first chunk file on the target."""
    return (target_volume.path / relative_path).with_suffix(CHUNK_SUFFIX)


def find_chunk_files(first_chunk: Path) -> list[Path]:
    if not first_chunk.parent.is_dir():
        return []
    pattern = f"{first_chunk.stem}*{CHUNK_SUFFIX}"
    return sorted(first_chunk.parent.glob(pattern))


def split_oversized_object(
    source_mount: SourceMount,
    target_volume: TargetVolume,
    relative_path: str,
    chunk_size_mb: int,
    *,
    timeout: float | None = None,
) -> list[Path]:
    """Split ``relative_path`` from the image into chunks on the target.

    Args:
        source_mount: Mounted source image
        target_volume: Formatted target volume
        relative_path: Object to split (e.g., "sources/install.wim")
        chunk_size_mb: Chunk ceiling in megabytes, below the FAT32 file limit

    Returns:
        Chunk files present on the target after the split

    Raises:
        SourceObjectMissingError: If the object is absent (wimlib is not run)
        SplitFailedError: If the chunk directory cannot be created, or wimlib
            exits non-zero or cannot be run
    """
    source_path = source_mount.resolve(relative_path)
    if not source_path.exists():
        raise SourceObjectMissingError(source_path)

    destination = chunk_destination(target_volume, relative_path)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise SplitFailedError(source_path) from error

    log.info(f"Splitting {relative_path} into {chunk_size_mb} MB chunks...")
    command = [WIMLIB, "split", str(source_path), str(destination), str(chunk_size_mb)]
    try:
        result = run_command(command, stream_output=True, timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as error:
        raise SplitFailedError(source_path) from error
    if result.returncode != 0:
        raise SplitFailedError(source_path, result.returncode)

    chunks = find_chunk_files(destination)
    log.info(f"Wrote {len(chunks)} chunk file(s) to {destination.parent}")
    return chunks
