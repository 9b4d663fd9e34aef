"""Domain model for the provisioning pipeline.

All values live for a single run and are never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


# ==============================================================================
# Pipeline State
# ==============================================================================


class PipelineStage(Enum):
    """Provisioning progress; only ever moves forward."""

    INIT = "init"
    RESOLVED = "resolved"
    FORMATTED = "formatted"
    VERIFIED = "verified"
    MOUNTED = "mounted"
    TRANSFERRED = "transferred"
    SPLIT = "split"
    TORN_DOWN = "torn_down"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.TORN_DOWN, PipelineStage.ABORTED)


# ==============================================================================
# Source and Target
# ==============================================================================


@dataclass(frozen=True)
class SourceImage:
    """Read-only disk image file the medium is built from."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class TargetDevice:
    """Raw block device that will be erased (e.g., /dev/disk4)."""

    identifier: str

    def __str__(self) -> str:
        return self.identifier


@dataclass(frozen=True)
class TargetVolume:
    """Mounted volume of the freshly formatted target device."""

    path: Path
    label: str


@dataclass(frozen=True)
class SourceMount:
    """Mount point of the attached source image."""

    path: Path

    def resolve(self, relative_path: str) -> Path:
        return self.path / relative_path


# ==============================================================================
# Result
# ==============================================================================


@dataclass
class BuildResult:
    """Outcome of a provisioning run."""

    stage: PipelineStage
    target_volume: TargetVolume | None = None
    source_mount: SourceMount | None = None
    available_bytes: int | None = None
    chunk_files: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.stage is PipelineStage.TORN_DOWN
