"""Domain models for the provisioning pipeline."""

from __future__ import annotations

from .models import (
    BuildResult,
    PipelineStage,
    SourceImage,
    SourceMount,
    TargetDevice,
    TargetVolume,
)


__all__ = [
    "BuildResult",
    "PipelineStage",
    "SourceImage",
    "SourceMount",
    "TargetDevice",
    "TargetVolume",
]
