"""Provisioning pipeline for building a bootable installer USB stick.

Stages run strictly in order and each one drives a single external tool:

    format -> verify free space -> mount image -> copy -> split -> teardown

Any failure before teardown aborts the run: the stage moves to ABORTED and
the error propagates unchanged. Nothing is rolled back and teardown is not
attempted, so the operator can inspect the device and image as they were
left. Teardown itself is best-effort and only produces warnings.
"""

from __future__ import annotations

from win_usb_creator.config.settings import ProvisionConfig
from win_usb_creator.domain.models import (
    BuildResult,
    PipelineStage,
    SourceImage,
    SourceMount,
    TargetDevice,
    TargetVolume,
)
from win_usb_creator.logging import LoggerFactory, operation_context
from win_usb_creator.storage import capacity, disks, images, split, transfer
from win_usb_creator.storage.commands import check_required_tools


REQUIRED_TOOLS = (
    disks.DISKUTIL,
    images.HDIUTIL,
    capacity.DF,
    transfer.RSYNC,
    split.WIMLIB,
)


def teardown(
    source_mount: SourceMount | None,
    target_volume: TargetVolume | None,
    *,
    timeout: float | None = None,
) -> list[str]:
    """Unmount the image and eject the target; returns warnings, never raises."""
    warnings: list[str] = []
    if source_mount is not None:
        warning = images.unmount_image(source_mount, timeout=timeout)
        if warning:
            warnings.append(warning)
    if target_volume is not None:
        warning = disks.eject_volume(target_volume, timeout=timeout)
        if warning:
            warnings.append(warning)
    return warnings


class Provisioner:
    """Runs the destructive part of the pipeline for one source and device."""

    def __init__(self, config: ProvisionConfig | None = None):
        self.config = config or ProvisionConfig()
        self.stage = PipelineStage.INIT
        self.log = LoggerFactory.for_pipeline()

    def _advance(self, stage: PipelineStage) -> None:
        if self.stage.is_terminal:
            raise RuntimeError(f"Pipeline already finished (stage {self.stage.value})")
        self.log.debug(f"Stage {self.stage.value} -> {stage.value}")
        self.stage = stage

    def preflight(self) -> None:
        """Fail early if any external tool is missing."""
        check_required_tools(REQUIRED_TOOLS)

    def provision(self, source: SourceImage, device: TargetDevice) -> BuildResult:
        """Format ``device`` and write ``source`` onto it.

        Callers must have resolved both inputs and obtained the operator's
        confirmation; formatting starts immediately.
        """
        if self.stage is not PipelineStage.INIT:
            raise RuntimeError(f"Provisioner already used (stage {self.stage.value})")
        self._advance(PipelineStage.RESOLVED)
        config = self.config
        timeout = config.command_timeout_seconds
        result = BuildResult(stage=self.stage)

        with operation_context(
            "provision", image=str(source.path), device=device.identifier
        ) as log:
            try:
                result.target_volume = disks.format_target(
                    device, config.volume_label, config.volumes_root, timeout=timeout
                )
                self._advance(PipelineStage.FORMATTED)

                result.available_bytes = capacity.available_bytes(
                    result.target_volume.path, timeout=timeout
                )
                self._advance(PipelineStage.VERIFIED)

                result.source_mount = images.mount_image(
                    source, config.volumes_root, timeout=timeout
                )
                self._advance(PipelineStage.MOUNTED)

                if config.check_free_space:
                    capacity.ensure_fits(
                        result.source_mount.path,
                        result.target_volume.path,
                        result.available_bytes,
                    )

                transfer.copy_excluding(
                    result.source_mount,
                    result.target_volume,
                    config.excluded_path,
                    timeout=timeout,
                )
                self._advance(PipelineStage.TRANSFERRED)

                result.chunk_files = split.split_oversized_object(
                    result.source_mount,
                    result.target_volume,
                    config.excluded_path,
                    config.chunk_size_mb,
                    timeout=timeout,
                )
                self._advance(PipelineStage.SPLIT)
            except Exception:
                self._advance(PipelineStage.ABORTED)
                result.stage = self.stage
                raise

            result.warnings = teardown(
                result.source_mount, result.target_volume, timeout=timeout
            )
            self._advance(PipelineStage.TORN_DOWN)
            result.stage = self.stage
            if result.warnings:
                log.warning(f"Teardown finished with {len(result.warnings)} warning(s)")
        return result
