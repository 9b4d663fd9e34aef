"""Settings storage for provisioning configuration."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from win_usb_creator.storage.exceptions import InvalidInputError


SETTINGS_PATH = Path(
    os.environ.get(
        "WIN_USB_CREATOR_SETTINGS_PATH",
        Path.home() / ".config" / "win-usb-creator" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_VOLUME_LABEL = "WINUSB"
DEFAULT_VOLUMES_ROOT = "/Volumes"
DEFAULT_DEVICE_PREFIX = "/dev/disk"
DEFAULT_IMAGE_EXTENSION = ".iso"
DEFAULT_EXCLUDED_PATH = "sources/install.wim"
DEFAULT_CHUNK_SIZE_MB = 4000

# FAT32 stores file sizes in 32 bits
FAT32_MAX_FILE_BYTES = 4 * 1024**3 - 1
FAT32_LABEL_PATTERN = re.compile(r"^[A-Z0-9_-]{1,11}$")

DEFAULT_SETTINGS: dict[str, Any] = {
    "volume_label": DEFAULT_VOLUME_LABEL,
    "volumes_root": DEFAULT_VOLUMES_ROOT,
    "device_prefix": DEFAULT_DEVICE_PREFIX,
    "image_extension": DEFAULT_IMAGE_EXTENSION,
    "excluded_path": DEFAULT_EXCLUDED_PATH,
    "chunk_size_mb": DEFAULT_CHUNK_SIZE_MB,
    "check_free_space": False,
    "command_timeout_seconds": None,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def validate_volume_label(label: str) -> None:
    """Reject labels FAT32 cannot store (max 11 chars, uppercase)."""
    if not isinstance(label, str) or not FAT32_LABEL_PATTERN.match(label):
        raise InvalidInputError(
            "volume label",
            label,
            "must be 1-11 characters of A-Z, 0-9, '_' or '-'",
        )


def validate_chunk_size(chunk_size_mb: int) -> None:
    """Chunks must stay strictly below the FAT32 per-file ceiling."""
    if not isinstance(chunk_size_mb, int) or isinstance(chunk_size_mb, bool):
        raise InvalidInputError("chunk size", chunk_size_mb, "must be an integer")
    if chunk_size_mb <= 0:
        raise InvalidInputError("chunk size", chunk_size_mb, "must be positive")
    if chunk_size_mb * 1024 * 1024 >= FAT32_MAX_FILE_BYTES:
        raise InvalidInputError(
            "chunk size",
            chunk_size_mb,
            f"must be below the FAT32 file limit of {FAT32_MAX_FILE_BYTES} bytes",
        )


def validate_timeout(timeout: float | None) -> None:
    if timeout is None:
        return
    if not isinstance(timeout, (int, float)) or isinstance(timeout, bool):
        raise InvalidInputError("command timeout", timeout, "must be a number of seconds")
    if timeout <= 0:
        raise InvalidInputError("command timeout", timeout, "must be positive")


def _require_text(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidInputError(name, value, "must be a non-empty string")


@dataclass(frozen=True)
class ProvisionConfig:
    """Values the pipeline needs, fixed for the duration of one run."""

    volume_label: str = DEFAULT_VOLUME_LABEL
    volumes_root: Path = Path(DEFAULT_VOLUMES_ROOT)
    device_prefix: str = DEFAULT_DEVICE_PREFIX
    image_extension: str = DEFAULT_IMAGE_EXTENSION
    excluded_path: str = DEFAULT_EXCLUDED_PATH
    chunk_size_mb: int = DEFAULT_CHUNK_SIZE_MB
    check_free_space: bool = False
    command_timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        validate_volume_label(self.volume_label)
        validate_chunk_size(self.chunk_size_mb)
        validate_timeout(self.command_timeout_seconds)
        if isinstance(self.volumes_root, str) and self.volumes_root:
            object.__setattr__(self, "volumes_root", Path(self.volumes_root))
        if not isinstance(self.volumes_root, Path):
            raise InvalidInputError("volumes root", self.volumes_root, "must be a path")
        _require_text("device prefix", self.device_prefix)
        _require_text("image extension", self.image_extension)
        _require_text("excluded path", self.excluded_path)
        if Path(self.excluded_path).is_absolute():
            raise InvalidInputError(
                "excluded path", self.excluded_path, "must be a relative path"
            )
        if not isinstance(self.check_free_space, bool):
            raise InvalidInputError(
                "check_free_space", self.check_free_space, "must be true or false"
            )

    @classmethod
    def from_settings(cls) -> ProvisionConfig:
        """Build the config from the settings file.

        Raises:
            InvalidInputError: If any setting has the wrong type or value
        """
        return cls(
            volume_label=get_setting("volume_label", DEFAULT_VOLUME_LABEL),
            volumes_root=get_setting("volumes_root", DEFAULT_VOLUMES_ROOT),
            device_prefix=get_setting("device_prefix", DEFAULT_DEVICE_PREFIX),
            image_extension=get_setting("image_extension", DEFAULT_IMAGE_EXTENSION),
            excluded_path=get_setting("excluded_path", DEFAULT_EXCLUDED_PATH),
            chunk_size_mb=get_setting("chunk_size_mb", DEFAULT_CHUNK_SIZE_MB),
            check_free_space=get_setting("check_free_space", False),
            command_timeout_seconds=get_setting("command_timeout_seconds"),
        )


load_settings()
