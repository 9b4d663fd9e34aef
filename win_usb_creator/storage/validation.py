"""Validation of operator input before anything destructive runs.

Both resolvers raise specific exceptions from the exceptions module rather
than returning booleans, so the caller can report exactly what was wrong.

Example:
    from win_usb_creator.storage.validation import resolve_target_device

    try:
        device = resolve_target_device("/dev/disk4")
    except InvalidInputError as error:
        print(error)
"""

from __future__ import annotations

import os
from pathlib import Path

from win_usb_creator.config.settings import DEFAULT_DEVICE_PREFIX, DEFAULT_IMAGE_EXTENSION
from win_usb_creator.domain.models import SourceImage, TargetDevice
from win_usb_creator.storage.exceptions import InvalidInputError, NotFoundError


def _expand_home(raw_path: str) -> str:
    """Expand a leading ``~`` to the current user's home directory."""
    if raw_path == "~" or raw_path.startswith("~/"):
        return os.environ.get("HOME", str(Path.home())) + raw_path[1:]
    return raw_path


def resolve_source_image(
    raw_path: str, extension: str = DEFAULT_IMAGE_EXTENSION
) -> SourceImage:
    """Validate the image path entered by the operator.

    Args:
        raw_path: Path as typed, may start with ``~``
        extension: Required file extension (e.g., ".iso")

    Returns:
        SourceImage with an absolute path

    Raises:
        InvalidInputError: If the path is empty or has the wrong extension
        NotFoundError: If nothing exists at the path
    """
    path_text = _expand_home((raw_path or "").strip())
    if not path_text:
        raise InvalidInputError("image path", raw_path, "no path given")
    if not path_text.endswith(extension):
        raise InvalidInputError("image path", path_text, f"file is not a {extension} image")

    path = Path(path_text)
    if not path.exists():
        raise NotFoundError(path, what="Image file")
    return SourceImage(path=path.absolute())


def resolve_target_device(
    raw_identifier: str, prefix: str = DEFAULT_DEVICE_PREFIX
) -> TargetDevice:
    """Validate the device identifier entered by the operator.

    Only the naming convention is checked; whether the device exists and is
    removable is left to the disk manager. Shell metacharacters and spaces
    are rejected because the identifier is echoed back in the erase prompt
    and log lines, where a pasted command would be misleading.

    Raises:
        InvalidInputError: If the identifier lacks the raw-disk prefix or
            contains shell metacharacters
    """
    identifier = (raw_identifier or "").strip()
    if not identifier.startswith(prefix):
        raise InvalidInputError(
            "device identifier", identifier, f"must start with {prefix}"
        )
    if any(char in identifier for char in [";", "&", "|", "$", "`", " "]):
        raise InvalidInputError(
            "device identifier", identifier, "contains invalid characters"
        )
    return TargetDevice(identifier=identifier)
