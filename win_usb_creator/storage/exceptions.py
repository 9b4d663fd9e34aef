"""Custom exceptions for provisioning operations.

This module defines a hierarchy of exceptions for the provisioning pipeline so
each stage can fail with a specific, descriptive error.

Exception Hierarchy:
    ProvisioningError (base)
        ├── InputError
        │   ├── InvalidInputError
        │   ├── NotFoundError
        │   └── ToolNotFoundError
        ├── DiskError
        │   ├── UnmountFailedError
        │   └── FormatFailedError
        ├── CapacityError
        │   ├── CapacityQueryError
        │   ├── OutputParseError
        │   └── InsufficientSpaceError
        ├── MountError
        │   ├── MountFailedError
        │   └── MountPointNotFoundError
        ├── TransferError
        │   └── TransferFailedError
        └── SplitError
            ├── SourceObjectMissingError
            └── SplitFailedError

Usage:
    from win_usb_creator.storage.exceptions import InvalidInputError

    if not device.startswith("/dev/disk"):
        raise InvalidInputError("device", device, "must start with /dev/disk")
"""

from __future__ import annotations


class ProvisioningError(Exception):
    """Base exception for all provisioning operations."""


def _with_output(message: str, output: str | None) -> str:
    if output and output.strip():
        return f"{message}: {output.strip()}"
    return message


class InputError(ProvisioningError):
    """Base exception for operator input and environment errors."""


class InvalidInputError(InputError):
    """A path, device identifier or setting is malformed."""

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class NotFoundError(InputError):
    """A required file or directory does not exist."""

    def __init__(self, path: object, what: str = "Path"):
        self.path = path
        self.what = what
        super().__init__(f"{what} does not exist: {path}")


class ToolNotFoundError(InputError):
    """A required external tool is not installed."""

    def __init__(self, tools: list[str]):
        self.tools = tools
        super().__init__(f"Required tools not found on PATH: {', '.join(tools)}")


class DiskError(ProvisioningError):
    """Base exception for disk manager operations."""


class UnmountFailedError(DiskError):
    """Failed to unmount the partitions of the target device."""

    def __init__(self, device: str, output: str | None = None):
        self.device = device
        self.output = output
        super().__init__(_with_output(f"Failed to unmount {device}", output))


class FormatFailedError(DiskError):
    """Failed to erase and partition the target device."""

    def __init__(self, device: str, output: str | None = None):
        self.device = device
        self.output = output
        super().__init__(_with_output(f"Failed to format {device}", output))


class CapacityError(ProvisioningError):
    """Base exception for free space checks."""


class CapacityQueryError(CapacityError):
    """The filesystem usage query failed."""

    def __init__(self, path: object, output: str | None = None):
        self.path = path
        self.output = output
        super().__init__(_with_output(f"Failed to check free space on {path}", output))


class OutputParseError(CapacityError):
    """External tool output did not have the expected shape."""

    def __init__(self, reason: str, output: str):
        self.reason = reason
        self.output = output
        super().__init__(f"{reason}: {output!r}")


class InsufficientSpaceError(CapacityError):
    """Target volume is too small for the source content."""

    def __init__(self, target: object, available_bytes: int, required_bytes: int):
        self.target = target
        self.available_bytes = available_bytes
        self.required_bytes = required_bytes
        super().__init__(
            f"Target {target} ({available_bytes} bytes free) "
            f"is too small for source content ({required_bytes} bytes)"
        )


class MountError(ProvisioningError):
    """Base exception for image mount operations."""


class MountFailedError(MountError):
    """The image mounter exited with an error."""

    def __init__(self, image: object, output: str | None = None):
        self.image = image
        self.output = output
        super().__init__(_with_output(f"Failed to mount {image}", output))


class MountPointNotFoundError(MountError):
    """No usable mount point could be discovered."""

    def __init__(self, image: object, reason: str, output: str | None = None):
        self.image = image
        self.reason = reason
        self.output = output
        super().__init__(
            _with_output(f"Could not find mount point for {image} ({reason})", output)
        )


class TransferError(ProvisioningError):
    """Base exception for file transfer operations."""


class TransferFailedError(TransferError):
    """The transfer tool exited with an error."""

    def __init__(self, source: object, destination: object, returncode: int | None = None):
        self.source = source
        self.destination = destination
        self.returncode = returncode
        message = f"Failed to copy {source} to {destination}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        super().__init__(message)


class SplitError(ProvisioningError):
    """Base exception for splitting the oversized object."""


class SourceObjectMissingError(SplitError):
    """The object to split does not exist under the source mount."""

    def __init__(self, path: object):
        self.path = path
        super().__init__(f"Object to split not found at {path}")


class SplitFailedError(SplitError):
    """The split tool exited with an error."""

    def __init__(self, path: object, returncode: int | None = None):
        self.path = path
        self.returncode = returncode
        message = f"Failed to split {path}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        super().__init__(message)
