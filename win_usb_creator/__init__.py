"""Build a bootable Windows installer USB stick from an ISO on macOS."""

from .__version__ import __version__

__all__ = ["__version__"]
