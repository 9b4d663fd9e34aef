"""
Pytest configuration and shared fixtures for win-usb-creator tests.

This module provides common fixtures and utilities used across all test modules.
No test runs a real external tool: every subprocess call is patched.
"""

import subprocess
from pathlib import Path

import pytest
from loguru import logger

from win_usb_creator.config.settings import ProvisionConfig
from win_usb_creator.domain.models import SourceImage, SourceMount, TargetVolume


FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Patch target shared by every module that shells out
SUBPROCESS_RUN = "win_usb_creator.storage.commands.subprocess.run"


def load_fixture(name: str) -> str:
    """Read a captured tool output from tests/fixtures."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def completed(command=None, returncode=0, stdout="", stderr=""):
    """Build a CompletedProcess as returned by subprocess.run."""
    return subprocess.CompletedProcess(
        args=command or [], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture(autouse=True)
def _reset_loguru():
    """Drop sinks added by setup_logging so they do not leak between tests."""
    yield
    logger.remove()


# ==============================================================================
# Filesystem Fixtures
# ==============================================================================


@pytest.fixture
def volumes_root(tmp_path) -> Path:
    """Stand-in for /Volumes."""
    root = tmp_path / "Volumes"
    root.mkdir()
    return root


@pytest.fixture
def iso_file(tmp_path) -> Path:
    """A small file with an .iso extension."""
    iso_path = tmp_path / "Win11.iso"
    iso_path.write_bytes(b"fake iso content" * 100)
    return iso_path


@pytest.fixture
def source_image(iso_file) -> SourceImage:
    return SourceImage(path=iso_file)


@pytest.fixture
def source_mount(volumes_root) -> SourceMount:
    """A mounted Windows ISO tree with a small install.wim."""
    root = volumes_root / "CCCOMA_X64FRE"
    (root / "sources").mkdir(parents=True)
    (root / "efi" / "boot").mkdir(parents=True)
    (root / "setup.exe").write_bytes(b"MZ" + b"\0" * 62)
    (root / "efi" / "boot" / "bootx64.efi").write_bytes(b"\0" * 128)
    (root / "sources" / "boot.wim").write_bytes(b"\0" * 256)
    (root / "sources" / "install.wim").write_bytes(b"MSWIM\0\0\0" + b"\0" * 1024)
    return SourceMount(path=root)


@pytest.fixture
def target_volume(volumes_root) -> TargetVolume:
    path = volumes_root / "WINUSB"
    path.mkdir()
    return TargetVolume(path=path, label="WINUSB")


@pytest.fixture
def provision_config(volumes_root) -> ProvisionConfig:
    return ProvisionConfig(volumes_root=volumes_root)


# ==============================================================================
# External Tool Fakes
# ==============================================================================

FOURTEEN_GB_KB = 14 * 1024 * 1024


class FakeTools:
    """Stand-in for diskutil, df, hdiutil, rsync and wimlib-imagex.

    Records every command and reproduces what the real tools leave on disk.
    Install with patch(SUBPROCESS_RUN, side_effect=tools).
    """

    def __init__(self, volumes_root, iso_name="CCCOMA_X64FRE", wim_bytes=5 * 1024**3):
        self.volumes_root = volumes_root
        self.iso_mount = volumes_root / iso_name
        self.wim_bytes = wim_bytes
        self.available_kb = FOURTEEN_GB_KB
        self.calls = []
        self.returncodes = {}

    def fail(self, tool, subcommand=None, returncode=1):
        self.returncodes[(tool, subcommand)] = returncode

    def _returncode(self, command):
        for key in ((command[0], command[1] if len(command) > 1 else None), (command[0], None)):
            if key in self.returncodes:
                return self.returncodes[key]
        return 0

    def __call__(self, command, **kwargs):
        self.calls.append(command)
        returncode = self._returncode(command)
        if returncode:
            return completed(command, returncode=returncode, stderr=f"{command[0]} failed")
        handler = getattr(self, "_" + command[0].replace("-", "_"))
        return handler(command)

    def _diskutil(self, command):
        if command[1] == "eraseDisk":
            (self.volumes_root / command[3]).mkdir()
        return completed(command)

    def _df(self, command):
        stdout = (
            "Filesystem 1024-blocks Used Available Capacity Mounted on\n"
            f"/dev/disk4s2 {FOURTEEN_GB_KB} 0 {self.available_kb} 0% {command[2]}\n"
        )
        return completed(command, stdout=stdout)

    def _hdiutil(self, command):
        if command[1] == "mount":
            sources = self.iso_mount / "sources"
            sources.mkdir(parents=True, exist_ok=True)
            (self.iso_mount / "setup.exe").write_bytes(b"MZ")
            (sources / "boot.wim").write_bytes(b"\0" * 64)
            with open(sources / "install.wim", "wb") as wim:
                wim.truncate(self.wim_bytes)
            return completed(command, stdout=f"/dev/disk5s2\tApple_HFS\t{self.iso_mount}\n")
        return completed(command)

    def _rsync(self, command):
        source, destination = Path(command[-2]), Path(command[-1])
        excluded = command[command.index("--exclude") + 1]
        for path in source.rglob("*"):
            relative = path.relative_to(source)
            if relative.as_posix() == excluded:
                continue
            if path.is_dir():
                (destination / relative).mkdir(parents=True, exist_ok=True)
            else:
                (destination / relative).parent.mkdir(parents=True, exist_ok=True)
                (destination / relative).write_bytes(path.read_bytes())
        return completed(command)

    def _wimlib_imagex(self, command):
        source, first = Path(command[2]), Path(command[3])
        chunk_bytes = int(command[4]) * 1024 * 1024
        count = -(-source.stat().st_size // chunk_bytes)
        first.write_bytes(b"chunk")
        for index in range(2, count + 1):
            (first.parent / f"{first.stem}{index}{first.suffix}").write_bytes(b"chunk")
        return completed(command)

    def tools_called(self):
        return [tuple(command[:2]) for command in self.calls]


@pytest.fixture
def tools(volumes_root) -> FakeTools:
    return FakeTools(volumes_root)
