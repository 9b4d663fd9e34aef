"""Tests for storage/images.py - hdiutil mount and unmount."""

from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import SUBPROCESS_RUN, completed, load_fixture

from win_usb_creator.domain.models import SourceMount
from win_usb_creator.storage import images
from win_usb_creator.storage.exceptions import MountFailedError, MountPointNotFoundError


def hdiutil_output(mount_path):
    return (
        "/dev/disk5          \tApple_partition_scheme         \t\n"
        "/dev/disk5s1        \tApple_partition_map            \t\n"
        f"/dev/disk5s2        \tApple_HFS                      \t{mount_path}\n"
    )


class TestMountImage:
    @patch(SUBPROCESS_RUN)
    def test_returns_discovered_mount_point(self, mock_run, source_image, source_mount, volumes_root):
        mock_run.return_value = completed(stdout=hdiutil_output(source_mount.path))

        result = images.mount_image(source_image, volumes_root)

        assert result == source_mount
        assert mock_run.call_args[0][0] == ["hdiutil", "mount", str(source_image.path)]

    @patch(SUBPROCESS_RUN)
    def test_first_volume_wins(self, mock_run, source_image, volumes_root):
        first = volumes_root / "FOO"
        second = volumes_root / "BAR"
        first.mkdir()
        second.mkdir()
        mock_run.return_value = completed(stdout=f"mounted at {first} ... {second}\n")

        assert images.mount_image(source_image, volumes_root).path == first

    @patch(SUBPROCESS_RUN)
    def test_mount_point_found_in_stderr(self, mock_run, source_image, source_mount, volumes_root):
        mock_run.return_value = completed(stdout="", stderr=hdiutil_output(source_mount.path))

        assert images.mount_image(source_image, volumes_root) == source_mount

    @patch(SUBPROCESS_RUN)
    def test_tool_failure(self, mock_run, source_image):
        mock_run.return_value = completed(returncode=1, stderr="hdiutil: mount failed - no mountable file systems")

        with pytest.raises(MountFailedError, match="no mountable file systems"):
            images.mount_image(source_image)

    @patch(SUBPROCESS_RUN)
    def test_no_mount_point_in_output(self, mock_run, source_image):
        mock_run.return_value = completed(stdout="/dev/disk5\tGUID_partition_scheme\n")

        with pytest.raises(MountPointNotFoundError, match="no mount point in output"):
            images.mount_image(source_image)

    @patch(SUBPROCESS_RUN)
    def test_reported_mount_point_missing(self, mock_run, source_image):
        mock_run.return_value = completed(stdout=load_fixture("hdiutil_mount_win11.txt"))

        # /Volumes/CCCOMA_X64FRE_EN-GB_DV9 does not exist on the test host
        with pytest.raises(MountPointNotFoundError, match="does not exist"):
            images.mount_image(source_image, "/Volumes")


class TestUnmountImage:
    @patch(SUBPROCESS_RUN)
    def test_success(self, mock_run, source_mount):
        mock_run.return_value = completed()

        assert images.unmount_image(source_mount) is None
        assert mock_run.call_args[0][0] == ["hdiutil", "unmount", str(source_mount.path)]

    @patch(SUBPROCESS_RUN)
    def test_failure_returns_warning(self, mock_run):
        mock_run.return_value = completed(returncode=16, stderr="Resource busy")

        warning = images.unmount_image(SourceMount(path=Path("/Volumes/CCCOMA")))

        assert warning == "Failed to unmount /Volumes/CCCOMA: Resource busy"
