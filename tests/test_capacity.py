"""Tests for storage/capacity.py - free space checks."""

from unittest.mock import patch

import pytest
from conftest import SUBPROCESS_RUN, completed, load_fixture

from win_usb_creator.storage import capacity
from win_usb_creator.storage.exceptions import (
    CapacityQueryError,
    InsufficientSpaceError,
    OutputParseError,
)


class TestAvailableBytes:
    @patch(SUBPROCESS_RUN)
    def test_runs_df_and_parses(self, mock_run):
        mock_run.return_value = completed(stdout=load_fixture("df_k_winusb.txt"))

        result = capacity.available_bytes("/Volumes/WINUSB")

        assert result == 15323744 * 1024
        assert mock_run.call_args[0][0] == ["df", "-k", "/Volumes/WINUSB"]

    @patch(SUBPROCESS_RUN)
    def test_df_failure(self, mock_run):
        mock_run.return_value = completed(
            returncode=1, stderr="df: /Volumes/WINUSB: No such file or directory"
        )

        with pytest.raises(CapacityQueryError, match="No such file"):
            capacity.available_bytes("/Volumes/WINUSB")

    @patch(SUBPROCESS_RUN)
    def test_unexpected_output(self, mock_run):
        mock_run.return_value = completed(stdout="Filesystem 1K-blocks Used Available\n")

        with pytest.raises(OutputParseError):
            capacity.available_bytes("/Volumes/WINUSB")

    @patch(SUBPROCESS_RUN, side_effect=FileNotFoundError("df"))
    def test_missing_tool(self, _mock_run):
        with pytest.raises(CapacityQueryError):
            capacity.available_bytes("/Volumes/WINUSB")


class TestEnsureFits:
    def test_tree_size_counts_nested_files(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "one.bin").write_bytes(b"x" * 100)
        (tmp_path / "two.bin").write_bytes(b"x" * 28)

        assert capacity.tree_size_bytes(tmp_path) == 128

    def test_fits(self, source_mount):
        required = capacity.tree_size_bytes(source_mount.path)
        assert capacity.ensure_fits(source_mount.path, "/Volumes/WINUSB", required) == required

    def test_does_not_fit(self, source_mount):
        with pytest.raises(InsufficientSpaceError) as exc_info:
            capacity.ensure_fits(source_mount.path, "/Volumes/WINUSB", 10)

        assert exc_info.value.available_bytes == 10
        assert exc_info.value.required_bytes > 10
