"""Parsers for the text output of external tools.

These formats are not versioned by their tools. Everything that depends on a
column layout or output wording lives here so a tool update only touches
this module and its fixtures in ``tests/fixtures``.

Formats:
    df -k:
        Filesystem 1024-blocks Used Available Capacity ... Mounted on
        /dev/disk4s2 15324256 512 15323744 1% ... /Volumes/WINUSB

    hdiutil mount:
        /dev/disk5          Apple_partition_scheme
        /dev/disk5s1        Apple_partition_map
        /dev/disk5s2        Apple_HFS      /Volumes/CCCOMA_X64FRE
"""

from __future__ import annotations

from win_usb_creator.storage.exceptions import OutputParseError


DF_AVAILABLE_FIELD = 3
DF_BLOCK_SIZE = 1024


def parse_df_available_bytes(output: str) -> int:
    """Return the available bytes reported by ``df -k``.

    Reads the fourth whitespace-separated field of the second line as KiB.

    Raises:
        OutputParseError: If the output has no data line, the data line has
            fewer than four fields, or the field is not an integer
    """
    lines = output.split("\n")
    if len(lines) < 2:
        raise OutputParseError("df output has no data line", output)
    fields = lines[1].split()
    if len(fields) <= DF_AVAILABLE_FIELD:
        raise OutputParseError("df data line has fewer than 4 fields", lines[1])
    try:
        available_kb = int(fields[DF_AVAILABLE_FIELD])
    except ValueError as error:
        raise OutputParseError(
            "df available field is not an integer", fields[DF_AVAILABLE_FIELD]
        ) from error
    return available_kb * DF_BLOCK_SIZE


def find_mount_point(output: str, prefix: str) -> str | None:
    """Return the first whitespace-delimited token starting with ``prefix``.

    Only the first match is returned; images that mount several volumes
    yield their first volume.
    """
    for line in output.splitlines():
        for token in line.split():
            if token.startswith(prefix):
                return token
    return None
