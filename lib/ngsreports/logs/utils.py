"""Helpers shared by the trimming-log parsers."""

from __future__ import annotations

import re
from pathlib import Path

from ngsreports.errors import ReportIOError


def read_log_lines(path: Path | str) -> list[str]:
    """
    Read a log file into a list of lines without trailing newlines.

    Raises:
        ReportIOError: The file is missing or unreadable
    """
    try:
        with open(path, encoding="utf8", errors="replace") as handle:
            return handle.read().splitlines()
    except OSError as exc:
        msg = f"Cannot read log file {path}: {exc}"
        raise ReportIOError(msg) from exc


def column_name(key: str) -> str:
    """
    Turn a log message key into a column name.

    "Reads written (passing filters)" -> "Reads_written_passing_filters"
    "Number of reads with adapters[1]" -> "Number_of_reads_with_adapters_1"
    """
    return re.sub(r"[^0-9A-Za-z%]+", "_", key.strip()).strip("_")


def parse_number(value: str) -> int | float:
    """Parse "1,234" as 1234 and "90.1" as 90.1."""
    cleaned = value.replace(",", "").strip()
    try:
        return int(cleaned)
    except ValueError:
        return float(cleaned)
