"""
AdapterRemoval settings-file parser.

Example input:
    AdapterRemoval ver. 2.3.1
    Trimming of paired-end reads

    [Trimming statistics]
    Total number of read pairs: 10000
    Number of unaligned read pairs: 5000
    Number of reads with adapters[1]: 4000
    Number of retained reads: 19980
    Average length of retained reads: 90.1
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import polars as pl
from pydantic import BaseModel, Field

from ngsreports.errors import FormatError
from ngsreports.logs.utils import column_name, parse_number

VERSION_PATTERN = re.compile(r"AdapterRemoval ver\. (\S+)")
MODE_PATTERN = re.compile(r"Trimming of (single|paired)-end reads")
SECTION_PATTERN = re.compile(r"^\[(.+)\]$")
STATISTICS = "Trimming statistics"


class AdapterRemovalMetrics(BaseModel):
    filename: str | None = None
    version: str
    paired: bool
    stats: dict[str, int | float] = Field(default_factory=dict)


def parse_lines(
    lines: Sequence[str],
    filename: str | None = None,
) -> AdapterRemovalMetrics:
    """
    Parse the lines of one AdapterRemoval settings file.

    The file does not name its input, so `filename` is taken as given.

    Raises:
        FormatError: The version line or the trimming statistics are missing
    """
    version = None
    paired = False
    section = None
    stats: dict[str, int | float] = {}
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if version is None and (match := VERSION_PATTERN.search(line)):
            version = match.group(1)
            continue
        if match := MODE_PATTERN.search(line):
            paired = match.group(1) == "paired"
            continue
        if match := SECTION_PATTERN.match(line):
            section = match.group(1)
            continue
        if section != STATISTICS or ":" not in line:
            continue
        key, value = line.rsplit(":", 1)
        try:
            stats[column_name(key)] = parse_number(value)
        except ValueError as exc:
            raise FormatError(
                f"Cannot parse '{value.strip()}' as a number",
                module="AdapterRemoval",
                field=key,
                line=number,
            ) from exc

    if version is None:
        raise FormatError("No AdapterRemoval version line found", module="AdapterRemoval")
    if not stats:
        raise FormatError(f"No [{STATISTICS}] section found", module="AdapterRemoval")

    return AdapterRemovalMetrics(
        filename=filename,
        version=version,
        paired=paired,
        stats=stats,
    )


def parse(lines: Sequence[str], filename: str | None = None) -> pl.DataFrame:
    """Parse one AdapterRemoval settings file into a one-row table."""
    metrics = parse_lines(lines, filename)
    row = {
        "Filename": metrics.filename,
        "Version": metrics.version,
        "Paired": metrics.paired,
        **metrics.stats,
    }
    return pl.DataFrame([row]).with_columns(pl.col("Filename").cast(pl.Utf8))
