"""
Cutadapt log parser.

Reads the version, the input file (last command-line argument) and every
count in the "=== Summary ===" block. Indented "Read 1"/"Read 2" lines are
prefixed with the line they belong to.

Example input:
    This is cutadapt 4.4 with Python 3.10.12
    Command line parameters: -a AGATCGGAAGAGC -o out.fastq.gz reads.fastq.gz

    === Summary ===

    Total reads processed:                  10,000
    Reads with adapters:                     2,500 (25.0%)
    Reads written (passing filters):         9,988 (99.9%)

    Total basepairs processed:     1,000,000 bp
    Total written (filtered):        980,000 bp (98.0%)
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import polars as pl
from pydantic import BaseModel, Field

from ngsreports.errors import FormatError
from ngsreports.logs.utils import column_name, parse_number

VERSION_PATTERN = re.compile(r"This is cutadapt (\S+)")
SUMMARY_LINE = re.compile(r"^(\s*)([^:]+):\s+([\d,.]+)(?:\s*bp)?")
MATE_KEY = re.compile(r"^Read [12]$")


class CutadaptMetrics(BaseModel):
    """Summary counts from one cutadapt run."""

    filename: str | None = None
    version: str
    paired: bool = Field(description="Paired-end input")
    stats: dict[str, int | float] = Field(default_factory=dict)


def parse_lines(lines: Sequence[str], filename: str | None = None) -> CutadaptMetrics:
    """
    Parse the lines of one cutadapt log.

    Raises:
        FormatError: The version line or the summary block is missing
    """
    version = None
    input_file = None
    summary_start = None
    for idx, line in enumerate(lines):
        if version is None and (match := VERSION_PATTERN.search(line)):
            version = match.group(1)
        elif line.startswith("Command line parameters:"):
            args = line.split(":", 1)[1].split()
            if args:
                input_file = args[-1].rsplit("/", 1)[-1]
        elif line.strip() == "=== Summary ===":
            summary_start = idx + 1
            break

    if version is None:
        raise FormatError("No cutadapt version line found", module="cutadapt")
    if summary_start is None:
        raise FormatError("No '=== Summary ===' block found", module="cutadapt")

    stats: dict[str, int | float] = {}
    parent = ""
    for offset, line in enumerate(lines[summary_start:], start=summary_start + 1):
        if line.startswith("==="):
            break
        match = SUMMARY_LINE.match(line)
        if not match:
            continue
        indent, key, value = match.groups()
        key = key.strip()
        if indent and MATE_KEY.match(key):
            key = f"{parent} {key}"
        elif not indent:
            parent = key
        try:
            stats[column_name(key)] = parse_number(value)
        except ValueError as exc:
            raise FormatError(
                f"Cannot parse '{value}' as a number",
                module="cutadapt",
                field=key,
                line=offset,
            ) from exc

    return CutadaptMetrics(
        filename=filename or input_file,
        version=version,
        paired="Total_read_pairs_processed" in stats,
        stats=stats,
    )


def parse(lines: Sequence[str], filename: str | None = None) -> pl.DataFrame:
    """Parse one cutadapt log into a one-row table."""
    metrics = parse_lines(lines, filename)
    row = {
        "Filename": metrics.filename,
        "Version": metrics.version,
        "Paired": metrics.paired,
        **metrics.stats,
    }
    return pl.DataFrame([row]).with_columns(pl.col("Filename").cast(pl.Utf8))
