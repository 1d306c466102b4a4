"""
Trimmomatic log parser.

Parses the stderr log Trimmomatic writes for a single run, in either
single-end or paired-end mode.

Example input (paired-end):
    TrimmomaticPE: Started with arguments:
     -threads 4 -phred33 s_R1.fq.gz s_R2.fq.gz ... ILLUMINACLIP:TruSeq3-PE.fa:2:30:10 MINLEN:36
    Quality encoding detected as phred33
    Input Read Pairs: 10000 Both Surviving: 9000 (90.00%) Forward Only Surviving: 500 (5.00%) Reverse Only Surviving: 300 (3.00%) Dropped: 200 (2.00%)
    TrimmomaticPE: Completed successfully
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import polars as pl
from pydantic import BaseModel, ConfigDict, Field

from ngsreports.errors import FormatError

SE_PATTERN = re.compile(
    r"Input Reads: (\d+) Surviving: (\d+) \([\d.]+%\) Dropped: (\d+) \([\d.]+%\)",
)
PE_PATTERN = re.compile(
    r"Input Read Pairs: (\d+) Both Surviving: (\d+) \([\d.]+%\) "
    r"Forward Only Surviving: (\d+) \([\d.]+%\) "
    r"Reverse Only Surviving: (\d+) \([\d.]+%\) "
    r"Dropped: (\d+) \([\d.]+%\)",
)
STEP_PATTERN = re.compile(
    r"^(ILLUMINACLIP|SLIDINGWINDOW|MAXINFO|LEADING|TRAILING|CROP|HEADCROP|MINLEN|AVGQUAL):(.+)$",
)
# Options that consume the following token
VALUE_OPTIONS = {"-threads", "-trimlog", "-summary", "-basein", "-baseout"}


class TrimmomaticMetrics(BaseModel):
    """Read counts and trimming settings from one Trimmomatic run."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str | None = Field(default=None, alias="Filename")
    mode: str = Field(alias="Type", description="SE or PE")
    input_reads: int = Field(ge=0, alias="Input_Reads")
    surviving: int | None = Field(default=None, ge=0, alias="Surviving")
    both_surviving: int | None = Field(default=None, ge=0, alias="Both_Surviving")
    forward_only_surviving: int | None = Field(
        default=None,
        ge=0,
        alias="Forward_Only_Surviving",
    )
    reverse_only_surviving: int | None = Field(
        default=None,
        ge=0,
        alias="Reverse_Only_Surviving",
    )
    dropped: int = Field(ge=0, alias="Dropped")
    illumina_clip: str | None = Field(default=None, alias="Illumina_Clip")
    sliding_window: str | None = Field(default=None, alias="Sliding_Window")
    max_info: str | None = Field(default=None, alias="Max_Info")
    leading: int | None = Field(default=None, alias="Leading")
    trailing: int | None = Field(default=None, alias="Trailing")
    crop: int | None = Field(default=None, alias="Crop")
    headcrop: int | None = Field(default=None, alias="Headcrop")
    minlen: int | None = Field(default=None, alias="Min_Len")
    avgqual: int | None = Field(default=None, alias="Avg_Qual")


STEP_FIELDS = {
    "ILLUMINACLIP": "illumina_clip",
    "SLIDINGWINDOW": "sliding_window",
    "MAXINFO": "max_info",
    "LEADING": "leading",
    "TRAILING": "trailing",
    "CROP": "crop",
    "HEADCROP": "headcrop",
    "MINLEN": "minlen",
    "AVGQUAL": "avgqual",
}


def parse_arguments(arguments: str) -> tuple[str | None, dict[str, str]]:
    """
    Recover the first input file and the trimming steps from the argument line.

    Returns:
        Tuple of (first input filename, model field -> step argument)
    """
    tokens = arguments.split()
    filename = None
    steps: dict[str, str] = {}
    skip = False
    for token in tokens:
        if skip:
            skip = False
            continue
        if token in VALUE_OPTIONS:
            skip = True
            continue
        step = STEP_PATTERN.match(token)
        if step:
            steps[STEP_FIELDS[step.group(1)]] = step.group(2)
        elif not token.startswith("-") and filename is None:
            filename = token.rsplit("/", 1)[-1]
    return filename, steps


def parse_lines(lines: Sequence[str], filename: str | None = None) -> TrimmomaticMetrics:
    """
    Parse the lines of one Trimmomatic log.

    Args:
        lines: Log lines
        filename: Overrides the input file recovered from the argument line

    Raises:
        FormatError: No read-count summary line is present
    """
    arguments = ""
    for idx, line in enumerate(lines):
        if "Started with arguments" in line:
            arguments = lines[idx + 1] if idx + 1 < len(lines) else ""
            break

    input_file, steps = parse_arguments(arguments)
    values: dict[str, object] = {"filename": filename or input_file, **steps}

    for line in lines:
        pe = PE_PATTERN.search(line)
        if pe:
            values |= {
                "mode": "PE",
                "input_reads": int(pe.group(1)),
                "both_surviving": int(pe.group(2)),
                "forward_only_surviving": int(pe.group(3)),
                "reverse_only_surviving": int(pe.group(4)),
                "dropped": int(pe.group(5)),
            }
            break
        se = SE_PATTERN.search(line)
        if se:
            values |= {
                "mode": "SE",
                "input_reads": int(se.group(1)),
                "surviving": int(se.group(2)),
                "dropped": int(se.group(3)),
            }
            break
    else:
        raise FormatError("No read-count summary line found", module="Trimmomatic")

    return TrimmomaticMetrics(**values)


def parse(lines: Sequence[str], filename: str | None = None) -> pl.DataFrame:
    """Parse one Trimmomatic log into a one-row table."""
    metrics = parse_lines(lines, filename)
    schema = {
        "Filename": pl.Utf8,
        "Type": pl.Utf8,
        "Input_Reads": pl.Int64,
        "Surviving": pl.Int64,
        "Both_Surviving": pl.Int64,
        "Forward_Only_Surviving": pl.Int64,
        "Reverse_Only_Surviving": pl.Int64,
        "Dropped": pl.Int64,
        "Illumina_Clip": pl.Utf8,
        "Sliding_Window": pl.Utf8,
        "Max_Info": pl.Utf8,
        "Leading": pl.Int64,
        "Trailing": pl.Int64,
        "Crop": pl.Int64,
        "Headcrop": pl.Int64,
        "Min_Len": pl.Int64,
        "Avg_Qual": pl.Int64,
    }
    return pl.DataFrame([metrics.model_dump(by_alias=True)], schema=schema)
