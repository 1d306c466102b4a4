"""
Per-module table construction for FastQC reports.

Each FastQC module is a tab-separated block whose first `#` line names the
columns. This module turns those raw lines into typed polars frames. Known
modules carry a column spec so numeric fields are validated strictly; unknown
modules (newer FastQC releases, custom modules) are kept as text columns.

Example module block:
    >>Per base sequence quality	pass
    #Base	Mean	Median	Lower Quartile	Upper Quartile	10th Percentile	90th Percentile
    1	32.5	34.0	31.0	34.0	27.0	34.0
    2-3	32.1	34.0	31.0	34.0	26.0	34.0
    >>END_MODULE
"""

from __future__ import annotations

import re

import polars as pl

from ngsreports.errors import FormatError
from ngsreports.schema import module_key

BASIC_STATISTICS = "Basic Statistics"
DEDUP_HEADER = "Total Deduplicated Percentage"
DEDUP_MODULE = "Total_Deduplicated_Percentage"

# Columns that stay text; everything else in a known module is Float64 unless
# listed under INT_COLUMNS.
TEXT_COLUMNS: dict[str, set[str]] = {
    "Per_base_sequence_quality": {"Base"},
    "Per_tile_sequence_quality": {"Base"},
    "Per_sequence_quality_scores": set(),
    "Per_base_sequence_content": {"Base"},
    "Per_sequence_GC_content": set(),
    "Per_base_N_content": {"Base"},
    "Sequence_Length_Distribution": {"Length"},
    "Sequence_Duplication_Levels": {"Duplication_Level"},
    "Overrepresented_sequences": {"Sequence", "Possible_Source"},
    "Adapter_Content": {"Position"},
    "Kmer_Content": {"Sequence", "Max_Obs/Exp_Position"},
}

INT_COLUMNS: dict[str, set[str]] = {
    "Per_tile_sequence_quality": {"Tile"},
    "Per_sequence_quality_scores": {"Quality"},
    "Per_sequence_GC_content": {"GC_Content"},
    "Overrepresented_sequences": {"Count"},
    "Kmer_Content": {"Count"},
}

# Expected header columns for known modules, used for empty modules (FastQC
# omits the header when e.g. no overrepresented sequences were found).
EMPTY_COLUMNS: dict[str, list[str]] = {
    "Overrepresented_sequences": ["Sequence", "Count", "Percentage", "Possible_Source"],
    "Kmer_Content": [
        "Sequence",
        "Count",
        "PValue",
        "Obs/Exp_Max",
        "Max_Obs/Exp_Position",
    ],
}

BASIC_STATISTICS_INT = {"Total_Sequences", "Sequences_flagged_as_poor_quality", "%GC"}

RANGE_PATTERN = re.compile(r"^(\d+)(?:-(\d+))?$")


def column_name(header: str) -> str:
    """FastQC header text to table column name (`Lower Quartile` -> `Lower_Quartile`)."""
    return header.strip().replace(" ", "_")


def column_dtype(key: str, column: str) -> pl.DataType:
    """Polars dtype for a column of a module, text for unknown modules."""
    if key not in TEXT_COLUMNS:
        return pl.Utf8
    if column in TEXT_COLUMNS[key]:
        return pl.Utf8
    if column in INT_COLUMNS.get(key, set()):
        return pl.Int64
    return pl.Float64


def _convert(value: str, dtype: pl.DataType) -> str | int | float:
    if dtype == pl.Int64:
        return int(value)
    if dtype == pl.Float64:
        return float(value)
    return value


def build_table(
    module: str,
    lines: list[str] | tuple[str, ...],
    filename: str,
    first_line: int = 1,
) -> pl.DataFrame:
    """
    Build a typed table from the raw lines of one module.

    Args:
        module: FastQC display name of the module (e.g. "Adapter Content")
        lines: Module body lines, `#` header included, markers excluded
        filename: Value for the leading Filename column
        first_line: Line number of `lines[0]` in the source, for error messages

    Returns:
        DataFrame with Filename followed by the module's columns

    Raises:
        FormatError: Missing header, wrong field count or unparsable number
    """
    key = module_key(module)
    header_idx = None
    for idx, line in enumerate(lines):
        if line.startswith("#"):
            header_idx = idx
        else:
            break

    if header_idx is None:
        if lines:
            raise FormatError(
                "Module data without a header line",
                module=module,
                line=first_line,
            )
        columns = EMPTY_COLUMNS.get(key, [])
        schema = {"Filename": pl.Utf8} | {c: column_dtype(key, c) for c in columns}
        return pl.DataFrame(schema=schema)

    columns = [column_name(h) for h in lines[header_idx][1:].split("\t")]
    dtypes = [column_dtype(key, c) for c in columns]

    rows = []
    for offset, line in enumerate(lines[header_idx + 1 :], start=header_idx + 1):
        lineno = first_line + offset
        fields = line.split("\t")
        if len(fields) != len(columns):
            raise FormatError(
                f"Expected {len(columns)} fields, found {len(fields)}",
                module=module,
                line=lineno,
            )
        row: list[str | int | float] = [filename]
        for column, dtype, value in zip(columns, dtypes, fields):
            try:
                row.append(_convert(value, dtype))
            except ValueError:
                raise FormatError(
                    f"Cannot parse '{value}' as {dtype}",
                    module=module,
                    field=column,
                    line=lineno,
                ) from None
        rows.append(row)

    schema = {"Filename": pl.Utf8} | dict(zip(columns, dtypes))
    return pl.DataFrame(rows, schema=schema, orient="row")


def build_basic_statistics(
    lines: list[str] | tuple[str, ...],
    first_line: int = 1,
) -> pl.DataFrame:
    """
    Reshape the Basic Statistics Measure/Value block into a one-row table.

    Sequence length ("35-151" or "151") is additionally split into integer
    Shortest_sequence and Longest_sequence columns.
    """
    measures: dict[str, str] = {}
    for offset, line in enumerate(lines):
        if line.startswith("#"):
            continue
        measure, sep, value = line.partition("\t")
        if not sep:
            raise FormatError(
                "Expected a Measure<TAB>Value pair",
                module=BASIC_STATISTICS,
                line=first_line + offset,
            )
        measures[column_name(measure)] = value

    if "Filename" not in measures:
        raise FormatError(
            "Missing Filename measure",
            module=BASIC_STATISTICS,
            field="Filename",
        )

    data: dict[str, object] = {}
    schema: dict[str, pl.DataType] = {}
    for column, value in measures.items():
        if column in BASIC_STATISTICS_INT:
            try:
                data[column] = int(value)
            except ValueError:
                raise FormatError(
                    f"Cannot parse '{value}' as an integer",
                    module=BASIC_STATISTICS,
                    field=column,
                ) from None
            schema[column] = pl.Int64
        else:
            data[column] = value
            schema[column] = pl.Utf8

    if "Sequence_length" in measures:
        start, end = parse_range(
            measures["Sequence_length"],
            module=BASIC_STATISTICS,
            field="Sequence_length",
        )
        data["Shortest_sequence"] = start
        data["Longest_sequence"] = end
        schema["Shortest_sequence"] = pl.Int64
        schema["Longest_sequence"] = pl.Int64

    return pl.DataFrame([data], schema=schema)


def build_dedup_table(value: str, filename: str, line: int | None = None) -> pl.DataFrame:
    """One-row table for the `#Total Deduplicated Percentage` header value."""
    try:
        percent = float(value)
    except ValueError:
        raise FormatError(
            f"Cannot parse '{value}' as a percentage",
            module="Sequence Duplication Levels",
            field=DEDUP_HEADER,
            line=line,
        ) from None
    return pl.DataFrame(
        {"Filename": [filename], "Total": [percent]},
        schema={"Filename": pl.Utf8, "Total": pl.Float64},
    )


def parse_range(
    value: str,
    module: str | None = None,
    field: str | None = None,
) -> tuple[int, int]:
    """Parse "35-36" into (35, 36) and "7" into (7, 7)."""
    match = RANGE_PATTERN.match(value.strip())
    if match is None:
        raise FormatError(
            f"Cannot parse '{value}' as a position or range",
            module=module,
            field=field,
        )
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    return start, end
