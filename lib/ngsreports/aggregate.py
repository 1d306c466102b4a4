"""
Cross-file aggregation of FastQC module tables.

Functions here combine per-report tables into one frame keyed by Filename
and reshape them for plotting. All functions return new frames; inputs are
never modified.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

import polars as pl
from loguru import logger

from ngsreports.collection import ReportInput, as_collection
from ngsreports.errors import AggregationError, FormatError, QCModuleNotFoundError
from ngsreports.parsers.modules import RANGE_PATTERN
from ngsreports.schema import module_key

DEFAULT_SUFFIX = re.compile(
    r"(_fastqc\.zip|_fastqc|\.(fastq|fq|bam|sam|cram|txt)(\.gz|\.bz2)?)$",
    re.IGNORECASE,
)


def get_module(x: ReportInput, module: str) -> pl.DataFrame:
    """
    Concatenate one module's table across every report, in collection order.

    Reports that lack the module are skipped; FastQC can be configured to
    omit modules.

    Args:
        x: Reports, a path or paths to reports
        module: Module display name ("Per base sequence quality") or
                underscore key ("Per_base_sequence_quality")

    Returns:
        DataFrame with a leading Filename column

    Raises:
        QCModuleNotFoundError: No report contains the module
        AggregationError: Reports disagree on the module's columns or types
    """
    collection = as_collection(x)
    frames: list[pl.DataFrame] = []
    for report in collection:
        table = report.get_table(module)
        if table is None:
            logger.debug(f"{report.filename} has no '{module}' module")
            continue
        frames.append(table)

    if not frames:
        raise QCModuleNotFoundError(module_key(module))

    reference = frames[0].schema
    for frame in frames[1:]:
        if frame.schema != reference:
            msg = (
                f"Inconsistent '{module_key(module)}' columns for "
                f"{frame['Filename'][0] if len(frame) else 'an empty table'}: "
                f"{list(frame.schema.items())} vs {list(reference.items())}"
            )
            raise AggregationError(msg)

    return pl.concat(frames, how="vertical")


def get_summary(x: ReportInput) -> pl.DataFrame:
    """
    Return the PASS/WARN/FAIL status of every module for every report.

    Returns:
        DataFrame with columns: Filename, Category, Status
    """
    collection = as_collection(x)
    rows = [
        {"Filename": report.filename, "Category": category, "Status": status.value}
        for report in collection
        for category, status in report.summary.items()
    ]
    schema = {
        "Filename": pl.Utf8,
        "Category": pl.Utf8,
        "Status": pl.Utf8,
    }
    return pl.DataFrame(rows, schema=schema)


def make_labels(
    filenames: Iterable[str],
    labels: Mapping[str, str] | None = None,
    pattern: re.Pattern[str] | str = DEFAULT_SUFFIX,
) -> dict[str, str]:
    """
    Build a one-to-one filename to display-label mapping.

    Args:
        filenames: Filenames to label
        labels: Optional caller-supplied labels; must cover every filename
        pattern: Suffix stripped from filenames when no labels are given

    Returns:
        Dict mapping filename to label, in filename order

    Raises:
        ValueError: Missing override entries or labels that are not unique
    """
    names = list(dict.fromkeys(filenames))
    if labels is not None:
        missing = [name for name in names if name not in labels]
        if missing:
            msg = f"Labels missing for: {', '.join(missing)}"
            raise ValueError(msg)
        mapping = {name: str(labels[name]) for name in names}
    else:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        mapping = {name: regex.sub("", name) for name in names}

    counts = Counter(mapping.values())
    duplicated = [label for label, count in counts.items() if count > 1]
    if duplicated:
        msg = f"Labels are not unique: {', '.join(sorted(duplicated))}"
        raise ValueError(msg)
    return mapping


def apply_labels(
    df: pl.DataFrame,
    labels: Mapping[str, str],
    column: str = "Filename",
) -> pl.DataFrame:
    """
    Replace filenames with labels; rows whose filename has no label are dropped.
    """
    return df.filter(pl.col(column).is_in(list(labels))).with_columns(
        pl.col(column).replace_strict(dict(labels), return_dtype=pl.Utf8),
    )


def split_base(df: pl.DataFrame, column: str = "Base") -> pl.DataFrame:
    """
    Add integer Start/End columns derived from a position or range column.

    "35-36" gives Start 35, End 36; "7" gives Start 7, End 7. The original
    column is kept unchanged.

    Raises:
        FormatError: A value is neither a position nor a range
    """
    if column not in df.columns:
        msg = f"Column '{column}' not found"
        raise FormatError(msg, field=column)

    bad = df.filter(~pl.col(column).str.contains(RANGE_PATTERN.pattern))
    if len(bad):
        msg = f"Cannot parse '{bad[column][0]}' as a position or range"
        raise FormatError(msg, field=column)

    parts = pl.col(column).str.split("-")
    return df.with_columns(
        parts.list.first().cast(pl.Int64).alias("Start"),
        parts.list.last().cast(pl.Int64).alias("End"),
    )


def fill_binned_positions(
    df: pl.DataFrame,
    value_cols: Sequence[str],
    filename_col: str = "Filename",
) -> pl.DataFrame:
    """
    Expand binned positions to one row per integer position.

    FastQC reports ranges ("10-14") once reads pass its display threshold.
    For every filename, positions 1..max(End) are generated, sorted, and
    each value column is filled from the last observed position
    (carry-forward). Positions before the first observation remain null.

    Args:
        df: Table with Filename, Start and the value columns; End (or a Base
            column to derive Start/End from) is used when present
        value_cols: Columns to carry forward

    Returns:
        DataFrame with columns: Filename, Start, *value_cols
    """
    if "Start" not in df.columns:
        df = split_base(df)
    end_col = "End" if "End" in df.columns else "Start"
    keep = [filename_col, "Start", *value_cols]

    if len(df) == 0:
        return df.select(keep)

    frames = []
    for (filename,), group in df.group_by(filename_col, maintain_order=True):
        duplicated = group["Start"].is_duplicated()
        if duplicated.any():
            msg = f"Duplicate positions for {filename}; cannot expand bins"
            raise AggregationError(msg)
        longest = int(group[end_col].max())  # type: ignore[arg-type]
        grid = pl.DataFrame(
            {"Start": pl.int_range(1, longest + 1, eager=True, dtype=pl.Int64)},
        )
        filled = (
            grid.join(
                group.select(keep[1:]).with_columns(pl.col("Start").cast(pl.Int64)),
                on="Start",
                how="left",
            )
            .sort("Start")
            .with_columns(pl.col(value_cols).forward_fill())
            .with_columns(pl.lit(filename).alias(filename_col))
        )
        frames.append(filled.select(keep))

    return pl.concat(frames, how="vertical")
