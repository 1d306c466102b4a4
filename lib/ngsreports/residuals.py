"""
Per-position residuals across files.

A residual is a file's value minus the mean of all files at the same
position and metric. Used to spot files that deviate from the cross-file
baseline in e.g. per-base sequence content.
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl

from ngsreports.aggregate import fill_binned_positions, get_module, split_base
from ngsreports.classify import attach_summary_status
from ngsreports.collection import ReportInput, as_collection

BASES = ["T", "C", "A", "G"]
SEQUENCE_CONTENT = "Per base sequence content"


def compute_residuals(
    df: pl.DataFrame,
    group_cols: Sequence[str] = ("Start", "Base"),
    value_col: str = "Percent",
    digits: int = 2,
) -> pl.DataFrame:
    """
    Add Mean and Residual columns.

    Args:
        df: Long table, one row per (Filename, *group_cols)
        group_cols: Columns defining one position/metric
        value_col: Numeric column to centre
        digits: Decimal places kept on the residual

    Returns:
        Copy of df with Mean (per group) and Residual = value - Mean
    """
    mean = pl.col(value_col).mean().over(list(group_cols))
    return df.with_columns(mean.alias("Mean")).with_columns(
        (pl.col(value_col) - pl.col("Mean")).round(digits).alias("Residual"),
    )


def drop_binned_duplicates(
    df: pl.DataFrame,
    value_col: str = "Percent",
    by: Sequence[str] = ("Filename", "Base"),
    position: str = "Start",
) -> pl.DataFrame:
    """
    Drop rows repeating the previous position's value.

    Carry-forward expansion of FastQC bins produces runs of identical
    values; only the first row of each run is kept, and position 1 is always
    kept. Groups keep their first-appearance order and rows are sorted by
    position within each group.
    """
    by = list(by)
    change = pl.col(value_col).diff().over(by).fill_null(0)
    return (
        df.with_row_index("_row")
        .with_columns(pl.col("_row").min().over(by).alias("_group"))
        .sort("_group", position)
        .filter((change != 0) | (pl.col(position) == 1))
        .drop("_row", "_group")
    )


def sequence_content_residuals(x: ReportInput, digits: int = 2) -> pl.DataFrame:
    """
    Residual base composition for every file, position and base.

    Binned positions are expanded by carry-forward before the per-position
    mean is taken; the duplicated rows that expansion produces are dropped
    afterwards. The report's own status for the module is attached.

    Returns:
        DataFrame with columns: Filename, Start, Base, Percent, Mean,
        Residual, Status
    """
    collection = as_collection(x)
    content = split_base(get_module(collection, SEQUENCE_CONTENT))
    expanded = fill_binned_positions(content, BASES)

    file_order = {name: i for i, name in enumerate(collection.filenames)}
    base_order = {base: i for i, base in enumerate(BASES)}
    long = (
        expanded.unpivot(
            on=BASES,
            index=["Filename", "Start"],
            variable_name="Base",
            value_name="Percent",
        )
        .with_columns(
            pl.col("Filename").replace_strict(file_order, return_dtype=pl.Int64).alias("_file"),
            pl.col("Base").replace_strict(base_order, return_dtype=pl.Int64).alias("_base"),
        )
        .sort("_file", "_base", "Start")
        .drop("_file", "_base")
    )

    residuals = compute_residuals(long, value_col="Percent", digits=digits)
    residuals = drop_binned_duplicates(residuals, value_col="Percent")
    return attach_summary_status(residuals, collection, SEQUENCE_CONTENT)
