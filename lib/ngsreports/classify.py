"""
PASS/WARN/FAIL classification.

Two sources of status exist. Modules with caller-tunable cutoffs (e.g. the
base-quality heatmap) are classified from their values against a
`QualityThresholds`; every other module takes the status FastQC itself wrote
into the report, joined by Filename.

Boundary convention, used by every code path:
    higher_is_better=True:   value < fail -> FAIL, fail <= value < warn -> WARN
    higher_is_better=False:  value > fail -> FAIL, warn < value <= fail -> WARN
A value exactly on a cutoff therefore lands in the less severe band.
"""

from __future__ import annotations

import polars as pl

from ngsreports.collection import ReportInput, as_collection
from ngsreports.schema import PwfStatus, QualityThresholds, module_key


def pwf_expression(column: str, thresholds: QualityThresholds) -> pl.Expr:
    """Polars expression giving the status of `column`; nulls stay null."""
    value = pl.col(column).cast(pl.Float64)
    if thresholds.higher_is_better:
        is_fail = value < thresholds.fail
        is_warn = value < thresholds.warn
    else:
        is_fail = value > thresholds.fail
        is_warn = value > thresholds.warn

    return (
        pl.when(value.is_null() | value.is_nan())
        .then(pl.lit(None, dtype=pl.Utf8))
        .when(is_fail)
        .then(pl.lit(PwfStatus.FAIL.value))
        .when(is_warn)
        .then(pl.lit(PwfStatus.WARN.value))
        .otherwise(pl.lit(PwfStatus.PASS.value))
    )


def classify_pwf(
    df: pl.DataFrame,
    column: str,
    thresholds: QualityThresholds,
    status_col: str = "Status",
) -> pl.DataFrame:
    """
    Add a status column classifying `column` against warn/fail cutoffs.

    Args:
        df: Table holding the numeric column
        column: Column to classify
        thresholds: Warn/fail cutoffs and direction
        status_col: Name of the added column

    Returns:
        Copy of df with the status column appended
    """
    return df.with_columns(
        pwf_expression(column, thresholds).alias(status_col),
    )


def classify_value(value: float | None, thresholds: QualityThresholds) -> PwfStatus | None:
    """Classify a single value with the same convention as `classify_pwf`."""
    if value is None or value != value:
        return None
    if thresholds.higher_is_better:
        if value < thresholds.fail:
            return PwfStatus.FAIL
        if value < thresholds.warn:
            return PwfStatus.WARN
        return PwfStatus.PASS
    if value > thresholds.fail:
        return PwfStatus.FAIL
    if value > thresholds.warn:
        return PwfStatus.WARN
    return PwfStatus.PASS


def summary_status(x: ReportInput, category: str) -> pl.DataFrame:
    """
    Status FastQC recorded for one module, one row per report that has it.

    Returns:
        DataFrame with columns: Filename, Status
    """
    collection = as_collection(x)
    rows = []
    for report in collection:
        status = report.summary.get(category)
        if status is None:
            status = next(
                (
                    s
                    for name, s in report.summary.items()
                    if module_key(name).lower() == module_key(category).lower()
                ),
                None,
            )
        if status is not None:
            rows.append({"Filename": report.filename, "Status": status.value})
    return pl.DataFrame(rows, schema={"Filename": pl.Utf8, "Status": pl.Utf8})


def attach_summary_status(
    df: pl.DataFrame,
    x: ReportInput,
    category: str,
) -> pl.DataFrame:
    """
    Left-join the report's own status for `category` onto df by Filename.

    Filenames without a summary entry get a null Status; they are never
    assumed to pass.
    """
    status = summary_status(x, category)
    if "Status" in df.columns:
        df = df.drop("Status")
    return (
        df.with_row_index("_row")
        .join(status, on="Filename", how="left")
        .sort("_row")
        .drop("_row")
    )
