"""
Per-base sequence content charts.

- Heatmap: each tile's colour mixes T (red), A (green) and C (blue), darkened
  by the G content, so composition bias shows up as a colour shift along
  the read.
- Lines: percentage of each base along the read, one panel per file, with
  the file's FastQC status as a background band.
- Residuals: each file's deviation from the cross-file mean, one panel per
  base.
"""

from __future__ import annotations

from collections.abc import Mapping

import altair as alt
import polars as pl
from loguru import logger

from ngsreports.aggregate import apply_labels, get_module, make_labels, split_base
from ngsreports.classify import attach_summary_status
from ngsreports.cluster import cluster_filenames
from ngsreports.collection import ReportInput, as_collection
from ngsreports.residuals import BASES, SEQUENCE_CONTENT, sequence_content_residuals
from ngsreports.schema import DEFAULT_PWF_COLOURS, PwfColours

from .utils import BASE_COLORS, empty_chart, pwf_scale, register_theme

EMPTY_MESSAGE = "No Per Base Sequence Content Module Detected"
X_TITLE = "Position in read (bp)"


def base_colour(t: float, c: float, a: float, g: float, max_base: float) -> str:
    """
    Hex colour for one position.

    Red, green and blue are the T, A and C percentages scaled to the largest
    percentage seen; the colour is darkened in proportion to G.
    """
    if max_base <= 0:
        return "#000000"
    opacity = 1 - g / max_base
    channels = [
        min(max(round(v * opacity / max_base * 255), 0), 255)
        for v in (t, a, c)
    ]
    return "#{:02X}{:02X}{:02X}".format(*channels)


def position_label(start: pl.Expr, end: pl.Expr, suffix: str = "") -> pl.Expr:
    """ "5" for a single position, "10-14" for a bin."""
    return (
        pl.when(start == end)
        .then(pl.format("{}" + suffix, start))
        .otherwise(pl.format("{}-{}" + suffix, start, end))
    )


def prepare_sequence_content_heatmap(
    x: ReportInput,
    labels: Mapping[str, str] | None = None,
    cluster: bool = False,
) -> pl.DataFrame:
    """
    Prepare per-position tile colours for the sequence content heatmap.

    Returns:
        DataFrame with columns: Filename (labelled), Start, End, Position,
        T, C, A, G, Colour, Order
    """
    collection = as_collection(x)
    df = split_base(get_module(collection, SEQUENCE_CONTENT)).with_columns(
        pl.col(BASES).cast(pl.Float64).fill_nan(None).fill_null(0.0).round(2),
    )

    max_base = float(df.select(pl.max_horizontal(pl.col(BASES).max())).item() or 0.0)
    colours = [
        base_colour(t, c, a, g, max_base)
        for t, c, a, g in df.select(BASES).iter_rows()
    ]

    order = df["Filename"].unique(maintain_order=True).to_list()
    if cluster and len(order) > 1:
        long = df.select("Filename", "Start", *BASES).unpivot(
            on=BASES,
            index=["Filename", "Start"],
            variable_name="Base",
            value_name="Percent",
        ).with_columns(pl.format("{}_{}", "Start", "Base").alias("Key"))
        order = cluster_filenames(long, column="Key", value="Percent").leaf_order
        logger.debug(f"Clustered order: {order}")

    rank = {name: i for i, name in enumerate(order)}
    df = df.with_columns(
        position_label(pl.col("Start"), pl.col("End"), "bp").alias("Position"),
        pl.Series("Colour", colours, dtype=pl.Utf8),
        pl.col("Filename").replace_strict(rank, return_dtype=pl.Int64).alias("Order"),
    ).select("Filename", "Start", "End", "Position", *BASES, "Colour", "Order")
    return apply_labels(df, make_labels(collection.filenames, labels))


def sequence_content_heatmap(
    data: pl.DataFrame,
    title: str = "Per Base Sequence Content",
) -> alt.Chart:
    """
    Composition heatmap, one row per file.

    Args:
        data: Output of `prepare_sequence_content_heatmap`
        title: Chart title
    """
    register_theme()
    if data.is_empty():
        return empty_chart(EMPTY_MESSAGE)

    order = data.sort("Order")["Filename"].unique(maintain_order=True).to_list()
    return (
        alt.Chart(data)
        .transform_calculate(xmin="datum.Start - 0.5", xmax="datum.End + 0.5")
        .mark_rect()
        .encode(
            alt.X("xmin:Q").title(X_TITLE).scale(nice=False),
            alt.X2("xmax:Q"),
            alt.Y("Filename:N").sort(order).title(None),
            alt.Color("Colour:N").scale(None),
            tooltip=[
                alt.Tooltip("Filename:N"),
                alt.Tooltip("Position:N"),
                *[alt.Tooltip(f"{base}:Q", format=".2f") for base in BASES],
            ],
        )
        .properties(width=600, height=max(len(order) * 18, 60), title=title)
    )


def prepare_sequence_content_lines(
    x: ReportInput,
    labels: Mapping[str, str] | None = None,
) -> pl.DataFrame:
    """
    Long-form base percentages for the line chart.

    Returns:
        DataFrame with columns: Filename (labelled), Base, Start, End,
        Position, Percent, Status
    """
    collection = as_collection(x)
    df = split_base(get_module(collection, SEQUENCE_CONTENT))
    long = (
        df.select("Filename", "Start", "End", *BASES)
        .unpivot(
            on=BASES,
            index=["Filename", "Start", "End"],
            variable_name="Base",
            value_name="Percent",
        )
        .with_columns(
            pl.col("Percent").cast(pl.Float64).round(2),
            position_label(pl.col("Start"), pl.col("End")).alias("Position"),
        )
        .select("Filename", "Base", "Start", "End", "Position", "Percent")
    )
    long = attach_summary_status(long, collection, SEQUENCE_CONTENT)
    return apply_labels(long, make_labels(collection.filenames, labels))


def sequence_content_lines(
    data: pl.DataFrame,
    colours: PwfColours = DEFAULT_PWF_COLOURS,
    columns: int = 2,
    title: str = "Per Base Sequence Content",
) -> alt.TopLevelMixin:
    """
    Base percentages along the read, one panel per file.

    Args:
        data: Output of `prepare_sequence_content_lines`
        colours: PASS/WARN/FAIL colours for the background band
        columns: Panels per row
        title: Chart title
    """
    register_theme()
    if data.is_empty():
        return empty_chart(EMPTY_MESSAGE)

    order = data["Filename"].unique(maintain_order=True).to_list()
    band = (
        alt.Chart()
        .transform_aggregate(
            xmin="min(Start)",
            xmax="max(End)",
            groupby=["Filename", "Status"],
        )
        .mark_rect(opacity=0.1)
        .encode(
            alt.X("xmin:Q"),
            alt.X2("xmax:Q"),
            alt.YDatum(0),
            alt.Y2Datum(100),
            alt.Color("Status:N").scale(pwf_scale(colours)).title("Status"),
        )
    )
    lines = (
        alt.Chart()
        .mark_line()
        .encode(
            alt.X("Start:Q").title(X_TITLE),
            alt.Y("Percent:Q").scale(domain=[0, 100]).title("Percent (%)"),
            alt.Color("Base:N")
            .scale(domain=BASES, range=[BASE_COLORS[b] for b in BASES])
            .title("Base"),
            tooltip=[
                alt.Tooltip("Position:N"),
                alt.Tooltip("Base:N"),
                alt.Tooltip("Percent:Q", format=".2f"),
                alt.Tooltip("Status:N"),
            ],
        )
    )
    return (
        alt.layer(band, lines, data=data)
        .resolve_scale(color="independent")
        .properties(width=300, height=200)
        .facet(alt.Facet("Filename:N").sort(order).title(None), columns=columns)
        .properties(title=title)
    )


def prepare_sequence_content_residuals(
    x: ReportInput,
    labels: Mapping[str, str] | None = None,
) -> pl.DataFrame:
    """
    Residual base composition with labelled filenames.

    Returns:
        DataFrame with columns: Filename (labelled), Start, Base, Percent,
        Mean, Residual, Status
    """
    collection = as_collection(x)
    residuals = sequence_content_residuals(collection)
    return apply_labels(residuals, make_labels(collection.filenames, labels))


def sequence_content_residuals_chart(
    data: pl.DataFrame,
    columns: int = 2,
    title: str = "Per Base Sequence Content Residuals",
) -> alt.TopLevelMixin:
    """
    Deviation of each file from the mean composition, one panel per base.

    Args:
        data: Output of `prepare_sequence_content_residuals`
        columns: Panels per row
        title: Chart title
    """
    register_theme()
    if data.is_empty():
        return empty_chart(EMPTY_MESSAGE)

    return (
        alt.Chart(data)
        .mark_line()
        .encode(
            alt.X("Start:Q").title(X_TITLE),
            alt.Y("Residual:Q").title("Residual (%)"),
            alt.Color("Filename:N").title("Filename"),
            tooltip=[
                alt.Tooltip("Filename:N"),
                alt.Tooltip("Start:Q", title="Position"),
                alt.Tooltip("Residual:Q", format="+.1f"),
                alt.Tooltip("Status:N"),
            ],
        )
        .properties(width=300, height=200)
        .facet(alt.Facet("Base:N").sort(BASES), columns=columns)
        .properties(title=title)
    )
