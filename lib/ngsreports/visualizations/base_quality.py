"""
Per-base sequence quality charts.

- Heatmap: one row per file, one tile per read position, coloured by the
  PASS/WARN/FAIL band its value falls into. Binned positions are expanded
  by carry-forward and files can be ordered by hierarchical clustering.
- Boxplot: the FastQC-style quality boxplot drawn over PASS/WARN/FAIL bands,
  one panel per file.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping

import altair as alt
import polars as pl
from loguru import logger

from ngsreports.aggregate import (
    apply_labels,
    fill_binned_positions,
    get_module,
    make_labels,
    split_base,
)
from ngsreports.classify import classify_pwf
from ngsreports.cluster import cluster_filenames
from ngsreports.collection import ReportInput, as_collection
from ngsreports.schema import (
    BASE_QUALITY_THRESHOLDS,
    DEFAULT_PWF_COLOURS,
    PwfColours,
    PwfStatus,
    QualityThresholds,
)

from .utils import COLORS, empty_chart, pwf_scale, register_theme

BASE_QUALITY = "Per base sequence quality"
BOXPLOT_COLUMNS = [
    "Mean",
    "Median",
    "Lower_Quartile",
    "Upper_Quartile",
    "10th_Percentile",
    "90th_Percentile",
]
EMPTY_MESSAGE = "No Per Base Sequence Quality Module Detected"
X_TITLE = "Position in read (bp)"


def prepare_base_quality_heatmap(
    x: ReportInput,
    value: str = "Mean",
    thresholds: QualityThresholds = BASE_QUALITY_THRESHOLDS,
    labels: Mapping[str, str] | None = None,
    cluster: bool = False,
) -> pl.DataFrame:
    """
    Prepare per-position quality values for the heatmap.

    Args:
        x: Reports, a path or paths to reports
        value: Quality column to plot (e.g. "Mean", "Median")
        thresholds: Cutoffs used to classify each tile
        labels: Optional filename to label mapping
        cluster: Order files by hierarchical clustering instead of input order

    Returns:
        DataFrame with columns: Filename (labelled), Start, <value>, Status,
        Order
    """
    collection = as_collection(x)
    df = split_base(get_module(collection, BASE_QUALITY))
    if value not in BOXPLOT_COLUMNS:
        msg = f"Cannot plot '{value}'. Choose one of: {', '.join(BOXPLOT_COLUMNS)}"
        raise ValueError(msg)

    filled = fill_binned_positions(df, [value])
    order = filled["Filename"].unique(maintain_order=True).to_list()
    if cluster and len(order) > 1:
        order = cluster_filenames(filled, value=value).leaf_order
        logger.debug(f"Clustered order: {order}")

    rank = {name: i for i, name in enumerate(order)}
    return apply_labels(
        classify_pwf(filled, value, thresholds).with_columns(
            pl.col("Filename").replace_strict(rank, return_dtype=pl.Int64).alias("Order"),
        ),
        make_labels(collection.filenames, labels),
    )


def base_quality_heatmap(
    data: pl.DataFrame,
    value: str = "Mean",
    colours: PwfColours = DEFAULT_PWF_COLOURS,
    title: str = "Per Base Sequence Quality",
) -> alt.Chart:
    """
    Heatmap of per-position quality, one row per file.

    Args:
        data: Output of `prepare_base_quality_heatmap`
        value: Quality column that was prepared
        colours: PASS/WARN/FAIL colours
        title: Chart title
    """
    register_theme()
    data = data.filter(pl.col(value).is_not_null())
    if data.is_empty():
        return empty_chart(EMPTY_MESSAGE)

    order = data.sort("Order")["Filename"].unique(maintain_order=True).to_list()
    return (
        alt.Chart(data)
        .transform_calculate(Stop="datum.Start + 1")
        .mark_rect()
        .encode(
            alt.X("Start:Q").title(X_TITLE).scale(nice=False),
            alt.X2("Stop:Q"),
            alt.Y("Filename:N").sort(order).title(None),
            alt.Color("Status:N").scale(pwf_scale(colours)).title("Status"),
            tooltip=[
                alt.Tooltip("Filename:N"),
                alt.Tooltip("Start:Q", title="Position"),
                alt.Tooltip(f"{value}:Q", format=".1f"),
                alt.Tooltip("Status:N"),
            ],
        )
        .properties(width=600, height=max(len(order) * 18, 60), title=title)
    )


def quality_encoding(x: ReportInput) -> str | None:
    """Illumina encoding named in Basic Statistics, e.g. "Illumina 1.9"."""
    stats = get_module(x, "Basic_Statistics")
    if "Encoding" not in stats.columns or stats.is_empty():
        return None
    encoding = stats["Encoding"][0]
    match = re.search(r"(Illumina [0-9.]*)", encoding or "")
    return match.group(1).strip() if match else encoding


def prepare_base_quality_boxplot(
    x: ReportInput,
    labels: Mapping[str, str] | None = None,
) -> pl.DataFrame:
    """
    Prepare per-position quality distributions for the boxplot.

    Returns:
        DataFrame with columns: Filename (labelled), Base, Start, End,
        Position (1-based index of the bin within its file) and the quality
        summary columns
    """
    collection = as_collection(x)
    df = split_base(get_module(collection, BASE_QUALITY))
    df = df.with_columns(
        pl.int_range(1, pl.len() + 1, dtype=pl.Int64).over("Filename").alias("Position"),
    ).select("Filename", "Base", "Start", "End", "Position", *BOXPLOT_COLUMNS)
    return apply_labels(df, make_labels(collection.filenames, labels))


def quality_bands(
    thresholds: QualityThresholds,
    top: float,
) -> pl.DataFrame:
    """Background rectangles for the three quality bands, from 0 to `top`."""
    low, high = sorted((thresholds.fail, thresholds.warn))
    if thresholds.higher_is_better:
        statuses = [PwfStatus.FAIL, PwfStatus.WARN, PwfStatus.PASS]
    else:
        statuses = [PwfStatus.PASS, PwfStatus.WARN, PwfStatus.FAIL]
    return pl.DataFrame(
        {
            "ymin": [0.0, float(low), float(high)],
            "ymax": [float(low), float(high), float(max(top, high))],
            "Status": [s.value for s in statuses],
        },
    )


def _boxplot_panel(
    data: pl.DataFrame,
    bands: pl.DataFrame,
    colours: PwfColours,
    y_title: str,
    title: str,
    box_width: float,
) -> alt.LayerChart:
    half = box_width / 2
    background = (
        alt.Chart(bands)
        .mark_rect(opacity=0.2)
        .encode(
            alt.Y("ymin:Q").title(y_title),
            alt.Y2("ymax:Q"),
            alt.Color("Status:N").scale(pwf_scale(colours)).title("Status"),
        )
    )
    base = alt.Chart(data).transform_calculate(
        left=f"datum.Position - {half}",
        right=f"datum.Position + {half}",
    )
    tooltip = [
        alt.Tooltip("Base:N", title="Position"),
        *[alt.Tooltip(f"{col}:Q", format=".1f") for col in BOXPLOT_COLUMNS],
    ]
    whiskers = base.mark_rule(color=COLORS["secondary"]).encode(
        alt.X("Position:Q").title(X_TITLE),
        alt.Y("10th_Percentile:Q"),
        alt.Y2("90th_Percentile:Q"),
    )
    boxes = base.mark_rect(color="#fde047", stroke=COLORS["text"], strokeWidth=0.5).encode(
        alt.X("left:Q"),
        alt.X2("right:Q"),
        alt.Y("Lower_Quartile:Q"),
        alt.Y2("Upper_Quartile:Q"),
        tooltip=tooltip,
    )
    medians = base.mark_rule(color="#dc2626").encode(
        alt.X("left:Q"),
        alt.X2("right:Q"),
        alt.Y("Median:Q"),
    )
    means = base.mark_line(color=COLORS["primary"]).encode(
        alt.X("Position:Q"),
        alt.Y("Mean:Q"),
    )
    return alt.layer(background, whiskers, boxes, medians, means).properties(
        width=500,
        height=250,
        title=title,
    )


def base_quality_boxplot(
    data: pl.DataFrame,
    thresholds: QualityThresholds = BASE_QUALITY_THRESHOLDS,
    colours: PwfColours = DEFAULT_PWF_COLOURS,
    encoding: str | None = None,
    box_width: float = 0.8,
    columns: int = 2,
) -> alt.TopLevelMixin:
    """
    FastQC-style quality boxplots, one panel per file.

    Args:
        data: Output of `prepare_base_quality_boxplot`
        thresholds: Cutoffs drawn as background bands
        colours: PASS/WARN/FAIL colours
        encoding: Quality encoding shown in the y-axis title
        box_width: Width of each box in position units
        columns: Panels per row when several files are plotted
    """
    register_theme()
    if data.is_empty():
        return empty_chart(EMPTY_MESSAGE)

    y_title = f"Quality Scores ({encoding} encoding)" if encoding else "Quality Scores"
    top = float(data["90th_Percentile"].max()) + 1  # type: ignore[arg-type]
    top = max(top, math.ceil(thresholds.warn) + 1)
    bands = quality_bands(thresholds, top)

    panels = [
        _boxplot_panel(group, bands, colours, y_title, str(name), box_width)
        for (name,), group in data.group_by("Filename", maintain_order=True)
    ]
    if len(panels) == 1:
        return panels[0]
    return alt.concat(*panels, columns=columns)
