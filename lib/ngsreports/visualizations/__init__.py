"""
Visualization generators for ngsreports.

This subpackage provides Altair-based chart generators for FastQC reports.
Each chart has a `prepare_*` function that reshapes reports into a polars
DataFrame and a chart function that turns that frame into an Altair chart.
Charts are saved as self-contained HTML files (with embedded Vega-Lite spec)
or as static SVG/PNG images.

Modules:
    utils: Theme registration, colour scales and chart saving utilities
    base_quality: Per-base quality heatmap and boxplot
    sequence_content: Per-base sequence content heatmap, lines and residuals
    summary: PASS/WARN/FAIL overview
    overrepresented: Overrepresented sequence summary
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

import altair as alt
from loguru import logger

from ngsreports.collection import ReportInput, as_collection
from ngsreports.errors import QCModuleNotFoundError
from ngsreports.schema import (
    BASE_QUALITY_THRESHOLDS,
    DEFAULT_PWF_COLOURS,
    PwfColours,
    QualityThresholds,
)

from .base_quality import (
    base_quality_boxplot,
    base_quality_heatmap,
    prepare_base_quality_boxplot,
    prepare_base_quality_heatmap,
    quality_encoding,
)
from .overrepresented import overrepresented_summary, prepare_overrepresented_summary
from .sequence_content import (
    prepare_sequence_content_heatmap,
    prepare_sequence_content_lines,
    prepare_sequence_content_residuals,
    sequence_content_heatmap,
    sequence_content_lines,
    sequence_content_residuals_chart,
)
from .summary import prepare_summary_data, summary_heatmap
from .utils import COLORS, empty_chart, register_theme, save_chart


class PlotKind(str, Enum):
    """Charts that can be drawn straight from a set of reports."""

    summary = "summary"
    base_quality_heatmap = "base-quality-heatmap"
    base_quality_boxplot = "base-quality-boxplot"
    content_heatmap = "content-heatmap"
    content_lines = "content-lines"
    content_residuals = "content-residuals"
    overrepresented = "overrepresented"


def plot_reports(
    x: ReportInput,
    kind: PlotKind | str,
    labels: Mapping[str, str] | None = None,
    colours: PwfColours = DEFAULT_PWF_COLOURS,
    thresholds: QualityThresholds = BASE_QUALITY_THRESHOLDS,
    cluster: bool = False,
    value: str = "Mean",
) -> alt.TopLevelMixin:
    """
    Prepare and draw one chart from a set of reports.

    A report set that lacks the module behind the chart gives a placeholder
    chart instead of an error.

    Args:
        x: Reports, a path or paths to reports
        kind: Which chart to draw
        labels: Optional filename to label mapping
        colours: PASS/WARN/FAIL colours
        thresholds: Cutoffs for the base-quality charts
        cluster: Order heatmap rows by hierarchical clustering
        value: Quality column for the base-quality heatmap
    """
    kind = PlotKind(kind)
    collection = as_collection(x)
    try:
        if kind is PlotKind.summary:
            return summary_heatmap(prepare_summary_data(collection, labels), colours)
        if kind is PlotKind.base_quality_heatmap:
            data = prepare_base_quality_heatmap(collection, value, thresholds, labels, cluster)
            return base_quality_heatmap(data, value, colours)
        if kind is PlotKind.base_quality_boxplot:
            data = prepare_base_quality_boxplot(collection, labels)
            return base_quality_boxplot(
                data,
                thresholds,
                colours,
                encoding=quality_encoding(collection),
            )
        if kind is PlotKind.content_heatmap:
            return sequence_content_heatmap(
                prepare_sequence_content_heatmap(collection, labels, cluster),
            )
        if kind is PlotKind.content_lines:
            return sequence_content_lines(
                prepare_sequence_content_lines(collection, labels),
                colours,
            )
        if kind is PlotKind.content_residuals:
            return sequence_content_residuals_chart(
                prepare_sequence_content_residuals(collection, labels),
            )
        return overrepresented_summary(prepare_overrepresented_summary(collection, labels))
    except QCModuleNotFoundError as exc:
        logger.warning(str(exc))
        return empty_chart(str(exc))


__all__ = [
    "COLORS",
    "PlotKind",
    "base_quality_boxplot",
    "base_quality_heatmap",
    "empty_chart",
    "overrepresented_summary",
    "plot_reports",
    "prepare_base_quality_boxplot",
    "prepare_base_quality_heatmap",
    "prepare_overrepresented_summary",
    "prepare_sequence_content_heatmap",
    "prepare_sequence_content_lines",
    "prepare_sequence_content_residuals",
    "prepare_summary_data",
    "quality_encoding",
    "register_theme",
    "save_chart",
    "sequence_content_heatmap",
    "sequence_content_lines",
    "sequence_content_residuals_chart",
    "summary_heatmap",
]
