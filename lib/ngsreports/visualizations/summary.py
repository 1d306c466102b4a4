"""PASS/WARN/FAIL overview of every module for every file."""

from __future__ import annotations

from collections.abc import Mapping

import altair as alt
import polars as pl

from ngsreports.aggregate import apply_labels, get_summary, make_labels
from ngsreports.collection import ReportInput, as_collection
from ngsreports.schema import DEFAULT_PWF_COLOURS, PwfColours

from .utils import empty_chart, pwf_scale, register_theme


def prepare_summary_data(
    x: ReportInput,
    labels: Mapping[str, str] | None = None,
) -> pl.DataFrame:
    """
    Summary table with labelled filenames.

    Returns:
        DataFrame with columns: Filename (labelled), Category, Status
    """
    collection = as_collection(x)
    return apply_labels(get_summary(collection), make_labels(collection.filenames, labels))


def summary_heatmap(
    data: pl.DataFrame,
    colours: PwfColours = DEFAULT_PWF_COLOURS,
    title: str = "FastQC Summary",
) -> alt.Chart:
    """
    Grid of module status, modules across and files down.

    Args:
        data: Output of `prepare_summary_data`
        colours: PASS/WARN/FAIL colours
        title: Chart title
    """
    register_theme()
    if data.is_empty():
        return empty_chart("No summary information found")

    files = data["Filename"].unique(maintain_order=True).to_list()
    categories = data["Category"].unique(maintain_order=True).to_list()
    return (
        alt.Chart(data)
        .mark_rect(stroke="#ffffff", strokeWidth=1)
        .encode(
            alt.X("Category:N").sort(categories).title(None).axis(labelAngle=-45),
            alt.Y("Filename:N").sort(files).title(None),
            alt.Color("Status:N").scale(pwf_scale(colours)).title("Status"),
            tooltip=[
                alt.Tooltip("Filename:N"),
                alt.Tooltip("Category:N", title="Module"),
                alt.Tooltip("Status:N"),
            ],
        )
        .properties(
            width=max(len(categories) * 25, 100),
            height=max(len(files) * 18, 60),
            title=title,
        )
    )
