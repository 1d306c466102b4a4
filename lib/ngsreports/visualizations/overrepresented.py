"""
Overrepresented sequence summary.

Stacked bars of the total percentage of reads taken by overrepresented
sequences in each file, split by their possible source.
"""

from __future__ import annotations

from collections.abc import Mapping

import altair as alt
import polars as pl

from ngsreports.aggregate import apply_labels, get_module, make_labels
from ngsreports.classify import attach_summary_status
from ngsreports.collection import ReportInput, as_collection
from ngsreports.export import OVERREPRESENTED

from .utils import empty_chart, register_theme


def prepare_overrepresented_summary(
    x: ReportInput,
    labels: Mapping[str, str] | None = None,
) -> pl.DataFrame:
    """
    Total overrepresented percentage per file and possible source.

    Returns:
        DataFrame with columns: Filename (labelled), Possible_Source,
        Percentage, Sequences, Status
    """
    collection = as_collection(x)
    df = get_module(collection, OVERREPRESENTED)
    totals = df.group_by("Filename", "Possible_Source", maintain_order=True).agg(
        pl.col("Percentage").sum(),
        pl.len().cast(pl.Int64).alias("Sequences"),
    )
    totals = attach_summary_status(totals, collection, OVERREPRESENTED)
    return apply_labels(totals, make_labels(collection.filenames, labels))


def overrepresented_summary(
    data: pl.DataFrame,
    title: str = "Overrepresented Sequences",
) -> alt.Chart:
    """
    Stacked bar per file of overrepresented percentage by source.

    Args:
        data: Output of `prepare_overrepresented_summary`
        title: Chart title
    """
    register_theme()
    if data.is_empty():
        return empty_chart("No overrepresented sequences found")

    files = data["Filename"].unique(maintain_order=True).to_list()
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            alt.X("Percentage:Q").stack("zero").title("Overrepresented sequences (% of reads)"),
            alt.Y("Filename:N").sort(files).title(None),
            alt.Color("Possible_Source:N").title("Possible source"),
            tooltip=[
                alt.Tooltip("Filename:N"),
                alt.Tooltip("Possible_Source:N", title="Possible source"),
                alt.Tooltip("Sequences:Q"),
                alt.Tooltip("Percentage:Q", format=".2f"),
                alt.Tooltip("Status:N"),
            ],
        )
        .properties(width=500, height=max(len(files) * 20, 60), title=title)
    )
