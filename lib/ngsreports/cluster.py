"""Hierarchical clustering of files by their per-position values."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import polars as pl
from loguru import logger
from numpy.typing import NDArray
from scipy.cluster.hierarchy import dendrogram, linkage
from scipy.spatial.distance import pdist

from ngsreports.errors import AggregationError


@dataclass
class ClusterResult:
    """Merge tree and leaf order from clustering the rows of a wide matrix."""

    names: list[str]
    linkage_matrix: NDArray[np.floating]
    leaf_order: list[str]
    icoord: list[list[float]] = field(default_factory=list)
    dcoord: list[list[float]] = field(default_factory=list)


def wide_matrix(
    df: pl.DataFrame,
    row: str,
    column: str,
    value: str,
) -> tuple[list[str], list[str], NDArray[np.floating]]:
    """
    Pivot a long table into a row x column matrix.

    Rows and columns keep their first-appearance order. Columns missing a
    value for any row (e.g. positions beyond a shorter read length) are
    dropped so every row is compared on the same positions.

    Returns:
        Tuple of (row names, column names, matrix)
    """
    if df.select(row, column).is_duplicated().any():
        msg = f"Multiple '{value}' values for the same ({row}, {column}) pair"
        raise AggregationError(msg)

    names = df[row].unique(maintain_order=True).to_list()
    wide = (
        df.select(row, pl.col(column).cast(pl.Utf8), value)
        .pivot(on=column, index=row, values=value)
        .join(
            pl.DataFrame({row: names, "_order": list(range(len(names)))}),
            on=row,
        )
        .sort("_order")
        .drop("_order")
    )
    value_cols = [c for c in wide.columns if c != row]
    complete = [
        c
        for c in value_cols
        if wide[c].null_count() == 0 and not wide[c].cast(pl.Float64).is_nan().any()
    ]
    if len(complete) < len(value_cols):
        logger.debug(
            f"Dropping {len(value_cols) - len(complete)} {column} values not shared by all rows",
        )
    if not complete:
        msg = f"No {column} values shared by every {row}; cannot cluster"
        raise AggregationError(msg)

    matrix = wide.select(pl.col(complete).cast(pl.Float64)).to_numpy()
    return wide[row].to_list(), complete, matrix


def cluster_filenames(
    df: pl.DataFrame,
    row: str = "Filename",
    column: str = "Start",
    value: str = "Mean",
    method: str = "complete",
    metric: str = "euclidean",
) -> ClusterResult:
    """
    Cluster rows of a long table and return the merge tree and leaf order.

    The leaf order is used to reorder files in heatmaps; the merge tree can
    be drawn as a dendrogram. Identical input always yields the identical
    order: scipy's linkage is run without optimal re-ordering, so ties are
    resolved by the input row order.

    Args:
        df: Long table with row, column and value columns
        row: Column identifying the items to cluster
        column: Column whose values become matrix columns
        value: Numeric column to compare
        method: scipy linkage method
        metric: scipy distance metric

    Returns:
        ClusterResult with the linkage matrix and the leaf order
    """
    names, _, matrix = wide_matrix(df, row, column, value)

    if len(names) < 2:
        return ClusterResult(
            names=names,
            linkage_matrix=np.empty((0, 4)),
            leaf_order=list(names),
        )

    distances = pdist(matrix, metric=metric)
    merge_tree = linkage(distances, method=method, optimal_ordering=False)
    tree = dendrogram(merge_tree, no_plot=True, color_threshold=0)
    return ClusterResult(
        names=names,
        linkage_matrix=merge_tree,
        leaf_order=[names[i] for i in tree["leaves"]],
        icoord=tree["icoord"],
        dcoord=tree["dcoord"],
    )
