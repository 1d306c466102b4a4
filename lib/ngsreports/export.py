"""
Overrepresented-sequence export.

Selects the most overrepresented sequences across a collection and writes
them to FASTA for e.g. BLAST searches or adapter identification.

Example output record:
    >sample1_overrep_1 No Hit (12.50%)
    GATCGGAAGAGCACACGTCTGAACTCCAGTCACATCACG
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import polars as pl
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from loguru import logger

from ngsreports.aggregate import get_module, make_labels
from ngsreports.collection import ReportInput, as_collection

OVERREPRESENTED = "Overrepresented sequences"
ADAPTER_PATTERN = r"(?i)(adapter|primer)"


def overrepresented_table(
    x: ReportInput,
    n: int = 10,
    exclude_adapters: bool = False,
    labels: Mapping[str, str] | None = None,
) -> pl.DataFrame:
    """
    Top overrepresented sequences across all reports.

    Args:
        x: Reports, a path or paths to reports
        n: Number of rows to keep
        exclude_adapters: Drop rows whose Possible_Source names an adapter
                          or primer
        labels: Optional filename to label mapping

    Returns:
        DataFrame with columns: Filename, Label, Sequence, Possible_Source,
        Percentage, sorted by Percentage descending
    """
    if n < 1:
        msg = f"n must be positive, got {n}"
        raise ValueError(msg)

    collection = as_collection(x)
    df = get_module(collection, OVERREPRESENTED)
    label_map = make_labels(collection.filenames, labels)

    if exclude_adapters:
        before = len(df)
        df = df.filter(~pl.col("Possible_Source").str.contains(ADAPTER_PATTERN))
        logger.debug(f"Excluded {before - len(df)} adapter/primer matches")

    return (
        df.sort("Percentage", descending=True, maintain_order=True)
        .head(n)
        .select(
            "Filename",
            pl.col("Filename").replace_strict(label_map, return_dtype=pl.Utf8).alias("Label"),
            "Sequence",
            "Possible_Source",
            "Percentage",
        )
    )


def to_records(table: pl.DataFrame) -> list[SeqRecord]:
    """Build one SeqRecord per row of an overrepresented table."""
    records = []
    counts: dict[str, int] = {}
    for row in table.iter_rows(named=True):
        label = row["Label"]
        counts[label] = counts.get(label, 0) + 1
        records.append(
            SeqRecord(
                Seq(row["Sequence"]),
                id=f"{label}_overrep_{counts[label]}",
                description=f"{row['Possible_Source']} ({row['Percentage']:.2f}%)",
            ),
        )
    return records


def write_overrepresented_fasta(table: pl.DataFrame, output_path: Path) -> Path:
    """
    Write an overrepresented table to FASTA.

    Args:
        table: Output of `overrepresented_table`
        output_path: FASTA file to write

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    records = to_records(table)
    with output_path.open("w", encoding="utf8") as handle:
        SeqIO.write(records, handle, "fasta")
    logger.info(f"Wrote {len(records)} overrepresented sequences to {output_path}")
    return output_path
