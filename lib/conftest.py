"""Shared fixtures for building FastQC reports on disk."""

import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import pytest

QUALITY_HEADER = (
    "#Base\tMean\tMedian\tLower Quartile\tUpper Quartile\t10th Percentile\t90th Percentile"
)
CONTENT_HEADER = "#Base\tG\tA\tT\tC"

DEFAULT_QUALITY = [
    ("1", 32.0),
    ("2", 31.0),
    ("3-4", 30.0),
    ("5", 28.0),
]
DEFAULT_CONTENT = [
    # (Base, G, A, T, C)
    ("1", 20.0, 30.0, 30.0, 20.0),
    ("2", 20.0, 28.0, 32.0, 20.0),
    ("3-4", 22.0, 28.0, 28.0, 22.0),
    ("5", 25.0, 25.0, 25.0, 25.0),
]
DEFAULT_OVERREP = [
    ("GATCGGAAGAGCACACGTCTGAACTCCAGTCAC", 120, 12.0, "TruSeq Adapter, Index 1 (100% over 50bp)"),
    ("AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA", 40, 4.0, "No Hit"),
]


def build_fastqc_text(
    filename: str = "sample1.fastq.gz",
    quality: Optional[list[tuple[str, float]]] = None,
    content: Optional[list[tuple[str, float, float, float, float]]] = None,
    overrepresented: Optional[list[tuple[str, int, float, str]]] = None,
    statuses: Optional[dict[str, str]] = None,
    sequence_length: str = "5",
    include_content: bool = True,
    include_overrepresented: bool = True,
) -> str:
    """
    Build the text of a small but complete fastqc_data.txt.

    Quality rows give the Mean; the other quality columns are derived from it.
    """
    quality = DEFAULT_QUALITY if quality is None else quality
    content = DEFAULT_CONTENT if content is None else content
    overrepresented = DEFAULT_OVERREP if overrepresented is None else overrepresented
    statuses = statuses or {}

    def status(name: str, default: str = "pass") -> str:
        return statuses.get(name, default)

    lines = [
        "##FastQC\t0.11.9",
        f">>Basic Statistics\t{status('Basic Statistics')}",
        "#Measure\tValue",
        f"Filename\t{filename}",
        "File type\tConventional base calls",
        "Encoding\tSanger / Illumina 1.9",
        "Total Sequences\t1000",
        "Sequences flagged as poor quality\t0",
        f"Sequence length\t{sequence_length}",
        "%GC\t48",
        ">>END_MODULE",
        f">>Per base sequence quality\t{status('Per base sequence quality')}",
        QUALITY_HEADER,
    ]
    for base, mean in quality:
        lines.append(
            f"{base}\t{mean}\t{mean + 1}\t{mean - 2}\t{mean + 2}\t{mean - 5}\t{mean + 3}",
        )
    lines.append(">>END_MODULE")

    if include_content:
        lines += [
            f">>Per base sequence content\t{status('Per base sequence content', 'warn')}",
            CONTENT_HEADER,
        ]
        for base, g, a, t, c in content:
            lines.append(f"{base}\t{g}\t{a}\t{t}\t{c}")
        lines.append(">>END_MODULE")

    lines += [
        f">>Sequence Duplication Levels\t{status('Sequence Duplication Levels')}",
        "#Total Deduplicated Percentage\t85.5",
        "#Duplication Level\tPercentage of deduplicated\tPercentage of total",
        "1\t90.0\t80.0",
        ">10\t10.0\t20.0",
        ">>END_MODULE",
    ]
    if include_overrepresented:
        lines.append(f">>Overrepresented sequences\t{status('Overrepresented sequences', 'warn')}")
        if overrepresented:
            lines.append("#Sequence\tCount\tPercentage\tPossible Source")
            for seq, count, pct, source in overrepresented:
                lines.append(f"{seq}\t{count}\t{pct}\t{source}")
        lines.append(">>END_MODULE")
    return "\n".join(lines) + "\n"


def build_summary_text(report_text: str, filename: str) -> str:
    """summary.txt contents agreeing with the statuses in `report_text`."""
    rows = []
    for line in report_text.splitlines():
        if line.startswith(">>") and line != ">>END_MODULE":
            name, _, token = line[2:].partition("\t")
            rows.append(f"{token.upper()}\t{name}\t{filename}")
    return "\n".join(rows) + "\n"


@pytest.fixture
def write_report(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a fastqc_data.txt file; keyword arguments go to build_fastqc_text."""

    def _write(name: str = "sample1_fastqc_data.txt", **kwargs: object) -> Path:
        path = tmp_path / name
        path.write_text(build_fastqc_text(**kwargs), encoding="utf-8")  # type: ignore[arg-type]
        return path

    return _write


@pytest.fixture
def write_zip(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a FastQC ZIP bundle with fastqc_data.txt and summary.txt."""

    def _write(
        stem: str = "sample1",
        summary: Optional[str] = None,
        include_summary: bool = True,
        **kwargs: object,
    ) -> Path:
        filename = str(kwargs.setdefault("filename", f"{stem}.fastq.gz"))
        text = build_fastqc_text(**kwargs)  # type: ignore[arg-type]
        path = tmp_path / f"{stem}_fastqc.zip"
        with zipfile.ZipFile(path, "w") as bundle:
            bundle.writestr(f"{stem}_fastqc/fastqc_data.txt", text)
            if include_summary:
                bundle.writestr(
                    f"{stem}_fastqc/summary.txt",
                    summary if summary is not None else build_summary_text(text, filename),
                )
        return path

    return _write


@pytest.fixture
def two_reports(write_report: Callable[..., Path]) -> list[Path]:
    """Two raw reports for files A and B with different quality profiles."""
    return [
        write_report("a_fastqc_data.txt", filename="A.fastq.gz"),
        write_report(
            "b_fastqc_data.txt",
            filename="B.fastq.gz",
            quality=[("1", 36.0), ("2", 24.0), ("3-4", 22.0), ("5", 18.0)],
            statuses={"Per base sequence quality": "fail"},
        ),
    ]
