"""Tests for cross-report aggregation."""

from collections.abc import Callable
from pathlib import Path

import polars as pl
import pytest
from conftest import build_fastqc_text
from ngsreports.aggregate import (
    apply_labels,
    fill_binned_positions,
    get_module,
    get_summary,
    make_labels,
    split_base,
)
from ngsreports.errors import AggregationError, FormatError, QCModuleNotFoundError
from ngsreports.parsers import parse_text


class TestGetModule:
    """Tests for concatenating one module across reports."""

    def test_concatenates_in_collection_order(self, two_reports: list[Path]) -> None:
        """Rows follow the collection order, Filename first."""
        df = get_module(two_reports, "Per base sequence quality")

        assert df.columns[0] == "Filename"
        assert df.height == 8
        assert df["Filename"].unique(maintain_order=True).to_list() == ["A.fastq.gz", "B.fastq.gz"]

    def test_accepts_underscore_key(self, two_reports: list[Path]) -> None:
        """Display names and underscore keys resolve to the same module."""
        by_name = get_module(two_reports, "Per base sequence quality")
        by_key = get_module(two_reports, "per_base_sequence_quality")

        assert by_name.equals(by_key)

    def test_skips_reports_without_module(self, write_report: Callable[..., Path]) -> None:
        """Reports lacking the module contribute no rows."""
        paths = [
            write_report("a.txt", filename="A.fq"),
            write_report("b.txt", filename="B.fq", include_content=False),
        ]

        df = get_module(paths, "Per base sequence content")

        assert df["Filename"].unique().to_list() == ["A.fq"]

    def test_every_summarised_module_has_rows(self, two_reports: list[Path]) -> None:
        """Each module listed in a report's summary can be fetched and is non-empty."""
        report = parse_text(Path(two_reports[0]).read_text(encoding="utf-8"))

        assert report.summary
        for module in report.summary:
            df = get_module(two_reports, module)
            assert df.height > 0, module
            assert df.columns[0] == "Filename"

    def test_missing_everywhere(self, two_reports: list[Path]) -> None:
        """A module no report has raises QCModuleNotFoundError."""
        with pytest.raises(QCModuleNotFoundError) as exc_info:
            get_module(two_reports, "Adapter Content")

        assert exc_info.value.module == "Adapter_Content"
        assert isinstance(exc_info.value, LookupError)

    def test_schema_mismatch(self) -> None:
        """Reports disagreeing on a module's columns cannot be combined."""
        first = parse_text(
            build_fastqc_text(filename="A.fq") + ">>Custom\tpass\n#X\n1\n>>END_MODULE\n",
        )
        second = parse_text(
            build_fastqc_text(filename="B.fq") + ">>Custom\tpass\n#Y\n1\n>>END_MODULE\n",
        )

        with pytest.raises(AggregationError):
            get_module([first, second], "Custom")


class TestGetSummary:
    """Tests for the status summary."""

    def test_one_row_per_module_and_file(self, two_reports: list[Path]) -> None:
        summary = get_summary(two_reports)

        assert summary.columns == ["Filename", "Category", "Status"]
        assert summary.height == 10
        status = summary.filter(
            (pl.col("Filename") == "B.fastq.gz")
            & (pl.col("Category") == "Per base sequence quality"),
        )["Status"]
        assert status.to_list() == ["FAIL"]


class TestLabels:
    """Tests for filename labels."""

    def test_default_strips_suffix(self) -> None:
        """Known read and report suffixes are removed."""
        labels = make_labels(["A.fastq.gz", "b_fastqc.zip", "c.FQ.bz2", "d_fastqc"])

        assert labels == {
            "A.fastq.gz": "A",
            "b_fastqc.zip": "b",
            "c.FQ.bz2": "c",
            "d_fastqc": "d",
        }

    def test_overrides_must_cover_every_file(self) -> None:
        with pytest.raises(ValueError, match="missing"):
            make_labels(["A.fq", "B.fq"], {"A.fq": "first"})

    def test_labels_must_be_unique(self) -> None:
        """Two files stripped to the same label are rejected."""
        with pytest.raises(ValueError, match="not unique"):
            make_labels(["a.fastq", "a.fq"])

    def test_apply_labels_drops_unlabelled(self) -> None:
        df = pl.DataFrame({"Filename": ["A.fq", "B.fq"], "Value": [1, 2]})

        labelled = apply_labels(df, {"A.fq": "first"})

        assert labelled.to_dict(as_series=False) == {"Filename": ["first"], "Value": [1]}


class TestSplitBase:
    """Tests for position/range splitting."""

    def test_ranges_and_positions(self) -> None:
        df = pl.DataFrame({"Base": ["7", "35-36"]})

        split = split_base(df)

        assert split["Start"].to_list() == [7, 35]
        assert split["End"].to_list() == [7, 36]
        assert split["Base"].to_list() == ["7", "35-36"]

    def test_malformed_range(self) -> None:
        with pytest.raises(FormatError):
            split_base(pl.DataFrame({"Base": ["1", "x-2"]}))


class TestFillBinnedPositions:
    """Tests for carry-forward expansion of binned positions."""

    @pytest.fixture
    def binned(self) -> pl.DataFrame:
        return split_base(
            pl.DataFrame(
                {
                    "Filename": ["A", "A", "A", "B", "B"],
                    "Base": ["1", "2", "3-5", "1", "2-3"],
                    "Mean": [32.0, 31.0, 30.0, 36.0, 24.0],
                },
            ),
        )

    def test_expands_to_longest_position(self, binned: pl.DataFrame) -> None:
        """Every position up to the bin end gets the bin's value."""
        filled = fill_binned_positions(binned, ["Mean"])

        a = filled.filter(pl.col("Filename") == "A")
        b = filled.filter(pl.col("Filename") == "B")
        assert a["Start"].to_list() == [1, 2, 3, 4, 5]
        assert a["Mean"].to_list() == [32.0, 31.0, 30.0, 30.0, 30.0]
        assert b["Mean"].to_list() == [36.0, 24.0, 24.0]
        assert filled.columns == ["Filename", "Start", "Mean"]

    def test_idempotent(self, binned: pl.DataFrame) -> None:
        """Filling an already filled table changes nothing."""
        once = fill_binned_positions(binned, ["Mean"])
        twice = fill_binned_positions(once, ["Mean"])

        assert twice.equals(once)

    def test_never_invents_values(self, binned: pl.DataFrame) -> None:
        """Every filled value is one of the file's observed values."""
        filled = fill_binned_positions(binned, ["Mean"])

        for (name,), group in filled.group_by("Filename"):
            observed = set(binned.filter(pl.col("Filename") == name)["Mean"].to_list())
            assert set(group["Mean"].drop_nulls().to_list()) <= observed

    def test_leading_gap_stays_null(self) -> None:
        """Positions before the first observation are not back-filled."""
        df = pl.DataFrame({"Filename": ["A"], "Start": [3], "End": [3], "Mean": [30.0]})

        filled = fill_binned_positions(df, ["Mean"])

        assert filled["Mean"].to_list() == [None, None, 30.0]

    def test_duplicate_positions(self) -> None:
        df = pl.DataFrame({"Filename": ["A", "A"], "Start": [1, 1], "End": [1, 1], "Mean": [1.0, 2.0]})

        with pytest.raises(AggregationError):
            fill_binned_positions(df, ["Mean"])

    def test_input_not_modified(self, binned: pl.DataFrame) -> None:
        before = binned.clone()

        fill_binned_positions(binned, ["Mean"])

        assert binned.equals(before)
