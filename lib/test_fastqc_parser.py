"""Tests for the FastQC report parser."""

import zipfile
from collections.abc import Callable
from pathlib import Path

import polars as pl
import pytest
from conftest import build_fastqc_text
from ngsreports.errors import FormatError, ReportIOError
from ngsreports.parsers import build_table, parse, parse_range, parse_text, split_sections
from ngsreports.schema import PwfStatus


class TestSplitSections:
    """Tests for splitting report text into modules."""

    def test_reads_version_and_statuses(self) -> None:
        """Version header and every module's status token are captured."""
        version, sections, statuses, _ = split_sections(build_fastqc_text())

        assert version == "0.11.9"
        assert statuses["Basic Statistics"] is PwfStatus.PASS
        assert statuses["Per base sequence content"] is PwfStatus.WARN
        assert sections["Per base sequence quality"][0].startswith("#Base")

    def test_unterminated_module_fails(self) -> None:
        """A module without >>END_MODULE fails naming the module."""
        text = build_fastqc_text().replace(">>END_MODULE\n>>Per base sequence content", ">>Per base sequence content", 1)

        with pytest.raises(FormatError) as exc_info:
            split_sections(text)

        assert exc_info.value.module == "Per base sequence quality"

    def test_status_token_must_match_exactly(self) -> None:
        """Status tokens are case-sensitive."""
        text = build_fastqc_text().replace("Per base sequence quality\tpass", "Per base sequence quality\tPASS")

        with pytest.raises(FormatError, match="Invalid status token"):
            split_sections(text)

    def test_missing_version_header_fails(self) -> None:
        """Reports must start with the ##FastQC line."""
        text = build_fastqc_text().replace("##FastQC\t0.11.9\n", "")

        with pytest.raises(FormatError, match="##FastQC"):
            split_sections(text)

    def test_missing_basic_statistics_fails(self) -> None:
        """Basic Statistics is mandatory."""
        text = build_fastqc_text().replace(">>Basic Statistics", ">>Basic Stats")

        with pytest.raises(FormatError) as exc_info:
            split_sections(text)

        assert exc_info.value.module == "Basic Statistics"

    def test_data_outside_module_fails(self) -> None:
        """Stray lines between modules are rejected."""
        text = build_fastqc_text().replace(">>END_MODULE\n", ">>END_MODULE\nstray\n", 1)

        with pytest.raises(FormatError, match="outside any module"):
            split_sections(text)


class TestBuildTable:
    """Tests for typed module table construction."""

    def test_typed_columns(self) -> None:
        """Known modules get Float64 values, text ranges and a Filename column."""
        lines = [
            "#Base\tMean\tMedian\tLower Quartile\tUpper Quartile\t10th Percentile\t90th Percentile",
            "1\t32.5\t34.0\t31.0\t34.0\t27.0\t34.0",
            "2-3\t32.1\t34.0\t31.0\t34.0\t26.0\t34.0",
        ]

        table = build_table("Per base sequence quality", lines, "s.fq")

        assert table.columns[0] == "Filename"
        assert "Lower_Quartile" in table.columns
        assert table.schema["Base"] == pl.Utf8
        assert table.schema["Mean"] == pl.Float64
        assert table["Base"].to_list() == ["1", "2-3"]

    def test_wrong_field_count(self) -> None:
        """A row with too few fields fails with its line number."""
        lines = ["#Base\tG\tA\tT\tC", "1\t20.0\t30.0\t30.0"]

        with pytest.raises(FormatError) as exc_info:
            build_table("Per base sequence content", lines, "s.fq", first_line=10)

        assert exc_info.value.line == 11

    def test_malformed_number_names_field_and_line(self) -> None:
        """An unparsable number fails naming module, field and line."""
        lines = ["#Base\tG\tA\tT\tC", "1\t20.0\tabc\t30.0\t20.0"]

        with pytest.raises(FormatError) as exc_info:
            build_table("Per base sequence content", lines, "s.fq", first_line=5)

        err = exc_info.value
        assert err.module == "Per base sequence content"
        assert err.field == "A"
        assert err.line == 6

    def test_nan_is_accepted(self) -> None:
        """FastQC writes NaN for empty positions."""
        lines = ["#Base\tG\tA\tT\tC", "1\tNaN\t30.0\t30.0\t20.0"]

        table = build_table("Per base sequence content", lines, "s.fq")

        assert table["G"].is_nan().to_list() == [True]

    def test_empty_overrepresented_module_has_columns(self) -> None:
        """An empty module without a header still has the expected columns."""
        table = build_table("Overrepresented sequences", [], "s.fq")

        assert table.is_empty()
        assert table.columns == ["Filename", "Sequence", "Count", "Percentage", "Possible_Source"]

    def test_unknown_module_is_text(self) -> None:
        """Modules without a column spec are kept as text."""
        table = build_table("Custom Module", ["#Key\tValue", "a\t1"], "s.fq")

        assert table.schema["Value"] == pl.Utf8


class TestParseRange:
    """Tests for position/range parsing."""

    def test_single_position(self) -> None:
        assert parse_range("7") == (7, 7)

    def test_range(self) -> None:
        assert parse_range("35-36") == (35, 36)

    def test_malformed(self) -> None:
        with pytest.raises(FormatError):
            parse_range("35-")


class TestParse:
    """Tests for parsing whole reports from disk."""

    def test_parse_text_file(self, write_report: Callable[..., Path]) -> None:
        """A raw fastqc_data.txt yields a report with tables for every module."""
        report = parse(write_report())

        assert report.filename == "sample1.fastq.gz"
        assert report.fastqc_version == "0.11.9"
        assert "Per_base_sequence_quality" in report.modules
        assert report.summary["Overrepresented sequences"] is PwfStatus.WARN
        assert len(report.get_table("Per base sequence quality")) == 4

    def test_basic_statistics_wide(self, write_report: Callable[..., Path]) -> None:
        """Basic Statistics becomes one row with typed counts and read lengths."""
        report = parse(write_report(sequence_length="35-151"))
        basic = report.get_table("Basic_Statistics")

        assert basic.height == 1
        assert basic["Total_Sequences"][0] == 1000
        assert basic["Shortest_sequence"][0] == 35
        assert basic["Longest_sequence"][0] == 151
        assert basic["Encoding"][0] == "Sanger / Illumina 1.9"

    def test_total_deduplicated_percentage(self, write_report: Callable[..., Path]) -> None:
        """The deduplication header line is exposed as its own module."""
        report = parse(write_report())

        dedup = report.get_table("Total_Deduplicated_Percentage")
        levels = report.get_table("Sequence Duplication Levels")
        assert dedup["Total"].to_list() == [85.5]
        assert levels["Duplication_Level"].to_list() == ["1", ">10"]

    def test_parse_zip(self, write_zip: Callable[..., Path]) -> None:
        """A ZIP bundle is read, and its summary.txt cross-checks cleanly."""
        report = parse(write_zip("sample2"))

        assert report.filename == "sample2.fastq.gz"
        assert report.source.name == "sample2_fastqc.zip"

    def test_zip_summary_disagreement(self, write_zip: Callable[..., Path]) -> None:
        """A summary.txt that contradicts the report fails."""
        path = write_zip(
            "sample3",
            summary="FAIL\tBasic Statistics\tsample3.fastq.gz\n",
        )

        with pytest.raises(FormatError, match="disagrees"):
            parse(path)

    def test_zip_without_data_file(self, tmp_path: Path) -> None:
        """A ZIP without fastqc_data.txt is a format error."""
        path = tmp_path / "empty_fastqc.zip"
        with zipfile.ZipFile(path, "w") as bundle:
            bundle.writestr("empty_fastqc/summary.txt", "")

        with pytest.raises(FormatError):
            parse(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ReportIOError, which is also an OSError."""
        with pytest.raises(ReportIOError):
            parse(tmp_path / "missing.txt")
        with pytest.raises(OSError):
            parse(tmp_path / "missing.txt")

    def test_not_a_fastqc_report(self, tmp_path: Path) -> None:
        """A file without FastQC markers names the module it is missing."""
        path = tmp_path / "notes.txt"
        path.write_text("sample\treads\nA\t1000\n", encoding="utf-8")

        with pytest.raises(FormatError, match="Not a FastQC report") as exc_info:
            parse(path)

        assert exc_info.value.module == "Basic Statistics"
        assert exc_info.value.line == 1

    def test_latin1_fallback(self, tmp_path: Path) -> None:
        """Files that are not valid UTF-8 are decoded as latin-1."""
        path = tmp_path / "latin1_fastqc_data.txt"
        path.write_bytes(build_fastqc_text(filename="échantillon.fq").encode("latin-1"))

        assert parse(path).filename == "échantillon.fq"

    def test_parse_text_records_source(self) -> None:
        """Text parsed in memory records the given source."""
        report = parse_text(build_fastqc_text(), source="memory.txt")

        assert report.source == Path("memory.txt")

    def test_report_is_immutable(self, write_report: Callable[..., Path]) -> None:
        """Reports are frozen after parsing."""
        report = parse(write_report())

        with pytest.raises(ValueError):
            report.filename = "other"  # type: ignore[misc]
