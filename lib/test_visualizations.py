"""Tests for the Altair chart generators."""

from collections.abc import Callable
from pathlib import Path

import altair as alt
import polars as pl
import pytest
from ngsreports.collection import ReportCollection, parse_many
from ngsreports.schema import PWF_LEVELS, PwfColours
from ngsreports.visualizations import (
    PlotKind,
    base_quality_boxplot,
    base_quality_heatmap,
    overrepresented_summary,
    plot_reports,
    prepare_base_quality_boxplot,
    prepare_base_quality_heatmap,
    prepare_overrepresented_summary,
    prepare_sequence_content_heatmap,
    prepare_sequence_content_lines,
    prepare_sequence_content_residuals,
    prepare_summary_data,
    quality_encoding,
    save_chart,
    sequence_content_heatmap,
    sequence_content_lines,
    sequence_content_residuals_chart,
    summary_heatmap,
)
from ngsreports.visualizations.sequence_content import base_colour
from ngsreports.visualizations.utils import pwf_scale


@pytest.fixture
def reports(two_reports: list[Path]) -> ReportCollection:
    return parse_many(two_reports).reports


def mark_type(chart: alt.TopLevelMixin) -> str:
    mark = chart.to_dict()["mark"]
    return mark["type"] if isinstance(mark, dict) else mark


class TestBaseQualityHeatmap:
    """Tests for the base-quality heatmap."""

    def test_prepare_fills_and_classifies(self, reports: ReportCollection) -> None:
        """Binned positions are expanded and each tile is classified."""
        data = prepare_base_quality_heatmap(reports)

        assert set(data.columns) >= {"Filename", "Start", "Mean", "Status", "Order"}
        b = data.filter(pl.col("Filename") == "B").sort("Start")
        assert b["Start"].to_list() == [1, 2, 3, 4, 5]
        assert b["Mean"].to_list() == [36.0, 24.0, 22.0, 22.0, 18.0]
        assert b["Status"].to_list() == ["PASS", "WARN", "WARN", "WARN", "FAIL"]

    def test_cluster_order_is_permutation(self, reports: ReportCollection) -> None:
        data = prepare_base_quality_heatmap(reports, cluster=True)

        assert sorted(data["Order"].unique().to_list()) == [0, 1]

    def test_unknown_value_column(self, reports: ReportCollection) -> None:
        with pytest.raises(ValueError, match="Cannot plot"):
            prepare_base_quality_heatmap(reports, value="Mode")

    def test_chart(self, reports: ReportCollection) -> None:
        """The heatmap uses the given PASS/WARN/FAIL colours."""
        colours = PwfColours(pass_colour="#00ff00")
        chart = base_quality_heatmap(prepare_base_quality_heatmap(reports), colours=colours)

        spec = chart.to_dict()
        assert mark_type(chart) == "rect"
        assert "#00ff00" in spec["encoding"]["color"]["scale"]["range"]

    def test_empty_placeholder(self) -> None:
        """An empty table draws a text placeholder instead of failing."""
        empty = pl.DataFrame(schema={"Filename": pl.Utf8, "Start": pl.Int64, "Mean": pl.Float64})

        assert mark_type(base_quality_heatmap(empty)) == "text"


class TestBaseQualityBoxplot:
    """Tests for the FastQC-style boxplot."""

    def test_prepare(self, reports: ReportCollection) -> None:
        data = prepare_base_quality_boxplot(reports)

        assert data.filter(pl.col("Filename") == "A")["Position"].to_list() == [1, 2, 3, 4]
        assert "90th_Percentile" in data.columns

    def test_panel_per_file(self, reports: ReportCollection) -> None:
        data = prepare_base_quality_boxplot(reports)

        assert isinstance(base_quality_boxplot(data), alt.ConcatChart)
        single = base_quality_boxplot(data.filter(pl.col("Filename") == "A"))
        assert isinstance(single, alt.LayerChart)
        single.to_dict()

    def test_encoding(self, reports: ReportCollection) -> None:
        assert quality_encoding(reports) == "Illumina 1.9"


class TestSequenceContent:
    """Tests for the sequence content charts."""

    def test_base_colour(self) -> None:
        """T maps to red, and G darkens the tile."""
        assert base_colour(50.0, 0.0, 0.0, 0.0, 50.0) == "#FF0000"
        assert base_colour(0.0, 0.0, 50.0, 0.0, 50.0) == "#00FF00"
        assert base_colour(25.0, 25.0, 25.0, 25.0, 25.0) == "#000000"

    def test_heatmap(self, reports: ReportCollection) -> None:
        data = prepare_sequence_content_heatmap(reports, cluster=True)

        assert data["Colour"].str.contains(r"^#[0-9A-F]{6}$").all()
        assert data.filter(pl.col("Filename") == "A")["Position"].to_list() == [
            "1bp",
            "2bp",
            "3-4bp",
            "5bp",
        ]
        assert mark_type(sequence_content_heatmap(data)) == "rect"

    def test_lines(self, reports: ReportCollection) -> None:
        data = prepare_sequence_content_lines(reports)

        assert data.height == 2 * 4 * 4
        assert set(data["Status"].to_list()) == {"WARN"}
        spec = sequence_content_lines(data).to_dict()
        assert "facet" in spec

    def test_long_form_base_is_nucleotide(self, reports: ReportCollection) -> None:
        """The module's own Base range column does not clash with the nucleotide column."""
        data = prepare_sequence_content_lines(reports)

        assert data["Base"].unique(maintain_order=True).to_list() == ["T", "C", "A", "G"]
        assert set(data.filter(pl.col("Filename") == "A")["Position"].to_list()) == {
            "1",
            "2",
            "3-4",
            "5",
        }

    def test_clustered_heatmap_keeps_every_file(self, reports: ReportCollection) -> None:
        data = prepare_sequence_content_heatmap(reports, cluster=True)

        assert sorted(data["Order"].unique().to_list()) == [0, 1]
        assert data.height == 8

    def test_residuals(self, reports: ReportCollection) -> None:
        data = prepare_sequence_content_residuals(reports)

        assert set(data["Filename"].to_list()) == {"A", "B"}
        assert "facet" in sequence_content_residuals_chart(data).to_dict()


class TestSummaryAndOverrepresented:
    """Tests for the summary heatmap and overrepresented summary."""

    def test_summary_heatmap(self, reports: ReportCollection) -> None:
        data = prepare_summary_data(reports, labels={"A.fastq.gz": "a", "B.fastq.gz": "b"})

        assert set(data["Filename"].to_list()) == {"a", "b"}
        assert mark_type(summary_heatmap(data)) == "rect"

    def test_overrepresented_summary(self, reports: ReportCollection) -> None:
        data = prepare_overrepresented_summary(reports)

        assert data.height == 4
        assert data["Sequences"].to_list() == [1, 1, 1, 1]
        assert mark_type(overrepresented_summary(data)) == "bar"


class TestPlotReports:
    """Tests for drawing charts straight from reports."""

    @pytest.mark.parametrize("kind", list(PlotKind))
    def test_every_kind(self, reports: ReportCollection, kind: PlotKind) -> None:
        chart = plot_reports(reports, kind)

        assert isinstance(chart.to_dict(), dict)

    def test_missing_module_placeholder(self, write_report: Callable[..., Path]) -> None:
        """A missing module gives a placeholder chart, not an exception."""
        path = write_report(include_content=False)

        chart = plot_reports(path, PlotKind.content_heatmap)

        assert mark_type(chart) == "text"


class TestSaveChart:
    """Tests for chart output."""

    def test_html(self, tmp_path: Path, reports: ReportCollection) -> None:
        chart = plot_reports(reports, "summary")

        saved = save_chart(chart, tmp_path / "summary")

        assert saved == [tmp_path / "summary.html"]
        assert saved[0].exists()

    def test_unknown_format(self, tmp_path: Path, reports: ReportCollection) -> None:
        with pytest.raises(ValueError, match="Unsupported format"):
            save_chart(plot_reports(reports, "summary"), tmp_path / "x", ["pdf"])


class TestPwfColours:
    """Tests for status colour configuration."""

    def test_one_colour_per_status(self) -> None:
        """Colours are configured for exactly PASS, WARN and FAIL."""
        colours = PwfColours(fail_colour="#000000")

        assert set(PwfColours.model_fields) == {"pass_colour", "warn_colour", "fail_colour"}
        assert list(colours.mapping()) == PWF_LEVELS
        assert pwf_scale(colours).to_dict()["range"][-1] == "#000000"
