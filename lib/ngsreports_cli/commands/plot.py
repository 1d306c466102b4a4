"""
The 'plot' command for the ngsreports CLI.

Draws one chart from a set of reports and saves it as HTML, SVG or PNG.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ngsreports import NgsReportsError, QualityThresholds
from ngsreports.visualizations import PlotKind, plot_reports, save_chart
from ngsreports_cli.app import app
from ngsreports_cli.utils import error, load_labels, load_reports, success

PANEL_INPUT = "Input"
PANEL_CHART = "Chart"
PANEL_OUTPUT = "Output"


@app.command("plot")
def plot(
    kind: Annotated[PlotKind, typer.Argument(help="Chart to draw.")],
    files: Annotated[
        list[Path],
        typer.Argument(help="FastQC reports (fastqc_data.txt or *_fastqc.zip).", exists=True),
    ],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output path without extension.", rich_help_panel=PANEL_OUTPUT),
    ] = Path("ngsreports_plot"),
    formats: Annotated[
        Optional[list[str]],
        typer.Option("--format", "-f", help="html, svg or png; repeat for several.", rich_help_panel=PANEL_OUTPUT),
    ] = None,
    labels: Annotated[
        Optional[Path],
        typer.Option(
            "--labels",
            help="TSV of filename and label (no header).",
            exists=True,
            dir_okay=False,
            rich_help_panel=PANEL_INPUT,
        ),
    ] = None,
    continue_on_error: Annotated[
        bool,
        typer.Option(
            "--continue-on-error",
            help="Skip reports that fail to parse instead of stopping.",
            rich_help_panel=PANEL_INPUT,
        ),
    ] = False,
    threads: Annotated[
        int,
        typer.Option("--threads", "-t", min=1, help="Reports parsed in parallel.", rich_help_panel=PANEL_INPUT),
    ] = 1,
    cluster: Annotated[
        bool,
        typer.Option("--cluster", help="Order heatmap rows by hierarchical clustering.", rich_help_panel=PANEL_CHART),
    ] = False,
    value: Annotated[
        str,
        typer.Option("--value", help="Quality column for the base-quality heatmap.", rich_help_panel=PANEL_CHART),
    ] = "Mean",
    warn: Annotated[
        float,
        typer.Option("--warn", help="Quality below this is WARN.", rich_help_panel=PANEL_CHART),
    ] = 25,
    fail: Annotated[
        float,
        typer.Option("--fail", help="Quality below this is FAIL.", rich_help_panel=PANEL_CHART),
    ] = 20,
) -> None:
    """
    [bold green]Plot[/bold green] FastQC reports.

    [dim]Examples:[/dim]

        ngsreports plot summary reports/*_fastqc.zip -o summary
        ngsreports plot base-quality-heatmap reports/*.zip --cluster -f html -f png
    """
    try:
        thresholds = QualityThresholds(warn=warn, fail=fail)
        reports = load_reports(files, continue_on_error, threads)
        chart = plot_reports(
            reports,
            kind,
            labels=load_labels(labels),
            thresholds=thresholds,
            cluster=cluster,
            value=value,
        )
        saved = save_chart(chart, output, formats)
    except (NgsReportsError, ValueError) as exc:
        error(str(exc))
        return

    for path in saved:
        success(f"Saved {path}")
