"""
The 'summary' command for the ngsreports CLI.

Prints (or writes) the PASS/WARN/FAIL status of every module for every report.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ngsreports import NgsReportsError, apply_labels, get_summary, make_labels
from ngsreports_cli.app import app
from ngsreports_cli.utils import error, load_labels, load_reports, write_frame

PANEL_INPUT = "Input"
PANEL_OUTPUT = "Output"


@app.command("summary")
def summarise_reports(
    files: Annotated[
        list[Path],
        typer.Argument(help="FastQC reports (fastqc_data.txt or *_fastqc.zip).", exists=True),
    ],
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
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write a TSV here instead of printing.", rich_help_panel=PANEL_OUTPUT),
    ] = None,
) -> None:
    """
    [bold cyan]Summarise[/bold cyan] FastQC module status across reports.

    [dim]Examples:[/dim]

        ngsreports summary reports/*_fastqc.zip
        ngsreports summary reports/*_fastqc.zip --output summary.tsv
    """
    try:
        reports = load_reports(files, continue_on_error, threads)
        table = apply_labels(
            get_summary(reports),
            make_labels(reports.filenames, load_labels(labels)),
        )
    except (NgsReportsError, ValueError) as exc:
        error(str(exc))
        return
    write_frame(table, output, title="FastQC summary")
