"""
The 'module' command for the ngsreports CLI.

Exports one FastQC module from every report as a single table.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ngsreports import NgsReportsError, QCModuleNotFoundError, get_module
from ngsreports_cli.app import app
from ngsreports_cli.utils import error, load_reports, warning, write_frame


@app.command("module")
def export_module(
    name: Annotated[
        str,
        typer.Argument(help='Module name, e.g. "Per base sequence quality" or Per_base_sequence_quality.'),
    ],
    files: Annotated[
        list[Path],
        typer.Argument(help="FastQC reports (fastqc_data.txt or *_fastqc.zip).", exists=True),
    ],
    continue_on_error: Annotated[
        bool,
        typer.Option("--continue-on-error", help="Skip reports that fail to parse instead of stopping."),
    ] = False,
    threads: Annotated[
        int,
        typer.Option("--threads", "-t", min=1, help="Reports parsed in parallel."),
    ] = 1,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write a TSV here instead of printing."),
    ] = None,
) -> None:
    """
    [bold cyan]Export[/bold cyan] one FastQC module across reports.

    [dim]Examples:[/dim]

        ngsreports module Basic_Statistics reports/*_fastqc.zip
        ngsreports module "Per base sequence content" reports/*.zip -o content.tsv
    """
    try:
        reports = load_reports(files, continue_on_error, threads)
        table = get_module(reports, name)
    except QCModuleNotFoundError as exc:
        warning(str(exc))
        raise typer.Exit(code=2) from exc
    except (NgsReportsError, ValueError) as exc:
        error(str(exc))
        return
    write_frame(table, output, title=name)
