"""
The 'logs' command for the ngsreports CLI.

Tabulates Trimmomatic, cutadapt or AdapterRemoval logs.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer

from ngsreports import NgsReportsError, import_logs
from ngsreports_cli.app import app
from ngsreports_cli.utils import error, write_frame


class LogType(str, Enum):
    """Supported trimming tools."""

    trimmomatic = "trimmomatic"
    cutadapt = "cutadapt"
    adapterremoval = "adapterremoval"


@app.command("logs")
def tabulate_logs(
    log_type: Annotated[LogType, typer.Argument(help="Tool that wrote the logs.")],
    files: Annotated[list[Path], typer.Argument(help="Log files.", exists=True)],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write a TSV here instead of printing."),
    ] = None,
) -> None:
    """
    [bold cyan]Tabulate[/bold cyan] trimming logs, one row per log.

    [dim]Examples:[/dim]

        ngsreports logs cutadapt logs/*.cutadapt.log
    """
    try:
        table = import_logs(files, log_type.value)
    except (NgsReportsError, ValueError) as exc:
        error(str(exc))
        return
    write_frame(table, output, title=f"{log_type.value} logs")
