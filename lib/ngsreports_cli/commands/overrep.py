"""
The 'overrep' command for the ngsreports CLI.

Lists the most overrepresented sequences and optionally writes them to FASTA.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ngsreports import (
    NgsReportsError,
    QCModuleNotFoundError,
    overrepresented_table,
    write_overrepresented_fasta,
)
from ngsreports_cli.app import app
from ngsreports_cli.utils import error, load_labels, load_reports, success, warning, write_frame


@app.command("overrep")
def export_overrepresented(
    files: Annotated[
        list[Path],
        typer.Argument(help="FastQC reports (fastqc_data.txt or *_fastqc.zip).", exists=True),
    ],
    n: Annotated[
        int,
        typer.Option("--top", "-n", min=1, help="Number of sequences to keep."),
    ] = 10,
    exclude_adapters: Annotated[
        bool,
        typer.Option("--exclude-adapters", help="Drop sequences attributed to adapters or primers."),
    ] = False,
    labels: Annotated[
        Optional[Path],
        typer.Option("--labels", help="TSV of filename and label (no header).", exists=True, dir_okay=False),
    ] = None,
    fasta: Annotated[
        Optional[Path],
        typer.Option("--fasta", help="Also write the sequences to this FASTA file."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write a TSV here instead of printing."),
    ] = None,
) -> None:
    """
    [bold cyan]List[/bold cyan] the top overrepresented sequences.

    [dim]Examples:[/dim]

        ngsreports overrep reports/*_fastqc.zip -n 20 --fasta overrep.fa
    """
    try:
        reports = load_reports(files)
        table = overrepresented_table(reports, n, exclude_adapters, load_labels(labels))
    except QCModuleNotFoundError as exc:
        warning(str(exc))
        raise typer.Exit(code=2) from exc
    except (NgsReportsError, ValueError) as exc:
        error(str(exc))
        return

    write_frame(table, output, title="Overrepresented sequences")
    if fasta is not None:
        write_overrepresented_fasta(table, fasta)
        success(f"Wrote {len(table)} sequences to {fasta}")
