"""
Command-line interface for ngsreports.

Usage:
    ngsreports summary reports/*_fastqc.zip
    ngsreports module "Per base sequence quality" reports/*_fastqc.zip -o quality.tsv
    ngsreports plot base-quality-heatmap reports/*_fastqc.zip --cluster
    ngsreports logs cutadapt logs/*.log
"""

from ngsreports_cli.app import app

# Registers the commands on `app`
from ngsreports_cli.commands import logs, module, overrep, plot, summary  # noqa: F401
from ngsreports_cli.utils import err_console

__all__ = ["app", "main"]

# Shell convention for termination by SIGINT
INTERRUPTED_EXIT_CODE = 130


def main() -> None:
    """Run the CLI; Ctrl+C ends it quietly with exit code 130."""
    try:
        app()
    except KeyboardInterrupt:
        err_console.print("[yellow]Interrupted[/yellow]")
        raise SystemExit(INTERRUPTED_EXIT_CODE) from None
