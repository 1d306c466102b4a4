"""
Typer application instance for the ngsreports CLI.

This module defines the main Typer app and any shared configuration.
Commands are registered via the commands subpackage.
"""

from typing import Annotated

import typer

from ngsreports_cli.utils import configure_logging

# The main Typer application instance
app = typer.Typer(
    name="ngsreports",
    help="ngsreports: Summarise and plot FastQC reports and trimming logs.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging on stderr."),
    ] = False,
) -> None:
    """Shared options applied before any command runs."""
    configure_logging(verbose)
