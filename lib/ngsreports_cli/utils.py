"""
Utility functions for the ngsreports CLI.

Provides console output helpers, logging setup, report loading and table
output shared by the commands.
"""

import sys
from pathlib import Path
from typing import Optional

import polars as pl
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table

from ngsreports import ReportCollection, parse_many

# Shared console instances
console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Console Output Helpers
# =============================================================================


def error(message: str, exit_code: int = 1) -> None:
    """Print an error message and optionally exit."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    if exit_code:
        sys.exit(exit_code)


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def configure_logging(verbose: bool = False) -> None:
    """Send library logging to stderr, at DEBUG when verbose and WARNING otherwise."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


# =============================================================================
# Inputs
# =============================================================================


def load_labels(path: Optional[Path]) -> Optional[dict[str, str]]:
    """
    Read a two-column TSV of filename and label, without a header.

    Returns None when no path is given so the default labels are used.
    """
    if path is None:
        return None
    table = pl.read_csv(
        path,
        separator="\t",
        has_header=False,
        new_columns=["Filename", "Label"],
        schema_overrides={"Filename": pl.Utf8, "Label": pl.Utf8},
    )
    return dict(zip(table["Filename"].to_list(), table["Label"].to_list()))


def load_reports(
    files: list[Path],
    continue_on_error: bool = False,
    threads: int = 1,
) -> ReportCollection:
    """
    Parse the given reports, warning about (or stopping on) failures.

    Exits with an error when nothing could be parsed.
    """
    result = parse_many(files, continue_on_error=continue_on_error, max_workers=threads)
    for source, exc in result.failures.items():
        warning(f"Skipped {source}: {exc}")
    if len(result.reports) == 0:
        error("No reports could be parsed.")
    return result.reports


# =============================================================================
# Output
# =============================================================================


def print_frame(df: pl.DataFrame, title: Optional[str] = None) -> None:
    """Render a DataFrame as a rich table."""
    table = Table(title=title, box=box.ROUNDED, header_style="bold magenta")
    for column in df.columns:
        table.add_column(column)
    for row in df.iter_rows():
        table.add_row(*["" if value is None else str(value) for value in row])
    console.print(table)


def write_frame(df: pl.DataFrame, output: Optional[Path], title: Optional[str] = None) -> None:
    """Write a DataFrame as TSV when an output path is given, else print it."""
    if output is None:
        print_frame(df, title)
        return
    df.write_csv(output, separator="\t")
    success(f"Wrote {len(df)} rows to {output}")
