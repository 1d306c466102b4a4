"""
Command modules for the ngsreports CLI.

Each submodule defines one or more Typer commands that are registered
with the main app in ngsreports_cli/__init__.py.
"""

from ngsreports_cli.commands import logs, module, overrep, plot, summary

__all__ = ["logs", "module", "overrep", "plot", "summary"]
