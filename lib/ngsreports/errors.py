"""
Exception types raised by ngsreports.

Parsing failures are fatal to a single report but never to a batch; callers
decide whether to continue. A missing module is recoverable and signals
"no data" to chart builders and the CLI.
"""

from __future__ import annotations


class NgsReportsError(Exception):
    """Base class for all ngsreports errors."""


class ReportIOError(NgsReportsError, OSError):
    """A report or log file could not be opened or read."""


class FormatError(NgsReportsError, ValueError):
    """Input does not match the expected report or log grammar."""

    def __init__(
        self,
        message: str,
        *,
        module: str | None = None,
        field: str | None = None,
        line: int | None = None,
    ) -> None:
        self.module = module
        self.field = field
        self.line = line
        context = []
        if module is not None:
            context.append(f"module '{module}'")
        if field is not None:
            context.append(f"field '{field}'")
        if line is not None:
            context.append(f"line {line}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class QCModuleNotFoundError(NgsReportsError, LookupError):
    """No report in a collection contains the requested module."""

    def __init__(self, module: str) -> None:
        self.module = module
        super().__init__(f"No '{module}' module found in any report")


class AggregationError(NgsReportsError, ValueError):
    """Per-file tables cannot be combined into one consistent table."""
