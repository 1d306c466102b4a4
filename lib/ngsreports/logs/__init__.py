"""
Parsers for adapter and quality trimming logs.

Each tool module exposes `parse(lines, filename=None)` returning a one-row
polars DataFrame; `import_logs` reads files and stacks the rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import polars as pl
from loguru import logger

from ngsreports.logs import adapter_removal, cutadapt, trimmomatic
from ngsreports.logs.utils import read_log_lines

LOG_PARSERS: dict[str, Callable[[Sequence[str], str | None], pl.DataFrame]] = {
    "trimmomatic": trimmomatic.parse,
    "cutadapt": cutadapt.parse,
    "adapterremoval": adapter_removal.parse,
}


def import_logs(paths: Iterable[Path | str], log_type: str) -> pl.DataFrame:
    """
    Parse trimming logs of one type into a single table.

    Args:
        paths: Log files
        log_type: One of "trimmomatic", "cutadapt", "adapterremoval"
                  (case-insensitive; "adapter_removal" is also accepted)

    Returns:
        DataFrame with one row per log; columns absent from some logs are null

    Raises:
        ValueError: Unknown log type or no paths
        ReportIOError: A file cannot be read
        FormatError: A log is missing mandatory lines
    """
    key = log_type.lower().replace("_", "")
    if key not in LOG_PARSERS:
        msg = f"Unknown log type '{log_type}'. Expected one of: {', '.join(LOG_PARSERS)}"
        raise ValueError(msg)

    parser = LOG_PARSERS[key]
    frames = []
    for path in paths:
        path = Path(path)
        lines = read_log_lines(path)
        frame = parser(lines, None)
        if frame["Filename"][0] is None:
            frame = frame.with_columns(pl.lit(path.name).alias("Filename"))
        frames.append(frame)
        logger.debug(f"Parsed {log_type} log {path}")

    if not frames:
        msg = "No log files given"
        raise ValueError(msg)

    return pl.concat(frames, how="diagonal_relaxed")


__all__ = ["LOG_PARSERS", "adapter_removal", "cutadapt", "import_logs", "trimmomatic"]
