"""
Ordered collections of parsed FastQC reports.

A `ReportCollection` is the canonical input of every aggregation function.
`as_collection` normalizes the other accepted inputs (a path, a sequence of
paths, a single report) into one, so callers can pass whatever they have.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Union, overload

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ngsreports.errors import AggregationError, FormatError, ReportIOError
from ngsreports.parsers.fastqc import parse
from ngsreports.schema import FastqcReport


class ReportCollection(Sequence[FastqcReport]):
    """An ordered sequence of reports, unique by filename."""

    def __init__(self, reports: Iterable[FastqcReport] = ()) -> None:
        self._reports: list[FastqcReport] = []
        seen: set[str] = set()
        for report in reports:
            if report.filename in seen:
                msg = f"Duplicate filename in collection: {report.filename}"
                raise AggregationError(msg)
            seen.add(report.filename)
            self._reports.append(report)

    @overload
    def __getitem__(self, index: int | str) -> FastqcReport: ...

    @overload
    def __getitem__(self, index: slice) -> ReportCollection: ...

    def __getitem__(self, index: int | str | slice) -> FastqcReport | ReportCollection:
        if isinstance(index, slice):
            return ReportCollection(self._reports[index])
        if isinstance(index, str):
            for report in self._reports:
                if report.filename == index:
                    return report
            raise KeyError(index)
        return self._reports[index]

    def __len__(self) -> int:
        return len(self._reports)

    def __iter__(self) -> Iterator[FastqcReport]:
        return iter(self._reports)

    def __repr__(self) -> str:
        return f"ReportCollection({self.filenames!r})"

    @property
    def filenames(self) -> list[str]:
        return [report.filename for report in self._reports]

    def reorder(self, filenames: Sequence[str]) -> ReportCollection:
        """Return a new collection in the given filename order."""
        if sorted(filenames) != sorted(self.filenames):
            msg = "Requested order must be a permutation of the collection filenames"
            raise AggregationError(msg)
        return ReportCollection(self[name] for name in filenames)


class ParseResult(BaseModel):
    """Outcome of parsing a batch of reports."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    reports: ReportCollection
    failures: dict[Path, Exception] = Field(
        default_factory=dict,
        description="Sources that failed to parse, with the raised error",
    )

    @property
    def ok(self) -> bool:
        return not self.failures


def parse_many(
    sources: Iterable[Path | str],
    continue_on_error: bool = False,
    max_workers: int = 1,
) -> ParseResult:
    """
    Parse several FastQC reports into a collection in caller order.

    Files are parsed independently, optionally across a thread pool. The
    resulting collection always follows the order of `sources`, regardless
    of completion order.

    Args:
        sources: Paths to fastqc_data.txt files or FastQC ZIP bundles
        continue_on_error: Record per-file IO/format failures instead of raising
        max_workers: Number of parser threads; 1 parses sequentially

    Returns:
        ParseResult with the parsed collection and any recorded failures

    Raises:
        ReportIOError, FormatError: First failure in caller order, unless
            continue_on_error is set
    """
    paths = [Path(s) for s in sources]
    outcomes: list[FastqcReport | Exception] = []

    if max_workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(parse, path) for path in paths]
            for future in futures:
                exc = future.exception()
                outcomes.append(exc if exc is not None else future.result())
    else:
        for path in paths:
            try:
                outcomes.append(parse(path))
            except (ReportIOError, FormatError) as exc:
                outcomes.append(exc)

    reports: list[FastqcReport] = []
    failures: dict[Path, Exception] = {}
    for path, outcome in zip(paths, outcomes):
        if not isinstance(outcome, Exception):
            reports.append(outcome)
            continue
        if not continue_on_error or not isinstance(outcome, ReportIOError | FormatError):
            raise outcome
        logger.warning(f"Skipping {path}: {outcome}")
        failures[path] = outcome

    logger.info(f"Parsed {len(reports)} of {len(paths)} FastQC reports")
    return ParseResult(reports=ReportCollection(reports), failures=failures)


ReportInput = Union[
    Path,
    str,
    Sequence[Union[Path, str, FastqcReport]],
    FastqcReport,
    ReportCollection,
]


def as_collection(x: ReportInput) -> ReportCollection:
    """
    Normalize any accepted report input into a ReportCollection.

    Accepts a collection (returned as is), a single parsed report, a single
    path, or a sequence mixing paths and parsed reports. Paths in a sequence
    are parsed and the result keeps the sequence order.
    """
    if isinstance(x, ReportCollection):
        return x
    if isinstance(x, FastqcReport):
        return ReportCollection([x])
    if isinstance(x, (str, Path)):
        return ReportCollection([parse(x)])
    if isinstance(x, Sequence):
        items = list(x)
        paths = [item for item in items if not isinstance(item, FastqcReport)]
        unsupported = [item for item in paths if not isinstance(item, (str, Path))]
        if unsupported:
            msg = (
                "Report sequences may only hold paths and parsed reports, "
                f"got {type(unsupported[0]).__name__}"
            )
            raise TypeError(msg)
        parsed = iter(parse_many(paths).reports if paths else [])
        return ReportCollection(
            [item if isinstance(item, FastqcReport) else next(parsed) for item in items],
        )
    msg = f"Cannot build a report collection from {type(x).__name__}"
    raise TypeError(msg)
