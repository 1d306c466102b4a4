"""
FastQC report parser.

Reads a FastQC `fastqc_data.txt` file, or the `*_fastqc.zip` bundle that
contains it, and returns a validated `FastqcReport`. Parsing is strict: any
structural mismatch fails the whole report with a `FormatError` rather than
returning partial data, since downstream aggregation assumes every file
contributes a uniform module set.

Example input (abridged):
    ##FastQC	0.11.9
    >>Basic Statistics	pass
    #Measure	Value
    Filename	sample_R1.fastq.gz
    ...
    >>END_MODULE
    >>Per base sequence quality	pass
    #Base	Mean	Median	...
    >>END_MODULE
"""

from __future__ import annotations

import zipfile
from pathlib import Path, PurePosixPath

import polars as pl
from loguru import logger

from ngsreports.errors import FormatError, ReportIOError
from ngsreports.parsers.modules import (
    BASIC_STATISTICS,
    DEDUP_HEADER,
    DEDUP_MODULE,
    build_basic_statistics,
    build_dedup_table,
    build_table,
)
from ngsreports.schema import FastqcReport, PwfStatus, module_key

END_MODULE = ">>END_MODULE"
MODULE_PREFIX = ">>"
VERSION_PREFIX = "##FastQC"
STATUS_TOKENS = {"pass": PwfStatus.PASS, "warn": PwfStatus.WARN, "fail": PwfStatus.FAIL}
DATA_FILE = "fastqc_data.txt"
SUMMARY_FILE = "summary.txt"


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Falling back to latin-1 decoding")
        return raw.decode("latin-1")


def read_report_text(path: Path) -> tuple[str, str | None]:
    """
    Read the raw report text (and summary.txt, if bundled) from a path.

    Args:
        path: Path to a fastqc_data.txt file or a FastQC ZIP bundle

    Returns:
        Tuple of (fastqc_data.txt contents, summary.txt contents or None)

    Raises:
        ReportIOError: The file is missing or unreadable
        FormatError: A ZIP bundle without fastqc_data.txt
    """
    try:
        if not zipfile.is_zipfile(path):
            with open(path, "rb") as handle:
                return _decode(handle.read()), None

        with zipfile.ZipFile(path) as bundle:
            names = bundle.namelist()
            data_name = next(
                (n for n in names if PurePosixPath(n).name == DATA_FILE),
                None,
            )
            if data_name is None:
                msg = f"No {DATA_FILE} found in archive {path}"
                raise FormatError(msg)
            summary_name = str(PurePosixPath(data_name).with_name(SUMMARY_FILE))
            data_text = _decode(bundle.read(data_name))
            summary_text = (
                _decode(bundle.read(summary_name)) if summary_name in names else None
            )
            return data_text, summary_text
    except (OSError, zipfile.BadZipFile) as exc:
        msg = f"Cannot read FastQC report {path}: {exc}"
        raise ReportIOError(msg) from exc


def split_sections(
    text: str,
) -> tuple[str | None, dict[str, tuple[str, ...]], dict[str, PwfStatus], dict[str, int]]:
    """
    Split raw report text into module sections.

    Args:
        text: Contents of fastqc_data.txt

    Returns:
        Tuple of (FastQC version, display name -> body lines,
        display name -> status, display name -> line number of first body line)

    Raises:
        FormatError: Missing version header, unterminated or nested module,
                     duplicate module, unknown status token or stray data
    """
    version: str | None = None
    sections: dict[str, list[str]] = {}
    statuses: dict[str, PwfStatus] = {}
    first_lines: dict[str, int] = {}
    current: str | None = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip("\r")
        if not line.strip():
            continue

        if line.startswith(VERSION_PREFIX):
            _, _, version = line.partition("\t")
            version = version.strip() or None
        elif line == END_MODULE:
            if current is None:
                raise FormatError(f"{END_MODULE} without an open module", line=lineno)
            current = None
        elif line.startswith(MODULE_PREFIX):
            name, sep, token = line[len(MODULE_PREFIX) :].partition("\t")
            if current is not None:
                raise FormatError(
                    f"Module not terminated before '{name}'",
                    module=current,
                    line=lineno,
                )
            if not sep or token not in STATUS_TOKENS:
                raise FormatError(
                    f"Invalid status token '{token}'",
                    module=name,
                    field="status",
                    line=lineno,
                )
            if name in sections:
                raise FormatError("Duplicate module", module=name, line=lineno)
            current = name
            sections[name] = []
            statuses[name] = STATUS_TOKENS[token]
            first_lines[name] = lineno + 1
        elif current is None and BASIC_STATISTICS not in sections:
            missing = "##FastQC header and " if version is None else ""
            raise FormatError(
                f"Not a FastQC report: {missing}{BASIC_STATISTICS} module not found",
                module=BASIC_STATISTICS,
                line=lineno,
            )
        elif current is None:
            raise FormatError("Data line outside any module", line=lineno)
        else:
            sections[current].append(line)

    if current is not None:
        raise FormatError(f"Missing {END_MODULE}", module=current)
    if version is None:
        raise FormatError(f"Missing {VERSION_PREFIX} header line")
    if BASIC_STATISTICS not in sections:
        raise FormatError("Required module not found", module=BASIC_STATISTICS)

    return (
        version,
        {name: tuple(lines) for name, lines in sections.items()},
        statuses,
        first_lines,
    )


def parse_summary(text: str) -> dict[str, PwfStatus]:
    """
    Parse a FastQC summary.txt (`STATUS<TAB>Module<TAB>Filename` per line).
    """
    summary: dict[str, PwfStatus] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        fields = line.rstrip("\r").split("\t")
        if len(fields) != 3:
            raise FormatError(
                f"Expected 3 fields, found {len(fields)}",
                module=SUMMARY_FILE,
                line=lineno,
            )
        try:
            summary[fields[1]] = PwfStatus(fields[0])
        except ValueError:
            raise FormatError(
                f"Invalid status '{fields[0]}'",
                module=SUMMARY_FILE,
                field="status",
                line=lineno,
            ) from None
    return summary


def parse_text(
    text: str,
    source: Path | str = "<text>",
    summary_text: str | None = None,
) -> FastqcReport:
    """
    Parse the contents of a fastqc_data.txt file.

    Args:
        text: Raw report contents
        source: Where the text came from, recorded on the report
        summary_text: Optional summary.txt contents to cross-check statuses

    Returns:
        Validated FastqcReport
    """
    version, sections, statuses, first_lines = split_sections(text)

    basic = build_basic_statistics(
        sections[BASIC_STATISTICS],
        first_line=first_lines[BASIC_STATISTICS],
    )
    filename = basic["Filename"][0]

    tables: dict[str, pl.DataFrame] = {}
    for name, lines in sections.items():
        key = module_key(name)
        if name == BASIC_STATISTICS:
            tables[key] = basic
            continue

        body = list(lines)
        if body and body[0].startswith(f"#{DEDUP_HEADER}"):
            _, _, value = body.pop(0).partition("\t")
            tables[DEDUP_MODULE] = build_dedup_table(
                value,
                filename,
                line=first_lines[name],
            )
            tables[key] = build_table(name, body, filename, first_lines[name] + 1)
        else:
            tables[key] = build_table(name, body, filename, first_lines[name])

    if summary_text is not None:
        for name, status in parse_summary(summary_text).items():
            if statuses.get(name) != status:
                raise FormatError(
                    f"summary.txt status {status.value} disagrees with report",
                    module=name,
                    field="status",
                )

    logger.debug(f"Parsed {len(tables)} modules for {filename} from {source}")

    return FastqcReport(
        filename=filename,
        source=Path(source),
        fastqc_version=version,
        sections=sections_by_key(sections),
        summary=statuses,
        tables=tables,
    )


def sections_by_key(sections: dict[str, tuple[str, ...]]) -> dict[str, tuple[str, ...]]:
    """Re-key raw sections by underscore module name."""
    return {module_key(name): lines for name, lines in sections.items()}


def parse(source: Path | str) -> FastqcReport:
    """
    Parse a FastQC report from a raw text file or ZIP bundle.

    Args:
        source: Path to fastqc_data.txt or a *_fastqc.zip archive

    Returns:
        Validated FastqcReport

    Raises:
        ReportIOError: The source cannot be read
        FormatError: The source does not follow the FastQC report grammar
    """
    path = Path(source)
    text, summary_text = read_report_text(path)
    return parse_text(text, source=path, summary_text=summary_text)
