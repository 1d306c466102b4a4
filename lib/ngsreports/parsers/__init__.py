"""
Report parsers for ngsreports.

Modules:
    fastqc: Split a FastQC report into modules and build a FastqcReport
    modules: Typed table construction for individual FastQC modules
"""

from .fastqc import parse, parse_text, read_report_text, split_sections
from .modules import build_table, parse_range

__all__ = [
    "build_table",
    "parse",
    "parse_range",
    "parse_text",
    "read_report_text",
    "split_sections",
]
