"""
ngsreports: FastQC report parsing, aggregation and visualization.

Subpackages:
    parsers: FastQC report parsing into typed per-module tables
    logs: Trimmomatic, cutadapt and AdapterRemoval log parsers
    visualizations: Altair-based chart generation

Modules:
    schema: Pydantic models for reports, thresholds and colours
    collection: Ordered report collections and batch parsing
    aggregate: Cross-report module tables, labels and binned-position filling
    classify: PASS/WARN/FAIL classification
    cluster: Hierarchical clustering of files
    residuals: Per-position residuals across files
    export: Overrepresented sequence tables and FASTA export
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ngsreports")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"

from .aggregate import (
    DEFAULT_SUFFIX,
    apply_labels,
    fill_binned_positions,
    get_module,
    get_summary,
    make_labels,
    split_base,
)
from .classify import attach_summary_status, classify_pwf, classify_value
from .cluster import ClusterResult, cluster_filenames
from .collection import ParseResult, ReportCollection, as_collection, parse_many
from .errors import (
    AggregationError,
    FormatError,
    NgsReportsError,
    QCModuleNotFoundError,
    ReportIOError,
)
from .export import overrepresented_table, write_overrepresented_fasta
from .logs import import_logs
from .parsers import parse
from .residuals import compute_residuals, drop_binned_duplicates, sequence_content_residuals
from .schema import (
    BASE_QUALITY_THRESHOLDS,
    DEFAULT_PWF_COLOURS,
    FastqcReport,
    PwfColours,
    PwfStatus,
    QualityThresholds,
)

__all__ = [
    "BASE_QUALITY_THRESHOLDS",
    "DEFAULT_PWF_COLOURS",
    "DEFAULT_SUFFIX",
    "AggregationError",
    "ClusterResult",
    "FastqcReport",
    "FormatError",
    "NgsReportsError",
    "ParseResult",
    "PwfColours",
    "PwfStatus",
    "QCModuleNotFoundError",
    "QualityThresholds",
    "ReportCollection",
    "ReportIOError",
    "__version__",
    "apply_labels",
    "as_collection",
    "attach_summary_status",
    "classify_pwf",
    "classify_value",
    "cluster_filenames",
    "compute_residuals",
    "drop_binned_duplicates",
    "fill_binned_positions",
    "get_module",
    "get_summary",
    "import_logs",
    "make_labels",
    "overrepresented_table",
    "parse",
    "parse_many",
    "sequence_content_residuals",
    "split_base",
    "write_overrepresented_fasta",
]
