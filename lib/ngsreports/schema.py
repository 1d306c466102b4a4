"""
Pydantic models shared across ngsreports.

These models define the parsed report value produced by the FastQC parser
and the explicit configuration values (thresholds, colours) passed into the
classification and charting functions. Nothing here holds process-wide
mutable state: defaults are plain module-level instances of frozen models.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import polars as pl
from pydantic import BaseModel, ConfigDict, Field, model_validator


class PwfStatus(str, Enum):
    """PASS/WARN/FAIL classification attached to each module per file."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


PWF_LEVELS = [PwfStatus.PASS.value, PwfStatus.WARN.value, PwfStatus.FAIL.value]


def module_key(name: str) -> str:
    """Return the underscore form of a module name, e.g. `Per_base_sequence_quality`."""
    return name.strip().replace(" ", "_")


class QualityThresholds(BaseModel):
    """Caller-tunable warn/fail cutoffs for a numeric metric."""

    model_config = ConfigDict(frozen=True)

    warn: float = Field(description="Values past this cutoff are at least WARN")
    fail: float = Field(description="Values past this cutoff are FAIL")
    higher_is_better: bool = Field(
        default=True,
        description="True when low values are bad (e.g. Phred scores)",
    )

    @model_validator(mode="after")
    def _check_order(self) -> QualityThresholds:
        if self.higher_is_better and self.fail > self.warn:
            msg = f"fail cutoff ({self.fail}) must not exceed warn cutoff ({self.warn})"
            raise ValueError(msg)
        if not self.higher_is_better and self.fail < self.warn:
            msg = f"fail cutoff ({self.fail}) must not be below warn cutoff ({self.warn})"
            raise ValueError(msg)
        return self


BASE_QUALITY_THRESHOLDS = QualityThresholds(warn=25, fail=20)


class PwfColours(BaseModel):
    """Colours used for PASS/WARN/FAIL values in charts."""

    model_config = ConfigDict(frozen=True)

    pass_colour: str = "#22c55e"
    warn_colour: str = "#f59e0b"
    fail_colour: str = "#ef4444"

    def mapping(self) -> dict[str, str]:
        """Status name to colour, in PASS/WARN/FAIL order."""
        return {
            PwfStatus.PASS.value: self.pass_colour,
            PwfStatus.WARN.value: self.warn_colour,
            PwfStatus.FAIL.value: self.fail_colour,
        }


DEFAULT_PWF_COLOURS = PwfColours()


class FastqcReport(BaseModel):
    """
    One parsed FastQC run.

    `sections` keeps the raw lines of every module (header line included) so
    callers can re-display them; `tables` holds the typed polars frames built
    from those lines. Both are keyed by the underscore module name.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    filename: str = Field(description="Filename measure from Basic Statistics")
    source: Path = Field(description="Path the report was parsed from")
    fastqc_version: str | None = None
    sections: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    summary: dict[str, PwfStatus] = Field(
        default_factory=dict,
        description="FastQC module display name to status",
    )
    tables: dict[str, pl.DataFrame] = Field(default_factory=dict)

    @property
    def modules(self) -> list[str]:
        """Underscore names of every module present, in report order."""
        return list(self.tables)

    def resolve_module(self, name: str) -> str | None:
        """Return the stored key matching `name` (display or underscore form)."""
        wanted = module_key(name).lower()
        for key in self.tables:
            if key.lower() == wanted:
                return key
        return None

    def get_table(self, name: str) -> pl.DataFrame | None:
        key = self.resolve_module(name)
        return None if key is None else self.tables[key]
