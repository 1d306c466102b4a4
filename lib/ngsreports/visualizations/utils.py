"""
Altair theme and chart utilities for ngsreports visualizations.

Provides the report theme, PASS/WARN/FAIL colour scales, an empty-state
placeholder and a helper for saving charts as HTML, SVG or PNG.
"""

from __future__ import annotations

from pathlib import Path

import altair as alt
from loguru import logger

from ngsreports.schema import PWF_LEVELS, PwfColours

COLORS = {
    "primary": "#2563eb",  # Blue
    "secondary": "#64748b",  # Slate
    "text": "#1e293b",
    "muted": "#94a3b8",
}

# Per-base line colours
BASE_COLORS = {"T": "#dc2626", "C": "#2563eb", "A": "#16a34a", "G": "#111827"}

# Keyword arguments passed to `chart.save` for each output format
SAVE_OPTIONS: dict[str, dict[str, object]] = {
    "html": {"embed_options": {"renderer": "svg"}},
    "svg": {},
    "png": {"scale_factor": 2},
}

_LABELS = {"labelFontSize": 11, "labelColor": COLORS["secondary"]}
_TITLES = {"titleFontSize": 12, "titleColor": "#475569"}


@alt.theme.register("ngsreports", enable=True)
def _ngsreports_theme() -> alt.theme.ThemeConfig:
    return alt.theme.ThemeConfig(
        {
            "background": "#ffffff",
            "padding": 8,
            "config": {
                "font": "Helvetica, Arial, sans-serif",
                "title": {
                    "fontSize": 15,
                    "fontWeight": "bold",
                    "anchor": "start",
                    "color": COLORS["text"],
                    "offset": 10,
                },
                "axis": {
                    **_LABELS,
                    **_TITLES,
                    "gridColor": "#e2e8f0",
                    "domainColor": "#cbd5e1",
                    "tickColor": "#cbd5e1",
                },
                "axisY": {"labelLimit": 220},
                "legend": {**_LABELS, **_TITLES, "symbolType": "square"},
                "header": {"labelFontSize": 12, "labelColor": COLORS["text"]},
                "view": {"strokeWidth": 0},
                "range": {
                    "category": [
                        COLORS["primary"],
                        "#dc2626",
                        "#16a34a",
                        "#7c3aed",
                        "#ea580c",
                        "#0891b2",
                        "#db2777",
                        "#ca8a04",
                    ],
                },
            },
        }
    )


def register_theme() -> None:
    """
    Enable the ngsreports Altair theme.

    The theme is registered by decorator on import; calling this makes sure it
    is the active one when another theme was enabled in between.
    """
    alt.theme.enable("ngsreports")


def pwf_scale(colours: PwfColours) -> alt.Scale:
    """Ordinal colour scale mapping PASS/WARN/FAIL to the given colours."""
    mapping = colours.mapping()
    return alt.Scale(domain=PWF_LEVELS, range=[mapping[level] for level in PWF_LEVELS])


def empty_chart(message: str, width: int = 400, height: int = 80) -> alt.Chart:
    """Placeholder chart shown when there is nothing to plot."""
    return (
        alt.Chart(alt.Data(values=[{"message": message}]))
        .mark_text(fontSize=14, color=COLORS["muted"])
        .encode(text="message:N")
        .properties(width=width, height=height)
    )


def save_chart(
    chart: alt.TopLevelMixin,
    output_path: Path | str,
    formats: list[str] | None = None,
) -> list[Path]:
    """
    Write a chart to `output_path` with one extension per requested format.

    Args:
        chart: Any top-level Altair chart
        output_path: Output path; an existing extension is replaced
        formats: Any of "html", "svg", "png". Defaults to ["html"].

    Returns:
        Paths written, in the order of `formats`

    Raises:
        ValueError: An unknown format was requested; nothing is written
    """
    formats = formats or ["html"]
    unknown = [fmt for fmt in formats if fmt.lower() not in SAVE_OPTIONS]
    if unknown:
        msg = f"Unsupported format: {', '.join(unknown)}. Use one of: {', '.join(SAVE_OPTIONS)}."
        raise ValueError(msg)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    saved: list[Path] = []
    for fmt in dict.fromkeys(fmt.lower() for fmt in formats):
        path = output_path.with_suffix(f".{fmt}")
        chart.save(path, **SAVE_OPTIONS[fmt])
        logger.debug(f"Saved {path}")
        saved.append(path)
    return saved
