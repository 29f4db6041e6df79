from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from excel_analytics_dashboard.core.state import VARIANT_PIE, ChartSettings, Dataset

PIE_PALETTE = (
    "rgba(255, 99, 132, 0.7)",   # red
    "rgba(54, 162, 235, 0.7)",   # blue
    "rgba(255, 206, 86, 0.7)",   # yellow
    "rgba(75, 192, 192, 0.7)",   # teal
    "rgba(153, 102, 255, 0.7)",  # purple
    "rgba(255, 159, 64, 0.7)",   # orange
    "rgba(100, 255, 218, 0.7)",  # mint
    "rgba(200, 150, 255, 0.7)",  # lavender
)

GRADIENT_TOP = "rgba(255, 99, 132, 0.7)"
GRADIENT_BOTTOM = "rgba(54, 162, 235, 0.7)"
GRADIENT_HEIGHT_PX = 400.0
FLAT_FILL = "rgba(54, 162, 235, 0.7)"

SERIES_BORDER = "rgba(54, 162, 235, 1)"
PIE_BORDER = "#fff"
BORDER_WIDTH = 1

DATA_LABEL_OPTIONS = {"color": "#fff", "font": {"weight": "bold", "size": 16}}
TOOLTIP_OPTIONS = {
    "backgroundColor": "#222",
    "titleColor": "#0ff",
    "bodyColor": "#fff",
    "borderColor": "#0ff",
    "borderWidth": 1,
    "padding": 10,
}
LEGEND_OPTIONS = {
    "labels": {"color": "#333", "font": {"size": 14, "weight": "bold"}},
    "position": "bottom",
}
AXIS_OPTIONS = {"ticks": {"color": "#444"}, "grid": {"color": "#eee"}}


@dataclass(frozen=True)
class LinearGradient:
    """Vertical gradient in surface pixel coordinates (y grows downward)."""

    y0: float
    y1: float
    stops: tuple[tuple[float, str], ...]


@dataclass(frozen=True)
class SurfaceContext:
    """Handle on a surface that already displays a chart."""

    width_px: float
    height_px: float


Fill = Union[str, LinearGradient, list[str]]


@dataclass
class ChartArtifact:
    variant: str
    labels: list[Any] = field(default_factory=list)
    values: list[Any] = field(default_factory=list)
    plot_values: list[float] = field(default_factory=list)
    series_label: str = ""
    background: Fill = FLAT_FILL
    border_color: str = SERIES_BORDER
    border_width: int = BORDER_WIDTH
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def is_pie(self) -> bool:
        return self.variant == VARIANT_PIE

    @property
    def has_gradient(self) -> bool:
        return isinstance(self.background, LinearGradient)


def palette_color(index: int) -> str:
    return PIE_PALETTE[index % len(PIE_PALETTE)]


def color_palette(count: int) -> list[str]:
    return [palette_color(i) for i in range(count)]


def series_gradient(height_px: float = GRADIENT_HEIGHT_PX) -> LinearGradient:
    return LinearGradient(
        y0=0.0,
        y1=float(height_px),
        stops=((0.0, GRADIENT_TOP), (1.0, GRADIENT_BOTTOM)),
    )


def coerce_plot_value(value: Any) -> float:
    """Numeric view of a cell; anything non-numeric plots as zero."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        try:
            result = float(value.strip().replace(",", ""))
        except ValueError:
            return 0.0
    else:
        try:
            result = float(value)
        except (TypeError, ValueError, OverflowError):
            return 0.0
    return result if math.isfinite(result) else 0.0


def chart_options(variant: str) -> dict[str, Any]:
    options: dict[str, Any] = {
        "responsive": True,
        "maintainAspectRatio": False,
        "plugins": {
            "datalabels": dict(DATA_LABEL_OPTIONS),
            "tooltip": dict(TOOLTIP_OPTIONS),
            "legend": dict(LEGEND_OPTIONS),
        },
        "scales": {},
    }
    if variant != VARIANT_PIE:
        options["scales"] = {"x": dict(AXIS_OPTIONS), "y": dict(AXIS_OPTIONS)}
    return options


def tooltip_text(label: Any, value: Any) -> str:
    return f" {'' if label is None else label}: {value}"


def render(
    dataset: Dataset,
    settings: ChartSettings,
    surface: Optional[SurfaceContext] = None,
) -> ChartArtifact:
    """Build the chart artifact for the current dataset and settings.

    One label/value pair per row, in row order, no grouping. Fields missing
    from a row give ``None``. Bar and line series get the gradient only when
    ``surface`` is given; the first render of a session has no surface and
    uses the flat fill, and the caller re-renders once one exists.
    """
    category = settings.category_field
    value_field = settings.value_field
    labels = [row.get(category) for row in dataset.rows]
    values = [row.get(value_field) for row in dataset.rows]

    artifact = ChartArtifact(
        variant=settings.variant,
        labels=labels,
        values=values,
        plot_values=[coerce_plot_value(v) for v in values],
        series_label=f"{value_field} by {category}",
        options=chart_options(settings.variant),
    )
    if settings.variant == VARIANT_PIE:
        artifact.background = color_palette(len(values))
        artifact.border_color = PIE_BORDER
    elif surface is not None:
        artifact.background = series_gradient(surface.height_px)
    else:
        artifact.background = FLAT_FILL
    return artifact
