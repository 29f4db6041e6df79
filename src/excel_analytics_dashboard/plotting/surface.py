from __future__ import annotations

import io

import numpy as np
from matplotlib.figure import Figure
from matplotlib.patches import Patch

from excel_analytics_dashboard.core.rendering import (
    AXIS_OPTIONS,
    DATA_LABEL_OPTIONS,
    GRADIENT_HEIGHT_PX,
    LEGEND_OPTIONS,
    ChartArtifact,
    LinearGradient,
    SurfaceContext,
)
from excel_analytics_dashboard.core.state import VARIANT_LINE
from excel_analytics_dashboard.plotting.helpers import (
    css_to_rgba,
    display_label,
    format_value,
    gradient_colormap,
    gradient_column,
)

SURFACE_WIDTH_PX = 600
SURFACE_DPI = 100
DATA_LABEL_FONT_SCALE = 0.75


def surface_context(fig: Figure) -> SurfaceContext:
    width_in, height_in = fig.get_size_inches()
    return SurfaceContext(width_px=float(width_in * fig.dpi), height_px=float(height_in * fig.dpi))


def _data_label_kwargs() -> dict:
    font = DATA_LABEL_OPTIONS.get("font", {})
    return dict(
        color=DATA_LABEL_OPTIONS.get("color", "#fff"),
        fontweight=font.get("weight", "bold"),
        fontsize=float(font.get("size", 16)) * DATA_LABEL_FONT_SCALE,
    )


def _style_axes(ax) -> None:
    tick_color = AXIS_OPTIONS["ticks"]["color"]
    grid_color = AXIS_OPTIONS["grid"]["color"]
    ax.tick_params(colors=tick_color)
    ax.grid(True, color=grid_color)
    ax.set_axisbelow(True)
    for spine in ax.spines.values():
        spine.set_color(grid_color)


def _fill_bars_with_gradient(ax, bars, gradient: LinearGradient) -> None:
    ax.autoscale_view()
    x_low, x_high = ax.get_xlim()
    y_low, y_high = ax.get_ylim()
    cmap = gradient_colormap(gradient.stops)
    column = gradient_column()
    for bar in bars:
        x0 = bar.get_x()
        im = ax.imshow(
            column,
            cmap=cmap,
            aspect="auto",
            origin="lower",
            extent=(x0, x0 + bar.get_width(), y_low, y_high),
            zorder=bar.get_zorder(),
        )
        im.set_clip_path(bar)
        bar.set_facecolor("none")
    ax.set_xlim(x_low, x_high)
    ax.set_ylim(y_low, y_high)


def _draw_bar(ax, artifact: ChartArtifact, positions: np.ndarray):
    fill = artifact.background
    bars = ax.bar(
        positions,
        artifact.plot_values,
        color=css_to_rgba(fill) if isinstance(fill, str) else "none",
        edgecolor=css_to_rgba(artifact.border_color),
        linewidth=artifact.border_width,
        label=artifact.series_label,
    )
    if isinstance(fill, LinearGradient):
        _fill_bars_with_gradient(ax, bars, fill)
        handle = Patch(
            facecolor=css_to_rgba(fill.stops[0][1]),
            edgecolor=css_to_rgba(artifact.border_color),
            label=artifact.series_label,
        )
    else:
        handle = bars
    ax.bar_label(
        bars,
        labels=[format_value(v) for v in artifact.values],
        label_type="center",
        **_data_label_kwargs(),
    )
    return handle


def _draw_line(ax, artifact: ChartArtifact, positions: np.ndarray):
    fill = artifact.background
    if isinstance(fill, LinearGradient):
        cmap = gradient_colormap(fill.stops)
        span = max(float(np.ptp(artifact.plot_values)) if artifact.plot_values else 0.0, 1e-12)
        low = min(artifact.plot_values) if artifact.plot_values else 0.0
        point_colors = [cmap((v - low) / span) for v in artifact.plot_values]
    else:
        point_colors = [css_to_rgba(fill)] * len(artifact.plot_values)
    (line,) = ax.plot(
        positions,
        artifact.plot_values,
        color=css_to_rgba(artifact.border_color),
        linewidth=artifact.border_width,
        label=artifact.series_label,
        zorder=2,
    )
    ax.scatter(
        positions,
        artifact.plot_values,
        c=point_colors,
        edgecolors=[css_to_rgba(artifact.border_color)],
        linewidths=artifact.border_width,
        zorder=3,
    )
    return line


def _draw_pie(ax, artifact: ChartArtifact) -> None:
    sizes = [max(v, 0.0) for v in artifact.plot_values]
    if not sizes or sum(sizes) <= 0:
        ax.text(0.5, 0.5, "No positive values to plot.", ha="center", va="center", transform=ax.transAxes)
        ax.set_axis_off()
        return
    colors = [css_to_rgba(c) for c in artifact.background]
    wedges, _texts = ax.pie(
        sizes,
        colors=colors,
        wedgeprops=dict(edgecolor=css_to_rgba(artifact.border_color), linewidth=artifact.border_width),
        startangle=90,
        counterclock=False,
    )
    label_kwargs = _data_label_kwargs()
    for wedge, value in zip(wedges, artifact.values):
        theta = np.deg2rad((wedge.theta1 + wedge.theta2) / 2.0)
        ax.text(0.6 * np.cos(theta), 0.6 * np.sin(theta), format_value(value), ha="center", va="center", **label_kwargs)
    ax.legend(
        wedges,
        [display_label(lbl) for lbl in artifact.labels],
        loc="upper center",
        bbox_to_anchor=(0.5, -0.02),
        ncol=min(max(len(wedges), 1), 4),
        frameon=False,
        labelcolor=LEGEND_OPTIONS["labels"]["color"],
        prop={"weight": LEGEND_OPTIONS["labels"]["font"]["weight"]},
    )
    ax.set_aspect("equal")


def build_surface(
    artifact: ChartArtifact,
    *,
    width_px: float = SURFACE_WIDTH_PX,
    height_px: float = GRADIENT_HEIGHT_PX,
    dpi: int = SURFACE_DPI,
) -> Figure:
    """Draw ``artifact`` on a new matplotlib Figure sized in pixels."""
    fig = Figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)
    ax = fig.add_subplot(111)
    positions = np.arange(len(artifact.plot_values), dtype=float)

    if artifact.is_pie:
        _draw_pie(ax, artifact)
    else:
        if artifact.variant == VARIANT_LINE:
            handle = _draw_line(ax, artifact, positions)
        else:
            handle = _draw_bar(ax, artifact, positions)
        ax.set_xticks(positions)
        ax.set_xticklabels([display_label(lbl) for lbl in artifact.labels])
        _style_axes(ax)
        ax.legend(
            handles=[handle],
            loc="upper center",
            bbox_to_anchor=(0.5, -0.1),
            frameon=False,
            labelcolor=LEGEND_OPTIONS["labels"]["color"],
            prop={"weight": LEGEND_OPTIONS["labels"]["font"]["weight"]},
        )
    fig.tight_layout()
    return fig


def surface_png_bytes(fig: Figure, dpi: int | None = None) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi or fig.dpi)
    return buf.getvalue()
