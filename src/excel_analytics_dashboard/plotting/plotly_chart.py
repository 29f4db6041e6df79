from __future__ import annotations

import plotly.graph_objects as go

from excel_analytics_dashboard.core.rendering import (
    AXIS_OPTIONS,
    DATA_LABEL_OPTIONS,
    LEGEND_OPTIONS,
    TOOLTIP_OPTIONS,
    ChartArtifact,
    LinearGradient,
)
from excel_analytics_dashboard.core.state import VARIANT_LINE
from excel_analytics_dashboard.plotting.helpers import display_label, format_value, unique_labels


def _hover_template() -> str:
    return " %{customdata}: %{text}<extra></extra>"


def _series_marker(artifact: ChartArtifact) -> dict:
    """Marker styling for bar/line traces.

    A gradient fill is approximated by colouring each bar or point by its
    value along the gradient stops; the matplotlib export surface draws
    the real top-to-bottom gradient, so the page and exports differ here.
    """
    fill = artifact.background
    marker: dict = dict(line=dict(color=artifact.border_color, width=artifact.border_width))
    if isinstance(fill, LinearGradient):
        bottom_first = sorted(fill.stops, key=lambda s: s[0], reverse=True)
        marker["color"] = artifact.plot_values
        marker["colorscale"] = [[1.0 - pos, col] for pos, col in bottom_first]
        marker["showscale"] = False
    else:
        marker["color"] = fill
    return marker


def build_plotly_figure(artifact: ChartArtifact) -> go.Figure:
    """Interactive counterpart of the matplotlib surface for the Dash page."""
    labels = [display_label(lbl) for lbl in artifact.labels]
    texts = [format_value(v) for v in artifact.values]
    positions = list(range(len(artifact.plot_values)))
    data_font = dict(
        color=DATA_LABEL_OPTIONS["color"],
        size=DATA_LABEL_OPTIONS["font"]["size"],
    )

    fig = go.Figure()
    if artifact.is_pie:
        fig.add_trace(
            go.Pie(
                labels=unique_labels(artifact.labels),
                values=[max(v, 0.0) for v in artifact.plot_values],
                text=texts,
                customdata=labels,
                textinfo="text",
                sort=False,
                direction="clockwise",
                marker=dict(
                    colors=list(artifact.background),
                    line=dict(color=artifact.border_color, width=artifact.border_width),
                ),
                textfont=data_font,
                hovertemplate=_hover_template(),
                name=artifact.series_label,
            )
        )
    elif artifact.variant == VARIANT_LINE:
        fig.add_trace(
            go.Scatter(
                x=positions,
                y=artifact.plot_values,
                mode="lines+markers",
                line=dict(color=artifact.border_color, width=artifact.border_width),
                marker=_series_marker(artifact),
                text=texts,
                customdata=labels,
                hovertemplate=_hover_template(),
                name=artifact.series_label,
                showlegend=True,
            )
        )
    else:
        fig.add_trace(
            go.Bar(
                x=positions,
                y=artifact.plot_values,
                marker=_series_marker(artifact),
                text=texts,
                textposition="inside",
                insidetextanchor="middle",
                textfont=data_font,
                customdata=labels,
                hovertemplate=_hover_template(),
                name=artifact.series_label,
                showlegend=True,
            )
        )

    legend_labels = LEGEND_OPTIONS["labels"]
    fig.update_layout(
        height=400,
        margin=dict(l=40, r=20, t=20, b=40),
        paper_bgcolor="rgba(0,0,0,0)",
        legend=dict(
            orientation="h",
            yanchor="top",
            y=-0.15,
            xanchor="center",
            x=0.5,
            font=dict(color=legend_labels["color"], size=legend_labels["font"]["size"]),
        ),
        hoverlabel=dict(
            bgcolor=TOOLTIP_OPTIONS["backgroundColor"],
            bordercolor=TOOLTIP_OPTIONS["borderColor"],
            font=dict(color=TOOLTIP_OPTIONS["bodyColor"]),
        ),
    )
    if not artifact.is_pie:
        axis = dict(
            tickfont=dict(color=AXIS_OPTIONS["ticks"]["color"]),
            gridcolor=AXIS_OPTIONS["grid"]["color"],
        )
        fig.update_xaxes(tickmode="array", tickvals=positions, ticktext=labels, **axis)
        fig.update_yaxes(**axis)
    return fig
