"""Tests for the matplotlib surface and the plotly figure."""

from __future__ import annotations

import pytest
from matplotlib.figure import Figure

from excel_analytics_dashboard.core.rendering import SurfaceContext, render
from excel_analytics_dashboard.core.state import ChartSettings, Dataset
from excel_analytics_dashboard.plotting.helpers import css_to_rgba, format_value, unique_labels
from excel_analytics_dashboard.plotting.plotly_chart import build_plotly_figure
from excel_analytics_dashboard.plotting.surface import build_surface, surface_context

CONTEXT = SurfaceContext(600.0, 400.0)


class TestHelpers:
    def test_css_rgba(self) -> None:
        r, g, b, a = css_to_rgba("rgba(255, 0, 51, 0.5)")
        assert (r, g, b, a) == pytest.approx((1.0, 0.0, 0.2, 0.5))

    def test_css_rgb_and_hex(self) -> None:
        assert css_to_rgba("rgb(0, 0, 0)") == (0.0, 0.0, 0.0, 1.0)
        assert css_to_rgba("#fff") == (1.0, 1.0, 1.0, 1.0)

    def test_unique_labels(self) -> None:
        assert unique_labels(["a", "a", None, "a"]) == ["a", "a (2)", "(blank)", "a (3)"]

    def test_format_value(self) -> None:
        assert format_value(120.0) == "120"
        assert format_value(2.5) == "2.5"
        assert format_value(None) == ""


class TestSurface:
    @pytest.mark.parametrize("variant", ["bar", "line", "pie"])
    @pytest.mark.parametrize("context", [None, CONTEXT])
    def test_every_variant_draws(self, sales_dataset: Dataset, variant: str, context) -> None:
        fig = build_surface(render(sales_dataset, ChartSettings("region", "sales", variant), context))
        assert isinstance(fig, Figure)
        assert surface_context(fig) == SurfaceContext(600.0, 400.0)

    def test_bar_tick_labels_follow_rows(self, sales_dataset: Dataset) -> None:
        fig = build_surface(render(sales_dataset, ChartSettings("region", "sales", "bar"), CONTEXT))
        labels = [t.get_text() for t in fig.axes[0].get_xticklabels()]
        assert labels == ["North", "South", "East"]

    def test_pie_without_positive_values(self) -> None:
        ds = Dataset.from_records([{"k": "a", "v": "x"}, {"k": "b", "v": -3}])
        fig = build_surface(render(ds, ChartSettings("k", "v", "pie")))
        texts = [t.get_text() for t in fig.axes[0].texts]
        assert "No positive values to plot." in texts

    def test_missing_fields_still_draw(self, sales_dataset: Dataset) -> None:
        fig = build_surface(render(sales_dataset, ChartSettings("nope", "missing", "bar")))
        assert len(fig.axes[0].patches) == len(sales_dataset)


class TestPlotly:
    def test_bar_trace(self, sales_dataset: Dataset) -> None:
        fig = build_plotly_figure(render(sales_dataset, ChartSettings("region", "sales", "bar"), CONTEXT))
        (trace,) = fig.data
        assert trace.type == "bar"
        assert list(trace.y) == [120.0, 95.0, 143.0]
        assert list(fig.layout.xaxis.ticktext) == ["North", "South", "East"]
        assert trace.name == "sales by region"

    def test_line_trace(self, sales_dataset: Dataset) -> None:
        fig = build_plotly_figure(render(sales_dataset, ChartSettings("region", "sales", "line")))
        assert fig.data[0].type == "scatter"
        assert fig.data[0].mode == "lines+markers"

    def test_pie_keeps_duplicate_rows(self) -> None:
        ds = Dataset.from_records([{"k": "a", "v": 1}, {"k": "a", "v": 2}])
        fig = build_plotly_figure(render(ds, ChartSettings("k", "v", "pie")))
        trace = fig.data[0]
        assert trace.type == "pie"
        assert list(trace.labels) == ["a", "a (2)"]
        assert list(trace.values) == [1.0, 2.0]
        assert list(trace.marker.colors) == ["rgba(255, 99, 132, 0.7)", "rgba(54, 162, 235, 0.7)"]
