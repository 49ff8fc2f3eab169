"""Tests for canvas sizing and plot rectangle planning."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from plotcraft.charts import sizing
from plotcraft.charts.legend import measure_legend
from plotcraft.charts.sizing import MAX_PLOT_WIDTH, plan_geometry, y_label_width
from plotcraft.core.models import parse_items
from plotcraft.core.options import resolve_options

ITEMS = [{"label": "A", "x_start": 0, "x_end": 10, "value": 5}]
LEGEND = {"show": True, "entries": [{"label": "Revenue", "color": "#4A90E2"}, {"label": "Cost"}]}


def _plan(data=ITEMS, options=None):
    items = parse_items(data)
    resolved = resolve_options(options)
    return plan_geometry(items, resolved), items, resolved


class TestResponsiveWidth:
    """Test the data-driven canvas width."""

    def test_minimum_plot_width(self) -> None:
        """Test that small X spans still get a 400px plot."""
        geometry, _, _ = _plan()
        assert geometry.width == 580
        assert geometry.plot_width == 400
        assert geometry.height == 600

    def test_width_grows_with_span(self) -> None:
        """Test that the plot grows 10px per X unit."""
        geometry, _, _ = _plan([{"label": "A", "x_start": 0, "x_end": 100, "value": 1}])
        assert geometry.plot_width == pytest.approx(1100)
        assert geometry.width == pytest.approx(1280)

    def test_width_grows_with_explicit_values(self) -> None:
        """Test that explicit X values reserve 20px per tick."""
        values = list(range(1, 31))
        geometry, _, _ = _plan([], {"axes": {"x": {"values": values}}})
        assert geometry.plot_width == pytest.approx(600)

    def test_width_is_capped(self) -> None:
        """Test that very wide X spans are capped with a warning."""
        with patch.object(sizing.logger, "warning") as mock_warning:
            geometry, _, _ = _plan([{"label": "A", "x_start": 0, "x_end": 5000, "value": 1}])
        assert geometry.plot_width == MAX_PLOT_WIDTH
        mock_warning.assert_called_once()

    def test_dimensions_width_ignored(self) -> None:
        """Test that a caller-supplied width does not override the computed width."""
        geometry, _, _ = _plan(options={"dimensions": {"width": 2000}})
        assert geometry.width == 580


class TestPlotRectangle:
    """Test plot rectangle placement."""

    def test_default_rectangle(self) -> None:
        """Test the plot rectangle with default padding."""
        geometry, _, _ = _plan()
        assert (geometry.origin_x, geometry.origin_y) == (100, 520)
        assert (geometry.axis_end_x, geometry.axis_end_y) == (500, 60)
        assert geometry.baseline_y == pytest.approx(520)

    def test_title_reserves_height(self) -> None:
        """Test that a title pushes the plot down by its font size plus 30px."""
        geometry, _, _ = _plan(options={"labels": {"title": {"text": "Sales"}}})
        assert geometry.title_height == 54
        assert geometry.axis_end_y == 114

    def test_axis_label_reserves_height(self) -> None:
        """Test that an axis title raises the X axis row."""
        geometry, _, _ = _plan(options={"axes": {"x": {"label": "Quarter"}}})
        assert geometry.axis_label_height == 34
        assert geometry.origin_y == 486
        assert geometry.chart_area_bottom == 520

    def test_baseline_row(self) -> None:
        """Test that the X axis row sits at the mapped baseline."""
        geometry, _, _ = _plan(options={"axes": {"y": {"range": {"min": 0, "max": 10}, "baseline": 5}}})
        assert geometry.baseline_y == pytest.approx(290)


class TestLegendReservation:
    """Test the space reserved for each legend position."""

    def test_right_legend_widens_canvas(self) -> None:
        """Test that a right legend adds its width plus spacing to the canvas."""
        geometry, _, resolved = _plan(options={"legend": LEGEND})
        box = measure_legend(resolved.legend)
        assert geometry.base_width == 580
        assert geometry.width == pytest.approx(580 + box.width + 20 + 10)
        assert geometry.axis_end_x == 500

    def test_left_legend_clears_labels(self) -> None:
        """Test that a left legend keeps the plot clear of the legend and the Y labels."""
        geometry, items, resolved = _plan(options={"legend": {**LEGEND, "position": "left"}})
        box = measure_legend(resolved.legend)
        padding = resolved.dimensions.padding
        assert geometry.chart_area_left >= padding.left + box.width + resolved.legend.spacing
        assert geometry.chart_area_left == pytest.approx(
            padding.left + box.width + resolved.legend.spacing + y_label_width(items, resolved)
        )

    def test_top_legend_pushes_plot_down(self) -> None:
        """Test that a top legend adds to the height above the plot."""
        geometry, _, resolved = _plan(options={"legend": {**LEGEND, "position": "top"}})
        box = measure_legend(resolved.legend)
        assert geometry.axis_end_y == pytest.approx(60 + box.height + 30)
        assert geometry.height == pytest.approx(600 + box.height + 30)

    def test_bottom_legend_adds_height(self) -> None:
        """Test that a bottom legend grows the canvas without moving the plot."""
        geometry, _, resolved = _plan(options={"legend": {**LEGEND, "position": "bottom"}})
        box = measure_legend(resolved.legend)
        assert geometry.axis_end_y == 60
        assert geometry.height == pytest.approx(600 + box.height + 30)

    def test_hidden_legend_reserves_nothing(self) -> None:
        """Test that a legend without entries takes no space."""
        geometry, _, _ = _plan(options={"legend": {"show": True}})
        assert geometry.legend is None
        assert geometry.width == 580


class TestYLabelWidth:
    """Test the Y tick label width estimate."""

    def test_minimum_width(self) -> None:
        """Test that short labels still reserve the minimum width plus gutter."""
        items = parse_items(ITEMS)
        assert y_label_width(items, resolve_options()) >= 90

    def test_long_labels_are_wider(self) -> None:
        """Test that large values reserve more room."""
        options = resolve_options()
        small = y_label_width(parse_items(ITEMS), options)
        large = y_label_width(
            parse_items([{"label": "A", "x_start": 0, "x_end": 1, "value": 123456789012}]), options
        )
        assert large > small
