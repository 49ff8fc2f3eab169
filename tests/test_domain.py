"""Tests for axis ranges and domain-to-pixel scales."""

from __future__ import annotations

import math

import pytest

from plotcraft.charts.domain import (
    FixedSpacingScale,
    IndexScale,
    LinearScale,
    default_step,
    ensure_span,
    format_number,
    resolve_x_domain,
    resolve_y_domain,
    tick_values,
    waterfall_baselines,
)
from plotcraft.core.models import parse_items
from plotcraft.core.options import resolve_options


def _items(*specs):
    return parse_items(
        [{"label": f"I{i}", "x_start": i, "x_end": i + 1, **spec} for i, spec in enumerate(specs)]
    )


class TestHelpers:
    """Test number formatting and tick helpers."""

    def test_format_number(self) -> None:
        """Test that integral values drop their decimal part."""
        assert format_number(5.0) == "5"
        assert format_number(-3.0) == "-3"
        assert format_number(2.5) == "2.5"

    def test_ensure_span_orders(self) -> None:
        """Test that a reversed range is reordered."""
        assert ensure_span(10, 2) == (2, 10)

    def test_ensure_span_widens_degenerate(self) -> None:
        """Test that an empty range is widened around its centre."""
        assert ensure_span(5, 5) == (4.5, 5.5)

    def test_default_step_whole_units(self) -> None:
        """Test that spans of one or more use ceil(span / 10)."""
        assert default_step(100) == 10
        assert default_step(8.6) == 1
        assert default_step(11) == 2

    def test_default_step_small_span(self) -> None:
        """Test that sub-unit spans use a 1/2/5 step."""
        assert default_step(0.5) == pytest.approx(0.05)
        assert default_step(0.03) == pytest.approx(0.005)

    def test_tick_values(self) -> None:
        """Test tick values include both ends."""
        assert tick_values(0, 10, 2.5) == [0, 2.5, 5, 7.5, 10]

    def test_tick_values_partial_last_step(self) -> None:
        """Test that a step not dividing the span stops below the max."""
        assert tick_values(0, 10, 3) == [0, 3, 6, 9]


class TestScales:
    """Test the X and Y scales."""

    def test_linear_scale(self) -> None:
        """Test linear interpolation onto the pixel range."""
        scale = LinearScale(0, 10, 100, 500)
        assert scale(0) == 100
        assert scale(5) == 300
        assert scale(10) == 500

    def test_inverted_y_scale(self) -> None:
        """Test that a Y scale maps larger values higher on the canvas."""
        scale = LinearScale(0, 10, 520, 60)
        assert scale(5) == pytest.approx(290)
        assert scale.length(5) == pytest.approx(230)
        assert scale.length(-5) == pytest.approx(230)

    def test_degenerate_domain_is_finite(self) -> None:
        """Test that a zero-width domain still yields finite positions."""
        scale = LinearScale(5, 5, 0, 100)
        assert scale(5) == pytest.approx(50)
        assert math.isfinite(scale.length(1))

    def test_index_scale_ignores_numeric_gaps(self) -> None:
        """Test that explicit values are spread evenly by index."""
        scale = IndexScale([24, 25, 1, 2], 100, 400)
        assert scale.position(0) == 100
        assert scale.position(2) == pytest.approx(300)
        assert scale(1) == pytest.approx(300)
        assert scale(2) == pytest.approx(400)

    def test_index_scale_linear_fallback(self) -> None:
        """Test that values outside the list map linearly over their min/max."""
        scale = IndexScale([24, 25, 1, 2], 100, 400)
        assert scale(13) == pytest.approx(250)

    def test_index_scale_single_value(self) -> None:
        """Test that a single explicit value sits at the axis start."""
        assert IndexScale([7], 100, 400).position(0) == 100

    def test_fixed_spacing_scale(self) -> None:
        """Test that explicit values sit a fixed pixel distance apart."""
        scale = FixedSpacingScale([1, 2, 3], 100, 50)
        assert scale(1) == 100
        assert scale(3) == 200


class TestXDomain:
    """Test X range resolution."""

    def test_empty_data(self) -> None:
        """Test the range used for an empty chart."""
        domain = resolve_x_domain([], resolve_options().x_axis)
        assert (domain.min, domain.max, domain.step) == (0, 100, 10)

    def test_auto_range_padding_clamped_at_zero(self) -> None:
        """Test that non-negative data is padded by 10% without going below zero."""
        items = parse_items([{"label": "A", "x_start": 0, "x_end": 10}])
        domain = resolve_x_domain(items, resolve_options().x_axis)
        assert domain.min == 0
        assert domain.max == pytest.approx(11)

    def test_auto_range_negative_data(self) -> None:
        """Test that negative data is padded on both sides."""
        items = parse_items([{"label": "A", "x_start": -10, "x_end": -2}])
        domain = resolve_x_domain(items, resolve_options().x_axis)
        assert domain.min == pytest.approx(-10.8)
        assert domain.max == pytest.approx(-1.2)

    def test_explicit_range_and_step(self) -> None:
        """Test that an explicit range and step are used as given."""
        axis = resolve_options({"axes": {"x": {"range": {"min": 0, "max": 50, "step": 5}}}}).x_axis
        domain = resolve_x_domain([], axis)
        assert (domain.min, domain.max, domain.step) == (0, 50, 5)

    def test_explicit_values(self) -> None:
        """Test that explicit values set the range by their min/max."""
        axis = resolve_options({"axes": {"x": {"values": [24, 25, 1, 2]}}}).x_axis
        domain = resolve_x_domain([], axis)
        assert (domain.min, domain.max) == (1, 25)


class TestYDomain:
    """Test Y range resolution per chart type."""

    def test_empty_data(self) -> None:
        """Test the range used when there is nothing to plot."""
        domain = resolve_y_domain([], resolve_options())
        assert (domain.min, domain.max) == (0, 1)

    def test_standard_padding_includes_baseline(self) -> None:
        """Test 10% padding with the zero baseline folded in."""
        domain = resolve_y_domain(_items({"value": 2}, {"value": 8}), resolve_options())
        assert domain.min == 0
        assert domain.max == pytest.approx(8.6)
        assert domain.step == 1

    def test_negative_values(self) -> None:
        """Test padding around data spanning zero."""
        domain = resolve_y_domain(_items({"value": -5}, {"value": 5}), resolve_options())
        assert domain.min == pytest.approx(-6)
        assert domain.max == pytest.approx(6)

    def test_explicit_range(self) -> None:
        """Test that an explicit range is kept as given."""
        options = resolve_options({"axes": {"y": {"range": {"min": 0, "max": 10}}}})
        domain = resolve_y_domain(_items({"value": 5}), options)
        assert (domain.min, domain.max, domain.step) == (0, 10, 1)

    def test_explicit_range_widened_to_baseline(self) -> None:
        """Test that the baseline always lies inside the range."""
        options = resolve_options({"axes": {"y": {"range": {"min": 10, "max": 20}, "baseline": 0}}})
        domain = resolve_y_domain(_items({"value": 15}), options)
        assert (domain.min, domain.max) == (0, 20)

    def test_explicit_values(self) -> None:
        """Test that explicit Y values set the range."""
        options = resolve_options({"axes": {"y": {"values": [0, 5, 10]}}})
        domain = resolve_y_domain(_items({"value": 5}), options)
        assert (domain.min, domain.max) == (0, 10)

    def test_grouped_uses_segments(self) -> None:
        """Test that grouped charts cover every segment value."""
        options = resolve_options({"type": "grouped"})
        domain = resolve_y_domain(_items({"segments": [3, 10]}), options)
        assert domain.max == pytest.approx(10.7)

    def test_stacked_covers_stack_extents(self) -> None:
        """Test that mixed-sign stacks cover both the upward and downward stack."""
        options = resolve_options({"type": "stacked"})
        domain = resolve_y_domain(_items({"segments": [10, -4]}), options)
        assert domain.min == pytest.approx(-5.4)
        assert domain.max == pytest.approx(11.4)

    def test_waterfall_running_totals(self) -> None:
        """Test that waterfall charts cover every running total."""
        options = resolve_options({"type": "waterfall"})
        domain = resolve_y_domain(_items({"value": 10}, {"value": -4}, {"value": 6}), options)
        assert domain.min == pytest.approx(-1.2)
        assert domain.max == pytest.approx(13.2)

    def test_waterfall_explicit_range_widened(self) -> None:
        """Test that a waterfall explicit range is widened to the running totals."""
        options = resolve_options({"type": "waterfall", "axes": {"y": {"range": {"min": 0, "max": 10}}}})
        domain = resolve_y_domain(_items({"value": 10}, {"value": 6}), options)
        assert domain.min == pytest.approx(-1.6)
        assert domain.max == pytest.approx(17.6)

    def test_degenerate_range_widened(self) -> None:
        """Test that identical values at the baseline still give a usable range."""
        domain = resolve_y_domain(_items({"value": 0}), resolve_options())
        assert (domain.min, domain.max) == (-0.5, 0.5)


class TestWaterfallBaselines:
    """Test cumulative waterfall baselines."""

    def test_baselines_accumulate(self) -> None:
        """Test that each baseline is the initial value plus all earlier totals."""
        items = _items({"value": 10}, {"segments": [5, -8]}, {"value": 2})
        assert waterfall_baselines(items, 100) == [100, 110, 107]

    def test_baselines_empty(self) -> None:
        """Test that no items give no baselines."""
        assert waterfall_baselines([], 0) == []


class TestBaselineMonotonicity:
    """Bar height grows with distance from the baseline."""

    @pytest.mark.parametrize("baseline", [0, 5, -5])
    def test_larger_distance_is_taller(self, baseline) -> None:
        """Test that pixel distance from the baseline row is monotonic in the value."""
        scale = LinearScale(-20, 20, 520, 60)
        above = [baseline + d for d in (1, 2, 5, 10)]
        heights = [abs(scale(v) - scale(baseline)) for v in above]
        assert heights == sorted(heights)
        below = [baseline - d for d in (1, 2, 5, 10)]
        heights = [abs(scale(v) - scale(baseline)) for v in below]
        assert heights == sorted(heights)
