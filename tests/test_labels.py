"""Tests for label placement and the deferred label queue."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from conftest import build_context
from plotcraft.charts.labels import Label, LabelQueue, composite_labels, place_bar_label
from plotcraft.charts.layout import layout_standard
from plotcraft.core.enums import LabelKind, TextAlign, TextBaseline
from plotcraft.core.models import TextStyle, parse_items
from plotcraft.core.options import resolve_options

FIXED = {"x": {"range": {"min": 0, "max": 10}}, "y": {"range": {"min": 0, "max": 10}}}


def _label(kind=LabelKind.VALUE, text="5", **kwargs):
    return Label(
        kind=kind,
        text=text,
        x=0,
        y=0,
        align=TextAlign.CENTER,
        baseline=TextBaseline.MIDDLE,
        font_size=12,
        **kwargs,
    )


def _bar_label(item, options=None):
    options = {"axes": FIXED, **(options or {})}
    ctx = build_context([item], options)
    (parsed,) = parse_items([item])
    layout = layout_standard(parsed, 0, ctx)
    return place_bar_label(parsed, layout, ctx.options, ctx.geometry), layout, ctx.geometry


class TestLabelQueue:
    """Test the immutable label queue."""

    def test_extend_returns_new_queue(self) -> None:
        """Test that extending leaves the original queue untouched."""
        empty = LabelQueue()
        queue = empty.extend([_label()])
        assert len(empty) == 0
        assert len(queue) == 1

    def test_order_preserved(self) -> None:
        """Test that labels keep insertion order."""
        queue = LabelQueue().extend([_label(text="a")]).extend([_label(text="b"), _label(text="c")])
        assert [label.text for label in queue] == ["a", "b", "c"]

    def test_of_kind(self) -> None:
        """Test filtering labels by kind."""
        queue = LabelQueue().extend([_label(), _label(kind=LabelKind.BAR, text="Q1")])
        assert [label.text for label in queue.of_kind(LabelKind.BAR)] == ["Q1"]


class TestPlaceBarLabel:
    """Test category label placement around the drawn bar."""

    def test_default_bottom(self) -> None:
        """Test that labels default to just under the X axis row."""
        label, layout, geometry = _bar_label({"label": "Q1", "x_start": 2, "x_end": 4, "value": 5})
        assert label.text == "Q1"
        assert label.y == pytest.approx(geometry.origin_y + 5)
        assert label.x == pytest.approx(layout.slot.centre)
        assert label.baseline is TextBaseline.TOP

    def test_top_clears_value_label(self) -> None:
        """Test that a top label sits above the value label."""
        label, layout, _ = _bar_label(
            {"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_position": "top"}
        )
        assert layout.value_anchor is not None
        assert label.y == pytest.approx(layout.value_anchor - 12 - 5)
        assert label.baseline is TextBaseline.BOTTOM

    def test_top_without_value_label(self) -> None:
        """Test that a top label sits right above the bar when no value is shown."""
        label, layout, _ = _bar_label(
            {"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_position": "top", "show_value": False}
        )
        assert label.y == pytest.approx(layout.ops[0].top - 5)

    def test_left_and_right(self) -> None:
        """Test side labels are anchored 5px outside the slot at mid height."""
        left, layout, _ = _bar_label({"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_position": "left"})
        top, bottom = layout.extent
        assert left.x == pytest.approx(layout.slot.left - 5)
        assert left.y == pytest.approx((top + bottom) / 2)
        assert left.align is TextAlign.RIGHT
        right, layout, _ = _bar_label(
            {"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_position": "right"}
        )
        assert right.x == pytest.approx(layout.slot.right + 5)
        assert right.align is TextAlign.LEFT

    def test_inside_dark_bar_uses_white(self) -> None:
        """Test that inside labels switch to white on dark bars."""
        label, _, _ = _bar_label(
            {"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_position": "inside", "color": "#000080"}
        )
        assert label.color == "#FFFFFF"

    def test_inside_light_bar_keeps_color(self) -> None:
        """Test that inside labels keep the default colour on light bars."""
        label, _, _ = _bar_label(
            {"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_position": "inside", "color": "#FFFF00"}
        )
        assert label.color == "#000000"

    def test_item_label_color(self) -> None:
        """Test that an item's label colour overrides the default."""
        label, _, _ = _bar_label({"label": "Q1", "x_start": 2, "x_end": 4, "value": 5, "label_color": "#FF0000"})
        assert label.color == "#FF0000"

    def test_hidden_labels(self) -> None:
        """Test that bar labels can be switched off."""
        label, _, _ = _bar_label(
            {"label": "Q1", "x_start": 2, "x_end": 4, "value": 5},
            {"labels": {"bar_label_defaults": {"show": False}}},
        )
        assert label is None


class TestCompositeLabels:
    """Test the label compositor's style fallbacks."""

    @patch("plotcraft.charts.labels.render_text")
    def test_category_style_fallback(self, mock_render: MagicMock) -> None:
        """Test that labels without a style use their category's default style."""
        options = resolve_options({"labels": {"value_label_defaults": {"text_style": {"bold": True}}}})
        count = composite_labels(MagicMock(), LabelQueue((_label(),)), options)
        assert count == 1
        kwargs = mock_render.call_args.kwargs
        assert kwargs["style"] == TextStyle(bold=True)
        assert kwargs["font_size"] == 12

    @patch("plotcraft.charts.labels.render_text")
    def test_label_style_wins(self, mock_render: MagicMock) -> None:
        """Test that a label's own style and font size take precedence."""
        options = resolve_options({"labels": {"bar_label_defaults": {"text_style": {"bold": True}}}})
        style = TextStyle(italic=True, font_size=30)
        composite_labels(MagicMock(), LabelQueue((_label(kind=LabelKind.BAR, style=style),)), options)
        kwargs = mock_render.call_args.kwargs
        assert kwargs["style"] is style
        assert kwargs["font_size"] == 30

    @patch("plotcraft.charts.labels.render_text")
    def test_gradient_fallback(self, mock_render: MagicMock) -> None:
        """Test that the category gradient applies when the label has none."""
        gradient = {"type": "linear", "colors": [{"stop": 0, "color": "#FF0000"}, {"stop": 1, "color": "#0000FF"}]}
        options = resolve_options({"labels": {"value_label_defaults": {"gradient": gradient}}})
        composite_labels(MagicMock(), LabelQueue((_label(),)), options)
        assert mock_render.call_args.kwargs["gradient"] == options.labels.value_label_defaults.gradient

    @patch("plotcraft.charts.labels.render_text")
    def test_paints_in_queue_order(self, mock_render: MagicMock) -> None:
        """Test that labels are painted in the order they were queued."""
        queue = LabelQueue((_label(text="first"), _label(text="second")))
        composite_labels(MagicMock(), queue, resolve_options())
        assert [call.args[1] for call in mock_render.call_args_list] == ["first", "second"]
