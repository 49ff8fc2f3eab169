"""Legend box: measurement, placement and drawing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.enums import LegendPosition, TextAlign, TextBaseline
from ..core.logging_config import get_logger
from ..core.models import LegendEntry
from ..core.options import DEFAULT_BAR_COLOR, ChartOptions, LegendOptions
from ..render.canvas import Canvas
from ..render.gradients import is_dark
from ..render.text import render_text, text_size, wrap_text

if TYPE_CHECKING:
    from .sizing import ChartGeometry

logger = get_logger(__name__)

BOX_SIZE = 15.0
TEXT_SPACING = 10.0
ENTRY_SPACING = 10.0
# Gap between the legend and the plot or canvas edge
EDGE_SPACING = 10.0
LINE_HEIGHT = 1.2

DARK_BACKGROUND = "rgba(0,0,0,0.8)"
LIGHT_BACKGROUND = "rgba(255,255,255,0.9)"


@dataclass(frozen=True)
class LegendRow:
    entry: LegendEntry
    lines: tuple[str, ...]
    height: float


@dataclass(frozen=True)
class LegendBox:
    width: float
    height: float
    rows: tuple[LegendRow, ...]


def _wrap_width(legend: LegendOptions) -> float | None:
    if legend.max_width is None or not legend.wrap_text:
        return None
    return legend.max_width - 2 * legend.padding - BOX_SIZE - TEXT_SPACING


def measure_legend(legend: LegendOptions) -> LegendBox | None:
    """Size the legend box using the legend's own font settings.

    Returns:
        The measured box, or None when the legend is hidden or has no entries
    """
    if not legend.visible:
        return None

    size = legend.font_size
    wrap_at = _wrap_width(legend)
    widest = 0.0
    rows = []
    for entry in legend.entries:
        if wrap_at is not None:
            lines = tuple(wrap_text(entry.label, wrap_at, legend.text_style, size))
            text_width = max(text_size(line, legend.text_style, size).width for line in lines)
            text_height = len(lines) * size * LINE_HEIGHT
        else:
            lines = (entry.label,)
            text_width = text_size(entry.label, legend.text_style, size).width
            text_height = size
        widest = max(widest, BOX_SIZE + TEXT_SPACING + text_width)
        rows.append(LegendRow(entry=entry, lines=lines, height=max(BOX_SIZE, text_height)))

    width = legend.max_width if legend.max_width is not None else widest + 2 * legend.padding
    height = sum(row.height for row in rows) + ENTRY_SPACING * (len(rows) - 1) + 2 * legend.padding
    return LegendBox(width=width, height=height, rows=tuple(rows))


def legend_origin(box: LegendBox, options: ChartOptions, geometry: ChartGeometry) -> tuple[float, float]:
    """Top-left corner of the legend for its configured position."""
    padding = options.dimensions.padding
    position = options.legend.position
    centred_y = geometry.axis_end_y + (geometry.plot_height - box.height) / 2

    if position is LegendPosition.TOP:
        return (geometry.width - box.width) / 2, padding.top + geometry.title_height + EDGE_SPACING
    if position is LegendPosition.BOTTOM:
        return (
            (geometry.width - box.width) / 2,
            geometry.height - padding.bottom - box.height - EDGE_SPACING,
        )
    if position is LegendPosition.LEFT:
        return padding.left + EDGE_SPACING, centred_y
    return geometry.axis_end_x + EDGE_SPACING, centred_y


def legend_colors(legend: LegendOptions, chart_background: str) -> tuple[str, str, str]:
    """Resolve (background, text, border) colours.

    A dark background switches to a translucent black box with white text
    and border.
    """
    background = legend.background_color or chart_background
    dark = is_dark(background)
    if dark:
        fill = DARK_BACKGROUND
    else:
        fill = legend.background_color or LIGHT_BACKGROUND
    contrast = "#FFFFFF" if dark else "#000000"
    return fill, legend.text_color or contrast, legend.border_color or contrast


def draw_legend(
    canvas: Canvas,
    box: LegendBox,
    x: float,
    y: float,
    legend: LegendOptions,
    chart_background: str = "#FFFFFF",
) -> None:
    fill, text_color, border = legend_colors(legend, chart_background)
    canvas.fill_rect(x, y, box.width, box.height, color=fill, gradient=legend.background_gradient)
    canvas.stroke_rect(x, y, box.width, box.height, color=border, line_width=1)

    size = legend.font_size
    line_height = size * LINE_HEIGHT
    text_x = x + legend.padding + BOX_SIZE + TEXT_SPACING
    current_y = y + legend.padding
    for row in box.rows:
        centre_y = current_y + row.height / 2
        swatch_x = x + legend.padding
        swatch_y = centre_y - BOX_SIZE / 2
        canvas.fill_rect(
            swatch_x,
            swatch_y,
            BOX_SIZE,
            BOX_SIZE,
            color=row.entry.color or DEFAULT_BAR_COLOR,
            gradient=row.entry.gradient,
        )
        canvas.stroke_rect(swatch_x, swatch_y, BOX_SIZE, BOX_SIZE, color=border, line_width=1)

        start_y = centre_y - (len(row.lines) - 1) * line_height / 2
        for index, line in enumerate(row.lines):
            render_text(
                canvas,
                line,
                text_x,
                start_y + index * line_height,
                style=legend.text_style,
                font_size=size,
                color=text_color,
                gradient=legend.text_gradient,
                align=TextAlign.LEFT,
                baseline=TextBaseline.MIDDLE,
            )
        current_y += row.height + ENTRY_SPACING

    logger.debug("Legend drawn", extra={"x": x, "y": y, "entries": len(box.rows)})
