"""Axis lines, arrowheads, ticks, grid and axis titles.

Tick marks are always drawn. Tick labels go through a forward greedy pass:
a label is dropped when it sits closer than the spacing threshold to the last
label that was actually drawn, so earlier labels win over later ones.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..core.enums import TextAlign, TextBaseline
from ..core.logging_config import get_logger
from ..core.options import ChartOptions, resolve_options
from ..render.canvas import Canvas
from ..render.text import DEFAULT_TEXT_COLOR, render_text, text_size
from .domain import FixedSpacingScale, IndexScale, format_number, tick_values
from .sizing import ChartGeometry

logger = get_logger(__name__)

TICK_LENGTH = 5.0
TICK_LABEL_OFFSET = 10.0
Y_LABEL_SPACING = 30.0
X_LABEL_SPACING = 40.0
X_TITLE_OFFSET = 25.0
Y_TITLE_OFFSET = 30.0
GRID_DASHES = (2.0, 2.0)


@dataclass(frozen=True)
class Tick:
    value: float
    position: float
    label: str | None  # None when the label was skipped


def greedy_keep(positions: Sequence[float], min_spacing: float) -> list[bool]:
    """Forward scan keeping a position only if it is far enough from the last kept one."""
    kept = []
    last: float | None = None
    for position in positions:
        keep = last is None or abs(position - last) >= min_spacing
        if keep:
            last = position
        kept.append(keep)
    return kept


def _threshold(default: float, value_spacing: float | None) -> float:
    return max(default, value_spacing or 0.0)


def y_ticks(geometry: ChartGeometry, options: ChartOptions) -> list[Tick]:
    """Y ticks at their numeric positions, labelled with one decimal."""
    axis = options.y_axis
    domain = geometry.y_domain
    values = list(axis.values) if axis.values else tick_values(domain.min, domain.max, domain.step)
    positions = [geometry.y_scale(v) for v in values]
    keep = greedy_keep(positions, _threshold(Y_LABEL_SPACING, axis.value_spacing))
    return [
        Tick(value=v, position=p, label=f"{v:.1f}" if k else None)
        for v, p, k in zip(values, positions, keep)
    ]


def x_ticks(geometry: ChartGeometry, options: ChartOptions) -> list[Tick]:
    """X ticks by index, fixed pixel spacing or value; off-plot ticks are dropped."""
    axis = options.x_axis
    scale = geometry.x_scale
    if isinstance(scale, (IndexScale, FixedSpacingScale)):
        placed = [(v, scale.position(i)) for i, v in enumerate(scale.values)]
    else:
        domain = geometry.x_domain
        placed = [(v, scale(v)) for v in tick_values(domain.min, domain.max, domain.step)]

    # float tolerance on the right edge
    limit = geometry.axis_end_x + 1e-6
    placed = [(v, p) for v, p in placed if geometry.origin_x - 1e-6 <= p <= limit]
    keep = greedy_keep([p for _, p in placed], _threshold(X_LABEL_SPACING, axis.value_spacing))
    return [
        Tick(value=v, position=p, label=format_number(v) if k else None)
        for (v, p), k in zip(placed, keep)
    ]


def draw_arrow(canvas: Canvas, x: float, y: float, angle: float, size: float, color: str) -> None:
    """Filled triangular arrowhead with its tip at (x, y) pointing along ``angle``."""
    cos, sin = math.cos(angle), math.sin(angle)
    points = []
    for px, py in ((0.0, 0.0), (-size, -size / 2), (-size, size / 2)):
        points.append((x + px * cos - py * sin, y + px * sin + py * cos))
    canvas.fill_polygon(points, color=color)


def draw_axis_lines(canvas: Canvas, geometry: ChartGeometry, options: ChartOptions) -> None:
    """Y axis along the plot's left edge, X axis along the baseline row."""
    color, width = options.axis_color, options.axis_width
    arrow = options.appearance.arrow_size
    x0, y0 = geometry.origin_x, geometry.origin_y
    canvas.line(x0, y0, x0, geometry.axis_end_y, color=color, line_width=width, cap="round")
    draw_arrow(canvas, x0, geometry.axis_end_y, -math.pi / 2, arrow, color)

    row = geometry.baseline_y
    canvas.line(x0, row, geometry.axis_end_x, row, color=color, line_width=width, cap="round")
    draw_arrow(canvas, geometry.axis_end_x, row, 0.0, arrow, color)


def draw_y_ticks(
    canvas: Canvas, ticks: Sequence[Tick], geometry: ChartGeometry, options: ChartOptions
) -> None:
    x = geometry.origin_x
    size = options.y_axis.tick_font_size
    for tick in ticks:
        canvas.line(
            x - TICK_LENGTH, tick.position, x, tick.position,
            color=options.axis_color, line_width=options.axis_width,
        )
        if tick.label is not None:
            render_text(
                canvas,
                tick.label,
                x - TICK_LABEL_OFFSET,
                tick.position,
                font_size=size,
                color=DEFAULT_TEXT_COLOR,
                align=TextAlign.RIGHT,
                baseline=TextBaseline.MIDDLE,
            )


def draw_x_ticks(
    canvas: Canvas, ticks: Sequence[Tick], geometry: ChartGeometry, options: ChartOptions
) -> None:
    row = geometry.baseline_y
    size = options.x_axis.tick_font_size
    for tick in ticks:
        canvas.line(
            tick.position, row, tick.position, row + TICK_LENGTH,
            color=options.axis_color, line_width=options.axis_width,
        )
        if tick.label is not None:
            render_text(
                canvas,
                tick.label,
                tick.position,
                row + TICK_LABEL_OFFSET,
                font_size=size,
                color=DEFAULT_TEXT_COLOR,
                align=TextAlign.CENTER,
                baseline=TextBaseline.TOP,
            )


def draw_grid(
    canvas: Canvas,
    geometry: ChartGeometry,
    options: ChartOptions,
    x_marks: Sequence[Tick],
    y_marks: Sequence[Tick],
) -> None:
    """Dashed grid line through every tick, labelled or not."""
    grid = options.grid
    for tick in x_marks:
        canvas.line(
            tick.position, geometry.axis_end_y, tick.position, geometry.origin_y,
            color=grid.color, line_width=grid.width, dashes=GRID_DASHES,
        )
    for tick in y_marks:
        canvas.line(
            geometry.origin_x, tick.position, geometry.axis_end_x, tick.position,
            color=grid.color, line_width=grid.width, dashes=GRID_DASHES,
        )


def draw_axis_titles(
    canvas: Canvas, geometry: ChartGeometry, options: ChartOptions, y_marks: Sequence[Tick] = ()
) -> None:
    """X title under the tick labels; Y title rotated, left of the widest tick label."""
    size = options.labels.bar_label_defaults.font_size
    x_axis, y_axis = options.x_axis, options.y_axis
    if x_axis.label:
        render_text(
            canvas,
            x_axis.label,
            (geometry.origin_x + geometry.axis_end_x) / 2,
            geometry.baseline_y + X_TITLE_OFFSET,
            font_size=size,
            color=x_axis.label_color,
            align=TextAlign.CENTER,
            baseline=TextBaseline.TOP,
        )
    if y_axis.label:
        widest = max(
            (text_size(t.label, None, y_axis.tick_font_size).width for t in y_marks if t.label),
            default=0.0,
        )
        offset = max(Y_TITLE_OFFSET, TICK_LABEL_OFFSET + widest + 10)
        render_text(
            canvas,
            y_axis.label,
            geometry.origin_x - offset,
            (geometry.origin_y + geometry.axis_end_y) / 2,
            font_size=size,
            color=y_axis.label_color,
            align=TextAlign.CENTER,
            baseline=TextBaseline.BOTTOM,
            rotation=90.0,
        )


def draw_axes(
    width: float = 800,
    height: float = 600,
    options: Mapping[str, Any] | ChartOptions | None = None,
) -> bytes:
    """Render an empty pair of axes with arrowheads.

    Args:
        width: Canvas width in pixels
        height: Canvas height in pixels
        options: Chart options; only padding, background and axis styling apply

    Returns:
        PNG bytes
    """
    resolved = resolve_options(options)
    padding = resolved.dimensions.padding
    appearance = resolved.appearance
    color, line_width = resolved.axis_color, resolved.axis_width

    canvas = Canvas(width, height)
    try:
        canvas.fill_rect(0, 0, canvas.width, canvas.height, color=appearance.background_color)
        origin_x, origin_y = padding.left, height - padding.bottom
        end_x, end_y = width - padding.right, padding.top
        canvas.line(origin_x, origin_y, origin_x, end_y, color=color, line_width=line_width, cap="round")
        canvas.line(origin_x, origin_y, end_x, origin_y, color=color, line_width=line_width, cap="round")
        draw_arrow(canvas, origin_x, end_y, -math.pi / 2, appearance.arrow_size, color)
        draw_arrow(canvas, end_x, origin_y, 0.0, appearance.arrow_size, color)
        png = canvas.to_png()
    finally:
        canvas.close()
    logger.debug("Rendered empty axes", extra={"width": width, "height": height})
    return png
