"""Bar chart rendering: standard, grouped, stacked, waterfall and lollipop."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..core.enums import TextAlign, TextBaseline
from ..core.logging_config import get_logger
from ..core.models import ChartItem, parse_items
from ..core.options import Appearance, ChartOptions, resolve_options
from ..render.canvas import Canvas
from ..render.text import render_text
from .axes import draw_axis_lines, draw_axis_titles, draw_grid, draw_x_ticks, draw_y_ticks, x_ticks, y_ticks
from .labels import composite_labels
from .layout import LayoutContext, layout_chart, paint_op
from .legend import draw_legend, legend_origin
from .sizing import ChartGeometry, plan_geometry
from .validation import validate_bounds

logger = get_logger(__name__)

TITLE_OFFSET = 10.0

CanvasFactory = Callable[[float, float], Canvas]


def draw_background(canvas: Canvas, appearance: Appearance) -> None:
    """Fill the canvas with the background image, gradient or colour.

    An unreadable background image is logged and replaced by the gradient or
    colour fill.
    """
    if appearance.background_image:
        try:
            canvas.draw_image_file(appearance.background_image, 0, 0, canvas.width, canvas.height)
            return
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load background image {appearance.background_image}: {e}")
    canvas.fill_rect(
        0,
        0,
        canvas.width,
        canvas.height,
        color=appearance.background_color,
        gradient=appearance.background_gradient,
    )


def draw_title(canvas: Canvas, geometry: ChartGeometry, options: ChartOptions) -> None:
    title = options.labels.title
    if not title.text:
        return
    render_text(
        canvas,
        title.text,
        geometry.width / 2,
        options.dimensions.padding.top + TITLE_OFFSET,
        style=title.text_style,
        font_size=title.font_size,
        color=title.color,
        gradient=title.gradient,
        align=TextAlign.CENTER,
        baseline=TextBaseline.TOP,
    )


def create_bar_chart(
    data: Iterable[Mapping[str, Any] | ChartItem] | None,
    options: Mapping[str, Any] | ChartOptions | None = None,
    *,
    canvas_factory: CanvasFactory = Canvas,
    scale: float = 1.0,
) -> bytes:
    """Render a bar chart to PNG.

    Args:
        data: Chart items as mappings or ChartItem instances
        options: Nested options mapping (see ``resolve_options``) or ChartOptions
        canvas_factory: Callable building the canvas from (width, height)
        scale: Output resolution multiplier

    Returns:
        PNG bytes

    Raises:
        ChartOptionsError: If data or options are malformed
        ChartBoundsError: If a value lies outside an explicit axis range
    """
    items = parse_items(data)
    resolved = resolve_options(options)
    geometry = plan_geometry(items, resolved)
    validate_bounds(items, resolved, geometry.y_domain)

    canvas = canvas_factory(geometry.width, geometry.height)
    try:
        draw_background(canvas, resolved.appearance)
        draw_title(canvas, geometry, resolved)

        x_marks = x_ticks(geometry, resolved)
        y_marks = y_ticks(geometry, resolved)
        if resolved.grid.show:
            draw_grid(canvas, geometry, resolved, x_marks, y_marks)
        draw_axis_lines(canvas, geometry, resolved)
        draw_y_ticks(canvas, y_marks, geometry, resolved)
        draw_x_ticks(canvas, x_marks, geometry, resolved)
        draw_axis_titles(canvas, geometry, resolved, y_marks)

        if geometry.legend is not None:
            x, y = legend_origin(geometry.legend, resolved, geometry)
            draw_legend(canvas, geometry.legend, x, y, resolved.legend, resolved.appearance.background_color)

        ops, queue = layout_chart(items, LayoutContext.build(items, resolved, geometry))
        for op in ops:
            paint_op(canvas, op)
        composite_labels(canvas, queue, resolved)

        png = canvas.to_png(scale)
    finally:
        canvas.close()

    logger.info(
        "Rendered bar chart",
        extra={
            "chart_type": resolved.type.value,
            "items": len(items),
            "width": canvas.width,
            "height": canvas.height,
        },
    )
    return png
