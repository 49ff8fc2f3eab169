"""Canvas sizing: responsive width, legend reservations and the plot rectangle."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..core.enums import LegendPosition
from ..core.logging_config import get_logger
from ..core.models import ChartItem
from ..core.options import ChartOptions
from ..render.text import text_size
from .domain import (
    DomainRange,
    LinearScale,
    XScale,
    build_x_scale,
    build_y_scale,
    contributing_values,
    resolve_x_domain,
    resolve_y_domain,
)
from .legend import EDGE_SPACING, LegendBox, measure_legend

logger = get_logger(__name__)

MIN_PLOT_WIDTH = 400.0
PIXELS_PER_UNIT = 10.0
PIXELS_PER_TICK = 20.0
# Agg refuses images wider than 2**16 pixels
MAX_PLOT_WIDTH = 30000.0
MIN_Y_LABEL_WIDTH = 60.0
# label offset (10) + tick (5) + gap (15)
Y_LABEL_GUTTER = 30.0


@dataclass(frozen=True)
class ChartGeometry:
    """Resolved canvas size, plot rectangle and scales for one render."""

    width: float
    height: float
    base_width: float
    chart_area_left: float
    chart_area_right: float
    chart_area_top: float
    chart_area_bottom: float
    title_height: float
    axis_label_height: float
    origin_x: float
    origin_y: float
    axis_end_x: float
    axis_end_y: float
    x_domain: DomainRange
    y_domain: DomainRange
    x_scale: XScale
    y_scale: LinearScale
    baseline_y: float
    legend: LegendBox | None = None

    @property
    def plot_width(self) -> float:
        return self.axis_end_x - self.origin_x

    @property
    def plot_height(self) -> float:
        return self.origin_y - self.axis_end_y


def responsive_width(x_domain: DomainRange, options: ChartOptions) -> float:
    """Base canvas width: padding plus at least 400px of plot.

    The plot grows with the X span (10px per unit) or, for explicit tick
    values, with the number of ticks (20px each).
    """
    padding = options.dimensions.padding
    tick_count = len(options.x_axis.values or ())
    plot = max(MIN_PLOT_WIDTH, x_domain.span * PIXELS_PER_UNIT, tick_count * PIXELS_PER_TICK)
    if plot > MAX_PLOT_WIDTH:
        logger.warning(f"Plot width {plot:.0f}px exceeds {MAX_PLOT_WIDTH:.0f}px and was capped")
        plot = MAX_PLOT_WIDTH
    return padding.left + plot + padding.right


def y_label_width(items: Sequence[ChartItem], options: ChartOptions) -> float:
    """Estimated width of the Y tick labels plus the gutter beside them."""
    values = contributing_values(items, options)
    width = MIN_Y_LABEL_WIDTH
    if values:
        hi, lo = max(values), min(values)
        size = options.y_axis.tick_font_size
        for value in (hi, lo, abs(hi), abs(lo)):
            width = max(width, text_size(f"{value:.1f}", None, size).width)
    return width + Y_LABEL_GUTTER


def legend_extent(
    box: LegendBox | None, items: Sequence[ChartItem], options: ChartOptions
) -> tuple[float, float]:
    """Extra (width, height) the legend adds to the canvas."""
    if box is None:
        return 0.0, 0.0
    spacing = options.legend.spacing
    position = options.legend.position
    if position is LegendPosition.RIGHT:
        return box.width + spacing + EDGE_SPACING, 0.0
    if position is LegendPosition.LEFT:
        return box.width + spacing + y_label_width(items, options) + EDGE_SPACING, 0.0
    return 0.0, box.height + spacing + EDGE_SPACING


def plan_geometry(items: Sequence[ChartItem], options: ChartOptions) -> ChartGeometry:
    """Compute canvas size, plot rectangle and both scales.

    Args:
        items: Parsed chart items
        options: Resolved chart options

    Returns:
        Frozen ChartGeometry for a single render
    """
    padding = options.dimensions.padding
    height = options.dimensions.height
    x_domain = resolve_x_domain(items, options.x_axis)
    y_domain = resolve_y_domain(items, options)

    base_width = responsive_width(x_domain, options)
    box = measure_legend(options.legend)
    extra_width, extra_height = legend_extent(box, items, options)

    title = options.labels.title
    title_height = title.font_size + 30 if title.text else 0.0
    axis_label_height = (
        options.labels.bar_label_defaults.font_size + 20 if options.has_axis_label else 0.0
    )

    left = padding.left
    top = padding.top + title_height
    if box is not None and options.legend.position is LegendPosition.LEFT:
        left = padding.left + box.width + options.legend.spacing + y_label_width(items, options)
    elif box is not None and options.legend.position is LegendPosition.TOP:
        top += box.height + options.legend.spacing + EDGE_SPACING
    right = base_width - padding.right
    bottom = height - padding.bottom

    origin_y = bottom - axis_label_height
    x_scale = build_x_scale(options.x_axis, x_domain, left, right)
    y_scale = build_y_scale(y_domain, origin_y, top)

    geometry = ChartGeometry(
        width=base_width + extra_width,
        height=height + extra_height,
        base_width=base_width,
        chart_area_left=left,
        chart_area_right=right,
        chart_area_top=top,
        chart_area_bottom=bottom,
        title_height=title_height,
        axis_label_height=axis_label_height,
        origin_x=left,
        origin_y=origin_y,
        axis_end_x=right,
        axis_end_y=top,
        x_domain=x_domain,
        y_domain=y_domain,
        x_scale=x_scale,
        y_scale=y_scale,
        baseline_y=y_scale(options.baseline),
        legend=box,
    )
    logger.debug(
        "Planned chart geometry",
        extra={
            "width": geometry.width,
            "height": geometry.height,
            "x_range": [x_domain.min, x_domain.max],
            "y_range": [y_domain.min, y_domain.max],
        },
    )
    return geometry
