"""Bounds checks against explicitly configured axis ranges.

Runs before anything is drawn; the first offending value raises.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..core.enums import ChartType
from ..core.errors import ChartBoundsError
from ..core.models import ChartItem
from ..core.options import ChartOptions
from .domain import DomainRange


def _outside(value: float, bounds: tuple[float, float]) -> bool:
    return value < bounds[0] or value > bounds[1]


def x_bounds(options: ChartOptions) -> tuple[float, float] | None:
    axis = options.x_axis
    if axis.values:
        return min(axis.values), max(axis.values)
    if axis.has_explicit_range:
        return axis.range.min, axis.range.max  # type: ignore[union-attr,return-value]
    return None


def y_bounds(options: ChartOptions, y_domain: DomainRange) -> tuple[float, float] | None:
    """Explicit values bound by their own min/max; an explicit range by the resolved range."""
    axis = options.y_axis
    if axis.values:
        return min(axis.values), max(axis.values)
    if axis.has_explicit_range:
        return y_domain.min, y_domain.max
    return None


def validate_bounds(items: Sequence[ChartItem], options: ChartOptions, y_domain: DomainRange) -> None:
    """Raise ChartBoundsError for the first value outside an explicit axis range.

    Args:
        items: Parsed chart items
        options: Resolved chart options
        y_domain: Resolved Y range (explicit ranges may have been widened)

    Raises:
        ChartBoundsError: On the first out-of-range X extent or Y value
    """
    bounds = x_bounds(options)
    if bounds is not None:
        for index, item in enumerate(items):
            for field_name in ("x_start", "x_end"):
                value = getattr(item, field_name)
                if _outside(value, bounds):
                    raise ChartBoundsError(
                        axis="x", item_index=index, label=item.label, value=value, bounds=bounds, field=field_name
                    )

    bounds = y_bounds(options, y_domain)
    if bounds is None:
        return
    waterfall = options.type is ChartType.WATERFALL
    for index, item in enumerate(items):
        if options.type.uses_segments and item.segments:
            for seg_index, seg in enumerate(item.segments):
                if _outside(seg.value, bounds):
                    raise ChartBoundsError(
                        axis="y",
                        item_index=index,
                        label=item.label,
                        value=seg.value,
                        bounds=bounds,
                        segment_index=seg_index,
                        waterfall=waterfall,
                    )
        elif item.value is not None and _outside(item.value, bounds):
            raise ChartBoundsError(
                axis="y", item_index=index, label=item.label, value=item.value, bounds=bounds, waterfall=waterfall
            )
