"""Domain mapping: axis ranges and domain-to-pixel scales.

X positions are produced by one of three scales:

* ``LinearScale``: linear interpolation of ``[min, max]`` onto the axis.
* ``IndexScale``: explicit tick values spread evenly by their index,
  ignoring the numeric gaps between them.
* ``FixedSpacingScale``: explicit tick values placed ``spacing`` pixels apart.

The Y axis is always linear (bar heights are numeric) and inverted because
canvas Y grows downward.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from ..core.enums import ChartType
from ..core.models import ChartItem
from ..core.options import AxisOptions, ChartOptions

# Spans narrower than this are widened to one domain unit around their centre
MIN_SPAN = 1e-9
MAX_TICKS = 1000


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return f"{value:.10g}"


def ensure_span(lo: float, hi: float) -> tuple[float, float]:
    """Order a range and widen it when it is (nearly) empty."""
    if hi < lo:
        lo, hi = hi, lo
    if hi - lo < MIN_SPAN:
        mid = (lo + hi) / 2
        return mid - 0.5, mid + 0.5
    return lo, hi


def default_step(span: float) -> float:
    """Tick step giving roughly ten ticks; whole units for spans of one or more."""
    if span >= 1:
        return float(math.ceil(span / 10))
    raw = span / 10
    magnitude = 10 ** math.floor(math.log10(raw))
    for multiple in (1, 2, 5):
        if multiple * magnitude >= raw:
            return multiple * magnitude
    return 10 * magnitude


def tick_values(lo: float, hi: float, step: float) -> list[float]:
    """Values ``lo, lo + step, ...`` up to and including ``hi``."""
    count = min(int(math.floor((hi - lo) / step + 1e-9)), MAX_TICKS)
    return [lo + i * step for i in range(count + 1)]


@dataclass(frozen=True)
class DomainRange:
    min: float
    max: float
    step: float

    @property
    def span(self) -> float:
        return self.max - self.min


class LinearScale:
    """Map ``[domain_min, domain_max]`` linearly onto ``[pixel_start, pixel_end]``."""

    def __init__(self, domain_min: float, domain_max: float, pixel_start: float, pixel_end: float):
        self.domain_min, self.domain_max = ensure_span(domain_min, domain_max)
        self.pixel_start = pixel_start
        self.pixel_end = pixel_end

    @property
    def span(self) -> float:
        return self.domain_max - self.domain_min

    def __call__(self, value: float) -> float:
        fraction = (value - self.domain_min) / self.span
        return self.pixel_start + fraction * (self.pixel_end - self.pixel_start)

    def length(self, delta: float) -> float:
        """Pixel length covered by a domain distance ``delta``."""
        return abs(delta) / self.span * abs(self.pixel_end - self.pixel_start)


class IndexScale:
    """Explicit values positioned by index: ``index / max(n - 1, 1)`` of the axis."""

    def __init__(self, values: Sequence[float], pixel_start: float, pixel_end: float):
        self.values = list(values)
        self.pixel_start = pixel_start
        self.pixel_end = pixel_end
        self._fallback = LinearScale(min(self.values), max(self.values), pixel_start, pixel_end)

    def position(self, index: int) -> float:
        divisor = len(self.values) - 1 if len(self.values) > 1 else 1
        return self.pixel_start + (index / divisor) * (self.pixel_end - self.pixel_start)

    def __call__(self, value: float) -> float:
        if value in self.values:
            return self.position(self.values.index(value))
        return self._fallback(value)


class FixedSpacingScale:
    """Explicit values positioned ``spacing`` pixels apart starting at the origin."""

    def __init__(self, values: Sequence[float], pixel_start: float, spacing: float):
        self.values = list(values)
        self.pixel_start = pixel_start
        self.spacing = spacing
        self._fallback = LinearScale(
            min(self.values),
            max(self.values),
            pixel_start,
            pixel_start + max(len(self.values) - 1, 1) * spacing,
        )

    def position(self, index: int) -> float:
        return self.pixel_start + index * self.spacing

    def __call__(self, value: float) -> float:
        if value in self.values:
            return self.position(self.values.index(value))
        return self._fallback(value)


XScale = LinearScale | IndexScale | FixedSpacingScale


def build_x_scale(axis: AxisOptions, domain: DomainRange, start: float, end: float) -> XScale:
    if axis.values:
        if axis.spacing is not None:
            return FixedSpacingScale(axis.values, start, axis.spacing)
        return IndexScale(axis.values, start, end)
    return LinearScale(domain.min, domain.max, start, end)


def build_y_scale(domain: DomainRange, origin_y: float, axis_end_y: float) -> LinearScale:
    return LinearScale(domain.min, domain.max, origin_y, axis_end_y)


def resolve_x_domain(items: Sequence[ChartItem], axis: AxisOptions) -> DomainRange:
    """X range from explicit values, an explicit range, or the data (+10% padding)."""
    if axis.values:
        lo, hi = min(axis.values), max(axis.values)
    elif axis.has_explicit_range:
        lo, hi = axis.range.min, axis.range.max  # type: ignore[union-attr]
    elif not items:
        lo, hi = 0.0, 100.0
    else:
        extents = [v for item in items for v in (item.x_start, item.x_end)]
        data_min, data_max = min(extents), max(extents)
        pad = (data_max - data_min) * 0.1
        lo, hi = data_min - pad, data_max + pad
        if data_min >= 0:
            lo = max(0.0, lo)
    lo, hi = ensure_span(lo, hi)
    step = axis.range.step if axis.range is not None and axis.range.step else None
    return DomainRange(lo, hi, step or default_step(hi - lo))


def waterfall_baselines(items: Sequence[ChartItem], initial_value: float) -> list[float]:
    """Cumulative baseline of each item: initial value plus the totals before it."""
    baselines = []
    running = initial_value
    for item in items:
        baselines.append(running)
        running += item.total
    return baselines


def contributing_values(items: Sequence[ChartItem], options: ChartOptions) -> list[float]:
    """Values the Y range must cover for the chart type."""
    chart_type = options.type
    baseline = options.baseline
    values: list[float] = []
    if chart_type is ChartType.WATERFALL:
        values.extend(waterfall_baselines(items, options.initial_value))
        values.append(options.initial_value + sum(item.total for item in items))
    elif chart_type is ChartType.STACKED:
        for item in items:
            segments = item.effective_segments()
            if not segments:
                continue
            values.append(item.total)
            values.append(baseline + sum(s.value - baseline for s in segments if s.value >= baseline))
            values.append(baseline - sum(baseline - s.value for s in segments if s.value < baseline))
    elif chart_type is ChartType.GROUPED:
        values.extend(seg.value for item in items for seg in item.effective_segments())
    else:
        values.extend(item.value for item in items if item.value is not None)
    return values


def resolve_y_domain(items: Sequence[ChartItem], options: ChartOptions) -> DomainRange:
    """Y range covering the data and the baseline.

    Explicit ``values`` set the range directly; an explicit ``range`` is kept
    (waterfall charts widen it to their running totals plus 10%); otherwise the
    contributing values are padded by 10% of their span. The baseline is
    always folded into the result.
    """
    axis = options.y_axis
    baseline = options.baseline
    data = contributing_values(items, options)

    if axis.values:
        lo, hi = min(axis.values), max(axis.values)
    elif axis.has_explicit_range:
        lo, hi = axis.range.min, axis.range.max  # type: ignore[union-attr]
        lo, hi = min(lo, baseline), max(hi, baseline)
        if options.type is ChartType.WATERFALL and data:
            lo, hi = min(lo, *data), max(hi, *data)
            pad = (hi - lo) * 0.1
            lo, hi = lo - pad, hi + pad
    elif data:
        lo, hi = min(data), max(data)
        pad = (hi - lo) * 0.1
        lo, hi = lo - pad, hi + pad
    else:
        lo, hi = 0.0, 1.0

    lo, hi = ensure_span(min(lo, baseline), max(hi, baseline))
    step = axis.range.step if axis.range is not None and axis.range.step else None
    return DomainRange(lo, hi, step or default_step(hi - lo))
