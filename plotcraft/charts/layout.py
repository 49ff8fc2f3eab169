"""Bar layout strategies.

Each chart type maps an item to render ops (rectangles or lollipops) plus the
value labels that belong to it. Strategies only compute geometry; painting is
done by ``paint_op`` and the label compositor.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..core.enums import ChartType, LabelKind, TextAlign, TextBaseline
from ..core.logging_config import get_logger
from ..core.models import ChartItem, Gradient, Segment, Shadow, Stroke
from ..core.options import DEFAULT_BAR_COLOR, DEFAULT_NEGATIVE_COLOR, ChartOptions
from ..render.canvas import Canvas
from .domain import format_number, waterfall_baselines
from .labels import LABEL_GAP, Label, LabelQueue, place_bar_label
from .sizing import ChartGeometry

logger = get_logger(__name__)


@dataclass(frozen=True)
class BarOp:
    x: float
    y: float
    width: float
    height: float
    color: str
    gradient: Gradient | None = None
    opacity: float | None = None
    shadow: Shadow | None = None
    stroke: Stroke | None = None

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class LollipopOp:
    cx: float
    baseline_y: float
    value_y: float
    line_width: float
    dot_size: float
    color: str
    gradient: Gradient | None = None
    opacity: float | None = None
    shadow: Shadow | None = None
    stroke: Stroke | None = None

    @property
    def top(self) -> float:
        return min(self.baseline_y, self.value_y - self.dot_size / 2)

    @property
    def bottom(self) -> float:
        return max(self.baseline_y, self.value_y + self.dot_size / 2)


RenderOp = BarOp | LollipopOp


@dataclass(frozen=True)
class BarSlot:
    """Horizontal pixel extent reserved for one item."""

    left: float
    width: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def centre(self) -> float:
        return self.left + self.width / 2


@dataclass(frozen=True)
class ItemLayout:
    slot: BarSlot
    ops: tuple[RenderOp, ...] = ()
    labels: tuple[Label, ...] = ()
    # y of the highest value label drawn above the bar (bottom-anchored)
    value_anchor: float | None = None
    baseline_y: float = 0.0

    @property
    def extent(self) -> tuple[float, float]:
        """(top, bottom) of everything drawn for the item; the baseline row when nothing is."""
        if not self.ops:
            return self.baseline_y, self.baseline_y
        return min(op.top for op in self.ops), max(op.bottom for op in self.ops)


@dataclass(frozen=True)
class LayoutContext:
    options: ChartOptions
    geometry: ChartGeometry
    cumulative: tuple[float, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, items: Sequence[ChartItem], options: ChartOptions, geometry: ChartGeometry) -> LayoutContext:
        cumulative = ()
        if options.type is ChartType.WATERFALL:
            cumulative = tuple(waterfall_baselines(items, options.initial_value))
        return cls(options=options, geometry=geometry, cumulative=cumulative)

    @property
    def value_font_size(self) -> float:
        return self.options.labels.value_label_defaults.font_size


def item_slot(item: ChartItem, ctx: LayoutContext) -> BarSlot:
    """Map the item's X extent to pixels, widening it to ``bars.min_width``.

    A zero-width item is centred on its mapped point. ``bars.spacing`` insets
    the slot by half the spacing per side without going below the minimum.
    """
    bars = ctx.options.bars
    x_scale = ctx.geometry.x_scale
    start = x_scale(item.x_start)
    mapped = x_scale(item.x_end) - start
    width = max(mapped, bars.min_width)
    left = start - width / 2 if item.x_start == item.x_end else start
    if bars.spacing:
        narrowed = max(width - bars.spacing, bars.min_width)
        left += (width - narrowed) / 2
        width = narrowed
    return BarSlot(left=left, width=width)


def _style(seg: Segment | None, item: ChartItem, ctx: LayoutContext) -> dict:
    bars = ctx.options.bars
    opacity = seg.opacity if seg is not None and seg.opacity is not None else item.opacity
    return {
        "gradient": (seg.gradient if seg is not None else None) or item.gradient,
        "opacity": opacity if opacity is not None else bars.opacity,
        "shadow": (seg.shadow if seg is not None else None) or item.shadow or bars.shadow,
        "stroke": (seg.stroke if seg is not None else None) or item.stroke or bars.stroke,
    }


def _show_value(seg: Segment | None, item: ChartItem, ctx: LayoutContext) -> bool:
    if seg is not None and seg.show_value is not None:
        return bool(seg.show_value)
    if item.show_value is not None:
        return bool(item.show_value)
    return ctx.options.labels.value_label_defaults.show


def _value_label(
    text_value: float,
    x: float,
    y: float,
    baseline: TextBaseline,
    item: ChartItem,
    ctx: LayoutContext,
    seg: Segment | None = None,
) -> Label:
    defaults = ctx.options.labels.value_label_defaults
    color = (seg.value_color if seg is not None else None) or item.value_color or defaults.default_color
    return Label(
        kind=LabelKind.VALUE,
        text=format_number(text_value),
        x=x,
        y=y,
        align=TextAlign.CENTER,
        baseline=baseline,
        font_size=defaults.font_size,
        color=color,
        style=item.value_style,
    )


def _column(
    value: float, left: float, width: float, item: ChartItem, ctx: LayoutContext, seg: Segment | None = None
) -> tuple[BarOp, Label | None]:
    """A single bar from the baseline to ``value`` with its outside value label."""
    geometry = ctx.geometry
    baseline = ctx.options.baseline
    height = geometry.y_scale.length(value - baseline)
    above = value >= baseline
    y = geometry.baseline_y - height if above else geometry.baseline_y
    color = (seg.color if seg is not None else None) or item.color or DEFAULT_BAR_COLOR
    op = BarOp(left, y, width, height, color, **_style(seg, item, ctx))

    label = None
    if _show_value(seg, item, ctx):
        if above:
            label = _value_label(value, left + width / 2, y - LABEL_GAP, TextBaseline.BOTTOM, item, ctx, seg)
        else:
            label = _value_label(value, left + width / 2, y + height + LABEL_GAP, TextBaseline.TOP, item, ctx, seg)
    return op, label


def _highest_anchor(labels: Sequence[Label]) -> float | None:
    above = [label.y for label in labels if label.baseline is TextBaseline.BOTTOM]
    return min(above) if above else None


def layout_standard(item: ChartItem, index: int, ctx: LayoutContext) -> ItemLayout:
    slot = item_slot(item, ctx)
    value = item.value if item.value is not None else ctx.options.baseline
    op, label = _column(value, slot.left, slot.width, item, ctx)
    labels = (label,) if label is not None else ()
    return ItemLayout(
        slot=slot,
        ops=(op,),
        labels=labels,
        value_anchor=_highest_anchor(labels),
        baseline_y=ctx.geometry.baseline_y,
    )


def layout_grouped(item: ChartItem, index: int, ctx: LayoutContext) -> ItemLayout:
    """Segments side by side, each drawn as a standard bar."""
    slot = item_slot(item, ctx)
    segments = item.effective_segments()
    if not segments:
        return ItemLayout(slot=slot, baseline_y=ctx.geometry.baseline_y)

    gap = ctx.options.bars.group_spacing
    count = len(segments)
    seg_width = max((slot.width - gap * (count - 1)) / count, 1.0)
    ops, labels = [], []
    for position, seg in enumerate(segments):
        left = slot.left + position * (seg_width + gap)
        op, label = _column(seg.value, left, seg_width, item, ctx, seg)
        ops.append(op)
        if label is not None:
            labels.append(label)
    return ItemLayout(
        slot=slot,
        ops=tuple(ops),
        labels=tuple(labels),
        value_anchor=_highest_anchor(labels),
        baseline_y=ctx.geometry.baseline_y,
    )


def _inside_label(op: BarOp, seg: Segment, item: ChartItem, ctx: LayoutContext) -> Label | None:
    if not _show_value(seg, item, ctx) or op.height <= ctx.value_font_size + LABEL_GAP:
        return None
    return _value_label(
        seg.value, op.x + op.width / 2, op.y + op.height / 2, TextBaseline.MIDDLE, item, ctx, seg
    )


def layout_stacked(item: ChartItem, index: int, ctx: LayoutContext) -> ItemLayout:
    """Segments at or above the baseline stack upward, the rest downward."""
    geometry = ctx.geometry
    baseline = ctx.options.baseline
    slot = item_slot(item, ctx)
    segments = item.effective_segments()
    if not segments:
        return ItemLayout(slot=slot, baseline_y=geometry.baseline_y)

    ops, labels = [], []
    up = down = 0.0
    for seg in segments:
        height = geometry.y_scale.length(seg.value - baseline)
        if seg.value >= baseline:
            y = geometry.baseline_y - up - height
            up += height
            default_color = DEFAULT_BAR_COLOR
        else:
            y = geometry.baseline_y + down
            down += height
            default_color = DEFAULT_NEGATIVE_COLOR
        op = BarOp(slot.left, y, slot.width, height, seg.color or item.color or default_color, **_style(seg, item, ctx))
        ops.append(op)
        if item.segments:
            label = _inside_label(op, seg, item, ctx)
            if label is not None:
                labels.append(label)

    anchor = None
    total = sum(seg.value for seg in segments)
    if _show_value(None, item, ctx):
        if total >= baseline:
            anchor = geometry.baseline_y - up - LABEL_GAP
            labels.append(_value_label(total, slot.centre, anchor, TextBaseline.BOTTOM, item, ctx))
        else:
            labels.append(
                _value_label(total, slot.centre, geometry.baseline_y + down + LABEL_GAP, TextBaseline.TOP, item, ctx)
            )
    return ItemLayout(
        slot=slot, ops=tuple(ops), labels=tuple(labels), value_anchor=anchor, baseline_y=geometry.baseline_y
    )


def layout_waterfall(item: ChartItem, index: int, ctx: LayoutContext) -> ItemLayout:
    """Deltas stacked from the running total of the items before this one.

    Rectangles are clipped to the plot area; fully clipped segments are
    dropped.
    """
    geometry = ctx.geometry
    slot = item_slot(item, ctx)
    segments = item.effective_segments()
    start_y = geometry.y_scale(ctx.cumulative[index])
    if not segments:
        return ItemLayout(slot=slot, baseline_y=start_y)

    left = max(geometry.origin_x, min(slot.left, geometry.axis_end_x))
    width = min(slot.width, geometry.axis_end_x - left)
    ops, labels = [], []
    up = down = 0.0
    for seg in segments:
        height = geometry.y_scale.length(seg.value)
        if seg.value >= 0:
            seg_top = start_y - up - height
            up += height
            default_color = DEFAULT_BAR_COLOR
        else:
            seg_top = start_y + down
            down += height
            default_color = DEFAULT_NEGATIVE_COLOR
        top = max(seg_top, geometry.axis_end_y)
        visible = min(seg_top + height, geometry.origin_y) - top
        if visible <= 0 or width <= 0:
            continue
        op = BarOp(left, top, width, visible, seg.color or item.color or default_color, **_style(seg, item, ctx))
        ops.append(op)
        label = _inside_label(op, seg, item, ctx)
        if label is not None:
            labels.append(label)
    return ItemLayout(slot=slot, ops=tuple(ops), labels=tuple(labels), baseline_y=start_y)


def layout_lollipop(item: ChartItem, index: int, ctx: LayoutContext) -> ItemLayout:
    geometry = ctx.geometry
    bars = ctx.options.bars
    baseline = ctx.options.baseline
    slot = item_slot(item, ctx)
    value = item.value if item.value is not None else baseline
    value_y = geometry.y_scale(value)
    op = LollipopOp(
        cx=slot.centre,
        baseline_y=geometry.baseline_y,
        value_y=value_y,
        line_width=bars.line_width,
        dot_size=bars.dot_size,
        color=item.color or DEFAULT_BAR_COLOR,
        **_style(None, item, ctx),
    )
    labels: tuple[Label, ...] = ()
    if _show_value(None, item, ctx):
        radius = bars.dot_size / 2
        if value >= baseline:
            label = _value_label(value, slot.centre, value_y - radius - LABEL_GAP, TextBaseline.BOTTOM, item, ctx)
        else:
            label = _value_label(value, slot.centre, value_y + radius + LABEL_GAP, TextBaseline.TOP, item, ctx)
        labels = (label,)
    return ItemLayout(
        slot=slot, ops=(op,), labels=labels, value_anchor=_highest_anchor(labels), baseline_y=geometry.baseline_y
    )


LayoutStrategy = Callable[[ChartItem, int, LayoutContext], ItemLayout]

STRATEGIES: dict[ChartType, LayoutStrategy] = {
    ChartType.STANDARD: layout_standard,
    ChartType.GROUPED: layout_grouped,
    ChartType.STACKED: layout_stacked,
    ChartType.WATERFALL: layout_waterfall,
    ChartType.LOLLIPOP: layout_lollipop,
}


def layout_chart(items: Sequence[ChartItem], ctx: LayoutContext) -> tuple[list[RenderOp], LabelQueue]:
    """Lay out every item with the chart type's strategy.

    Returns:
        Render ops in paint order and the queue of labels to composite after them
    """
    strategy = STRATEGIES[ctx.options.type]
    ops: list[RenderOp] = []
    queue = LabelQueue()
    for index, item in enumerate(items):
        layout = strategy(item, index, ctx)
        ops.extend(layout.ops)
        queue = queue.extend(layout.labels)
        bar_label = place_bar_label(item, layout, ctx.options, ctx.geometry)
        if bar_label is not None:
            queue = queue.extend((bar_label,))
    logger.debug(
        "Laid out chart",
        extra={"chart_type": ctx.options.type.value, "ops": len(ops), "labels": len(queue)},
    )
    return ops, queue


def _paint_bar(canvas: Canvas, op: BarOp) -> None:
    if op.shadow is not None:
        canvas.fill_rect(
            op.x + op.shadow.offset_x,
            op.y + op.shadow.offset_y,
            op.width,
            op.height,
            color=op.shadow.color,
            opacity=op.shadow.opacity,
        )
    canvas.fill_rect(op.x, op.y, op.width, op.height, color=op.color, gradient=op.gradient, opacity=op.opacity)
    if op.stroke is not None and op.stroke.visible:
        canvas.stroke_rect(
            op.x,
            op.y,
            op.width,
            op.height,
            color=op.stroke.color,
            line_width=op.stroke.width,
            gradient=op.stroke.gradient,
            opacity=op.opacity,
        )


def _paint_lollipop(canvas: Canvas, op: LollipopOp) -> None:
    radius = op.dot_size / 2
    canvas.line(op.cx, op.baseline_y, op.cx, op.value_y, color=op.color, line_width=op.line_width)
    if op.shadow is not None:
        canvas.fill_circle(
            op.cx + op.shadow.offset_x,
            op.value_y + op.shadow.offset_y,
            radius,
            color=op.shadow.color,
            opacity=op.shadow.opacity,
        )
    canvas.fill_circle(op.cx, op.value_y, radius, color=op.color, gradient=op.gradient, opacity=op.opacity)
    if op.stroke is not None and op.stroke.visible:
        canvas.stroke_circle(
            op.cx,
            op.value_y,
            radius,
            color=op.stroke.color,
            line_width=op.stroke.width,
            gradient=op.stroke.gradient,
            opacity=op.opacity,
        )
    else:
        canvas.stroke_circle(op.cx, op.value_y, radius, color=op.color, line_width=1, opacity=op.opacity)


def paint_op(canvas: Canvas, op: RenderOp) -> None:
    if isinstance(op, LollipopOp):
        _paint_lollipop(canvas, op)
    else:
        _paint_bar(canvas, op)
