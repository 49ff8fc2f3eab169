"""Deferred text labels.

Layout queues value and bar labels instead of drawing them; the compositor
paints the whole queue after every bar so no label is covered by a later bar.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.enums import LabelKind, LabelPosition, TextAlign, TextBaseline
from ..core.models import ChartItem, Gradient, TextStyle
from ..core.options import DEFAULT_BAR_COLOR, ChartOptions
from ..render.canvas import Canvas
from ..render.gradients import is_dark
from ..render.text import render_text

if TYPE_CHECKING:
    from .layout import ItemLayout
    from .sizing import ChartGeometry

LABEL_GAP = 5.0


@dataclass(frozen=True)
class Label:
    kind: LabelKind
    text: str
    x: float
    y: float
    align: TextAlign
    baseline: TextBaseline
    font_size: float
    color: str | None = None
    gradient: Gradient | None = None
    style: TextStyle | None = None


@dataclass(frozen=True)
class LabelQueue:
    """Ordered, immutable label list; later labels paint on top."""

    labels: tuple[Label, ...] = ()

    def extend(self, labels: Iterable[Label]) -> LabelQueue:
        return LabelQueue(self.labels + tuple(labels))

    def of_kind(self, kind: LabelKind) -> list[Label]:
        return [label for label in self.labels if label.kind is kind]

    def __iter__(self) -> Iterator[Label]:
        return iter(self.labels)

    def __len__(self) -> int:
        return len(self.labels)


def place_bar_label(
    item: ChartItem, layout: ItemLayout, options: ChartOptions, geometry: ChartGeometry
) -> Label | None:
    """Position an item's category label around its drawn extent.

    ``top`` sits above the item's value label when one is drawn above the
    bar; ``inside`` switches to white text on dark bars.
    """
    defaults = options.labels.bar_label_defaults
    if not defaults.show:
        return None

    slot = layout.slot
    top, bottom = layout.extent
    centre_y = (top + bottom) / 2
    position = item.label_position or defaults.default_position
    color = item.label_color or defaults.default_color

    if position is LabelPosition.TOP:
        if layout.value_anchor is not None:
            y = layout.value_anchor - options.labels.value_label_defaults.font_size - LABEL_GAP
        else:
            y = top - LABEL_GAP
        x, align, baseline = slot.centre, TextAlign.CENTER, TextBaseline.BOTTOM
    elif position is LabelPosition.LEFT:
        x, y, align, baseline = slot.left - LABEL_GAP, centre_y, TextAlign.RIGHT, TextBaseline.MIDDLE
    elif position is LabelPosition.RIGHT:
        x, y, align, baseline = slot.right + LABEL_GAP, centre_y, TextAlign.LEFT, TextBaseline.MIDDLE
    elif position is LabelPosition.INSIDE:
        x, y, align, baseline = slot.centre, centre_y, TextAlign.CENTER, TextBaseline.MIDDLE
        if is_dark(item.color or DEFAULT_BAR_COLOR):
            color = "#FFFFFF"
    else:
        x, y = slot.centre, geometry.origin_y + LABEL_GAP
        align, baseline = TextAlign.CENTER, TextBaseline.TOP

    return Label(
        kind=LabelKind.BAR,
        text=item.label,
        x=x,
        y=y,
        align=align,
        baseline=baseline,
        font_size=defaults.font_size,
        color=color,
        style=item.label_style,
    )


def composite_labels(canvas: Canvas, queue: LabelQueue, options: ChartOptions) -> int:
    """Paint every queued label in order.

    Style falls back from the label's own style to the category default
    (``bar_label_defaults`` / ``value_label_defaults``) and finally to the
    renderer default (16px Arial, black).

    Returns:
        Number of labels painted
    """
    bar_defaults = options.labels.bar_label_defaults
    value_defaults = options.labels.value_label_defaults
    for label in queue:
        defaults = bar_defaults if label.kind is LabelKind.BAR else value_defaults
        style = label.style or defaults.text_style
        size = style.font_size if style is not None and style.font_size else label.font_size
        render_text(
            canvas,
            label.text,
            label.x,
            label.y,
            style=style,
            font_size=size,
            color=label.color,
            gradient=label.gradient or defaults.gradient,
            align=label.align,
            baseline=label.baseline,
        )
    return len(queue)
