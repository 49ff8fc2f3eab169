"""Chart options and their one-time default resolution.

Callers pass a nested mapping (or nothing). ``resolve_options`` turns it into a
fully populated, frozen ``ChartOptions`` so render code never has to chase
fallback chains. Cross-group fallbacks (axis colour from either axis, tick
font size shared between axes) are settled here as well.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import ChartType, LabelPosition, LegendPosition
from .errors import ChartOptionsError
from .logging_config import get_logger
from .models import (
    Gradient,
    LegendEntry,
    Shadow,
    Stroke,
    TextStyle,
    check_keys,
    optional_gradient,
    optional_number,
    optional_shadow,
    optional_stroke,
    optional_text_style,
    parse_enum,
    parse_number,
)

logger = get_logger(__name__)

DEFAULT_BAR_COLOR = "#4A90E2"
DEFAULT_NEGATIVE_COLOR = "#FF6B6B"


@dataclass(frozen=True)
class Padding:
    top: float = 60.0
    right: float = 80.0
    bottom: float = 80.0
    left: float = 100.0

    @classmethod
    def from_dict(cls, raw: Any) -> Padding:
        data = check_keys(raw or {}, cls, "dimensions.padding")
        defaults = cls()
        return cls(
            **{
                name: parse_number(data.get(name, getattr(defaults, name)), f"padding.{name}")
                for name in ("top", "right", "bottom", "left")
            }
        )


@dataclass(frozen=True)
class Dimensions:
    height: float = 600.0
    padding: Padding = field(default_factory=Padding)
    width: float | None = None  # ignored: width is computed from the data

    @classmethod
    def from_dict(cls, raw: Any) -> Dimensions:
        data = check_keys(raw or {}, cls, "dimensions")
        if data.get("width") is not None:
            logger.debug("dimensions.width is ignored; chart width is computed from the X range")
        return cls(
            height=parse_number(data.get("height", 600.0), "dimensions.height"),
            padding=Padding.from_dict(data.get("padding")),
            width=optional_number(data.get("width"), "dimensions.width"),
        )


@dataclass(frozen=True)
class Appearance:
    background_color: str = "#FFFFFF"
    background_gradient: Gradient | None = None
    background_image: str | None = None
    axis_color: str | None = None
    axis_width: float | None = None
    arrow_size: float = 10.0

    @classmethod
    def from_dict(cls, raw: Any) -> Appearance:
        data = check_keys(raw or {}, cls, "appearance")
        return cls(
            background_color=str(data.get("background_color", "#FFFFFF")),
            background_gradient=optional_gradient(data.get("background_gradient")),
            background_image=data.get("background_image"),
            axis_color=data.get("axis_color"),
            axis_width=optional_number(data.get("axis_width"), "appearance.axis_width"),
            arrow_size=parse_number(data.get("arrow_size", 10.0), "appearance.arrow_size"),
        )


@dataclass(frozen=True)
class AxisRange:
    min: float | None = None
    max: float | None = None
    step: float | None = None

    @property
    def is_explicit(self) -> bool:
        return self.min is not None and self.max is not None

    @classmethod
    def from_dict(cls, raw: Any) -> AxisRange:
        data = check_keys(raw, cls, "axis range")
        step = optional_number(data.get("step"), "range.step")
        if step is not None and step <= 0:
            raise ChartOptionsError(f"range.step must be positive, got {step}")
        return cls(
            min=optional_number(data.get("min"), "range.min"),
            max=optional_number(data.get("max"), "range.max"),
            step=step,
        )


@dataclass(frozen=True)
class AxisOptions:
    label: str | None = None
    label_color: str | None = None
    range: AxisRange | None = None
    values: tuple[float, ...] | None = None
    color: str | None = None
    width: float | None = None
    tick_font_size: float | None = None
    value_spacing: float | None = None
    baseline: float = 0.0

    @property
    def has_explicit_range(self) -> bool:
        return self.range is not None and self.range.is_explicit

    @property
    def spacing(self) -> float | None:
        """Positive ``value_spacing`` or None."""
        if self.value_spacing is not None and self.value_spacing > 0:
            return self.value_spacing
        return None

    @classmethod
    def from_dict(cls, raw: Any, name: str) -> AxisOptions:
        data = check_keys(raw or {}, cls, f"axes.{name}")
        if name == "x" and "baseline" in data:
            raise ChartOptionsError("baseline is only supported on the Y axis")
        values = data.get("values")
        if values is not None:
            values = tuple(parse_number(v, f"axes.{name}.values") for v in values)
        return cls(
            label=data.get("label"),
            label_color=data.get("label_color"),
            range=AxisRange.from_dict(data["range"]) if data.get("range") is not None else None,
            values=values or None,
            color=data.get("color"),
            width=optional_number(data.get("width"), f"axes.{name}.width"),
            tick_font_size=optional_number(data.get("tick_font_size"), f"axes.{name}.tick_font_size"),
            value_spacing=optional_number(data.get("value_spacing"), f"axes.{name}.value_spacing"),
            baseline=parse_number(data.get("baseline", 0.0), f"axes.{name}.baseline"),
        )


@dataclass(frozen=True)
class TitleOptions:
    text: str | None = None
    font_size: float = 24.0
    color: str = "#000000"
    gradient: Gradient | None = None
    text_style: TextStyle | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> TitleOptions:
        data = check_keys(raw or {}, cls, "labels.title")
        return cls(
            text=data.get("text"),
            font_size=parse_number(data.get("font_size", 24.0), "title.font_size"),
            color=str(data.get("color", "#000000")),
            gradient=optional_gradient(data.get("gradient")),
            text_style=optional_text_style(data.get("text_style")),
        )


@dataclass(frozen=True)
class BarLabelDefaults:
    show: bool = True
    default_position: LabelPosition = LabelPosition.BOTTOM
    font_size: float = 14.0
    default_color: str = "#000000"
    gradient: Gradient | None = None
    text_style: TextStyle | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> BarLabelDefaults:
        data = check_keys(raw or {}, cls, "labels.bar_label_defaults")
        return cls(
            show=bool(data.get("show", True)),
            default_position=parse_enum(
                LabelPosition, data.get("default_position", "bottom"), "default_position"
            ),
            font_size=parse_number(data.get("font_size", 14.0), "bar_label_defaults.font_size"),
            default_color=str(data.get("default_color", "#000000")),
            gradient=optional_gradient(data.get("gradient")),
            text_style=optional_text_style(data.get("text_style")),
        )


@dataclass(frozen=True)
class ValueLabelDefaults:
    show: bool = True
    font_size: float = 12.0
    default_color: str = "#000000"
    gradient: Gradient | None = None
    text_style: TextStyle | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> ValueLabelDefaults:
        data = check_keys(raw or {}, cls, "labels.value_label_defaults")
        return cls(
            show=bool(data.get("show", True)),
            font_size=parse_number(data.get("font_size", 12.0), "value_label_defaults.font_size"),
            default_color=str(data.get("default_color", "#000000")),
            gradient=optional_gradient(data.get("gradient")),
            text_style=optional_text_style(data.get("text_style")),
        )


@dataclass(frozen=True)
class LabelOptions:
    title: TitleOptions = field(default_factory=TitleOptions)
    bar_label_defaults: BarLabelDefaults = field(default_factory=BarLabelDefaults)
    value_label_defaults: ValueLabelDefaults = field(default_factory=ValueLabelDefaults)

    @classmethod
    def from_dict(cls, raw: Any) -> LabelOptions:
        data = check_keys(raw or {}, cls, "labels")
        return cls(
            title=TitleOptions.from_dict(data.get("title")),
            bar_label_defaults=BarLabelDefaults.from_dict(data.get("bar_label_defaults")),
            value_label_defaults=ValueLabelDefaults.from_dict(data.get("value_label_defaults")),
        )


@dataclass(frozen=True)
class LegendOptions:
    show: bool = False
    entries: tuple[LegendEntry, ...] = ()
    position: LegendPosition = LegendPosition.RIGHT
    spacing: float = 20.0
    font_size: float = 16.0
    background_color: str | None = None
    background_gradient: Gradient | None = None
    border_color: str | None = None
    text_color: str | None = None
    text_gradient: Gradient | None = None
    text_style: TextStyle | None = None
    padding: float = 8.0
    max_width: float | None = None
    wrap_text: bool = True

    @property
    def visible(self) -> bool:
        return self.show and bool(self.entries)

    @classmethod
    def from_dict(cls, raw: Any) -> LegendOptions:
        data = check_keys(raw or {}, cls, "legend")
        return cls(
            show=bool(data.get("show", False)),
            entries=tuple(LegendEntry.from_dict(e) for e in data.get("entries") or ()),
            position=parse_enum(LegendPosition, data.get("position", "right"), "legend position"),
            spacing=parse_number(data.get("spacing", 20.0), "legend.spacing"),
            font_size=parse_number(data.get("font_size", 16.0), "legend.font_size"),
            background_color=data.get("background_color"),
            background_gradient=optional_gradient(data.get("background_gradient")),
            border_color=data.get("border_color"),
            text_color=data.get("text_color"),
            text_gradient=optional_gradient(data.get("text_gradient")),
            text_style=optional_text_style(data.get("text_style")),
            padding=parse_number(data.get("padding", 8.0), "legend.padding"),
            max_width=optional_number(data.get("max_width"), "legend.max_width"),
            wrap_text=bool(data.get("wrap_text", True)),
        )


@dataclass(frozen=True)
class GridOptions:
    show: bool = False
    color: str = "#E0E0E0"
    width: float = 1.0

    @classmethod
    def from_dict(cls, raw: Any) -> GridOptions:
        data = check_keys(raw or {}, cls, "grid")
        return cls(
            show=bool(data.get("show", False)),
            color=str(data.get("color", "#E0E0E0")),
            width=parse_number(data.get("width", 1.0), "grid.width"),
        )


@dataclass(frozen=True)
class BarOptions:
    min_width: float = 20.0
    spacing: float | None = None
    group_spacing: float = 10.0
    # Accepted for option compatibility; grouped layout spaces segments by group_spacing.
    segment_spacing: float = 2.0
    line_width: float = 2.0
    dot_size: float = 8.0
    opacity: float | None = None
    shadow: Shadow | None = None
    stroke: Stroke | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> BarOptions:
        data = check_keys(raw or {}, cls, "bars")
        return cls(
            min_width=parse_number(data.get("min_width", 20.0), "bars.min_width"),
            spacing=optional_number(data.get("spacing"), "bars.spacing"),
            group_spacing=parse_number(data.get("group_spacing", 10.0), "bars.group_spacing"),
            segment_spacing=parse_number(data.get("segment_spacing", 2.0), "bars.segment_spacing"),
            line_width=parse_number(data.get("line_width", 2.0), "bars.line_width"),
            dot_size=parse_number(data.get("dot_size", 8.0), "bars.dot_size"),
            opacity=optional_number(data.get("opacity"), "bars.opacity"),
            shadow=optional_shadow(data.get("shadow")),
            stroke=optional_stroke(data.get("stroke")),
        )


@dataclass(frozen=True)
class ChartOptions:
    """Fully resolved chart configuration."""

    type: ChartType = ChartType.STANDARD
    initial_value: float = 0.0
    dimensions: Dimensions = field(default_factory=Dimensions)
    appearance: Appearance = field(default_factory=Appearance)
    x_axis: AxisOptions = field(default_factory=AxisOptions)
    y_axis: AxisOptions = field(default_factory=AxisOptions)
    labels: LabelOptions = field(default_factory=LabelOptions)
    legend: LegendOptions = field(default_factory=LegendOptions)
    grid: GridOptions = field(default_factory=GridOptions)
    bars: BarOptions = field(default_factory=BarOptions)
    axis_color: str = "#000000"
    axis_width: float = 2.0

    @property
    def baseline(self) -> float:
        return self.y_axis.baseline

    @property
    def has_axis_label(self) -> bool:
        return bool(self.x_axis.label or self.y_axis.label)


_TOP_LEVEL = {"type", "waterfall", "dimensions", "appearance", "axes", "labels", "legend", "grid", "bars"}


def _resolve_axis(own: AxisOptions, other: AxisOptions) -> AxisOptions:
    return AxisOptions(
        label=own.label,
        label_color=own.label_color or other.label_color or "#000000",
        range=own.range,
        values=own.values,
        color=own.color,
        width=own.width,
        tick_font_size=own.tick_font_size or other.tick_font_size or 12.0,
        value_spacing=own.value_spacing,
        baseline=own.baseline,
    )


def resolve_options(raw: Mapping[str, Any] | ChartOptions | None = None) -> ChartOptions:
    """Resolve a nested options mapping into a fully populated ChartOptions.

    Args:
        raw: Nested mapping with the option groups ``type``, ``waterfall``,
            ``dimensions``, ``appearance``, ``axes``, ``labels``, ``legend``,
            ``grid`` and ``bars``. ``None`` yields all defaults.

    Returns:
        Frozen ChartOptions with every default applied

    Raises:
        ChartOptionsError: On unknown groups/keys or malformed values
    """
    if isinstance(raw, ChartOptions):
        return raw
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise ChartOptionsError(f"options must be a mapping, got {type(raw).__name__}")

    unknown = sorted(set(raw) - _TOP_LEVEL)
    if unknown:
        raise ChartOptionsError(f"Unknown option group(s): {', '.join(unknown)}")

    waterfall = raw.get("waterfall") or {}
    if not isinstance(waterfall, Mapping) or set(waterfall) - {"initial_value"}:
        raise ChartOptionsError("waterfall options support only 'initial_value'")

    axes = raw.get("axes") or {}
    if not isinstance(axes, Mapping) or set(axes) - {"x", "y"}:
        raise ChartOptionsError("axes options support only 'x' and 'y'")
    x_raw = AxisOptions.from_dict(axes.get("x"), "x")
    y_raw = AxisOptions.from_dict(axes.get("y"), "y")
    appearance = Appearance.from_dict(raw.get("appearance"))

    axis_color = appearance.axis_color or x_raw.color or y_raw.color or "#000000"
    axis_width = appearance.axis_width
    if axis_width is None:
        axis_width = x_raw.width if x_raw.width is not None else y_raw.width
    if axis_width is None:
        axis_width = 2.0

    options = ChartOptions(
        type=parse_enum(ChartType, raw.get("type", "standard"), "chart type"),
        initial_value=parse_number(waterfall.get("initial_value", 0.0), "waterfall.initial_value"),
        dimensions=Dimensions.from_dict(raw.get("dimensions")),
        appearance=appearance,
        x_axis=_resolve_axis(x_raw, y_raw),
        y_axis=_resolve_axis(y_raw, x_raw),
        labels=LabelOptions.from_dict(raw.get("labels")),
        legend=LegendOptions.from_dict(raw.get("legend")),
        grid=GridOptions.from_dict(raw.get("grid")),
        bars=BarOptions.from_dict(raw.get("bars")),
        axis_color=axis_color,
        axis_width=axis_width,
    )
    logger.debug(
        "Resolved chart options",
        extra={"chart_type": options.type.value, "legend": options.legend.visible},
    )
    return options
