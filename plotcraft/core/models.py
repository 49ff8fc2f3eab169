"""Immutable chart inputs: items, segments and the styling records they carry.

Every record can be built from a plain mapping (YAML/JSON input) through its
``from_dict`` classmethod. Keys are snake_case; unknown keys are rejected so a
misspelt option fails loudly instead of silently falling back to a default.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, TypeVar

from .enums import GradientRepeat, GradientType, LabelPosition
from .errors import ChartOptionsError

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: type[E], raw: Any, field_name: str) -> E:
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)  # type: ignore[attr-defined]
        raise ChartOptionsError(
            f"Invalid {field_name} '{raw}'. Expected one of: {choices}"
        ) from None


def parse_number(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ChartOptionsError(f"{field_name} must be a number, got {raw!r}")
    return float(raw)


def optional_number(raw: Any, field_name: str) -> float | None:
    return None if raw is None else parse_number(raw, field_name)


def check_keys(raw: Any, cls: type, context: str) -> Mapping[str, Any]:
    """Ensure ``raw`` is a mapping whose keys are fields of ``cls``."""
    if not isinstance(raw, Mapping):
        raise ChartOptionsError(f"{context} must be a mapping, got {type(raw).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ChartOptionsError(f"Unknown {context} option(s): {', '.join(unknown)}")
    return raw


@dataclass(frozen=True)
class ColorStop:
    stop: float
    color: str


@dataclass(frozen=True)
class Gradient:
    """Gradient fill with geometry relative to the filled rectangle.

    ``None`` geometry fields take the type's default when the gradient is
    painted: linear runs left to right across the rect, radial and conic are
    centred on it.
    """

    type: GradientType
    colors: tuple[ColorStop, ...]
    start_x: float | None = None
    start_y: float | None = None
    end_x: float | None = None
    end_y: float | None = None
    start_radius: float | None = None
    end_radius: float | None = None
    center_x: float | None = None
    center_y: float | None = None
    start_angle: float = 0.0
    rotate: float = 0.0
    pivot_x: float | None = None
    pivot_y: float | None = None
    repeat: GradientRepeat = GradientRepeat.NO_REPEAT

    @classmethod
    def from_dict(cls, raw: Any) -> Gradient:
        if isinstance(raw, Gradient):
            return raw
        data = check_keys(raw, cls, "gradient")
        stops = data.get("colors") or []
        if not stops:
            raise ChartOptionsError("gradient requires at least one color stop")
        colors = []
        for stop in stops:
            if not isinstance(stop, Mapping) or "color" not in stop:
                raise ChartOptionsError(f"Invalid gradient color stop: {stop!r}")
            colors.append(
                ColorStop(
                    stop=parse_number(stop.get("stop", 0.0), "gradient stop"),
                    color=str(stop["color"]),
                )
            )
        numeric = {
            name: optional_number(data.get(name), f"gradient.{name}")
            for name in (
                "start_x", "start_y", "end_x", "end_y", "start_radius",
                "end_radius", "center_x", "center_y", "pivot_x", "pivot_y",
            )
        }
        return cls(
            type=parse_enum(GradientType, data.get("type", "linear"), "gradient type"),
            colors=tuple(sorted(colors, key=lambda c: c.stop)),
            start_angle=parse_number(data.get("start_angle", 0.0), "gradient.start_angle"),
            rotate=parse_number(data.get("rotate", 0.0), "gradient.rotate"),
            repeat=parse_enum(GradientRepeat, data.get("repeat", "no-repeat"), "gradient repeat"),
            **numeric,
        )


def optional_gradient(raw: Any) -> Gradient | None:
    return None if raw is None else Gradient.from_dict(raw)


@dataclass(frozen=True)
class Shadow:
    color: str = "rgba(0,0,0,0.3)"
    offset_x: float = 2.0
    offset_y: float = 2.0
    blur: float = 4.0
    opacity: float | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> Shadow:
        if isinstance(raw, Shadow):
            return raw
        data = check_keys(raw, cls, "shadow")
        defaults = cls()
        return cls(
            color=str(data.get("color", defaults.color)),
            offset_x=parse_number(data.get("offset_x", defaults.offset_x), "shadow.offset_x"),
            offset_y=parse_number(data.get("offset_y", defaults.offset_y), "shadow.offset_y"),
            blur=parse_number(data.get("blur", defaults.blur), "shadow.blur"),
            opacity=optional_number(data.get("opacity"), "shadow.opacity"),
        )


def optional_shadow(raw: Any) -> Shadow | None:
    return None if raw is None else Shadow.from_dict(raw)


@dataclass(frozen=True)
class Stroke:
    color: str = "#000000"
    width: float = 1.0
    gradient: Gradient | None = None

    @property
    def visible(self) -> bool:
        return self.width > 0

    @classmethod
    def from_dict(cls, raw: Any) -> Stroke:
        if isinstance(raw, Stroke):
            return raw
        data = check_keys(raw, cls, "stroke")
        return cls(
            color=str(data.get("color", "#000000")),
            width=parse_number(data.get("width", 1.0), "stroke.width"),
            gradient=optional_gradient(data.get("gradient")),
        )


def optional_stroke(raw: Any) -> Stroke | None:
    return None if raw is None else Stroke.from_dict(raw)


@dataclass(frozen=True)
class TextStyle:
    font_path: str | None = None
    font_name: str | None = None
    font_family: str | None = None
    font_size: float | None = None
    bold: bool = False
    italic: bool = False
    shadow: Shadow | None = None
    stroke: Stroke | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> TextStyle:
        if isinstance(raw, TextStyle):
            return raw
        data = check_keys(raw, cls, "text_style")
        return cls(
            font_path=data.get("font_path"),
            font_name=data.get("font_name"),
            font_family=data.get("font_family"),
            font_size=optional_number(data.get("font_size"), "text_style.font_size"),
            bold=bool(data.get("bold", False)),
            italic=bool(data.get("italic", False)),
            shadow=optional_shadow(data.get("shadow")),
            stroke=optional_stroke(data.get("stroke")),
        )


def optional_text_style(raw: Any) -> TextStyle | None:
    return None if raw is None else TextStyle.from_dict(raw)


@dataclass(frozen=True)
class Segment:
    """One sub-value of a grouped, stacked or waterfall item."""

    value: float
    color: str | None = None
    gradient: Gradient | None = None
    label: str | None = None
    value_color: str | None = None
    show_value: bool | None = None
    opacity: float | None = None
    shadow: Shadow | None = None
    stroke: Stroke | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> Segment:
        if isinstance(raw, Segment):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cls(value=float(raw))
        data = check_keys(raw, cls, "segment")
        if "value" not in data:
            raise ChartOptionsError("segment requires a 'value'")
        return cls(
            value=parse_number(data["value"], "segment.value"),
            color=data.get("color"),
            gradient=optional_gradient(data.get("gradient")),
            label=data.get("label"),
            value_color=data.get("value_color"),
            show_value=data.get("show_value"),
            opacity=optional_number(data.get("opacity"), "segment.opacity"),
            shadow=optional_shadow(data.get("shadow")),
            stroke=optional_stroke(data.get("stroke")),
        )


@dataclass(frozen=True)
class ChartItem:
    """One category of a bar chart, spanning ``x_start..x_end`` in domain space."""

    label: str
    x_start: float
    x_end: float
    value: float | None = None
    segments: tuple[Segment, ...] = ()
    color: str | None = None
    gradient: Gradient | None = None
    label_color: str | None = None
    label_position: LabelPosition | None = None
    label_style: TextStyle | None = None
    value_color: str | None = None
    value_style: TextStyle | None = None
    show_value: bool | None = None
    opacity: float | None = None
    shadow: Shadow | None = None
    stroke: Stroke | None = None

    @property
    def total(self) -> float:
        """Sum of segment values, or the plain value for single-value items."""
        if self.segments:
            return sum(seg.value for seg in self.segments)
        return self.value if self.value is not None else 0.0

    def effective_segments(self) -> tuple[Segment, ...]:
        """Segments for grouped/stacked/waterfall layout.

        A value-only item behaves as a single segment carrying the item's own
        styling.
        """
        if self.segments:
            return self.segments
        if self.value is None:
            return ()
        return (Segment(value=self.value, show_value=self.show_value, value_color=self.value_color),)

    @classmethod
    def from_dict(cls, raw: Any) -> ChartItem:
        if isinstance(raw, ChartItem):
            return raw
        data = check_keys(raw, cls, "chart item")
        for required in ("label", "x_start", "x_end"):
            if required not in data:
                raise ChartOptionsError(f"chart item requires '{required}'")
        position = data.get("label_position")
        return cls(
            label=str(data["label"]),
            x_start=parse_number(data["x_start"], "x_start"),
            x_end=parse_number(data["x_end"], "x_end"),
            value=optional_number(data.get("value"), "value"),
            segments=tuple(Segment.from_dict(s) for s in data.get("segments") or ()),
            color=data.get("color"),
            gradient=optional_gradient(data.get("gradient")),
            label_color=data.get("label_color"),
            label_position=(
                parse_enum(LabelPosition, position, "label_position") if position is not None else None
            ),
            label_style=optional_text_style(data.get("label_style")),
            value_color=data.get("value_color"),
            value_style=optional_text_style(data.get("value_style")),
            show_value=data.get("show_value"),
            opacity=optional_number(data.get("opacity"), "opacity"),
            shadow=optional_shadow(data.get("shadow")),
            stroke=optional_stroke(data.get("stroke")),
        )


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str | None = None
    gradient: Gradient | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> LegendEntry:
        if isinstance(raw, LegendEntry):
            return raw
        data = check_keys(raw, cls, "legend entry")
        if "label" not in data:
            raise ChartOptionsError("legend entry requires a 'label'")
        return cls(
            label=str(data["label"]),
            color=data.get("color"),
            gradient=optional_gradient(data.get("gradient")),
        )


def parse_items(data: Any) -> list[ChartItem]:
    """Convert caller data (mappings or ChartItem instances) into ChartItems."""
    if data is None:
        return []
    if isinstance(data, (str, bytes, Mapping)):
        raise ChartOptionsError("chart data must be a list of items")
    return [ChartItem.from_dict(item) for item in data]
