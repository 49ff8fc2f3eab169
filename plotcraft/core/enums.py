from __future__ import annotations

from enum import Enum


class ChartType(str, Enum):
    STANDARD = "standard"
    GROUPED = "grouped"
    STACKED = "stacked"
    WATERFALL = "waterfall"
    LOLLIPOP = "lollipop"

    @property
    def uses_segments(self) -> bool:
        return self in (ChartType.GROUPED, ChartType.STACKED, ChartType.WATERFALL)


class LabelPosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    INSIDE = "inside"


class LegendPosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class GradientType(str, Enum):
    LINEAR = "linear"
    RADIAL = "radial"
    CONIC = "conic"


class GradientRepeat(str, Enum):
    NO_REPEAT = "no-repeat"
    REPEAT = "repeat"
    REFLECT = "reflect"


class LabelKind(str, Enum):
    VALUE = "value"
    BAR = "bar"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class TextBaseline(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"
    ALPHABETIC = "alphabetic"
