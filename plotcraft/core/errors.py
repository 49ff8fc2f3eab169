"""Exception hierarchy for chart rendering."""

from __future__ import annotations


class ChartError(Exception):
    """Base exception for plotcraft errors."""

    pass


class ChartOptionsError(ChartError, ValueError):
    """Chart data or options could not be parsed."""

    pass


class UnsupportedChartTypeError(ChartError):
    """The requested chart type is not built by this package."""

    pass


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class ChartBoundsError(ChartError, ValueError):
    """A data value lies outside an explicitly configured axis range.

    Attributes:
        axis: "x" or "y"
        item_index: Position of the offending item in the data list
        label: Label of the offending item
        value: The out-of-range value
        bounds: The (min, max) range that was violated
        segment_index: Segment position for grouped/stacked/waterfall items
        field: Name of the offending field (x_start, x_end, value)
    """

    def __init__(
        self,
        *,
        axis: str,
        item_index: int,
        label: str,
        value: float,
        bounds: tuple[float, float],
        field: str = "value",
        segment_index: int | None = None,
        waterfall: bool = False,
    ):
        self.axis = axis
        self.item_index = item_index
        self.label = label
        self.value = value
        self.bounds = bounds
        self.field = field
        self.segment_index = segment_index

        name = label or f"at index {item_index}"
        subject = "Waterfall bar" if waterfall else "Bar"
        where = f" segment {segment_index}" if segment_index is not None else ""
        lo, hi = bounds
        what = "value" if field == "value" else f"{field} value"
        message = (
            f"Bar Chart Error: Data value out of {axis.upper()}-axis bounds.\n"
            f'{subject} {item_index} "{name}"{where} has {what} {_fmt(value)}, '
            f"which exceeds the {axis.upper()}-axis range [{_fmt(lo)}, {_fmt(hi)}]."
        )
        super().__init__(message)
