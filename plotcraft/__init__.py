"""plotcraft: bar chart layout and rendering on matplotlib's Agg backend."""

__version__ = "0.1.0"

from .charts.axes import draw_axes  # noqa: E402
from .charts.bar_chart import create_bar_chart  # noqa: E402
from .charts.creator import ChartCreator  # noqa: E402
from .core.errors import (  # noqa: E402
    ChartBoundsError,
    ChartError,
    ChartOptionsError,
    UnsupportedChartTypeError,
)
from .core.options import resolve_options  # noqa: E402

__all__ = [
    "ChartBoundsError",
    "ChartCreator",
    "ChartError",
    "ChartOptionsError",
    "UnsupportedChartTypeError",
    "__version__",
    "create_bar_chart",
    "draw_axes",
    "resolve_options",
]
