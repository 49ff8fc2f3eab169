"""Bar chart engine.

The pipeline runs options resolution, bounds validation and geometry
planning. Then it draws the axes, legend and bars, and finally composites
the text labels:

    from plotcraft.charts import create_bar_chart

    png = create_bar_chart(
        [{"label": "Q1", "x_start": 0, "x_end": 2, "value": 5}],
        {"axes": {"y": {"range": {"min": 0, "max": 10}}}},
    )
"""

from .bar_chart import create_bar_chart
from .creator import ChartCreator

__all__ = ["ChartCreator", "create_bar_chart"]
