"""Chart facade: dispatch by chart family and persist rendered PNGs."""

from __future__ import annotations

import base64
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from ..core.config import get_settings
from ..core.errors import ChartError, UnsupportedChartTypeError
from ..core.logging_config import get_logger
from ..core.models import ChartItem
from ..core.options import ChartOptions
from .axes import draw_axes
from .bar_chart import create_bar_chart

logger = get_logger(__name__)

ChartData = Iterable[Mapping[str, Any] | ChartItem] | None
ChartOptionsInput = Mapping[str, Any] | ChartOptions | None


class ChartCreator:
    """Render charts by family name and return them as paths and/or base64."""

    # Families known to the wider toolkit but not rendered by this package
    UNSUPPORTED = ("pie", "horizontal_bar", "line", "comparison")

    def __init__(self, output_dir: Path | None = None, scale: float | None = None):
        """Initialize chart creator.

        Args:
            output_dir: Optional directory to save chart images. Defaults to
                ``PLOTCRAFT_OUTPUT_DIR``; if unset, charts are only returned as base64.
            scale: Output resolution multiplier. Defaults to ``PLOTCRAFT_RENDER_SCALE``.
        """
        settings = get_settings()
        self.output_dir = output_dir if output_dir is not None else settings.output_dir
        self.scale = scale if scale is not None else settings.render_scale
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        self._renderers: dict[str, Callable[..., bytes]] = {"bar": create_bar_chart}

    @property
    def supported_types(self) -> list[str]:
        return sorted(self._renderers)

    def create_chart(self, chart_type: str, data: ChartData, options: ChartOptionsInput = None) -> bytes:
        """Render a chart of the given family to PNG bytes.

        Raises:
            UnsupportedChartTypeError: If the family is not rendered by this package
            ChartError: Propagated from the renderer
        """
        key = chart_type.lower().replace("-", "_")
        renderer = self._renderers.get(key)
        if renderer is None:
            reason = "not built by plotcraft" if key in self.UNSUPPORTED else "unknown chart type"
            logger.error(f"Unsupported chart type '{chart_type}'", extra={"chart_type": chart_type})
            raise UnsupportedChartTypeError(
                f"Chart type '{chart_type}' is {reason}. Supported: {', '.join(self.supported_types)}"
            )
        try:
            return renderer(data, options, scale=self.scale)
        except ChartError as e:
            logger.error(f"Failed to render {key} chart: {e}", extra={"chart_type": key})
            raise

    def create_axes(self, width: float = 800, height: float = 600, options: ChartOptionsInput = None) -> bytes:
        return draw_axes(width, height, options)

    def render(
        self, chart_type: str, data: ChartData, options: ChartOptionsInput = None, filename: str = "chart"
    ) -> dict[str, str]:
        """Render a chart and save it; see ``save_chart`` for the result keys."""
        return self.save_chart(self.create_chart(chart_type, data, options), filename)

    def save_chart(self, png: bytes, filename: str) -> dict[str, str]:
        """Save PNG bytes to file and/or encode as base64.

        Args:
            png: Encoded PNG image
            filename: Base filename (without extension)

        Returns:
            Dict with 'path' (if output_dir set) and 'base64' keys
        """
        result = {}

        if self.output_dir:
            filepath = self.output_dir / f"{filename}.png"
            try:
                filepath.write_bytes(png)
                result["path"] = str(filepath)
                logger.debug(f"Chart saved to {filepath}")
            except OSError as e:
                logger.warning(f"Failed to save chart to {filepath}: {e}")

        result["base64"] = base64.b64encode(png).decode("utf-8")
        return result
