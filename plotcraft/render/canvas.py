"""Pixel-space 2D canvas on top of matplotlib's Agg renderer.

The canvas exposes canvas-style primitives (fill/stroke rect, circles,
polygons, lines, text, images) in pixel coordinates with Y growing downward.
It runs at 72 DPI so one point equals one pixel: font sizes and line widths
are given in pixels.

Artists are stacked in call order (each gets the next zorder), so the canvas
behaves like a painter's model regardless of matplotlib's per-artist-type
default z-ordering.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO

import matplotlib

# Use non-interactive backend for server environments
matplotlib.use("Agg")

from matplotlib import image as mpimg  # noqa: E402
from matplotlib import patheffects  # noqa: E402
from matplotlib.backends.backend_agg import FigureCanvasAgg, RendererAgg  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.font_manager import FontProperties  # noqa: E402
from matplotlib.lines import Line2D  # noqa: E402
from matplotlib.patches import Circle, Patch, PathPatch, Polygon, Rectangle  # noqa: E402
from matplotlib.path import Path as MplPath  # noqa: E402
from matplotlib.textpath import TextPath  # noqa: E402
from matplotlib.transforms import Affine2D  # noqa: E402

from ..core.enums import TextAlign, TextBaseline  # noqa: E402
from ..core.models import Gradient, Stroke  # noqa: E402
from .gradients import average_color, gradient_rgba, parse_color, with_alpha  # noqa: E402

DPI = 72

_VERTICAL_ALIGN = {
    TextBaseline.TOP: "top",
    TextBaseline.MIDDLE: "center",
    TextBaseline.BOTTOM: "bottom",
    TextBaseline.ALPHABETIC: "baseline",
}

Point = tuple[float, float]


@dataclass(frozen=True)
class TextExtent:
    width: float
    height: float
    descent: float


@lru_cache(maxsize=1)
def _measurement_renderer() -> RendererAgg:
    return RendererAgg(1, 1, DPI)


def measure_text(text: str, font: FontProperties, size: float) -> TextExtent:
    """Measure ``text`` in pixels on a throwaway 1x1 surface."""
    if not text:
        return TextExtent(0.0, 0.0, 0.0)
    prop = font.copy()
    prop.set_size(size)
    width, height, descent = _measurement_renderer().get_text_width_height_descent(
        text, prop, ismath=False
    )
    return TextExtent(float(width), float(height), float(descent))


def _rect_points(x: float, y: float, width: float, height: float) -> list[Point]:
    return [(x, y), (x + width, y), (x + width, y + height), (x, y + height)]


def _circle_points(cx: float, cy: float, radius: float, steps: int = 72) -> list[Point]:
    return [
        (cx + radius * math.cos(2 * math.pi * i / steps), cy + radius * math.sin(2 * math.pi * i / steps))
        for i in range(steps)
    ]


def _ring_path(outer: list[Point], inner: list[Point]) -> MplPath:
    """Closed ring between two polygons (inner wound the other way to cut a hole)."""
    vertices: list[Point] = []
    codes: list[int] = []
    for ring in (outer, list(reversed(inner))):
        if not ring:
            continue
        vertices.extend(ring + [ring[0]])
        codes.extend([MplPath.MOVETO] + [MplPath.LINETO] * (len(ring) - 1) + [MplPath.CLOSEPOLY])
    return MplPath(vertices, codes)


def _normalize(x: float, y: float, width: float, height: float) -> tuple[float, float, float, float]:
    if width < 0:
        x, width = x + width, -width
    if height < 0:
        y, height = y + height, -height
    return x, y, width, height


class Canvas:
    """Raster surface of ``width`` x ``height`` pixels."""

    def __init__(self, width: float, height: float):
        self.width = max(1, int(math.ceil(width)))
        self.height = max(1, int(math.ceil(height)))
        # Agg truncates the pixel size with int(); the nudge keeps width/DPI*DPI from landing just below it
        self.figure = Figure(
            figsize=((self.width + 1e-6) / DPI, (self.height + 1e-6) / DPI), dpi=DPI, facecolor="none"
        )
        FigureCanvasAgg(self.figure)
        ax = self.figure.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, self.width)
        ax.set_ylim(self.height, 0)
        ax.set_axis_off()
        ax.patch.set_visible(False)
        ax.set_autoscale_on(False)
        self._ax = ax
        self._z = 0

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    def _add_patch(self, patch: Patch) -> Patch:
        patch.set_zorder(self._next_z())
        self._ax.add_patch(patch)
        return patch

    def _paint_gradient(
        self,
        clip: Patch,
        gradient: Gradient,
        x: float,
        y: float,
        width: float,
        height: float,
        opacity: float | None = None,
    ) -> None:
        if width <= 0 or height <= 0:
            return
        rgba = gradient_rgba(gradient, width, height, opacity)
        image = self._ax.imshow(
            rgba,
            extent=(x, x + width, y + height, y),
            origin="upper",
            aspect="auto",
            interpolation="bilinear",
            zorder=self._next_z(),
        )
        clip.set_transform(self._ax.transData)
        image.set_clip_path(clip)

    def _fill(
        self,
        patch: Patch,
        bounds: tuple[float, float, float, float],
        color: str,
        gradient: Gradient | None,
        opacity: float | None,
    ) -> None:
        if gradient is not None:
            self._paint_gradient(patch, gradient, *bounds, opacity=opacity)
            return
        patch.set_facecolor(with_alpha(color, opacity))
        patch.set_edgecolor("none")
        patch.set_linewidth(0)
        self._add_patch(patch)

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def fill_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        color: str = "#000000",
        gradient: Gradient | None = None,
        opacity: float | None = None,
    ) -> None:
        x, y, width, height = _normalize(x, y, width, height)
        self._fill(Rectangle((x, y), width, height), (x, y, width, height), color, gradient, opacity)

    def stroke_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        color: str = "#000000",
        line_width: float = 1.0,
        gradient: Gradient | None = None,
        opacity: float | None = None,
    ) -> None:
        if line_width <= 0:
            return
        x, y, width, height = _normalize(x, y, width, height)
        if gradient is None:
            self._add_patch(
                Rectangle(
                    (x, y),
                    width,
                    height,
                    fill=False,
                    edgecolor=with_alpha(color, opacity),
                    linewidth=line_width,
                )
            )
            return
        half = line_width / 2
        outer = _rect_points(x - half, y - half, width + line_width, height + line_width)
        inner = (
            _rect_points(x + half, y + half, width - line_width, height - line_width)
            if width > line_width and height > line_width
            else []
        )
        ring = PathPatch(_ring_path(outer, inner))
        self._paint_gradient(
            ring, gradient, x - half, y - half, width + line_width, height + line_width, opacity
        )

    def fill_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        color: str = "#000000",
        gradient: Gradient | None = None,
        opacity: float | None = None,
    ) -> None:
        self._fill(
            Circle((cx, cy), radius),
            (cx - radius, cy - radius, 2 * radius, 2 * radius),
            color,
            gradient,
            opacity,
        )

    def stroke_circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        color: str = "#000000",
        line_width: float = 1.0,
        gradient: Gradient | None = None,
        opacity: float | None = None,
    ) -> None:
        if line_width <= 0:
            return
        if gradient is None:
            self._add_patch(
                Circle((cx, cy), radius, fill=False, edgecolor=with_alpha(color, opacity), linewidth=line_width)
            )
            return
        outer_r = radius + line_width / 2
        inner_r = radius - line_width / 2
        ring = PathPatch(
            _ring_path(
                _circle_points(cx, cy, outer_r),
                _circle_points(cx, cy, inner_r) if inner_r > 0 else [],
            )
        )
        self._paint_gradient(ring, gradient, cx - outer_r, cy - outer_r, 2 * outer_r, 2 * outer_r, opacity)

    def fill_polygon(self, points: list[Point], *, color: str = "#000000", opacity: float | None = None) -> None:
        self._add_patch(
            Polygon(points, closed=True, facecolor=with_alpha(color, opacity), edgecolor="none", linewidth=0)
        )

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: str = "#000000",
        line_width: float = 1.0,
        dashes: tuple[float, float] | None = None,
        cap: str = "butt",
        opacity: float | None = None,
    ) -> None:
        line = Line2D(
            [x1, x2],
            [y1, y2],
            color=with_alpha(color, opacity),
            linewidth=line_width,
            linestyle=(0, dashes) if dashes else "-",
            solid_capstyle=cap,
            dash_capstyle=cap,
            zorder=self._next_z(),
        )
        self._ax.add_line(line)

    # ------------------------------------------------------------------
    # Images and text
    # ------------------------------------------------------------------

    def draw_image_file(self, path: str, x: float, y: float, width: float, height: float) -> None:
        """Draw an image file stretched over the given rect.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not a decodable image
        """
        pixels = mpimg.imread(path)
        self._ax.imshow(
            pixels,
            extent=(x, x + width, y + height, y),
            origin="upper",
            aspect="auto",
            interpolation="antialiased",
            zorder=self._next_z(),
        )

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        font: FontProperties,
        size: float,
        color: str = "#000000",
        gradient: Gradient | None = None,
        align: TextAlign = TextAlign.LEFT,
        baseline: TextBaseline = TextBaseline.ALPHABETIC,
        rotation: float = 0.0,
        opacity: float | None = None,
        outline: Stroke | None = None,
    ) -> None:
        """Draw a single line of text anchored at (x, y).

        ``rotation`` is in degrees, counter-clockwise on screen. Gradient text
        is painted through the glyph outlines; gradient outlines are drawn in
        the gradient's average colour.
        """
        if not text:
            return
        if gradient is not None:
            self._draw_gradient_text(text, x, y, font, size, gradient, align, baseline, rotation, opacity, outline)
            return

        prop = font.copy()
        prop.set_size(size)
        artist = self._ax.text(
            x,
            y,
            text,
            fontproperties=prop,
            color=with_alpha(color, opacity),
            ha=align.value,
            va=_VERTICAL_ALIGN[baseline],
            rotation=rotation,
            rotation_mode="anchor",
            parse_math=False,
            zorder=self._next_z(),
        )
        if outline is not None and outline.visible:
            foreground = average_color(outline.gradient) if outline.gradient else parse_color(outline.color)
            artist.set_path_effects([patheffects.withStroke(linewidth=outline.width, foreground=foreground)])

    def _draw_gradient_text(
        self,
        text: str,
        x: float,
        y: float,
        font: FontProperties,
        size: float,
        gradient: Gradient,
        align: TextAlign,
        baseline: TextBaseline,
        rotation: float,
        opacity: float | None,
        outline: Stroke | None,
    ) -> None:
        # TextPath would otherwise treat paired dollar signs as mathtext
        path = TextPath((0, 0), text.replace("$", r"\$"), size=size, prop=font)
        ext = path.get_extents()
        dx = {
            TextAlign.LEFT: 0.0,
            TextAlign.CENTER: -(ext.x0 + ext.x1) / 2,
            TextAlign.RIGHT: -ext.x1,
        }[align]
        dy = {
            TextBaseline.TOP: -ext.y1,
            TextBaseline.MIDDLE: -(ext.y0 + ext.y1) / 2,
            TextBaseline.BOTTOM: -ext.y0,
            TextBaseline.ALPHABETIC: 0.0,
        }[baseline]
        # glyph space is y-up; flip into the canvas' y-down space
        transform = Affine2D().translate(dx, dy).scale(1, -1).rotate_deg(-rotation).translate(x, y)
        glyphs = transform.transform_path(path)
        bounds = glyphs.get_extents()
        self._paint_gradient(
            PathPatch(glyphs), gradient, bounds.x0, bounds.y0, bounds.width, bounds.height, opacity
        )
        if outline is not None and outline.visible:
            foreground = average_color(outline.gradient) if outline.gradient else parse_color(outline.color)
            self._add_patch(PathPatch(glyphs, fill=False, edgecolor=foreground, linewidth=outline.width))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_png(self, scale: float = 1.0) -> bytes:
        """Encode the canvas as PNG; ``scale`` multiplies the output resolution."""
        buffer = BytesIO()
        self.figure.savefig(buffer, format="png", dpi=DPI * scale, facecolor=self.figure.get_facecolor())
        return buffer.getvalue()

    def close(self) -> None:
        self.figure.clear()
