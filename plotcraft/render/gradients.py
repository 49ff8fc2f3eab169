"""Colour parsing and gradient rasterisation.

Gradients are rasterised with numpy into an RGBA array covering the filled
rectangle; the canvas then paints that array clipped to the target shape.
"""

from __future__ import annotations

import math
import re

import numpy as np
from matplotlib import colors as mcolors

from ..core.enums import GradientRepeat, GradientType
from ..core.errors import ChartOptionsError
from ..core.models import Gradient

RGBA = tuple[float, float, float, float]

_CSS_RGB = re.compile(r"rgba?\(\s*([^)]*)\)", re.IGNORECASE)

# Upper bound on rasterised gradient size per side
MAX_GRADIENT_PIXELS = 4096


def parse_color(color: str) -> RGBA:
    """Parse hex, named and CSS ``rgb()``/``rgba()`` colours into an RGBA tuple."""
    text = str(color).strip()
    if text.lower() == "transparent":
        return (0.0, 0.0, 0.0, 0.0)
    match = _CSS_RGB.fullmatch(text)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        if len(parts) not in (3, 4):
            raise ChartOptionsError(f"Unrecognised color '{color}'")
        try:
            r, g, b = (min(max(float(p) / 255.0, 0.0), 1.0) for p in parts[:3])
            a = min(max(float(parts[3]), 0.0), 1.0) if len(parts) == 4 else 1.0
        except ValueError:
            raise ChartOptionsError(f"Unrecognised color '{color}'") from None
        return (r, g, b, a)
    try:
        return mcolors.to_rgba(text)
    except ValueError:
        raise ChartOptionsError(f"Unrecognised color '{color}'") from None


def with_alpha(color: str, opacity: float | None) -> RGBA:
    r, g, b, a = parse_color(color)
    if opacity is not None:
        a *= min(max(opacity, 0.0), 1.0)
    return (r, g, b, a)


def is_dark(color: str) -> bool:
    """Rough luminance test used to pick contrasting label text."""
    r, g, b, a = parse_color(color)
    if a == 0:
        return False
    return (0.299 * r + 0.587 * g + 0.114 * b) < 0.5


def average_color(gradient: Gradient) -> RGBA:
    stops = np.array([parse_color(stop.color) for stop in gradient.colors])
    return tuple(float(c) for c in stops.mean(axis=0))  # type: ignore[return-value]


def _rotate(x: float, y: float, px: float, py: float, degrees: float) -> tuple[float, float]:
    if not degrees:
        return x, y
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    dx, dy = x - px, y - py
    return px + dx * cos - dy * sin, py + dx * sin + dy * cos


def _apply_repeat(t: np.ndarray, repeat: GradientRepeat) -> np.ndarray:
    if repeat is GradientRepeat.REPEAT:
        return np.mod(t, 1.0)
    if repeat is GradientRepeat.REFLECT:
        return 1.0 - np.abs(np.mod(t, 2.0) - 1.0)
    return np.clip(t, 0.0, 1.0)


def _positions(gradient: Gradient, width: float, height: float) -> np.ndarray:
    """Gradient parameter ``t`` for every pixel centre of a width x height rect."""
    cols = max(1, min(int(math.ceil(width)), MAX_GRADIENT_PIXELS))
    rows = max(1, min(int(math.ceil(height)), MAX_GRADIENT_PIXELS))
    xs = (np.arange(cols) + 0.5) * (width / cols)
    ys = (np.arange(rows) + 0.5) * (height / rows)
    px, py = np.meshgrid(xs, ys)

    pivot_x = gradient.pivot_x if gradient.pivot_x is not None else width / 2
    pivot_y = gradient.pivot_y if gradient.pivot_y is not None else height / 2

    if gradient.type is GradientType.LINEAR:
        sx, sy = _rotate(
            gradient.start_x or 0.0, gradient.start_y or 0.0, pivot_x, pivot_y, gradient.rotate
        )
        ex, ey = _rotate(
            gradient.end_x if gradient.end_x is not None else width,
            gradient.end_y or 0.0,
            pivot_x,
            pivot_y,
            gradient.rotate,
        )
        dx, dy = ex - sx, ey - sy
        length_sq = dx * dx + dy * dy
        if length_sq == 0:
            return np.zeros_like(px)
        t = ((px - sx) * dx + (py - sy) * dy) / length_sq
        return _apply_repeat(t, gradient.repeat)

    if gradient.type is GradientType.RADIAL:
        cx = gradient.end_x if gradient.end_x is not None else width / 2
        cy = gradient.end_y if gradient.end_y is not None else height / 2
        cx, cy = _rotate(cx, cy, pivot_x, pivot_y, gradient.rotate)
        r0 = gradient.start_radius or 0.0
        r1 = gradient.end_radius if gradient.end_radius is not None else max(width, height) / 2
        if r1 == r0:
            return np.zeros_like(px)
        t = (np.hypot(px - cx, py - cy) - r0) / (r1 - r0)
        return _apply_repeat(t, gradient.repeat)

    cx = gradient.center_x if gradient.center_x is not None else width / 2
    cy = gradient.center_y if gradient.center_y is not None else height / 2
    angle = np.arctan2(py - cy, px - cx) - math.radians(gradient.start_angle + gradient.rotate)
    return np.mod(angle, 2 * math.pi) / (2 * math.pi)


def gradient_rgba(
    gradient: Gradient, width: float, height: float, opacity: float | None = None
) -> np.ndarray:
    """Rasterise ``gradient`` over a ``width`` x ``height`` rect.

    Returns:
        Array of shape (rows, cols, 4) with RGBA floats in [0, 1]; row 0 is the
        top edge of the rect
    """
    t = _positions(gradient, width, height)
    stops = np.array([stop.stop for stop in gradient.colors], dtype=float)
    colors = np.array([parse_color(stop.color) for stop in gradient.colors], dtype=float)

    rgba = np.empty(t.shape + (4,), dtype=float)
    for channel in range(4):
        rgba[..., channel] = np.interp(t, stops, colors[:, channel])
    if opacity is not None:
        rgba[..., 3] *= min(max(opacity, 0.0), 1.0)
    return rgba
