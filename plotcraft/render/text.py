"""Styled text rendering: font resolution, custom fonts, shadow and outline."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from matplotlib import font_manager
from matplotlib.font_manager import FontProperties

from ..core.enums import TextAlign, TextBaseline
from ..core.logging_config import get_logger
from ..core.models import Gradient, TextStyle
from .canvas import Canvas, TextExtent, measure_text

logger = get_logger(__name__)

DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE = 16.0
DEFAULT_TEXT_COLOR = "#000000"
# Ships with matplotlib, so it is always resolvable
FALLBACK_FONT_FAMILY = "DejaVu Sans"


@lru_cache(maxsize=64)
def _family_available(family: str) -> bool:
    try:
        font_manager.findfont(FontProperties(family=family), fallback_to_default=False)
    except ValueError:
        logger.warning(f"Font family '{family}' not found, falling back to {FALLBACK_FONT_FAMILY}")
        return False
    return True


@lru_cache(maxsize=64)
def register_font(font_path: str) -> str | None:
    """Register a font file with matplotlib's font manager.

    Returns:
        Absolute path of the registered file, or None if registration failed
    """
    path = Path(font_path)
    if not path.is_absolute():
        path = Path.cwd() / path
    try:
        font_manager.fontManager.addfont(str(path))
    except (OSError, RuntimeError, ValueError) as e:
        logger.warning(f"Failed to register font {font_path}: {e}")
        return None
    logger.debug(f"Registered font {path}")
    return str(path)


def resolve_font(style: TextStyle | None = None) -> FontProperties:
    """Build FontProperties for a text style, with family and file fallbacks."""
    weight = "bold" if style is not None and style.bold else "normal"
    slant = "italic" if style is not None and style.italic else "normal"

    if style is not None and style.font_path:
        registered = register_font(style.font_path)
        if registered is not None:
            return FontProperties(fname=registered, weight=weight, style=slant)

    family = DEFAULT_FONT_FAMILY
    if style is not None:
        family = style.font_family or style.font_name or DEFAULT_FONT_FAMILY
    if not _family_available(family):
        family = FALLBACK_FONT_FAMILY
    return FontProperties(family=family, weight=weight, style=slant)


def text_size(text: str, style: TextStyle | None, font_size: float | None) -> TextExtent:
    """Measure text the way ``render_text`` would draw it."""
    size = font_size or (style.font_size if style is not None else None) or DEFAULT_FONT_SIZE
    return measure_text(text, resolve_font(style), size)


def wrap_text(text: str, max_width: float, style: TextStyle | None, font_size: float) -> list[str]:
    """Greedy word wrap; a single word wider than ``max_width`` keeps its own line."""
    words = text.split(" ")
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if text_size(candidate, style, font_size).width < max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def render_text(
    canvas: Canvas,
    text: str,
    x: float,
    y: float,
    *,
    style: TextStyle | None = None,
    font_size: float | None = None,
    color: str | None = None,
    gradient: Gradient | None = None,
    align: TextAlign = TextAlign.LEFT,
    baseline: TextBaseline = TextBaseline.ALPHABETIC,
    rotation: float = 0.0,
) -> None:
    """Draw text with optional custom font, gradient fill, drop shadow and outline.

    Args:
        canvas: Target canvas
        text: Text to draw (single line)
        x, y: Anchor position in pixels
        style: Optional font/shadow/outline styling
        font_size: Explicit size; falls back to ``style.font_size`` then 16px
        color: Solid fill colour (black when omitted)
        gradient: Gradient fill, takes precedence over ``color``
        align: Horizontal anchor
        baseline: Vertical anchor
        rotation: Degrees, counter-clockwise on screen
    """
    size = font_size or (style.font_size if style is not None else None) or DEFAULT_FONT_SIZE
    font = resolve_font(style)
    fill = color or DEFAULT_TEXT_COLOR

    if style is not None and style.shadow is not None:
        shadow = style.shadow
        canvas.draw_text(
            text,
            x + shadow.offset_x,
            y + shadow.offset_y,
            font=font,
            size=size,
            color=shadow.color,
            align=align,
            baseline=baseline,
            rotation=rotation,
            opacity=shadow.opacity,
        )

    canvas.draw_text(
        text,
        x,
        y,
        font=font,
        size=size,
        color=fill,
        gradient=gradient,
        align=align,
        baseline=baseline,
        rotation=rotation,
        outline=style.stroke if style is not None else None,
    )
