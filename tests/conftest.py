"""Shared fixtures for plotcraft tests."""

from __future__ import annotations

from typing import Any

import pytest

from plotcraft.core.models import parse_items
from plotcraft.core.options import resolve_options
from plotcraft.charts.layout import LayoutContext
from plotcraft.charts.sizing import plan_geometry
from plotcraft.render.canvas import Canvas

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class RecordingCanvas(Canvas):
    """Canvas that records every drawing call in paint order."""

    def __init__(self, width: float, height: float):
        super().__init__(width, height)
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def fill_rect(self, x, y, width, height, **kwargs):
        self.calls.append(("fill_rect", (x, y, width, height), kwargs))
        super().fill_rect(x, y, width, height, **kwargs)

    def stroke_rect(self, x, y, width, height, **kwargs):
        self.calls.append(("stroke_rect", (x, y, width, height), kwargs))
        super().stroke_rect(x, y, width, height, **kwargs)

    def fill_circle(self, cx, cy, radius, **kwargs):
        self.calls.append(("fill_circle", (cx, cy, radius), kwargs))
        super().fill_circle(cx, cy, radius, **kwargs)

    def fill_polygon(self, points, **kwargs):
        self.calls.append(("fill_polygon", (points,), kwargs))
        super().fill_polygon(points, **kwargs)

    def line(self, x1, y1, x2, y2, **kwargs):
        self.calls.append(("line", (x1, y1, x2, y2), kwargs))
        super().line(x1, y1, x2, y2, **kwargs)

    def draw_text(self, text, x, y, **kwargs):
        self.calls.append(("draw_text", (text, x, y), kwargs))
        super().draw_text(text, x, y, **kwargs)

    def texts(self) -> list[str]:
        return [args[0] for name, args, _ in self.calls if name == "draw_text"]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep PLOTCRAFT_* settings and any local .env out of tests."""
    monkeypatch.delenv("PLOTCRAFT_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("PLOTCRAFT_RENDER_SCALE", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def recording_canvas():
    """Factory fixture collecting every RecordingCanvas it creates."""
    created: list[RecordingCanvas] = []

    def factory(width: float, height: float) -> RecordingCanvas:
        canvas = RecordingCanvas(width, height)
        created.append(canvas)
        return canvas

    factory.created = created  # type: ignore[attr-defined]
    return factory


def build_context(data: list[dict[str, Any]], options: dict[str, Any] | None = None) -> LayoutContext:
    """Parse data and options and plan geometry, as a render would."""
    items = parse_items(data)
    resolved = resolve_options(options)
    return LayoutContext.build(items, resolved, plan_geometry(items, resolved))


def png_size(png: bytes) -> tuple[int, int]:
    return int.from_bytes(png[16:20], "big"), int.from_bytes(png[20:24], "big")
