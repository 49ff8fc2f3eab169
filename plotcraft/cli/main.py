from __future__ import annotations

import base64
from pathlib import Path
from typing import Any

import typer
import yaml

from .. import __version__
from ..charts.creator import ChartCreator
from ..core.config import get_settings
from ..core.errors import ChartError
from ..core.logging_config import get_logger, setup_logging
from . import output as cli_output

app = typer.Typer(help="plotcraft CLI")

logger = get_logger(__name__)


@app.callback()
def callback(
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs in JSON format"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write JSON logs to this file"),  # noqa: B008
) -> None:
    """Configure global CLI options."""
    setup_logging(json_output=json_logs, log_level=log_level, log_file=str(log_file) if log_file else None)
    logger.debug("CLI initialized", extra={"json_logs": json_logs, "log_level": log_level})


@app.command()
def version() -> None:
    """Print version."""
    typer.echo(__version__)


def load_chart_spec(path: Path) -> tuple[str, list[Any], dict[str, Any]]:
    """Read a YAML or JSON chart file with ``type``, ``data`` and ``options`` keys.

    Raises:
        ValueError: If the document is not a mapping or ``data`` is not a list
    """
    doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(doc, dict):
        raise ValueError(f"{path} must contain a mapping with 'data' and 'options'")
    data = doc.get("data") or []
    if not isinstance(data, list):
        raise ValueError("'data' must be a list of chart items")
    return str(doc.get("type", "bar")), data, doc.get("options") or {}


def _resolve_output(output: Path | None, default_name: str) -> Path | None:
    if output is not None:
        return output
    settings = get_settings()
    if settings.output_dir is not None:
        return settings.output_dir / f"{default_name}.png"
    return None


def _write_png(png: bytes, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(png)


def _png_size(png: bytes) -> tuple[int, int]:
    # IHDR width/height follow the 8-byte signature and 8-byte chunk header
    return int.from_bytes(png[16:20], "big"), int.from_bytes(png[20:24], "big")


@app.command()
def render(
    spec: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML/JSON chart file"),  # noqa: B008
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="PNG path (defaults to PLOTCRAFT_OUTPUT_DIR/<spec name>.png)"
    ),
    as_base64: bool = typer.Option(False, "--base64", help="Print the PNG as base64 to stdout"),
    scale: float | None = typer.Option(  # noqa: B008
        None, min=0.1, help="Resolution multiplier (defaults to PLOTCRAFT_RENDER_SCALE)"
    ),
) -> None:
    """Render a chart described by a YAML or JSON file."""
    try:
        chart_type, data, options = load_chart_spec(spec)
    except (yaml.YAMLError, OSError, ValueError) as e:
        cli_output.error(f"Could not read chart file {spec}: {e}")
        raise typer.Exit(code=1) from e

    target = _resolve_output(output, spec.stem)
    if target is None and not as_base64:
        cli_output.error("No output path. Pass --output, --base64 or set PLOTCRAFT_OUTPUT_DIR.")
        raise typer.Exit(code=1)

    try:
        png = ChartCreator(output_dir=None, scale=scale).create_chart(chart_type, data, options)
    except ChartError as e:
        logger.exception("Chart rendering failed", extra={"spec": str(spec), "chart_type": chart_type})
        cli_output.error(str(e))
        raise typer.Exit(code=1) from e

    if target is not None:
        try:
            _write_png(png, target)
        except OSError as e:
            cli_output.error(f"Failed to write {target}: {e}")
            raise typer.Exit(code=1) from e
        cli_output.success(f"Chart written to {target}")
        cli_output.chart(str(target), *_png_size(png))
    if as_base64:
        typer.echo(base64.b64encode(png).decode("utf-8"))


@app.command()
def axes(
    width: int = typer.Option(800, min=1, help="Canvas width in pixels"),
    height: int = typer.Option(600, min=1, help="Canvas height in pixels"),
    output: Path = typer.Option(..., "--output", "-o", help="PNG path"),  # noqa: B008
    background: str = typer.Option("#FFFFFF", help="Background colour"),
) -> None:
    """Render an empty pair of axes."""
    try:
        png = ChartCreator(output_dir=None).create_axes(
            width, height, {"appearance": {"background_color": background}}
        )
        _write_png(png, output)
    except (ChartError, OSError) as e:
        cli_output.error(f"Failed to render axes: {e}")
        raise typer.Exit(code=1) from e
    cli_output.success(f"Axes written to {output}")


if __name__ == "__main__":
    app()
