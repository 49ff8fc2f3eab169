"""Tests for the plotcraft command line."""

from __future__ import annotations

import base64
import logging

import pytest
from typer.testing import CliRunner

from conftest import PNG_SIGNATURE, png_size
from plotcraft import __version__
from plotcraft.cli.main import app

runner = CliRunner()

CHART_YAML = """\
type: bar
data:
  - {label: Q1, x_start: 0, x_end: 1, value: 4}
  - {label: Q2, x_start: 1, x_end: 2, value: 7}
options:
  type: standard
  labels:
    title: {text: Quarterly}
"""


@pytest.fixture(autouse=True)
def reset_plotcraft_logging():
    """Drop the handlers each invocation installs on the plotcraft logger."""
    yield
    plotcraft_logger = logging.getLogger("plotcraft")
    for handler in list(plotcraft_logger.handlers):
        plotcraft_logger.removeHandler(handler)
    plotcraft_logger.propagate = True


@pytest.fixture
def chart_file(tmp_path):
    path = tmp_path / "sales.yaml"
    path.write_text(CHART_YAML)
    return path


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_render_to_output(chart_file, tmp_path):
    target = tmp_path / "out" / "sales.png"
    result = runner.invoke(app, ["render", str(chart_file), "--output", str(target)])
    assert result.exit_code == 0, result.output
    assert target.read_bytes().startswith(PNG_SIGNATURE)
    width, height = png_size(target.read_bytes())
    assert f"📊 {target} ({width}x{height})" in result.output


def test_render_base64(chart_file):
    result = runner.invoke(app, ["render", str(chart_file), "--base64"])
    assert result.exit_code == 0, result.output
    last_line = [line for line in result.stdout.splitlines() if line.strip()][-1]
    assert base64.b64decode(last_line).startswith(PNG_SIGNATURE)


def test_render_scale(chart_file, tmp_path):
    target = tmp_path / "big.png"
    result = runner.invoke(app, ["render", str(chart_file), "-o", str(target), "--scale", "2"])
    assert result.exit_code == 0, result.output
    small = tmp_path / "small.png"
    runner.invoke(app, ["render", str(chart_file), "-o", str(small)])
    assert png_size(target.read_bytes())[0] > png_size(small.read_bytes())[0]


def test_render_uses_output_dir_setting(chart_file, tmp_path, monkeypatch):
    monkeypatch.setenv("PLOTCRAFT_OUTPUT_DIR", str(tmp_path / "charts"))
    result = runner.invoke(app, ["render", str(chart_file)])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "charts" / "sales.png").exists()


def test_render_without_target(chart_file):
    result = runner.invoke(app, ["render", str(chart_file)])
    assert result.exit_code == 1
    assert "No output path" in result.output


def test_render_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("data: [unclosed\n")
    result = runner.invoke(app, ["render", str(path), "--base64"])
    assert result.exit_code == 1
    assert "Could not read chart file" in result.output


def test_render_data_not_a_list(tmp_path):
    path = tmp_path / "scalar.yaml"
    path.write_text("data: 5\n")
    result = runner.invoke(app, ["render", str(path), "--base64"])
    assert result.exit_code == 1
    assert "'data' must be a list" in result.output


def test_render_missing_file(tmp_path):
    result = runner.invoke(app, ["render", str(tmp_path / "nope.yaml"), "--base64"])
    assert result.exit_code != 0


def test_render_bounds_error(tmp_path):
    path = tmp_path / "tall.yaml"
    path.write_text(
        "data:\n"
        "  - {label: A, x_start: 0, x_end: 1, value: 15}\n"
        "options:\n"
        "  axes: {y: {range: {min: 0, max: 10}}}\n"
    )
    result = runner.invoke(app, ["render", str(path), "--base64"])
    assert result.exit_code == 1
    assert "exceeds the Y-axis range [0, 10]" in result.output


def test_render_unsupported_type(tmp_path):
    path = tmp_path / "pie.yaml"
    path.write_text("type: pie\ndata: []\n")
    result = runner.invoke(app, ["render", str(path), "--base64"])
    assert result.exit_code == 1
    assert "pie" in result.output


def test_axes_command(tmp_path):
    target = tmp_path / "axes.png"
    result = runner.invoke(app, ["axes", "--width", "320", "--height", "240", "-o", str(target)])
    assert result.exit_code == 0, result.output
    assert png_size(target.read_bytes()) == (320, 240)


def test_json_logs_to_file(chart_file, tmp_path):
    log_file = tmp_path / "logs" / "plotcraft.log"
    result = runner.invoke(
        app, ["--log-file", str(log_file), "render", str(chart_file), "-o", str(tmp_path / "c.png")]
    )
    assert result.exit_code == 0, result.output
    assert log_file.exists()
