"""Console output helpers for the plotcraft CLI.

Logging Strategy:
- Use console output functions (success, error, info, warning) for user-facing messages
- Use structured logging (logger.info, logger.error, etc.) for debugging and observability
"""

from __future__ import annotations

import typer


def success(message: str, *, prefix: bool = True) -> None:
    """Display a success message in green with checkmark emoji.

    Example:
        success("Chart written to chart.png")
        # Output: ✅ Chart written to chart.png
    """
    formatted = f"✅ {message}" if prefix else message
    typer.secho(formatted, fg=typer.colors.GREEN)


def error(message: str, *, prefix: bool = True, err: bool = True) -> None:
    """Display an error message in red with cross emoji.

    Args:
        message: The error message to display
        prefix: Whether to include the cross emoji prefix (default: True)
        err: Whether to write to stderr instead of stdout (default: True)
    """
    formatted = f"❌ {message}" if prefix else message
    typer.secho(formatted, fg=typer.colors.RED, err=err)


def info(message: str, *, prefix: bool = True) -> None:
    formatted = f"ℹ️  {message}" if prefix else message
    typer.secho(formatted, fg=typer.colors.CYAN)


def warning(message: str, *, prefix: bool = True) -> None:
    formatted = f"⚠️  {message}" if prefix else message
    typer.secho(formatted, fg=typer.colors.YELLOW)


def chart(path: str, width: int, height: int) -> None:
    """Report a written chart with its pixel size.

    Example:
        chart("out/sales.png", 880, 600)
        # Output: 📊 out/sales.png (880x600)
    """
    typer.secho(f"📊 {path} ({width}x{height})", fg=typer.colors.CYAN)
