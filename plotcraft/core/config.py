from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Settings:
    output_dir: Path | None
    render_scale: float


def _read_env_file() -> dict[str, str]:
    """Load minimal .env to support PLOTCRAFT_* keys if not in the environment.

    We intentionally do not overwrite existing os.environ values.
    """
    env_path = Path.cwd() / ".env"
    env: dict[str, str] = {}
    if not env_path.exists():
        return env
    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            v = v.strip().strip('"').strip("'")
            env[k] = v
    except (OSError, UnicodeDecodeError):
        # An unreadable .env must not break rendering
        return {}
    return env


def _get_env(name: str, env_file: dict[str, str] | None = None) -> str | None:
    # Priority: process env -> .env
    val = os.getenv(name)
    if val:
        return val
    if env_file and name in env_file:
        return env_file[name]
    return None


def _parse_scale(raw: str | None) -> float:
    if not raw:
        return 1.0
    try:
        scale = float(raw)
    except ValueError:
        return 1.0
    return scale if scale > 0 else 1.0


def get_settings() -> Settings:
    env_file = _read_env_file()
    output_dir = _get_env("PLOTCRAFT_OUTPUT_DIR", env_file)
    return Settings(
        output_dir=Path(output_dir) if output_dir else None,
        render_scale=_parse_scale(_get_env("PLOTCRAFT_RENDER_SCALE", env_file)),
    )
