"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list; blank entries are dropped.
    """

    raw = _get_optional_str_env(name)
    if raw is None:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


def _resolve_path(raw: str) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else PROJECT_ROOT / path


@dataclass(frozen=True)
class DemandSettings:
    """
    Runtime settings for snapshot building and serving.
    """

    data_dir: Path | None = None
    snapshot_path: Path = PROJECT_ROOT / "demand.json"
    ingest_max_workers: int = 4
    max_logged_rejections: int = 50
    refresh_interval_minutes: float = 0.0
    cors_allow_origins: tuple[str, ...] = ("*",)

    @property
    def refresh_enabled(self) -> bool:
        return self.refresh_interval_minutes > 0


@lru_cache(maxsize=1)
def get_demand_settings() -> DemandSettings:
    """
    Return cached demand settings from environment variables.
    """

    data_dir = _get_optional_str_env("DEMAND_DATA_DIR")
    return DemandSettings(
        data_dir=_resolve_path(data_dir) if data_dir else None,
        snapshot_path=_resolve_path(_get_str_env("DEMAND_SNAPSHOT_PATH", "demand.json")),
        ingest_max_workers=max(1, _get_int_env("DEMAND_INGEST_MAX_WORKERS", 4)),
        max_logged_rejections=max(0, _get_int_env("DEMAND_MAX_LOGGED_REJECTIONS", 50)),
        refresh_interval_minutes=max(0.0, _get_float_env("DEMAND_REFRESH_INTERVAL_MINUTES", 0.0)),
        cors_allow_origins=_get_list_env("CORS_ALLOW_ORIGINS", ("*",)),
    )
