"""Optional JSON settings for the batch CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Final

from loguru import logger

# Library modules stay quiet unless the CLI enables them
logger.disable("paperseg")


DEFAULT_SETTINGS_FILE: Final[str] = "paperseg.json"

DEFAULTS: Final[dict[str, Any]] = {
    "keyword_count": 5,
    "max_pages": 0,
    "cache_file": ".paperseg/cache.json",
}

_SETTINGS_CACHE: dict[str, dict[str, Any]] = {}


def load_settings(path: Path | str = DEFAULT_SETTINGS_FILE) -> dict[str, Any]:
    """
    Load settings from a JSON file over DEFAULTS (cached per path).

    Each call returns a fresh dict; callers may change it freely.

    A missing or unreadable file yields the defaults; unknown keys are ignored.
    """
    key = str(path)
    if key in _SETTINGS_CACHE:
        return dict(_SETTINGS_CACHE[key])

    settings = dict(DEFAULTS)
    p = Path(path)
    if p.exists():
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable settings file {p}: {e}")
            data = {}
        if isinstance(data, dict):
            settings.update({k: v for k, v in data.items() if k in DEFAULTS})

    _SETTINGS_CACHE[key] = settings
    return dict(settings)


def clear_settings_cache() -> None:
    _SETTINGS_CACHE.clear()
