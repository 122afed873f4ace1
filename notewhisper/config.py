"""Persisted configuration management."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Optional

from .models import Settings

CONFIG_PATH = (Path.home() / ".notewhisper" / "config.json").expanduser()


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded, saved or is incomplete."""


def _known_keys() -> set[str]:
    return {f.name for f in fields(Settings)}


def load_config(path: Optional[Path] = None) -> Settings:
    """Load settings, merging stored values over the defaults."""

    path = path or CONFIG_PATH
    if not path.exists():
        return Settings()
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError("Configuration file must contain a JSON object.")

    known = _known_keys()
    unknown = sorted(set(payload) - known)
    if unknown:
        logging.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
    return Settings(**{k: v for k, v in payload.items() if k in known})


def save_config(settings: Settings, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {k: v for k, v in asdict(settings).items() if v is not None}
    path.write_text(json.dumps(data, indent=2))


def update_config(path: Optional[Path] = None, **kwargs: Any) -> Settings:
    settings = load_config(path)
    for key, value in kwargs.items():
        if hasattr(settings, key):
            setattr(settings, key, value)
        else:
            raise ConfigError(f"Unknown configuration key: {key}")
    save_config(settings, path)
    return settings
