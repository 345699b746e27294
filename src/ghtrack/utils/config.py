"""Vault settings: load, migrate and save ``.ghtrack/settings.json``."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from ghtrack.core.migrations import migrate_settings
from ghtrack.core.schema import Settings
from ghtrack.utils.paths import settings_dir


class SettingsError(Exception):
    pass


def settings_path(vault_root: Path) -> Path:
    return settings_dir(vault_root) / "settings.json"


def load_settings(vault_root: Path) -> Settings:
    """Read settings for a vault. A missing file yields default settings."""
    path = settings_path(vault_root)
    if not path.exists():
        return Settings()

    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        raise SettingsError(f"Cannot read {path}: {e}")
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must hold a JSON object")

    try:
        return Settings.model_validate(migrate_settings(data))
    except (ValidationError, ValueError) as e:
        raise SettingsError(f"Invalid settings in {path}: {e}")


def save_settings(vault_root: Path, settings: Settings) -> None:
    path = settings_path(vault_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2, by_alias=True) + "\n")
