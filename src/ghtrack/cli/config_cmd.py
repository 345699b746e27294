"""Config subcommands: get, set, list for vault settings."""

from __future__ import annotations

from typing import Optional

import typer
from pydantic import ValidationError

from ghtrack.cli._shared import FORMAT_OPTION, get_settings, get_vault_root
from ghtrack.core.schema import Settings
from ghtrack.utils.config import save_settings
from ghtrack.utils.output import error, info, mask_secret, output, success

config_app = typer.Typer(no_args_is_help=True)

# CLI key -> settings file key
_KEYS = {
    "token": "githubToken",
    "date_format": "dateFormat",
    "notice_mode": "syncNoticeMode",
    "escape_mode": "escapeMode",
    "sync_on_startup": "syncOnStartup",
    "sync_interval": "syncInterval",
}


def _check_key(key: str) -> str:
    if key not in _KEYS:
        error(f"Unknown key: {key}. Valid keys: {', '.join(sorted(_KEYS))}")
        raise typer.Exit(1)
    return _KEYS[key]


def _display(key: str, value: object) -> object:
    if key == "token":
        return mask_secret(str(value))
    return value


def _values(settings: Settings) -> dict[str, object]:
    data = settings.model_dump(mode="json", by_alias=True)
    return {key: data[alias] for key, alias in _KEYS.items()}


@config_app.command("get")
def config_get(
    key: str = typer.Argument(..., help="Configuration key"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Get a configuration value."""
    _check_key(key)
    settings = get_settings(get_vault_root())
    value = _display(key, _values(settings)[key])
    if fmt == "json":
        output({"key": key, "value": value}, fmt="json")
    elif value in ("", None):
        info(f"{key}: (not set)")
    else:
        info(f"{key}: {value}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="Value to set"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Set a configuration value."""
    alias = _check_key(key)
    root = get_vault_root()
    settings = get_settings(root)

    data = settings.model_dump(mode="json", by_alias=True)
    data[alias] = value
    try:
        updated = Settings.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        error(f"Invalid value for {key}: {value} ({first['msg']})")
        raise typer.Exit(1)

    save_settings(root, updated)
    shown = _display(key, _values(updated)[key])
    if fmt == "json":
        output({"key": key, "value": shown}, fmt="json")
    else:
        success(f"{key} = {shown}")


@config_app.command("list")
def config_list(
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List all configuration values."""
    settings = get_settings(get_vault_root())
    values = {k: _display(k, v) for k, v in _values(settings).items()}
    if fmt == "json":
        output(values, fmt="json")
    else:
        for k, v in values.items():
            info(f"{k}: {v if v not in ('', None) else '(not set)'}")
