"""Shared CLI utilities to avoid circular imports."""

from __future__ import annotations

from pathlib import Path

import typer

from ghtrack.core.schema import Settings
from ghtrack.core.store import VaultStore
from ghtrack.utils.config import SettingsError, load_settings
from ghtrack.utils.output import error
from ghtrack.utils.paths import find_vault_root

FORMAT_OPTION = typer.Option(None, "--format", "-F", help="Output format: json or text")

# Set by the root callback from --vault / GHTRACK_VAULT
_vault_override: dict[str, Path | None] = {"path": None}


def set_vault_override(path: Path | None) -> None:
    _vault_override["path"] = path


def get_vault_override() -> Path | None:
    return _vault_override["path"]


def get_vault_root() -> Path:
    """Resolve the vault root, or exit with an error."""
    override = _vault_override["path"]
    if override is not None:
        if not override.is_dir():
            error(f"Vault directory does not exist: {override}")
            raise typer.Exit(1)
        return override.resolve()

    root = find_vault_root()
    if root is None:
        error("Not inside a vault (no .ghtrack or .obsidian found). Run `ghtrack init` first.")
        raise typer.Exit(1)
    return root


def get_settings(root: Path) -> Settings:
    try:
        return load_settings(root)
    except SettingsError as e:
        error(str(e))
        raise typer.Exit(1)


def get_store(root: Path) -> VaultStore:
    return VaultStore(root)
