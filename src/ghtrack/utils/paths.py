"""Path utilities for locating the vault and its settings folder."""

from __future__ import annotations

from pathlib import Path

SETTINGS_DIR = ".ghtrack"

# Marker folders that identify a vault root, checked in order
_VAULT_MARKERS = (SETTINGS_DIR, ".obsidian")


def find_vault_root(start: Path | None = None) -> Path | None:
    """Walk up from start to find a directory containing .ghtrack/ or .obsidian/."""
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        for marker in _VAULT_MARKERS:
            if (parent / marker).is_dir():
                return parent
    return None


def settings_dir(vault_root: Path) -> Path:
    """Return the .ghtrack/ path for a vault."""
    return vault_root / SETTINGS_DIR
