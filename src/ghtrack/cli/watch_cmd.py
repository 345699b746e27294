"""Watch command: sync on startup and then every N minutes."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Optional

import typer

from ghtrack.cli._shared import get_settings, get_vault_root
from ghtrack.cli.sync_cmd import build_engine
from ghtrack.sources.github import resolve_token
from ghtrack.sync.engine import SyncEngine
from ghtrack.utils.config import SettingsError, load_settings
from ghtrack.utils.output import error, info, warning


def _try_sync(engine: SyncEngine) -> None:
    """Run one pass. A pass already in flight makes this a no-op."""
    result = engine.sync()
    if result.status == "ok" and not result.failures:
        stats = result.stats
        info(
            f"Pass done: {stats.created} created, {stats.updated} updated, "
            f"{stats.appended} appended, {stats.deleted} deleted"
        )


def _refresh(engine: SyncEngine, root: Path) -> SyncEngine:
    """Pick up settings edits made while watching."""
    try:
        settings = load_settings(root)
    except SettingsError as e:
        warning(f"Keeping previous settings: {e}")
        return engine
    if settings == engine.settings:
        return engine
    if not resolve_token(settings.github_token):
        warning("Keeping previous settings: GitHub token is not set")
        return engine
    info("Settings changed, reloading")
    return engine.with_settings(settings)


def watch_command(
    interval: Optional[float] = typer.Option(
        None, "--interval", "-i", help="Minutes between passes (default: syncInterval setting)"
    ),
    count: int = typer.Option(0, "--count", "-n", help="Stop after N interval passes (0 = until Ctrl+C)"),
) -> None:
    """Keep the mirror current: one pass at startup, then one per interval.

    A tick that fires while the previous pass is still running is skipped.
    Press Ctrl+C to stop.
    """
    root = get_vault_root()
    settings = get_settings(root)
    if not resolve_token(settings.github_token):
        error("GitHub token is not set. Run `ghtrack config set token <token>` first.")
        raise typer.Exit(1)

    minutes = settings.sync_interval if interval is None else interval
    if minutes <= 0:
        error("Sync interval must be positive. Use --interval or `ghtrack config set sync_interval`.")
        raise typer.Exit(1)

    engine = build_engine(root, settings)
    if settings.sync_on_startup:
        _try_sync(engine)

    info(f"Watching {root} (syncing every {minutes:g} min, Ctrl+C to stop)")
    runs = 0
    workers: list[threading.Thread] = []
    try:
        while True:
            time.sleep(minutes * 60)
            engine = _refresh(engine, root)
            worker = threading.Thread(target=_try_sync, args=(engine,), daemon=True)
            worker.start()
            workers = [w for w in workers if w.is_alive()]
            workers.append(worker)
            runs += 1
            if count and runs >= count:
                break
    except KeyboardInterrupt:
        info("Stopped watching")
    # A pass still writing to the vault must finish before we exit.
    for worker in workers:
        worker.join()
