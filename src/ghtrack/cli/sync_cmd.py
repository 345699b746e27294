"""Sync command: run one mirror pass over every tracked repository."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ghtrack.cli._shared import FORMAT_OPTION, get_settings, get_store, get_vault_root
from ghtrack.core.schema import NoticeMode, Settings
from ghtrack.sources.github import GitHubClient, resolve_token
from ghtrack.sync.engine import SyncEngine, SyncResult
from ghtrack.utils.notices import NoticeManager
from ghtrack.utils.output import error, output, output_table


def build_engine(root: Path, settings: Settings, quiet: bool = False) -> SyncEngine:
    """Wire store, client and notices for a vault."""
    notices = NoticeManager(NoticeMode.minimal if quiet else settings.notice_mode)
    client = GitHubClient(settings.github_token, notices=notices)
    return SyncEngine(settings, get_store(root), client, notices)


def report(result: SyncResult, fmt: str | None) -> None:
    if fmt == "json":
        output(result.to_dict(), fmt="json")
        return
    stats = result.stats.to_dict()
    output_table(
        [{"outcome": k, "files": str(v)} for k, v in stats.items() if v],
        columns=["outcome", "files"],
        fmt="text",
    )
    for failure in result.failures:
        error(f"{failure['repository']} ({failure['kind']}): {failure['error']}")


def sync_command(
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Mirror open issues and pull requests of all tracked repositories."""
    root = get_vault_root()
    settings = get_settings(root)
    if not resolve_token(settings.github_token):
        error("GitHub token is not set. Run `ghtrack config set token <token>` first.")
        raise typer.Exit(1)

    result = build_engine(root, settings, quiet=quiet).sync()
    report(result, fmt)
    if result.status == "failed" or result.failures:
        raise typer.Exit(1)
