"""Typer app: top-level command groups and root commands (init, status)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ghtrack.cli._shared import (
    FORMAT_OPTION,
    get_settings,
    get_store,
    get_vault_override,
    get_vault_root,
    set_vault_override,
)
from ghtrack.core.render import repo_folder
from ghtrack.core.schema import ItemKind, Settings
from ghtrack.sources.github import resolve_token
from ghtrack.utils.config import save_settings, settings_path
from ghtrack.utils.output import error, output, output_table, success

app = typer.Typer(
    name="ghtrack",
    help="gh-tracker: mirror GitHub issues and pull requests into a markdown vault.",
    no_args_is_help=True,
)


@app.callback()
def root(
    vault: Optional[Path] = typer.Option(
        None, "--vault", envvar="GHTRACK_VAULT", help="Vault directory (default: discovered from cwd)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Mirror GitHub issues and pull requests into a markdown vault."""
    set_vault_override(vault)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def init(
    token: str = typer.Option("", "--token", help="GitHub personal access token"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Create .ghtrack/settings.json in the vault (current directory by default)."""
    root_dir = (get_vault_override() or Path.cwd()).resolve()
    path = settings_path(root_dir)
    if path.exists():
        error(f"Vault already initialized: {path}")
        raise typer.Exit(1)

    settings = Settings(github_token=token)
    save_settings(root_dir, settings)
    if fmt == "json":
        output({"vault": str(root_dir), "settings": str(path)}, fmt="json")
    else:
        success(f"Initialized gh-tracker vault at {root_dir}")


@app.command()
def status(fmt: Optional[str] = FORMAT_OPTION) -> None:
    """Show settings summary and mirror file counts."""
    root_dir = get_vault_root()
    settings = get_settings(root_dir)
    store = get_store(root_dir)

    rows = []
    for repo in settings.repositories:
        row = {"repository": repo.repository}
        for kind in ItemKind:
            if not repo.is_valid:
                row[kind.value] = "-"
                continue
            count = len(store.list_files(f"{repo_folder(repo, kind)}/"))
            row[kind.value] = f"{count}" + ("" if repo.tracks(kind) else " (off)")
        rows.append(row)

    if fmt == "json":
        output(
            {
                "vault": str(root_dir),
                "token_set": bool(resolve_token(settings.github_token)),
                "notice_mode": settings.notice_mode.value,
                "escape_mode": settings.escape_mode.value,
                "sync_interval": settings.sync_interval,
                "repositories": rows,
            },
            fmt="json",
        )
        return

    from rich.panel import Panel
    from ghtrack.utils.output import console

    console.print(Panel(f"[bold]{root_dir}[/bold]", title="gh-tracker"))
    console.print(f"  Token: {'set' if resolve_token(settings.github_token) else '[red]not set[/red]'}")
    console.print(f"  Notice mode: {settings.notice_mode.value}")
    console.print(f"  Escape mode: {settings.escape_mode.value}")
    console.print(f"  Sync interval: {settings.sync_interval or 'off'}")
    if rows:
        output_table(rows, columns=["repository", "issue", "pull_request"], fmt="text")
    else:
        console.print("  No repositories tracked. Use `ghtrack repo add owner/name`.")


# Register subcommand groups
from ghtrack.cli.config_cmd import config_app
from ghtrack.cli.repo_cmd import repo_app
from ghtrack.cli.sync_cmd import sync_command
from ghtrack.cli.watch_cmd import watch_command

app.add_typer(config_app, name="config", help="Manage vault settings")
app.add_typer(repo_app, name="repo", help="Manage tracked repositories")
app.command("sync")(sync_command)
app.command("watch")(watch_command)
