"""Repo subcommands: add, rm, list, show, set, available."""

from __future__ import annotations

from typing import Optional

import typer
from pydantic import ValidationError

from ghtrack.cli._shared import FORMAT_OPTION, get_settings, get_vault_root
from ghtrack.core.schema import RepositoryTracking, UpdateMode
from ghtrack.sources.github import GitHubClient, MissingCredentialError, detect_repo, resolve_token
from ghtrack.utils.config import save_settings
from ghtrack.utils.notices import NoticeManager
from ghtrack.utils.output import error, info, output, output_table, success

repo_app = typer.Typer(no_args_is_help=True)

# Fields holding a list of strings, given on the command line as "a,b,c"
_LIST_FIELDS = {"issue_label_match", "pull_request_label_match"}


def _settable_fields() -> dict[str, str]:
    """kebab-case option name -> model field name."""
    return {
        name.replace("_", "-"): name
        for name in RepositoryTracking.model_fields
        if name != "repository"
    }


def _check_repository(repository: str) -> str:
    owner, _, name = repository.partition("/")
    if not owner.strip() or not name.strip() or "/" in name:
        error(f"Invalid repository: {repository}. Use owner/name.")
        raise typer.Exit(1)
    return f"{owner.strip()}/{name.strip()}"


def _row(repo: RepositoryTracking) -> dict[str, str]:
    return {
        "repository": repo.repository,
        "issues": f"{repo.issue_folder} ({repo.issue_update_mode.value})" if repo.track_issues else "-",
        "pull_requests": (
            f"{repo.pull_request_folder} ({repo.pull_request_update_mode.value})"
            if repo.track_pull_requests
            else "-"
        ),
    }


@repo_app.command("add")
def repo_add(
    repository: Optional[str] = typer.Argument(None, help="owner/name (default: detected from git remote)"),
    issues: bool = typer.Option(True, "--issues/--no-issues", help="Track open issues"),
    pull_requests: bool = typer.Option(True, "--pull-requests/--no-pull-requests", help="Track open pull requests"),
    issue_folder: str = typer.Option("GitHub Issues", "--issue-folder", help="Vault folder for issues"),
    pr_folder: str = typer.Option("GitHub Pull Requests", "--pr-folder", help="Vault folder for pull requests"),
    issue_update_mode: UpdateMode = typer.Option(UpdateMode.none, "--issue-update-mode"),
    pr_update_mode: UpdateMode = typer.Option(UpdateMode.none, "--pr-update-mode"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Start tracking a repository."""
    if repository is None:
        repository = detect_repo()
        if repository is None:
            error("No repository given and none detected from git remotes.")
            raise typer.Exit(1)
    repository = _check_repository(repository)

    root = get_vault_root()
    settings = get_settings(root)
    if settings.get_repository(repository) is not None:
        error(f"Repository already tracked: {repository}")
        raise typer.Exit(1)

    repo = RepositoryTracking(
        repository=repository,
        track_issues=issues,
        issue_folder=issue_folder,
        issue_update_mode=issue_update_mode,
        track_pull_requests=pull_requests,
        pull_request_folder=pr_folder,
        pull_request_update_mode=pr_update_mode,
    )
    save_settings(root, settings.with_repository(repo))
    if fmt == "json":
        output(repo, fmt="json")
    else:
        success(f"Tracking {repository}")


@repo_app.command("rm")
def repo_rm(
    repository: str = typer.Argument(..., help="owner/name"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Stop tracking a repository. Existing mirror files are left in place."""
    root = get_vault_root()
    settings = get_settings(root)
    if settings.get_repository(repository) is None:
        error(f"Repository not tracked: {repository}")
        raise typer.Exit(1)

    save_settings(root, settings.without_repository(repository))
    if fmt == "json":
        output({"repository": repository, "removed": True}, fmt="json")
    else:
        success(f"Removed {repository}")


@repo_app.command("list")
def repo_list(
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List tracked repositories."""
    settings = get_settings(get_vault_root())
    if not settings.repositories:
        if fmt == "json":
            output([], fmt="json")
        else:
            info("No repositories tracked")
        return
    output_table(
        [_row(r) for r in settings.repositories],
        columns=["repository", "issues", "pull_requests"],
        fmt=fmt,
    )


@repo_app.command("show")
def repo_show(
    repository: str = typer.Argument(..., help="owner/name"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Show the full tracking configuration of a repository."""
    settings = get_settings(get_vault_root())
    repo = settings.get_repository(repository)
    if repo is None:
        error(f"Repository not tracked: {repository}")
        raise typer.Exit(1)
    output(repo, fmt=fmt)


@repo_app.command("set")
def repo_set(
    repository: str = typer.Argument(..., help="owner/name"),
    field: str = typer.Argument(..., help="Setting name, e.g. issue-update-mode"),
    value: str = typer.Argument(..., help="New value (comma-separated for label lists)"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Change one tracking setting of a repository."""
    fields = _settable_fields()
    name = fields.get(field)
    if name is None:
        error(f"Unknown field: {field}. Valid fields: {', '.join(sorted(fields))}")
        raise typer.Exit(1)

    root = get_vault_root()
    settings = get_settings(root)
    repo = settings.get_repository(repository)
    if repo is None:
        error(f"Repository not tracked: {repository}")
        raise typer.Exit(1)

    parsed: object = value
    if name in _LIST_FIELDS:
        parsed = [part.strip() for part in value.split(",") if part.strip()]

    data = repo.model_dump()
    data[name] = parsed
    try:
        updated = RepositoryTracking.model_validate(data)
    except ValidationError as e:
        error(f"Invalid value for {field}: {value} ({e.errors()[0]['msg']})")
        raise typer.Exit(1)

    save_settings(root, settings.with_repository(updated))
    shown = getattr(updated, name)
    if fmt == "json":
        output({"repository": repo.repository, "field": field, "value": shown}, fmt="json")
    else:
        success(f"{repo.repository}: {field} = {getattr(shown, 'value', shown)}")


@repo_app.command("available")
def repo_available(
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List repositories the token can see, marking the tracked ones."""
    settings = get_settings(get_vault_root())
    if not resolve_token(settings.github_token):
        error("GitHub token is not set. Run `ghtrack config set token <token>` first.")
        raise typer.Exit(1)

    client = GitHubClient(settings.github_token, notices=NoticeManager(settings.notice_mode))
    try:
        names = client.list_available_repositories()
    except MissingCredentialError as e:
        error(str(e))
        raise typer.Exit(1)

    rows = [
        {"repository": n, "tracked": "yes" if settings.get_repository(n) is not None else ""}
        for n in names
    ]
    output_table(rows, columns=["repository", "tracked"], fmt=fmt)
