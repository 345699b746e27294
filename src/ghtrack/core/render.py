"""Rendering of mirror files: paths, frontmatter properties, bodies and comment threads."""

from __future__ import annotations

from datetime import datetime, timezone

from ghtrack.core.frontmatter import map_to_properties
from ghtrack.core.sanitize import sanitize
from ghtrack.core.schema import (
    Comment,
    EscapeMode,
    Issue,
    ItemKind,
    PullRequest,
    RepositoryTracking,
)

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NO_DESCRIPTION = "No description found"
NO_CONTENT = "No content"
UNKNOWN_USER = "Unknown User"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# -- Paths --


def _clean_segment(segment: str) -> str:
    return segment.replace("/", "-")


def repo_folder(repo: RepositoryTracking, kind: ItemKind) -> str:
    """Vault path of the folder holding one repository's mirror files of ``kind``."""
    return f"{repo.folder_for(kind)}/{_clean_segment(repo.owner)}/{_clean_segment(repo.name)}"


def owner_folder(repo: RepositoryTracking, kind: ItemKind) -> str:
    return f"{repo.folder_for(kind)}/{_clean_segment(repo.owner)}"


def mirror_filename(kind: ItemKind, number: int | str) -> str:
    return f"{kind.file_prefix} - {number}.md"


def mirror_path(repo: RepositoryTracking, kind: ItemKind, number: int | str) -> str:
    return f"{repo_folder(repo, kind)}/{mirror_filename(kind, number)}"


def is_mirror_filename(kind: ItemKind, filename: str) -> bool:
    return filename.startswith(f"{kind.file_prefix} - ") and filename.endswith(".md")


def number_from_filename(kind: ItemKind, filename: str) -> str:
    """Recover the item number key from a mirror file name."""
    stem = filename[:-3] if filename.endswith(".md") else filename
    return stem.removeprefix(f"{kind.file_prefix} - ")


# -- Values --


def format_date(value: datetime | None, date_format: str = "") -> str:
    """Format a timestamp in local time; empty ``date_format`` uses the default."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone().strftime(date_format or DEFAULT_DATE_FORMAT)


def format_logins(logins: list[str]) -> str:
    """Render a login list as a frontmatter array: ``["alice", "bob"]``."""
    return "[" + ", ".join(f'"{login}"' for login in logins) + "]"


def _quote(value: str) -> str:
    return f'"{value}"'


# -- Documents --


def initial_properties(
    item: Issue,
    repo: RepositoryTracking,
    kind: ItemKind,
    escape_mode: EscapeMode = EscapeMode.normal,
    date_format: str = "",
) -> dict[str, str]:
    """Frontmatter of a freshly created mirror file, in file order."""
    properties = {
        "title": _quote(sanitize(item.title, escape_mode)),
        "status": _quote(item.state),
        "created": _quote(format_date(item.created_at, date_format)),
        "url": _quote(item.url),
        "opened_by": _quote(item.author or ""),
        "assignees": format_logins(item.assignees),
    }
    if kind is ItemKind.pull_request and isinstance(item, PullRequest):
        properties["requested_reviewers"] = format_logins(item.requested_reviewers)
    properties["updateMode"] = _quote(repo.update_mode_for(kind).value)
    properties["allowDelete"] = "true" if repo.allow_delete_for(kind) else "false"
    return properties


def refresh_properties(properties: dict[str, str], item: Issue) -> dict[str, str]:
    """Copy of ``properties`` with assignee (and reviewer) lists set from ``item``.

    Existing keys keep their position; user-added keys are preserved.
    """
    refreshed = dict(properties)
    refreshed["assignees"] = format_logins(item.assignees)
    if isinstance(item, PullRequest):
        refreshed["requested_reviewers"] = format_logins(item.requested_reviewers)
    return refreshed


def _created_key(comment: Comment) -> datetime:
    if comment.created_at is None:
        return _EPOCH
    if comment.created_at.tzinfo is None:
        return comment.created_at.replace(tzinfo=timezone.utc)
    return comment.created_at


def sort_comments(comments: list[Comment]) -> list[Comment]:
    return sorted(comments, key=_created_key)


def format_comments(
    comments: list[Comment],
    escape_mode: EscapeMode = EscapeMode.normal,
    date_format: str = "",
) -> str:
    """Render a comment thread, oldest first. Empty thread renders as ''."""
    if not comments:
        return ""

    parts = ["\n## Comments\n\n"]
    for comment in sort_comments(comments):
        created = format_date(comment.created_at, date_format)
        username = comment.author or UNKNOWN_USER
        if comment.is_review_comment:
            line = comment.line if comment.line is not None else "N/A"
            path = comment.path or "unknown"
            parts.append(
                f"### {username} commented on line {line} of file `{path}` ({created}):\n\n"
            )
        else:
            parts.append(f"### {username} commented ({created}):\n\n")
        parts.append(f"{sanitize(comment.body or NO_CONTENT, escape_mode)}\n\n---\n\n")
    return "".join(parts)


def render_body(
    item: Issue,
    comments: list[Comment],
    escape_mode: EscapeMode = EscapeMode.normal,
    date_format: str = "",
) -> str:
    """Title heading, description and comment thread."""
    title = sanitize(item.title, escape_mode)
    body = sanitize(item.body, escape_mode) if item.body else NO_DESCRIPTION
    return f"# {title}\n{body}\n" + format_comments(comments, escape_mode, date_format)


def render_document(properties: dict[str, str], body: str) -> str:
    return map_to_properties(properties) + "\n" + body


def render_append_block(
    item: Issue,
    comments: list[Comment],
    escape_mode: EscapeMode = EscapeMode.normal,
    date_format: str = "",
) -> str:
    """Block appended below existing content in append mode."""
    banner = f'---\n### New status: "{item.state}"\n\n'
    return banner + render_body(item, comments, escape_mode, date_format)
