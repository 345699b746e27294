"""Settings versioning and migration framework.

Provides a registry for settings migrations with decorator-based registration
and BFS path finding for multi-step migrations. Settings files written before
versioning existed carry no ``schemaVersion`` and are treated as 0.1.0.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable

SCHEMA_VERSION = "0.3.0"

MigrationFn = Callable[[dict[str, Any]], dict[str, Any]]

_registry: dict[tuple[str, str], MigrationFn] = {}

_ESCAPE_MODES = ("disabled", "normal", "strict", "veryStrict")
_NOTICE_MODES = ("minimal", "normal", "extensive", "debug")
_UPDATE_MODES = ("none", "update", "append")


def register_migration(from_version: str, to_version: str):
    """Decorator to register a migration function between two schema versions.

    Usage:
        @register_migration("0.1.0", "0.2.0")
        def migrate_01_to_02(data: dict) -> dict:
            # transform and return
            ...
    """
    def decorator(fn: MigrationFn) -> MigrationFn:
        _registry[(from_version, to_version)] = fn
        return fn
    return decorator


def get_migration_path(from_version: str, to_version: str) -> list[str] | None:
    """Find the shortest migration path between two versions using BFS.

    Returns the version sequence (including start and end), or None if no path exists.
    """
    if from_version == to_version:
        return [from_version]

    adjacency: dict[str, list[str]] = {}
    for (src, dst) in _registry:
        adjacency.setdefault(src, []).append(dst)

    queue: deque[list[str]] = deque([[from_version]])
    visited = {from_version}

    while queue:
        path = queue.popleft()
        current = path[-1]

        for neighbor in adjacency.get(current, []):
            if neighbor == to_version:
                return path + [neighbor]
            if neighbor not in visited:
                visited.add(neighbor)
                queue.append(path + [neighbor])

    return None


def migrate_settings(data: dict[str, Any], target_version: str | None = None) -> dict[str, Any]:
    """Migrate raw settings data to the target version (defaults to SCHEMA_VERSION).

    Raises ValueError if no migration path exists.
    """
    target = target_version or SCHEMA_VERSION
    current_version = data.get("schemaVersion", "0.1.0")

    if current_version == target:
        return data

    path = get_migration_path(current_version, target)
    if path is None:
        raise ValueError(
            f"No migration path from {current_version} to {target}. "
            f"Settings may be from an incompatible version."
        )

    result = dict(data)
    for i in range(len(path) - 1):
        fn = _registry[(path[i], path[i + 1])]
        result = fn(result)

    result["schemaVersion"] = target
    return result


def _add_tracked(target: list[dict[str, str]], repo: str, number: Any) -> None:
    entry = {"repo": repo, "number": str(number)}
    if entry not in target:
        target.append(entry)


@register_migration("0.1.0", "0.2.0")
def migrate_010_to_020(data: dict[str, Any]) -> dict[str, Any]:
    """Migrate 0.1.0 -> 0.2.0: manually tracked items become global lists.

    Older files kept ``manuallyTrackedIssues`` / ``manuallyTrackedPullRequests``
    as lists of numbers on each repository entry.
    """
    issues = list(data.get("manuallyTrackedIssues") or [])
    pulls = list(data.get("manuallyTrackedPullRequests") or [])

    repositories = []
    for repo in data.get("repositories") or []:
        repo = dict(repo)
        name = repo.get("repository", "")
        for number in repo.pop("manuallyTrackedIssues", None) or []:
            _add_tracked(issues, name, number)
        for number in repo.pop("manuallyTrackedPullRequests", None) or []:
            _add_tracked(pulls, name, number)
        repositories.append(repo)

    return {
        **data,
        "repositories": repositories,
        "manuallyTrackedIssues": issues,
        "manuallyTrackedPullRequests": pulls,
    }


@register_migration("0.2.0", "0.3.0")
def migrate_020_to_030(data: dict[str, Any]) -> dict[str, Any]:
    """Migrate 0.2.0 -> 0.3.0: reset invalid enum values to their defaults."""
    result = dict(data)
    if result.get("escapeMode") not in _ESCAPE_MODES:
        result["escapeMode"] = "strict"
    if result.get("syncNoticeMode") not in _NOTICE_MODES:
        result["syncNoticeMode"] = "normal"

    repositories = []
    for repo in result.get("repositories") or []:
        repo = dict(repo)
        repo["repository"] = repo.get("repository") or ""
        for key in ("issueUpdateMode", "pullRequestUpdateMode"):
            if key in repo and repo[key] not in _UPDATE_MODES:
                repo[key] = "none"
        repositories.append(repo)
    result["repositories"] = repositories
    return result

