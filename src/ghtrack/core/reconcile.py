"""Reconciler: diff remote issues/PRs against their mirror files in the vault.

For one repository and one item kind a pass runs in a fixed order:

1. fetch the open items and apply the repository filters (the current set),
2. delete mirror files whose item left the current set, when allowed,
3. create missing mirror files and refresh existing ones per update mode.

Per-file frontmatter (``updateMode``, ``allowDelete``) overrides the
repository defaults for that file.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from ghtrack.core.filters import filter_issues, filter_pull_requests
from ghtrack.core.frontmatter import extract_properties
from ghtrack.core.render import (
    initial_properties,
    is_mirror_filename,
    mirror_path,
    number_from_filename,
    owner_folder,
    refresh_properties,
    render_append_block,
    render_body,
    render_document,
    repo_folder,
)
from ghtrack.core.schema import (
    Comment,
    Issue,
    ItemKind,
    RepositoryTracking,
    Settings,
    UpdateMode,
)
from ghtrack.core.store import StoreError, VaultStore
from ghtrack.sources.github import GitHubClient
from ghtrack.utils.notices import NoticeManager


@dataclass
class SyncStats:
    """Per-action counters for one or more reconcile passes."""

    created: int = 0
    updated: int = 0
    appended: int = 0
    unchanged: int = 0
    skipped: int = 0
    deleted: int = 0

    def add(self, other: SyncStats) -> None:
        for key, value in asdict(other).items():
            setattr(self, key, getattr(self, key) + value)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _unquote(value: str) -> str:
    return value.strip().strip("\"'").strip().lower()


class Reconciler:
    """Applies one repository's remote state to its mirror files."""

    def __init__(
        self,
        settings: Settings,
        store: VaultStore,
        client: GitHubClient,
        notices: NoticeManager,
    ) -> None:
        self.settings = settings
        self.store = store
        self.client = client
        self.notices = notices

    # -- Entry points --

    def reconcile(self, repo: RepositoryTracking, kind: ItemKind) -> SyncStats:
        """Fetch, filter and apply one repository's items of ``kind``."""
        if not repo.is_valid:
            return SyncStats()

        items = self.fetch_current(repo, kind)
        return self.apply(repo, kind, items)

    def fetch_current(self, repo: RepositoryTracking, kind: ItemKind) -> list[Issue]:
        """Open items of ``kind`` that pass the repository filters."""
        self.notices.debug(f"Fetching {kind.label}s for {repo.repository}")
        if kind is ItemKind.issue:
            fetched: list = self.client.list_open_issues(repo.owner, repo.name)
            current: list = filter_issues(repo, fetched)
        else:
            fetched = self.client.list_open_pull_requests(repo.owner, repo.name)
            current = filter_pull_requests(repo, fetched)
        self.notices.debug(
            f"Found {len(fetched)} {kind.label}s, {len(current)} match filters"
        )
        return current

    def apply(self, repo: RepositoryTracking, kind: ItemKind, items: list[Issue]) -> SyncStats:
        """Delete stale mirror files, then create or update one file per item."""
        stats = SyncStats()
        current = {str(item.number) for item in items}
        self.delete_stale(repo, kind, current, stats)
        for item in items:
            self.create_or_update(repo, kind, item, stats)
        self.notices.debug(f"Synced {len(items)} {kind.label}s for {repo.repository}")
        return stats

    # -- Delete pass --

    def delete_stale(
        self,
        repo: RepositoryTracking,
        kind: ItemKind,
        current: set[str],
        stats: SyncStats | None = None,
    ) -> None:
        """Trash mirror files whose item number is not in ``current``."""
        stats = stats if stats is not None else SyncStats()
        folder = repo_folder(repo, kind)
        if not self.store.is_folder(folder):
            return

        for entry in self.store.list_files(f"{folder}/"):
            if not is_mirror_filename(kind, entry.name):
                continue
            key = number_from_filename(kind, entry.name)
            if key in current:
                continue
            properties = extract_properties(self.store.read(entry.path))
            if self._effective_allow_delete(properties, repo.allow_delete_for(kind)):
                self.store.delete(entry.path)
                stats.deleted += 1
                self.notices.info(
                    f"Deleted {kind.label} {key} as it no longer exists in {repo.repository}"
                )

    # -- Create/update pass --

    def create_or_update(
        self,
        repo: RepositoryTracking,
        kind: ItemKind,
        item: Issue,
        stats: SyncStats | None = None,
    ) -> None:
        stats = stats if stats is not None else SyncStats()
        escape_mode = self.settings.escape_mode
        date_format = self.settings.date_format

        self.ensure_folder(repo.folder_for(kind))
        self.ensure_folder(owner_folder(repo, kind))
        self.ensure_folder(repo_folder(repo, kind))
        path = mirror_path(repo, kind, item.number)

        if not self.store.exists(path):
            comments = self._fetch_comments(repo, kind, item.number)
            properties = initial_properties(item, repo, kind, escape_mode, date_format)
            body = render_body(item, comments, escape_mode, date_format)
            self.store.create(path, render_document(properties, body))
            stats.created += 1
            self.notices.debug(f"Created {kind.label} file for {item.number}")
            return

        existing = self.store.read(path)
        properties = refresh_properties(extract_properties(existing), item)
        mode = self._effective_update_mode(properties, repo.update_mode_for(kind), kind, item)

        if mode == UpdateMode.update.value:
            comments = self._fetch_comments(repo, kind, item.number)
            body = render_body(item, comments, escape_mode, date_format)
            content = render_document(properties, body)
            if content == existing:
                stats.unchanged += 1
                self.notices.debug(f"{kind.label.capitalize()} {item.number} is up to date")
                return
            self.store.overwrite(path, content)
            stats.updated += 1
            self.notices.debug(f"Updated {kind.label} {item.number}")
        elif mode == UpdateMode.append.value:
            comments = self._fetch_comments(repo, kind, item.number)
            block = render_append_block(item, comments, escape_mode, date_format)
            self.store.overwrite(path, existing + "\n\n" + block)
            stats.appended += 1
            self.notices.debug(f"Appended content to {kind.label} {item.number}")
        else:
            stats.skipped += 1
            self.notices.debug(f"Skipped update for {kind.label} {item.number} (mode: {mode})")

    def ensure_folder(self, path: str) -> None:
        if not self.store.exists(path):
            self.store.create_folder(path)
            self.notices.debug(f"Created folder: {path}")

    # -- Folder sweep --

    def cleanup_empty_folders(self, repositories: list[RepositoryTracking]) -> None:
        """Remove empty mirror folders after a pass.

        For a kind whose tracking is disabled, remaining mirror files are
        trashed only when their own ``allowDelete`` says so.
        """
        try:
            for repo in repositories:
                if not repo.is_valid:
                    continue
                for kind in ItemKind:
                    self._cleanup_folder(repo, kind)
        except (StoreError, OSError) as e:
            self.notices.error("Error cleaning up empty folders", e)

    def _cleanup_folder(self, repo: RepositoryTracking, kind: ItemKind) -> None:
        folder = repo_folder(repo, kind)
        if not self.store.is_folder(folder):
            return

        if not repo.tracks(kind):
            for entry in self.store.list_folder_children(folder):
                if entry.is_folder or not is_mirror_filename(kind, entry.name):
                    continue
                properties = extract_properties(self.store.read(entry.path))
                if self._effective_allow_delete(properties, default=False):
                    self.store.delete(entry.path)
                    self.notices.debug(f"Deleted file {entry.name} from untracked repo")

        if not self.store.list_folder_children(folder):
            self.notices.info(f"Deleting empty folder: {folder}")
            self.store.delete_folder(folder)

        parent = owner_folder(repo, kind)
        if self.store.is_folder(parent) and not self.store.list_folder_children(parent):
            self.notices.info(f"Deleting empty folder: {parent}")
            self.store.delete_folder(parent)

    # -- Internal helpers --

    def _fetch_comments(self, repo: RepositoryTracking, kind: ItemKind, number: int) -> list[Comment]:
        if kind is ItemKind.issue:
            return self.client.list_issue_comments(repo.owner, repo.name, number)
        return self.client.list_pull_request_comments(repo.owner, repo.name, number)

    def _effective_update_mode(
        self,
        properties: dict[str, str],
        default: UpdateMode,
        kind: ItemKind,
        item: Issue,
    ) -> str:
        value = properties.get("updateMode")
        if not value:
            self.notices.warning(
                f"No valid update mode found for {kind.label} {item.number}. "
                "Using repository setting."
            )
            return default.value
        return _unquote(value)

    @staticmethod
    def _effective_allow_delete(properties: dict[str, str], default: bool) -> bool:
        value = properties.get("allowDelete")
        if not value:
            return default
        return _unquote(value) == "true"
