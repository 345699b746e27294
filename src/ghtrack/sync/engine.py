"""SyncEngine: one full mirror pass over every tracked repository."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ghtrack.core.reconcile import Reconciler, SyncStats
from ghtrack.core.schema import ItemKind, Settings
from ghtrack.core.store import VaultStore
from ghtrack.sources.github import GitHubClient
from ghtrack.utils.notices import NoticeManager

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of one sync() call."""

    status: str = "ok"  # "ok", "busy" or "failed"
    stats: SyncStats = field(default_factory=SyncStats)
    failures: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, **self.stats.to_dict(), "failures": self.failures}


class SyncEngine:
    """Runs sync passes against one settings snapshot.

    At most one pass runs at a time; a call made while a pass is in flight
    returns immediately with status ``busy``.
    """

    def __init__(
        self,
        settings: Settings,
        store: VaultStore,
        client: GitHubClient,
        notices: NoticeManager | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.client = client
        self.notices = notices or NoticeManager(settings.notice_mode)
        self._lock = threading.Lock()

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    def with_settings(self, settings: Settings) -> SyncEngine:
        """Engine for a new settings snapshot.

        The new engine gets its own client and notices and shares only the
        store and the in-flight latch, so a pass still running here keeps
        the token and notice mode it started with.
        """
        notices = NoticeManager(settings.notice_mode)
        client = GitHubClient(settings.github_token, notices=notices)
        engine = SyncEngine(settings, self.store, client, notices)
        engine._lock = self._lock
        return engine

    def sync(self) -> SyncResult:
        if not self._lock.acquire(blocking=False):
            self.notices.warning("Already syncing...")
            return SyncResult(status="busy")

        result = SyncResult()
        try:
            self.notices.info("Syncing issues and pull requests")
            reconciler = Reconciler(self.settings, self.store, self.client, self.notices)
            self._sync_kind(reconciler, ItemKind.issue, result)
            self._sync_kind(reconciler, ItemKind.pull_request, result)
            reconciler.cleanup_empty_folders(self.settings.repositories)
            if result.failures:
                self.notices.warning(
                    f"Synced with {len(result.failures)} failed repositories"
                )
            else:
                self.notices.success("Synced issues and pull requests")
        except Exception as e:
            result.status = "failed"
            self.notices.error("Error syncing issues and pull requests", e)
        finally:
            self._lock.release()
        return result

    def _sync_kind(self, reconciler: Reconciler, kind: ItemKind, result: SyncResult) -> None:
        for repo in self.settings.repositories:
            if not repo.tracks(kind) or not repo.is_valid:
                continue
            try:
                result.stats.add(reconciler.reconcile(repo, kind))
            except Exception as e:
                logger.debug("Sync of %s %ss failed", repo.repository, kind.label, exc_info=True)
                result.failures.append(
                    {"repository": repo.repository, "kind": kind.value, "error": str(e)}
                )
                self.notices.error(f"Error syncing {kind.label}s for {repo.repository}", e)
