"""Sync orchestration: full passes over all tracked repositories."""

from __future__ import annotations

from ghtrack.sync.engine import SyncEngine, SyncResult

__all__ = ["SyncEngine", "SyncResult"]
