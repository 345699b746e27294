"""Shared fixtures: temp vaults, a fake GitHub client, item builders."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import pytest

from ghtrack.core.schema import Comment, Issue, NoticeMode, PullRequest
from ghtrack.core.store import VaultStore
from ghtrack.utils.notices import NoticeManager


class FakeClient:
    """In-memory stand-in for GitHubClient, keyed by ``owner/name``."""

    def __init__(self) -> None:
        self.issues: dict[str, list[Issue]] = {}
        self.pulls: dict[str, list[PullRequest]] = {}
        self.comments: dict[int, list[Comment]] = {}
        self.failing: set[str] = set()
        self.calls: Counter = Counter()
        self.notices = NoticeManager()
        self.token = "test-token"

    def _check(self, owner: str, repo: str) -> str:
        key = f"{owner}/{repo}"
        if key in self.failing:
            raise RuntimeError(f"listing failed for {key}")
        return key

    def list_open_issues(self, owner: str, repo: str) -> list[Issue]:
        self.calls["issues"] += 1
        return list(self.issues.get(self._check(owner, repo), []))

    def list_open_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        self.calls["pulls"] += 1
        return list(self.pulls.get(self._check(owner, repo), []))

    def list_issue_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        self.calls["comments"] += 1
        return list(self.comments.get(number, []))

    def list_pull_request_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        self.calls["comments"] += 1
        return list(self.comments.get(number, []))


def _make_issue(
    number: int = 42,
    title: str = "Crash on start",
    body: str | None = "Steps: run it",
    author: str | None = "alice",
    assignees: list[str] | None = None,
    labels: list[str] | None = None,
    state: str = "open",
) -> Issue:
    return Issue(
        number=number,
        title=title,
        body=body,
        state=state,
        created_at="2024-06-15T12:00:00Z",
        url=f"https://github.com/octo/widgets/issues/{number}",
        author=author,
        assignees=assignees if assignees is not None else ["bob"],
        labels=labels or [],
    )


def _make_pr(
    number: int = 7,
    title: str = "Add gears",
    body: str | None = "Adds gears",
    author: str | None = "carol",
    assignees: list[str] | None = None,
    reviewers: list[str] | None = None,
) -> PullRequest:
    return PullRequest(
        number=number,
        title=title,
        body=body,
        state="open",
        created_at="2024-06-15T12:00:00Z",
        url=f"https://github.com/octo/widgets/pull/{number}",
        author=author,
        assignees=assignees or [],
        requested_reviewers=reviewers or [],
    )


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty vault with a .ghtrack/ marker folder."""
    (tmp_path / ".ghtrack").mkdir()
    return tmp_path


@pytest.fixture
def store(vault: Path) -> VaultStore:
    return VaultStore(vault)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def notices() -> NoticeManager:
    """Shows everything so tests can inspect the notice history."""
    return NoticeManager(NoticeMode.debug)


@pytest.fixture
def make_issue():
    return _make_issue


@pytest.fixture
def make_pr():
    return _make_pr
