"""Tests for pydantic settings and remote item models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ghtrack.core.schema import (
    Comment,
    EscapeMode,
    Issue,
    ItemKind,
    NoticeMode,
    PullRequest,
    RepositoryTracking,
    Settings,
    UpdateMode,
)


class TestRepositoryTracking:
    def test_defaults(self):
        repo = RepositoryTracking(repository="octo/widgets")
        assert repo.owner == "octo"
        assert repo.name == "widgets"
        assert repo.is_valid
        assert not repo.tracks(ItemKind.issue)
        assert repo.folder_for(ItemKind.issue) == "GitHub Issues"
        assert repo.folder_for(ItemKind.pull_request) == "GitHub Pull Requests"
        assert repo.update_mode_for(ItemKind.issue) == UpdateMode.none
        assert repo.allow_delete_for(ItemKind.pull_request)

    def test_invalid_names(self):
        assert not RepositoryTracking(repository="widgets").is_valid
        assert not RepositoryTracking(repository="octo/").is_valid
        assert not RepositoryTracking(repository="").is_valid

    def test_camel_case_aliases(self):
        repo = RepositoryTracking.model_validate(
            {
                "repository": "octo/widgets",
                "trackPullRequest": True,
                "pullRequestUpdateMode": "append",
                "requireOpenedByPR": True,
                "openedByPRMatch": "carol",
            }
        )
        assert repo.tracks(ItemKind.pull_request)
        assert repo.update_mode_for(ItemKind.pull_request) == UpdateMode.append
        assert repo.opened_by_pr_match == "carol"
        dumped = repo.model_dump(by_alias=True)
        assert dumped["trackPullRequest"] is True
        assert dumped["issueLabelMatch"] == []

    def test_frozen(self):
        repo = RepositoryTracking(repository="octo/widgets")
        with pytest.raises(ValidationError):
            repo.track_issues = True

    def test_bad_update_mode(self):
        with pytest.raises(ValidationError):
            RepositoryTracking(repository="octo/widgets", issue_update_mode="sometimes")


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.escape_mode == EscapeMode.strict
        assert settings.notice_mode == NoticeMode.normal
        assert settings.sync_on_startup
        assert settings.sync_interval == 0
        assert settings.repositories == []

    def test_negative_interval_rejected(self):
        with pytest.raises(ValidationError):
            Settings(sync_interval=-1)

    def test_with_repository_appends_and_replaces(self):
        settings = Settings().with_repository(RepositoryTracking(repository="octo/widgets"))
        settings = settings.with_repository(RepositoryTracking(repository="octo/gadgets"))
        updated = settings.with_repository(
            RepositoryTracking(repository="Octo/Widgets", track_issues=True)
        )

        assert [r.repository for r in updated.repositories] == ["Octo/Widgets", "octo/gadgets"]
        assert updated.get_repository("octo/widgets").track_issues
        assert not settings.get_repository("octo/widgets").track_issues

    def test_without_repository(self):
        settings = Settings().with_repository(RepositoryTracking(repository="octo/widgets"))
        assert settings.without_repository("OCTO/widgets").repositories == []
        assert settings.get_repository("nope/nope") is None

    def test_alias_round_trip(self):
        settings = Settings(github_token="t", escape_mode=EscapeMode.very_strict)
        dumped = settings.model_dump(mode="json", by_alias=True)
        assert dumped["githubToken"] == "t"
        assert dumped["escapeMode"] == "veryStrict"
        assert Settings.model_validate(dumped) == settings


class TestRemoteItems:
    def test_issue_from_api(self):
        issue = Issue.from_api(
            {
                "number": 42,
                "title": "Crash",
                "body": None,
                "state": "open",
                "created_at": "2024-06-15T12:00:00Z",
                "html_url": "https://github.com/octo/widgets/issues/42",
                "user": {"login": "alice"},
                "assignees": [{"login": "bob"}, {}],
                "labels": [{"name": "bug"}, "docs"],
            }
        )
        assert issue.number == 42
        assert issue.body is None
        assert issue.author == "alice"
        assert issue.assignees == ["bob"]
        assert issue.labels == ["bug", "docs"]
        assert issue.created_at.year == 2024

    def test_missing_user(self):
        issue = Issue.from_api({"number": 1, "user": None})
        assert issue.author is None
        assert issue.title == ""

    def test_pull_request_from_api(self):
        pr = PullRequest.from_api(
            {
                "number": 7,
                "title": "Add gears",
                "user": {"login": "carol"},
                "requested_reviewers": [{"login": "erin"}],
            }
        )
        assert pr.requested_reviewers == ["erin"]
        assert pr.author == "carol"

    def test_review_comment(self):
        comment = Comment.from_api(
            {"user": {"login": "erin"}, "body": "nit", "path": "a.py", "line": None, "original_line": 9},
            review=True,
        )
        assert comment.is_review_comment
        assert comment.path == "a.py"
        assert comment.line == 9

    def test_issue_comment_ignores_path(self):
        comment = Comment.from_api({"user": {"login": "amy"}, "body": "hi", "path": "a.py"})
        assert not comment.is_review_comment
        assert comment.path is None
        assert comment.line is None
