"""Pydantic v2 models for settings, tracked repositories and remote items."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ghtrack.core.migrations import SCHEMA_VERSION


class UpdateMode(str, Enum):
    none = "none"
    update = "update"
    append = "append"


class EscapeMode(str, Enum):
    disabled = "disabled"
    normal = "normal"
    strict = "strict"
    very_strict = "veryStrict"


class NoticeMode(str, Enum):
    minimal = "minimal"
    normal = "normal"
    extensive = "extensive"
    debug = "debug"


class ItemKind(str, Enum):
    issue = "issue"
    pull_request = "pull_request"

    @property
    def file_prefix(self) -> str:
        """Prefix of mirror file names, e.g. ``Issue - 42.md``."""
        return "Issue" if self is ItemKind.issue else "Pull Request"

    @property
    def label(self) -> str:
        return "issue" if self is ItemKind.issue else "pull request"


# -- Settings --


class RepositoryTracking(BaseModel):
    """Tracking configuration for one ``owner/name`` repository.

    Field aliases match the camelCase keys of the settings file.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    repository: str = ""

    track_issues: bool = Field(False, alias="trackIssues")
    issue_folder: str = Field("GitHub Issues", alias="issueFolder")
    issue_update_mode: UpdateMode = Field(UpdateMode.none, alias="issueUpdateMode")
    allow_delete_issue: bool = Field(True, alias="allowDeleteIssue")
    require_assignee: bool = Field(False, alias="requireAssignee")
    assignee_match: str = Field("", alias="assigneeMatch")
    require_opened_by_issue: bool = Field(False, alias="requireOpenedByIssue")
    opened_by_issue_match: str = Field("", alias="openedByIssueMatch")
    require_issue_label: bool = Field(False, alias="requireIssueLabel")
    issue_label_match: list[str] = Field(default_factory=list, alias="issueLabelMatch")

    track_pull_requests: bool = Field(False, alias="trackPullRequest")
    pull_request_folder: str = Field("GitHub Pull Requests", alias="pullRequestFolder")
    pull_request_update_mode: UpdateMode = Field(UpdateMode.none, alias="pullRequestUpdateMode")
    allow_delete_pull_request: bool = Field(True, alias="allowDeletePullRequest")
    require_reviewer: bool = Field(False, alias="requireReviewer")
    reviewer_match: str = Field("", alias="reviewerMatch")
    require_pull_request_assignee: bool = Field(False, alias="requirePullRequestAssignee")
    pull_request_assignee_match: str = Field("", alias="pullRequestAssigneeMatch")
    require_opened_by_pr: bool = Field(False, alias="requireOpenedByPR")
    opened_by_pr_match: str = Field("", alias="openedByPRMatch")
    require_pull_request_label: bool = Field(False, alias="requirePullRequestLabel")
    pull_request_label_match: list[str] = Field(
        default_factory=list, alias="pullRequestLabelMatch"
    )

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0].strip()

    @property
    def name(self) -> str:
        return self.repository.partition("/")[2].strip()

    @property
    def is_valid(self) -> bool:
        return bool(self.owner and self.name)

    def tracks(self, kind: ItemKind) -> bool:
        return self.track_issues if kind is ItemKind.issue else self.track_pull_requests

    def folder_for(self, kind: ItemKind) -> str:
        return self.issue_folder if kind is ItemKind.issue else self.pull_request_folder

    def update_mode_for(self, kind: ItemKind) -> UpdateMode:
        if kind is ItemKind.issue:
            return self.issue_update_mode
        return self.pull_request_update_mode

    def allow_delete_for(self, kind: ItemKind) -> bool:
        if kind is ItemKind.issue:
            return self.allow_delete_issue
        return self.allow_delete_pull_request


class TrackedItemRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo: str
    number: str


class Settings(BaseModel):
    """Immutable settings snapshot.

    Changing a value means building a new snapshot with ``model_copy``;
    a running sync pass keeps the snapshot it started with.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: str = Field(SCHEMA_VERSION, alias="schemaVersion")
    github_token: str = Field("", alias="githubToken")
    repositories: list[RepositoryTracking] = Field(default_factory=list)
    date_format: str = Field("", alias="dateFormat")
    sync_on_startup: bool = Field(True, alias="syncOnStartup")
    notice_mode: NoticeMode = Field(NoticeMode.normal, alias="syncNoticeMode")
    sync_interval: int = Field(0, ge=0, alias="syncInterval")
    escape_mode: EscapeMode = Field(EscapeMode.strict, alias="escapeMode")
    manually_tracked_issues: list[TrackedItemRef] = Field(
        default_factory=list, alias="manuallyTrackedIssues"
    )
    manually_tracked_pull_requests: list[TrackedItemRef] = Field(
        default_factory=list, alias="manuallyTrackedPullRequests"
    )

    def get_repository(self, repository: str) -> RepositoryTracking | None:
        for repo in self.repositories:
            if repo.repository.lower() == repository.lower():
                return repo
        return None

    def with_repository(self, repo: RepositoryTracking) -> Settings:
        """Return a snapshot with ``repo`` added or replacing its namesake."""
        key = repo.repository.lower()
        if any(r.repository.lower() == key for r in self.repositories):
            repos = [repo if r.repository.lower() == key else r for r in self.repositories]
        else:
            repos = [*self.repositories, repo]
        return self.model_copy(update={"repositories": repos})

    def without_repository(self, repository: str) -> Settings:
        repos = [r for r in self.repositories if r.repository.lower() != repository.lower()]
        return self.model_copy(update={"repositories": repos})


# -- Remote items --


def _login(user: Any) -> str | None:
    if isinstance(user, dict):
        return user.get("login") or None
    return None


def _logins(users: Any) -> list[str]:
    if not isinstance(users, list):
        return []
    return [login for login in (_login(u) for u in users) if login]


def _label_names(labels: Any) -> list[str]:
    if not isinstance(labels, list):
        return []
    names = []
    for label in labels:
        if isinstance(label, dict) and label.get("name"):
            names.append(label["name"])
        elif isinstance(label, str) and label:
            names.append(label)
    return names


class Issue(BaseModel):
    number: int
    title: str = ""
    body: str | None = None
    state: str = "open"
    created_at: datetime | None = None
    url: str = ""
    author: str | None = None
    assignees: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Issue:
        """Build from a REST API issue record."""
        return cls(
            number=data["number"],
            title=data.get("title") or "",
            body=data.get("body"),
            state=data.get("state") or "open",
            created_at=data.get("created_at"),
            url=data.get("html_url") or "",
            author=_login(data.get("user")),
            assignees=_logins(data.get("assignees")),
            labels=_label_names(data.get("labels")),
        )


class PullRequest(Issue):
    requested_reviewers: list[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PullRequest:
        """Build from a REST API pull request record."""
        issue = Issue.from_api(data)
        return cls(
            **issue.model_dump(),
            requested_reviewers=_logins(data.get("requested_reviewers")),
        )


class Comment(BaseModel):
    author: str | None = None
    body: str = ""
    created_at: datetime | None = None
    is_review_comment: bool = False
    path: str | None = None
    line: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], review: bool = False) -> Comment:
        """Build from an issue comment or (``review=True``) a PR review comment."""
        line = None
        if review:
            line = data.get("line") or data.get("original_line")
        return cls(
            author=_login(data.get("user")),
            body=data.get("body") or "",
            created_at=data.get("created_at"),
            is_review_comment=review,
            path=data.get("path") if review else None,
            line=line,
        )
