"""GitHub REST client via the gh CLI.

Every listing goes through ``gh api --paginate`` with the configured token
exported as GH_TOKEN, so collections come back complete. Transport failures
never escape a ``list_*`` call: they are reported as error notices and the
call returns an empty list.
"""

from __future__ import annotations

import json
import os
import re
import subprocess
from typing import Any
from urllib.parse import urlencode

from ghtrack.core.schema import Comment, Issue, PullRequest
from ghtrack.utils.notices import NoticeManager

_PER_PAGE = 100

_HEADERS = (
    "Accept: application/vnd.github+json",
    "X-GitHub-Api-Version: 2022-11-28",
)

# Timeout for a single gh invocation (all pages of one listing)
_DEFAULT_TIMEOUT = 60


class GitHubClientError(Exception):
    """Raised when a gh invocation fails."""


class MissingCredentialError(GitHubClientError):
    """Raised when an operation needs a token and none is configured."""


def resolve_token(token: str = "") -> str:
    """Configured token, else GH_TOKEN, else GITHUB_TOKEN."""
    return token or os.environ.get("GH_TOKEN", "") or os.environ.get("GITHUB_TOKEN", "")


class GitHubClient:
    """Fetch open issues, pull requests and their comments for a repository."""

    def __init__(
        self,
        token: str = "",
        notices: NoticeManager | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self.notices = notices or NoticeManager()
        self.timeout = timeout
        self.token = resolve_token(token)
        if not self.token:
            self.notices.error(
                "GitHub token is not set. Run `ghtrack config set token <token>` first."
            )

    @property
    def is_ready(self) -> bool:
        return bool(self.token)

    def require_token(self) -> str:
        if not self.token:
            raise MissingCredentialError("GitHub token is not set")
        return self.token

    # -- Items --

    def list_open_issues(self, owner: str, repo: str) -> list[Issue]:
        """Open issues of ``owner/repo``. Pull requests are filtered out."""
        if not self.is_ready:
            return []
        try:
            records = self._paginate(f"repos/{owner}/{repo}/issues", state="open")
            issues = [Issue.from_api(r) for r in records if "pull_request" not in r]
        except (GitHubClientError, ValueError, KeyError) as e:
            self.notices.error(f"Error fetching issues for {owner}/{repo}", e)
            return []
        self.notices.debug(f"Fetched {len(issues)} issues for {owner}/{repo}")
        return issues

    def list_open_pull_requests(self, owner: str, repo: str) -> list[PullRequest]:
        if not self.is_ready:
            return []
        try:
            records = self._paginate(f"repos/{owner}/{repo}/pulls", state="open")
            pulls = [PullRequest.from_api(r) for r in records]
        except (GitHubClientError, ValueError, KeyError) as e:
            self.notices.error(f"Error fetching pull requests for {owner}/{repo}", e)
            return []
        self.notices.debug(f"Fetched {len(pulls)} pull requests for {owner}/{repo}")
        return pulls

    # -- Comments --

    def list_issue_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        if not self.is_ready:
            return []
        try:
            comments = self._issue_comments(owner, repo, number)
        except (GitHubClientError, ValueError) as e:
            self.notices.error(f"Error fetching comments for issue #{number}", e)
            return []
        self.notices.debug(f"Fetched {len(comments)} comments for issue #{number}")
        return comments

    def list_pull_request_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        """General conversation comments followed by review (line) comments."""
        if not self.is_ready:
            return []
        general = self.list_issue_comments(owner, repo, number)
        try:
            records = self._paginate(f"repos/{owner}/{repo}/pulls/{number}/comments")
            review = [Comment.from_api(r, review=True) for r in records]
        except (GitHubClientError, ValueError) as e:
            self.notices.error(f"Error fetching comments for PR #{number}", e)
            return []
        self.notices.debug(
            f"Fetched {len(general)} general comments and {len(review)} review comments "
            f"for PR #{number}"
        )
        return general + review

    # -- Repositories --

    def list_available_repositories(self) -> list[str]:
        """``owner/name`` of the user's repositories and those of their organizations."""
        self.require_token()
        try:
            names = [r["full_name"] for r in self._paginate("user/repos", sort="updated")]
            for org in self._paginate("user/orgs"):
                self.notices.debug(f"Fetching repositories for organization: {org['login']}")
                names.extend(r["full_name"] for r in self._paginate(f"orgs/{org['login']}/repos"))
        except (GitHubClientError, KeyError) as e:
            self.notices.error("Error fetching repositories", e)
            return []
        unique = list(dict.fromkeys(names))
        self.notices.debug(f"Found {len(unique)} repositories in total")
        return unique

    # -- Internal helpers --

    def _issue_comments(self, owner: str, repo: str, number: int) -> list[Comment]:
        records = self._paginate(f"repos/{owner}/{repo}/issues/{number}/comments")
        return [Comment.from_api(r) for r in records]

    def _paginate(self, endpoint: str, **params: Any) -> list[dict]:
        """GET every page of ``endpoint`` and return the concatenated records."""
        query = urlencode({"per_page": _PER_PAGE, **params})
        cmd = ["gh", "api", "--paginate", "--method", "GET"]
        for header in _HEADERS:
            cmd.extend(["-H", header])
        cmd.append(f"{endpoint}?{query}")
        return _parse_pages(self._exec_gh(cmd))

    def _exec_gh(self, cmd: list[str]) -> str:
        """Execute a gh CLI command and return stdout."""
        env = {**os.environ, "GH_TOKEN": self.require_token()}
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout, env=env,
            )
        except FileNotFoundError:
            raise GitHubClientError(
                "gh CLI not found. Install it: https://cli.github.com/"
            )
        except subprocess.TimeoutExpired:
            raise GitHubClientError(f"gh command timed out after {self.timeout} seconds")

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "401" in stderr or "Bad credentials" in stderr:
                raise GitHubClientError(f"GitHub rejected the token: {stderr}")
            raise GitHubClientError(f"gh command failed: {stderr}")

        return result.stdout


# -- Module-level helpers --


def detect_repo() -> str | None:
    """Try to detect owner/repo from the git remotes of the current directory."""
    try:
        result = subprocess.run(
            ["git", "remote", "-v"],
            capture_output=True, text=True, timeout=10,
        )
        if result.returncode != 0:
            return None
        return _parse_github_remote(result.stdout)
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None


def _parse_pages(raw: str) -> list[dict]:
    """Parse ``gh api --paginate`` output: one JSON array per page, back to back."""
    decoder = json.JSONDecoder()
    records: list[dict] = []
    index = 0
    length = len(raw)
    while index < length:
        while index < length and raw[index].isspace():
            index += 1
        if index >= length:
            break
        try:
            page, index = decoder.raw_decode(raw, index)
        except json.JSONDecodeError as e:
            raise GitHubClientError(f"Unexpected gh output: {e}")
        if not isinstance(page, list):
            raise GitHubClientError(f"Expected a JSON array page, got {type(page).__name__}")
        records.extend(page)
    return records


def _parse_github_remote(remote_output: str) -> str | None:
    """Parse git remote -v output for a GitHub repository.

    Handles both SSH and HTTPS formats:
      git@github.com:owner/repo.git
      https://github.com/owner/repo.git
      https://github.com/owner/repo
    """
    for line in remote_output.splitlines():
        m = re.search(r"github\.com[:/]([^/]+/[^/\s]+?)(?:\.git)?\s", line)
        if m:
            return m.group(1)
    return None
