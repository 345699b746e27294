"""Per-repository tracking filters.

Criteria combine with OR: an item is tracked when any enabled criterion
matches. With no criterion enabled every item is tracked.
"""

from __future__ import annotations

from ghtrack.core.schema import Issue, PullRequest, RepositoryTracking


def _login_matches(logins: list[str], match: str) -> bool:
    if not match or not logins:
        return False
    target = match.lower()
    return any(login.lower() == target for login in logins)


def _author_matches(author: str | None, match: str) -> bool:
    return bool(match and author and author.lower() == match.lower())


def matches_issue(repo: RepositoryTracking, issue: Issue) -> bool:
    if not repo.require_assignee and not repo.require_opened_by_issue:
        return True

    if repo.require_assignee and _login_matches(issue.assignees, repo.assignee_match):
        return True

    if repo.require_opened_by_issue and _author_matches(issue.author, repo.opened_by_issue_match):
        return True

    return False


def matches_pull_request(repo: RepositoryTracking, pr: PullRequest) -> bool:
    if (
        not repo.require_reviewer
        and not repo.require_pull_request_assignee
        and not repo.require_opened_by_pr
    ):
        return True

    if repo.require_reviewer and _login_matches(pr.requested_reviewers, repo.reviewer_match):
        return True

    if repo.require_pull_request_assignee and _login_matches(
        pr.assignees, repo.pull_request_assignee_match
    ):
        return True

    if repo.require_opened_by_pr and _author_matches(pr.author, repo.opened_by_pr_match):
        return True

    return False


def filter_issues(repo: RepositoryTracking, issues: list[Issue]) -> list[Issue]:
    return [issue for issue in issues if matches_issue(repo, issue)]


def filter_pull_requests(repo: RepositoryTracking, pulls: list[PullRequest]) -> list[PullRequest]:
    return [pr for pr in pulls if matches_pull_request(repo, pr)]
