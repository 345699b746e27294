"""Tests for mirror file rendering."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from ghtrack.core.render import (
    NO_DESCRIPTION,
    format_comments,
    format_date,
    format_logins,
    initial_properties,
    is_mirror_filename,
    mirror_path,
    number_from_filename,
    refresh_properties,
    render_append_block,
    render_body,
    render_document,
    repo_folder,
)
from ghtrack.core.schema import Comment, EscapeMode, ItemKind, RepositoryTracking, UpdateMode

REPO = RepositoryTracking(repository="octo/widgets", track_issues=True, track_pull_requests=True)


def _comment(author, body, when, review=False, path=None, line=None) -> Comment:
    return Comment(
        author=author,
        body=body,
        created_at=when,
        is_review_comment=review,
        path=path,
        line=line,
    )


class TestPaths:
    def test_repo_folder(self):
        assert repo_folder(REPO, ItemKind.issue) == "GitHub Issues/octo/widgets"
        assert repo_folder(REPO, ItemKind.pull_request) == "GitHub Pull Requests/octo/widgets"

    def test_mirror_path(self):
        assert mirror_path(REPO, ItemKind.issue, 42) == "GitHub Issues/octo/widgets/Issue - 42.md"
        assert (
            mirror_path(REPO, ItemKind.pull_request, 7)
            == "GitHub Pull Requests/octo/widgets/Pull Request - 7.md"
        )

    def test_filename_recognition(self):
        assert is_mirror_filename(ItemKind.issue, "Issue - 42.md")
        assert not is_mirror_filename(ItemKind.issue, "Pull Request - 42.md")
        assert not is_mirror_filename(ItemKind.pull_request, "notes.md")

    def test_number_from_filename(self):
        assert number_from_filename(ItemKind.issue, "Issue - 42.md") == "42"
        assert number_from_filename(ItemKind.pull_request, "Pull Request - 7.md") == "7"


class TestValues:
    def test_format_date_none(self):
        assert format_date(None) == ""

    def test_format_date_default_format(self):
        value = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        assert re.fullmatch(r"2024-06-1[456] \d\d:\d\d:\d\d", format_date(value))

    def test_format_date_custom(self):
        value = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        assert format_date(value, "%Y-%m-%d") == "2024-06-15"

    def test_format_logins(self):
        assert format_logins([]) == "[]"
        assert format_logins(["a", "b"]) == '["a", "b"]'


class TestProperties:
    def test_issue_properties_in_order(self, make_issue):
        props = initial_properties(make_issue(), REPO, ItemKind.issue, date_format="%Y-%m-%d")
        assert props == {
            "title": '"Crash on start"',
            "status": '"open"',
            "created": '"2024-06-15"',
            "url": '"https://github.com/octo/widgets/issues/42"',
            "opened_by": '"alice"',
            "assignees": '["bob"]',
            "updateMode": '"none"',
            "allowDelete": "true",
        }
        assert list(props)[-2:] == ["updateMode", "allowDelete"]

    def test_pull_request_has_reviewers(self, make_pr):
        repo = REPO.model_copy(
            update={"pull_request_update_mode": UpdateMode.append, "allow_delete_pull_request": False}
        )
        props = initial_properties(make_pr(reviewers=["erin"]), repo, ItemKind.pull_request)
        assert props["requested_reviewers"] == '["erin"]'
        assert props["updateMode"] == '"append"'
        assert props["allowDelete"] == "false"

    def test_title_is_escaped(self, make_issue):
        props = initial_properties(
            make_issue(title="Bad <title> {x}"), REPO, ItemKind.issue, EscapeMode.strict
        )
        assert props["title"] == '"Bad title> x"'

    def test_missing_author(self, make_issue):
        props = initial_properties(make_issue(author=None), REPO, ItemKind.issue)
        assert props["opened_by"] == '""'

    def test_refresh_keeps_user_keys(self, make_issue):
        existing = {"title": '"Old"', "assignees": "[]", "priority": "high"}
        refreshed = refresh_properties(existing, make_issue(assignees=["bob", "dave"]))
        assert refreshed == {"title": '"Old"', "assignees": '["bob", "dave"]', "priority": "high"}
        assert existing["assignees"] == "[]"


class TestComments:
    def test_empty_thread(self):
        assert format_comments([]) == ""

    def test_sorted_oldest_first(self):
        late = _comment("zed", "second", "2024-06-16T12:00:00Z")
        early = _comment("amy", "first", "2024-06-15T12:00:00Z")
        text = format_comments([late, early], date_format="%Y-%m-%d")
        assert text == (
            "\n## Comments\n\n"
            "### amy commented (2024-06-15):\n\nfirst\n\n---\n\n"
            "### zed commented (2024-06-16):\n\nsecond\n\n---\n\n"
        )

    def test_review_comment_header(self):
        review = _comment("erin", "nit", "2024-06-15T12:00:00Z", True, "src/gear.py", 12)
        text = format_comments([review], date_format="%Y")
        assert "### erin commented on line 12 of file `src/gear.py` (2024):\n\nnit" in text

    def test_review_comment_without_line(self):
        review = _comment("erin", "nit", "2024-06-15T12:00:00Z", True, "a.py", None)
        assert "on line N/A of file `a.py`" in format_comments([review])

    def test_unknown_user_and_empty_body(self):
        text = format_comments([_comment(None, "", "2024-06-15T12:00:00Z")], date_format="%Y")
        assert "### Unknown User commented (2024):\n\nNo content\n\n---\n\n" in text

    def test_comment_body_escaped(self):
        text = format_comments([_comment("amy", "{{x}}", None)], EscapeMode.normal)
        assert "((x))" in text


class TestDocuments:
    def test_body_without_comments(self, make_issue):
        assert render_body(make_issue(), []) == "# Crash on start\nSteps: run it\n"

    def test_missing_description(self, make_issue):
        assert render_body(make_issue(body=None), []) == f"# Crash on start\n{NO_DESCRIPTION}\n"
        assert render_body(make_issue(body=""), []) == f"# Crash on start\n{NO_DESCRIPTION}\n"

    def test_document_layout(self):
        doc = render_document({"a": "1"}, "# T\nbody\n")
        assert doc == "---\na: 1\n---\n\n# T\nbody\n"

    def test_append_block(self, make_issue):
        block = render_append_block(make_issue(state="closed"), [])
        assert block == '---\n### New status: "closed"\n\n# Crash on start\nSteps: run it\n'
