"""Tests for notice gating by mode."""

from __future__ import annotations

import logging

import pytest

from ghtrack.core.schema import NoticeMode
from ghtrack.utils.notices import HISTORY_LIMIT, NoticeLevel, NoticeManager


def _emit_all(manager: NoticeManager) -> None:
    manager.error("e")
    manager.warning("w")
    manager.info("i")
    manager.success("s")
    manager.debug("d")


@pytest.mark.parametrize(
    "mode,expected",
    [
        (NoticeMode.minimal, ["e"]),
        (NoticeMode.normal, ["e", "w", "s"]),
        (NoticeMode.extensive, ["e", "w", "i", "s"]),
        (NoticeMode.debug, ["e", "w", "i", "s", "d"]),
    ],
)
def test_visibility_per_mode(mode, expected):
    manager = NoticeManager(mode)
    _emit_all(manager)
    assert [message for _, message in manager.history] == expected


def test_mode_from_string():
    assert NoticeManager("extensive").mode == NoticeMode.extensive


def test_force_bypasses_mode():
    manager = NoticeManager(NoticeMode.minimal)
    manager.show("forced", NoticeLevel.info, force=True)
    assert list(manager.history) == [(NoticeLevel.info, "forced")]


def test_error_appends_exception():
    manager = NoticeManager()
    manager.error("Error fetching issues", RuntimeError("boom"))
    assert list(manager.history) == [(NoticeLevel.error, "Error fetching issues: boom")]


def test_markup_is_escaped(capsys):
    manager = NoticeManager(NoticeMode.extensive)
    manager.info("file [bold]x[/bold].md")
    assert "[bold]x[/bold]" in capsys.readouterr().out


def test_errors_go_to_stderr(capsys):
    NoticeManager().error("nope")
    captured = capsys.readouterr()
    assert "nope" in captured.err
    assert "nope" not in captured.out


def test_debug_mode_logs(caplog):
    manager = NoticeManager(NoticeMode.debug)
    with caplog.at_level(logging.DEBUG, logger="ghtrack"):
        manager.debug("Fetched 3 issues")
    assert "DEBUG: Fetched 3 issues" in caplog.text


def test_other_modes_do_not_log(caplog):
    manager = NoticeManager(NoticeMode.extensive)
    with caplog.at_level(logging.DEBUG, logger="ghtrack"):
        manager.info("quiet")
    assert caplog.text == ""


def test_history_is_bounded():
    manager = NoticeManager(NoticeMode.debug)
    for n in range(HISTORY_LIMIT + 10):
        manager.info(f"n{n}")
    assert len(manager.history) == HISTORY_LIMIT
    assert manager.history[-1] == (NoticeLevel.info, f"n{HISTORY_LIMIT + 9}")
