"""User-facing notices raised during a sync pass, gated by the notice mode."""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum

from rich.markup import escape

from ghtrack.core.schema import NoticeMode
from ghtrack.utils.output import console, error_console

logger = logging.getLogger("ghtrack")

# Recent notices kept on a manager; older ones are dropped.
HISTORY_LIMIT = 200


class NoticeLevel(str, Enum):
    error = "error"
    warning = "warning"
    info = "info"
    success = "success"
    debug = "debug"


_VISIBLE: dict[NoticeMode, frozenset[NoticeLevel]] = {
    NoticeMode.minimal: frozenset({NoticeLevel.error}),
    NoticeMode.normal: frozenset({NoticeLevel.error, NoticeLevel.warning, NoticeLevel.success}),
    NoticeMode.extensive: frozenset(
        {NoticeLevel.error, NoticeLevel.warning, NoticeLevel.info, NoticeLevel.success}
    ),
    NoticeMode.debug: frozenset(NoticeLevel),
}

_LOG_LEVELS = {
    NoticeLevel.error: logging.ERROR,
    NoticeLevel.warning: logging.WARNING,
    NoticeLevel.info: logging.INFO,
    NoticeLevel.success: logging.INFO,
    NoticeLevel.debug: logging.DEBUG,
}


class NoticeManager:
    """Shows sync notices on the terminal.

    ``minimal`` shows errors only, ``normal`` adds warnings and successes,
    ``extensive`` shows everything except debug, ``debug`` shows everything
    and also echoes each notice to the ``ghtrack`` logger.
    """

    def __init__(self, mode: NoticeMode | str = NoticeMode.normal) -> None:
        self.mode = NoticeMode(mode)
        self.history: deque[tuple[NoticeLevel, str]] = deque(maxlen=HISTORY_LIMIT)

    def should_show(self, level: NoticeLevel) -> bool:
        return level in _VISIBLE[self.mode]

    def show(self, message: str, level: NoticeLevel = NoticeLevel.info, force: bool = False) -> None:
        if self.mode == NoticeMode.debug:
            logger.log(_LOG_LEVELS[level], "%s: %s", level.value.upper(), message)

        if not (force or self.should_show(level)):
            return

        self.history.append((level, message))
        text = escape(message)
        if level == NoticeLevel.error:
            error_console.print(f"[red]Error:[/red] {text}")
        elif level == NoticeLevel.warning:
            error_console.print(f"[yellow]Warning:[/yellow] {text}")
        elif level == NoticeLevel.success:
            console.print(f"[green]{text}[/green]")
        else:
            console.print(f"[dim]{text}[/dim]")

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            message = f"{message}: {exc}"
            if self.mode == NoticeMode.debug:
                logger.error("Traceback for: %s", message, exc_info=exc)
        self.show(message, NoticeLevel.error)

    def warning(self, message: str) -> None:
        self.show(message, NoticeLevel.warning)

    def info(self, message: str) -> None:
        self.show(message, NoticeLevel.info)

    def success(self, message: str) -> None:
        self.show(message, NoticeLevel.success)

    def debug(self, message: str) -> None:
        self.show(message, NoticeLevel.debug)
