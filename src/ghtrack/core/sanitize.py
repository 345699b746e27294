"""Escaping of remote issue/PR text before it is written into the vault.

Issue bodies are arbitrary user content. Templating plugins and the
frontmatter parser both react to a handful of character sequences, so text
is passed through one of four escape levels before rendering.
"""

from __future__ import annotations

import re

from ghtrack.core.schema import EscapeMode

# Literal replacements for normal mode. None of the patterns overlap,
# so the order of application does not matter.
_NORMAL_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("<%", "'<<'"),
    ("%>", "'>>'"),
    ("`", '"'),
    ("---", "- - -"),
    ("{{", "(("),
    ("}}", "))"),
)

_STRICT_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s.,()/\[\]*+\-:\"#!'?&|>~^]")
_VERY_STRICT_DISALLOWED = re.compile(r"[^a-zA-Z0-9\s.,]")


class InvalidInputError(ValueError):
    """Raised when sanitize() is handed None instead of text."""


def sanitize(text: str, level: EscapeMode | str = EscapeMode.normal) -> str:
    """Escape ``text`` according to ``level``.

    ``None`` is a caller bug (bodies are defaulted before rendering) and
    raises InvalidInputError instead of being coerced to an empty string.
    """
    if text is None:
        raise InvalidInputError("Input cannot be None")

    mode = EscapeMode(level)

    if mode == EscapeMode.disabled:
        return text

    if mode == EscapeMode.strict:
        # Dash collapsing runs on the already-stripped text
        stripped = _STRICT_DISALLOWED.sub("", text)
        return stripped.replace("---", "- - -")

    if mode == EscapeMode.very_strict:
        return _VERY_STRICT_DISALLOWED.sub("", text)

    for pattern, replacement in _NORMAL_REPLACEMENTS:
        text = text.replace(pattern, replacement)
    return text
