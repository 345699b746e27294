"""Frontmatter parser/builder for mirror files.

Mirror files start with a ``---``-delimited block of ``key: value`` lines.
Values are kept as raw strings (quotes included) so a parse/build cycle
reproduces the block byte for byte. No PyYAML dependency needed.
"""

from __future__ import annotations

DELIMITER = "---"


def _block_lines(text: str) -> list[str] | None:
    """Return the lines inside the frontmatter block, or None without one."""
    lines = text.split("\n")
    if not lines or lines[0] != DELIMITER:
        return None

    for index, line in enumerate(lines[1:], start=1):
        if line == DELIMITER:
            return lines[1:index]
    return None


def extract_properties(text: str) -> dict[str, str]:
    """Parse the frontmatter block of ``text`` into an ordered dict.

    Lines are split on the first colon. Lines without a colon, with an empty
    key or with an empty value are skipped. Returns ``{}`` when there is no
    complete block.
    """
    block = _block_lines(text)
    if block is None:
        return {}

    properties: dict[str, str] = {}
    for line in block:
        if ":" not in line:
            continue
        key, _, value = line.partition(":")
        key = key.strip()
        value = value.strip()
        if key and value:
            properties[key] = value
    return properties


def map_to_properties(properties: dict[str, str]) -> str:
    """Build a frontmatter block from ``properties`` in iteration order."""
    lines = [DELIMITER]
    for key, value in properties.items():
        lines.append(f"{key}: {value}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n"
