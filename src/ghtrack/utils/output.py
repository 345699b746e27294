"""Terminal output: JSON when piped or asked for, rich text otherwise."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()
error_console = Console(stderr=True)


def is_piped() -> bool:
    return not sys.stdout.isatty()


def _resolve_fmt(fmt: str | None) -> str:
    if fmt is None:
        return "json" if is_piped() else "text"
    return fmt


def output(data: Any, fmt: str | None = None) -> None:
    """Print a value as JSON or as rich text.

    If fmt is None, auto-detect: json when piped, text for TTY.
    """
    if _resolve_fmt(fmt) == "json":
        if hasattr(data, "model_dump_json"):
            print(data.model_dump_json(indent=2, by_alias=True))
        elif isinstance(data, (dict, list)):
            print(json.dumps(data, indent=2, default=str))
        else:
            print(json.dumps({"value": data}, default=str))
        return

    if hasattr(data, "model_dump_json"):
        console.print_json(data.model_dump_json(indent=2, by_alias=True))
    elif isinstance(data, (dict, list)):
        console.print_json(json.dumps(data, default=str))
    else:
        console.print(str(data))


def output_table(
    rows: list[dict[str, str]],
    columns: list[str],
    fmt: str | None = None,
    title: str | None = None,
) -> None:
    if _resolve_fmt(fmt) == "json":
        print(json.dumps(rows, indent=2, default=str))
        return

    table = Table(title=title)
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for row in rows:
        table.add_row(*[str(row.get(col, "")) for col in columns])
    console.print(table)


def mask_secret(value: str) -> str:
    """Show only the last four characters of a token."""
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def error(msg: str) -> None:
    error_console.print(f"[red]Error:[/red] {msg}")


def warning(msg: str) -> None:
    error_console.print(f"[yellow]Warning:[/yellow] {msg}")


def success(msg: str) -> None:
    console.print(f"[green]{msg}[/green]")


def info(msg: str) -> None:
    console.print(f"[dim]{msg}[/dim]")
