"""Formatting utilities for CLI output.

Node tables, attribute previews, number formatting and the JSON envelope
every ``--json`` command writes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# JSON envelope version; bump on breaking changes to JSON structure
SCHEMA_VERSION = 1

MAX_LINES = 100

# Columns holding pixel values or counts
NUMERIC_COLUMNS = ("X", "Y", "W", "H", "Children")


def json_envelope(command: str, data: Any) -> dict[str, Any]:
    """Wrap data in the standard JSON output envelope."""
    return {
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def print_json(command: str, data: Any, output: str | None = None) -> None:
    """Print the JSON envelope, or write it to ``output`` and say where."""
    text = json.dumps(json_envelope(command, data), indent=2, default=str)
    if not output:
        print(text)
        return

    path = Path(output)
    path.write_text(text, encoding="utf-8")
    print(f"Wrote {command} output to {path} ({len(text.encode()) / 1024:.1f}KB)")


def format_number(value: float | None) -> str:
    """Whole numbers without a decimal point; None as a dash."""
    if value is None:
        return "—"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def truncate_value(value: Any, max_chars: int = 40) -> str:
    """Truncate a value for display (non-strings are shown as JSON)."""
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1] + "…"


def format_attributes(attributes: Mapping[str, Any], max_chars: int = 40) -> str:
    """One-line ``key=value`` preview of a node's scalar attributes.

    Example:
        >>> format_attributes({"sku": "p-1", "price": 12.0})
        'sku=p-1, price=12.0'
    """
    if not attributes:
        return "—"
    text = ", ".join(f"{key}={truncate_value(value, 16)}" for key, value in attributes.items())
    return truncate_value(text, max_chars)


def print_table(
    headers: list[str],
    rows: Iterable[list[str]],
    indent: int = 2,
    numeric: Iterable[str] = NUMERIC_COLUMNS,
) -> list[str]:
    """Format a table with aligned columns; ``numeric`` columns are right-aligned.

    Returns list of lines (does not print).
    """
    rows = list(rows)
    if not rows:
        return []

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(cell))

    right = {i for i, h in enumerate(headers) if h in set(numeric)}

    def line(cells: list[str]) -> str:
        padded = [
            cell.rjust(widths[i]) if i in right else cell.ljust(widths[i])
            for i, cell in enumerate(cells[: len(widths)])
        ]
        return " " * indent + "  ".join(padded)

    return [line(headers), line(["─" * w for w in widths]), *(line(row) for row in rows)]


def print_lines(lines: list[str], max_lines: int = MAX_LINES) -> None:
    """Print lines with truncation warning if too many."""
    for text in lines[:max_lines]:
        print(text)
    if len(lines) > max_lines:
        print(f"\n  # ... {len(lines) - max_lines} more lines (use --limit to control)")
