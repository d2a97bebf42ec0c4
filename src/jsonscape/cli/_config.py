"""Project-level configuration from pyproject.toml.

Reads the [tool.jsonscape] section and turns it into default
``Settings`` for the CLI. Tables ``layout`` and ``data`` map onto the
matching settings sections::

    [tool.jsonscape]
    transition_ms = 200

    [tool.jsonscape.layout]
    direction = "downward"
    link_style = "orthogonal"

    [tool.jsonscape.data]
    hidden_keys = ["password"]
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from jsonscape.settings import Settings


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def read_section(start: Path | None = None) -> dict[str, Any]:
    """Raw [tool.jsonscape] table from the nearest pyproject.toml (empty if absent)."""
    path = find_pyproject(start)
    if path is None:
        return {}

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return data.get("tool", {}).get("jsonscape", {})


def load_settings(start: Path | None = None) -> Settings:
    """Settings from [tool.jsonscape], or defaults when there is no such section.

    Raises:
        SettingsError: If the section names unknown keys or invalid choices
    """
    return Settings.from_mapping(read_section(start))
