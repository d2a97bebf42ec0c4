"""Top-level commands: layout, inspect."""

from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any

import typer

from jsonscape.cli._config import load_settings
from jsonscape.cli._format import (
    format_attributes,
    format_number,
    print_json,
    print_lines,
    print_table,
    truncate_value,
)
from jsonscape.debug import find_issues
from jsonscape.exceptions import SettingsError
from jsonscape.layout import layout
from jsonscape.model import Graph
from jsonscape.normalize import normalize
from jsonscape.routing import path_data, route
from jsonscape.settings import Settings
from jsonscape.visibility import build_adjacency, visible_subgraph

DEFAULT_LIMIT = 50


def load_document(source: str) -> Any:
    """Read JSON from a file path, or from stdin when source is '-'."""
    if source == "-":
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.is_file():
            print(f"Error: '{source}' is not a file")
            raise typer.Exit(1)
        text = path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        print(f"Error: '{source}' is not valid JSON: {e}")
        raise typer.Exit(1) from None


def resolve_settings(
    direction: str | None = None,
    align: str | None = None,
    link_style: str | None = None,
    max_depth: int | None = None,
) -> Settings:
    """Project settings from pyproject.toml with command-line overrides on top."""
    try:
        settings = load_settings()
        overrides = {
            key: value
            for key, value in (("direction", direction), ("align", align), ("link_style", link_style))
            if value is not None
        }
        if overrides:
            settings = settings.with_layout(**overrides)
    except SettingsError as e:
        print(f"Error: {e.message}")
        raise typer.Exit(1) from None

    if max_depth is not None:
        settings = replace(settings, data=replace(settings.data, max_depth=max_depth))
    return settings


def build_graph(document: Any, settings: Settings, collapsed: list[str] | None = None) -> Graph:
    """Run the pipeline once: normalize, filter, lay out and route."""
    full = normalize(document, settings)
    collapsed_ids = set(collapsed or ())
    unknown = sorted(collapsed_ids - set(full.node_ids()))
    if unknown:
        print(f"Error: unknown node id(s) for --collapse: {', '.join(unknown)}")
        raise typer.Exit(1)

    visible = visible_subgraph(
        full,
        collapsed_ids,
        settings.data.enable_collapse,
        build_adjacency(full),
    )
    return route(layout(visible, settings), settings)


def register_commands(app: typer.Typer) -> None:
    """Register `layout` and `inspect` as top-level commands on the app."""

    @app.command("layout")
    def layout_cmd(
        source: Annotated[str, typer.Argument(help="JSON file, or '-' for stdin")],
        direction: Annotated[str | None, typer.Option("--direction", help="'forward' or 'downward'")] = None,
        align: Annotated[str | None, typer.Option("--align", help="'firstChild' or 'center'")] = None,
        link_style: Annotated[
            str | None, typer.Option("--link-style", help="'orthogonal', 'curve' or 'line'")
        ] = None,
        max_depth: Annotated[int | None, typer.Option("--max-depth", help="Deepest JSON level visited")] = None,
        collapse: Annotated[
            list[str] | None, typer.Option("--collapse", help="Node id to collapse (repeatable)")
        ] = None,
        as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
        limit: Annotated[int, typer.Option("--limit", help="Max rows to show")] = DEFAULT_LIMIT,
    ):
        """Lay out a JSON document and print node boxes (or the full graph as JSON)."""
        document = load_document(source)
        settings = resolve_settings(direction, align, link_style, max_depth)
        graph = build_graph(document, settings, collapse)

        if as_json or output:
            data = graph.to_dict()
            edges = graph.edge_by_id()
            for edge in data["edges"]:
                edge["path"] = path_data(edges[edge["id"]].points, settings)
            data["settings"] = {
                "direction": settings.layout.direction.value,
                "align": settings.layout.align.value,
                "linkStyle": settings.layout.link_style.value,
            }
            print_json("layout", data, output)
            return

        print(
            f"\nLayout: {len(graph.nodes)} nodes | {len(graph.edges)} edges"
            f" | {settings.layout.direction.value} | {settings.layout.link_style.value}\n"
        )
        headers = ["Node", "Title", "X", "Y", "W", "H"]
        rows = [
            [
                node.id,
                truncate_value(node.label, 30),
                format_number(node.x),
                format_number(node.y),
                format_number(node.width),
                format_number(node.height),
            ]
            for node in graph.nodes
        ]
        print_lines(print_table(headers, rows), max_lines=limit + 2)

    @app.command("inspect")
    def inspect_cmd(
        source: Annotated[str, typer.Argument(help="JSON file, or '-' for stdin")],
        max_depth: Annotated[int | None, typer.Option("--max-depth", help="Deepest JSON level visited")] = None,
        as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
        output: Annotated[str | None, typer.Option("--output", help="Write JSON to file")] = None,
        limit: Annotated[int, typer.Option("--limit", help="Max rows to show")] = DEFAULT_LIMIT,
    ):
        """Show the entity tree extracted from a JSON document."""
        document = load_document(source)
        settings = resolve_settings(max_depth=max_depth)
        full = normalize(document, settings)
        report = find_issues(full, settings)
        issues = report.validation_errors + report.child_order_gaps + report.multi_parent_nodes

        if as_json or output:
            data = {
                "nodes": [
                    {
                        "id": node.id,
                        "title": node.meta.title,
                        "childOrder": node.meta.child_order,
                        "childrenCount": node.meta.children_count,
                        "attributes": dict(node.meta.attributes),
                        "arrayCounts": dict(node.meta.array_counts),
                    }
                    for node in full.nodes
                ],
                "node_count": len(full.nodes),
                "edge_count": len(full.edges),
                "issues": issues,
            }
            print_json("inspect", data, output)
            return

        print(f"\nDocument: {source} | {len(full.nodes)} entities | {len(full.edges)} links\n")
        headers = ["Node", "Title", "Children", "Attributes"]
        rows = [
            [
                node.id,
                truncate_value(node.meta.title, 30),
                str(node.meta.children_count),
                format_attributes(node.meta.attributes),
            ]
            for node in full.nodes
        ]
        print_lines(print_table(headers, rows), max_lines=limit + 2)

        if issues:
            print("\n  Issues:")
            for issue in issues:
                print(f"    - {issue}")
