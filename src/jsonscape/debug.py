"""Debug utilities for laid-out graphs.

Spot structural and geometric problems before anything is painted.

Usage:
    from jsonscape.debug import GraphDebugger

    debugger = GraphDebugger(graph, settings)

    # Quick validation
    result = debugger.validate()
    if not result.valid:
        print("Issues found:", result.errors)

    # Parent/children of one node
    info = debugger.trace_node("$.items[0]")

    # Full diagnostics
    issues = debugger.find_issues()
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Optional

from jsonscape.coordinates import is_positive_finite
from jsonscape.geometry import EdgeConnectionValidator
from jsonscape.model import Graph
from jsonscape.settings import Settings


@dataclass
class ValidationResult:
    """Result of graph validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class NodeTrace:
    """Trace information for a single node."""

    status: str  # "FOUND" or "NOT_FOUND"
    node_id: str
    parents: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)
    partial_matches: list[str] = field(default_factory=list)


@dataclass
class IssueReport:
    """Comprehensive issue report."""

    validation_errors: list[str] = field(default_factory=list)
    orphan_edges: list[str] = field(default_factory=list)
    self_loops: list[str] = field(default_factory=list)
    multi_parent_nodes: list[str] = field(default_factory=list)
    child_order_gaps: list[str] = field(default_factory=list)
    invalid_sizes: list[str] = field(default_factory=list)
    overlapping_nodes: list[str] = field(default_factory=list)
    edge_geometry: dict[str, list[str]] = field(default_factory=dict)

    @property
    def has_issues(self) -> bool:
        """True if any issues were found."""
        return bool(
            self.validation_errors
            or self.orphan_edges
            or self.self_loops
            or self.multi_parent_nodes
            or self.child_order_gaps
            or self.invalid_sizes
            or self.overlapping_nodes
            or self.edge_geometry
        )


class GraphDebugger:
    """Debug helper for normalized and laid-out graphs.

    Geometry checks (overlaps, edge endpoints) only run once every node has
    a position.
    """

    def __init__(self, graph: Graph, settings: Optional[Settings] = None):
        self.graph = graph
        self.settings = settings or Settings()

    @property
    def is_positioned(self) -> bool:
        return all(n.x is not None and n.y is not None for n in self.graph.nodes)

    def validate(self) -> ValidationResult:
        """Validate ids and edge endpoints.

        Checks for:
        - Duplicate node ids
        - Edges referencing non-existent nodes
        - Self-loops (node -> same node)

        Nodes that were never laid out are reported as warnings.
        """
        errors: list[str] = []
        warnings: list[str] = []

        counts = Counter(n.id for n in self.graph.nodes)
        for node_id, count in counts.items():
            if count > 1:
                errors.append(f"Duplicate node id '{node_id}' ({count} nodes)")

        for edge in self.graph.edges:
            if edge.source not in counts:
                errors.append(f"Edge source '{edge.source}' not found (target: '{edge.target}')")
            if edge.target not in counts:
                errors.append(f"Edge target '{edge.target}' not found (source: '{edge.source}')")
            if edge.source == edge.target:
                errors.append(f"Self-loop detected: '{edge.source}'")

        unplaced = [n.id for n in self.graph.nodes if n.x is None or n.y is None]
        if unplaced:
            warnings.append(f"{len(unplaced)} node(s) have no position yet")

        return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)

    def trace_node(self, node_id: str) -> NodeTrace:
        """Parents, children and box of one node (with close matches if missing)."""
        node = self.graph.get_node(node_id)
        if node is None:
            matches = [n.id for n in self.graph.nodes if node_id in n.id][:10]
            return NodeTrace(status="NOT_FOUND", node_id=node_id, partial_matches=matches)

        return NodeTrace(
            status="FOUND",
            node_id=node_id,
            parents=[e.source for e in self.graph.edges if e.target == node_id],
            children=[e.target for e in self.graph.edges if e.source == node_id],
            details={
                "title": node.meta.title,
                "child_order": node.meta.child_order,
                "box": (node.x, node.y, node.width, node.height),
            },
        )

    def find_issues(self) -> IssueReport:
        """Run every check and return all found issues."""
        report = IssueReport()
        report.validation_errors = self.validate().errors

        node_ids = {n.id for n in self.graph.nodes}
        parents: dict[str, list[str]] = defaultdict(list)
        for edge in self.graph.edges:
            if edge.source not in node_ids:
                report.orphan_edges.append(f"{edge.id} (source missing)")
            if edge.target not in node_ids:
                report.orphan_edges.append(f"{edge.id} (target missing)")
            if edge.source == edge.target:
                report.self_loops.append(edge.source)
            parents[edge.target].append(edge.source)

        for node_id, sources in parents.items():
            if len(sources) > 1:
                report.multi_parent_nodes.append(f"{node_id} (parents: {', '.join(sources)})")

        report.child_order_gaps = self._child_order_gaps(parents)
        report.invalid_sizes = [
            n.id
            for n in self.graph.nodes
            if not (is_positive_finite(n.width) and is_positive_finite(n.height))
        ]

        if self.is_positioned:
            report.overlapping_nodes = self._overlaps()
            if all(e.points for e in self.graph.edges):
                validator = EdgeConnectionValidator.from_graph(self.graph, self.settings)
                report.edge_geometry = validator.validate_all()

        return report

    def _child_order_gaps(self, parents: dict[str, list[str]]) -> list[str]:
        by_parent: dict[str, list[int]] = defaultdict(list)
        by_id = self.graph.node_by_id()
        for child_id, sources in parents.items():
            child = by_id.get(child_id)
            if child is None or child.meta.child_order is None:
                continue
            for source in sources:
                by_parent[source].append(child.meta.child_order)

        gaps = []
        for parent_id, orders in by_parent.items():
            if sorted(orders) != list(range(len(orders))):
                gaps.append(f"{parent_id}: child orders {sorted(orders)}")
        return gaps

    def _overlaps(self) -> list[str]:
        """Pairs of boxes that intersect within the same depth column/row."""
        forward = self.settings.layout.is_forward
        default_size = self.settings.data.node_size
        columns: dict[float, list[tuple[float, float, str]]] = defaultdict(list)
        for node in self.graph.nodes:
            size = node.size_or(default_size)
            if forward:
                columns[node.x].append((node.y, node.y + size.height, node.id))
            else:
                columns[node.y].append((node.x, node.x + size.width, node.id))

        overlaps = []
        for boxes in columns.values():
            boxes.sort()
            for (_, end, a), (start, _, b) in zip(boxes, boxes[1:]):
                if start < end:
                    overlaps.append(f"{a} overlaps {b}")
        return overlaps

    def debug_dump(self) -> dict[str, Any]:
        """Complete state snapshot: graph dict, validation and summary stats."""
        depth_counts = Counter(n.id.count(".") + n.id.count("[") for n in self.graph.nodes)
        return {
            "graph": self.graph.to_dict(),
            "validation": self.validate(),
            "stats": {
                "total_nodes": len(self.graph.nodes),
                "total_edges": len(self.graph.edges),
                "roots": sum(1 for n in self.graph.nodes if n.meta.child_order is None),
                "path_depths": dict(sorted(depth_counts.items())),
            },
        }


def validate_graph(graph: Graph, settings: Optional[Settings] = None) -> ValidationResult:
    """Quick validation of a graph.

    Example:
        >>> result = validate_graph(my_graph)
        >>> if not result.valid:
        ...     print("Errors:", result.errors)
    """
    return GraphDebugger(graph, settings).validate()


def find_issues(graph: Graph, settings: Optional[Settings] = None) -> IssueReport:
    """Quick issue discovery for a graph.

    Example:
        >>> issues = find_issues(my_graph)
        >>> if issues.has_issues:
        ...     print("Overlaps:", issues.overlapping_nodes)
    """
    return GraphDebugger(graph, settings).find_issues()
