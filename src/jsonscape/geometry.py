"""Geometry checks for routed edges.

These dataclasses capture the spatial properties of positioned nodes and
routed edges so edge endpoints can be validated against node boundaries
without rendering anything.
"""

from __future__ import annotations

from dataclasses import dataclass

from jsonscape.coordinates import Point
from jsonscape.model import Graph
from jsonscape.settings import Direction, Settings


@dataclass(frozen=True)
class NodeGeometry:
    """Node bounding box in world pixels."""

    id: str
    x: float  # Left edge
    y: float  # Top edge
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def trailing(self, direction: Direction) -> Point:
        """Midpoint of the side facing the growth direction - where outgoing edges start."""
        if direction is Direction.FORWARD:
            return Point(self.right, self.center_y)
        return Point(self.center_x, self.bottom)

    def leading(self, direction: Direction) -> Point:
        """Midpoint of the side facing the parent - where incoming edges end."""
        if direction is Direction.FORWARD:
            return Point(self.x, self.center_y)
        return Point(self.center_x, self.y)

    def main_end(self, direction: Direction) -> float:
        return self.right if direction is Direction.FORWARD else self.bottom

    def main_start(self, direction: Direction) -> float:
        return self.x if direction is Direction.FORWARD else self.y


@dataclass(frozen=True)
class EdgeGeometry:
    """First and last routed point of an edge."""

    id: str
    source_id: str
    target_id: str
    start_point: Point | None
    end_point: Point | None


@dataclass
class EdgeConnectionValidator:
    """Validates edge endpoints against node geometry.

    Checks that:
    1. The edge has points at all
    2. Source comes before target along the growth direction
    3. Edge starts at the source's trailing midpoint
    4. Edge ends at the target's leading midpoint
    """

    nodes: dict[str, NodeGeometry]
    edges: list[EdgeGeometry]
    direction: Direction = Direction.FORWARD
    tolerance: float = 0.0  # pixels (strict by default)

    @classmethod
    def from_graph(cls, graph: Graph, settings: Settings | None = None, tolerance: float = 0.0) -> EdgeConnectionValidator:
        settings = settings or Settings()
        default_size = settings.data.node_size
        nodes = {}
        for node in graph.nodes:
            size = node.size_or(default_size)
            nodes[node.id] = NodeGeometry(node.id, node.x or 0, node.y or 0, size.width, size.height)
        edges = [
            EdgeGeometry(
                id=e.id,
                source_id=e.source,
                target_id=e.target,
                start_point=e.points[0] if e.points else None,
                end_point=e.points[-1] if e.points else None,
            )
            for e in graph.edges
        ]
        return cls(nodes=nodes, edges=edges, direction=settings.layout.direction, tolerance=tolerance)

    def validate_edge(self, edge: EdgeGeometry) -> list[str]:
        """Returns list of issues (empty = valid)."""
        issues = []

        src = self.nodes.get(edge.source_id)
        tgt = self.nodes.get(edge.target_id)

        if not src:
            issues.append(f"Source node '{edge.source_id}' not found")
            return issues
        if not tgt:
            issues.append(f"Target node '{edge.target_id}' not found")
            return issues
        if edge.start_point is None or edge.end_point is None:
            issues.append("Edge has no points")
            return issues

        if src.main_end(self.direction) > tgt.main_start(self.direction):
            issues.append(
                f"Source '{src.id}' does not precede target '{tgt.id}': "
                f"{src.main_end(self.direction):.1f} > {tgt.main_start(self.direction):.1f}"
            )

        expected_start = src.trailing(self.direction)
        dx_start = abs(edge.start_point.x - expected_start.x)
        dy_start = abs(edge.start_point.y - expected_start.y)
        if dx_start > self.tolerance or dy_start > self.tolerance:
            issues.append(
                f"Edge start off by ({dx_start:.1f}, {dy_start:.1f})px from trailing side of '{src.id}'"
            )

        expected_end = tgt.leading(self.direction)
        dx_end = abs(edge.end_point.x - expected_end.x)
        dy_end = abs(edge.end_point.y - expected_end.y)
        if dx_end > self.tolerance or dy_end > self.tolerance:
            issues.append(
                f"Edge end off by ({dx_end:.1f}, {dy_end:.1f})px from leading side of '{tgt.id}'"
            )

        return issues

    def validate_all(self) -> dict[str, list[str]]:
        """Returns {edge_id: [issues]} for all edges with issues."""
        return {e.id: issues for e in self.edges if (issues := self.validate_edge(e))}


def format_issues(issues: dict[str, list[str]]) -> str:
    """Format validation issues for display in test failures."""
    lines = []
    for edge_id, edge_issues in issues.items():
        lines.append(f"  {edge_id}:")
        for issue in edge_issues:
            lines.append(f"    - {issue}")
    return "\n".join(lines)
