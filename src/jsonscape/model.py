"""Graph data model: nodes, edges and the graph container.

Every object here is frozen. Operations that "change" a graph build a new
one with :func:`dataclasses.replace`, so a graph handed to a renderer or a
transition is never modified underneath it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

import networkx as nx

from jsonscape.coordinates import Bounds, Point, Size, is_positive_finite


@dataclass(frozen=True)
class NodeMeta:
    """Metadata derived while normalizing a JSON object.

    Attributes:
        title: Display title of the entity
        title_key_used: Key the title was taken from (None for the placeholder)
        attributes: Preview attributes, in JSON declaration order
        array_counts: Length of every non-scalar array property, by key
        child_order: Index among siblings under the same parent (None for roots)
        children_count: Number of direct child nodes
    """

    title: str = ""
    title_key_used: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)
    array_counts: Mapping[str, int] = field(default_factory=dict)
    child_order: int | None = None
    children_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "titleKeyUsed": self.title_key_used,
            "attributes": dict(self.attributes),
            "arrayCounts": dict(self.array_counts),
            "childOrder": self.child_order,
            "childrenCount": self.children_count,
        }


@dataclass(frozen=True)
class Node:
    """A visual entity produced from a JSON object.

    ``x``/``y`` are the top-left corner in world pixels and stay None until
    the node has been laid out.
    """

    id: str
    label: str
    json_path: str
    data: Mapping[str, Any] = field(default_factory=dict, compare=False)
    meta: NodeMeta = field(default_factory=NodeMeta)
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None

    def size_or(self, default: Size) -> Size:
        """Node size with invalid dimensions replaced by ``default``'s."""
        return Size(
            self.width if is_positive_finite(self.width) else default.width,
            self.height if is_positive_finite(self.height) else default.height,
        )

    @property
    def center(self) -> Point:
        """Center of the box (missing values read as 0)."""
        return Point(
            (self.x or 0) + (self.width or 0) / 2,
            (self.y or 0) + (self.height or 0) / 2,
        )

    def moved(self, x: float, y: float) -> Node:
        return replace(self, x=x, y=y)

    def resized(self, width: float, height: float) -> Node:
        return replace(self, width=width, height=height)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "jsonPath": self.json_path,
            "data": self.data,
            "jsonMeta": self.meta.to_dict(),
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


def edge_id(source: str, target: str) -> str:
    return f"{source}__{target}"


@dataclass(frozen=True)
class Edge:
    """Parent -> child link. ``points`` is empty until routed."""

    id: str
    source: str
    target: str
    label: str | None = None
    points: tuple[Point, ...] = ()

    @classmethod
    def between(cls, source: str, target: str, label: str | None = None) -> Edge:
        return cls(id=edge_id(source, target), source=source, target=target, label=label)

    def with_points(self, points: Iterable[Point]) -> Edge:
        return replace(self, points=tuple(points))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "points": [p.to_dict() for p in self.points],
        }
        if self.label is not None:
            out["label"] = self.label
        return out


PinMap = Mapping[str, float]


@dataclass(frozen=True)
class Graph:
    """Nodes, edges and free-form metadata (pin maps live in ``meta``)."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    meta: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))
        if not isinstance(self.meta, MappingProxyType):
            object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def node_by_id(self) -> dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def edge_by_id(self) -> dict[str, Edge]:
        return {e.id: e for e in self.edges}

    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def bounds(self, default_size: Size) -> Bounds | None:
        """Box enclosing every node, or None for an empty graph."""
        if not self.nodes:
            return None
        boxes = []
        for node in self.nodes:
            size = node.size_or(default_size)
            x, y = node.x or 0, node.y or 0
            boxes.append((x, y, x + size.width, y + size.height))
        return Bounds(
            min(b[0] for b in boxes),
            min(b[1] for b in boxes),
            max(b[2] for b in boxes),
            max(b[3] for b in boxes),
        )

    def pins(self, key: str) -> PinMap:
        """Pin map stored under ``key`` ("pinX"/"pinY"), empty if absent."""
        return self.meta.get(key) or {}

    # ------------------------------------------------------------------
    # Copy-on-write helpers
    # ------------------------------------------------------------------

    def with_nodes(self, nodes: Iterable[Node]) -> Graph:
        return replace(self, nodes=tuple(nodes))

    def with_edges(self, edges: Iterable[Edge]) -> Graph:
        return replace(self, edges=tuple(edges))

    def with_meta(self, **entries: Any) -> Graph:
        return replace(self, meta={**self.meta, **entries})

    def without_meta(self, *keys: str) -> Graph:
        return replace(self, meta={k: v for k, v in self.meta.items() if k not in keys})

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_networkx(self) -> nx.DiGraph:
        """Directed graph of node ids; edges with a missing endpoint are skipped."""
        G = nx.DiGraph()
        for node in self.nodes:
            G.add_node(node.id, child_order=node.meta.child_order)
        for edge in self.edges:
            if edge.source in G and edge.target in G:
                G.add_edge(edge.source, edge.target, id=edge.id)
        return G

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "meta": {k: dict(v) if isinstance(v, Mapping) else v for k, v in self.meta.items()},
        }
