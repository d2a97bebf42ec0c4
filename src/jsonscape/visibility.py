"""Collapse-aware visibility of nodes and edges.

A node is hidden when any strict ancestor is collapsed. The collapsed node
itself stays visible so it can be expanded again.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Collection, Iterable
from dataclasses import dataclass, replace

from jsonscape.model import Graph


@dataclass(frozen=True)
class Adjacency:
    """Parent/child index of a graph, built once and passed explicitly.

    Both maps contain every node id; edges whose endpoints are not in the
    graph are ignored.
    """

    children_by_id: dict[str, list[str]]
    parents_by_id: dict[str, list[str]]

    @classmethod
    def from_graph(cls, graph: Graph) -> Adjacency:
        G = graph.to_networkx()
        return cls(
            children_by_id={n: list(G.successors(n)) for n in G.nodes},
            parents_by_id={n: list(G.predecessors(n)) for n in G.nodes},
        )

    def children(self, node_id: str) -> list[str]:
        return self.children_by_id.get(node_id, [])

    def parents(self, node_id: str) -> list[str]:
        return self.parents_by_id.get(node_id, [])

    def has_children(self, node_id: str) -> bool:
        return bool(self.children_by_id.get(node_id))


def build_adjacency(graph: Graph) -> Adjacency:
    return Adjacency.from_graph(graph)


def hidden_node_ids(
    node_ids: Iterable[str],
    adjacency: Adjacency,
    collapsed_ids: Collection[str],
) -> set[str]:
    """Ids (among ``node_ids``) that have a collapsed strict ancestor.

    Each node's result is memoized, so shared ancestor chains are walked
    once and the whole query is linear in nodes + edges.
    """
    collapsed = set(collapsed_ids)
    memo: dict[str, bool] = {}

    def is_hidden(node_id: str) -> bool:
        if node_id in memo:
            return memo[node_id]
        stack: list[tuple[str, bool]] = [(node_id, False)]
        on_path: set[str] = set()
        while stack:
            current, resolved = stack.pop()
            if current in memo:
                continue
            parents = adjacency.parents(current)
            if resolved:
                on_path.discard(current)
                memo[current] = any(p in collapsed or memo.get(p, False) for p in parents)
                continue
            on_path.add(current)
            stack.append((current, True))
            for parent in parents:
                # A parent already on the walk means a cycle; its verdict is
                # treated as "not hidden" unless it is itself collapsed.
                if parent not in memo and parent not in on_path:
                    stack.append((parent, False))
        return memo[node_id]

    return {node_id for node_id in node_ids if is_hidden(node_id)}


def visible_subgraph(
    full: Graph,
    collapsed_ids: Collection[str],
    collapse_enabled: bool = True,
    adjacency: Adjacency | None = None,
) -> Graph:
    """Subgraph of nodes without a collapsed ancestor.

    Args:
        full: Complete normalized graph
        collapsed_ids: Ids of collapsed nodes
        collapse_enabled: When False the full graph is returned as a copy
        adjacency: Pre-built index of ``full`` (built on demand if omitted)

    Returns:
        Graph with visible nodes, edges whose two endpoints are visible, and
        ``full``'s meta. Node and edge order are preserved.
    """
    if not collapse_enabled or not collapsed_ids:
        return replace(full)

    adjacency = adjacency or build_adjacency(full)
    hidden = hidden_node_ids(full.node_ids(), adjacency, collapsed_ids)
    nodes = [n for n in full.nodes if n.id not in hidden]
    visible = {n.id for n in nodes}
    edges = [e for e in full.edges if e.source in visible and e.target in visible]
    return replace(full, nodes=tuple(nodes), edges=tuple(edges))


def hidden_descendants(adjacency: Adjacency, node_id: str) -> list[str]:
    """Ids that collapsing ``node_id`` hides, in breadth-first order."""
    seen = {node_id}
    order: list[str] = []
    queue = deque(adjacency.children(node_id))
    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        order.append(current)
        queue.extend(adjacency.children(current))
    return order
