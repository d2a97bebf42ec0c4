"""Tidy-tree layout growing forward (left to right) or downward.

The algorithm works on a forest and runs in two passes:

1. Measure, bottom-up: the *extent* of a subtree on the secondary axis is
   the node's own size for a leaf, or the sum of its children's extents
   plus a sibling gap between each pair.
2. Place, top-down: every depth level starts at the same main-axis offset
   (cumulative widest node of the previous levels plus a level gap).
   Children are stacked inside the span allotted to their parent, and the
   parent is centered on its first child or on the mean of its children.

Each node's secondary-axis center is also written into the pin map
(``meta["pinY"]`` or ``meta["pinX"]``), merged over the pins the input
graph already carried.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

import networkx as nx

from jsonscape.coordinates import Size, round_px
from jsonscape.model import Graph, Node
from jsonscape.settings import Align, LayoutSettings, Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Forest:
    """Spanning forest of a graph in breadth-first order.

    Attributes:
        roots: Root ids, in node order
        order: Every node id, each root followed by its BFS descendants
        children: Tree children per node, sorted by (child_order, id)
        depth: Depth per node (roots are 0)
    """

    roots: list[str]
    order: list[str]
    children: dict[str, list[str]]
    depth: dict[str, int]


def _sibling_key(node: Node) -> tuple[int, str]:
    order = node.meta.child_order
    return (order if order is not None else 0, node.id)


def build_forest(graph: Graph) -> Forest:
    """Pick roots and a single parent per node.

    Roots are nodes without an incoming edge. Nodes that cannot be reached
    from any root (only possible when the caller added a cycle) are promoted
    to roots in node order, so every node is placed exactly once.
    """
    G: nx.DiGraph = graph.to_networkx()
    by_id = graph.node_by_id()

    candidates = [n.id for n in graph.nodes if G.in_degree(n.id) == 0]
    candidates += [n.id for n in graph.nodes if G.in_degree(n.id) > 0]

    roots: list[str] = []
    order: list[str] = []
    children: dict[str, list[str]] = {n.id: [] for n in graph.nodes}
    depth: dict[str, int] = {}

    for root in candidates:
        if root in depth:
            continue
        roots.append(root)
        depth[root] = 0
        queue = deque([root])
        while queue:
            current = queue.popleft()
            order.append(current)
            successors = sorted((by_id[s] for s in G.successors(current)), key=_sibling_key)
            for child in successors:
                if child.id in depth:
                    continue
                depth[child.id] = depth[current] + 1
                children[current].append(child.id)
                queue.append(child.id)

    return Forest(roots=roots, order=order, children=children, depth=depth)


def _measure(forest: Forest, secondary: Callable[[str], float], gap: float) -> dict[str, float]:
    extent: dict[str, float] = {}
    for node_id in reversed(forest.order):
        kids = forest.children[node_id]
        if kids:
            extent[node_id] = sum(extent[k] for k in kids) + gap * (len(kids) - 1)
        else:
            extent[node_id] = secondary(node_id)
    return extent


def _span_starts(forest: Forest, extent: dict[str, float], margin: float, gap: float) -> dict[str, float]:
    start: dict[str, float] = {}
    cursor = margin
    for root in forest.roots:
        start[root] = cursor
        cursor += extent[root] + gap
    for node_id in forest.order:
        cursor = start[node_id]
        for kid in forest.children[node_id]:
            start[kid] = cursor
            cursor += extent[kid] + gap
    return start


class _Axes:
    """Maps width/height onto the main (depth) and secondary (sibling) axes."""

    def __init__(self, graph: Graph, opts: LayoutSettings, default_size: Size) -> None:
        self.forward = opts.is_forward
        self.sizes = {n.id: n.size_or(default_size) for n in graph.nodes}

    def main(self, node_id: str) -> float:
        size = self.sizes[node_id]
        return size.width if self.forward else size.height

    def secondary(self, node_id: str) -> float:
        size = self.sizes[node_id]
        return size.height if self.forward else size.width


def _settings_parts(settings: Settings | None) -> tuple[LayoutSettings, Size]:
    settings = settings or Settings()
    return settings.layout, settings.data.node_size


def layout(graph: Graph, settings: Settings | None = None) -> Graph:
    """Assign x, y (top-left, whole pixels) to every node of ``graph``.

    Node sizes are left untouched. A node without a valid width/height is
    measured with the default node size instead.

    Args:
        graph: Visible graph to position
        settings: Layout and default-size settings

    Returns:
        New graph with positioned nodes, the same edges, and an updated pin map
    """
    opts, default_size = _settings_parts(settings)
    axes = _Axes(graph, opts, default_size)
    forest = build_forest(graph)

    extent = _measure(forest, axes.secondary, opts.sibling_gap)
    start = _span_starts(forest, extent, opts.safe_margin, opts.sibling_gap)

    max_depth = max(forest.depth.values(), default=0)
    level_size = [1.0] * (max_depth + 1)
    for node_id, d in forest.depth.items():
        level_size[d] = max(level_size[d], axes.main(node_id))
    level_offset = [0.0] * (max_depth + 1)
    for d in range(1, max_depth + 1):
        level_offset[d] = level_offset[d - 1] + level_size[d - 1] + opts.level_gap

    # Centers are taken from the rounded child boxes so a parent lines up
    # with what is actually drawn.
    offset: dict[str, int] = {}
    center: dict[str, float] = {}
    for node_id in reversed(forest.order):
        kids = forest.children[node_id]
        if not kids:
            target = start[node_id] + extent[node_id] / 2
        elif opts.align is Align.FIRST_CHILD:
            target = center[kids[0]]
        else:
            target = sum(center[k] for k in kids) / len(kids)
        offset[node_id] = round_px(target - axes.secondary(node_id) / 2)
        center[node_id] = offset[node_id] + axes.secondary(node_id) / 2

    nodes = []
    for node in graph.nodes:
        main_pos = round_px(level_offset[forest.depth[node.id]])
        if axes.forward:
            nodes.append(node.moved(main_pos, offset[node.id]))
        else:
            nodes.append(node.moved(offset[node.id], main_pos))

    pins = dict(graph.pins(opts.pin_key))
    pins.update({node_id: round_px(c) for node_id, c in center.items()})

    logger.debug(
        "Laid out %d nodes: %d roots, %d levels",
        len(nodes),
        len(forest.roots),
        max_depth + 1 if nodes else 0,
    )
    return graph.with_nodes(nodes).with_meta(**{opts.pin_key: pins})


def subtree_spans(graph: Graph, settings: Settings | None = None) -> dict[str, tuple[float, float]]:
    """Secondary-axis span ``(start, end)`` allotted to each node's subtree."""
    opts, default_size = _settings_parts(settings)
    axes = _Axes(graph, opts, default_size)
    forest = build_forest(graph)
    extent = _measure(forest, axes.secondary, opts.sibling_gap)
    start = _span_starts(forest, extent, opts.safe_margin, opts.sibling_gap)
    return {node_id: (start[node_id], start[node_id] + extent[node_id]) for node_id in forest.order}
