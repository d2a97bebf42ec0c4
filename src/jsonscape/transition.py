"""Frame-by-frame interpolation between two laid-out graphs.

Nodes are matched by id. A node that only exists in the end graph (newly
revealed) sits at its end box from the first frame instead of flying in.
Boxes are eased and rounded to whole pixels per frame; the final frame is
the end graph itself, so rounding never accumulates.

With an :class:`Anchor`, every frame also carries a viewport whose pan keeps
the anchor node's center on a fixed screen position.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, replace

from jsonscape.coordinates import Point, Viewport, lerp, round_px
from jsonscape.model import Edge, Graph, Node
from jsonscape.settings import positive_or

logger = logging.getLogger(__name__)

FRAME_MS = 1000 / 60


def ease_in_out(t: float) -> float:
    """Quadratic ease-in-out on [0, 1]."""
    if t < 0.5:
        return 2 * t * t
    return 1 - (-2 * t + 2) ** 2 / 2


@dataclass(frozen=True)
class Anchor:
    """Node whose center should stay on ``screen`` while the graph animates."""

    node_id: str
    screen: Point


@dataclass(frozen=True)
class Frame:
    """One renderable step of a transition.

    Attributes:
        graph: Interpolated graph
        viewport: Viewport to draw it with (re-panned when anchored)
        progress: Linear time fraction in [0, 1]
        done: True for the final frame, whose graph is the end graph
    """

    graph: Graph
    viewport: Viewport
    progress: float
    done: bool


def _mix(a: float | None, b: float | None, t: float) -> float | None:
    if b is None:
        return None
    if a is None:
        a = b
    return round_px(lerp(a, b, t))


def align_points(
    start: tuple[Point, ...],
    end: tuple[Point, ...],
) -> tuple[tuple[Point, ...], tuple[Point, ...]]:
    """Pad the shorter point list by repeating its last point.

    A side without points borrows the other side's points, which means
    "no motion".

    Example:
        >>> a, b = align_points((Point(0, 0), Point(1, 1)), (Point(0, 0), Point(2, 0), Point(2, 2)))
        >>> len(a) == len(b) == 3, a[-1]
        (True, Point(x=1, y=1))
    """
    if not start:
        start = end
    if not end:
        end = start
    length = max(len(start), len(end))
    start = start + (start[-1],) * (length - len(start)) if start else ()
    end = end + (end[-1],) * (length - len(end)) if end else ()
    return start, end


class Transition:
    """Interpolates ``start`` -> ``end`` over ``duration_ms``.

    Neither graph is modified; every frame is a new graph built from the
    end graph's nodes and edges.
    """

    def __init__(
        self,
        start: Graph,
        end: Graph,
        duration_ms: float,
        anchor: Anchor | None = None,
        viewport: Viewport | None = None,
    ) -> None:
        self.start = start
        self.end = end
        self.duration_ms = positive_or(duration_ms, 1.0)
        self.viewport = viewport or Viewport()
        self._start_nodes = start.node_by_id()
        self._start_edges = start.edge_by_id()

        if anchor is not None and end.get_node(anchor.node_id) is None:
            logger.debug("Anchor node %s is not in the end graph; anchoring disabled", anchor.node_id)
            anchor = None
        self.anchor = anchor

    def frame_at(self, elapsed_ms: float) -> Frame:
        """Frame for ``elapsed_ms`` since the transition began (clamped to [0, duration])."""
        raw = min(1.0, max(0.0, elapsed_ms / self.duration_ms))
        if raw >= 1.0:
            graph = self.end
        else:
            graph = self._blend(ease_in_out(raw))
        return Frame(graph=graph, viewport=self._viewport_for(graph), progress=raw, done=raw >= 1.0)

    def frames(self, frame_ms: float = FRAME_MS) -> Iterator[Frame]:
        """Frames on a fixed clock, starting one tick in and ending with the final frame."""
        frame_ms = positive_or(frame_ms, FRAME_MS)
        tick = 1
        while True:
            frame = self.frame_at(tick * frame_ms)
            yield frame
            if frame.done:
                return
            tick += 1

    def _blend(self, t: float) -> Graph:
        nodes = [self._blend_node(node, t) for node in self.end.nodes]
        edges = [self._blend_edge(edge, t) for edge in self.end.edges]
        return self.end.with_nodes(nodes).with_edges(edges)

    def _blend_node(self, end: Node, t: float) -> Node:
        start = self._start_nodes.get(end.id, end)
        return replace(
            end,
            x=_mix(start.x, end.x, t),
            y=_mix(start.y, end.y, t),
            width=_mix(start.width, end.width, t),
            height=_mix(start.height, end.height, t),
        )

    def _blend_edge(self, end: Edge, t: float) -> Edge:
        start = self._start_edges.get(end.id, end)
        a, b = align_points(start.points, end.points)
        if not end.points:
            return end
        return end.with_points(p.lerp(q, t) for p, q in zip(a, b))

    def _viewport_for(self, graph: Graph) -> Viewport:
        if self.anchor is None:
            return self.viewport
        node = graph.get_node(self.anchor.node_id)
        if node is None:
            return self.viewport
        return self.viewport.anchored(node.center, self.anchor.screen)


def interpolate(
    start: Graph,
    end: Graph,
    duration_ms: float,
    anchor: Anchor | None = None,
    *,
    frame_ms: float = FRAME_MS,
    viewport: Viewport | None = None,
) -> list[Frame]:
    """All frames of a transition sampled on a fixed ``frame_ms`` clock.

    The last frame's graph is ``end`` itself.
    """
    return list(Transition(start, end, duration_ms, anchor, viewport).frames(frame_ms))
