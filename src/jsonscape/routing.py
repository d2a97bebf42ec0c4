"""Edge routing: the point sequence that draws each parent -> child edge.

Edges leave the source on its trailing side (the side facing the growth
direction) and enter the target on its leading side, both at mid-height
(forward) or mid-width (downward).

- ``orthogonal``: four points, bending halfway across the level gap.
- ``line`` and ``curve``: the two anchors only. For curves the renderer
  derives the cubic control points with :func:`curve_control_points`
  (or gets a ready-made path from :func:`path_data`).
"""

from __future__ import annotations

import logging

from jsonscape.coordinates import Point, Size
from jsonscape.model import Edge, Graph, Node
from jsonscape.settings import LayoutSettings, LinkStyle, Settings, clamp

logger = logging.getLogger(__name__)

BOW_MIN = 8.0
BOW_MAX = 96.0


def trailing_anchor(node: Node, size: Size, forward: bool) -> Point:
    """Where outgoing edges start."""
    x, y = node.x or 0, node.y or 0
    if forward:
        return Point(x + size.width, y + size.height / 2)
    return Point(x + size.width / 2, y + size.height)


def leading_anchor(node: Node, size: Size, forward: bool) -> Point:
    """Where incoming edges end."""
    x, y = node.x or 0, node.y or 0
    if forward:
        return Point(x, y + size.height / 2)
    return Point(x + size.width / 2, y)


def edge_points(a: Point, b: Point, opts: LayoutSettings) -> tuple[Point, ...]:
    """Points between two anchors for the configured link style."""
    if opts.link_style is not LinkStyle.ORTHOGONAL:
        return (a, b)
    if opts.is_forward:
        mid = (a.x + b.x) / 2
        return (a, Point(mid, a.y), Point(mid, b.y), b)
    mid = (a.y + b.y) / 2
    return (a, Point(a.x, mid), Point(b.x, mid), b)


def route(graph: Graph, settings: Settings | None = None) -> Graph:
    """Fill ``points`` on every edge of a laid-out graph.

    An edge whose source or target is not in ``graph`` keeps an empty point
    tuple instead of raising.
    """
    settings = settings or Settings()
    opts = settings.layout
    default_size = settings.data.node_size
    by_id = graph.node_by_id()

    edges: list[Edge] = []
    dangling = 0
    for edge in graph.edges:
        source = by_id.get(edge.source)
        target = by_id.get(edge.target)
        if source is None or target is None:
            dangling += 1
            edges.append(edge.with_points(()))
            continue
        a = trailing_anchor(source, source.size_or(default_size), opts.is_forward)
        b = leading_anchor(target, target.size_or(default_size), opts.is_forward)
        edges.append(edge.with_points(edge_points(a, b, opts)))

    if dangling:
        logger.debug("Skipped %d edges with a missing endpoint", dangling)
    return graph.with_edges(edges)


def curve_control_points(a: Point, b: Point, opts: LayoutSettings) -> tuple[Point, Point] | None:
    """Cubic Bezier control points between two anchors, or None for a straight segment.

    Controls sit ``tension`` pixels from each anchor along the main axis,
    pointing at each other. When the anchors are level on the secondary
    axis (less than 1px apart) the controls are pushed apart by a bow of
    half the tension (8..96px) so the curve does not degenerate into a line.
    Anchors closer than ``straight_threshold`` on the main axis are joined
    straight.
    """
    forward = opts.is_forward
    main_delta = (b.x - a.x) if forward else (b.y - a.y)
    if abs(main_delta) < opts.threshold:
        return None

    tension = opts.tension
    sign = -1 if main_delta < 0 else 1
    secondary_delta = (b.y - a.y) if forward else (b.x - a.x)
    bow = clamp(tension * 0.5, BOW_MIN, BOW_MAX) if abs(secondary_delta) < 1 else 0.0

    if forward:
        return (
            Point(a.x + sign * tension, a.y - bow),
            Point(b.x - sign * tension, b.y + bow),
        )
    return (
        Point(a.x - bow, a.y + sign * tension),
        Point(b.x + bow, b.y - sign * tension),
    )


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _xy(p: Point) -> str:
    return f"{_fmt(p.x)},{_fmt(p.y)}"


def path_data(points: tuple[Point, ...] | list[Point], settings: Settings | LayoutSettings | None = None) -> str:
    """SVG path ``d`` attribute for routed points under the given link style.

    Example:
        >>> path_data((Point(0, 0), Point(10, 5)), LayoutSettings(link_style=LinkStyle.LINE))
        'M 0,0 L 10,5'
    """
    if isinstance(settings, Settings):
        opts = settings.layout
    else:
        opts = settings or LayoutSettings()

    if not points:
        return ""
    first, last = points[0], points[-1]

    if opts.link_style is LinkStyle.LINE:
        return f"M {_xy(first)} L {_xy(last)}"

    if opts.link_style is LinkStyle.CURVE:
        controls = curve_control_points(first, last, opts)
        if controls is None:
            return f"M {_xy(first)} L {_xy(last)}"
        c1, c2 = controls
        return f"M {_xy(first)} C {_xy(c1)} {_xy(c2)} {_xy(last)}"

    return " ".join([f"M {_xy(first)}", *(f"L {_xy(p)}" for p in points[1:])])
