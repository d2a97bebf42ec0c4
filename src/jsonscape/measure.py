"""Apply rendered node sizes reported by the rendering layer.

The renderer measures each painted node and reports ``{node_id: size}``.
Sizes are padded, rounded up to whole pixels and capped before being
written onto a new graph; the graph on screen is never modified.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Union

from jsonscape.coordinates import Size, is_positive_finite
from jsonscape.model import Graph
from jsonscape.settings import DataSettings, Settings, finite_or

SizeLike = Union[Size, tuple[float, float], Mapping[str, float]]


def as_size(value: SizeLike | Any) -> Size | None:
    """Coerce a reported size, returning None when it is unusable."""
    if isinstance(value, Size):
        size = value
    elif isinstance(value, Mapping):
        size = Size(value.get("width"), value.get("height"))
    elif isinstance(value, (tuple, list)) and len(value) == 2:
        size = Size(value[0], value[1])
    else:
        return None
    return size if size.is_valid else None


def _cap(value: float, limit: float | None) -> float:
    if is_positive_finite(limit):
        return min(value, limit)
    return value


def fit_size(observed: Size, settings: DataSettings) -> Size:
    """Padded, ceiled and capped size for an observed node box."""
    pad_w = max(0.0, finite_or(settings.padding_width, 0.0))
    pad_h = max(0.0, finite_or(settings.padding_height, 0.0))
    return Size(
        _cap(math.ceil(observed.width + pad_w), settings.max_card_width),
        _cap(math.ceil(observed.height + pad_h), settings.max_card_height),
    )


def apply_measurements(
    graph: Graph,
    sizes: Mapping[str, SizeLike],
    settings: Settings | None = None,
) -> tuple[Graph, bool]:
    """Write measured sizes onto a copy of ``graph``.

    Ids not in the graph and unusable sizes are ignored.

    Returns:
        ``(graph, changed)``; ``graph`` is the input itself when nothing changed
    """
    data_settings = (settings or Settings()).data
    nodes = []
    changed = False
    for node in graph.nodes:
        observed = as_size(sizes.get(node.id)) if node.id in sizes else None
        if observed is None:
            nodes.append(node)
            continue
        fitted = fit_size(observed, data_settings)
        if fitted.width != node.width or fitted.height != node.height:
            node = node.resized(fitted.width, fitted.height)
            changed = True
        nodes.append(node)

    if not changed:
        return graph, False
    return graph.with_nodes(nodes), True
