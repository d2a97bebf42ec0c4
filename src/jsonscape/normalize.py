"""Turn an arbitrary JSON value into a graph of entity nodes.

Rules:

- An object with at least one scalar property is an *entity* and becomes a
  node whose id is its JSON path (``$``, ``$.items[0].owner``, ...).
- Arrays never become nodes. Their elements are visited on indexed paths
  and attach to the nearest entity above them.
- Objects without scalar properties are transparent in the same way.
  Single-child wrappers (``{"data": {"items": [...]}}``) are additionally
  hopped over without spending a depth level.
- Non-empty arrays of scalars can be shown as one joined attribute of the
  owning entity instead of being visited.

Traversal is depth-first with an explicit stack, so deeply nested input
cannot exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Union

from jsonscape.model import Edge, Graph, Node, NodeMeta
from jsonscape.settings import DataSettings, Settings

logger = logging.getLogger(__name__)

# Applied when max_depth is None; input deeper than this is truncated.
SAFETY_MAX_DEPTH = 512

ROOT_PATH = "$"


# =============================================================================
# Value classification
# =============================================================================


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class Entity:
    record: Mapping[str, Any]


@dataclass(frozen=True)
class Container:
    """An array, or an object without scalar properties."""

    value: Any

    @property
    def is_array(self) -> bool:
        return isinstance(self.value, (list, tuple))


JsonValue = Union[Scalar, Entity, Container]


def is_scalar(value: Any) -> bool:
    """Anything that is neither an object nor an array is a scalar."""
    return not isinstance(value, (Mapping, list, tuple))


def is_scalar_array(value: Any) -> bool:
    """True for a non-empty array made only of scalars."""
    return isinstance(value, (list, tuple)) and len(value) > 0 and all(is_scalar(v) for v in value)


def classify(value: Any) -> JsonValue:
    """Tag a JSON value once so the traversal never re-inspects its type.

    Example:
        >>> classify({"name": "a"})
        Entity(record={'name': 'a'})
        >>> classify({"child": {"name": "a"}}).__class__.__name__
        'Container'
    """
    if isinstance(value, Mapping):
        if any(is_scalar(v) for v in value.values()):
            return Entity(value)
        return Container(value)
    if isinstance(value, (list, tuple)):
        return Container(value)
    return Scalar(value)


def _is_object_bearing(value: Any) -> bool:
    """True if an object sits in ``value`` itself or anywhere down nested arrays."""
    pending = [value]
    while pending:
        item = pending.pop()
        if isinstance(item, Mapping):
            return True
        if isinstance(item, (list, tuple)):
            pending.extend(item)
    return False


def single_child_key(record: Mapping[str, Any]) -> str | None:
    """Key of the only object-bearing property of a scalar-free object.

    Returns None when the object has scalars, or zero or several
    object-bearing properties (i.e. it is not a single-child wrapper).
    """
    found: str | None = None
    for key, value in record.items():
        if is_scalar(value):
            return None
        if _is_object_bearing(value):
            if found is not None:
                return None
            found = key
    return found


def is_single_child_wrapper(value: Any) -> bool:
    return isinstance(value, Mapping) and single_child_key(value) is not None


# =============================================================================
# Titles and previews
# =============================================================================


def scalar_text(value: Any) -> str:
    """Text form of a scalar as JSON would print it.

    Example:
        >>> [scalar_text(v) for v in (True, None, 2.0, 2.5, "x")]
        ['true', 'null', '2', '2.5', 'x']
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def pick_title(
    record: Mapping[str, Any],
    priorities: tuple[str, ...],
    placeholder: str,
) -> tuple[str, str | None]:
    """Choose ``(title, key_used)`` for an entity.

    Priority keys win; otherwise the first non-null scalar with non-blank
    text; otherwise the placeholder (with no key).
    """
    for key in priorities:
        value = record.get(key)
        if value is not None and is_scalar(value):
            text = scalar_text(value)
            if text.strip():
                return text, key
    for key, value in record.items():
        if value is not None and is_scalar(value):
            text = scalar_text(value)
            if text.strip():
                return text, key
    return placeholder, None


def preview_attributes(
    record: Mapping[str, Any],
    title_key: str | None,
    settings: DataSettings,
) -> dict[str, Any]:
    """Scalar (and joined scalar-array) properties shown on a node's card."""
    hidden = settings.reserved_keys
    limit = settings.preview_max_keys
    limit = limit if isinstance(limit, int) and limit >= 0 else DataSettings.preview_max_keys

    out: dict[str, Any] = {}
    for key, value in record.items():
        if len(out) >= limit:
            break
        if key in hidden or key == title_key:
            continue
        if is_scalar(value):
            out[key] = value
        elif settings.treat_scalar_arrays_as_attribute and is_scalar_array(value):
            out[key] = ", ".join(scalar_text(v) for v in value)
    return out


def array_counts(record: Mapping[str, Any]) -> dict[str, int]:
    return {
        key: len(value)
        for key, value in record.items()
        if isinstance(value, (list, tuple)) and not is_scalar_array(value)
    }


# =============================================================================
# Traversal
# =============================================================================


@dataclass(frozen=True)
class _Visit:
    value: Any
    path: str
    parent_id: str | None
    depth: int


class _Builder:
    """Accumulates nodes/edges and per-parent sibling counters."""

    def __init__(self, settings: DataSettings) -> None:
        self.settings = settings
        self.nodes: list[Node] = []
        self.edges: list[Edge] = []
        self._next_order: dict[str, int] = {}

    def add(self, path: str, record: Mapping[str, Any], parent_id: str | None) -> str:
        title, key_used = pick_title(
            record,
            tuple(self.settings.title_key_priority),
            self.settings.title_placeholder,
        )
        child_order = None
        if parent_id is not None:
            child_order = self._next_order.get(parent_id, 0)
            self._next_order[parent_id] = child_order + 1

        size = self.settings.node_size
        self.nodes.append(
            Node(
                id=path,
                label=title,
                json_path=path,
                data=record,
                meta=NodeMeta(
                    title=title,
                    title_key_used=key_used,
                    attributes=preview_attributes(record, key_used, self.settings),
                    array_counts=array_counts(record),
                    child_order=child_order,
                ),
                width=size.width,
                height=size.height,
            )
        )
        if parent_id is not None:
            self.edges.append(Edge.between(parent_id, path))
        return path

    def finish(self) -> Graph:
        counts = self._next_order
        nodes = [
            replace(n, meta=replace(n.meta, children_count=counts.get(n.id, 0)))
            for n in self.nodes
        ]
        return Graph(nodes=nodes, edges=self.edges)


def normalize(value: Any, settings: Settings | DataSettings | None = None) -> Graph:
    """Convert a JSON value into a graph of entity nodes and parent edges.

    Args:
        value: Any JSON-compatible value (dict/list/scalars)
        settings: Full settings or just the data section

    Returns:
        Graph whose node ids are JSON paths; meta is empty
    """
    if settings is None:
        data_settings = DataSettings()
    elif isinstance(settings, Settings):
        data_settings = settings.data
    else:
        data_settings = settings

    max_depth = data_settings.max_depth
    limit = max_depth if max_depth is not None else SAFETY_MAX_DEPTH
    truncated = False

    builder = _Builder(data_settings)
    stack = [_Visit(value, ROOT_PATH, None, 0)]

    while stack:
        visit = stack.pop()
        if visit.depth > limit:
            truncated = truncated or max_depth is None
            continue

        kind = classify(visit.value)
        if isinstance(kind, Scalar):
            continue

        children: list[_Visit] = []
        if isinstance(kind, Container) and kind.is_array:
            children = [
                _Visit(item, f"{visit.path}[{i}]", visit.parent_id, visit.depth + 1)
                for i, item in enumerate(kind.value)
            ]
        else:
            record = kind.record if isinstance(kind, Entity) else kind.value
            hop = (
                single_child_key(record)
                if isinstance(kind, Container) and data_settings.collapse_single_child_wrappers
                else None
            )
            if hop is not None:
                children = [_Visit(record[hop], f"{visit.path}.{hop}", visit.parent_id, visit.depth)]
            else:
                owner = visit.parent_id
                if isinstance(kind, Entity):
                    owner = builder.add(visit.path, record, visit.parent_id)
                children = list(_object_children(record, visit, owner, data_settings))

        stack.extend(reversed(children))

    if truncated:
        logger.warning(
            "JSON nesting exceeds %d levels; deeper values were not visited",
            SAFETY_MAX_DEPTH,
        )

    graph = builder.finish()
    logger.debug("Normalized %d nodes and %d edges", len(graph.nodes), len(graph.edges))
    return graph


def _object_children(
    record: Mapping[str, Any],
    visit: _Visit,
    owner: str | None,
    settings: DataSettings,
):
    depth = visit.depth + 1
    for key, value in record.items():
        if is_scalar(value):
            continue
        path = f"{visit.path}.{key}"
        if isinstance(value, (list, tuple)):
            if settings.treat_scalar_arrays_as_attribute and is_scalar_array(value):
                continue
            for i, item in enumerate(value):
                yield _Visit(item, f"{path}[{i}]", owner, depth)
        else:
            yield _Visit(value, path, owner, depth)
