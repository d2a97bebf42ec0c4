"""Settings for normalization, layout and interaction.

Settings are frozen dataclasses split into two sections, mirroring how
they are consumed:

- ``LayoutSettings``: geometry of the tidy tree and edge style.
- ``DataSettings``: how JSON is turned into nodes, plus node sizing.

Numeric fields are never validated on construction. Every consumer reads
them through the clamping properties/helpers below, so a bad value ends up
as a safe default instead of as NaN coordinates.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

from jsonscape.coordinates import Size
from jsonscape.exceptions import SettingsError


class Direction(Enum):
    """Growth direction of the tree.

    Values:
        FORWARD: depth grows along x, siblings stack along y.
        DOWNWARD: depth grows along y, siblings stack along x.
    """

    FORWARD = "forward"
    DOWNWARD = "downward"


class Align(Enum):
    """Where a parent sits relative to its children on the secondary axis."""

    FIRST_CHILD = "firstChild"
    CENTER = "center"


class LinkStyle(Enum):
    """Edge routing family."""

    ORTHOGONAL = "orthogonal"
    CURVE = "curve"
    LINE = "line"


TENSION_MIN = 20.0
TENSION_MAX = 200.0

DEFAULT_NODE_SIZE = Size(256, 64)


def finite_or(value: Any, default: float) -> float:
    """Return ``value`` if it is a finite real number, else ``default``."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value if math.isfinite(value) else default


def positive_or(value: Any, default: float) -> float:
    """Return ``value`` if it is a positive finite number, else ``default``."""
    value = finite_or(value, default)
    return value if value > 0 else default


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class LayoutSettings:
    """Tidy-tree geometry and edge style.

    Attributes:
        direction: Growth direction
        align: Parent alignment against its children
        link_style: Edge routing family
        curve_tension: Control point offset for curves (clamped to 20..200)
        straight_threshold: Main-axis distance below which a curve is drawn straight
        column_gap: Gap between columns (depth levels when growing forward,
            siblings when growing downward)
        row_gap: Gap between rows (siblings when growing forward, depth
            levels when growing downward)
        margin: Offset of the first root on the secondary axis
    """

    direction: Direction = Direction.FORWARD
    align: Align = Align.FIRST_CHILD
    link_style: LinkStyle = LinkStyle.CURVE
    curve_tension: float = 30
    straight_threshold: float = 60
    column_gap: float = 64
    row_gap: float = 32
    margin: float = 40

    @property
    def is_forward(self) -> bool:
        return self.direction is Direction.FORWARD

    @property
    def pin_key(self) -> str:
        """Key of the pin map in ``Graph.meta`` for this direction."""
        return "pinY" if self.is_forward else "pinX"

    @property
    def level_gap(self) -> float:
        """Gap between consecutive depth levels on the main axis."""
        if self.is_forward:
            return positive_or(self.column_gap, LayoutSettings.column_gap)
        return positive_or(self.row_gap, LayoutSettings.row_gap)

    @property
    def sibling_gap(self) -> float:
        """Gap between consecutive subtrees on the secondary axis."""
        if self.is_forward:
            return positive_or(self.row_gap, LayoutSettings.row_gap)
        return positive_or(self.column_gap, LayoutSettings.column_gap)

    @property
    def safe_margin(self) -> float:
        margin = finite_or(self.margin, LayoutSettings.margin)
        return margin if margin >= 0 else LayoutSettings.margin

    @property
    def tension(self) -> float:
        return clamp(finite_or(self.curve_tension, LayoutSettings.curve_tension), TENSION_MIN, TENSION_MAX)

    @property
    def threshold(self) -> float:
        threshold = finite_or(self.straight_threshold, LayoutSettings.straight_threshold)
        return threshold if threshold >= 0 else LayoutSettings.straight_threshold


@dataclass(frozen=True)
class DataSettings:
    """JSON extraction rules and node sizing.

    Attributes:
        title_key_priority: Keys tried in order to title an entity
        hidden_keys: Keys never shown in preview attributes
        treat_scalar_arrays_as_attribute: Show scalar arrays as a joined attribute
        collapse_single_child_wrappers: Hop over scalar-less objects with a
            single object-bearing property without spending a depth level
        max_depth: Deepest level visited (root is 0); None means unlimited
        preview_max_keys: Cap on preview attributes per node
        title_placeholder: Title used when an entity has nothing to show
        accent_key: Key reserved for accent styling, hidden from previews
        image_key: Key reserved for an image URL, hidden from previews
        default_node_size: Size used before measurement and as fallback
        enable_collapse: Allow collapsing subtrees
        auto_resize: Run the measure/relayout settle loop
        padding_width: Extra width added to every measured size
        padding_height: Extra height added to every measured size
        max_card_width: Upper bound for measured widths (None = unbounded)
        max_card_height: Upper bound for measured heights (None = unbounded)
    """

    title_key_priority: tuple[str, ...] = ("name", "title", "id", "label")
    hidden_keys: tuple[str, ...] = ()
    treat_scalar_arrays_as_attribute: bool = True
    collapse_single_child_wrappers: bool = True
    max_depth: int | None = None
    preview_max_keys: int = 999
    title_placeholder: str = "Item"
    accent_key: str | None = None
    image_key: str | None = None
    default_node_size: Size = DEFAULT_NODE_SIZE
    enable_collapse: bool = True
    auto_resize: bool = True
    padding_width: float = 16
    padding_height: float = 0
    max_card_width: float | None = None
    max_card_height: float | None = None

    @property
    def node_size(self) -> Size:
        """Default node size with invalid dimensions replaced."""
        size = self.default_node_size
        return Size(
            positive_or(size.width, DEFAULT_NODE_SIZE.width),
            positive_or(size.height, DEFAULT_NODE_SIZE.height),
        )

    @property
    def reserved_keys(self) -> frozenset[str]:
        """Keys excluded from every preview (hidden, accent and image keys)."""
        keys = set(self.hidden_keys)
        for key in (self.accent_key, self.image_key):
            if key and key.strip():
                keys.add(key)
        return frozenset(keys)


@dataclass(frozen=True)
class Settings:
    """Complete configuration for a view.

    Attributes:
        layout: Layout section
        data: Data section
        transition_ms: Duration of collapse/expand and setting transitions
        max_settle_passes: Measure/relayout passes after a fresh compute
        max_relayout_passes: Measure/relayout passes after a toggle
    """

    layout: LayoutSettings = field(default_factory=LayoutSettings)
    data: DataSettings = field(default_factory=DataSettings)
    transition_ms: float = 260
    max_settle_passes: int = 6
    max_relayout_passes: int = 4

    def with_layout(self, **changes: Any) -> Settings:
        """Return a copy with layout fields replaced (enum values may be strings)."""
        converted = {key: _convert("layout", key, value) for key, value in changes.items()}
        _check_keys("layout", LayoutSettings, converted)
        return replace(self, layout=replace(self.layout, **converted))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> Settings:
        """Build settings from a plain mapping such as a TOML table.

        Sections ``layout`` and ``data`` are nested mappings; top-level scalar
        keys map onto ``Settings`` fields.

        Example:
            >>> s = Settings.from_mapping({"layout": {"direction": "downward"}})
            >>> s.layout.direction
            <Direction.DOWNWARD: 'downward'>
        """
        if not mapping:
            return cls()

        top: dict[str, Any] = {}
        for key, value in mapping.items():
            if key == "layout":
                section = _section("layout", LayoutSettings, value)
                top["layout"] = LayoutSettings(**section)
            elif key == "data":
                section = _section("data", DataSettings, value)
                top["data"] = DataSettings(**section)
            else:
                top[key] = value
        _check_keys("", cls, top)
        return cls(**top)


_ENUM_FIELDS: dict[str, type[Enum]] = {
    "direction": Direction,
    "align": Align,
    "link_style": LinkStyle,
}


def _section(name: str, cls: type, value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise SettingsError(name, value, f"Setting section '{name}' must be a table")
    converted = {key: _convert(name, key, item) for key, item in value.items()}
    _check_keys(name, cls, converted)
    return converted


def _check_keys(section: str, cls: type, values: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(cls)}
    for key in values:
        if key not in known:
            raise SettingsError(f"{section}.{key}" if section else key)


def _convert(section: str, key: str, value: Any) -> Any:
    dotted = f"{section}.{key}"
    enum_cls = _ENUM_FIELDS.get(key)
    if enum_cls is not None:
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(value)
        except ValueError:
            raise SettingsError(dotted, value) from None
    if key == "default_node_size":
        return _convert_size(dotted, value)
    if key in ("title_key_priority", "hidden_keys"):
        if isinstance(value, str):
            return (value,)
        return tuple(value)
    return value


def _convert_size(dotted: str, value: Any) -> Size:
    if isinstance(value, Size):
        return value
    if isinstance(value, Mapping) and {"width", "height"} <= set(value):
        return Size(value["width"], value["height"])
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return Size(value[0], value[1])
    raise SettingsError(dotted, value)
