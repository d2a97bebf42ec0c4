"""jsonscape - Turn arbitrary JSON into positioned node-link diagrams."""

from jsonscape.coordinates import Bounds, Point, Size, Viewport
from jsonscape.events import (
    AsyncEventProcessor,
    BaseEvent,
    Event,
    EventDispatcher,
    EventProcessor,
    FrameEvent,
    FrameRecorder,
    LayoutEvent,
    LayoutReason,
    TransitionEndEvent,
    TypedEventProcessor,
)
from jsonscape.exceptions import SettingsError, UnknownNodeError
from jsonscape.layout import layout, subtree_spans
from jsonscape.measure import apply_measurements
from jsonscape.model import Edge, Graph, Node, NodeMeta
from jsonscape.normalize import classify, normalize
from jsonscape.routing import curve_control_points, path_data, route
from jsonscape.settings import (
    Align,
    DataSettings,
    Direction,
    LayoutSettings,
    LinkStyle,
    Settings,
)
from jsonscape.transition import Anchor, Frame, Transition, interpolate
from jsonscape.view import AsyncioFrameClock, FrameClock, SchemaView, StepClock
from jsonscape.visibility import Adjacency, build_adjacency, hidden_descendants, visible_subgraph

__all__ = [
    # Pipeline
    "normalize",
    "classify",
    "visible_subgraph",
    "build_adjacency",
    "hidden_descendants",
    "Adjacency",
    "layout",
    "subtree_spans",
    "route",
    "curve_control_points",
    "path_data",
    "apply_measurements",
    # Transitions
    "Anchor",
    "Frame",
    "Transition",
    "interpolate",
    # Orchestration
    "SchemaView",
    "FrameClock",
    "AsyncioFrameClock",
    "StepClock",
    # Model
    "Graph",
    "Node",
    "NodeMeta",
    "Edge",
    "Point",
    "Size",
    "Bounds",
    "Viewport",
    # Settings
    "Settings",
    "LayoutSettings",
    "DataSettings",
    "Direction",
    "Align",
    "LinkStyle",
    # Events
    "AsyncEventProcessor",
    "BaseEvent",
    "Event",
    "EventDispatcher",
    "EventProcessor",
    "FrameEvent",
    "FrameRecorder",
    "LayoutEvent",
    "LayoutReason",
    "TransitionEndEvent",
    "TypedEventProcessor",
    # Exceptions
    "SettingsError",
    "UnknownNodeError",
]
