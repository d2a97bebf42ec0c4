"""Event types emitted while a view lays out and animates."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

from jsonscape.coordinates import Viewport
from jsonscape.model import Graph


class LayoutReason(Enum):
    """Why a layout pass ran.

    Values:
        COMPUTE: Fresh normalize + layout of new data or settings.
        MEASURE: Relayout after measured sizes changed.
        RELAYOUT: Relayout of the visible graph after a toggle or setting change.
    """

    COMPUTE = "compute"
    MEASURE = "measure"
    RELAYOUT = "relayout"


def _now() -> float:
    """Current timestamp."""
    return time.time()


@dataclass(frozen=True)
class BaseEvent:
    """Base class for all view events.

    Attributes:
        timestamp: Unix timestamp when the event was created.
    """

    timestamp: float = field(default_factory=_now, kw_only=True)


@dataclass(frozen=True)
class LayoutEvent(BaseEvent):
    """Emitted after each layout + routing pass.

    Attributes:
        graph: The positioned, routed graph.
        reason: What triggered the pass.
        pass_index: 0 for the initial pass, then 1.. for measurement passes.
    """

    graph: Graph
    reason: LayoutReason = LayoutReason.COMPUTE
    pass_index: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.reason, str):
            object.__setattr__(self, "reason", LayoutReason(self.reason))


@dataclass(frozen=True)
class FrameEvent(BaseEvent):
    """Emitted whenever a new graph should be painted.

    Attributes:
        graph: Graph to draw.
        viewport: Viewport to draw it with.
        progress: Transition progress in [0, 1] (1 outside transitions).
    """

    graph: Graph
    viewport: Viewport
    progress: float = 1.0


@dataclass(frozen=True)
class TransitionEndEvent(BaseEvent):
    """Emitted when a transition finishes or is superseded.

    Attributes:
        graph: Last graph painted by the transition.
        cancelled: True when a newer transition took over.
    """

    graph: Graph
    cancelled: bool = False


Event = LayoutEvent | FrameEvent | TransitionEndEvent
