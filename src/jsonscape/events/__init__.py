"""Event system for observing layout passes and animation frames."""

from jsonscape.events.dispatcher import EventDispatcher
from jsonscape.events.processor import (
    AsyncEventProcessor,
    EventProcessor,
    FrameRecorder,
    TypedEventProcessor,
)
from jsonscape.events.types import (
    BaseEvent,
    Event,
    FrameEvent,
    LayoutEvent,
    LayoutReason,
    TransitionEndEvent,
)

__all__ = [
    # Event types
    "BaseEvent",
    "Event",
    "FrameEvent",
    "LayoutEvent",
    "LayoutReason",
    "TransitionEndEvent",
    # Processor interfaces
    "AsyncEventProcessor",
    "EventProcessor",
    "FrameRecorder",
    "TypedEventProcessor",
    # Dispatcher
    "EventDispatcher",
]
