"""Event processor base classes.

A processor is whatever consumes the view's output: a renderer painting
frames, a recorder for tests, a logger. Processors only observe; they never
change the graph they are handed.
"""

from __future__ import annotations

from jsonscape.events.types import Event, FrameEvent, LayoutEvent, TransitionEndEvent

# Handler method called by TypedEventProcessor for each event class.
_EVENT_METHOD_MAP: dict[type, str] = {
    LayoutEvent: "on_layout",
    FrameEvent: "on_frame",
    TransitionEndEvent: "on_transition_end",
}


class EventProcessor:
    """Base class for synchronous event consumers.

    Override ``on_event`` to see every event, or subclass
    ``TypedEventProcessor`` to get one method per event type.
    """

    def on_event(self, event: Event) -> None:
        """Called for every event."""

    def shutdown(self) -> None:
        """Called once when the view is closed."""


class AsyncEventProcessor(EventProcessor):
    """Processor whose handlers may await (e.g. a renderer waiting on paint).

    The dispatcher awaits ``on_event_async`` when emitting from the view.
    Both async methods default to their sync counterparts.
    """

    async def on_event_async(self, event: Event) -> None:
        self.on_event(event)

    async def shutdown_async(self) -> None:
        self.shutdown()


class TypedEventProcessor(EventProcessor):
    """Routes ``on_event`` to ``on_layout``, ``on_frame`` or ``on_transition_end``.

    Events of any other type are ignored.
    """

    def on_event(self, event: Event) -> None:
        method_name = _EVENT_METHOD_MAP.get(type(event))
        if method_name is not None:
            getattr(self, method_name)(event)

    def on_layout(self, event: LayoutEvent) -> None: ...
    def on_frame(self, event: FrameEvent) -> None: ...
    def on_transition_end(self, event: TransitionEndEvent) -> None: ...


class FrameRecorder(TypedEventProcessor):
    """Keeps every committed frame and layout pass, for headless use and tests."""

    def __init__(self) -> None:
        self.frames: list[FrameEvent] = []
        self.layouts: list[LayoutEvent] = []
        self.transitions: list[TransitionEndEvent] = []

    @property
    def latest(self) -> FrameEvent | None:
        """Most recent frame, or None before the first one."""
        return self.frames[-1] if self.frames else None

    def on_layout(self, event: LayoutEvent) -> None:
        self.layouts.append(event)

    def on_frame(self, event: FrameEvent) -> None:
        self.frames.append(event)

    def on_transition_end(self, event: TransitionEndEvent) -> None:
        self.transitions.append(event)

    def clear(self) -> None:
        self.frames.clear()
        self.layouts.clear()
        self.transitions.clear()
