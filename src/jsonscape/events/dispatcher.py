"""Fan-out of view events to registered processors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jsonscape.events.processor import AsyncEventProcessor, EventProcessor

if TYPE_CHECKING:
    from jsonscape.events.types import Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Delivers every event to each processor in registration order.

    Delivery is best-effort: a processor that raises is logged and the
    remaining processors still see the event. Frame events arrive once per
    animation tick, so only the first failure of a processor is logged as a
    warning; repeats go to debug. With ``strict=True`` exceptions propagate.
    """

    def __init__(
        self,
        processors: list[EventProcessor] | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self._processors: list[EventProcessor] = list(processors or ())
        self._strict = strict
        self._failing: set[int] = set()

    @property
    def active(self) -> bool:
        """True if there is at least one registered processor."""
        return bool(self._processors)

    @property
    def processors(self) -> tuple[EventProcessor, ...]:
        return tuple(self._processors)

    def add(self, processor: EventProcessor) -> None:
        self._processors.append(processor)

    def remove(self, processor: EventProcessor) -> None:
        """Unregister ``processor``; unknown processors are ignored."""
        if processor in self._processors:
            self._processors.remove(processor)
            self._failing.discard(id(processor))

    def emit(self, event: Event) -> None:
        """Deliver ``event`` synchronously (async processors get ``on_event``)."""
        for processor in self._processors:
            try:
                processor.on_event(event)
            except Exception:
                self._failed(processor, f"on {type(event).__name__}")

    async def emit_async(self, event: Event) -> None:
        """Deliver ``event``, awaiting ``on_event_async`` where a processor has it."""
        for processor in self._processors:
            try:
                if isinstance(processor, AsyncEventProcessor):
                    await processor.on_event_async(event)
                else:
                    processor.on_event(event)
            except Exception:
                self._failed(processor, f"on {type(event).__name__}")

    def shutdown(self) -> None:
        for processor in self._processors:
            try:
                processor.shutdown()
            except Exception:
                self._failed(processor, "during shutdown", always_warn=True)

    async def shutdown_async(self) -> None:
        for processor in self._processors:
            try:
                if isinstance(processor, AsyncEventProcessor):
                    await processor.shutdown_async()
                else:
                    processor.shutdown()
            except Exception:
                self._failed(processor, "during shutdown", always_warn=True)

    def _failed(self, processor: EventProcessor, where: str, always_warn: bool = False) -> None:
        """Handle a processor exception; must be called from an ``except`` block."""
        if self._strict:
            raise
        first = id(processor) not in self._failing
        self._failing.add(id(processor))
        level = logging.WARNING if first or always_warn else logging.DEBUG
        logger.log(level, "EventProcessor %s failed %s", processor, where, exc_info=True)
