"""Stateful orchestration of the pipeline for one diagram.

``SchemaView`` owns the JSON value, the collapsed set, the cache of
measured node sizes and the latest committed frame. Everything it calls is
pure; the only suspension points are ``await clock.next_frame()`` in the
measurement settle loop and in the transition ticker.

Typical headless use::

    recorder = FrameRecorder()
    view = SchemaView(data, measure=my_measure, processors=[recorder])
    await view.compute()
    await view.toggle("$.items[0]")
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, Protocol, Union

from jsonscape.coordinates import Point, Size, Viewport, centered_viewport, fit_viewport
from jsonscape.events import (
    EventDispatcher,
    EventProcessor,
    FrameEvent,
    LayoutEvent,
    LayoutReason,
    TransitionEndEvent,
)
from jsonscape.exceptions import UnknownNodeError
from jsonscape.layout import layout
from jsonscape.measure import SizeLike, apply_measurements, as_size
from jsonscape.model import Graph
from jsonscape.normalize import normalize
from jsonscape.routing import route
from jsonscape.settings import Settings
from jsonscape.transition import FRAME_MS, Anchor, Transition
from jsonscape.visibility import Adjacency, build_adjacency, hidden_descendants, visible_subgraph

logger = logging.getLogger(__name__)

PIN_KEYS = ("pinX", "pinY")

Sizes = Mapping[str, SizeLike]
MeasureFn = Callable[[Graph], Union[Sizes, Awaitable[Sizes], None]]


# =============================================================================
# Frame clocks
# =============================================================================


class FrameClock(Protocol):
    """Source of animation frames."""

    async def next_frame(self) -> float:
        """Wait for the next frame and return its timestamp in milliseconds."""
        ...


class AsyncioFrameClock:
    """Real-time clock ticking ``fps`` times per second on the running loop."""

    def __init__(self, fps: float = 60) -> None:
        self.interval = 1.0 / fps if fps > 0 else FRAME_MS / 1000

    async def next_frame(self) -> float:
        await asyncio.sleep(self.interval)
        return asyncio.get_running_loop().time() * 1000


class StepClock:
    """Deterministic clock: every frame advances exactly ``frame_ms``.

    Still yields to the event loop once per frame, so other tasks (and
    cancellation) get a chance to run.
    """

    def __init__(self, frame_ms: float = FRAME_MS) -> None:
        self.frame_ms = frame_ms
        self.now = 0.0
        self.ticks = 0

    async def next_frame(self) -> float:
        await asyncio.sleep(0)
        self.ticks += 1
        self.now += self.frame_ms
        return self.now


# =============================================================================
# View
# =============================================================================


class SchemaView:
    """Lays out a JSON value and animates collapse/expand and setting changes.

    Args:
        data: JSON-compatible value to draw
        settings: View settings (defaults when omitted)
        measure: Called with the committed graph; returns ``{node_id: size}``
            for the nodes it could measure. May be a coroutine function.
        clock: Frame source (``AsyncioFrameClock`` when omitted)
        processors: Event processors receiving layout and frame events
        strict_events: Let processor exceptions propagate
    """

    def __init__(
        self,
        data: Any,
        settings: Settings | None = None,
        *,
        measure: MeasureFn | None = None,
        clock: FrameClock | None = None,
        processors: Iterable[EventProcessor] = (),
        strict_events: bool = False,
    ) -> None:
        self._data = data
        self.settings = settings or Settings()
        self._measure = measure
        self._clock: FrameClock = clock or AsyncioFrameClock()
        self._events = EventDispatcher(list(processors), strict=strict_events)

        self._full = Graph()
        self._adjacency: Adjacency = build_adjacency(self._full)
        self._collapsed: set[str] = set()
        self._observed: dict[str, Size] = {}
        self._graph = Graph()
        self._viewport = Viewport()
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        """Latest committed frame."""
        return self._graph

    @property
    def full_graph(self) -> Graph:
        return self._full

    @property
    def collapsed(self) -> frozenset[str]:
        return frozenset(self._collapsed)

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def busy(self) -> bool:
        """True while a relayout or transition task is running."""
        return self._task is not None and not self._task.done()

    def has_children(self, node_id: str) -> bool:
        return self._adjacency.has_children(node_id)

    def is_collapsed(self, node_id: str) -> bool:
        return node_id in self._collapsed

    def hidden_count(self, node_id: str) -> int:
        """Number of nodes a collapse of ``node_id`` hides (for badges)."""
        return len(hidden_descendants(self._adjacency, node_id))

    def screen_center(self, node_id: str) -> Point | None:
        """Screen position of a node's center in the latest frame (None if not drawn)."""
        node = self._graph.get_node(node_id)
        if node is None:
            return None
        return self._viewport.to_screen(node.center)

    def add_processor(self, processor: EventProcessor) -> None:
        self._events.add(processor)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def compute(self, data: Any = ...) -> Graph:
        """Normalize, lay out and settle the diagram from scratch.

        Passing ``data`` replaces the value being drawn. Cancels any
        running transition; collapsed ids that no longer exist are dropped.

        Returns:
            The settled graph
        """
        self._cancel_inflight()
        if data is not ...:
            self._data = data
            self._observed.clear()

        pin_key = self.settings.layout.pin_key
        full = normalize(self._data, self.settings)
        # Pins of nodes that survive a recompute are kept.
        alive = set(full.node_ids())
        pins = {node_id: pin for node_id, pin in self._full.pins(pin_key).items() if node_id in alive}
        self._full = full.with_meta(**{pin_key: pins})
        self._adjacency = build_adjacency(self._full)

        if not self.settings.data.enable_collapse:
            self._collapsed.clear()
        else:
            self._collapsed &= set(self._adjacency.children_by_id)

        graph = await self._position(self._sized_visible(), LayoutReason.COMPUTE, 0)
        await self._commit(graph)
        return await self._settle(graph, self.settings.max_settle_passes)

    def toggle(self, node_id: str, anchor_screen: Point | None = None) -> asyncio.Task | None:
        """Collapse or expand ``node_id`` with an animated relayout.

        Must be called from a running event loop. Any in-flight relayout or
        transition is cancelled and the new one starts from the latest
        committed frame.

        Args:
            node_id: Node to flip
            anchor_screen: Screen point the node should stay on while the
                graph moves (defaults to its current screen center)

        Returns:
            The animation task, or None when collapsing is disabled

        Raises:
            UnknownNodeError: If ``node_id`` is not in the full graph
        """
        if node_id not in self._adjacency.children_by_id:
            raise UnknownNodeError(node_id)
        if not self.settings.data.enable_collapse:
            logger.debug("Collapse is disabled; ignoring toggle of %s", node_id)
            return None

        if node_id in self._collapsed:
            self._collapsed.discard(node_id)
        else:
            self._collapsed.add(node_id)

        screen = anchor_screen or self.screen_center(node_id)
        anchor = Anchor(node_id, screen) if screen is not None else None
        return self._start(self._relayout(anchor))

    def set_layout(self, **changes: Any) -> asyncio.Task:
        """Change layout settings at runtime and animate to the new layout.

        Example:
            ``view.set_layout(direction="downward", link_style="orthogonal")``

        Raises:
            SettingsError: For unknown keys or invalid enum values
        """
        self.settings = self.settings.with_layout(**changes)
        return self._start(self._relayout(None))

    async def fit(self, screen: Size, padding: float = 24) -> Viewport:
        """Frame the whole graph on a ``screen`` sized area."""
        bounds = self._graph.bounds(self.settings.data.node_size)
        if bounds is not None:
            await self._commit(self._graph, fit_viewport(bounds, screen, padding))
        return self._viewport

    async def center_on(self, node_id: str, screen: Size) -> Viewport:
        """Pan (keeping the zoom) so ``node_id`` sits in the middle of the screen."""
        node = self._graph.get_node(node_id)
        if node is None:
            raise UnknownNodeError(node_id, f"Node '{node_id}' is not drawn")
        viewport = centered_viewport(node.center, screen, self._viewport.scale)
        await self._commit(self._graph, viewport)
        return self._viewport

    async def close(self) -> None:
        """Cancel any running animation and shut down event processors."""
        task = self._task
        self._cancel_inflight()
        if task is not None:
            # Let the cancelled task unwind before processors are shut down.
            await asyncio.gather(task, return_exceptions=True)
        await self._events.shutdown_async()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start(self, coro: Awaitable[Graph]) -> asyncio.Task:
        self._cancel_inflight()
        self._task = asyncio.ensure_future(coro)
        return self._task

    def _cancel_inflight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _sized_visible(self) -> Graph:
        """Visible subgraph with every cached measurement applied."""
        visible = visible_subgraph(
            self._full,
            self._collapsed,
            self.settings.data.enable_collapse,
            self._adjacency,
        )
        sized, _ = apply_measurements(visible, self._observed, self.settings)
        return sized

    async def _position(self, graph: Graph, reason: LayoutReason, pass_index: int) -> Graph:
        pin_key = self.settings.layout.pin_key
        # Only the pin map of the current direction is kept.
        inactive = [key for key in PIN_KEYS if key != pin_key]
        positioned = route(layout(graph.without_meta(*inactive), self.settings), self.settings)
        self._full = self._full.without_meta(*inactive).with_meta(**{pin_key: dict(positioned.pins(pin_key))})
        await self._events.emit_async(LayoutEvent(graph=positioned, reason=reason, pass_index=pass_index))
        return positioned

    async def _commit(self, graph: Graph, viewport: Viewport | None = None, progress: float = 1.0) -> None:
        self._graph = graph
        if viewport is not None:
            self._viewport = viewport
        await self._events.emit_async(FrameEvent(graph=graph, viewport=self._viewport, progress=progress))

    async def _measure_sizes(self, graph: Graph) -> bool:
        """Ask the renderer for sizes; returns True if any cached size changed."""
        reported = self._measure(graph)
        if inspect.isawaitable(reported):
            reported = await reported
        updated = False
        for node_id, value in (reported or {}).items():
            size = as_size(value)
            if size is not None and self._observed.get(node_id) != size:
                self._observed[node_id] = size
                updated = True
        return updated

    async def _settle(self, graph: Graph, max_passes: int) -> Graph:
        """Measure, resize and relayout until sizes stop changing."""
        if self._measure is None or not self.settings.data.auto_resize:
            return graph

        for pass_index in range(1, max_passes + 1):
            await self._clock.next_frame()
            await self._measure_sizes(graph)
            resized, changed = apply_measurements(graph, self._observed, self.settings)
            if not changed:
                return graph
            graph = await self._position(resized, LayoutReason.MEASURE, pass_index)
            await self._commit(graph)

        logger.warning(
            "Node sizes still changing after %d measurement passes; keeping the last layout",
            max_passes,
        )
        return graph

    async def _relayout(self, anchor: Anchor | None) -> Graph:
        target = await self._position(self._sized_visible(), LayoutReason.RELAYOUT, 0)
        await self._animate(self._graph, target, anchor)
        return await self._settle(target, self.settings.max_relayout_passes)

    async def _animate(self, start: Graph, end: Graph, anchor: Anchor | None) -> None:
        transition = Transition(start, end, self.settings.transition_ms, anchor, self._viewport)
        try:
            began = await self._clock.next_frame()
            while True:
                now = await self._clock.next_frame()
                frame = transition.frame_at(now - began)
                await self._commit(frame.graph, frame.viewport, frame.progress)
                if frame.done:
                    break
        except asyncio.CancelledError:
            self._events.emit(TransitionEndEvent(graph=self._graph, cancelled=True))
            raise
        await self._events.emit_async(TransitionEndEvent(graph=self._graph))
