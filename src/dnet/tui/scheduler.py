"""The event loop: input, tick and draw on a fixed cadence.

Each cycle of :class:`Scheduler` runs, in this order and never reordered:

1. a poll of the input source bounded by the time left to the next tick
   boundary, and dispatch of a key event to the focused window;
2. ``tick`` on every window if a tick boundary passed;
3. ``draw`` on every window, composed into one frame that is presented
   exactly once.

A quit request moves the loop to ``SHUTTING_DOWN``; it is acted on at the
top of the next cycle, where window cleanup runs and the loop terminates
without presenting again.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Mapping

from dnet.tui.errors import BackendUnavailable, TransientInputError
from dnet.tui.keys import InputEvent, KeyEvent, ResizeEvent
from dnet.tui.layout import Frame, Split
from dnet.tui.state import AppState
from dnet.tui.terminal import InputSource, RenderBackend
from dnet.tui.window import Dispatcher, FocusChange, Quit, Window

__all__ = ["SchedulerState", "Scheduler", "DEFAULT_TICK_INTERVAL_MS"]

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 250


class SchedulerState(enum.Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"


class Scheduler:
    """Single-threaded driver of an :class:`AppState`.

    *windows* must be in composition order; ``tick`` and ``draw`` are called
    in that order every time.  *clock* and *sleep* are injectable so tests
    can run the loop on logical time.
    """

    def __init__(
        self,
        app_state: AppState,
        windows: Mapping[str, Window],
        layout: Split,
        backend: RenderBackend,
        input_source: InputSource,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        strict: bool = False,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        layout.validate(windows)

        self.app_state = app_state
        self.layout = layout
        self.backend = backend
        self.input_source = input_source
        self.tick_interval_ms = tick_interval_ms
        self.dispatcher = Dispatcher(app_state, windows, tick_interval_ms, strict=strict)
        self._order: tuple[str, ...] = tuple(windows)
        self._interval = tick_interval_ms / 1000.0
        self._clock = clock
        self._sleep = sleep
        self._next_tick: float | None = None
        self._full_repaint = True

        self.state = SchedulerState.RUNNING
        self.cycles = 0
        self.presentations = 0
        self.input_errors = 0
        self.last_frame: list[str] = []

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Cycle until ``TERMINATED``.  Fatal faults propagate."""
        logger.info(
            "scheduler running: %d windows, tick %d ms, focus '%s'",
            len(self._order), self.tick_interval_ms, self.app_state.focused_window,
        )
        while self.state is not SchedulerState.TERMINATED:
            self.step()
        logger.info("scheduler terminated after %d cycles", self.cycles)

    def step(self) -> SchedulerState:
        """Run one cycle and return the resulting state."""
        if self.state is SchedulerState.TERMINATED:
            raise RuntimeError("scheduler has terminated")
        try:
            if self.state is SchedulerState.SHUTTING_DOWN:
                self._shutdown()
            else:
                self._cycle()
        except BaseException:
            self.state = SchedulerState.TERMINATED
            self.app_state._release_focus()
            raise
        return self.state

    # ------------------------------------------------------------------
    # Cycle phases
    # ------------------------------------------------------------------

    def _cycle(self) -> None:
        self.cycles += 1
        now = self._clock()
        if self._next_tick is None:
            self._next_tick = now + self._interval

        timeout = max(0.0, min(self._next_tick - now, self._interval))
        event = self._poll(timeout)
        if event is not None:
            self._dispatch(event)

        now = self._clock()
        if now >= self._next_tick:
            self._tick(now, self._next_tick)

        self._present()
        self.app_state.check_invariants()

    def _poll(self, timeout: float) -> InputEvent | None:
        try:
            return self.input_source.poll(timeout)
        except (TransientInputError, OSError) as e:
            self.input_errors += 1
            logger.warning("input poll failed, treating as no event: %s", e)
            # Keep the cadence: wait out the poll we lost
            self._sleep(timeout)
            return None

    def _dispatch(self, event: InputEvent) -> None:
        if isinstance(event, ResizeEvent):
            logger.debug("terminal resized to %dx%d", event.columns, event.rows)
            self._full_repaint = True
            return
        if not isinstance(event, KeyEvent):
            logger.warning("ignoring unknown input event %r", event)
            return

        focused = self.app_state.focused_window
        if focused is None:
            return
        request = self.dispatcher.handle(focused, event)
        if request is None:
            return
        if isinstance(request, FocusChange):
            self.app_state._apply_focus(request.target, requested_by=focused)
        elif isinstance(request, Quit):
            logger.info("quit requested by '%s'", focused)
            self.app_state._request_quit()
            self.state = SchedulerState.SHUTTING_DOWN
        else:
            raise TypeError(f"window '{focused}' returned unknown request {request!r}")

    def _tick(self, now: float, boundary: float) -> None:
        for window_id in self._order:
            self.dispatcher.tick(window_id)
        self.app_state._advance_tick()

        self._next_tick = boundary + self._interval
        if now >= self._next_tick:
            missed = int((now - self._next_tick) // self._interval) + 1
            logger.debug("tick overrun, coalesced %d boundaries", missed)
            self._next_tick = now + self._interval

    def _present(self) -> None:
        width, height = self.backend.columns, self.backend.rows
        frame = Frame(width, height)
        regions = self.layout.regions(width, height)
        for window_id in self._order:
            region = regions[window_id]
            frame.blit(region, self.dispatcher.draw(window_id, region))

        lines = frame.lines()
        full = self._full_repaint
        try:
            self.backend.present(lines, full=full)
        except BackendUnavailable:
            raise
        except Exception as e:
            raise BackendUnavailable(f"presentation failed: {e}") from e
        self._full_repaint = False
        self.presentations += 1
        self.last_frame = lines

    def _shutdown(self) -> None:
        logger.info("shutting down")
        for window_id in self._order:
            self.dispatcher.shutdown(window_id)
        self.app_state._release_focus()
        self.app_state.check_invariants(shutting_down=True)
        self.state = SchedulerState.TERMINATED
