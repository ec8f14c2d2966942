"""Window contract and per-call dispatch.

A window is a stateless object implementing ``draw``, ``tick`` and
``handle`` over a :class:`WindowState` value it owns.  The
:class:`Dispatcher` makes every call on the scheduler's behalf: it opens
the window's write scope, normalizes handler results, and audits view
changes against the window's :class:`~dnet.tui.view.ViewTable`.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Union

from dnet.tui.errors import ConfigurationFault, InvalidTransition
from dnet.tui.keys import KeyEvent
from dnet.tui.layout import Region
from dnet.tui.state import AppState, WindowContext
from dnet.tui.view import ViewTable

__all__ = [
    "WindowState",
    "FocusChange",
    "Quit",
    "Request",
    "Window",
    "Dispatcher",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowState:
    """A window's current view plus its private data."""

    view: str
    data: Any = None

    def with_data(self, **changes: Any) -> WindowState:
        """Copy with fields of the (dataclass) ``data`` value replaced."""
        return dataclasses.replace(self, data=dataclasses.replace(self.data, **changes))


@dataclass(frozen=True)
class FocusChange:
    """Ask the scheduler to move focus to *target*."""

    target: str


@dataclass(frozen=True)
class Quit:
    """Ask the scheduler to shut the application down."""


Request = Union[FocusChange, Quit]


class Window:
    """Base class for windows.

    Subclasses set ``id`` and ``views`` and implement :meth:`draw`; ``tick``,
    ``handle`` and ``shutdown`` default to leaving the state unchanged.
    """

    id: ClassVar[str] = ""
    views: ClassVar[ViewTable]
    title: ClassVar[str] = ""

    def initial_data(self) -> Any:
        """Private data the window starts with."""
        return None

    def initial_state(self, view: str | None = None) -> WindowState:
        return WindowState(view=view or self.views.initial, data=self.initial_data())

    def transition(self, state: WindowState, event_kind: str) -> WindowState:
        """Move *state* along a declared transition of this window's table."""
        return self.views.apply(state, event_kind, owner=self.id)

    def draw(self, ctx: WindowContext, state: WindowState, region: Region) -> list[str]:
        raise NotImplementedError

    def tick(self, ctx: WindowContext, state: WindowState) -> WindowState:
        return state

    def handle(
        self,
        ctx: WindowContext,
        state: WindowState,
        event: KeyEvent,
    ) -> WindowState | tuple[WindowState, Request | None]:
        return state

    def shutdown(self, ctx: WindowContext, state: WindowState) -> WindowState:
        return state

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"


class Dispatcher:
    """Calls window code one window at a time against an :class:`AppState`.

    In strict mode an :class:`InvalidTransition` propagates to the caller.
    Otherwise it is logged and the window's state is left as it was before
    the offending call.
    """

    def __init__(
        self,
        app_state: AppState,
        windows: Mapping[str, Window],
        tick_interval_ms: int,
        strict: bool = False,
    ) -> None:
        self.app_state = app_state
        self.windows = dict(windows)
        self.tick_interval_ms = tick_interval_ms
        self.strict = strict
        self.faults: list[InvalidTransition] = []

    def context(self, window_id: str) -> WindowContext:
        return WindowContext(self.app_state, window_id, self.tick_interval_ms)

    # ------------------------------------------------------------------

    def handle(self, window_id: str, event: KeyEvent) -> Request | None:
        """Run ``handle`` on *window_id*; return the request it made, if any."""
        window = self.windows[window_id]
        ctx = self.context(window_id)
        with self.app_state.scope(window_id) as scope:
            before = scope.state
            try:
                result = window.handle(ctx, before, event)
            except InvalidTransition as fault:
                self._contain(fault, window, "handle")
                return None
            if isinstance(result, tuple):
                after, request = result
            else:
                after, request = result, None
            if not self._audit(window, before, after, "handle"):
                return None
            scope.commit(after)
        return request

    def tick(self, window_id: str) -> None:
        self._advance(window_id, "tick")

    def shutdown(self, window_id: str) -> None:
        self._advance(window_id, "shutdown")

    def draw(self, window_id: str, region: Region) -> list[str]:
        window = self.windows[window_id]
        state = self.app_state.window_states[window_id]
        return list(window.draw(self.context(window_id), state, region))

    # ------------------------------------------------------------------

    def _advance(self, window_id: str, phase: str) -> None:
        window = self.windows[window_id]
        ctx = self.context(window_id)
        with self.app_state.scope(window_id) as scope:
            before = scope.state
            try:
                after = getattr(window, phase)(ctx, before)
            except InvalidTransition as fault:
                self._contain(fault, window, phase)
                return
            if self._audit(window, before, after, phase):
                scope.commit(after)

    def _contain(self, fault: InvalidTransition, window: Window, phase: str) -> None:
        if fault.window_id is None:
            fault.window_id = window.id
        if self.strict:
            raise fault
        logger.error("%s (during %s); state left unchanged", fault, phase)
        self.faults.append(fault)

    def _audit(
        self,
        window: Window,
        before: WindowState,
        after: object,
        phase: str,
    ) -> bool:
        """Check a returned state; ``False`` means it must be discarded."""
        if not isinstance(after, WindowState):
            raise TypeError(
                f"{phase} of window '{window.id}' returned "
                f"{type(after).__name__}, expected WindowState"
            )
        if after.view not in window.views:
            raise ConfigurationFault(window.id, after.view, "view is not declared")
        if after.view == before.view:
            return True
        if window.views.permits(before.view, after.view):
            return True

        self._contain(InvalidTransition(window.id, before.view, after.view), window, phase)
        return False
