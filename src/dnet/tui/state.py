"""Application state aggregate.

:class:`AppState` owns every window's private state plus the global flags
(focus, quit request, tick counter).  Windows never touch it directly:

* writes go through a :class:`WindowScope` opened by the dispatcher for the
  one window currently being called, and only to that window's entry;
* reads of cross-window facts go through :class:`WindowContext`, which
  exposes focus, view names and the tick counter but no private data;
* focus, quit and tick changes are made by the scheduler only.
"""

from __future__ import annotations

import contextlib
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterator, Mapping

from dnet.tui.errors import ConfigurationFault

if TYPE_CHECKING:
    from dnet.tui.window import WindowState

__all__ = ["AppState", "WindowScope", "WindowContext"]

logger = logging.getLogger(__name__)


class WindowScope:
    """Write access to one window's entry, valid while its scope is open."""

    def __init__(self, app_state: AppState, window_id: str) -> None:
        self._app_state = app_state
        self.window_id = window_id
        self._open = True

    @property
    def state(self) -> WindowState:
        self._check_open()
        return self._app_state._window_states[self.window_id]

    def commit(self, new_state: WindowState) -> None:
        """Replace this window's state."""
        self._check_open()
        self._app_state._window_states[self.window_id] = new_state

    def _close(self) -> None:
        self._open = False

    def _check_open(self) -> None:
        if not self._open:
            raise RuntimeError(f"scope for window '{self.window_id}' is closed")


class AppState:
    """Single source of truth for a running application."""

    def __init__(
        self,
        window_states: Mapping[str, WindowState],
        focused_window: str,
    ) -> None:
        self._window_states: dict[str, WindowState] = dict(window_states)
        self._focused_window: str | None = None
        self._tick_count = 0
        self._should_quit = False
        self._active_scope: WindowScope | None = None
        self._apply_focus(focused_window)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def focused_window(self) -> str | None:
        return self._focused_window

    @property
    def window_states(self) -> Mapping[str, WindowState]:
        """Read-only view of every window's state."""
        return MappingProxyType(self._window_states)

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def should_quit(self) -> bool:
        return self._should_quit

    @property
    def window_ids(self) -> tuple[str, ...]:
        return tuple(self._window_states)

    def is_focused(self, window_id: str) -> bool:
        return self._focused_window == window_id

    def view_of(self, window_id: str) -> str:
        """Current view name of *window_id*."""
        try:
            return self._window_states[window_id].view
        except KeyError:
            raise ConfigurationFault(None, window_id, "no such window") from None

    # ------------------------------------------------------------------
    # Scoped write access
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def scope(self, window_id: str) -> Iterator[WindowScope]:
        """Open the write scope of *window_id* for one dispatched call.

        Only one scope may be open at a time; dispatch is serialized.
        """
        if window_id not in self._window_states:
            raise ConfigurationFault(None, window_id, "no such window")
        if self._active_scope is not None:
            raise RuntimeError(
                f"cannot open scope for '{window_id}' while "
                f"'{self._active_scope.window_id}' is being dispatched"
            )
        scope = WindowScope(self, window_id)
        self._active_scope = scope
        try:
            yield scope
        finally:
            scope._close()
            self._active_scope = None

    # ------------------------------------------------------------------
    # Scheduler-only mutations
    # ------------------------------------------------------------------

    def _apply_focus(self, target: str, requested_by: str | None = None) -> None:
        if target not in self._window_states:
            raise ConfigurationFault(requested_by, target, "focus target is not a registered window")
        if target != self._focused_window:
            logger.debug("focus %s -> %s", self._focused_window, target)
        self._focused_window = target

    def _release_focus(self) -> None:
        self._focused_window = None

    def _request_quit(self) -> None:
        self._should_quit = True

    def _advance_tick(self) -> int:
        self._tick_count += 1
        return self._tick_count

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def check_invariants(self, shutting_down: bool = False) -> None:
        """Raise :class:`ConfigurationFault` if the focus invariant is broken.

        Focus may only be absent while shutting down.
        """
        focused = self._focused_window
        if focused is None:
            if not shutting_down:
                raise ConfigurationFault(None, "<none>", "no window is focused")
            return
        if focused not in self._window_states:
            raise ConfigurationFault(None, focused, "focused window is not registered")


class WindowContext:
    """Coarse, read-only view of the application given to window code."""

    def __init__(self, app_state: AppState, window_id: str, tick_interval_ms: int) -> None:
        self._app_state = app_state
        self.window_id = window_id
        self.tick_interval_ms = tick_interval_ms

    @property
    def focused(self) -> bool:
        """``True`` if the window being called holds focus."""
        return self._app_state.is_focused(self.window_id)

    @property
    def focused_window(self) -> str | None:
        return self._app_state.focused_window

    @property
    def tick_count(self) -> int:
        return self._app_state.tick_count

    @property
    def elapsed_ms(self) -> int:
        """Logical time: processed tick boundaries times the tick interval."""
        return self._app_state.tick_count * self.tick_interval_ms

    @property
    def window_ids(self) -> tuple[str, ...]:
        return self._app_state.window_ids

    def is_focused(self, window_id: str) -> bool:
        return self._app_state.is_focused(window_id)

    def view_of(self, window_id: str) -> str:
        return self._app_state.view_of(window_id)
