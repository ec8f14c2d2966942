"""Application assembly: window registration, backends and exit codes."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Sequence

from dnet.tui.errors import BackendUnavailable, ConfigurationFault
from dnet.tui.layout import Split
from dnet.tui.scheduler import DEFAULT_TICK_INTERVAL_MS, Scheduler
from dnet.tui.state import AppState
from dnet.tui.terminal import ProcessTerminal
from dnet.tui.window import Window

__all__ = ["ExitCode", "WindowSpec", "Application"]

logger = logging.getLogger(__name__)


class ExitCode(enum.IntEnum):
    OK = 0
    INTERNAL_FAULT = 1
    CONFIGURATION_FAULT = 2
    TERMINAL_UNAVAILABLE = 3


@dataclass(frozen=True)
class WindowSpec:
    """Registration of one window, optionally starting in a non-default view."""

    window: Window
    initial_view: str | None = None

    @property
    def id(self) -> str:
        return self.window.id


class Application:
    """A fixed set of windows, their layout and the initially focused window.

    The window set cannot change after construction.  Every configuration
    mistake (duplicate id, undeclared initial view, layout mismatch,
    unknown focus target) raises :class:`ConfigurationFault` here, before
    the terminal is touched.
    """

    def __init__(
        self,
        specs: Sequence[WindowSpec],
        layout: Split,
        initial_focus: str,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        strict: bool = False,
    ) -> None:
        windows: dict[str, Window] = {}
        initial_views: dict[str, str] = {}
        for spec in specs:
            window_id = spec.id
            if not window_id:
                raise ConfigurationFault(None, repr(spec.window), "window has no id")
            if window_id in windows:
                raise ConfigurationFault(None, window_id, "window id registered twice")
            view = spec.initial_view or spec.window.views.initial
            if view not in spec.window.views:
                raise ConfigurationFault(window_id, view, "initial view is not declared")
            windows[window_id] = spec.window
            initial_views[window_id] = view
        if not windows:
            raise ConfigurationFault(None, initial_focus, "no windows registered")
        if initial_focus not in windows:
            raise ConfigurationFault(None, initial_focus, "initial focus is not a registered window")
        layout.validate(windows)

        self.windows = windows
        self.layout = layout
        self.initial_focus = initial_focus
        self.tick_interval_ms = tick_interval_ms
        self.strict = strict
        self._initial_views = initial_views
        self.scheduler: Scheduler | None = None
        self.error: BaseException | None = None

    def create_state(self) -> AppState:
        """Fresh :class:`AppState` with every window in its initial view."""
        states = {
            window_id: window.initial_state(self._initial_views[window_id])
            for window_id, window in self.windows.items()
        }
        return AppState(states, focused_window=self.initial_focus)

    def create_scheduler(self, backend: Any, input_source: Any, **kwargs: Any) -> Scheduler:
        self.scheduler = Scheduler(
            self.create_state(),
            self.windows,
            self.layout,
            backend,
            input_source,
            tick_interval_ms=self.tick_interval_ms,
            strict=self.strict,
            **kwargs,
        )
        return self.scheduler

    def run(
        self,
        terminal_factory: Callable[[], ContextManager[Any]] = ProcessTerminal,
    ) -> ExitCode:
        """Acquire the terminal, run until terminated, release it.

        The terminal is always restored before an error is logged or
        reported to the caller through :attr:`error`.
        """
        self.error = None
        try:
            with terminal_factory() as terminal:
                self.create_scheduler(terminal, terminal).run()
        except BackendUnavailable as e:
            self.error = e
            logger.error("terminal unavailable: %s", e)
            return ExitCode.TERMINAL_UNAVAILABLE
        except ConfigurationFault as e:
            self.error = e
            logger.error("configuration fault: %s", e)
            return ExitCode.CONFIGURATION_FAULT
        except Exception as e:
            self.error = e
            logger.exception("internal fault")
            return ExitCode.INTERNAL_FAULT
        return ExitCode.OK
