"""Tests for dnet.tui.window -- the window contract and the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from dnet.tui.errors import InvalidTransition
from dnet.tui.keys import key_event
from dnet.tui.layout import Region
from dnet.tui.state import AppState, WindowContext
from dnet.tui.view import ViewTable
from dnet.tui.window import Dispatcher, FocusChange, Quit, Window, WindowState


@dataclass(frozen=True)
class Counter:
    count: int = 0


class CountingWindow(Window):
    """Counts ticks; 'o' opens detail, 'b' goes back, 'x' cheats."""

    id = "counter"
    views = ViewTable(
        ["list", "detail"],
        "list",
        {("list", "open"): "detail", ("detail", "back"): "list"},
    )

    def initial_data(self) -> Counter:
        return Counter()

    def tick(self, ctx: WindowContext, state: WindowState) -> WindowState:
        return state.with_data(count=state.data.count + 1)

    def handle(self, ctx, state, event):
        if event.key == "o":
            return self.transition(state, "open")
        if event.key == "b":
            return self.transition(state, "back")
        if event.key == "x":
            # Jump to a view without going through the table
            return WindowState("detail" if state.view == "list" else "list", state.data)
        if event.key == "g":
            return state, FocusChange("other")
        if event.key == "q":
            return state, Quit()
        return state

    def draw(self, ctx, state, region):
        return [f"{state.view} {state.data.count} {'*' if ctx.focused else ''}"]


class Other(Window):
    id = "other"
    views = ViewTable(["only"], "only")

    def draw(self, ctx, state, region):
        return ["other"]


class BadTick(Window):
    id = "bad"
    views = ViewTable(["only"], "only")

    def tick(self, ctx, state):
        return "not a state"

    def draw(self, ctx, state, region):
        return []


def _dispatcher(strict: bool = False) -> Dispatcher:
    windows = {"counter": CountingWindow(), "other": Other()}
    app = AppState(
        {wid: w.initial_state() for wid, w in windows.items()},
        focused_window="counter",
    )
    return Dispatcher(app, windows, tick_interval_ms=100, strict=strict)


class TestWindowBase:
    def test_initial_state(self) -> None:
        state = CountingWindow().initial_state()
        assert state == WindowState("list", Counter())

    def test_initial_state_override(self) -> None:
        assert CountingWindow().initial_state("detail").view == "detail"

    def test_with_data(self) -> None:
        state = WindowState("list", Counter(3))
        assert state.with_data(count=4) == WindowState("list", Counter(4))

    def test_defaults_leave_state_unchanged(self) -> None:
        window = Other()
        state = window.initial_state()
        ctx = WindowContext(AppState({"other": state}, "other"), "other", 100)
        assert window.tick(ctx, state) is state
        assert window.handle(ctx, state, key_event("a")) is state
        assert window.shutdown(ctx, state) is state

    def test_draw_is_abstract(self) -> None:
        with pytest.raises(NotImplementedError):
            Window().draw(None, None, Region(0, 0, 1, 1))  # type: ignore[arg-type]

    def test_repr(self) -> None:
        assert repr(Other()) == "<Other id='other'>"


class TestDispatcherHandle:
    def test_declared_transition_commits(self) -> None:
        d = _dispatcher()
        assert d.handle("counter", key_event("o")) is None
        assert d.app_state.view_of("counter") == "detail"

    def test_returns_requests(self) -> None:
        d = _dispatcher()
        assert d.handle("counter", key_event("g")) == FocusChange("other")
        assert d.handle("counter", key_event("q")) == Quit()

    def test_undeclared_event_is_contained(self) -> None:
        d = _dispatcher()
        assert d.handle("counter", key_event("b")) is None
        assert d.app_state.view_of("counter") == "list"
        assert len(d.faults) == 1
        assert d.faults[0].window_id == "counter"
        assert d.faults[0].event == "back"

    def test_direct_view_change_is_audited(self) -> None:
        one_way = ViewTable(["list", "detail"], "list", {("list", "open"): "detail"})

        class OneWay(CountingWindow):
            views = one_way

        window = OneWay()
        app = AppState({"counter": window.initial_state("detail")}, "counter")
        d = Dispatcher(app, {"counter": window}, tick_interval_ms=100)
        d.handle("counter", key_event("x"))
        assert app.view_of("counter") == "detail"
        fault = d.faults[0]
        assert (fault.source, fault.target) == ("detail", "list")

    def test_permitted_direct_view_change_commits(self) -> None:
        d = _dispatcher()
        d.handle("counter", key_event("x"))
        assert d.app_state.view_of("counter") == "detail"
        assert d.faults == []

    def test_strict_mode_raises(self) -> None:
        d = _dispatcher(strict=True)
        with pytest.raises(InvalidTransition):
            d.handle("counter", key_event("b"))
        assert d.app_state.view_of("counter") == "list"


class TestDispatcherPhases:
    def test_tick_commits(self) -> None:
        d = _dispatcher()
        d.tick("counter")
        d.tick("counter")
        assert d.app_state.window_states["counter"].data == Counter(2)

    def test_tick_wrong_return_type(self) -> None:
        window = BadTick()
        app = AppState({"bad": window.initial_state()}, "bad")
        d = Dispatcher(app, {"bad": window}, tick_interval_ms=100)
        with pytest.raises(TypeError):
            d.tick("bad")

    def test_draw_receives_focus(self) -> None:
        d = _dispatcher()
        region = Region(0, 0, 20, 1)
        assert d.draw("counter", region) == ["list 0 *"]
        assert d.draw("other", region) == ["other"]

    def test_context_elapsed(self) -> None:
        d = _dispatcher()
        d.app_state._advance_tick()
        assert d.context("other").elapsed_ms == 100
