"""Tests for dnet.tui.state -- AppState, scopes and window contexts."""

from __future__ import annotations

import pytest

from dnet.tui.errors import ConfigurationFault
from dnet.tui.state import AppState, WindowContext
from dnet.tui.window import WindowState


def _state() -> AppState:
    return AppState(
        {"a": WindowState("one", 1), "b": WindowState("two", 2)},
        focused_window="a",
    )


class TestAppState:
    def test_initial_values(self) -> None:
        app = _state()
        assert app.focused_window == "a"
        assert app.tick_count == 0
        assert not app.should_quit
        assert app.window_ids == ("a", "b")
        assert app.view_of("b") == "two"

    def test_unknown_initial_focus(self) -> None:
        with pytest.raises(ConfigurationFault):
            AppState({"a": WindowState("one")}, focused_window="z")

    def test_window_states_is_read_only(self) -> None:
        app = _state()
        with pytest.raises(TypeError):
            app.window_states["a"] = WindowState("x")  # type: ignore[index]

    def test_view_of_unknown_window(self) -> None:
        with pytest.raises(ConfigurationFault):
            _state().view_of("z")

    def test_focus_moves_to_registered_window(self) -> None:
        app = _state()
        app._apply_focus("b", requested_by="a")
        assert app.focused_window == "b"
        assert app.is_focused("b")
        assert not app.is_focused("a")

    def test_focus_to_unknown_window_keeps_focus(self) -> None:
        app = _state()
        with pytest.raises(ConfigurationFault) as info:
            app._apply_focus("ghost", requested_by="a")
        assert info.value.window_id == "a"
        assert info.value.target == "ghost"
        assert app.focused_window == "a"

    def test_tick_counter(self) -> None:
        app = _state()
        assert app._advance_tick() == 1
        assert app._advance_tick() == 2
        assert app.tick_count == 2

    def test_quit_flag(self) -> None:
        app = _state()
        app._request_quit()
        assert app.should_quit


class TestInvariants:
    def test_focused_state_passes(self) -> None:
        _state().check_invariants()

    def test_no_focus_outside_shutdown_fails(self) -> None:
        app = _state()
        app._release_focus()
        with pytest.raises(ConfigurationFault):
            app.check_invariants()

    def test_no_focus_during_shutdown_passes(self) -> None:
        app = _state()
        app._release_focus()
        app.check_invariants(shutting_down=True)


class TestScope:
    def test_commit_replaces_only_own_entry(self) -> None:
        app = _state()
        with app.scope("a") as scope:
            assert scope.state == WindowState("one", 1)
            scope.commit(WindowState("one", 10))
        assert app.window_states["a"] == WindowState("one", 10)
        assert app.window_states["b"] == WindowState("two", 2)

    def test_scope_closed_after_exit(self) -> None:
        app = _state()
        with app.scope("a") as scope:
            pass
        with pytest.raises(RuntimeError):
            scope.commit(WindowState("x"))

    def test_nested_scope_rejected(self) -> None:
        app = _state()
        with app.scope("a"):
            with pytest.raises(RuntimeError):
                with app.scope("b"):
                    pass

    def test_scope_released_after_error(self) -> None:
        app = _state()
        with pytest.raises(ValueError):
            with app.scope("a"):
                raise ValueError("boom")
        with app.scope("b") as scope:
            assert scope.window_id == "b"

    def test_unknown_window(self) -> None:
        with pytest.raises(ConfigurationFault):
            with _state().scope("z"):
                pass


class TestWindowContext:
    def test_coarse_reads(self) -> None:
        app = _state()
        app._advance_tick()
        app._advance_tick()
        ctx = WindowContext(app, "b", tick_interval_ms=100)
        assert not ctx.focused
        assert ctx.focused_window == "a"
        assert ctx.is_focused("a")
        assert ctx.tick_count == 2
        assert ctx.elapsed_ms == 200
        assert ctx.view_of("a") == "one"
        assert ctx.window_ids == ("a", "b")

    def test_no_private_data_access(self) -> None:
        ctx = WindowContext(_state(), "a", tick_interval_ms=100)
        assert not hasattr(ctx, "window_states")
