"""Tests for dnet.tui.view -- view tables and transitions."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from dnet.tui.errors import ConfigurationFault, InvalidTransition
from dnet.tui.view import ViewTable


@dataclass(frozen=True)
class _State:
    view: str
    payload: int = 0


def _list_detail() -> ViewTable:
    return ViewTable(
        ["list", "detail"],
        "list",
        {("list", "open"): "detail", ("detail", "back"): "list"},
        owner="files",
    )


class TestConstruction:
    def test_views_and_initial(self) -> None:
        table = _list_detail()
        assert table.views == ("list", "detail")
        assert table.initial == "list"
        assert "detail" in table
        assert "missing" not in table

    def test_duplicate_views_collapse(self) -> None:
        table = ViewTable(["a", "b", "a"], "a")
        assert table.views == ("a", "b")

    def test_empty_view_set_rejected(self) -> None:
        with pytest.raises(ConfigurationFault):
            ViewTable([], "a")

    def test_undeclared_initial_rejected(self) -> None:
        with pytest.raises(ConfigurationFault) as info:
            ViewTable(["a"], "b", owner="w")
        assert info.value.window_id == "w"
        assert info.value.target == "b"

    def test_transition_target_outside_set_rejected(self) -> None:
        with pytest.raises(ConfigurationFault) as info:
            ViewTable(["a"], "a", {("a", "go"): "nowhere"})
        assert info.value.target == "nowhere"

    def test_transition_source_outside_set_rejected(self) -> None:
        with pytest.raises(ConfigurationFault):
            ViewTable(["a"], "a", {("ghost", "go"): "a"})

    def test_transitions_property_is_a_copy(self) -> None:
        table = _list_detail()
        table.transitions[("list", "evil")] = "detail"
        assert table.transition("list", "evil") is None


class TestTransitions:
    def test_declared_transition(self) -> None:
        table = _list_detail()
        assert table.transition("list", "open") == "detail"
        assert table.transition("detail", "back") == "list"

    def test_unknown_event_returns_none(self) -> None:
        assert _list_detail().transition("list", "back") is None

    def test_undeclared_current_view(self) -> None:
        with pytest.raises(ConfigurationFault):
            _list_detail().transition("ghost", "open")

    def test_outgoing(self) -> None:
        assert _list_detail().outgoing("list") == {"open": "detail"}

    def test_permits(self) -> None:
        table = _list_detail()
        assert table.permits("list", "detail")
        assert table.permits("detail", "detail")
        assert not table.permits("list", "ghost")
        one_way = ViewTable(["a", "b"], "a", {("a", "go"): "b"})
        assert not one_way.permits("b", "a")

    def test_apply_moves_view_and_keeps_data(self) -> None:
        state = _State("list", payload=7)
        moved = _list_detail().apply(state, "open")
        assert moved == _State("detail", payload=7)
        assert state.view == "list"

    def test_apply_undeclared_raises(self) -> None:
        with pytest.raises(InvalidTransition) as info:
            _list_detail().apply(_State("list"), "back")
        fault = info.value
        assert fault.window_id == "files"
        assert fault.source == "list"
        assert fault.event == "back"
        assert "'back' from 'list'" in str(fault)

    def test_apply_owner_override(self) -> None:
        with pytest.raises(InvalidTransition) as info:
            _list_detail().apply(_State("list"), "nope", owner="other")
        assert info.value.window_id == "other"

    def test_self_transition_returns_same_state(self) -> None:
        table = ViewTable(["a"], "a", {("a", "refresh"): "a"})
        state = _State("a")
        assert table.apply(state, "refresh") is state


class TestFullyConnected:
    def test_every_pair_connected(self) -> None:
        table = ViewTable.fully_connected(["a", "b", "c"], "a")
        for source in "abc":
            for target in "abc":
                assert table.permits(source, target)
        assert table.transition("a", "c") == "c"

    def test_reachable(self) -> None:
        assert ViewTable.fully_connected(["a", "b"], "b").reachable() == {"a", "b"}

    def test_reachable_stops_at_dead_end(self) -> None:
        table = ViewTable(["a", "b", "c"], "a", {("a", "go"): "b"})
        assert table.reachable() == {"a", "b"}
