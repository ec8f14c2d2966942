"""Per-window view state machines.

A :class:`ViewTable` is the closed set of named sub-views a window can be
in, the view it starts in, and every permitted transition stored as data:
a mapping from ``(view, event_kind)`` to the next view.  Windows change
their view only through :meth:`ViewTable.apply`; the dispatcher audits the
result of every call against :meth:`ViewTable.permits`.
"""

from __future__ import annotations

import dataclasses
from collections import deque
from typing import Iterable, Mapping, TypeVar

from dnet.tui.errors import ConfigurationFault, InvalidTransition

__all__ = ["ViewTable"]

_S = TypeVar("_S")


class ViewTable:
    """Closed view set plus its transition table."""

    def __init__(
        self,
        views: Iterable[str],
        initial: str,
        transitions: Mapping[tuple[str, str], str] | None = None,
        owner: str | None = None,
    ) -> None:
        self._views: tuple[str, ...] = tuple(dict.fromkeys(views))
        self._initial = initial
        self._transitions: dict[tuple[str, str], str] = dict(transitions or {})
        self._owner = owner

        if not self._views:
            raise ConfigurationFault(owner, initial, "view set is empty")
        if initial not in self._views:
            raise ConfigurationFault(owner, initial, "initial view is not declared")
        for (source, event), target in self._transitions.items():
            if source not in self._views:
                raise ConfigurationFault(
                    owner, source, f"transition '{event}' starts outside the view set"
                )
            if target not in self._views:
                raise ConfigurationFault(
                    owner, target, f"transition '{event}' from '{source}' escapes the view set"
                )

    @classmethod
    def fully_connected(
        cls,
        views: Iterable[str],
        initial: str,
        owner: str | None = None,
    ) -> ViewTable:
        """Table where every view may move to every other view.

        The event kind of each transition is the name of its target view.
        """
        names = tuple(dict.fromkeys(views))
        transitions = {
            (source, target): target
            for source in names
            for target in names
            if source != target
        }
        return cls(names, initial, transitions, owner=owner)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def views(self) -> tuple[str, ...]:
        return self._views

    @property
    def initial(self) -> str:
        return self._initial

    @property
    def transitions(self) -> dict[tuple[str, str], str]:
        """A copy of the transition table."""
        return dict(self._transitions)

    def __contains__(self, view: object) -> bool:
        return view in self._views

    def __repr__(self) -> str:
        return (
            f"ViewTable(views={list(self._views)!r}, initial={self._initial!r}, "
            f"transitions={len(self._transitions)})"
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition(self, current: str, event_kind: str) -> str | None:
        """Return the view reached from *current* on *event_kind*, or ``None``."""
        if current not in self._views:
            raise ConfigurationFault(self._owner, current, "view is not declared")
        return self._transitions.get((current, event_kind))

    def outgoing(self, view: str) -> dict[str, str]:
        """Map of event kind -> target view for every transition leaving *view*."""
        return {
            event: target
            for (source, event), target in self._transitions.items()
            if source == view
        }

    def permits(self, source: str, target: str) -> bool:
        """``True`` if some declared transition leads from *source* to *target*.

        Staying in the same view is always permitted.
        """
        if source not in self._views or target not in self._views:
            return False
        if source == target:
            return True
        return any(
            src == source and dst == target
            for (src, _event), dst in self._transitions.items()
        )

    def apply(self, state: _S, event_kind: str, owner: str | None = None) -> _S:
        """Return a copy of *state* moved along the ``event_kind`` transition.

        *state* is any dataclass with a ``view`` field.  Raises
        :class:`InvalidTransition` when the table has no such transition.
        """
        current: str = state.view  # type: ignore[attr-defined]
        target = self.transition(current, event_kind)
        if target is None:
            raise InvalidTransition(owner or self._owner, current, event=event_kind)
        if target == current:
            return state
        return dataclasses.replace(state, view=target)  # type: ignore[type-var]

    def reachable(self) -> set[str]:
        """Every view reachable from the initial view."""
        seen = {self._initial}
        queue = deque([self._initial])
        while queue:
            view = queue.popleft()
            for target in self.outgoing(view).values():
                if target not in seen:
                    seen.add(target)
                    queue.append(target)
        return seen
