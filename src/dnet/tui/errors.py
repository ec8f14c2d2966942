"""Fault taxonomy for the window engine.

Only :class:`ConfigurationFault` and :class:`BackendUnavailable` end the
event loop.  :class:`TransientInputError` and (outside strict mode)
:class:`InvalidTransition` are contained within the cycle that raised them.
"""

from __future__ import annotations


class TuiError(Exception):
    """Base class for every error raised by ``dnet.tui``."""


class ConfigurationFault(TuiError):
    """A focus change, view or layout entry names something undeclared."""

    def __init__(self, window_id: str | None, target: str, reason: str = "") -> None:
        self.window_id = window_id
        self.target = target
        self.reason = reason
        origin = f"window '{window_id}'" if window_id else "application"
        message = f"{origin} requested undeclared target '{target}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BackendUnavailable(TuiError):
    """The render backend or input source cannot be acquired or has failed."""


class TransientInputError(TuiError):
    """A single poll of the input source failed."""


class InvalidTransition(TuiError):
    """A window changed its view through a transition its table does not declare.

    *target* is the view the window ended up in, *event* the event kind it
    tried to fire; either may be unknown depending on where the fault was
    detected.
    """

    def __init__(
        self,
        window_id: str | None,
        source: str,
        target: str | None = None,
        event: str | None = None,
    ) -> None:
        self.window_id = window_id
        self.source = source
        self.target = target
        self.event = event
        owner = f"window '{window_id}'" if window_id else "window"
        if target is not None:
            detail = f"'{source}' -> '{target}'"
        else:
            detail = f"'{event}' from '{source}'"
        super().__init__(f"{owner} attempted undeclared transition {detail}")


class ConfigError(TuiError):
    """A settings file could not be read or holds invalid values."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"invalid settings file {path}: {reason}")
