"""Settings editor window.

Edits a private copy of the client settings.  Changes are written back
through the ``save`` callback only when the user presses ``s``; edits still
unsaved at shutdown are discarded.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable

from dnet.tui.config import LOG_LEVELS, Settings
from dnet.tui.keys import KeyEvent, matches_key
from dnet.tui.layout import Region, panel
from dnet.tui.state import WindowContext
from dnet.tui.utils import truncate_to_width
from dnet.tui.view import ViewTable
from dnet.tui.window import FocusChange, Request, Window, WindowState

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("api_host", "api_port", "tick_interval_ms", "log_level")

_SELECTED = "\x1b[7m"
_ERROR = "\x1b[31m"
_OK = "\x1b[32m"
_RESET = "\x1b[0m"


@dataclass(frozen=True)
class SettingsData:
    values: tuple[tuple[str, str], ...]
    selected: int = 0
    buffer: str = ""
    status: str = ""
    status_ok: bool = True
    dirty: bool = False

    def value(self, name: str) -> str:
        return dict(self.values)[name]


def validate_field(name: str, raw: str) -> str | None:
    """Error message for *raw* as a value of *name*, or ``None`` if valid."""
    raw = raw.strip()
    if name == "api_host":
        return None if raw else "host cannot be empty"
    if name == "api_port":
        if not raw.isdigit() or not 0 < int(raw) < 65536:
            return "port must be a number between 1 and 65535"
        return None
    if name == "tick_interval_ms":
        if not raw.isdigit() or int(raw) <= 0:
            return "tick interval must be a positive number"
        return None
    if name == "log_level":
        return None if raw in LOG_LEVELS else f"level must be one of {', '.join(LOG_LEVELS)}"
    return f"unknown field {name}"


class SettingsWindow(Window):
    id = "settings"
    title = "Settings"
    views = ViewTable(
        ["view", "edit"],
        "view",
        {
            ("view", "edit"): "edit",
            ("edit", "commit"): "view",
            ("edit", "cancel"): "view",
        },
        owner="settings",
    )

    def __init__(
        self,
        settings: Settings,
        save: Callable[[Settings], object] | None = None,
        location: str = "",
    ) -> None:
        self.settings = settings
        self.save = save
        self.location = location

    def initial_data(self) -> SettingsData:
        values = tuple((name, str(getattr(self.settings, name))) for name in EDITABLE_FIELDS)
        return SettingsData(values=values)

    def to_settings(self, data: SettingsData) -> Settings:
        """The settings this window was built with, edited fields applied."""
        changes: dict[str, object] = {}
        for name, raw in data.values:
            changes[name] = int(raw) if name in ("api_port", "tick_interval_ms") else raw
        return dataclasses.replace(self.settings, **changes)

    # ------------------------------------------------------------------

    def handle(
        self, ctx: WindowContext, state: WindowState, event: KeyEvent
    ) -> WindowState | tuple[WindowState, Request | None]:
        data: SettingsData = state.data
        if state.view == "edit":
            return self._handle_edit(state, data, event)

        if matches_key(event, "escape", "tab"):
            return state, FocusChange("menu")
        if matches_key(event, "up", "k"):
            return state.with_data(selected=max(0, data.selected - 1))
        if matches_key(event, "down", "j"):
            return state.with_data(selected=min(len(data.values) - 1, data.selected + 1))
        if matches_key(event, "enter"):
            name, value = data.values[data.selected]
            editing = self.transition(state, "edit")
            return editing.with_data(buffer=value, status=f"editing {name}", status_ok=True)
        if matches_key(event, "s"):
            return self._save(state, data)
        return state

    def _handle_edit(
        self, state: WindowState, data: SettingsData, event: KeyEvent
    ) -> WindowState:
        if matches_key(event, "escape"):
            return self.transition(state, "cancel").with_data(buffer="", status="edit cancelled")
        if matches_key(event, "backspace"):
            return state.with_data(buffer=data.buffer[:-1])
        if matches_key(event, "enter"):
            name, _old = data.values[data.selected]
            error = validate_field(name, data.buffer)
            if error is not None:
                return state.with_data(status=error, status_ok=False)
            values = tuple(
                (field, data.buffer.strip() if field == name else value)
                for field, value in data.values
            )
            committed = self.transition(state, "commit")
            return committed.with_data(
                values=values, buffer="", status=f"{name} updated", status_ok=True, dirty=True
            )
        if len(event.data) == 1 and event.data.isprintable():
            return state.with_data(buffer=data.buffer + event.data)
        return state

    def _save(self, state: WindowState, data: SettingsData) -> WindowState:
        if self.save is None:
            return state.with_data(status="settings cannot be saved here", status_ok=False)
        try:
            target = self.save(self.to_settings(data))
        except OSError as e:
            logger.error("could not save settings: %s", e)
            return state.with_data(status=f"Failed to save configuration: {e}", status_ok=False)
        logger.info("settings saved to %s", target)
        return state.with_data(
            status=f"Configuration saved to {target or self.location}", status_ok=True, dirty=False
        )

    def shutdown(self, ctx: WindowContext, state: WindowState) -> WindowState:
        if state.data.dirty:
            logger.warning("discarding unsaved settings changes")
        return state

    # ------------------------------------------------------------------

    def draw(self, ctx: WindowContext, state: WindowState, region: Region) -> list[str]:
        data: SettingsData = state.data
        inner = max(0, region.width - 2)
        body = [""]
        for i, (name, value) in enumerate(data.values):
            if state.view == "edit" and i == data.selected:
                value = f"{data.buffer}█"
            line = truncate_to_width(f" {name:<18} {value}", inner)
            if i == data.selected and ctx.focused:
                line = f"{_SELECTED}{line}{_RESET}"
            body.append(line)
        body.append("")
        if data.status:
            color = _OK if data.status_ok else _ERROR
            body.append(f" {color}{data.status}{_RESET}")
        if self.location:
            body.append(f" file: {self.location}")
        hint = " enter save  esc cancel" if state.view == "edit" else " enter edit  s save  esc back"
        body.append(hint)
        return panel(self.title, body, region.width, region.height, focused=ctx.focused)
