"""Built-in windows and the demo application that composes them."""

from __future__ import annotations

from pathlib import Path

from dnet.tui.app import Application, WindowSpec
from dnet.tui.channel import Mailbox
from dnet.tui.config import Settings, save_settings
from dnet.tui.layout import Split
from dnet.tui.windows.activity import ActivityWindow
from dnet.tui.windows.menu import MenuItem, MenuWindow
from dnet.tui.windows.settings import SettingsWindow

__all__ = [
    "ActivityWindow",
    "MenuItem",
    "MenuWindow",
    "SettingsWindow",
    "build_demo",
]


def build_demo(
    settings: Settings,
    settings_path: str | Path | None = None,
    mailbox: Mailbox[str] | None = None,
    runtime: Settings | None = None,
) -> Application:
    """Menu on the left, settings above activity on the right.

    *settings* are the values the settings window edits and saves to
    *settings_path* (or the default settings file).  *runtime*, if given,
    is what the running application uses instead, e.g. *settings* with
    command line overrides applied; it is never saved.
    """
    runtime = runtime or settings
    items = [
        MenuItem("Settings", "edit client settings", "settings"),
        MenuItem("Activity", "background activity feed", "activity"),
        MenuItem("Exit", "quit the application"),
    ]
    menu = MenuWindow(items, footer=f"dnet api at {runtime.api_url}")
    editor = SettingsWindow(
        settings,
        save=lambda updated: save_settings(updated, settings_path),
        location=str(settings_path) if settings_path else "",
    )
    activity = ActivityWindow(mailbox)

    layout = Split("columns", [(1, "menu"), (2, Split("rows", ["settings", "activity"]))])
    return Application(
        [WindowSpec(menu), WindowSpec(editor), WindowSpec(activity)],
        layout,
        initial_focus="menu",
        tick_interval_ms=runtime.tick_interval_ms,
        strict=runtime.strict_transitions,
    )
