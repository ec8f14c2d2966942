"""Main menu window."""

from __future__ import annotations

from dataclasses import dataclass

from dnet.tui.keys import KeyEvent, matches_key
from dnet.tui.layout import Region, panel
from dnet.tui.state import WindowContext
from dnet.tui.utils import sliding_text, truncate_to_width
from dnet.tui.view import ViewTable
from dnet.tui.window import FocusChange, Quit, Request, Window, WindowState

_SELECTED = "\x1b[30;46;1m"
_RESET = "\x1b[0m"


@dataclass(frozen=True)
class MenuItem:
    label: str
    description: str
    # Window to focus, or None for "exit"
    target: str | None = None

    def fmt(self) -> str:
        return f"{self.label:<10}: {self.description}"


@dataclass(frozen=True)
class MenuData:
    selected: int = 0
    marquee_ms: int = 0


class MenuWindow(Window):
    """Lists the other windows; enter moves focus, exit asks to confirm."""

    id = "menu"
    title = "dnet"
    views = ViewTable(
        ["browse", "confirm-quit"],
        "browse",
        {
            ("browse", "ask-quit"): "confirm-quit",
            ("confirm-quit", "cancel"): "browse",
        },
        owner="menu",
    )

    def __init__(self, items: list[MenuItem], footer: str = "") -> None:
        self.items = list(items)
        self.footer = footer

    def initial_data(self) -> MenuData:
        return MenuData()

    def tick(self, ctx: WindowContext, state: WindowState) -> WindowState:
        return state.with_data(marquee_ms=state.data.marquee_ms + ctx.tick_interval_ms)

    def handle(
        self, ctx: WindowContext, state: WindowState, event: KeyEvent
    ) -> WindowState | tuple[WindowState, Request | None]:
        if matches_key(event, "ctrl+c"):
            return state, Quit()

        if state.view == "confirm-quit":
            if matches_key(event, "y", "enter"):
                return state, Quit()
            if matches_key(event, "n", "escape"):
                return self.transition(state, "cancel")
            return state

        selected = state.data.selected
        if matches_key(event, "up", "k"):
            return state.with_data(selected=max(0, selected - 1))
        if matches_key(event, "down", "j"):
            return state.with_data(selected=max(0, min(len(self.items) - 1, selected + 1)))
        if matches_key(event, "q", "escape"):
            return self.transition(state, "ask-quit")
        if matches_key(event, "enter") and self.items:
            item = self.items[selected]
            if item.target is None:
                return self.transition(state, "ask-quit")
            return state, FocusChange(item.target)
        return state

    def draw(self, ctx: WindowContext, state: WindowState, region: Region) -> list[str]:
        inner = max(0, region.width - 2)
        body: list[str] = [""]
        for i, item in enumerate(self.items):
            text = truncate_to_width(f" {item.fmt()}", inner)
            if i == state.data.selected:
                text = f"{_SELECTED}{text}{_RESET}"
            body.append(text)
        body.append("")

        if state.view == "confirm-quit":
            body.append(" Quit dnet? (y/n)")
        else:
            body.append(" ↑/↓ select  enter open  q quit")

        # Footer goes on the last inner row
        rows = max(0, region.height - 2)
        while len(body) < rows - 1:
            body.append("")
        body = body[: max(0, rows - 1)]
        if rows > 0:
            body.append(" " + sliding_text(state.data.marquee_ms, self.footer, max(0, inner - 2)))
        return panel(self.title, body, region.width, region.height, focused=ctx.focused)
