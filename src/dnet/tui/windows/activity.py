"""Activity window: a spinner and a feed of lines posted from other threads."""

from __future__ import annotations

from dataclasses import dataclass

from dnet.tui.channel import Mailbox
from dnet.tui.keys import KeyEvent, matches_key
from dnet.tui.layout import Region, panel
from dnet.tui.state import WindowContext
from dnet.tui.utils import truncate_to_width
from dnet.tui.view import ViewTable
from dnet.tui.window import FocusChange, Request, Window, WindowState

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
MAX_LINES = 50

_DIM = "\x1b[2m"
_RESET = "\x1b[0m"


@dataclass(frozen=True)
class ActivityData:
    frame: int = 0
    ticks: int = 0
    lines: tuple[str, ...] = ()


class ActivityWindow(Window):
    id = "activity"
    title = "Activity"
    views = ViewTable(
        ["running", "paused"],
        "running",
        {
            ("running", "pause"): "paused",
            ("paused", "resume"): "running",
        },
        owner="activity",
    )

    def __init__(self, mailbox: Mailbox[str] | None = None) -> None:
        self.mailbox: Mailbox[str] = mailbox if mailbox is not None else Mailbox()

    def initial_data(self) -> ActivityData:
        return ActivityData()

    def tick(self, ctx: WindowContext, state: WindowState) -> WindowState:
        data: ActivityData = state.data
        incoming = self.mailbox.drain()
        if incoming:
            state = state.with_data(lines=(data.lines + tuple(incoming))[-MAX_LINES:])
        if state.view == "running":
            state = state.with_data(
                frame=(data.frame + 1) % len(SPINNER_FRAMES),
                ticks=data.ticks + 1,
            )
        return state

    def handle(
        self, ctx: WindowContext, state: WindowState, event: KeyEvent
    ) -> WindowState | tuple[WindowState, Request | None]:
        if matches_key(event, "escape", "tab"):
            return state, FocusChange("menu")
        if matches_key(event, "p", "space"):
            return self.transition(state, "pause" if state.view == "running" else "resume")
        if matches_key(event, "c"):
            return state.with_data(lines=())
        return state

    def draw(self, ctx: WindowContext, state: WindowState, region: Region) -> list[str]:
        data: ActivityData = state.data
        inner = max(0, region.width - 2)
        seconds = ctx.elapsed_ms // 1000
        if state.view == "running":
            status = f" {SPINNER_FRAMES[data.frame]} running"
        else:
            status = " ‖ paused"
        body = [
            truncate_to_width(f"{status}  ticks {data.ticks}  uptime {seconds}s", inner),
            f" {_DIM}p pause  c clear  esc back{_RESET}",
            "",
        ]
        # Newest lines at the bottom; keep whatever fits
        room = max(0, region.height - 2 - len(body))
        shown = data.lines[-room:] if room else ()
        body.extend(truncate_to_width(f" {line}", inner) for line in shown)
        return panel(self.title, body, region.width, region.height, focused=ctx.focused)
