"""Screen regions, layout trees and frame composition.

A :class:`Split` tree divides the terminal into one :class:`Region` per
window.  Each cycle the scheduler blits every window's lines into its
region of a :class:`Frame` and presents ``frame.lines()`` as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Union

from dnet.tui.errors import ConfigurationFault
from dnet.tui.utils import pad_to_width, truncate_to_width, visible_width

__all__ = ["Region", "Split", "Frame", "panel"]

_BOLD = "\x1b[1m"
_ACCENT = "\x1b[36m"
_DIM = "\x1b[2m"
_RESET = "\x1b[0m"


@dataclass(frozen=True)
class Region:
    """A rectangle of terminal cells, 0-based."""

    row: int
    col: int
    width: int
    height: int


LayoutNode = Union[str, "Split"]


class Split:
    """Divide a region into weighted rows or columns.

    *children* are window ids or nested splits, each optionally paired with
    an integer weight: ``Split("columns", [(1, "menu"), (2, right)])``.
    """

    def __init__(
        self,
        direction: Literal["rows", "columns"],
        children: Iterable[LayoutNode | tuple[int, LayoutNode]],
    ) -> None:
        if direction not in ("rows", "columns"):
            raise ConfigurationFault(None, str(direction), "split direction must be 'rows' or 'columns'")
        self.direction = direction
        self.children: list[tuple[int, LayoutNode]] = []
        for child in children:
            weight, node = child if isinstance(child, tuple) else (1, child)
            if weight <= 0:
                raise ConfigurationFault(None, str(node), "split weight must be positive")
            self.children.append((weight, node))
        if not self.children:
            raise ConfigurationFault(None, direction, "split has no children")

    def window_ids(self) -> list[str]:
        """Window ids in composition order (depth first)."""
        ids: list[str] = []
        for _weight, node in self.children:
            if isinstance(node, Split):
                ids.extend(node.window_ids())
            else:
                ids.append(node)
        return ids

    def validate(self, registered: Iterable[str]) -> None:
        """Every registered window appears exactly once and nothing else does."""
        ids = self.window_ids()
        known = set(registered)
        seen: set[str] = set()
        for window_id in ids:
            if window_id not in known:
                raise ConfigurationFault(None, window_id, "layout names an unregistered window")
            if window_id in seen:
                raise ConfigurationFault(None, window_id, "layout places a window twice")
            seen.add(window_id)
        for window_id in known - seen:
            raise ConfigurationFault(None, window_id, "registered window has no region in the layout")

    def regions(self, width: int, height: int, row: int = 0, col: int = 0) -> dict[str, Region]:
        """Allot a region to every window id in this tree."""
        total = sum(weight for weight, _node in self.children)
        span = width if self.direction == "columns" else height
        result: dict[str, Region] = {}
        offset = 0
        for index, (weight, node) in enumerate(self.children):
            if index == len(self.children) - 1:
                size = span - offset
            else:
                size = span * weight // total
            if self.direction == "columns":
                area = Region(row, col + offset, size, height)
            else:
                area = Region(row + offset, col, width, size)
            if isinstance(node, Split):
                result.update(node.regions(area.width, area.height, area.row, area.col))
            else:
                result[node] = area
            offset += size
        return result


class Frame:
    """One full screen of composed output."""

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._segments: list[list[tuple[int, str]]] = [[] for _ in range(self.height)]

    def blit(self, region: Region, lines: list[str]) -> None:
        """Place *lines* into *region*, clipping and padding to its size.

        Regions are expected not to overlap.
        """
        if region.col >= self.width:
            return
        width = min(region.width, self.width - region.col)
        if width <= 0:
            return
        for i in range(region.height):
            row = region.row + i
            if row < 0 or row >= self.height:
                continue
            text = lines[i] if i < len(lines) else ""
            self._segments[row].append((region.col, pad_to_width(text, width)))

    def lines(self) -> list[str]:
        out: list[str] = []
        for segments in self._segments:
            parts: list[str] = []
            cursor = 0
            for col, text in sorted(segments, key=lambda seg: seg[0]):
                if col > cursor:
                    parts.append(" " * (col - cursor))
                    cursor = col
                parts.append(text)
                cursor += visible_width(text)
            if cursor < self.width:
                parts.append(" " * (self.width - cursor))
            out.append("".join(parts))
        return out


def panel(
    title: str,
    body: list[str],
    width: int,
    height: int,
    focused: bool = False,
) -> list[str]:
    """Draw *body* inside a titled box of exactly *width* x *height* cells.

    The focused window's border is drawn in the accent color with a bold
    title.
    """
    if width < 4 or height < 2:
        return [truncate_to_width(line, width, "") for line in body[:height]]

    border = _ACCENT if focused else _DIM
    inner = width - 2
    label = truncate_to_width(f" {title} ", inner - 1, "") if title else ""
    if focused and label:
        label = f"{_BOLD}{label}{_RESET}{border}"
    fill = "─" * max(0, inner - 1 - visible_width(label))
    lines = [f"{border}┌─{label}{fill}┐{_RESET}"]

    for i in range(height - 2):
        text = body[i] if i < len(body) else ""
        lines.append(f"{border}│{_RESET}{pad_to_width(text, inner)}{border}│{_RESET}")

    lines.append(f"{border}└{'─' * inner}┘{_RESET}")
    return lines
