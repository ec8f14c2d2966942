"""Terminal text utilities: ANSI-aware width measurement and clipping.

Widths are measured per grapheme cluster so wide (CJK, emoji) characters
take two columns and combining marks take none.
"""

from __future__ import annotations

import re

import grapheme
import wcwidth as _wcwidth

__all__ = [
    "strip_ansi",
    "visible_width",
    "truncate_to_width",
    "pad_to_width",
    "sliding_text",
    "SLIDING_TEXT_STEP_MS",
]

# SGR / cursor CSI sequences, OSC 8 hyperlinks, APC payloads
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"
    r"|\x1b\]8;;[^\x07]*\x07"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

_SGR_RESET = "\x1b[0m"

# Milliseconds per one-character advance of sliding text
SLIDING_TEXT_STEP_MS = 500

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def strip_ansi(text: str) -> str:
    """Remove escape sequences from *text*."""
    return _STRIP_RE.sub("", text)


def _grapheme_width(g: str) -> int:
    """Display width of a single grapheme cluster."""
    if not g:
        return 0
    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)
    # Emoji presentation, ZWJ sequences and flags are two columns wide
    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D) or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2
    return max(_wcwidth.wcswidth(g), _wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Number of terminal columns *text* occupies, ignoring escape codes."""
    if not text:
        return 0
    stripped = strip_ansi(text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


def _take_columns(text: str, max_cols: int) -> tuple[str, int, bool]:
    """Prefix of *text* fitting in *max_cols* columns.

    Escape sequences are kept; text is cut at grapheme boundaries.
    Returns ``(prefix, width, saw_escape)``.
    """
    out: list[str] = []
    cols = 0
    saw_escape = False
    pos = 0
    for match in _STRIP_RE.finditer(text):
        for g in grapheme.graphemes(text[pos : match.start()]):
            w = _grapheme_width(g)
            if cols + w > max_cols:
                return "".join(out), cols, saw_escape
            out.append(g)
            cols += w
        out.append(match.group(0))
        saw_escape = True
        pos = match.end()
    for g in grapheme.graphemes(text[pos:]):
        w = _grapheme_width(g)
        if cols + w > max_cols:
            break
        out.append(g)
        cols += w
    return "".join(out), cols, saw_escape


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    Overlong text is cut and *ellipsis* appended (the ellipsis counts
    towards the width).  With *pad* the result is right-padded with spaces
    to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    width = visible_width(text)
    if width <= max_width:
        return text + " " * (max_width - width) if pad else text

    ellipsis_width = visible_width(ellipsis)
    if ellipsis_width >= max_width:
        result, result_width, _ = _take_columns(ellipsis, max_width)
    else:
        prefix, prefix_width, saw_escape = _take_columns(text, max_width - ellipsis_width)
        # Don't let a style run into the ellipsis or the next region
        reset = _SGR_RESET if saw_escape else ""
        result = prefix + reset + ellipsis
        result_width = prefix_width + ellipsis_width

    if pad and result_width < max_width:
        result += " " * (max_width - result_width)
    return result


def pad_to_width(text: str, width: int) -> str:
    """Clip or right-pad *text* to exactly *width* columns (no ellipsis)."""
    return truncate_to_width(text, width, ellipsis="", pad=True)


def sliding_text(elapsed_ms: int, text: str, window: int) -> str:
    """Marquee view of *text* for a slot of *window* columns.

    Text that fits is returned unchanged.  Otherwise the view advances one
    character every :data:`SLIDING_TEXT_STEP_MS` milliseconds and wraps
    around with a single blank between the end and the start.
    """
    if window <= 0:
        return ""
    if len(text) <= window:
        return text
    cycle = text + " "
    offset = (max(elapsed_ms, 0) // SLIDING_TEXT_STEP_MS) % len(cycle)
    return "".join(cycle[(offset + i) % len(cycle)] for i in range(window))
