"""Input events and legacy terminal key decoding.

Raw bytes read from the terminal are split into complete sequences with
:func:`split_sequences`, then each sequence is turned into a key
identifier such as ``"a"``, ``"ctrl+c"``, ``"shift+tab"`` or ``"pageUp"``
by :func:`parse_key`.  Windows receive :class:`KeyEvent` values and test
them with :func:`matches_key`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

__all__ = [
    "KeyEvent",
    "ResizeEvent",
    "InputEvent",
    "key_event",
    "parse_key",
    "matches_key",
    "split_sequences",
]

ESC = "\x1b"

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A decoded key press.  *key* is ``None`` for undecodable input."""

    key: str | None
    data: str


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal changed size."""

    columns: int
    rows: int


InputEvent = Union[KeyEvent, ResizeEvent]


def key_event(data: str) -> KeyEvent:
    """Build a :class:`KeyEvent` from one complete raw sequence."""
    return KeyEvent(key=parse_key(data), data=data)


# ---------------------------------------------------------------------------
# Sequence tables
# ---------------------------------------------------------------------------

# Final byte of ``CSI [1;mod] X`` / ``SS3 X`` sequences
_FINAL_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "E": "clear",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# Numeric parameter of ``CSI n [;mod] ~`` sequences
_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

_CSI_FINAL_RE = re.compile(r"^\x1b\[(?:1;(\d+))?([A-HPQRS])$")
_CSI_TILDE_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+))?~$")
_SS3_RE = re.compile(r"^\x1bO(\d?)([A-HPQRS])$")

# xterm modifier parameter is 1 + bitmask
_SHIFT = 1
_ALT = 2
_CTRL = 4


def _modifier_prefix(param: str | None) -> str:
    if not param:
        return ""
    mask = max(0, int(param) - 1)
    prefix = ""
    if mask & _CTRL:
        prefix += "ctrl+"
    if mask & _SHIFT:
        prefix += "shift+"
    if mask & _ALT:
        prefix += "alt+"
    return prefix


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


def parse_key(data: str) -> str | None:  # noqa: C901
    """Return the key identifier for one raw input sequence, or ``None``."""
    if not data:
        return None

    if data == ESC:
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == "\x00":
        return "ctrl+space"
    if data == "\x1b[Z":
        return "shift+tab"

    m = _CSI_FINAL_RE.match(data)
    if m:
        return _modifier_prefix(m.group(1)) + _FINAL_KEYS[m.group(2)]

    m = _CSI_TILDE_RE.match(data)
    if m:
        name = _TILDE_KEYS.get(int(m.group(1)))
        if name is None:
            return None
        return _modifier_prefix(m.group(2)) + name

    m = _SS3_RE.match(data)
    if m:
        return _modifier_prefix(m.group(1)) + _FINAL_KEYS[m.group(2)]

    # Ctrl + letter
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # Alt + key (ESC prefix)
    if len(data) == 2 and data[0] == ESC:
        inner = parse_key(data[1])
        if inner is None:
            return None
        if inner.startswith("ctrl+"):
            return "ctrl+alt+" + inner[len("ctrl+"):]
        if len(inner) == 1 and inner.isupper():
            return "shift+alt+" + inner.lower()
        return "alt+" + inner

    if len(data) == 1 and data.isprintable():
        return data

    return None


def matches_key(event: object, *key_ids: str) -> bool:
    """``True`` if *event* is a :class:`KeyEvent` for any of *key_ids*.

    ``"esc"`` is accepted as an alias for ``"escape"`` and ``"return"``
    for ``"enter"``.
    """
    if not isinstance(event, KeyEvent) or event.key is None:
        return False
    for key_id in key_ids:
        wanted = {"esc": "escape", "return": "enter"}.get(key_id, key_id)
        if event.key == wanted:
            return True
    return False


# ---------------------------------------------------------------------------
# Sequence splitting
# ---------------------------------------------------------------------------


def _sequence_length(data: str) -> int | None:
    """Length of the escape sequence at the start of *data*.

    Returns ``None`` when *data* holds only the beginning of a sequence.
    """
    if len(data) == 1:
        return None

    kind = data[1]
    if kind == "[":
        # CSI: parameters then one final byte in 0x40..0x7e
        for i in range(2, len(data)):
            if 0x40 <= ord(data[i]) <= 0x7E:
                return i + 1
        return None
    if kind == "O":
        # SS3: optional modifier digit then one final byte
        i = 2
        while i < len(data) and data[i].isdigit():
            i += 1
        return i + 1 if i < len(data) else None
    if kind in "]P_":
        # OSC / DCS / APC: terminated by BEL or ST
        for i in range(2, len(data)):
            if data[i] == "\x07":
                return i + 1
            if data[i] == "\\" and data[i - 1] == ESC:
                return i + 1
        return None
    # Meta: ESC followed by a single character
    return 2


def split_sequences(data: str) -> tuple[list[str], str]:
    """Split *data* into complete input sequences.

    Returns ``(sequences, remainder)`` where *remainder* is an incomplete
    escape sequence to be prefixed to the next chunk.
    """
    sequences: list[str] = []
    pos = 0
    while pos < len(data):
        if data[pos] != ESC:
            sequences.append(data[pos])
            pos += 1
            continue
        length = _sequence_length(data[pos:])
        if length is None:
            return sequences, data[pos:]
        sequences.append(data[pos : pos + length])
        pos += length
    return sequences, ""
