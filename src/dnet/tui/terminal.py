"""Render backend and input source over the controlling terminal.

Defines the two narrow interfaces the scheduler depends on,
:class:`RenderBackend` and :class:`InputSource`, and
:class:`ProcessTerminal`, which implements both on top of
``sys.stdin``/``sys.stdout`` with raw mode, the alternate screen and
SIGWINCH-based resize detection.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import signal
import sys
import termios
import tty
from collections import deque
from typing import Protocol

from dnet.tui.errors import BackendUnavailable, TransientInputError
from dnet.tui.keys import InputEvent, ResizeEvent, key_event, split_sequences

__all__ = ["RenderBackend", "InputSource", "ProcessTerminal"]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_MOVE_TO_FMT = "\x1b[{};1H"
_RESET = "\x1b[0m"

# Seconds to wait for the rest of a split escape sequence before treating
# what we have (usually a lone ESC) as complete.
_SEQUENCE_TIMEOUT = 0.01


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class RenderBackend(Protocol):
    """Presents one full frame at a time."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def present(self, lines: list[str], full: bool = False) -> None:
        """Show *lines* as the whole screen.  *full* forces a repaint."""
        ...


class InputSource(Protocol):
    """Yields the next input event, waiting at most *timeout* seconds."""

    def poll(self, timeout: float) -> InputEvent | None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Raw-mode terminal on the process's stdin/stdout.

    Use as a context manager, or call :meth:`start` and :meth:`stop`; the
    original terminal mode is always restored by :meth:`stop`.
    """

    def __init__(self) -> None:
        self._in_fd: int | None = None
        self._out_fd: int | None = None
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: object = None
        self._wake_r: int | None = None
        self._wake_w: int | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending: deque[InputEvent] = deque()
        self._partial = ""
        self._previous_lines: list[str] = []
        self._resized = False
        self._started = False

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(sys.stdout.fileno()).lines
        except (ValueError, OSError):
            return 24

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        """Enter raw mode and the alternate screen."""
        try:
            in_fd = sys.stdin.fileno()
            out_fd = sys.stdout.fileno()
        except (AttributeError, ValueError, OSError) as e:
            raise BackendUnavailable(f"terminal unavailable: {e}") from e
        if not (os.isatty(in_fd) and os.isatty(out_fd)):
            raise BackendUnavailable("terminal unavailable: stdin/stdout is not a tty")

        try:
            self._original_termios = termios.tcgetattr(in_fd)
            tty.setraw(in_fd)
        except termios.error as e:
            raise BackendUnavailable(f"cannot enter raw mode: {e}") from e

        self._in_fd = in_fd
        self._out_fd = out_fd
        self._started = True

        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_w, False)
        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._write(_ALT_SCREEN_ENABLE + _HIDE_CURSOR + _CLEAR_SCREEN)
        logger.info("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Restore the terminal.  Safe to call more than once."""
        if not self._started:
            return
        self._started = False

        try:
            self._write(_RESET + _SHOW_CURSOR + _ALT_SCREEN_DISABLE)
        except BackendUnavailable:
            logger.warning("could not leave the alternate screen")

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        for fd in (self._wake_r, self._wake_w):
            if fd is not None:
                os.close(fd)
        self._wake_r = self._wake_w = None

        if self._original_termios is not None and self._in_fd is not None:
            termios.tcsetattr(self._in_fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None
        logger.info("terminal restored")

    def __enter__(self) -> ProcessTerminal:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -- RenderBackend ------------------------------------------------------

    def present(self, lines: list[str], full: bool = False) -> None:
        """Write the changed rows of *lines* in a single write."""
        if full or len(lines) != len(self._previous_lines):
            out = [_CLEAR_SCREEN]
            changed = range(len(lines))
        else:
            out = []
            changed = [
                i for i, line in enumerate(lines) if line != self._previous_lines[i]
            ]
        for i in changed:
            out.append(_MOVE_TO_FMT.format(i + 1))
            out.append(lines[i])
            out.append(_RESET)
        self._previous_lines = list(lines)
        if out:
            self._write("".join(out))

    # -- InputSource --------------------------------------------------------

    def poll(self, timeout: float) -> InputEvent | None:
        """Return the next event, waiting up to *timeout* seconds."""
        if self._resized:
            self._resized = False
            self._drain_wake()
            return ResizeEvent(columns=self.columns, rows=self.rows)
        if self._pending:
            return self._pending.popleft()
        if self._in_fd is None or self._wake_r is None:
            raise BackendUnavailable("terminal is not started")

        try:
            readable, _, _ = select.select([self._in_fd, self._wake_r], [], [], max(timeout, 0.0))
        except OSError as e:
            raise TransientInputError(f"select on stdin failed: {e}") from e

        if self._wake_r in readable:
            self._drain_wake()
            self._resized = False
            return ResizeEvent(columns=self.columns, rows=self.rows)
        if self._in_fd not in readable:
            return None

        self._read_available()
        if self._partial:
            # Wait briefly for the rest of a split escape sequence
            ready, _, _ = select.select([self._in_fd], [], [], _SEQUENCE_TIMEOUT)
            if ready:
                self._read_available()
            if self._partial:
                self._pending.append(key_event(self._partial))
                self._partial = ""

        return self._pending.popleft() if self._pending else None

    # -- private ------------------------------------------------------------

    def _read_available(self) -> None:
        try:
            raw = os.read(self._in_fd, 4096)  # type: ignore[arg-type]
        except OSError as e:
            raise TransientInputError(f"read from stdin failed: {e}") from e
        if not raw:
            raise BackendUnavailable("stdin was closed")
        data = self._partial + self._decoder.decode(raw)
        sequences, self._partial = split_sequences(data)
        for sequence in sequences:
            self._pending.append(key_event(sequence))

    def _drain_wake(self) -> None:
        if self._wake_r is None:
            return
        while select.select([self._wake_r], [], [], 0)[0]:
            os.read(self._wake_r, 64)

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        self._resized = True
        if self._wake_w is not None:
            try:
                os.write(self._wake_w, b"\0")
            except BlockingIOError:
                pass

    def _write(self, data: str) -> None:
        """Write *data* to the terminal in one call."""
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError as e:
            raise BackendUnavailable(f"write to terminal failed: {e}") from e
