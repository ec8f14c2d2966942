"""Tests for dnet.tui.terminal -- ProcessTerminal output diffing and input decoding.

Input is fed through an ``os.pipe`` standing in for stdin; no tty is needed.
"""

from __future__ import annotations

import io
import os

import pytest

from dnet.tui.errors import BackendUnavailable
from dnet.tui.keys import KeyEvent, ResizeEvent
from dnet.tui.terminal import ProcessTerminal


@pytest.fixture
def piped():
    """A ProcessTerminal reading from a pipe, with writes captured."""
    term = ProcessTerminal()
    in_r, in_w = os.pipe()
    wake_r, wake_w = os.pipe()
    term._in_fd = in_r
    term._wake_r, term._wake_w = wake_r, wake_w
    writes: list[str] = []
    term._write = writes.append  # type: ignore[method-assign]
    yield term, in_w, writes
    for fd in (in_r, in_w, wake_r, wake_w):
        os.close(fd)


class TestPresent:
    def test_first_frame_is_full(self, piped) -> None:
        term, _in_w, writes = piped
        term.present(["a", "b"])
        assert len(writes) == 1
        assert writes[0].startswith("\x1b[2J\x1b[H")
        assert "\x1b[1;1Ha" in writes[0]
        assert "\x1b[2;1Hb" in writes[0]

    def test_only_changed_rows_written(self, piped) -> None:
        term, _in_w, writes = piped
        term.present(["a", "b"])
        term.present(["a", "c"])
        assert "\x1b[2J" not in writes[1]
        assert "\x1b[1;1H" not in writes[1]
        assert "\x1b[2;1Hc" in writes[1]

    def test_identical_frame_writes_nothing(self, piped) -> None:
        term, _in_w, writes = piped
        term.present(["a"])
        term.present(["a"])
        assert len(writes) == 1

    def test_full_flag_and_height_change_repaint(self, piped) -> None:
        term, _in_w, writes = piped
        term.present(["a"])
        term.present(["a"], full=True)
        term.present(["a", "b"])
        assert all(w.startswith("\x1b[2J") for w in writes)


class TestPoll:
    def test_idle(self, piped) -> None:
        term, _in_w, _writes = piped
        assert term.poll(0.0) is None

    def test_keys_are_queued_one_per_poll(self, piped) -> None:
        term, in_w, _writes = piped
        os.write(in_w, b"a\x1b[A")
        assert term.poll(0.1) == KeyEvent("a", "a")
        assert term.poll(0.0) == KeyEvent("up", "\x1b[A")
        assert term.poll(0.0) is None

    def test_utf8_split_across_reads(self, piped) -> None:
        term, in_w, _writes = piped
        encoded = "é".encode()
        os.write(in_w, encoded[:1])
        assert term.poll(0.1) is None
        os.write(in_w, encoded[1:])
        assert term.poll(0.1) == KeyEvent("é", "é")

    def test_lone_escape_flushed(self, piped) -> None:
        term, in_w, _writes = piped
        os.write(in_w, b"\x1b")
        assert term.poll(0.1) == KeyEvent("escape", "\x1b")

    def test_resize_wakes_poll(self, piped) -> None:
        term, _in_w, _writes = piped
        term._on_sigwinch(0, None)
        event = term.poll(1.0)
        assert isinstance(event, ResizeEvent)
        assert term.poll(0.0) is None

    def test_closed_stdin(self) -> None:
        term = ProcessTerminal()
        in_r, in_w = os.pipe()
        wake_r, wake_w = os.pipe()
        term._in_fd, term._wake_r = in_r, wake_r
        os.close(in_w)
        try:
            with pytest.raises(BackendUnavailable):
                term.poll(0.1)
        finally:
            for fd in (in_r, wake_r, wake_w):
                os.close(fd)

    def test_not_started(self) -> None:
        with pytest.raises(BackendUnavailable):
            ProcessTerminal().poll(0.0)


class TestStart:
    def test_not_a_tty(self, monkeypatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO())
        with pytest.raises(BackendUnavailable):
            ProcessTerminal().start()

    def test_stop_without_start_is_noop(self) -> None:
        ProcessTerminal().stop()
