"""Single-consumer mailbox for results produced off the loop thread.

Background work (a download, a streamed response) must never touch
:class:`~dnet.tui.state.AppState`.  It posts results to a
:class:`Mailbox` held by the window that wants them; the window drains the
mailbox from its own ``tick``, on the loop thread, and folds the items
into its state.
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, TypeVar

__all__ = ["Mailbox"]

T = TypeVar("T")


class Mailbox(Generic[T]):
    """Thread-safe queue with any number of producers and one consumer."""

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[T] = queue.Queue(maxsize=maxsize)
        self._consumer: int | None = None
        self._closed = threading.Event()

    def post(self, item: T) -> bool:
        """Queue *item* from any thread.

        Returns ``False`` if the mailbox is closed or full.
        """
        if self._closed.is_set():
            return False
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            return False
        return True

    def drain(self, limit: int | None = None) -> list[T]:
        """Take up to *limit* queued items without blocking.

        The first thread to drain becomes the consumer; draining from any
        other thread afterwards raises ``RuntimeError``.
        """
        ident = threading.get_ident()
        if self._consumer is None:
            self._consumer = ident
        elif self._consumer != ident:
            raise RuntimeError("mailbox drained from a second consumer thread")

        items: list[T] = []
        while limit is None or len(items) < limit:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return items

    def close(self) -> None:
        """Refuse further posts.  Items already queued can still be drained."""
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def __len__(self) -> int:
        return self._queue.qsize()
