from __future__ import annotations

import queue
import threading
from typing import Generic, Optional, TypeVar

from ..sim.core.errors import ChannelClosedError

T = TypeVar("T")

_CLOSED = object()


class Channel(Generic[T]):
    """One-directional, thread-safe hand-off that either side can close.

    Once closed, ``send`` raises and ``recv`` raises after the queued items
    have been drained.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, item: T) -> None:
        if self._closed.is_set():
            raise ChannelClosedError(f"{self.name} channel is closed")
        self._queue.put(item)

    def recv(self, timeout: Optional[float] = None) -> T:
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"nothing received on {self.name} channel within {timeout}s") from None
        if item is _CLOSED:
            # Leave the marker for any other receiver.
            self._queue.put(_CLOSED)
            raise ChannelClosedError(f"{self.name} channel is closed")
        return item  # type: ignore[return-value]

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._queue.put(_CLOSED)
