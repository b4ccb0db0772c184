"""Ordered queue of zero-argument completion callbacks."""

from __future__ import annotations

import threading
from typing import Callable

Callback = Callable[[], None]


class CallbackQueue:
    """Append-only while pending; drained in one step on completion."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Callback] = []

    def append(self, callback: Callback | None) -> None:
        if callback is None:
            return
        with self._lock:
            self._items.append(callback)

    def drain(self) -> list[Callback]:
        """Return pending callbacks in registration order and clear the queue."""

        with self._lock:
            items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
