"""Minimal subscribe/notify helper shared by the progress store and round engine."""

from __future__ import annotations

import threading
from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class Subscribers(Generic[T]):
    """Ordered list of change callbacks.

    ``subscribe`` returns a callable that removes the callback again, so a view
    can drop its subscription when it is torn down.
    """

    def __init__(self) -> None:
        self._callbacks: List[Callable[[T], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def notify(self, payload: T) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback(payload)

    def __len__(self) -> int:
        return len(self._callbacks)
