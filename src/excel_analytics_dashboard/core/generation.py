from __future__ import annotations

from threading import Lock


class RequestGeneration:
    """Monotonic request counter for one operation kind.

    A response is current only if no request of the same kind was started
    after it.
    """

    def __init__(self) -> None:
        self._latest = 0
        self._lock = Lock()

    def next(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._latest

    @property
    def latest(self) -> int:
        with self._lock:
            return self._latest
