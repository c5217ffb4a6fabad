import threading


class VisitCounter:
    """Process-wide request counter. Each increment is applied exactly once under the lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0

    def increment(self) -> int:
        with self._lock:
            self._total += 1
            return self._total

    @property
    def total(self) -> int:
        with self._lock:
            return self._total

    def reset(self) -> None:
        with self._lock:
            self._total = 0
