"""
Process-wide request counter.

Fed by ``RequestCounterMiddleware``; read and reset through the API.
"""

import threading


class RequestCounter:
    """Thread-safe request counter guarded by a single lock"""

    def __init__(self):
        self._lock = threading.Lock()
        self._count = 0

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def get_count(self) -> int:
        with self._lock:
            return self._count

    def reset(self) -> None:
        with self._lock:
            self._count = 0


_request_counter = RequestCounter()


def get_request_counter() -> RequestCounter:
    """Get the process request counter"""
    return _request_counter
