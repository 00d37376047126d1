import threading
import time
from dataclasses import dataclass


@dataclass
class _Window:
    count: int
    started_at: float
    length: int


class InMemoryRateLimiter:
    """
    Fixed-window counter per key (client ip + path).
    Counters live in process memory, so limits apply per worker. Expired
    windows are swept at most once per ``sweep_interval`` seconds.
    """

    def __init__(self, clock=time.monotonic, sweep_interval: float = 60.0) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, _Window] = {}
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        stale = [k for k, w in self._windows.items() if now - w.started_at >= w.length]
        for key in stale:
            del self._windows[key]
        self._last_sweep = now

    def allow(self, key: str, limit: int, window_seconds: int) -> tuple[bool, int]:
        """
        Count one hit for ``key``. Returns (allowed, retry_after_seconds).
        """
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)
            window = self._windows.get(key)
            if window is None or now - window.started_at >= window_seconds:
                window = _Window(count=0, started_at=now, length=window_seconds)
                self._windows[key] = window
            if window.count >= limit:
                return False, max(1, int(window_seconds - (now - window.started_at)))
            window.count += 1
            return True, 0

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


rate_limiter = InMemoryRateLimiter()
