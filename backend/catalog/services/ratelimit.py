import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_in: int  # seconds until the client's window ends
    window: int

    def headers(self) -> Dict[str, str]:
        return {
            'RateLimit-Policy': f'{self.limit};w={self.window}',
            'RateLimit-Limit': str(self.limit),
            'RateLimit-Remaining': str(self.remaining),
            'RateLimit-Reset': str(self.reset_in),
        }


class RateLimiter:
    """Counts hits per client key in fixed windows.

    A client's window opens on its first hit and resets once ``window``
    seconds have passed. State is in-process only.
    """

    def __init__(self, limit: int, window: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, Tuple[int, float]] = {}  # key -> (count, window_end)
        self._lock = threading.Lock()
        self._next_prune = 0.0

    def hit(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            if now >= self._next_prune:
                self._prune(now)
            count, window_end = self._hits.get(key, (0, 0.0))
            if now >= window_end:
                count, window_end = 0, now + self.window
            count += 1
            self._hits[key] = (count, window_end)
        return RateLimitResult(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_in=max(0, math.ceil(window_end - now)),
            window=self.window,
        )

    def _prune(self, now: float) -> None:
        expired = [k for k, (_, end) in self._hits.items() if end <= now]
        for k in expired:
            del self._hits[k]
        self._next_prune = now + self.window
