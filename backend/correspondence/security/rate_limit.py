"""
Login throttling.
Failed attempts per email are counted; after `max_attempts` the caller must
wait with exponential backoff before the next try.
"""
import time
from collections import defaultdict
from threading import Lock
from typing import Callable


class LoginThrottle:
    """In-memory throttle keyed by login identifier."""

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay: float = 2.0,
        max_delay: float = 300.0,
        clock: Callable[[], float] = time.time,
    ):
        self._attempts = defaultdict(lambda: {"count": 0, "last_time": 0.0})
        self._lock = Lock()
        self._clock = clock

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay

    def _required_delay(self, count: int) -> float:
        if count < self.max_attempts:
            return 0.0
        return min(self.base_delay * (2 ** (count - self.max_attempts)), self.max_delay)

    def retry_after(self, key: str) -> float:
        """Seconds until `key` may try again; 0 when allowed."""
        with self._lock:
            entry = self._attempts[key]
            elapsed = self._clock() - entry["last_time"]
            return max(0.0, self._required_delay(entry["count"]) - elapsed)

    def record(self, key: str, success: bool) -> None:
        with self._lock:
            entry = self._attempts[key]
            entry["last_time"] = self._clock()
            entry["count"] = 0 if success else entry["count"] + 1

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()


login_throttle = LoginThrottle()


def is_rate_limited(key: str) -> bool:
    return login_throttle.retry_after(key) > 0


def record_auth_attempt(key: str, success: bool = False) -> None:
    login_throttle.record(key, success=success)


def get_rate_limit_delay(key: str) -> float:
    return login_throttle.retry_after(key)
