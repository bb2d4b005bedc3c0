"""Fixed-window request budgets for upstream providers."""

import threading
import time
from dataclasses import dataclass
from typing import Callable

from utils.logger import get_logger

logger = get_logger(__name__)

WINDOW_SECONDS = {
    "minute": 60.0,
    "hour": 3600.0,
    "day": 86400.0,
    "month": 2592000.0,  # 30 days
}


@dataclass
class _Window:
    count: int
    reset_at: float
    limit: int


class RateLimitTracker:
    """
    Thread-safe per-key request counter.

    A window opens on the first request for a key and lasts ``window_s``
    seconds; once ``limit`` requests have been counted inside it, further
    checks fail until the window expires.

    Args:
        budgets: Mapping of key -> (limit, period) where period is one of
            "minute", "hour", "day" or "month"
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        budgets: dict[str, tuple[int, str]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._budgets = dict(budgets or {})
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _budget(self, key: str) -> tuple[int, float] | None:
        budget = self._budgets.get(key)
        if budget is None:
            return None
        limit, period = budget
        if period not in WINDOW_SECONDS:
            raise ValueError(f"Unknown rate-limit period '{period}' for {key}")
        return limit, WINDOW_SECONDS[period]

    def check_and_increment(self, key: str) -> bool:
        """
        Count one request against ``key``.

        Returns:
            True when the request fits the budget (and was counted), False otherwise.
            Keys without a configured budget are never limited.
        """
        budget = self._budget(key)
        if budget is None:
            return True
        limit, window_s = budget

        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                if limit <= 0:
                    return False
                self._windows[key] = _Window(count=1, reset_at=now + window_s, limit=limit)
                return True

            if window.count >= window.limit:
                logger.warning(
                    f"Rate limit reached for {key}",
                    extra={"extra_fields": {"key": key, "limit": window.limit}},
                )
                return False

            window.count += 1
            return True

    def remaining(self, key: str) -> int | None:
        """Requests left in the current window; None when ``key`` is unlimited."""
        budget = self._budget(key)
        if budget is None:
            return None
        limit = budget[0]
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                return limit
            return max(0, window.limit - window.count)

    def reset_time(self, key: str) -> float | None:
        """Clock value at which the current window for ``key`` expires."""
        with self._lock:
            window = self._windows.get(key)
            return window.reset_at if window else None

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)
