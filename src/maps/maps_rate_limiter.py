"""
Sliding-window rate limiter for upstream API requests.

Keeps, per endpoint, the timestamps of the calls admitted during the trailing
window. Admission blocks the calling thread until the endpoint has budget.
The limiter is process-local and does not coordinate across instances.
"""

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from ..config.logger_module import log_info, log_warning


class SlidingWindowRateLimiter:
    """
    Per-endpoint sliding-window admission control.

    An endpoint may receive at most max_requests calls within any window of
    window_ms milliseconds. A caller over budget sleeps until the oldest
    call leaves the window and then re-evaluates from scratch, so a call is
    never recorded while the endpoint is over budget.
    """

    def __init__(self,
                 window_ms: int = 60000,
                 max_requests: int = 100,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the rate limiter.

        Args:
            window_ms: Window length in milliseconds
            max_requests: Calls admitted per endpoint per window
            clock: Monotonic time source in seconds
            sleep: Blocking sleep taking seconds
        """
        if window_ms <= 0 or max_requests <= 0:
            raise ValueError("window_ms and max_requests must be positive")

        self.window_ms = window_ms
        self.max_requests = max_requests
        self._window = window_ms / 1000.0
        self._clock = clock
        self._sleep = sleep
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

        log_info(
            f"RateLimiter initialized: {max_requests} requests per {window_ms}ms"
        )

    def _trim(self, requests: Deque[float], now: float) -> None:
        """Drop timestamps that have left the window, oldest first."""
        while requests and now - requests[0] >= self._window:
            requests.popleft()

    def _try_admit(self, endpoint: str) -> float:
        """
        Record a call if the endpoint has budget.

        Returns:
            0.0 when admitted, else the seconds to wait before retrying
        """
        with self._lock:
            now = self._clock()
            requests = self._windows.setdefault(endpoint, deque())
            self._trim(requests, now)

            if len(requests) >= self.max_requests:
                return max(self._window - (now - requests[0]), 0.0)

            requests.append(now)
            return 0.0

    def admit(self, endpoint: str) -> None:
        """
        Block until the endpoint has budget, then record the call.

        Args:
            endpoint: Endpoint identifier the budget applies to
        """
        while True:
            wait_time = self._try_admit(endpoint)
            if wait_time == 0.0:
                return

            log_warning(
                f"Rate limited on {endpoint}. Waiting {wait_time:.2f}s "
                f"({self.max_requests} requests per {self.window_ms}ms)"
            )
            self._sleep(wait_time)

    def get_wait_time(self, endpoint: str) -> float:
        """
        Seconds until the endpoint would admit a call, without recording one.
        """
        with self._lock:
            now = self._clock()
            requests = self._windows.get(endpoint)
            if not requests:
                return 0.0
            self._trim(requests, now)
            if len(requests) < self.max_requests:
                return 0.0
            return max(self._window - (now - requests[0]), 0.0)

    def get_request_count(self, endpoint: str) -> int:
        """Calls recorded for the endpoint within the current window."""
        with self._lock:
            requests = self._windows.get(endpoint)
            if not requests:
                return 0
            self._trim(requests, self._clock())
            return len(requests)
