"""
In-memory response cache with per-entry TTL.

Entries are evicted lazily: an expired entry is removed the next time its
key is looked up. There is no background sweep and no size bound.
"""

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..config.logger_module import log_debug, log_info


@dataclass
class CacheEntry:
    """A stored payload and the moment it was stored."""
    payload: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl


class ResponseCache:
    """
    Keyed short-TTL store of successful upstream payloads.

    Features:
    - MD5 keys over the canonical JSON of (endpoint, params, body)
    - Freshness evaluated at read time, expired entries deleted on read
    - A lock around every check-then-act so worker threads can share it
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            clock: Monotonic time source in seconds
        """
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(endpoint: str,
                 params: Optional[Dict[str, Any]] = None,
                 body: Any = None) -> str:
        """
        Build a deterministic cache key.

        Any difference in endpoint, query parameters or body yields a
        different key; dict ordering does not.
        """
        content = json.dumps(
            [endpoint, params or {}, body],
            sort_keys=True,
            separators=(",", ":"),
            default=str,
        )
        digest = hashlib.md5(content.encode("utf-8")).hexdigest()
        return f"{endpoint}:{digest}"

    def get(self, key: str) -> Optional[Any]:
        """
        Return the stored payload, or None when absent or expired.

        Expired entries are removed as a side effect.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                log_debug(f"Cache miss: {key}")
                return None

            now = self._clock()
            if entry.is_expired(now):
                del self._entries[key]
                self.misses += 1
                log_debug(f"Cache expired: {key} ({now - entry.stored_at:.0f}s old)")
                return None

            self.hits += 1
            log_debug(f"Cache hit: {key}")
            return entry.payload

    def put(self, key: str, payload: Any, ttl: Optional[float]) -> bool:
        """
        Store a payload for ttl seconds. Last write wins.

        Returns:
            False when ttl is missing or non-positive and nothing was stored
        """
        if not ttl or ttl <= 0:
            return False

        with self._lock:
            self._entries[key] = CacheEntry(payload=payload, stored_at=self._clock(), ttl=ttl)
        log_debug(f"Cached response for {key} (ttl={ttl}s)")
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_cache_stats(self) -> Dict[str, int]:
        """Entry count plus hit/miss counters."""
        with self._lock:
            return {
                "total_entries": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
            }

    def clear_cache(self) -> None:
        """Drop every entry."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        log_info(f"Cleared {removed} entries from response cache")
