"""
TTL cache for rendered responses, keyed by canonical request URL.

Entries expire purely by age; nothing invalidates them early. Concurrent
misses may each compute and store the same value, which is harmless.

The cache lives in process memory. With several uvicorn workers each
worker keeps its own copy, so each has its own 60 s window and two
workers may serve different snapshots at the same moment. Put a shared
HTTP cache or CDN in front of /total when that matters; the response
already carries `Cache-Control: public, max-age=<ttl>`.
"""
import threading
import time
from typing import Callable, Optional

from cachetools import TTLCache

from ..config import get_settings


class ResponseCache:
    def __init__(self, ttl_seconds: float, maxsize: int = 128, timer: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._cache.get(key)

    def put(self, key: str, body: bytes) -> None:
        with self._lock:
            self._cache[key] = body

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


_total_cache = None


def get_total_cache() -> ResponseCache:
    """Shared cache for /total (FastAPI dependency)."""
    global _total_cache
    if _total_cache is None:
        _total_cache = ResponseCache(ttl_seconds=get_settings().total_cache_ttl_seconds)
    return _total_cache
