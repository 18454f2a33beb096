"""
In-memory query cache for API reads.

Entries are keyed by request path plus the sorted query parameters, so
``{"limit": 5, "offset": 0}`` and ``{"offset": 0, "limit": 5}`` share a key.
Invalidation works on path prefixes: invalidating ``/api/cases`` drops
``/api/cases``, ``/api/cases/stats`` and ``/api/cases/7/photos`` but leaves
``/api/case-templates`` alone.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, Tuple[Tuple[str, str], ...]]


def make_key(path: str, params: Optional[Mapping[str, Any]] = None) -> CacheKey:
    normalized = tuple(
        sorted((str(k), str(v)) for k, v in (params or {}).items() if v is not None)
    )
    return (path.rstrip("/") or "/", normalized)


def _path_matches(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


class QueryCache:
    """Thread-safe map from cache key to the decoded response body."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, Any] = {}
        self._lock = threading.Lock()

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_fetch(self, key: CacheKey, fetch: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, calling ``fetch`` on a miss."""
        with self._lock:
            if key in self._entries:
                return self._entries[key]

        value = fetch()
        with self._lock:
            self._entries[key] = value
        return value

    def invalidate(self, prefixes: Iterable[str]) -> int:
        """
        Drop every entry whose path falls under one of ``prefixes``.

        Returns:
            Number of entries removed
        """
        prefixes = list(prefixes)
        with self._lock:
            stale = [
                key for key in self._entries
                if any(_path_matches(key[0], prefix) for prefix in prefixes)
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached queries under {prefixes}")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
