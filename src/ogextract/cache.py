"""
In-memory LRU cache for extraction results, keyed by source URL.

The cache is an ordinary object: the caller constructs it, hands it to the
client and drops it when done. Nothing is shared at module level.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ogextract.config.config import CacheConfig

logger = logging.getLogger(__name__)


def cache_key(url: str) -> str:
    """Normalise ``url`` into a cache key: fragment dropped, query parameters sorted."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return f"og:{url}"
    if not parts.scheme or not parts.netloc:
        return f"og:{url}"
    query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)))
    path = parts.path or "/"
    return "og:" + urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, query, ""))


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0


class ExtractionCache:
    """LRU cache whose entries expire ``ttl_seconds`` after they are stored."""

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _live_entry(self, key: str) -> Optional[Tuple[float, Any]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, _ = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return entry

    def get(self, url: str) -> Optional[Any]:
        key = cache_key(url)
        entry = self._live_entry(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        self._entries.move_to_end(key)
        return entry[1]

    def set(self, url: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        key = cache_key(url)
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = (self._clock() + ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("Evicted cache entry %s", evicted)

    def delete(self, url: str) -> None:
        self._entries.pop(cache_key(url), None)

    def clear(self) -> None:
        self._entries.clear()

    def has(self, url: str) -> bool:
        return self._live_entry(cache_key(url)) is not None

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, evictions=self._evictions, size=len(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


class NullCache:
    """Cache stand-in used when caching is disabled. Stores nothing."""

    def get(self, url: str) -> Optional[Any]:
        return None

    def set(self, url: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        return None

    def delete(self, url: str) -> None:
        return None

    def clear(self) -> None:
        return None

    def has(self, url: str) -> bool:
        return False

    def stats(self) -> Optional[CacheStats]:
        return None

    def __len__(self) -> int:
        return 0


AnyCache = Union[ExtractionCache, NullCache]


def create_cache(config: Optional[CacheConfig] = None, clock: Callable[[], float] = time.monotonic) -> AnyCache:
    """Build the cache described by ``config``; a disabled config gives a :class:`NullCache`."""
    config = config or CacheConfig()
    if not config.enabled:
        return NullCache()
    return ExtractionCache(ttl_seconds=config.ttl_seconds, max_size=config.max_size, clock=clock)
