"""Process-wide cache of rendered preview images."""

from __future__ import annotations

import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Callable, NamedTuple

DEFAULT_TTL_SECONDS = 600.0
DEFAULT_MAX_ENTRIES = 100


class CacheKey(NamedTuple):
    entity_id: str
    output_format: str
    variant: str


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    body: bytes
    etag: str
    created_at: float
    status: int = 200
    content_type: str = "image/png"


@dataclass(frozen=True)
class CacheLookup:
    """Result of a cache hit; ``not_modified`` when the validator matched."""

    entry: CacheEntry
    not_modified: bool = False


def make_etag(body: bytes) -> str:
    return f'W/"{hashlib.sha1(body).hexdigest()[:16]}"'


class ResponseCache:
    """Bounded, time-limited map from request fingerprint to rendered body.

    Entries expire ``ttl_seconds`` after insertion. When full, inserting a new
    key evicts the oldest inserted entry. Safe to share between threads.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("Cache capacity must be at least 1.")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: CacheKey, if_none_match: str | None = None) -> CacheLookup | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at > self.ttl_seconds:
                del self._entries[key]
                return None
        if if_none_match and if_none_match == entry.etag:
            return CacheLookup(entry=entry, not_modified=True)
        return CacheLookup(entry=entry)

    def put(
        self,
        key: CacheKey,
        body: bytes,
        *,
        status: int = 200,
        content_type: str = "image/png",
    ) -> str:
        """Store ``body`` under ``key`` and return its ETag."""

        etag = make_etag(body)
        entry = CacheEntry(
            key=key,
            body=body,
            etag=etag,
            created_at=self._clock(),
            status=status,
            content_type=content_type,
        )
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = entry
        return etag

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
