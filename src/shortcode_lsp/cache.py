"""In-memory caches used by the completion engine."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """Capacity-limited mapping with FIFO eviction.

    Inserting a new key into a full cache evicts the single oldest-inserted
    key first. Reads do not refresh an entry's position and overwriting an
    existing key keeps its original insertion slot.
    """

    def __init__(self, max_entries: int):
        if max_entries < 1:
            msg = f"max_entries must be positive, got {max_entries}"
            raise ValueError(msg)
        self.max_entries = max_entries
        self._data: dict[K, V] = {}

    def get(self, key: K, default: V | None = None) -> V | None:
        """Get a cached value, or ``default`` when absent."""
        return self._data.get(key, default)

    def set(self, key: K, value: V) -> None:
        """Insert or overwrite a value, evicting the oldest key when full."""
        if key not in self._data and len(self._data) >= self.max_entries:
            oldest = next(iter(self._data))
            del self._data[oldest]
            logger.debug(f"Evicted cache entry {oldest!r}")
        self._data[key] = value

    def pop(self, key: K, default: V | None = None) -> V | None:
        return self._data.pop(key, default)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[K]:
        return list(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data))


class DocumentVersionCache(Generic[V]):
    """Per-document cache keyed by document uri and version.

    Storing a value for a new version of a document drops every entry that
    belongs to an older version of the same document.
    """

    def __init__(self, max_entries: int):
        self._cache: BoundedCache[tuple[str, int, str], V] = BoundedCache(max_entries)

    def get(self, uri: str, version: int, name: str) -> V | None:
        return self._cache.get((uri, version, name))

    def set(self, uri: str, version: int, name: str, value: V) -> None:
        for key in self._cache:
            if key[0] == uri and key[1] != version:
                self._cache.pop(key)
        self._cache.set((uri, version, name), value)

    def forget(self, uri: str) -> None:
        """Drop all entries of a document, e.g. when it is closed."""
        for key in self._cache:
            if key[0] == uri:
                self._cache.pop(key)

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


class FileStampCache(Generic[V]):
    """Cache keyed by a file path, valid only while the file's mtime is unchanged."""

    def __init__(self, max_entries: int):
        self._cache: BoundedCache[str, tuple[float, V]] = BoundedCache(max_entries)

    def get(self, path: str, mtime: float) -> V | None:
        entry = self._cache.get(path)
        if entry is None:
            return None
        cached_mtime, value = entry
        if cached_mtime != mtime:
            logger.debug(f"Cached data for {path} is stale")
            return None
        return value

    def set(self, path: str, mtime: float, value: V) -> None:
        self._cache.set(path, (mtime, value))

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
