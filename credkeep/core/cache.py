"""Process-wide key/value cache shared by credential stores.

The cache only holds in-memory data: it is created once per process,
shared by reference, and never torn down.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cache(Protocol):
    """Minimal get/put contract the store relies on."""

    def get(self, key: str) -> Any: ...

    def put(self, key: str, value: Any) -> None: ...


class MemoryCache:
    """Dictionary-backed ``Cache`` implementation."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Any:
        return self._entries.get(key)

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries


_process_cache = MemoryCache()


def process_cache() -> MemoryCache:
    """Return the cache shared by every store in this process."""
    return _process_cache
