"""Content-addressed cache helper for compiled artifacts.

This module provides:
- Cache: Protocol for the injected persistent store
- MemoryCache: Dict-backed store for tests and single-process hosts
- CacheControl: Handle passed to producers to opt out of persistence
- with_cache: Memoize an async producer under a fingerprinted key
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from modloom_core.fingerprint import fingerprint
from modloom_core.observability import get_logger

Producer = Callable[["CacheControl"], Awaitable[Any]]


@runtime_checkable
class Cache(Protocol):
    """Persistent key/value store behind the compiled cache.

    Persistence medium and eviction policy are the implementation's concern;
    the loader never expires or deletes entries.
    """

    async def get(self, key: str) -> str | None:
        """Return the serialized value stored under key, or None."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a serialized value under key."""
        ...


class MemoryCache:
    """In-process Cache implementation backed by a dict.

    Example:
        >>> cache = MemoryCache()
        >>> config = LoaderConfig(compiled_cache=cache)
    """

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    async def get(self, key: str) -> str | None:
        return self._entries.get(key)

    async def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class CacheControl:
    """Capability handed to a producer on a cache miss.

    Exposes a single operation: prevent_cache(), marking the produced value
    as valid for this call only.
    """

    def __init__(self) -> None:
        self._prevented = False

    def prevent_cache(self) -> None:
        """Do not persist the value currently being produced."""
        self._prevented = True

    @property
    def cache_prevented(self) -> bool:
        return self._prevented


async def with_cache(
    cache: Cache | None,
    key_parts: Sequence[Any],
    producer: Producer,
) -> Any:
    """Return the cached value for key_parts, producing and storing it on a miss.

    Without a cache the producer runs on every call. With a cache, a stored
    value is decoded and returned without running the producer at all. On a
    miss the producer runs and its result is stored as JSON unless the
    producer called ``control.prevent_cache()``. Store errors propagate.

    Args:
        cache: Store to use, or None to disable memoization.
        key_parts: Ordered values fingerprinted into the cache key.
        producer: Async callable receiving a CacheControl. Its result must be
            JSON-serializable when a cache is in use.

    Returns:
        The cached or freshly produced value.

    Example:
        >>> async def produce(control: CacheControl) -> dict[str, int]:
        ...     return {"answer": 42}
        >>> await with_cache(MemoryCache(), ["v1", "source"], produce)
        {'answer': 42}
    """
    control = CacheControl()

    if cache is None:
        return await producer(control)

    key = fingerprint(*key_parts)
    log = get_logger().bind(cache_key=key)

    stored = await cache.get(key)
    if stored:
        log.debug("compile_cache_hit")
        return json.loads(stored)

    log.debug("compile_cache_miss")
    value = await producer(control)

    if control.cache_prevented:
        log.debug("compile_cache_prevented")
    else:
        await cache.set(key, json.dumps(value))

    return value
