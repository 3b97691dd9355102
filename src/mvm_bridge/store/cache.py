"""Keyed cache of asynchronously produced values."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)


def make_key(params: Mapping[str, Any]) -> tuple[tuple[str, Any], ...]:
    """Turn keyword parameters into a structural cache key."""
    return tuple(sorted(params.items()))


@dataclass
class _Entry(Generic[V]):
    task: asyncio.Task[V]
    created_at: float


class KeyedAsyncCache(Generic[K, V]):
    """Create one task per distinct key and hand it to every caller.

    Callers for an equal key share the same task, so the producer runs once
    and every awaiter observes the same result or exception.

    Args:
        evict_on_error: Drop a key once its task fails so the next ``get``
            runs the producer again. Off by default: failures stick.
        ttl: Seconds after which a finished entry is replaced on the next
            ``get``. ``None`` keeps entries for the life of the cache.
        clock: Monotonic time source.
    """

    def __init__(
        self,
        *,
        evict_on_error: bool = False,
        ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[K, _Entry[V]] = {}
        self._evict_on_error = evict_on_error
        self._ttl = ttl
        self._clock = clock

    def get(self, key: K, factory: Callable[[], Awaitable[V]]) -> asyncio.Task[V]:
        """Return the task for ``key``, starting ``factory()`` if none is live."""
        entry = self._entries.get(key)
        if entry is not None and not self._expired(entry):
            return entry.task

        task = asyncio.ensure_future(factory())
        self._entries[key] = _Entry(task=task, created_at=self._clock())
        task.add_done_callback(lambda done: self._on_done(key, done))
        return task

    def peek(self, key: K) -> asyncio.Task[V] | None:
        entry = self._entries.get(key)
        return entry.task if entry is not None else None

    def invalidate(self, key: K) -> bool:
        """Forget ``key``; an in-flight task keeps running for its awaiters."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: _Entry[V]) -> bool:
        if self._ttl is None or not entry.task.done():
            return False
        return self._clock() - entry.created_at >= self._ttl

    def _on_done(self, key: K, task: asyncio.Task[V]) -> None:
        if task.cancelled() or task.exception() is None:
            return
        if not self._evict_on_error:
            return
        entry = self._entries.get(key)
        if entry is not None and entry.task is task:
            logger.debug("Evicting failed cache entry %s: %s", key, task.exception())
            del self._entries[key]
