"""
RequestCache - Memoizing read-through cache for backend GET calls.

- Entries live for a fixed TTL and are dropped lazily when read after expiry
- Keys are built from the endpoint plus normalized params, so the same
  params in a different insertion order hit the same slot
- Concurrent reads of a key that is not cached yet share one fetch
- invalidate_all() wipes everything; every write goes through it
- Failed fetches are never stored

One instance is owned by each ApiClient. Tests build their own instance
with a fake clock.
"""

import asyncio
import functools
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0


@dataclass
class CacheEntry:
    """A cached value and the clock reading after which it is stale."""
    key: str
    value: Any
    expires_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    invalidations: int = 0


class RequestCache:
    """
    TTL cache in front of read requests.

    Example usage:
        cache = RequestCache(ttl_seconds=60)
        tasks = await cache.get(
            "/creative/tasks", {"page": 1},
            lambda: client.fetch_json("GET", "/creative/tasks", params={"page": 1}),
        )
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}
        self.stats = CacheStats()

    # =========================================================================
    # Keys
    # =========================================================================

    @staticmethod
    def normalize_params(params: Optional[Mapping[str, Any]]) -> str:
        """
        Serialize params deterministically.

        None values are dropped and keys are sorted, so {"a": 1, "b": 2} and
        {"b": 2, "a": 1, "c": None} normalize to the same string.
        """
        if not params:
            return ""
        normalized = {key: params[key] for key in sorted(params) if params[key] is not None}
        return json.dumps(normalized, sort_keys=True, separators=(",", ":"), default=str)

    @classmethod
    def make_key(cls, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
        return f"{endpoint}?{cls.normalize_params(params)}"

    # =========================================================================
    # Reads
    # =========================================================================

    def _lookup(self, key: str) -> Tuple[bool, Any]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return False, None
        return True, entry.value

    def peek(self, endpoint: str, params: Optional[Mapping[str, Any]] = None, default: Any = None) -> Any:
        """Return the cached value without fetching (default when absent or expired)."""
        found, value = self._lookup(self.make_key(endpoint, params))
        return value if found else default

    async def get(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]],
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached value for (endpoint, params), fetching on a miss.

        Args:
            endpoint: Request path, e.g. "/creative/tasks"
            params: Query params (None values are ignored for keying)
            fetch: Zero-argument callable returning an awaitable of the value

        Returns:
            The cached or freshly fetched value

        Raises:
            Whatever fetch() raises; nothing is cached in that case.
        """
        key = self.make_key(endpoint, params)

        found, value = self._lookup(key)
        if found:
            self.stats.hits += 1
            logger.debug(f"Cache hit: {key}")
            return value

        task = self._inflight.get(key)
        if task is None:
            self.stats.misses += 1
            logger.debug(f"Cache miss: {key}")
            task = asyncio.ensure_future(fetch())
            self._inflight[key] = task
            task.add_done_callback(functools.partial(self._settle, key))
        else:
            self.stats.coalesced += 1
            logger.debug(f"Joining in-flight request: {key}")

        # A caller that gets cancelled must not abort the fetch other callers share.
        return await asyncio.shield(task)

    def _settle(self, key: str, task: "asyncio.Task[Any]") -> None:
        # A task detached by invalidation still answers its own waiters but
        # its result may predate the write, so it is not stored.
        detached = self._inflight.get(key) is not task
        if not detached:
            del self._inflight[key]

        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Not caching failed read {key}: {error}")
            return
        if detached:
            logger.debug(f"Discarding read that raced an invalidation: {key}")
            return

        self._entries[key] = CacheEntry(
            key=key,
            value=task.result(),
            expires_at=self._clock() + self.ttl_seconds,
        )

    # =========================================================================
    # Invalidation
    # =========================================================================

    def invalidate(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> bool:
        """Drop a single key. Returns True if an entry was removed."""
        key = self.make_key(endpoint, params)
        self._inflight.pop(key, None)
        return self._entries.pop(key, None) is not None

    def invalidate_all(self) -> None:
        """Drop every entry and detach in-flight reads from future callers."""
        count = len(self._entries)
        self._entries.clear()
        self._inflight.clear()
        self.stats.invalidations += 1
        logger.debug(f"Cache invalidated ({count} entries dropped)")

    # =========================================================================
    # Introspection
    # =========================================================================

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for entry in self._entries.values() if now < entry.expires_at)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        found, _ = self._lookup(key)
        return found

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)
