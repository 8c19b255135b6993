"""TTL cache for query results, with per-query loading state.

Each repository owns one ``QueryCache``. Results are stored under tuple keys
such as ``("tasks", owner_id)``; ``invalidate(("tasks",))`` drops every key
starting with that prefix so the next read triggers a fresh fetch.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

# Cache TTL constants (in seconds)
DEFAULT_CACHE_TTL = 300.0  # 5 minutes

QueryKey = tuple[str, ...]
T = TypeVar("T")


class QueryStatus(Enum):
    """Lifecycle of a cached query."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class QueryState(Generic[T]):
    """What a caller needs to render a query: loading, loaded (maybe empty), or failed.

    Attributes:
        status: Current lifecycle status
        data: Last successfully fetched result (kept while refetching)
        error: Error from the last failed fetch, if any
    """

    status: QueryStatus = QueryStatus.IDLE
    data: T | None = None
    error: Exception | None = None

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING

    @property
    def is_empty(self) -> bool:
        """True when the query loaded successfully and returned nothing."""
        return self.status is QueryStatus.SUCCESS and not self.data


class QueryCache(Generic[T]):
    """Simple TTL-based cache of query results keyed by tuples."""

    def __init__(self, default_ttl: float = DEFAULT_CACHE_TTL):
        """
        Initialize cache.

        Args:
            default_ttl: Time-to-live in seconds (0 disables caching)
        """
        self._cache: dict[QueryKey, tuple[T, float]] = {}  # key -> (value, expiry_time)
        self._states: dict[QueryKey, QueryState[T]] = {}
        self._default_ttl = default_ttl

    def get(self, key: QueryKey) -> T | None:
        """Get a cached result if present and not expired."""
        if key in self._cache:
            value, expiry = self._cache[key]
            if time.time() < expiry:
                logger.debug(f"Cache hit: {key}")
                return value
            else:
                del self._cache[key]
        return None

    def peek(self, key: QueryKey) -> T | None:
        """Get the latest result for a key, even if expired or invalidated.

        This is what a screen is currently showing: the last data fetched.
        """
        state = self._states.get(key)
        return state.data if state is not None else None

    def set(self, key: QueryKey, value: T, ttl: float | None = None) -> None:
        """Cache a result and mark the query successful."""
        expiry = time.time() + (ttl if ttl is not None else self._default_ttl)
        self._cache[key] = (value, expiry)
        self._states[key] = QueryState(status=QueryStatus.SUCCESS, data=value)

    def mark_loading(self, key: QueryKey) -> None:
        """Mark a fetch as in flight, keeping the previous data."""
        previous = self._states.get(key)
        self._states[key] = QueryState(
            status=QueryStatus.LOADING, data=previous.data if previous else None
        )

    def mark_error(self, key: QueryKey, error: Exception) -> None:
        """Record a failed fetch, keeping the previous data."""
        previous = self._states.get(key)
        self._states[key] = QueryState(
            status=QueryStatus.ERROR, data=previous.data if previous else None, error=error
        )

    def state(self, key: QueryKey) -> QueryState[T]:
        """Current state of a query (IDLE if never fetched)."""
        return self._states.get(key, QueryState())

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop cached results for every key starting with ``prefix``.

        Loading state and last-seen data are kept so screens keep rendering
        while the refetch is in flight.

        Returns:
            Number of cached entries dropped
        """
        doomed = [key for key in self._cache if key[: len(prefix)] == prefix]
        for key in doomed:
            del self._cache[key]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cached queries for {prefix}")
        return len(doomed)

    def clear(self) -> None:
        """Clear entire cache."""
        self._cache.clear()
        self._states.clear()

    def keys(self) -> list[QueryKey]:
        return list(self._cache)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None
