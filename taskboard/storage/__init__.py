"""Client-side query cache."""

from .query_cache import QueryCache, QueryState, QueryStatus

__all__ = ["QueryCache", "QueryState", "QueryStatus"]
