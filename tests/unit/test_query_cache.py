"""Tests for the query cache."""

from unittest.mock import patch

from taskboard.storage.query_cache import QueryCache, QueryStatus


class TestQueryCache:
    """Tests for QueryCache."""

    def test_get_missing_key(self):
        cache = QueryCache()
        assert cache.get(("tasks", "user-1")) is None

    def test_set_and_get(self):
        cache = QueryCache()
        cache.set(("tasks", "user-1"), ["a"])

        assert cache.get(("tasks", "user-1")) == ["a"]
        assert ("tasks", "user-1") in cache

    def test_entries_expire(self):
        cache = QueryCache(default_ttl=10)
        with patch("taskboard.storage.query_cache.time.time", return_value=1000.0):
            cache.set(("tasks", "user-1"), ["a"])
        with patch("taskboard.storage.query_cache.time.time", return_value=1011.0):
            assert cache.get(("tasks", "user-1")) is None

    def test_zero_ttl_never_hits(self):
        cache = QueryCache(default_ttl=0)
        cache.set(("tasks", "user-1"), ["a"])
        assert cache.get(("tasks", "user-1")) is None

    def test_invalidate_by_prefix(self):
        cache = QueryCache()
        cache.set(("tasks", "user-1"), ["a"])
        cache.set(("tasks", "user-2"), ["b"])
        cache.set(("projects", "user-1"), ["p"])

        dropped = cache.invalidate(("tasks",))

        assert dropped == 2
        assert cache.keys() == [("projects", "user-1")]

    def test_peek_survives_invalidation(self):
        cache = QueryCache()
        cache.set(("tasks", "user-1"), ["a"])
        cache.invalidate(("tasks",))

        assert cache.get(("tasks", "user-1")) is None
        assert cache.peek(("tasks", "user-1")) == ["a"]

    def test_clear_drops_state(self):
        cache = QueryCache()
        cache.set(("tasks", "user-1"), ["a"])
        cache.clear()

        assert cache.peek(("tasks", "user-1")) is None
        assert cache.state(("tasks", "user-1")).status is QueryStatus.IDLE


class TestQueryState:
    """Tests for loading and error state tracking."""

    def test_lifecycle(self):
        cache = QueryCache()
        key = ("tasks", "user-1")
        assert cache.state(key).status is QueryStatus.IDLE

        cache.mark_loading(key)
        assert cache.state(key).is_loading

        cache.set(key, [])
        state = cache.state(key)
        assert state.status is QueryStatus.SUCCESS
        assert state.is_empty

    def test_loading_keeps_previous_data(self):
        cache = QueryCache()
        key = ("tasks", "user-1")
        cache.set(key, ["a"])

        cache.mark_loading(key)

        assert cache.state(key).data == ["a"]
        assert not cache.state(key).is_empty

    def test_error_keeps_previous_data(self):
        cache = QueryCache()
        key = ("tasks", "user-1")
        cache.set(key, ["a"])
        error = RuntimeError("boom")

        cache.mark_error(key, error)

        state = cache.state(key)
        assert state.status is QueryStatus.ERROR
        assert state.error is error
        assert state.data == ["a"]
