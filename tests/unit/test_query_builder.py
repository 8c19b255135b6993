"""Tests for the SQL filter builder."""

import pytest

from taskboard.gateway.query_builder import FilterBuilder


class TestFilterBuilder:
    """Tests for FilterBuilder."""

    def test_empty_builder(self):
        builder = FilterBuilder()

        assert not builder.has_conditions()
        assert builder.get_where_clause() == "TRUE"
        assert builder.build_query("SELECT * FROM tasks") == "SELECT * FROM tasks"

    def test_equality_filters(self):
        builder = FilterBuilder().add_filters({"owner_id": "user-1", "project_id": "p1"})

        assert builder.get_where_clause() == "owner_id = $1 AND project_id = $2"
        assert builder.get_params() == ["user-1", "p1"]

    def test_none_becomes_is_null(self):
        builder = FilterBuilder().add_filter("due_date", None)

        assert builder.get_where_clause() == "due_date IS NULL"
        assert builder.get_params() == []

    def test_placeholders_follow_base_params(self):
        builder = FilterBuilder(base_params=["New title", True])
        builder.add_filters({"id": "t1", "owner_id": "user-1"})

        assert builder.get_where_clause() == "id = $3 AND owner_id = $4"
        assert builder.get_params() == ["New title", True, "t1", "user-1"]

    def test_build_query_with_order(self):
        builder = FilterBuilder().add_filter("owner_id", "user-1")

        query = builder.build_query("SELECT * FROM tasks", order_by="created_at DESC")

        assert query == "SELECT * FROM tasks WHERE owner_id = $1 ORDER BY created_at DESC"

    @pytest.mark.parametrize("column", ["id; DROP TABLE tasks", "1abc", "owner-id", ""])
    def test_rejects_unsafe_columns(self, column):
        with pytest.raises(ValueError, match="Invalid column"):
            FilterBuilder().add_filter(column, "x")
