"""Query builder helpers for PostgreSQL statements with equality filters."""

from typing import Any

from .base import validate_column


class FilterBuilder:
    """Helper for building parameterized WHERE clauses.

    Manages ``$N`` placeholders so conditions can be appended after other
    parameters (e.g. the SET values of an UPDATE).

    Example:
        builder = FilterBuilder(base_params=["Buy milk"])
        builder.add_filters({"id": task_id, "owner_id": user_id})

        query = f"UPDATE tasks SET title = $1 WHERE {builder.get_where_clause()}"
        await conn.execute(query, *builder.get_params())
    """

    def __init__(self, base_params: list[Any] | None = None):
        """Initialize the builder.

        Args:
            base_params: Parameters already used by the statement. Filter
                        params are appended after them.
        """
        self.params: list[Any] = base_params if base_params is not None else []
        self.conditions: list[str] = []

    def add_filter(self, column: str, value: Any) -> "FilterBuilder":
        """Add a ``column = $N`` condition (``IS NULL`` for None).

        Raises:
            ValueError: If the column name is not a plain identifier.
        """
        column = validate_column(column)
        if value is None:
            self.conditions.append(f"{column} IS NULL")
            return self
        self.params.append(value)
        self.conditions.append(f"{column} = ${len(self.params)}")
        return self

    def add_filters(self, filters: dict[str, Any]) -> "FilterBuilder":
        """Add one equality condition per key."""
        for column, value in filters.items():
            self.add_filter(column, value)
        return self

    def has_conditions(self) -> bool:
        return len(self.conditions) > 0

    def get_where_clause(self) -> str:
        """Get the joined conditions (without the 'WHERE' keyword)."""
        return " AND ".join(self.conditions) if self.conditions else "TRUE"

    def get_params(self) -> list[Any]:
        return self.params

    def build_query(self, base_query: str, order_by: str = "") -> str:
        """Append WHERE and ORDER BY clauses to a base statement.

        Args:
            base_query: Statement without WHERE (e.g., "SELECT * FROM tasks")
            order_by: Optional ORDER BY clause (e.g., "created_at DESC")

        Returns:
            Complete SQL statement.
        """
        query = base_query
        if self.has_conditions():
            query += " WHERE " + self.get_where_clause()
        if order_by:
            query += f" ORDER BY {order_by}"
        return query
