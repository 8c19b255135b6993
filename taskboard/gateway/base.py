"""Remote data gateway protocol.

A gateway issues reads and writes against the two collections of the data
store (``projects`` and ``tasks``). Rows travel as plain dicts keyed by the
store's column names. Every gateway failure surfaces as ``FetchError``
(or ``AuthError`` when the store rejects the caller).
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

PROJECTS_TABLE = "projects"
TASKS_TABLE = "tasks"
TABLES = (PROJECTS_TABLE, TASKS_TABLE)

# Columns each table accepts on insert/update (id and timestamps are store-assigned)
WRITABLE_COLUMNS: dict[str, frozenset[str]] = {
    PROJECTS_TABLE: frozenset({"name", "color", "icon", "owner_id"}),
    TASKS_TABLE: frozenset(
        {"title", "description", "completed", "priority", "project_id", "owner_id", "due_date"}
    ),
}

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@runtime_checkable
class DataGateway(Protocol):
    """Async access to the projects and tasks collections."""

    async def select(
        self,
        table: str,
        *,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        """Return rows matching all equality filters, ordered by one column."""
        ...

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored (with id and timestamps)."""
        ...

    async def update(
        self, table: str, row_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Update one row by id. Returns the updated row, or None if nothing matched."""
        ...

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        """Delete rows matching all equality filters. Returns the number removed."""
        ...

    async def close(self) -> None:
        """Release clients, pools or file handles."""
        ...


def validate_table(table: str) -> str:
    """Reject tables other than projects and tasks.

    Raises:
        ValueError: If the table is unknown.
    """
    if table not in TABLES:
        raise ValueError(f"Unknown table '{table}': expected one of {', '.join(TABLES)}")
    return table


def validate_column(column: str) -> str:
    """Reject column names that are not plain identifiers.

    Column names end up in query strings, so only letters, numbers and
    underscores are allowed.

    Raises:
        ValueError: If the column name contains anything else.
    """
    if not _IDENTIFIER_RE.match(column):
        raise ValueError(
            f"Invalid column '{column}': must start with letter or underscore "
            "and contain only letters, numbers, and underscores"
        )
    return column


def writable_fields(table: str, row: dict[str, Any]) -> dict[str, Any]:
    """Drop keys the table does not accept on writes.

    Raises:
        ValueError: If the table is unknown.
    """
    allowed = WRITABLE_COLUMNS[validate_table(table)]
    return {key: value for key, value in row.items() if key in allowed}


def to_json_value(value: Any) -> Any:
    """Convert a Python value into its JSON wire form."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def to_json_row(row: dict[str, Any]) -> dict[str, Any]:
    """Convert every value of a row into its JSON wire form."""
    return {key: to_json_value(value) for key, value in row.items()}
