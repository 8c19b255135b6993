"""File-based data gateway.

Stores each table as a JSON list under a storage directory, for offline use
and demos. It behaves like the hosted store where it matters to callers:
ids and timestamps are assigned on insert, rows are scoped to the signed-in
user, a task must reference an existing project of the same user, and
deleting a project removes its tasks.
"""

import json
import logging
import os
import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from ..auth.session import SessionProvider
from ..utils.errors import FetchError
from .base import (
    PROJECTS_TABLE,
    TABLES,
    TASKS_TABLE,
    to_json_row,
    to_json_value,
    validate_column,
    validate_table,
    writable_fields,
)

logger = logging.getLogger(__name__)


class LocalGateway:
    """Data gateway backed by JSON files.

    Stores rows as JSON for easy inspection and portability.
    """

    def __init__(self, sessions: SessionProvider, storage_path: Path | str = "./data"):
        """
        Initialize the local store.

        Args:
            sessions: Source of the current user for owner scoping
            storage_path: Directory holding projects.json and tasks.json
        """
        self._sessions = sessions
        self.storage_path = Path(storage_path)
        self.rows: dict[str, list[dict[str, Any]]] | None = None
        self._last_timestamp: datetime | None = None

    def _file(self, table: str) -> Path:
        return self.storage_path / f"{table}.json"

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        """Load every table from disk on first use."""
        if self.rows is not None:
            return self.rows

        rows: dict[str, list[dict[str, Any]]] = {}
        for table in TABLES:
            path = self._file(table)
            if not path.exists():
                rows[table] = []
                continue
            try:
                with open(path) as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load {path}: {e}")
                raise FetchError(f"Could not read {path}: {e}") from e
            rows[table] = data if isinstance(data, list) else []

        self.rows = rows
        logger.debug(
            f"Loaded {len(rows[PROJECTS_TABLE])} projects and "
            f"{len(rows[TASKS_TABLE])} tasks from {self.storage_path}"
        )
        return rows

    def _commit(self, tables: dict[str, list[dict[str, Any]]]) -> None:
        """Write new table contents in order, swapping each in once it is on disk.

        A failed write leaves that table's in-memory rows matching the file.
        """
        loaded = self._load()
        for table, rows in tables.items():
            self._save(table, rows)
            loaded[table] = rows

    def _save(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Write one table to disk, replacing the file atomically."""
        path = self._file(table)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.storage_path.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(rows, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to save {path}: {e}")
            raise FetchError(f"Could not write {path}: {e}") from e
        logger.debug(f"Saved {len(rows)} rows to {path}")

    def _now(self) -> str:
        # Strictly increasing so created_at ordering is total
        now = datetime.now(UTC)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now.isoformat(timespec="microseconds")

    def _owned(self, table: str, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Rows of the signed-in user matching all equality filters."""
        user = self._sessions.require_user()
        wanted = {validate_column(k): to_json_value(v) for k, v in (filters or {}).items()}
        wanted["owner_id"] = user.id
        return [
            row
            for row in self._load()[table]
            if all(row.get(column) == value for column, value in wanted.items())
        ]

    async def select(
        self,
        table: str,
        *,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        table = validate_table(table)
        column = validate_column(order_by)
        results = self._owned(table, filters)
        # None sorts first ascending, last descending
        results = sorted(
            results,
            key=lambda row: (row.get(column) is not None, row.get(column) or ""),
            reverse=not ascending,
        )
        return [dict(row) for row in results]

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        table = validate_table(table)
        user = self._sessions.require_user()
        values = to_json_row(writable_fields(table, row))
        values["owner_id"] = user.id

        if table == TASKS_TABLE and not self._owned(
            PROJECTS_TABLE, {"id": values.get("project_id")}
        ):
            raise FetchError(
                f"Project {values.get('project_id')} does not exist for this user"
            )

        now = self._now()
        created = {"id": str(uuid.uuid4()), **values, "created_at": now}
        if table == TASKS_TABLE:
            created.setdefault("completed", False)
            created.setdefault("priority", "medium")
            created.setdefault("description", None)
            created.setdefault("due_date", None)
            created["updated_at"] = now

        self._commit({table: [*self._load()[table], created]})
        logger.info(f"Inserted {table} row {created['id']}")
        return dict(created)

    async def update(
        self, table: str, row_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        table = validate_table(table)
        matches = self._owned(table, {"id": row_id})
        if not matches:
            return None

        values = to_json_row(writable_fields(table, changes))
        values.pop("owner_id", None)
        if table == TASKS_TABLE and "project_id" in values:
            if not self._owned(PROJECTS_TABLE, {"id": values["project_id"]}):
                raise FetchError(f"Project {values['project_id']} does not exist for this user")

        current = matches[0]
        updated = {**current, **values}
        if table == TASKS_TABLE:
            updated["updated_at"] = self._now()
        self._commit(
            {table: [updated if row is current else row for row in self._load()[table]]}
        )
        return dict(updated)

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        table = validate_table(table)
        if not filters:
            raise ValueError("Refusing to delete without filters")

        doomed = self._owned(table, filters)
        if not doomed:
            return 0
        doomed_ids = {row["id"] for row in doomed}
        rows = self._load()
        changes: dict[str, list[dict[str, Any]]] = {}

        if table == PROJECTS_TABLE:
            # Same effect as the foreign key's ON DELETE CASCADE; tasks go
            # first so no task ever points at a missing project on disk
            remaining = [
                row for row in rows[TASKS_TABLE] if row.get("project_id") not in doomed_ids
            ]
            if len(remaining) != len(rows[TASKS_TABLE]):
                changes[TASKS_TABLE] = remaining

        changes[table] = [row for row in rows[table] if row["id"] not in doomed_ids]
        self._commit(changes)

        logger.info(f"Deleted {len(doomed_ids)} row(s) from {table}")
        return len(doomed_ids)

    async def close(self) -> None:
        """Drop the in-memory copy; the next call reloads from disk."""
        self.rows = None
