"""Task repository.

Wraps a data gateway with typed task operations and a cached task list.
Every mutation invalidates the cached list and (by default) refetches it, so
the next read reflects the store. Reads and writes need a signed-in user;
field constraints are checked before any request is made.
"""

import logging
from datetime import datetime
from typing import Any

import pydantic

from ..auth.session import SessionProvider
from ..gateway.base import TASKS_TABLE, DataGateway
from ..models import Priority, Task, TaskCreate, TaskUpdate, build_input
from ..storage.query_cache import DEFAULT_CACHE_TTL, QueryCache, QueryKey, QueryState
from ..utils.errors import AuthError, FetchError, NotFoundError, TaskboardError, ValidationError

logger = logging.getLogger(__name__)

TASKS_QUERY = "tasks"


def parse_task(row: dict[str, Any]) -> Task:
    """Parse a store row, treating malformed rows as a store failure."""
    try:
        return Task.model_validate(row)
    except pydantic.ValidationError as e:
        raise FetchError(f"Malformed task row from data store: {e}") from e


class TaskRepository:
    """Typed task operations over a data gateway, with a cached task list.

    Usage:
        tasks = TaskRepository(gateway, sessions)
        task = await tasks.create_task("Write spec", project_id=work.id, priority="high")
        await tasks.toggle_task(task.id)
    """

    def __init__(
        self,
        gateway: DataGateway,
        sessions: SessionProvider,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        refetch_on_mutation: bool = True,
    ):
        """
        Initialize the repository.

        Args:
            gateway: Data gateway to read and write through
            sessions: Source of the signed-in user
            cache_ttl: How long a fetched list is served from cache, in seconds
            refetch_on_mutation: Refetch the list right after each mutation
                                 (otherwise the next read refetches)
        """
        self._gateway = gateway
        self._sessions = sessions
        self._cache: QueryCache[list[Task]] = QueryCache(default_ttl=cache_ttl)
        self._refetch_on_mutation = refetch_on_mutation

    def _key(self, owner_id: str) -> QueryKey:
        return (TASKS_QUERY, owner_id)

    def _owner(self, owner_id: str | None = None) -> str:
        """Resolve the owner to query for; only the signed-in user's tasks are visible."""
        user = self._sessions.require_user()
        if owner_id is not None and owner_id != user.id:
            raise AuthError("Tasks of another user are not accessible")
        return user.id

    async def list_tasks(self, owner_id: str | None = None) -> list[Task]:
        """
        Get all tasks of the user, newest first.

        Args:
            owner_id: User whose tasks to list (defaults to the signed-in user)

        Returns:
            List of Task objects ordered by creation time, descending

        Raises:
            AuthError: If no user is signed in
            FetchError: If the store or the transport fails
        """
        owner_id = self._owner(owner_id)
        key = self._key(owner_id)

        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        self._cache.mark_loading(key)
        try:
            rows = await self._gateway.select(TASKS_TABLE, order_by="created_at", ascending=False)
            tasks = [parse_task(row) for row in rows]
        except TaskboardError as e:
            self._cache.mark_error(key, e)
            raise

        # Last completed fetch wins
        self._cache.set(key, tasks)
        return list(tasks)

    async def create_task(
        self,
        title: str,
        project_id: str,
        priority: Priority | str = Priority.MEDIUM,
        description: str | None = None,
        due_date: datetime | str | None = None,
    ) -> Task:
        """
        Create a task. The store assigns id and timestamps; completed starts False.

        Args:
            title: Task title, 1-200 characters after trimming
            project_id: Project the task belongs to
            priority: low, medium or high
            description: Optional notes, up to 1000 characters
            due_date: Optional due date

        Returns:
            The created Task

        Raises:
            ValidationError: If a field constraint is violated (nothing is sent)
            AuthError: If no user is signed in
            FetchError: If the store or the transport fails
        """
        data = build_input(
            TaskCreate,
            title=title,
            project_id=project_id,
            priority=priority,
            description=description,
            due_date=due_date,
        )
        user = self._sessions.require_user()

        row = await self._gateway.insert(
            TASKS_TABLE, {**data.model_dump(), "owner_id": user.id, "completed": False}
        )
        task = parse_task(row)
        logger.info(f"Created task {task.id} in project {task.project_id}")

        await self._after_mutation()
        return task

    async def update_task(self, task_id: str, **fields: Any) -> Task:
        """
        Update a subset of a task's mutable fields.

        Args:
            task_id: Task identifier
            **fields: Any of title, description, completed, priority, project_id, due_date

        Returns:
            The updated Task

        Raises:
            ValidationError: If a field is unknown or violates a constraint
            AuthError: If no user is signed in
            NotFoundError: If the task doesn't exist or belongs to someone else
            FetchError: If the store or the transport fails
        """
        changes = build_input(TaskUpdate, **fields).changes()
        if not changes:
            raise ValidationError("input", "No fields to update")
        self._sessions.require_user()

        row = await self._gateway.update(TASKS_TABLE, task_id, changes)
        if row is None:
            raise NotFoundError("task", task_id)
        task = parse_task(row)
        logger.debug(f"Updated task {task_id}: {sorted(changes)}")

        await self._after_mutation()
        return task

    async def delete_task(self, task_id: str) -> None:
        """
        Delete a task. Deleting a task that is already gone is not an error.

        Raises:
            AuthError: If no user is signed in
            FetchError: If the store or the transport fails
        """
        self._sessions.require_user()
        deleted = await self._gateway.delete(TASKS_TABLE, {"id": task_id})
        if deleted:
            logger.info(f"Deleted task {task_id}")
        else:
            logger.debug(f"Task {task_id} was already gone")

        await self._after_mutation()

    async def toggle_task(self, task_id: str) -> Task:
        """
        Flip a task's completed flag.

        The current value is read from the latest cached list, not refetched,
        so a stale cache produces a stale toggle. There is no compare-and-swap:
        two sessions toggling the same task can race.

        Raises:
            AuthError: If no user is signed in
            NotFoundError: If the task is not in the cached list
            FetchError: If the store or the transport fails
        """
        owner_id = self._owner()
        current = next(
            (t for t in self._cache.peek(self._key(owner_id)) or [] if t.id == task_id), None
        )
        if current is None:
            raise NotFoundError("task", task_id)

        return await self.update_task(task_id, completed=not current.completed)

    def cached_tasks(self, owner_id: str | None = None) -> list[Task]:
        """Latest fetched task list for the user (empty if never fetched)."""
        owner_id = self._owner(owner_id)
        return list(self._cache.peek(self._key(owner_id)) or [])

    def state(self, owner_id: str | None = None) -> QueryState[list[Task]]:
        """Loading / loaded / error state of the task list query."""
        owner_id = self._owner(owner_id)
        return self._cache.state(self._key(owner_id))

    def invalidate(self) -> None:
        """Discard cached task lists so the next read fetches again."""
        self._cache.invalidate((TASKS_QUERY,))

    async def refresh(self) -> None:
        """Invalidate and refetch the signed-in user's task list.

        A failed refetch is recorded in the query state (see ``state()``)
        rather than raised, since the mutation that triggered it succeeded.
        """
        self.invalidate()
        if not self._sessions.is_authenticated:
            return
        try:
            await self.list_tasks()
        except TaskboardError as e:
            logger.warning(f"Refetching tasks failed: {e}")

    async def _after_mutation(self) -> None:
        if self._refetch_on_mutation:
            await self.refresh()
        else:
            self.invalidate()
