"""Project repository."""

import logging
from typing import Any

import pydantic

from ..auth.session import SessionProvider
from ..gateway.base import PROJECTS_TABLE, TASKS_TABLE, DataGateway
from ..models import PROJECT_COLORS, PROJECT_ICONS, Project, ProjectCreate, build_input
from ..storage.query_cache import DEFAULT_CACHE_TTL, QueryCache, QueryKey, QueryState
from ..utils.errors import AuthError, FetchError, TaskboardError
from .tasks import TaskRepository

logger = logging.getLogger(__name__)

PROJECTS_QUERY = "projects"


def parse_project(row: dict[str, Any]) -> Project:
    try:
        return Project.model_validate(row)
    except pydantic.ValidationError as e:
        raise FetchError(f"Malformed project row from data store: {e}") from e


class ProjectRepository:
    """Typed project operations over a data gateway, with a cached project list.

    Deleting a project also deletes its tasks and invalidates the linked
    task repository's cache, since those tasks no longer exist.
    """

    def __init__(
        self,
        gateway: DataGateway,
        sessions: SessionProvider,
        tasks: TaskRepository | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        refetch_on_mutation: bool = True,
    ):
        self._gateway = gateway
        self._sessions = sessions
        self._tasks = tasks
        self._cache: QueryCache[list[Project]] = QueryCache(default_ttl=cache_ttl)
        self._refetch_on_mutation = refetch_on_mutation

    def _key(self, owner_id: str) -> QueryKey:
        return (PROJECTS_QUERY, owner_id)

    def _owner(self, owner_id: str | None = None) -> str:
        user = self._sessions.require_user()
        if owner_id is not None and owner_id != user.id:
            raise AuthError("Projects of another user are not accessible")
        return user.id

    async def list_projects(self, owner_id: str | None = None) -> list[Project]:
        """
        Get all projects of the user, oldest first.

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
            rows = await self._gateway.select(PROJECTS_TABLE, order_by="created_at", ascending=True)
            projects = [parse_project(row) for row in rows]
        except TaskboardError as e:
            self._cache.mark_error(key, e)
            raise

        self._cache.set(key, projects)
        return list(projects)

    async def create_project(
        self,
        name: str,
        color: str = PROJECT_COLORS[0],
        icon: str = PROJECT_ICONS[0],
    ) -> Project:
        """
        Create a project.

        Args:
            name: Project name, 1-50 characters after trimming
            color: One of PROJECT_COLORS
            icon: One of PROJECT_ICONS

        Returns:
            The created Project

        Raises:
            ValidationError: If the name, color or icon is invalid (nothing is sent)
            AuthError: If no user is signed in
            FetchError: If the store or the transport fails
        """
        data = build_input(ProjectCreate, name=name, color=color, icon=icon)
        user = self._sessions.require_user()

        row = await self._gateway.insert(PROJECTS_TABLE, {**data.model_dump(), "owner_id": user.id})
        project = parse_project(row)
        logger.info(f"Created project {project.id} ({project.name})")

        await self._after_mutation(tasks_changed=False)
        return project

    async def delete_project(self, project_id: str) -> None:
        """
        Delete a project and its tasks.

        The store cascades the delete on its own; the tasks are deleted here
        first as well so the result doesn't depend on the store's schema.

        These are two separate requests, not one transaction. If the project
        delete fails after the tasks delete succeeded, the project remains
        with no tasks and the error is raised. Both cached lists are still
        refreshed so they show that state, and calling this again finishes
        the delete.

        Raises:
            AuthError: If no user is signed in
            FetchError: If the store or the transport fails
        """
        self._sessions.require_user()

        try:
            removed_tasks = await self._gateway.delete(TASKS_TABLE, {"project_id": project_id})
            deleted = await self._gateway.delete(PROJECTS_TABLE, {"id": project_id})
        finally:
            await self._after_mutation(tasks_changed=True)

        if deleted:
            logger.info(f"Deleted project {project_id} and {removed_tasks} task(s)")
        else:
            logger.debug(f"Project {project_id} was already gone")

    def cached_projects(self, owner_id: str | None = None) -> list[Project]:
        """Latest fetched project list for the user (empty if never fetched)."""
        owner_id = self._owner(owner_id)
        return list(self._cache.peek(self._key(owner_id)) or [])

    def state(self, owner_id: str | None = None) -> QueryState[list[Project]]:
        owner_id = self._owner(owner_id)
        return self._cache.state(self._key(owner_id))

    def invalidate(self) -> None:
        """Discard cached project lists so the next read fetches again."""
        self._cache.invalidate((PROJECTS_QUERY,))

    async def refresh(self) -> None:
        """Invalidate and refetch the signed-in user's project list."""
        self.invalidate()
        if not self._sessions.is_authenticated:
            return
        try:
            await self.list_projects()
        except TaskboardError as e:
            logger.warning(f"Refetching projects failed: {e}")

    async def _after_mutation(self, *, tasks_changed: bool) -> None:
        if self._refetch_on_mutation:
            await self.refresh()
        else:
            self.invalidate()

        if tasks_changed and self._tasks is not None:
            if self._refetch_on_mutation:
                await self._tasks.refresh()
            else:
                self._tasks.invalidate()
