"""Pytest configuration and fixtures for taskboard tests."""

import tempfile
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from taskboard.auth.session import AuthSession, CurrentUser, SessionProvider
from taskboard.gateway.local import LocalGateway
from taskboard.models import Priority, Project, Task
from taskboard.repositories import ProjectRepository, TaskRepository


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def user() -> CurrentUser:
    return CurrentUser(id="user-1", email="ada@example.com")


@pytest.fixture
def sessions(user: CurrentUser) -> SessionProvider:
    """A signed-in session provider."""
    return SessionProvider(AuthSession(user=user, access_token="test-access-token"))


@pytest.fixture
def signed_out() -> SessionProvider:
    return SessionProvider()


@pytest.fixture
async def gateway(
    sessions: SessionProvider, temp_dir: Path
) -> AsyncGenerator[LocalGateway, None]:
    """A local JSON gateway in a temporary directory."""
    gateway = LocalGateway(sessions, storage_path=temp_dir / "data")
    yield gateway
    await gateway.close()


@pytest.fixture
def task_repository(gateway: LocalGateway, sessions: SessionProvider) -> TaskRepository:
    return TaskRepository(gateway, sessions)


@pytest.fixture
def project_repository(
    gateway: LocalGateway, sessions: SessionProvider, task_repository: TaskRepository
) -> ProjectRepository:
    return ProjectRepository(gateway, sessions, tasks=task_repository)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for view tests (local noon, timezone aware)."""
    return datetime(2024, 5, 1, 12, 0).astimezone()


@pytest.fixture
def make_task():
    """Factory for Task objects with sensible defaults."""

    def _make(
        task_id: str = "t1",
        *,
        title: str = "Task",
        completed: bool = False,
        project_id: str = "p1",
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
    ) -> Task:
        return Task(
            id=task_id,
            title=title,
            completed=completed,
            priority=priority,
            project_id=project_id,
            owner_id="user-1",
            due_date=due_date,
            created_at=datetime(2024, 4, 1, tzinfo=UTC),
            updated_at=datetime(2024, 4, 1, tzinfo=UTC),
        )

    return _make


@pytest.fixture
def make_project():
    """Factory for Project objects."""

    def _make(project_id: str = "p1", name: str = "Work") -> Project:
        return Project(
            id=project_id,
            name=name,
            color="#3B82F6",
            icon="💼",
            owner_id="user-1",
            created_at=datetime(2024, 4, 1, tzinfo=UTC),
        )

    return _make
