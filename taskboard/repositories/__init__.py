"""Repositories for tasks and projects."""

from .projects import ProjectRepository
from .tasks import TaskRepository

__all__ = ["ProjectRepository", "TaskRepository"]
