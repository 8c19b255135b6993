"""Taskboard - task and project data layer over a hosted relational store."""

__version__ = "0.1.0"

from .auth import AuthSession, CurrentUser, SessionProvider
from .core.config import Settings
from .core.results import Err, Notice, NoticeLevel, Notifier, Ok, Result, capture
from .gateway import DataGateway, LocalGateway, PostgresGateway, RestGateway, create_gateway
from .models import PROJECT_COLORS, PROJECT_ICONS, Priority, Project, Task
from .repositories import ProjectRepository, TaskRepository
from .utils.errors import AuthError, FetchError, NotFoundError, TaskboardError, ValidationError
from .views import ViewSelector, filter_tasks, get_task_counts, parse_view, view_title

__all__ = [
    "Settings",
    # Identity
    "AuthSession",
    "CurrentUser",
    "SessionProvider",
    # Models
    "PROJECT_COLORS",
    "PROJECT_ICONS",
    "Priority",
    "Project",
    "Task",
    # Data access
    "DataGateway",
    "LocalGateway",
    "PostgresGateway",
    "RestGateway",
    "create_gateway",
    "ProjectRepository",
    "TaskRepository",
    # Views
    "ViewSelector",
    "filter_tasks",
    "get_task_counts",
    "parse_view",
    "view_title",
    # Results and errors
    "Err",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "Ok",
    "Result",
    "capture",
    "AuthError",
    "FetchError",
    "NotFoundError",
    "TaskboardError",
    "ValidationError",
]
