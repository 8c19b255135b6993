"""Task and project models.

Rows coming back from the data store are parsed into ``Project`` and ``Task``.
Inputs for mutations (``ProjectCreate``, ``TaskCreate``, ``TaskUpdate``) carry
the field constraints; ``build_input`` turns a constraint violation into a
``ValidationError`` naming the offending field, before anything is sent.
"""

from datetime import date, datetime
from enum import StrEnum
from typing import Any, TypeVar
from uuid import UUID

import pydantic
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .utils.errors import ValidationError

PROJECT_COLORS = ("#8B5CF6", "#EC4899", "#F59E0B", "#10B981", "#3B82F6", "#6366F1")
PROJECT_ICONS = ("📁", "💼", "🎯", "🚀", "💡", "📊", "🎨", "🔧", "📱", "🏠")

MAX_PROJECT_NAME_LENGTH = 50
MAX_TASK_TITLE_LENGTH = 200
MAX_TASK_DESCRIPTION_LENGTH = 1000


class Priority(StrEnum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _coerce_id(value: Any) -> Any:
    # asyncpg hands back uuid.UUID for uuid columns
    return str(value) if isinstance(value, UUID) else value


def _coerce_datetime(value: Any) -> Any:
    """Turn dates and naive datetimes into aware local datetimes.

    A plain date ("2024-05-01") means local midnight. Naive values are local
    time. The offset is kept so a store in another timezone reads the same
    instant back.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.astimezone()
    return value


class Project(BaseModel):
    """A project row."""

    id: str = Field(..., description="Identifier assigned by the data store")
    name: str = Field(..., description="Display name, 1-50 characters")
    color: str = Field(..., description="Color token from PROJECT_COLORS")
    icon: str = Field(..., description="Glyph token from PROJECT_ICONS")
    owner_id: str = Field(..., description="Owning user, immutable")
    created_at: datetime = Field(..., description="When the project was created")

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def _ids_as_str(cls, v: Any) -> Any:
        return _coerce_id(v)


class Task(BaseModel):
    """A task row."""

    id: str = Field(..., description="Identifier assigned by the data store")
    title: str = Field(..., description="Task title, 1-200 characters")
    description: str | None = Field(None, description="Optional notes, up to 1000 characters")
    completed: bool = Field(default=False, description="Whether the task is done")
    priority: Priority = Field(default=Priority.MEDIUM, description="low, medium or high")
    project_id: str = Field(..., description="Project this task belongs to")
    owner_id: str = Field(..., description="Owning user")
    due_date: datetime | None = Field(None, description="Optional due date")
    created_at: datetime = Field(..., description="When the task was created")
    updated_at: datetime | None = Field(None, description="When the task was last changed")

    @field_validator("id", "owner_id", "project_id", mode="before")
    @classmethod
    def _ids_as_str(cls, v: Any) -> Any:
        return _coerce_id(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, v: Any) -> Any:
        return _coerce_datetime(v)


def _check_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title is required")
    if len(v) > MAX_TASK_TITLE_LENGTH:
        raise ValueError(f"Title must be less than {MAX_TASK_TITLE_LENGTH} characters")
    return v


def _check_description(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if len(v) > MAX_TASK_DESCRIPTION_LENGTH:
        raise ValueError(
            f"Description must be less than {MAX_TASK_DESCRIPTION_LENGTH} characters"
        )
    return v or None


def _check_project_id(v: str | None) -> str:
    if v is None or not v.strip():
        raise ValueError("Please select a project")
    return v


class ProjectCreate(BaseModel):
    """Input for creating a project."""

    model_config = ConfigDict(use_enum_values=True)

    name: str
    color: str = PROJECT_COLORS[0]
    icon: str = PROJECT_ICONS[0]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Project name is required")
        if len(v) > MAX_PROJECT_NAME_LENGTH:
            raise ValueError(f"Name must be less than {MAX_PROJECT_NAME_LENGTH} characters")
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in PROJECT_COLORS:
            raise ValueError(f"Color must be one of {', '.join(PROJECT_COLORS)}")
        return v

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, v: str) -> str:
        if v not in PROJECT_ICONS:
            raise ValueError("Icon must be one of the available project icons")
        return v


class TaskCreate(BaseModel):
    """Input for creating a task."""

    model_config = ConfigDict(use_enum_values=True)

    title: str
    description: str | None = None
    priority: Priority = Priority.MEDIUM
    project_id: str
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _check_description(v)

    @field_validator("project_id")
    @classmethod
    def validate_project_id(cls, v: str) -> str:
        return _check_project_id(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, v: Any) -> Any:
        return _coerce_datetime(v)


class TaskUpdate(BaseModel):
    """Partial update of a task. Only fields explicitly given are written."""

    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    title: str | None = None
    description: str | None = None
    completed: bool | None = None
    priority: Priority | None = None
    project_id: str | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        # Runs only when a title is passed; a title can never be cleared
        if v is None:
            raise ValueError("Title is required")
        return _check_title(v)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _check_description(v)

    @field_validator("completed", "priority")
    @classmethod
    def validate_not_cleared(cls, v: Any, info: ValidationInfo) -> Any:
        # The store rejects null for these columns
        if v is None:
            raise ValueError(f"{info.field_name.capitalize()} cannot be empty")
        return v

    @field_validator("project_id")
    @classmethod
    def validate_project_id(cls, v: str | None) -> str:
        return _check_project_id(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, v: Any) -> Any:
        return _coerce_datetime(v)

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller set, ready to be written."""
        return self.model_dump(exclude_unset=True)


InputT = TypeVar("InputT", bound=BaseModel)


def build_input(model: type[InputT], **data: Any) -> InputT:
    """Validate mutation input, raising ValidationError on the first violation.

    Args:
        model: One of the input models (ProjectCreate, TaskCreate, TaskUpdate)
        **data: Field values

    Returns:
        The validated input

    Raises:
        ValidationError: With the name of the offending field and a readable message
    """
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "input"
        ctx_error = first.get("ctx", {}).get("error")
        message = str(ctx_error) if ctx_error is not None else first["msg"]
        raise ValidationError(field, message) from e
