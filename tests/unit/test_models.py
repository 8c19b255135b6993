"""Tests for task and project models."""

import uuid
from datetime import UTC, date, datetime

import pytest

from taskboard.models import (
    PROJECT_COLORS,
    PROJECT_ICONS,
    Priority,
    Project,
    ProjectCreate,
    Task,
    TaskCreate,
    TaskUpdate,
    build_input,
)
from taskboard.utils.errors import ValidationError


class TestProjectCreate:
    """Tests for project input validation."""

    def test_defaults_to_first_palette_entries(self):
        data = build_input(ProjectCreate, name="Home")

        assert data.color == PROJECT_COLORS[0]
        assert data.icon == PROJECT_ICONS[0]

    def test_name_is_trimmed(self):
        data = build_input(ProjectCreate, name="  Work  ", color="#3B82F6", icon="💼")
        assert data.name == "Work"

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError) as exc_info:
            build_input(ProjectCreate, name=name)

        assert exc_info.value.field == "name"
        assert exc_info.value.message == "Project name is required"

    def test_name_length_limits(self):
        assert build_input(ProjectCreate, name="x" * 50).name == "x" * 50

        with pytest.raises(ValidationError) as exc_info:
            build_input(ProjectCreate, name="x" * 51)
        assert exc_info.value.message == "Name must be less than 50 characters"

    def test_surrounding_whitespace_not_counted(self):
        data = build_input(ProjectCreate, name="  " + "x" * 50 + "  ")
        assert len(data.name) == 50

    def test_color_outside_palette_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(ProjectCreate, name="Work", color="#000000")
        assert exc_info.value.field == "color"

    def test_icon_outside_palette_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(ProjectCreate, name="Work", icon="🐍")
        assert exc_info.value.field == "icon"


class TestTaskCreate:
    """Tests for task input validation."""

    def test_valid_input(self):
        data = build_input(
            TaskCreate, title=" Write spec ", project_id="p1", priority="high"
        )

        assert data.title == "Write spec"
        assert data.priority == "high"
        assert data.description is None
        assert data.due_date is None

    def test_priority_defaults_to_medium(self):
        data = build_input(TaskCreate, title="Task", project_id="p1")
        assert data.priority == Priority.MEDIUM.value

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskCreate, title="", project_id="p1")

        assert exc_info.value.field == "title"
        assert exc_info.value.message == "Title is required"

    def test_title_length_limits(self):
        assert build_input(TaskCreate, title="t" * 200, project_id="p1").title == "t" * 200

        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskCreate, title="t" * 201, project_id="p1")
        assert exc_info.value.field == "title"

    def test_description_limit(self):
        data = build_input(TaskCreate, title="Task", project_id="p1", description="d" * 1000)
        assert len(data.description) == 1000

        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskCreate, title="Task", project_id="p1", description="d" * 1001)
        assert exc_info.value.field == "description"

    def test_blank_description_becomes_none(self):
        data = build_input(TaskCreate, title="Task", project_id="p1", description="   ")
        assert data.description is None

    def test_project_required(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskCreate, title="Task", project_id="")

        assert exc_info.value.field == "project_id"
        assert exc_info.value.message == "Please select a project"

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskCreate, title="Task", project_id="p1", priority="urgent")
        assert exc_info.value.field == "priority"

    def test_date_only_due_date(self):
        data = build_input(TaskCreate, title="Task", project_id="p1", due_date="2024-05-01")
        assert data.due_date == datetime(2024, 5, 1).astimezone()

    def test_due_date_carries_local_offset(self):
        for value in ("2024-05-01", "2024-05-01T09:30:00", datetime(2024, 5, 1, 9, 30)):
            data = build_input(TaskCreate, title="Task", project_id="p1", due_date=value)
            assert data.due_date.tzinfo is not None

    def test_aware_due_date_kept(self):
        data = build_input(
            TaskCreate, title="Task", project_id="p1", due_date="2024-05-01T09:30:00+00:00"
        )
        assert data.due_date == datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


class TestTaskUpdate:
    """Tests for partial task updates."""

    def test_only_set_fields_are_changed(self):
        changes = build_input(TaskUpdate, completed=True).changes()
        assert changes == {"completed": True}

    def test_description_can_be_cleared(self):
        changes = build_input(TaskUpdate, description=None).changes()
        assert changes == {"description": None}

    def test_title_cannot_be_cleared(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskUpdate, title=None)
        assert exc_info.value.field == "title"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskUpdate, owner_id="someone-else")
        assert exc_info.value.field == "owner_id"

    @pytest.mark.parametrize("field", ["completed", "priority", "project_id"])
    def test_required_columns_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskUpdate, **{field: None})
        assert exc_info.value.field == field

    def test_blank_project_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_input(TaskUpdate, project_id="  ")
        assert exc_info.value.message == "Please select a project"

    def test_due_date_can_be_cleared(self):
        assert build_input(TaskUpdate, due_date=None).changes() == {"due_date": None}

    def test_priority_is_plain_string(self):
        changes = build_input(TaskUpdate, priority=Priority.LOW).changes()
        assert changes == {"priority": "low"}


class TestRowParsing:
    """Tests for parsing store rows."""

    def test_task_from_json_row(self):
        task = Task.model_validate(
            {
                "id": "t1",
                "title": "Write spec",
                "description": None,
                "completed": False,
                "priority": "high",
                "project_id": "p1",
                "owner_id": "user-1",
                "due_date": "2024-05-01T09:30:00+00:00",
                "created_at": "2024-04-01T10:00:00.000001+00:00",
                "updated_at": "2024-04-01T10:00:00.000001+00:00",
            }
        )

        assert task.priority is Priority.HIGH
        assert task.due_date == datetime(2024, 5, 1, 9, 30, tzinfo=UTC)

    def test_task_from_database_row(self):
        task_id = uuid.uuid4()
        task = Task.model_validate(
            {
                "id": task_id,
                "title": "Write spec",
                "completed": True,
                "priority": "low",
                "project_id": "p1",
                "owner_id": "user-1",
                "due_date": date(2024, 5, 1),
                "created_at": datetime(2024, 4, 1, tzinfo=UTC),
            }
        )

        assert task.id == str(task_id)
        assert task.due_date == datetime(2024, 5, 1).astimezone()
        assert task.updated_at is None

    def test_project_from_row(self):
        project = Project.model_validate(
            {
                "id": "p1",
                "name": "Work",
                "color": "#3B82F6",
                "icon": "💼",
                "owner_id": "user-1",
                "created_at": "2024-04-01T10:00:00+00:00",
            }
        )

        assert project.name == "Work"
        assert project.created_at.tzinfo is not None
