"""Task views and sidebar counts.

Pure functions over an in-memory task list: no I/O, recomputed from scratch
on every call. A view is one of the fixed buckets (all, today, completed) or
a project id.
"""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from .models import Project, Task


class ViewSelector(Enum):
    """Fixed task buckets. Any other view is a project id."""

    ALL = "all"
    TODAY = "today"
    COMPLETED = "completed"


View = ViewSelector | str

VIEW_TITLES = {
    ViewSelector.ALL: "All Tasks",
    ViewSelector.TODAY: "Today",
    ViewSelector.COMPLETED: "Completed",
}


def parse_view(value: str | None) -> View:
    """Turn a view key into a selector.

    Examples:
        >>> parse_view(None)
        <ViewSelector.ALL: 'all'>
        >>> parse_view("today")
        <ViewSelector.TODAY: 'today'>
        >>> parse_view("3f1c...")
        '3f1c...'
    """
    if value is None:
        return ViewSelector.ALL
    try:
        return ViewSelector(value.strip().lower())
    except ValueError:
        return value


def is_due_today(task: Task, now: datetime | None = None) -> bool:
    """True if the task has a due date on the current local calendar day.

    Naive due dates are taken as local time; aware ones are converted to the
    timezone of ``now`` (the system timezone by default).
    """
    if task.due_date is None:
        return False
    now = now or datetime.now().astimezone()
    due = task.due_date
    if due.tzinfo is not None:
        due = due.astimezone(now.tzinfo)
    return due.date() == now.date()


def matches_view(task: Task, view: View, now: datetime | None = None) -> bool:
    """Bucket predicate shared by filtering and counting."""
    if view is ViewSelector.COMPLETED:
        return task.completed
    if task.completed:
        return False
    if view is ViewSelector.ALL:
        return True
    if view is ViewSelector.TODAY:
        return is_due_today(task, now)
    return task.project_id == view


def filter_tasks(tasks: Iterable[Task], view: View, *, now: datetime | None = None) -> list[Task]:
    """
    Tasks visible in a view, in their original order.

    - ALL: incomplete tasks
    - TODAY: incomplete tasks due today
    - COMPLETED: completed tasks
    - project id: incomplete tasks of that project

    Args:
        tasks: Full task list
        view: Bucket or project id
        now: Reference time for TODAY (defaults to the current local time)
    """
    now = now or datetime.now().astimezone()
    return [task for task in tasks if matches_view(task, view, now)]


def get_task_counts(
    tasks: Iterable[Task], projects: Iterable[Project], *, now: datetime | None = None
) -> dict[str, int]:
    """
    Count tasks per bucket for the sidebar.

    Returns:
        Dict with keys "all", "today", "completed" and one key per project id.
        Tasks of a project that is not in ``projects`` count only toward the
        fixed buckets.
    """
    now = now or datetime.now().astimezone()
    tasks = list(tasks)
    counts = {
        selector.value: sum(1 for task in tasks if matches_view(task, selector, now))
        for selector in ViewSelector
    }
    for project in projects:
        counts[project.id] = sum(1 for task in tasks if matches_view(task, project.id, now))
    return counts


def view_title(view: View, projects: Iterable[Project]) -> str:
    """Heading for a view: the bucket name or the project's name."""
    if isinstance(view, ViewSelector):
        return VIEW_TITLES[view]
    return next((p.name for p in projects if p.id == view), "Tasks")
