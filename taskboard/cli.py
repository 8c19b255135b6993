"""Command-line front end.

Usage:
    # Projects
    taskboard projects list
    taskboard projects add "Work" --color "#3B82F6" --icon "💼"
    taskboard projects delete <project-id>

    # Tasks
    taskboard tasks list --view today
    taskboard tasks add "Write spec" --project <project-id> --priority high --due 2024-05-01
    taskboard tasks toggle <task-id>
    taskboard tasks delete <task-id>

    # Sidebar counts
    taskboard counts

Configuration comes from TASKBOARD_* environment variables or a .env file
(see taskboard.core.config.Settings).
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

from .auth.session import SessionProvider
from .core.config import Settings
from .core.results import (
    PROJECT_CREATED,
    PROJECT_DELETED,
    TASK_CREATED,
    TASK_DELETED,
    Err,
    Notice,
    NoticeLevel,
    Notifier,
    Ok,
    capture,
)
from .gateway import DataGateway, create_gateway
from .logging_config import setup_logging
from .models import PROJECT_COLORS, PROJECT_ICONS, Priority, Project, Task
from .repositories import ProjectRepository, TaskRepository
from .utils.errors import ConfigurationError
from .views import filter_tasks, get_task_counts, parse_view, view_title

PRIORITY_MARKERS = {"high": "!!!", "medium": "!!", "low": "!"}


@dataclass
class Services:
    """Everything a command needs, wired together once."""

    sessions: SessionProvider
    gateway: DataGateway
    tasks: TaskRepository
    projects: ProjectRepository
    notifier: Notifier


def build_services(settings: Settings) -> Services:
    """Wire gateway, repositories and notifier from settings."""
    sessions = SessionProvider.from_settings(settings)
    gateway = create_gateway(settings, sessions)
    tasks = TaskRepository(gateway, sessions, cache_ttl=settings.cache_ttl)
    projects = ProjectRepository(gateway, sessions, tasks=tasks, cache_ttl=settings.cache_ttl)
    return Services(sessions, gateway, tasks, projects, Notifier())


def print_notice(notice: Notice) -> None:
    if notice.level is NoticeLevel.SUCCESS:
        print(f"✓ {notice.title}: {notice.message}")
    elif notice.level is NoticeLevel.INLINE:
        print(f"✗ {notice.field}: {notice.message}", file=sys.stderr)
    else:
        print(f"✗ {notice.title}: {notice.message}", file=sys.stderr)


def format_task(task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    line = f"{box} {task.title} {PRIORITY_MARKERS[task.priority.value]}"
    if task.due_date:
        line += f"  due {task.due_date.astimezone().strftime('%b %d')}"
    return f"{line}  ({task.id})"


def format_project(project: Project, count: int | None = None) -> str:
    suffix = f"  {count}" if count is not None else ""
    return f"{project.icon} {project.name}{suffix}  ({project.id})"


async def run_command(args: argparse.Namespace, services: Services) -> int:
    """Execute one parsed command. Returns the process exit code."""
    notifier = services.notifier

    if args.group == "projects":
        if args.action == "list":
            result = await capture(services.projects.list_projects(), notifier)
            if isinstance(result, Ok):
                for project in result.value:
                    print(format_project(project))
                if not result.value:
                    print("No projects yet")
        elif args.action == "add":
            result = await capture(
                services.projects.create_project(args.name, color=args.color, icon=args.icon),
                notifier,
                success=PROJECT_CREATED,
            )
            if isinstance(result, Ok):
                print(format_project(result.value))
        else:
            result = await capture(
                services.projects.delete_project(args.project_id),
                notifier,
                success=PROJECT_DELETED,
            )

    elif args.group == "tasks":
        if args.action == "list":
            result = await _list_view(services, args.view)
        elif args.action == "add":
            result = await capture(
                services.tasks.create_task(
                    args.title,
                    project_id=args.project,
                    priority=args.priority,
                    description=args.description,
                    due_date=args.due,
                ),
                notifier,
                success=TASK_CREATED,
            )
            if isinstance(result, Ok):
                print(format_task(result.value))
        elif args.action == "toggle":
            # The toggle flips the cached value, so load the list first
            result = await capture(services.tasks.list_tasks(), notifier)
            if isinstance(result, Ok):
                result = await capture(services.tasks.toggle_task(args.task_id), notifier)
            if isinstance(result, Ok):
                print(format_task(result.value))
        else:
            result = await capture(
                services.tasks.delete_task(args.task_id), notifier, success=TASK_DELETED
            )

    else:
        result = await _print_counts(services)

    match result:
        case Ok():
            return 0
        case Err():
            return 1
    return 1


async def _list_view(services: Services, view_key: str | None):
    view = parse_view(view_key)
    projects = await capture(services.projects.list_projects(), services.notifier)
    if isinstance(projects, Err):
        return projects
    tasks = await capture(services.tasks.list_tasks(), services.notifier)
    if isinstance(tasks, Err):
        return tasks

    visible = filter_tasks(tasks.value, view)
    print(f"{view_title(view, projects.value)} ({len(visible)})")
    for task in visible:
        print(f"  {format_task(task)}")
    if not visible:
        print("  No tasks here")
    return Ok(visible)


async def _print_counts(services: Services):
    projects = await capture(services.projects.list_projects(), services.notifier)
    if isinstance(projects, Err):
        return projects
    tasks = await capture(services.tasks.list_tasks(), services.notifier)
    if isinstance(tasks, Err):
        return tasks

    counts = get_task_counts(tasks.value, projects.value)
    print(f"All Tasks  {counts['all']}")
    print(f"Today      {counts['today']}")
    print(f"Completed  {counts['completed']}")
    for project in projects.value:
        print(format_project(project, counts[project.id]))
    return Ok(counts)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskboard",
        description="Manage tasks and projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--log-level", default=None, help="Override TASKBOARD_LOG_LEVEL")
    parser.add_argument(
        "--log-to-file", action="store_true", help="Also write logs under TASKBOARD_LOG_DIR"
    )
    groups = parser.add_subparsers(dest="group", required=True)

    projects = groups.add_parser("projects", help="List, add or delete projects")
    project_actions = projects.add_subparsers(dest="action", required=True)
    project_actions.add_parser("list", help="List projects")
    add_project = project_actions.add_parser("add", help="Create a project")
    add_project.add_argument("name")
    add_project.add_argument("--color", default=PROJECT_COLORS[0], choices=PROJECT_COLORS)
    add_project.add_argument("--icon", default=PROJECT_ICONS[0], choices=PROJECT_ICONS)
    delete_project = project_actions.add_parser("delete", help="Delete a project and its tasks")
    delete_project.add_argument("project_id")

    tasks = groups.add_parser("tasks", help="List, add, toggle or delete tasks")
    task_actions = tasks.add_subparsers(dest="action", required=True)
    list_tasks = task_actions.add_parser("list", help="List tasks in a view")
    list_tasks.add_argument(
        "--view", default=None, help="all (default), today, completed or a project id"
    )
    add_task = task_actions.add_parser("add", help="Create a task")
    add_task.add_argument("title")
    add_task.add_argument("--project", required=True, help="Project id")
    add_task.add_argument(
        "--priority", default=Priority.MEDIUM.value, choices=[p.value for p in Priority]
    )
    add_task.add_argument("--description", default=None)
    add_task.add_argument("--due", default=None, help="Due date (YYYY-MM-DD or ISO datetime)")
    toggle_task = task_actions.add_parser("toggle", help="Mark a task done or not done")
    toggle_task.add_argument("task_id")
    delete_task = task_actions.add_parser("delete", help="Delete a task")
    delete_task.add_argument("task_id")

    groups.add_parser("counts", help="Show task counts per view")
    return parser


async def main_async(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    logger = setup_logging(
        "taskboard",
        level=args.log_level or settings.log_level,
        log_file=settings.get_log_file("cli") if args.log_to_file else None,
    )

    try:
        services = build_services(settings)
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    services.notifier.subscribe(print_notice)
    try:
        return await run_command(args, services)
    finally:
        await services.gateway.close()


def main() -> None:
    load_dotenv()
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
