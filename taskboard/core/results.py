"""Results and user-facing notices.

Repository calls raise. At the presentation seam, ``capture`` awaits a call
and returns an ``Ok`` or an ``Err`` that the caller can ``match`` on, while
reporting the outcome on a ``Notifier``:

    result = await capture(tasks.create_task("Write spec", project_id=pid), notifier,
                           success=TASK_CREATED)
    match result:
        case Ok(task):
            ...
        case Err(ValidationError() as error):
            show_inline(error.field, error.message)
        case Err(error):
            ...

Notices follow the error taxonomy: validation errors are inline (tied to a
field), auth errors are blocking, everything else is a dismissible
notification carrying the underlying message.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from ..utils.errors import AuthError, TaskboardError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed outcome."""

    error: TaskboardError


Result = Ok[T] | Err


class NoticeLevel(Enum):
    SUCCESS = "success"
    INLINE = "inline"
    BLOCKING = "blocking"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A message for the user.

    Attributes:
        level: How the notice should be presented
        title: Short heading
        message: Details
        dismissible: Whether the user can close it
        field: Offending field for inline validation notices
    """

    level: NoticeLevel
    title: str
    message: str
    dismissible: bool = True
    field: str | None = None


# Success notices shown after mutations
TASK_CREATED = Notice(NoticeLevel.SUCCESS, "Task created", "Your new task has been added.")
TASK_DELETED = Notice(NoticeLevel.SUCCESS, "Task deleted", "The task has been removed.")
PROJECT_CREATED = Notice(
    NoticeLevel.SUCCESS, "Project created", "Your new project has been created."
)
PROJECT_DELETED = Notice(NoticeLevel.SUCCESS, "Project deleted", "The project has been deleted.")


def notice_for_error(error: TaskboardError) -> Notice:
    """Map an error onto the notice the user should see."""
    if isinstance(error, ValidationError):
        return Notice(NoticeLevel.INLINE, "Invalid input", error.message, field=error.field)
    if isinstance(error, AuthError):
        return Notice(NoticeLevel.BLOCKING, "Sign in required", str(error), dismissible=False)
    return Notice(NoticeLevel.ERROR, "Error", str(error))


NoticeListener = Callable[[Notice], None]


class Notifier:
    """Uniform channel for reporting outcomes to the user.

    Keeps every notice it receives and forwards it to subscribers.
    """

    def __init__(self) -> None:
        self.notices: list[Notice] = []
        self._listeners: list[NoticeListener] = []

    def subscribe(self, listener: NoticeListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)
        if notice.level is NoticeLevel.SUCCESS:
            logger.debug(f"{notice.title}: {notice.message}")
        else:
            logger.warning(f"{notice.title}: {notice.message}")
        for listener in list(self._listeners):
            listener(notice)

    def report(self, error: TaskboardError) -> Notice:
        """Report an error and return the notice that was sent."""
        notice = notice_for_error(error)
        self.notify(notice)
        return notice

    def dismiss(self, notice: Notice) -> None:
        """Remove a dismissible notice."""
        if notice.dismissible and notice in self.notices:
            self.notices.remove(notice)

    def clear(self) -> None:
        self.notices.clear()


async def capture(
    call: Awaitable[T],
    notifier: Notifier | None = None,
    success: Notice | None = None,
) -> Result[T]:
    """Await a repository call and turn its outcome into a Result.

    Only taskboard errors are captured; anything else is a bug and propagates.

    Args:
        call: Awaitable returned by a repository method
        notifier: Where to report the outcome (optional)
        success: Notice to send when the call succeeds

    Returns:
        Ok with the call's value, or Err with the error
    """
    try:
        value = await call
    except TaskboardError as e:
        if notifier is not None:
            notifier.report(e)
        return Err(e)

    if notifier is not None and success is not None:
        notifier.notify(success)
    return Ok(value)
