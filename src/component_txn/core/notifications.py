"""Notification events emitted by transactional file operations.

Notifications are informational only. A handler is injected into each
``Transaction`` rather than registered globally, and a failing handler never
fails the operation that emitted the event.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import structlog


class NotificationKind(str, Enum):
    """Kinds of events a transaction can report.

    Attributes:
        ROLLING_BACK: Rollback of an uncommitted transaction has started
        NON_FATAL_ERROR: An inversion or cleanup step failed and was skipped
        ROLLBACK_FINISHED: Every record has been visited
        CREATING_DIRECTORY: A missing directory is being created
        REMOVING_DIRECTORY: A directory tree is being deleted
        RENAMING_FILE: A file is being renamed
        RENAMING_DIRECTORY: A directory tree is being renamed
        TEMP_CLEANUP: Temporary backups are being deleted
    """

    ROLLING_BACK = "rolling_back"
    NON_FATAL_ERROR = "non_fatal_error"
    ROLLBACK_FINISHED = "rollback_finished"
    CREATING_DIRECTORY = "creating_directory"
    REMOVING_DIRECTORY = "removing_directory"
    RENAMING_FILE = "renaming_file"
    RENAMING_DIRECTORY = "renaming_directory"
    TEMP_CLEANUP = "temp_cleanup"


@dataclass(frozen=True)
class Notification:
    """A single structured event."""

    kind: NotificationKind
    path: Path | None = None
    error: BaseException | None = None
    detail: str | None = None

    @property
    def level(self) -> str:
        """Log level used when the event is written to a logger."""
        if self.kind is NotificationKind.NON_FATAL_ERROR:
            return "warning"
        if self.kind in (
            NotificationKind.ROLLING_BACK,
            NotificationKind.ROLLBACK_FINISHED,
            NotificationKind.TEMP_CLEANUP,
        ):
            return "info"
        return "debug"

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind.value}
        if self.path is not None:
            result["path"] = str(self.path)
        if self.error is not None:
            result["error"] = str(self.error)
        if self.detail is not None:
            result["detail"] = self.detail
        return result


NotifyHandler = Callable[[Notification], None]


def emit(handler: NotifyHandler | None, notification: Notification) -> None:
    """Deliver a notification, never letting the handler fail the caller."""
    if handler is None:
        return
    try:
        handler(notification)
    except Exception as e:  # noqa: BLE001
        structlog.get_logger().warning(
            "txn.notify_failed",
            kind=notification.kind.value,
            error=str(e),
        )


def null_handler(notification: Notification) -> None:
    """Discard every notification."""


def structlog_handler(logger: Any = None) -> NotifyHandler:
    """Build a handler that writes notifications to a structlog logger.

    Args:
        logger: Optional structlog logger; defaults to ``structlog.get_logger()``

    Returns:
        Handler logging ``txn.<kind>`` events at the notification's level
    """
    log = logger or structlog.get_logger()

    def handle(notification: Notification) -> None:
        fields = notification.to_dict()
        fields.pop("kind")
        getattr(log, notification.level)(f"txn.{notification.kind.value}", **fields)

    return handle


def collecting_handler() -> tuple[NotifyHandler, list[Notification]]:
    """Build a handler that appends every notification to a list."""
    events: list[Notification] = []
    return events.append, events
