"""
Transient user notifications.

The editor reports every outcome (saved, imported, rejected input, failed
export) through a notifier. The base class keeps a short backlog and logs;
``ConsoleNotifier`` also prints with rich.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional

from rich.console import Console


logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Severity of a notification."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


@dataclass
class Notification:
    """A single message shown to the user."""

    message: str
    level: NotificationLevel = NotificationLevel.SUCCESS
    timestamp: datetime = field(default_factory=datetime.now)


class Notifier:
    """Collects notifications emitted by the editor."""

    def __init__(self, backlog: int = 50):
        self._notifications: Deque[Notification] = deque(maxlen=backlog)

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> Notification:
        """Emit a notification."""
        notification = Notification(message=message, level=level)
        self._notifications.append(notification)
        logger.log(_LOG_LEVELS[level], f"[{level.value}] {message}")
        self._emit(notification)
        return notification

    def _emit(self, notification: Notification) -> None:
        """Display hook for subclasses."""

    @property
    def notifications(self) -> List[Notification]:
        return list(self._notifications)

    @property
    def latest(self) -> Optional[Notification]:
        return self._notifications[-1] if self._notifications else None

    def clear(self) -> None:
        self._notifications.clear()


class ConsoleNotifier(Notifier):
    """Notifier that prints each message to a rich console."""

    STYLES = {
        NotificationLevel.SUCCESS: "green",
        NotificationLevel.INFO: "blue",
        NotificationLevel.WARNING: "yellow",
        NotificationLevel.ERROR: "red",
    }

    def __init__(self, console: Optional[Console] = None, backlog: int = 50):
        super().__init__(backlog)
        self.console = console or Console()

    def _emit(self, notification: Notification) -> None:
        style = self.STYLES[notification.level]
        self.console.print(f"[{style}]{notification.message}[/{style}]")
