"""User-facing notifications (toasts)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

logger = logging.getLogger(__name__)

NotificationLevel = Literal["success", "info", "error"]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier:
    """Records notifications and forwards them to an optional display sink."""

    def __init__(self, sink: Callable[[Notification], None] | None = None) -> None:
        self._sink = sink
        self.notifications: list[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        logger.log(_LOG_LEVELS[level], message)
        if self._sink:
            self._sink(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify("success", message)

    def info(self, message: str) -> Notification:
        return self.notify("info", message)

    def error(self, message: str) -> Notification:
        return self.notify("error", message)

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None
