"""Consumers of game event messages."""

from __future__ import annotations

import logging
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that can receive a game message."""

    def notify(self, message: str) -> None:
        ...


class ConsoleNotificationSink:
    """Writes each message to the console."""

    def __init__(self, write: Callable[[str], object] = print) -> None:
        self._write = write

    def notify(self, message: str) -> None:
        self._write(message)


class LoggingNotificationSink:
    """Forwards messages to a logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._level = level

    def notify(self, message: str) -> None:
        self._logger.log(self._level, "%s", message)
