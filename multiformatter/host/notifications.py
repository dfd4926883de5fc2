"""User-facing notifications (completion, step failures, conflicts)."""

import logging
from typing import Protocol


logger = logging.getLogger("multiformatter.notifications")


class Notifier(Protocol):
    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Sends notifications to the log stream."""

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)
