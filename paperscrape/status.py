# paperscrape/status.py
"""Status-display collaborator."""

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class StatusDisplay(Protocol):
    """Receives coarse progress messages."""

    def set_status(self, message: str) -> None: ...


class LoggingStatus:
    """Status display that writes messages to the log."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def set_status(self, message: str) -> None:
        logger.log(self.level, message)


def report_status(status: StatusDisplay | None, message: str) -> None:
    """Send a message without letting the display affect the pipeline."""
    if status is None:
        return
    try:
        status.set_status(message)
    except Exception as e:
        logger.debug("Status display failed for %r: %s", message, e)
