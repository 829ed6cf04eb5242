"""Capture sinks: the outbound side of the relay."""

import logging
from typing import Any, Protocol

from faultrelay.models.enums import Level

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Level.ERROR.value: logging.ERROR,
    Level.WARNING.value: logging.WARNING,
    Level.INFO.value: logging.INFO,
}


class CaptureSink(Protocol):
    """Receives one call per forwarded event; the result is not inspected."""

    def capture(self, message: str, details: dict[str, Any]) -> Any:
        ...


class LoggingSink:
    """Writes capture events to a stdlib logger instead of a remote collector."""

    def __init__(self, target: logging.Logger = logger):
        self.target = target

    def capture(self, message: str, details: dict[str, Any]) -> None:
        level = _LOG_LEVELS.get(details.get("level"), logging.ERROR)
        self.target.log(
            level,
            "%s",
            message,
            extra={
                "capture_logger": details.get("logger"),
                "capture_exception": details.get("exception"),
                "capture_extra": details.get("extra", {}),
            },
        )
