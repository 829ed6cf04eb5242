"""
Data models for the fault relay.

Term value types, classification results and the capture event.
"""

from faultrelay.models.enums import (
    Level,
    LoggingLevel,
    ExceptionClass,
    EventKind,
    ReportType,
    RouteReason,
)
from faultrelay.models.terms import Pid, Fun, get_value, iter_items
from faultrelay.models.events import (
    Frame,
    ExceptionInfo,
    ClassifiedReason,
    CaptureEvent,
)

__all__ = [
    # Enums
    "Level",
    "LoggingLevel",
    "ExceptionClass",
    "EventKind",
    "ReportType",
    "RouteReason",
    # Terms
    "Pid",
    "Fun",
    "get_value",
    "iter_items",
    # Events
    "Frame",
    "ExceptionInfo",
    "ClassifiedReason",
    "CaptureEvent",
]
