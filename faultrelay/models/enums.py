"""Enumeration types for the fault relay."""

from enum import Enum


class Level(str, Enum):
    """Severity attached to a capture event."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class LoggingLevel(str, Enum):
    """Minimum severity forwarded to the collector."""
    WARNING = "warning"  # Forward warnings and errors
    ERROR = "error"      # Forward errors only


class ExceptionClass(str, Enum):
    """Class tag of a classified fault."""
    EXIT = "exit"
    ERROR = "error"
    THROW = "throw"


class EventKind(str, Enum):
    """Tag of an inbound diagnostic event."""
    ERROR = "error"
    ERROR_REPORT = "error_report"
    WARNING_MSG = "warning_msg"
    WARNING_REPORT = "warning_report"


class ReportType(str, Enum):
    """Subtype of a structured report."""
    CRASH_REPORT = "crash_report"
    SUPERVISOR_REPORT = "supervisor_report"
    PROGRESS = "progress"
    STD_ERROR = "std_error"


class RouteReason(str, Enum):
    """Why the router forwarded or dropped an event."""
    FORWARDED = "forwarded"
    BELOW_LEVEL = "below_level"
    FILTERED = "filtered"
    UNHANDLED_KIND = "unhandled_kind"
