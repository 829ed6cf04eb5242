"""Event routing: gating, report filtering, parsing and the capture sink."""

from faultrelay.routing.filters import ReportFilter
from faultrelay.routing.parsers import MessageParser, ReportParser, MESSAGE_TEMPLATES
from faultrelay.routing.router import EventRouter, RouteDecision
from faultrelay.routing.sink import CaptureSink, LoggingSink

__all__ = [
    "ReportFilter",
    "MessageParser",
    "ReportParser",
    "MESSAGE_TEMPLATES",
    "EventRouter",
    "RouteDecision",
    "CaptureSink",
    "LoggingSink",
]
