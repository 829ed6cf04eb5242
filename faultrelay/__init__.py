"""
faultrelay

Normalizes fault and diagnostic reports from a process-supervision
runtime into capture events for an error-tracking collector.
"""

from faultrelay.config import ConfigSnapshot, ConfigStore, RelaySettings, get_config_store
from faultrelay.models import CaptureEvent, ClassifiedReason, Frame, Pid, Fun
from faultrelay.reasons import MessageRenderer, ReasonClassifier, classify_reason
from faultrelay.routing import EventRouter, LoggingSink, ReportFilter, RouteDecision

__all__ = [
    "ConfigSnapshot",
    "ConfigStore",
    "RelaySettings",
    "get_config_store",
    "CaptureEvent",
    "ClassifiedReason",
    "Frame",
    "Pid",
    "Fun",
    "MessageRenderer",
    "ReasonClassifier",
    "classify_reason",
    "EventRouter",
    "LoggingSink",
    "ReportFilter",
    "RouteDecision",
]
