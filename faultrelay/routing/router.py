"""
Event Router

Top-level dispatcher for diagnostic events. Each call handles exactly one
event: the router reads one config snapshot, gates the event on its kind,
severity and the report filter, parses it and hands the resulting capture
event to the sink.

Dispatch:
- error           -> always parsed as a message and forwarded
- error_report    -> forwarded unless the report filter vetoes it
- warning_msg     -> forwarded only when the minimum level is warning
- warning_report  -> minimum level warning, and the report filter agrees
- anything else   -> dropped
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from faultrelay.config import ConfigSnapshot, ConfigStore, get_config_store
from faultrelay.models.enums import EventKind, Level, RouteReason
from faultrelay.models.events import CaptureEvent
from faultrelay.reasons.classifier import ReasonClassifier
from faultrelay.reasons.renderer import MessageRenderer
from faultrelay.routing.filters import ReportFilter
from faultrelay.routing.parsers import MessageParser, ReportParser
from faultrelay.routing.sink import CaptureSink

logger = logging.getLogger(__name__)

_MESSAGE_KINDS = {
    EventKind.ERROR.value: Level.ERROR,
    EventKind.WARNING_MSG.value: Level.WARNING,
}
_REPORT_KINDS = {
    EventKind.ERROR_REPORT.value: Level.ERROR,
    EventKind.WARNING_REPORT.value: Level.WARNING,
}


@dataclass
class RouteDecision:
    """Result of routing one event."""
    forwarded: bool
    reason: RouteReason
    event: Optional[CaptureEvent] = None
    kind: Any = None


class EventRouter:
    """
    Routes raw diagnostic events to the capture sink.

    Keeps no state between events; the only shared input is the
    externally owned config store, read once per event.
    """

    def __init__(
        self,
        sink: CaptureSink,
        config_store: Optional[ConfigStore] = None,
        report_filter: Optional[ReportFilter] = None,
        classifier: Optional[ReasonClassifier] = None,
    ):
        self.sink = sink
        self.config_store = config_store or get_config_store()
        self.report_filter = report_filter or ReportFilter()
        self.classifier = classifier

    def handle_event(self, event: Any) -> RouteDecision:
        """
        Route a single ``(kind, meta, payload)`` event.

        Args:
            event: Raw event tuple from the host event-distribution mechanism

        Returns:
            RouteDecision telling whether (and why) the event was forwarded
        """
        if not (isinstance(event, tuple) and len(event) == 3):
            return self._drop(RouteReason.UNHANDLED_KIND, None)

        kind, _meta, payload = event
        kind = kind.value if isinstance(kind, EventKind) else kind
        if not isinstance(kind, str):
            return self._drop(RouteReason.UNHANDLED_KIND, kind)
        snapshot = self.config_store.snapshot()

        if kind in _MESSAGE_KINDS:
            level = _MESSAGE_KINDS[kind]
            if level == Level.WARNING and not snapshot.allows_warnings:
                return self._drop(RouteReason.BELOW_LEVEL, kind)
            return self._forward(kind, self._parse_message(level, payload, snapshot))

        if kind in _REPORT_KINDS:
            level = _REPORT_KINDS[kind]
            if level == Level.WARNING and not snapshot.allows_warnings:
                return self._drop(RouteReason.BELOW_LEVEL, kind)
            if _is_payload(payload):
                _pid, report_type, report = payload
                if not self.report_filter.should_forward(report_type, report, snapshot):
                    return self._drop(RouteReason.FILTERED, kind)
            return self._forward(kind, self._parse_report(level, payload, snapshot))

        return self._drop(RouteReason.UNHANDLED_KIND, kind)

    def _renderer(self, snapshot: ConfigSnapshot) -> MessageRenderer:
        return MessageRenderer(term_width=snapshot.term_width, classifier=self.classifier)

    def _parse_message(self, level: Level, payload: Any, snapshot: ConfigSnapshot) -> CaptureEvent:
        parser = MessageParser(self._renderer(snapshot))
        if not _is_payload(payload):
            return _generic_event(parser.renderer, level, payload)
        pid, fmt, data = payload
        try:
            return parser.parse(level, pid, fmt, data)
        except Exception:
            logger.exception("Failed to parse %s message, sending it unparsed", level.value)
            return parser.fallback(level, pid, fmt, data)

    def _parse_report(self, level: Level, payload: Any, snapshot: ConfigSnapshot) -> CaptureEvent:
        parser = ReportParser(self._renderer(snapshot))
        if not _is_payload(payload):
            return _generic_event(parser.renderer, level, payload)
        pid, report_type, report = payload
        try:
            return parser.parse(level, pid, report_type, report)
        except Exception:
            logger.exception("Failed to parse %s report, sending it unparsed", report_type)
            return parser.parse_unknown_report(level, pid, report_type, report)

    def _forward(self, kind: Any, event: CaptureEvent) -> RouteDecision:
        self.sink.capture(event.message, event.details())
        return RouteDecision(forwarded=True, reason=RouteReason.FORWARDED, event=event, kind=kind)

    def _drop(self, reason: RouteReason, kind: Any) -> RouteDecision:
        logger.debug("Dropped %s event: %s", kind, reason.value)
        return RouteDecision(forwarded=False, reason=reason, kind=kind)


def _is_payload(payload: Any) -> bool:
    return isinstance(payload, tuple) and len(payload) == 3


def _generic_event(renderer: MessageRenderer, level: Level, payload: Any) -> CaptureEvent:
    return CaptureEvent(
        message=renderer.term(payload),
        level=level,
        extra={"pid": None, "data": payload},
    )
