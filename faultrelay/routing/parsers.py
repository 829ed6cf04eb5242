"""
Event Parsers

Turns the payload of a diagnostic event into a :class:`CaptureEvent`.

- ``MessageParser`` handles format-string payloads. Known format prefixes
  (generic server, state machine, task, ...) are matched together with
  the arity of their data list and mapped to a dedicated template; every
  other message is rendered with its data and sent as a plain event.
- ``ReportParser`` handles structured reports: crash, supervisor,
  progress and std_error reports, with a generic dump for the rest.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from faultrelay.models.enums import Level, ReportType
from faultrelay.models.events import CaptureEvent
from faultrelay.models.terms import get_value, is_proplist, iter_items
from faultrelay.reasons.renderer import MessageRenderer
from faultrelay.utils.text import format_message

SUPERVISORS_LOGGER = "supervisors"
CRASHED_MESSAGE = "Process crashed"
UNKNOWN_ERROR_INFO = ("error", "unknown", [])


@dataclass(frozen=True)
class MessageTemplate:
    """Extraction template for one recognised format-string prefix."""
    prefix: str
    tag: str
    fields: tuple[str, ...]  # Positional names of the data list
    extra_keys: tuple[str, ...]
    subject: str = "name"
    tag_field: Optional[str] = None  # Take the exit tag from this field instead of ``tag``


MESSAGE_TEMPLATES: tuple[MessageTemplate, ...] = (
    MessageTemplate(
        prefix="** Generic server ",
        tag="gen_server",
        fields=("name", "last_message", "state", "reason"),
        extra_keys=("name", "pid", "last_message", "state", "reason"),
    ),
    MessageTemplate(
        prefix="** State machine ",
        tag="gen_fsm",
        fields=("name", "last_message", "state_name", "state", "reason"),
        extra_keys=("name", "pid", "last_message", "state", "state_name", "reason"),
    ),
    MessageTemplate(
        prefix="** gen_event handler ",
        tag="gen_event",
        fields=("id", "name", "last_message", "state", "reason"),
        extra_keys=("id", "name", "pid", "last_message", "state", "reason"),
    ),
    MessageTemplate(
        prefix="** Generic process ",
        tag="gen_process",
        fields=("name", "last_message", "state", "reason"),
        extra_keys=("name", "pid", "last_message", "state", "reason"),
    ),
    MessageTemplate(
        prefix="Error in process ",
        tag="process",
        fields=("name", "node", "reason"),
        extra_keys=("name", "pid", "node", "reason"),
    ),
    MessageTemplate(
        prefix="Ranch listener ",
        tag="ranch",
        fields=("name", "protocol", "ref_pid", "reason"),
        extra_keys=("name", "pid", "ref_pid", "protocol", "reason"),
        tag_field="protocol",
    ),
    MessageTemplate(
        prefix="** Task ",
        tag="Task",
        fields=("task_pid", "parent_pid", "function", "function_args", "reason"),
        extra_keys=("pid", "parent_pid", "function", "function_args"),
        subject="task_pid",
    ),
)


def _extra_key(key: Any, renderer: MessageRenderer) -> str:
    return key if isinstance(key, str) else renderer.term(key)


def _merge_items(extra: dict[str, Any], props: Any, renderer: MessageRenderer) -> dict[str, Any]:
    """Append proplist entries to *extra*; keys already present win."""
    for key, value in iter_items(props):
        extra.setdefault(_extra_key(key, renderer), value)
    return extra


def _tag_value(tag: Any) -> Any:
    return tag.value if isinstance(tag, Enum) else tag


class MessageParser:
    """Parses ``{pid, format, data}`` payloads."""

    def __init__(
        self,
        renderer: MessageRenderer,
        templates: tuple[MessageTemplate, ...] = MESSAGE_TEMPLATES,
    ):
        self.renderer = renderer
        self.templates = templates

    def match(self, fmt: Any, data: Any) -> Optional[MessageTemplate]:
        """Find the template whose prefix and data arity fit."""
        if not isinstance(fmt, (str, bytes, list)) or not isinstance(data, list):
            return None
        text = self.renderer.string(fmt)
        for template in self.templates:
            if text.startswith(template.prefix) and len(data) == len(template.fields):
                return template
        return None

    def parse(self, level: Level, pid: Any, fmt: Any, data: Any) -> CaptureEvent:
        template = self.match(fmt, data) if level == Level.ERROR else None
        if template is None:
            return self.fallback(level, pid, fmt, data)

        values = {"pid": pid, **dict(zip(template.fields, data))}
        reason = values["reason"]
        classified = self.renderer.classify(reason)
        tag = values[template.tag_field] if template.tag_field else template.tag
        return CaptureEvent(
            message=self.renderer.format_exit(tag, values[template.subject], reason),
            level=level,
            exception=classified.exception,
            stacktrace=classified.stacktrace,
            extra={key: values[key] for key in template.extra_keys},
        )

    def fallback(self, level: Level, pid: Any, fmt: Any, data: Any) -> CaptureEvent:
        """Plain event: the format expanded with its data, no exception fields."""
        return CaptureEvent(
            message=format_message(fmt, data, self.renderer.term_width),
            level=level,
            extra={"pid": pid, "data": data},
        )


class ReportParser:
    """Parses ``{pid, type, report}`` payloads."""

    def __init__(self, renderer: MessageRenderer):
        self.renderer = renderer

    def parse(self, level: Level, pid: Any, report_type: Any, report: Any) -> CaptureEvent:
        report_type = _tag_value(report_type)

        if report_type == ReportType.CRASH_REPORT.value and isinstance(report, list) and len(report) == 2:
            return self.parse_crash_report(level, pid, report[0], report[1])
        if report_type == ReportType.SUPERVISOR_REPORT.value and is_proplist(report):
            return self.parse_supervisor_report(
                level,
                pid,
                get_value(report, "errorContext"),
                get_value(report, "offender"),
                get_value(report, "reason"),
                get_value(report, "supervisor"),
            )
        if report_type == ReportType.PROGRESS.value and level == Level.INFO and is_proplist(report):
            return self.parse_progress_report(
                pid, get_value(report, "started"), get_value(report, "supervisor")
            )
        if report_type == ReportType.STD_ERROR.value and level == Level.ERROR and is_proplist(report):
            return self.parse_std_error_report(pid, report)
        return self.parse_unknown_report(level, pid, report_type, report)

    def parse_crash_report(self, level: Level, pid: Any, report: Any, neighbors: Any) -> CaptureEvent:
        name = get_value(report, "registered_name", [])
        if name == []:
            name = get_value(report, "pid")

        if name is None:
            extra = _merge_items({"pid": pid, "neighbors": neighbors}, report, self.renderer)
            return CaptureEvent(message=CRASHED_MESSAGE, level=level, extra=extra)

        error_info = get_value(report, "error_info", UNKNOWN_ERROR_INFO)
        if isinstance(error_info, tuple) and len(error_info) == 3:
            kind, cause, trace = error_info
            reason = ((kind, cause), trace)
        else:
            reason = error_info
        classified = self.renderer.classify(reason)
        extra = _merge_items({"name": name, "pid": pid, "reason": reason}, report, self.renderer)
        return CaptureEvent(
            message=self.renderer.format_exit("Process", name, reason),
            level=level,
            exception=classified.exception,
            stacktrace=classified.stacktrace,
            extra=extra,
        )

    def parse_supervisor_report(
        self,
        level: Level,
        pid: Any,
        context: Any,
        offender: Any,
        reason: Any,
        supervisor: Any,
    ) -> CaptureEvent:
        classified = self.renderer.classify(reason)
        message = (
            f"Supervisor {self.renderer.format_name(supervisor)} "
            f"had child exit with reason {self.renderer.render_classified(classified)}"
        )
        return CaptureEvent(
            message=message,
            level=level,
            logger=SUPERVISORS_LOGGER,
            exception=classified.exception,
            stacktrace=classified.stacktrace,
            extra={
                "supervisor": supervisor,
                "context": context,
                "pid": pid,
                **self._child_fields(offender),
            },
        )

    def parse_progress_report(self, pid: Any, started: Any, supervisor: Any) -> CaptureEvent:
        supervisor_name = self.renderer.format_name(supervisor)
        child = get_value(started, "name", [])
        if child == [] or child is None:
            message = f"Supervisor {supervisor_name} started child"
        else:
            message = f"Supervisor {supervisor_name} started {self.renderer.format_name(child)}"
        return CaptureEvent(
            message=message,
            level=Level.INFO,
            logger=SUPERVISORS_LOGGER,
            extra={"supervisor": supervisor, "pid": pid, **self._child_fields(started)},
        )

    def _child_fields(self, child: Any) -> dict[str, Any]:
        return {
            "child_pid": get_value(child, "pid"),
            "mfa": self.renderer.format_mfa(get_value(child, "mfargs")),
            "restart_type": get_value(child, "restart_type"),
            "child_type": get_value(child, "child_type"),
            "shutdown": get_value(child, "shutdown"),
        }

    def parse_std_error_report(self, pid: Any, report: Any) -> CaptureEvent:
        text = get_value(report, "message")
        message = self.renderer.string(report if text is None else text)

        toplevel: dict[str, Any] = {}
        extra: dict[str, Any] = {"type": ReportType.STD_ERROR.value, "pid": pid}
        for key, value in iter_items(report):
            if key in ("exception", "stacktrace"):
                toplevel.setdefault(key, value)
            elif key != "message":
                extra.setdefault(_extra_key(key, self.renderer), value)
        return CaptureEvent(message=message, level=Level.ERROR, extra=extra, **toplevel)

    def parse_unknown_report(self, level: Level, pid: Any, report_type: Any, report: Any) -> CaptureEvent:
        return CaptureEvent(
            message=self.renderer.string(report),
            level=level,
            extra={"type": _tag_value(report_type), "pid": pid},
        )
