"""Capability-based suppression of structured reports."""

from typing import Any

from faultrelay.config import ConfigSnapshot
from faultrelay.models.enums import ReportType
from faultrelay.models.terms import get_value


class ReportFilter:
    """
    Decides whether a structured report is forwarded at all.

    Only supervisor reports consult the configured filter capability;
    every other report type is always forwarded.
    """

    def should_forward(self, kind: Any, report: Any, snapshot: ConfigSnapshot) -> bool:
        if kind != ReportType.SUPERVISOR_REPORT.value or snapshot.filter is None:
            return True
        return bool(
            snapshot.filter.should_send_supervisor_report(
                get_value(report, "supervisor"),
                get_value(report, "reason"),
                get_value(report, "errorContext"),
            )
        )
