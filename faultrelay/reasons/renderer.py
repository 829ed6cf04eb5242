"""
Message Renderer

Turns a classified fault into a deterministic one-line sentence, and
renders process names, call frames and exit summaries for the report
parsers. Unrecognised causes fall back to a bounded term dump.
"""

from typing import Any, Optional, Sequence

from faultrelay.models.events import ClassifiedReason, Frame
from faultrelay.models.terms import Pid, fun_arity, is_frame
from faultrelay.reasons.classifier import ReasonClassifier, classify_reason
from faultrelay.utils.text import (
    DEFAULT_WIDTH,
    format_string,
    format_term,
    truncate_at_item_boundary,
)

# Causes rendered as "<prefix><mfa>"
ATOM_TEMPLATES: dict[str, str] = {
    "undef": "call to undefined function ",
    "badarg": "bad argument in ",
    "function_clause": "no function clause matching ",
    "if_clause": "no true branch found while evaluating if expression in ",
    "badarith": "bad arithmetic expression in ",
    "noproc": "no such process or port in call to ",
}

# Causes rendered as "<prefix><term> in <mfa>"
VALUE_TEMPLATES: dict[str, str] = {
    "badmatch": "no match of right hand value ",
    "badrecord": "bad record ",
    "case_clause": "no case clause matching ",
    "try_clause": "no try clause matching ",
    "badfun": "bad function ",
}

EMFILE_MESSAGE = "maximum number of file descriptors exhausted, check ulimit -n"

SYSTEM_LIMITS: dict[tuple[str, str], str] = {
    ("erlang", "open_port"): "maximum number of ports exceeded",
    ("erlang", "spawn"): "maximum number of processes exceeded",
    ("erlang", "spawn_opt"): "maximum number of processes exceeded",
    ("erlang", "list_to_atom"): (
        "tried to create an atom larger than 255, or maximum atom count exceeded"
    ),
    ("ets", "new"): "maximum number of ETS tables exceeded",
}


class MessageRenderer:
    """
    Renders classified reasons and exit summaries.

    Pure and deterministic: the same input always yields the same text.
    """

    def __init__(
        self,
        term_width: int = DEFAULT_WIDTH,
        classifier: Optional[ReasonClassifier] = None,
    ):
        self.term_width = term_width
        self.classifier = classifier

    # -- terms -----------------------------------------------------------

    def term(self, value: Any) -> str:
        return format_term(value, self.term_width)

    def string(self, value: Any) -> str:
        return format_string(value, self.term_width)

    def format_name(self, name: Any) -> str:
        """Unwrap local/global/via registered names and render literally."""
        if isinstance(name, tuple):
            if len(name) == 2 and name[0] in ("local", "global"):
                return self.string(name[1])
            if len(name) == 3 and name[0] == "via":
                return self.string(name[2])
        return self.string(name)

    # -- frames ----------------------------------------------------------

    def format_frame(self, frame: Frame) -> str:
        """``m:f/2`` for arity frames, ``m:f(a, b)`` for argument frames."""
        prefix = f"{self.term(frame.module)}:{self.term(frame.function)}"
        if frame.has_args:
            return f"{prefix}({', '.join(self.term(arg) for arg in frame.arity)})"
        if isinstance(frame.arity, int) and not isinstance(frame.arity, bool):
            return f"{prefix}/{frame.arity}"
        return f"{prefix}/{self.term(frame.arity)}"

    def format_mfa(self, value: Any) -> str:
        """Render a frame, a trace (by its head) or dump anything else."""
        if isinstance(value, list) and value and is_frame(value[0]):
            value = value[0]
        if is_frame(value):
            return self.format_frame(Frame.from_term(value))
        return self.term(value)

    def mfa(self, trace: Sequence[Frame], raw_trace: Any = None) -> str:
        if trace:
            return self.format_frame(trace[0])
        return self.term(raw_trace if raw_trace is not None else list(trace))

    # -- reasons ---------------------------------------------------------

    def render(self, cause: Any, trace: Sequence[Frame] = (), raw_trace: Any = None) -> str:
        """Render a classified cause with its call trace."""
        text = self._render_known(cause, trace, raw_trace)
        if text is not None:
            return text
        if trace:
            return f"{self.term(cause)} in {self.mfa(trace)}"
        if isinstance(cause, tuple) and cause:
            joined = ", ".join(self.term(item) for item in cause)
            return truncate_at_item_boundary(joined, self.term_width)
        return self.term(cause)

    def _render_known(self, cause: Any, trace: Sequence[Frame], raw_trace: Any) -> Optional[str]:
        if isinstance(cause, str):
            if cause in ATOM_TEMPLATES:
                return ATOM_TEMPLATES[cause] + self.mfa(trace, raw_trace)
            if cause == "emfile":
                return EMFILE_MESSAGE
            if cause == "system_limit":
                return "system limit: " + self._system_limit(trace, raw_trace)
            return None

        if not (isinstance(cause, tuple) and len(cause) == 2 and isinstance(cause[0], str)):
            return None
        tag, value = cause

        if tag == "emfile":
            return EMFILE_MESSAGE
        if tag == "bad_return":
            if trace:
                return f"bad return value {self.term(value)} from {self.mfa(trace)}"
            return f"bad return value {self.term(value)}"
        if tag in VALUE_TEMPLATES:
            return f"{VALUE_TEMPLATES[tag]}{self.term(value)} in {self.mfa(trace, raw_trace)}"
        if tag == "badarity" and isinstance(value, tuple) and len(value) == 2:
            fun, args = value
            if isinstance(args, list):
                arity = fun_arity(fun)
                declared = str(arity) if arity is not None else self.term(fun)
                return (
                    f"fun called with wrong arity of {len(args)} instead of {declared} "
                    f"in {self.mfa(trace, raw_trace)}"
                )
        return None

    def _system_limit(self, trace: Sequence[Frame], raw_trace: Any) -> str:
        if trace:
            head = trace[0]
            key = (head.module, head.function)
            if all(isinstance(part, str) for part in key) and key in SYSTEM_LIMITS:
                return SYSTEM_LIMITS[key]
        return self.mfa(trace, raw_trace)

    def render_classified(self, classified: ClassifiedReason) -> str:
        return self.render(classified.cause, classified.stacktrace, classified.raw_trace)

    def classify(self, raw: Any) -> ClassifiedReason:
        if self.classifier is not None:
            return self.classifier.classify(raw)
        return classify_reason(raw)

    def render_reason(self, raw: Any) -> str:
        """Classify a raw reason and render it."""
        return self.render_classified(self.classify(raw))

    def format_exit(self, tag: Any, subject: Any, reason: Any) -> str:
        """``"<tag> [<name>] terminated with reason: <reason>"``."""
        rendered = self.render_reason(reason)
        if isinstance(subject, Pid):
            return f"{self.string(tag)} terminated with reason: {rendered}"
        return f"{self.string(tag)} {self.format_name(subject)} terminated with reason: {rendered}"
