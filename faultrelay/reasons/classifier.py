"""
Reason Classifier

Decodes the nested "why did this terminate" descriptor attached to
runtime fault reports. Classification is an ordered chain of shape
rules; the first rule that recognises the value wins, and anything
unrecognised degrades to ``{exit, raw}`` with an empty trace.

Recognised shapes, in order:
1. ``{'function not exported', Trace}``      -> exit / undef
2. ``{bad_return, {_, {'EXIT', Inner}}}``    -> classify Inner
3. ``{bad_return, {MFA, Value}}``            -> exit / {bad_return, Value}
4. ``{bad_return_value, Value}``             -> exit / {bad_return, Value}
5. ``{{bad_return_value, Value}, MFA}``      -> exit / {bad_return, Value}
6. ``{badarg, Trace}``                       -> error / badarg
7. ``{{badmatch, Value}, Trace}``            -> exit / {badmatch, Value}
8. ``{'EXIT', Inner}``                       -> classify Inner
9. ``{Inner, {child, ...}}``                 -> classify Inner
10. ``{{exit|error|throw, Reason}, Trace}``  -> Class / Reason
11. ``{Reason, Trace}`` (trace-shaped)       -> exit / Reason
12. anything else                            -> exit / raw
"""

from typing import Any, Callable, NamedTuple, Optional, Union

from faultrelay.models.enums import ExceptionClass
from faultrelay.models.events import ClassifiedReason, ExceptionInfo, Frame
from faultrelay.models.terms import is_frame, is_trace_like


class Unwrap(NamedTuple):
    """Rule outcome asking the classifier to start over on an inner term."""
    inner: Any


# A rule returns a result, an Unwrap, or None to hand the value to the next rule.
RuleResult = Optional[Union[ClassifiedReason, Unwrap]]
Rule = Callable[["ReasonClassifier", Any], RuleResult]

_CLASS_TAGS = {c.value: c for c in ExceptionClass}


def normalize_trace(trace: Any) -> list[Frame]:
    """
    Normalize a trace term to a list of frames.

    A single 3/4-element frame becomes a one-element trace, a list whose
    head is a frame keeps its frame-shaped entries, anything else is [].
    """
    if is_frame(trace):
        return [Frame.from_term(trace)]
    if isinstance(trace, list) and trace and is_frame(trace[0]):
        return [Frame.from_term(entry) for entry in trace if is_frame(entry)]
    return []


def _pair(value: Any) -> bool:
    return isinstance(value, tuple) and len(value) == 2


def _result(kind: ExceptionClass, cause: Any, trace: Any = None) -> ClassifiedReason:
    return ClassifiedReason(
        exception=ExceptionInfo(kind, cause),
        stacktrace=normalize_trace(trace),
        raw_trace=trace,
    )


def _function_not_exported(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and raw[0] == "function not exported":
        return _result(ExceptionClass.EXIT, "undef", raw[1])
    return None


def _bad_return(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if not (_pair(raw) and raw[0] == "bad_return" and _pair(raw[1])):
        return None
    mfa, value = raw[1]
    if _pair(value) and value[0] == "EXIT":
        return Unwrap(value[1])
    return _result(ExceptionClass.EXIT, ("bad_return", value), mfa)


def _bad_return_value(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if not _pair(raw):
        return None
    head, tail = raw
    if head == "bad_return_value":
        return _result(ExceptionClass.EXIT, ("bad_return", tail), [])
    if _pair(head) and head[0] == "bad_return_value":
        return _result(ExceptionClass.EXIT, ("bad_return", head[1]), tail)
    return None


def _badarg(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and raw[0] == "badarg":
        return _result(ExceptionClass.ERROR, "badarg", raw[1])
    return None


def _badmatch(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and _pair(raw[0]) and raw[0][0] == "badmatch":
        return _result(ExceptionClass.EXIT, ("badmatch", raw[0][1]), raw[1])
    return None


def _exit_wrapper(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and raw[0] == "EXIT":
        return Unwrap(raw[1])
    return None


def _child_annotation(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and isinstance(raw[1], tuple) and raw[1] and raw[1][0] == "child":
        return Unwrap(raw[0])
    return None


def _class_tagged(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and _pair(raw[0]) and isinstance(raw[0][0], str) and raw[0][0] in _CLASS_TAGS:
        return _result(_CLASS_TAGS[raw[0][0]], raw[0][1], raw[1])
    return None


def _reason_with_trace(self: "ReasonClassifier", raw: Any) -> RuleResult:
    if _pair(raw) and is_trace_like(raw[1]):
        return _result(ExceptionClass.EXIT, raw[0], raw[1])
    return None


DEFAULT_RULES: tuple[Rule, ...] = (
    _function_not_exported,
    _bad_return,
    _bad_return_value,
    _badarg,
    _badmatch,
    _exit_wrapper,
    _child_annotation,
    _class_tagged,
    _reason_with_trace,
)


class ReasonClassifier:
    """
    Ordered chain of shape rules over fault-cause descriptors.

    Every rule either recognises the value or passes; the chain ends with
    the ``{exit, raw}`` catch-all, so ``classify`` never raises.
    """

    def __init__(self, rules: tuple[Rule, ...] = DEFAULT_RULES):
        self.rules = rules

    def classify(self, raw: Any) -> ClassifiedReason:
        """Classify *raw* into ``{Class, Cause}`` and a normalized trace."""
        while True:
            for rule in self.rules:
                result = rule(self, raw)
                if isinstance(result, Unwrap):
                    # Unwrapped terms are strictly smaller, so the loop ends
                    raw = result.inner
                    break
                if result is not None:
                    return result
            else:
                break
        return ClassifiedReason(exception=ExceptionInfo(ExceptionClass.EXIT, raw))


_default_classifier = ReasonClassifier()


def classify_reason(raw: Any) -> ClassifiedReason:
    """Classify with the default rule chain."""
    return _default_classifier.classify(raw)
