"""
Tests for the data models

Tests cover:
- Term value types (Pid, Fun) and proplist access
- Frame construction from trace tuples
- CaptureEvent details ordering and message invariant
"""

import pytest

from faultrelay.models import (
    CaptureEvent,
    ExceptionClass,
    ExceptionInfo,
    Frame,
    Fun,
    Level,
    Pid,
    get_value,
    iter_items,
)
from faultrelay.models.terms import fun_arity, is_trace_like


class TestTerms:
    """Test term value types and proplist helpers."""

    def test_pid_renders_like_runtime(self):
        """Pid should render as <node.number.serial>."""
        assert str(Pid(0, 42, 0)) == "<0.42.0>"

    def test_fun_arity_from_fun_value(self):
        """Declared arity comes from the Fun value."""
        assert fun_arity(Fun("m", "-f/0-fun-0-", 2)) == 2

    def test_fun_arity_from_callable(self):
        """Python callables report their positional parameter count."""
        assert fun_arity(lambda a, b, c: None) == 3

    def test_fun_arity_unknown(self):
        """Non-callables have no arity."""
        assert fun_arity(42) is None

    def test_get_value_first_match_wins(self):
        """Like proplists, the first entry for a key is returned."""
        props = [("level", "error"), ("level", "warning")]
        assert get_value(props, "level") == "error"

    def test_get_value_bare_atom_means_true(self):
        """A bare atom entry reads as true."""
        assert get_value(["verbose"], "verbose") is True

    def test_get_value_default(self):
        """Missing keys and non-proplists return the default."""
        assert get_value([("a", 1)], "b", []) == []
        assert get_value("not a proplist", "a") is None

    def test_get_value_reads_dicts(self):
        """A dict is accepted wherever a proplist is read."""
        assert get_value({"reason": "normal"}, "reason") == "normal"

    def test_iter_items_keeps_order(self):
        """iter_items yields pairs in their original order."""
        assert iter_items([("b", 1), "flag", ("a", 2), 7]) == [("b", 1), ("flag", True), ("a", 2)]

    def test_trace_like(self):
        """Lists and frame tuples may carry a trace; atoms do not."""
        assert is_trace_like([])
        assert is_trace_like(("m", "f", 1))
        assert not is_trace_like("foo")


class TestFrame:
    """Test Frame construction."""

    def test_from_three_tuple(self):
        """A 3-tuple becomes a frame without location."""
        frame = Frame.from_term(("lists", "map", 2))
        assert frame.module == "lists"
        assert frame.arity == 2
        assert frame.location is None

    def test_from_four_tuple(self):
        """The fourth element is kept as location."""
        frame = Frame.from_term(("m", "f", 1, [("line", 7)]))
        assert frame.location == [("line", 7)]

    def test_args_form(self):
        """An argument list in the arity slot is recognised."""
        assert Frame.from_term(("m", "f", [1, 2])).has_args

    def test_rejects_other_shapes(self):
        """Anything that is not a 3/4-tuple is not a frame."""
        assert Frame.from_term(("m", "f")) is None
        assert Frame.from_term(["m", "f", 1]) is None


class TestCaptureEvent:
    """Test CaptureEvent model."""

    def test_details_order(self):
        """details() lists level, logger, exception, stacktrace, then extra."""
        event = CaptureEvent(
            message="boom",
            level=Level.ERROR,
            logger="supervisors",
            exception=ExceptionInfo(ExceptionClass.EXIT, "killed"),
            stacktrace=[],
            extra={"pid": Pid(0, 1, 0)},
        )
        details = event.details()
        assert list(details) == ["level", "logger", "exception", "stacktrace", "extra"]
        assert details["level"] == "error"
        assert details["exception"] == ("exit", "killed")

    def test_plain_event_omits_exception(self):
        """Plain log-style events carry no exception or stacktrace."""
        details = CaptureEvent(message="hello", level=Level.INFO).details()
        assert list(details) == ["level", "extra"]

    def test_level_coerced_from_string(self):
        """Levels may be given as their string value."""
        assert CaptureEvent(message="x", level="warning").level == Level.WARNING

    def test_empty_message_replaced(self):
        """Message is never empty."""
        event = CaptureEvent(message="  ", level=Level.ERROR)
        assert event.message == "(empty message)"

    def test_invalid_level_rejected(self):
        """Unknown levels fail validation."""
        with pytest.raises(ValueError):
            CaptureEvent(message="x", level="debug")
