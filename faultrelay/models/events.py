"""Classification results and the capture event handed to the sink."""

from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from faultrelay.models.enums import ExceptionClass, Level
from faultrelay.models.terms import is_frame

EMPTY_MESSAGE = "(empty message)"


class Frame(NamedTuple):
    """
    One call-site of a call trace.

    ``arity`` is either an integer arity or the list of literal arguments
    the function was called with. ``location`` holds the optional fourth
    element (file/line proplist).
    """
    module: Any
    function: Any
    arity: Any
    location: Any = None

    @classmethod
    def from_term(cls, term: Any) -> Optional["Frame"]:
        """Build a frame from a 3- or 4-element tuple, or None."""
        if not is_frame(term):
            return None
        return cls(*term)

    @property
    def has_args(self) -> bool:
        return isinstance(self.arity, list)


class ExceptionInfo(NamedTuple):
    """The ``{Class, Cause}`` pair of a classified fault."""
    kind: ExceptionClass
    cause: Any


@dataclass(frozen=True)
class ClassifiedReason:
    """Output of the reason classifier."""
    exception: ExceptionInfo
    stacktrace: list[Frame] = field(default_factory=list)
    raw_trace: Any = None  # Original trace term, dumped when no frame is recognised

    @property
    def kind(self) -> ExceptionClass:
        return self.exception.kind

    @property
    def cause(self) -> Any:
        return self.exception.cause


class CaptureEvent(BaseModel):
    """
    Normalized record handed to the error-tracking sink.

    ``exception`` is normally an :class:`ExceptionInfo`; std_error reports
    pass their own ``exception``/``stacktrace`` values through unchanged.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    message: str = Field(..., description="One-line human readable summary")
    level: Level = Field(..., description="Severity of the event")
    logger: Optional[str] = Field(default=None, description="Logger tag, e.g. supervisors")
    exception: Optional[Any] = Field(default=None, description="Classified {Class, Cause}")
    stacktrace: Optional[Any] = Field(default=None, description="Normalized call trace")
    extra: dict[str, Any] = Field(default_factory=dict, description="Context tags")

    @field_validator("message", mode="before")
    @classmethod
    def _non_empty_message(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return EMPTY_MESSAGE
        return value

    def details(self) -> dict[str, Any]:
        """Ordered mapping passed to ``capture`` alongside the message."""
        details: dict[str, Any] = {"level": self.level.value}
        if self.logger is not None:
            details["logger"] = self.logger
        if self.exception is not None:
            details["exception"] = self.exception
        if self.stacktrace is not None:
            details["stacktrace"] = self.stacktrace
        details["extra"] = dict(self.extra)
        return details
