"""Configuration settings using pydantic-settings, plus the hot-swappable snapshot store."""

import importlib
import inspect
import logging
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Protocol, Union, runtime_checkable

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from faultrelay.models.enums import LoggingLevel
from faultrelay.utils.text import DEFAULT_WIDTH

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when the config store receives an unusable value."""


@runtime_checkable
class SupervisorReportFilter(Protocol):
    """Optional capability that can veto supervisor reports."""

    def should_send_supervisor_report(
        self, supervisor: Any, reason: Any, error_context: Any
    ) -> bool:
        ...


class RelaySettings(BaseSettings):
    """Relay settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FAULTRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: LoggingLevel = Field(
        default=LoggingLevel.WARNING,
        description="warning forwards warnings and errors, error forwards errors only",
    )
    filter: Optional[str] = Field(
        default=None,
        description="Import path of a supervisor report filter (module or module:attribute)",
    )
    term_width: int = Field(
        default=DEFAULT_WIDTH,
        ge=20,
        description="Column budget for term dumps inside messages",
    )
    log_level: str = Field(
        default="INFO",
        description="Level of the faultrelay package logger",
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        name = value.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {value}")
        return name


def configure_logging(settings: RelaySettings) -> None:
    """Set the level of the package logger from *settings*."""
    logging.getLogger("faultrelay").setLevel(settings.log_level)


@lru_cache
def get_settings() -> RelaySettings:
    """Get cached settings instance."""
    return RelaySettings()


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable view of the settings used for one routed event."""
    level: LoggingLevel = LoggingLevel.WARNING
    filter: Optional[SupervisorReportFilter] = None
    term_width: int = DEFAULT_WIDTH

    @property
    def allows_warnings(self) -> bool:
        return self.level == LoggingLevel.WARNING

    @classmethod
    def from_settings(cls, settings: RelaySettings) -> "ConfigSnapshot":
        return cls(
            level=settings.level,
            filter=load_filter(settings.filter) if settings.filter else None,
            term_width=settings.term_width,
        )


def _accepts_three_args(func: Any) -> bool:
    try:
        inspect.signature(func).bind(None, None, None)
    except TypeError:
        return False
    except ValueError:
        # Builtins without an introspectable signature
        return True
    return True


def load_filter(path: str) -> Optional[SupervisorReportFilter]:
    """
    Resolve a filter capability from ``package.module`` or ``package.module:attr``.

    Returns None (and logs a warning) when the target cannot be imported
    or does not expose a 3-argument ``should_send_supervisor_report``.
    """
    module_name, _, attribute = path.partition(":")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        logger.warning("Report filter %s could not be imported: %s", path, exc)
        return None

    if attribute:
        target = getattr(target, attribute, None)
        if target is None:
            logger.warning("Report filter %s has no attribute %s", module_name, attribute)
            return None

    predicate = getattr(target, "should_send_supervisor_report", None)
    if not callable(predicate) or not _accepts_three_args(predicate):
        logger.warning("Report filter %s does not export should_send_supervisor_report/3", path)
        return None
    return target


class ConfigStore:
    """
    Process-wide holder of the current :class:`ConfigSnapshot`.

    Readers take one snapshot per event without locking; writers swap the
    whole snapshot under a lock.
    """

    def __init__(self, snapshot: Optional[ConfigSnapshot] = None):
        self._snapshot = snapshot or ConfigSnapshot()
        self._lock = threading.Lock()

    def snapshot(self) -> ConfigSnapshot:
        """Return the latest applied snapshot."""
        return self._snapshot

    def apply(self, config: Union[RelaySettings, ConfigSnapshot]) -> ConfigSnapshot:
        """Replace the current snapshot with one built from *config*."""
        if isinstance(config, RelaySettings):
            configure_logging(config)
            snapshot = ConfigSnapshot.from_settings(config)
        elif isinstance(config, ConfigSnapshot):
            snapshot = config
        else:
            raise ConfigurationError(
                f"Expected RelaySettings or ConfigSnapshot, got {type(config).__name__}"
            )
        with self._lock:
            previous, self._snapshot = self._snapshot, snapshot
        logger.info(
            "Relay config applied: level %s -> %s, filter %s",
            previous.level.value,
            snapshot.level.value,
            "set" if snapshot.filter is not None else "none",
        )
        return snapshot

    def reload(self) -> ConfigSnapshot:
        """Re-read settings from the environment and apply them."""
        get_settings.cache_clear()
        return self.apply(get_settings())


@lru_cache
def get_config_store() -> ConfigStore:
    """Get the process-wide config store, seeded from the environment."""
    settings = get_settings()
    configure_logging(settings)
    return ConfigStore(ConfigSnapshot.from_settings(settings))
