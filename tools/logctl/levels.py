"""
Log severities and the sink routing policy.

Six levels form a total order. Each sink (console and file) has its own
minimum level, and a single comparison against the level's ordinal decides
whether that sink acts on an event.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .errors import ValidationError


class LogLevel(enum.IntEnum):
    """Ordered log severities, lowest first."""

    VERBOSE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5

    @property
    def tag(self) -> str:
        """Three-letter tag shown on every rendered line."""
        return LEVEL_TAGS[self]

    @property
    def display_name(self) -> str:
        """Name used in serialized events, e.g. ``Information``."""
        return self.name.capitalize()

    @classmethod
    def parse(cls, value: "str | int | LogLevel") -> "LogLevel":
        """
        Resolve a level from a LogLevel, an ordinal or a name.

        Names are matched case-insensitively against the full level name,
        the three-letter tag and a few common aliases ("info", "warn").

        Raises:
            ValidationError: If the value does not name a level.
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ValidationError(
                    f"Unknown log level ordinal: {value}", parameter="level"
                ) from None
        key = str(value).strip().upper()
        level = _LEVEL_LOOKUP.get(key)
        if level is None:
            raise ValidationError(f"Unknown log level: {value!r}", parameter="level")
        return level


LEVEL_TAGS = {
    LogLevel.VERBOSE: "VRB",
    LogLevel.DEBUG: "DBG",
    LogLevel.INFORMATION: "INF",
    LogLevel.WARNING: "WRN",
    LogLevel.ERROR: "ERR",
    LogLevel.CRITICAL: "CRT",
}

_LEVEL_LOOKUP = {level.name: level for level in LogLevel}
_LEVEL_LOOKUP.update({tag: level for level, tag in LEVEL_TAGS.items()})
_LEVEL_LOOKUP.update({
    "INFO": LogLevel.INFORMATION,
    "WARN": LogLevel.WARNING,
    "FATAL": LogLevel.CRITICAL,
})


@dataclass(frozen=True)
class SinkRoute:
    """Which sinks an event should reach."""

    console: bool
    file: bool

    @property
    def any(self) -> bool:
        return self.console or self.file


def route(level: LogLevel, console_min: LogLevel, file_min: LogLevel) -> SinkRoute:
    """
    Decide which sinks should render an event at ``level``.

    Args:
        level: Severity of the event.
        console_min: Minimum level the console sink accepts.
        file_min: Minimum level the file sink accepts.

    Returns:
        SinkRoute with one flag per sink.
    """
    return SinkRoute(console=level >= console_min, file=level >= file_min)
