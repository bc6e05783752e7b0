"""
Immutable log events and their JSON form.

Every log call builds one LogEvent, whether or not a sink wrote anything.
The serialized schema is:

    {
      "DateTime": "2024-01-15T12:00:00.421337+01:00",
      "PID": 4242,
      "Level": "Information",
      "Template": "{greeting}, {user}!",
      "Message": "Hello, World!",
      "Parameters": {"greeting": "Hello", "user": "World"}
    }

Nested parameter values are converted down to MAX_DEPTH levels; anything
deeper is replaced by its string form.
"""

from __future__ import annotations

import datetime
import enum
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Optional

from .levels import LogLevel
from .template import BoundTemplate
from .values import ModuleVersion

MAX_DEPTH = 5


@dataclass(frozen=True)
class LogEvent:
    """
    One log call, as recorded.

    Attributes:
        timestamp: Local wall-clock time of the call (timezone-aware).
        process_id: Process that made the call.
        level: Event level.
        template: The unrendered message template.
        message: The rendered message.
        parameters: Read-only placeholder name to value binding.
    """

    timestamp: datetime.datetime
    process_id: int
    level: LogLevel
    template: str
    message: str
    parameters: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def to_dict(self, depth: int = MAX_DEPTH) -> dict[str, Any]:
        return {
            "DateTime": self.timestamp.isoformat(),
            "PID": self.process_id,
            "Level": self.level.display_name,
            "Template": self.template,
            "Message": self.message,
            "Parameters": to_jsonable(self.parameters, depth - 1),
        }


def build_event(
    level: LogLevel,
    bound: BoundTemplate,
    timestamp: Optional[datetime.datetime] = None,
    process_id: Optional[int] = None,
) -> LogEvent:
    """Create the event for a bound template."""
    return LogEvent(
        timestamp=timestamp if timestamp is not None else now(),
        process_id=process_id if process_id is not None else os.getpid(),
        level=level,
        template=bound.template,
        message=bound.message,
        parameters=bound.parameters,
    )


def now() -> datetime.datetime:
    """Current local time, timezone-aware."""
    return datetime.datetime.now().astimezone()


def to_jsonable(value: Any, depth: int = MAX_DEPTH) -> Any:
    """
    Convert a value into something json.dumps accepts.

    Containers are walked until ``depth`` reaches zero; a container at that
    point is replaced by its string form.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (Decimal, ModuleVersion)):
        return str(value)
    if isinstance(value, Mapping):
        if depth <= 0:
            return str(dict(value))
        return {str(k): to_jsonable(v, depth - 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        if depth <= 0:
            return str(value)
        return [to_jsonable(v, depth - 1) for v in value]
    return str(value)


def to_json(event: LogEvent, depth: int = MAX_DEPTH, indent: Optional[int] = None) -> str:
    """Serialize an event using the DateTime/PID/Level/... schema."""
    return json.dumps(event.to_dict(depth), indent=indent, ensure_ascii=False)


def from_json(text: str) -> LogEvent:
    """
    Parse a serialized event.

    Parameter values come back as their JSON representation, so
    timestamps and versions inside Parameters are strings.
    """
    data = json.loads(text)
    return LogEvent(
        timestamp=datetime.datetime.fromisoformat(data["DateTime"]),
        process_id=int(data["PID"]),
        level=LogLevel.parse(data["Level"]),
        template=data["Template"],
        message=data["Message"],
        parameters=data.get("Parameters") or {},
    )
