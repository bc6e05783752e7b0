"""
Value kinds for colorizing bound template parameters.

Each bound value is classified into one of a closed set of kinds and each
kind maps to a fixed color. Classification is an explicit isinstance chain
over known types with a DEFAULT arm, so every value gets a color and the
table can be tested exhaustively.
"""

from __future__ import annotations

import datetime
import enum
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from . import colors


class ValueKind(enum.Enum):
    """Closed set of value kinds recognised by the colorizer."""

    TEXT = "text"
    WHOLE_NUMBER = "whole-number"
    REAL_NUMBER = "real-number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    VERSION = "version"
    DEFAULT = "default"


VALUE_COLORS = {
    ValueKind.TEXT: colors.CYAN,
    ValueKind.WHOLE_NUMBER: colors.MAGENTA,
    ValueKind.REAL_NUMBER: colors.MAGENTA,
    ValueKind.BOOLEAN: colors.BLUE,
    ValueKind.TIMESTAMP: colors.YELLOW,
    ValueKind.VERSION: colors.GREEN,
    ValueKind.DEFAULT: colors.GREY,
}


_VERSION_PATTERN = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


@dataclass(frozen=True)
class ModuleVersion:
    """
    A ``major.minor[.build[.revision]]`` module version.

    Missing trailing parts are stored as None and omitted when rendered,
    so "1.2" round-trips as "1.2" rather than "1.2.0.0".
    """

    major: int
    minor: int
    build: Optional[int] = None
    revision: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> "ModuleVersion":
        match = _VERSION_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Not a module version: {text!r}")
        major, minor, build, revision = match.groups()
        return cls(
            int(major),
            int(minor),
            int(build) if build is not None else None,
            int(revision) if revision is not None else None,
        )

    @classmethod
    def is_version(cls, text: str) -> bool:
        return _VERSION_PATTERN.match(text.strip()) is not None

    def __str__(self) -> str:
        parts = [self.major, self.minor, self.build, self.revision]
        return ".".join(str(p) for p in parts if p is not None)


def classify(value: Any) -> ValueKind:
    """
    Return the kind of a bound value.

    bool is tested before int because bool subclasses int.
    """
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.WHOLE_NUMBER
    if isinstance(value, (float, Decimal)):
        return ValueKind.REAL_NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return ValueKind.TIMESTAMP
    if isinstance(value, ModuleVersion):
        return ValueKind.VERSION
    return ValueKind.DEFAULT


def color_for(value: Any) -> str:
    """ANSI code for a bound value."""
    return VALUE_COLORS[classify(value)]


def format_value(value: Any) -> str:
    """Render a bound value as message text. None renders as empty."""
    if value is None:
        return ""
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    return str(value)
