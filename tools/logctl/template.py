"""
Message template binding.

A template is text containing ``{name}`` placeholders. Parameters are
supplied either as a mapping (bound by name) or as a positional sequence
(bound in order to the distinct placeholders, first occurrence first).

    >>> bind("{greeting}, {user}!", {"greeting": "Hello", "user": "World"}).message
    'Hello, World!'
    >>> bind("{a}-{b}", ["x", 1]).message
    'x-1'

Positional values must be flat scalars: a nested list or other container is
a programmer error and is rejected before anything is written.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Sequence, Union

from .errors import ValidationError
from .values import format_value

PLACEHOLDER_PATTERN = re.compile(r"\{([\w.\-]+)\}")

Parameters = Union[Mapping[str, Any], Sequence[Any], None]


@dataclass(frozen=True)
class Segment:
    """
    One span of a rendered message.

    Literal spans have ``name`` set to None. Value spans carry the
    placeholder name and the bound value so the console can color them.
    """

    text: str
    name: Optional[str] = None
    value: Any = None

    @property
    def is_value(self) -> bool:
        return self.name is not None


@dataclass(frozen=True)
class BoundTemplate:
    """Result of binding parameters into a template."""

    template: str
    message: str
    parameters: Mapping[str, Any]
    segments: tuple[Segment, ...]


def placeholders(template: str) -> list[str]:
    """Return the unique placeholder names in first-occurrence order."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def _check_flat(values: Sequence[Any]) -> None:
    for position, value in enumerate(values):
        if isinstance(value, Iterable) and not isinstance(value, str):
            raise ValidationError(
                f"Positional parameter {position} is a {type(value).__name__}; "
                "positional parameters must be flat values, not collections",
                parameter=str(position),
            )


def _binding(names: list[str], parameters: Parameters) -> dict[str, Any]:
    if parameters is None:
        return {name: None for name in names}

    if isinstance(parameters, Mapping):
        return {name: parameters.get(name) for name in names}

    if isinstance(parameters, (str, bytes)) or not isinstance(parameters, Iterable):
        raise ValidationError(
            f"Parameters must be a mapping or a sequence, not {type(parameters).__name__}",
            parameter="parameters",
        )

    values = list(parameters)
    _check_flat(values)
    if len(values) < len(names):
        raise ValidationError(
            f"Template has {len(names)} distinct placeholders "
            f"({', '.join(names)}) but only {len(values)} positional "
            "parameters were supplied",
            parameter=names[len(values)],
        )
    return dict(zip(names, values))


def bind(template: str, parameters: Parameters = None) -> BoundTemplate:
    """
    Substitute parameters into a template.

    Args:
        template: Text with ``{name}`` placeholders.
        parameters: Mapping of name to value, positional sequence, or None.

    Returns:
        BoundTemplate with the rendered message, the name to value binding
        (keys in placeholder order) and the literal/value segments.

    Raises:
        ValidationError: Too few positional values, a positional value that
            is itself a collection, or parameters of an unusable type.
    """
    names = placeholders(template)
    bound = _binding(names, parameters)

    segments: list[Segment] = []
    cursor = 0
    for match in PLACEHOLDER_PATTERN.finditer(template):
        if match.start() > cursor:
            segments.append(Segment(template[cursor:match.start()]))
        name = match.group(1)
        value = bound[name]
        segments.append(Segment(format_value(value), name=name, value=value))
        cursor = match.end()
    if cursor < len(template):
        segments.append(Segment(template[cursor:]))

    message = "".join(segment.text for segment in segments)
    return BoundTemplate(
        template=template,
        message=message,
        parameters=MappingProxyType(bound),
        segments=tuple(segments),
    )
