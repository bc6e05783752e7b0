"""
Exception types raised by logctl.

Validation and platform errors are programmer or environment errors: they
abort the current call before any sink is touched and are never retried.
Failures inside a child process started by the isolated executor are not
exceptions at all; they come back as data in ``ProcessResult``.
"""

from __future__ import annotations

from typing import Optional


class LogctlError(Exception):
    """Base class for every error raised by logctl."""


class ValidationError(LogctlError, ValueError):
    """
    A log call was given parameters that do not fit its template.

    Attributes:
        parameter: Name or position of the offending parameter, if known.
    """

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        super().__init__(message)
        self.parameter = parameter


class UnsupportedPlatformError(LogctlError, OSError):
    """The host OS could not be classified into a known family."""

    def __init__(self, platform: str) -> None:
        super().__init__(
            f"Cannot resolve a log directory on unsupported platform: {platform!r}"
        )
        self.platform = platform


class InterpreterNotFoundError(LogctlError, FileNotFoundError):
    """The interpreter requested for isolated execution is not on PATH."""

    def __init__(self, interpreter: str, candidates: tuple[str, ...]) -> None:
        super().__init__(
            f"No {interpreter} interpreter found on PATH "
            f"(tried: {', '.join(candidates)})"
        )
        self.interpreter = interpreter
        self.candidates = candidates
