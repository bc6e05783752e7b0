"""
logctl - structured console/file logging and isolated script execution.

This package provides a leveled logging engine for automation scripts and
a harness that runs script payloads in a fresh, state-free interpreter.

Purpose:
    Automation that installs, bumps and cleans up modules runs for a long
    time and prints a lot. logctl keeps that output readable: each line is
    filtered by level, colored by severity and by value type, optionally
    redrawn in place for progress updates, and copied to a daily
    per-process log file. The isolated executor runs helper payloads
    without profile or module state leaking in from the calling session.

Package Structure:
    - logger.py: write_log() and the Logger convenience wrapper
    - levels.py, template.py, values.py: routing, binding, value kinds
    - console.py: console rendering and in-place redraw
    - event.py: LogEvent and its JSON form
    - executor.py: isolated script execution
    - config.py: SinkConfig and environment defaults
    - utils/: log file paths and the file sink
    - tui/: live log viewer
    - cli.py: command-line interface

Example:
    >>> from logctl import Logger, SinkConfig
    >>> log = Logger(SinkConfig(app_name="ModuleSync"))
    >>> log.info("{greeting}, {user}!", {"greeting": "Hello", "user": "World"})
"""

from .config import SinkConfig
from .errors import (
    InterpreterNotFoundError,
    LogctlError,
    UnsupportedPlatformError,
    ValidationError,
)
from .event import LogEvent
from .executor import Interpreter, ProcessResult, run_isolated, run_isolated_async
from .levels import LogLevel
from .logger import LogContext, Logger, write_log
from .values import ModuleVersion, ValueKind

__all__ = [
    "InterpreterNotFoundError",
    "Interpreter",
    "LogContext",
    "LogEvent",
    "LogLevel",
    "LogctlError",
    "Logger",
    "ModuleVersion",
    "ProcessResult",
    "SinkConfig",
    "UnsupportedPlatformError",
    "ValidationError",
    "ValueKind",
    "run_isolated",
    "run_isolated_async",
    "write_log",
]
