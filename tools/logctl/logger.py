"""
The log call: route, bind, render, write, serialize.

    write_log(level, template, parameters, config)

1. The level is checked against the console and file thresholds. If no sink
   wants the event and no serialized event was requested, nothing else
   happens.
2. Parameters are bound into the template. Binding errors are raised here,
   before any sink is touched.
3. The line is rendered once and handed to the console renderer and the
   file sink, each according to its own threshold.
4. The LogEvent is built and, if requested, returned as JSON.

Redraw state and the caller identity live in a LogContext. Callers that do
not pass one share the process-wide default context.
"""

from __future__ import annotations

import datetime
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence

from .config import SinkConfig
from .console import ConsoleRenderer, RedrawPhase, RedrawState, render_line
from .event import build_event, to_json
from .levels import LogLevel, route
from .template import Parameters, bind
from .utils.logfile import FileSink


def resolve_caller_identity(argv: Optional[Sequence[str]] = None) -> str:
    """
    Identify the invoking script from argv[0].

    ``python -m pkg`` reports the package name; ``python -c`` and the
    interactive interpreter report "interactive".
    """
    argv = sys.argv if argv is None else argv
    script = argv[0] if argv else ""
    if not script or script in ("-c", "-"):
        return "interactive"
    path = Path(script)
    if path.name == "__main__.py":
        return path.parent.name or "interactive"
    return path.name


class LogContext:
    """
    State shared by consecutive log calls.

    Attributes:
        redraw: Rows drawn by the last overwrite-mode console write.
        lock: Serializes sink writes for callers sharing this context.
    """

    def __init__(self, caller: Optional[str] = None) -> None:
        self.redraw = RedrawState()
        self.lock = threading.RLock()
        self._caller = caller

    @property
    def caller(self) -> str:
        """Caller identity, resolved on first use and then fixed."""
        if self._caller is None:
            self._caller = resolve_caller_identity()
        return self._caller


_default_context: Optional[LogContext] = None
_default_context_lock = threading.Lock()


def default_context() -> LogContext:
    """Return the process-wide context, creating it on first use."""
    global _default_context
    with _default_context_lock:
        if _default_context is None:
            _default_context = LogContext()
        return _default_context


def write_log(
    level: "LogLevel | str",
    template: str,
    parameters: Parameters = None,
    config: Optional[SinkConfig] = None,
    *,
    context: Optional[LogContext] = None,
    console: Optional[ConsoleRenderer] = None,
    file_root: Optional[Path] = None,
    timestamp: Optional[datetime.datetime] = None,
) -> Optional[str]:
    """
    Log one event.

    Args:
        level: Event level (LogLevel or level name).
        template: Message template with ``{name}`` placeholders.
        parameters: Mapping bound by name or sequence bound by position.
        config: Sink settings; defaults to SinkConfig().
        context: Redraw/caller state; defaults to the process context.
        console: Console renderer; defaults to a colored stdout renderer.
        file_root: Log root override for the file sink.
        timestamp: Event time; defaults to now.

    Returns:
        The serialized event if ``config.as_json`` is set, otherwise None.

    Raises:
        ValidationError: Bad parameters, level or app name.
        UnsupportedPlatformError: File logging on an unknown OS family.
    """
    level = LogLevel.parse(level)
    config = config if config is not None else SinkConfig()
    routing = route(level, config.console_min_level, config.file_min_level)
    to_console = routing.console
    to_file = routing.file and config.file_enabled

    if not (to_console or to_file or config.as_json):
        return None

    bound = bind(template, parameters)
    sink = FileSink(config.app_name, root=file_root) if to_file else None
    event = build_event(level, bound, timestamp)

    if to_console or sink is not None:
        context = context if context is not None else default_context()
        line = render_line(
            event.timestamp, level, context.caller, bound, config.use_background_color
        )
        with context.lock:
            if to_console:
                renderer = console if console is not None else ConsoleRenderer()
                renderer.write(
                    line,
                    context.redraw,
                    overwrite=config.overwrite,
                    initial_write=config.initial_write,
                )
            if sink is not None:
                sink.write(line.plain, event.timestamp)

    if config.as_json:
        return to_json(event)
    return None


class Logger:
    """
    Convenience wrapper holding a base config, context and renderer.

    Example:
        >>> log = Logger(SinkConfig(app_name="ModuleSync"))
        >>> log.info("Installed {module} {version}", ["PSReadLine", "2.3.4"])
        >>> for i in range(3):
        ...     log.progress("Step {n} of 3", [i + 1])
        >>> log.end_progress()
    """

    def __init__(
        self,
        config: Optional[SinkConfig] = None,
        context: Optional[LogContext] = None,
        console: Optional[ConsoleRenderer] = None,
        file_root: Optional[Path] = None,
    ) -> None:
        self.config = config if config is not None else SinkConfig.from_env()
        self.context = context if context is not None else LogContext()
        self.console = console
        self.file_root = file_root

    def log(
        self,
        level: "LogLevel | str",
        template: str,
        parameters: Parameters = None,
        **overrides,
    ) -> Optional[str]:
        config = self.config.replace(**overrides) if overrides else self.config
        return write_log(
            level,
            template,
            parameters,
            config,
            context=self.context,
            console=self.console,
            file_root=self.file_root,
        )

    def verbose(self, template: str, parameters: Parameters = None) -> Optional[str]:
        return self.log(LogLevel.VERBOSE, template, parameters)

    def debug(self, template: str, parameters: Parameters = None) -> Optional[str]:
        return self.log(LogLevel.DEBUG, template, parameters)

    def info(self, template: str, parameters: Parameters = None) -> Optional[str]:
        return self.log(LogLevel.INFORMATION, template, parameters)

    def warning(self, template: str, parameters: Parameters = None) -> Optional[str]:
        return self.log(LogLevel.WARNING, template, parameters)

    def error(self, template: str, parameters: Parameters = None) -> Optional[str]:
        return self.log(LogLevel.ERROR, template, parameters)

    def critical(self, template: str, parameters: Parameters = None) -> Optional[str]:
        return self.log(LogLevel.CRITICAL, template, parameters)

    def progress(
        self,
        template: str,
        parameters: Parameters = None,
        level: "LogLevel | str" = LogLevel.INFORMATION,
    ) -> Optional[str]:
        """
        Log a line that replaces the previous progress line.

        The first call of a sequence is an initial write; later calls
        overwrite. Call end_progress() to start appending again.
        """
        initial = self.context.redraw.phase is RedrawPhase.FRESH
        return self.log(level, template, parameters, overwrite=True, initial_write=initial)

    def end_progress(self) -> None:
        with self.context.lock:
            self.context.redraw.reset()
