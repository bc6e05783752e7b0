"""
Console rendering with optional in-place redraw.

A rendered line looks like:

    [2024-01-15 12:00:00:42][INF build.py] Installed PSReadLine 2.3.4

The three-letter level tag is colored by severity, each substituted value
is colored by its kind, and literal template text uses a fixed foreground
(and background, when requested).

Redraw:
    With overwrite enabled, the renderer erases the rows used by the line it
    drew last and draws the new line in their place, so a progress message
    updates in place instead of scrolling. The number of rows to erase is
    kept in a RedrawState between calls:

        Fresh --initial write--> AwaitingRedraw --overwrite--> AwaitingRedraw

    The first write of a redraw sequence emits a blank separator line and
    erases nothing. With overwrite disabled the state is left alone and
    every line is appended.
"""

from __future__ import annotations

import datetime
import enum
import logging
import math
import os
import sys
from dataclasses import dataclass
from typing import Callable, Optional, TextIO, Union

from . import colors
from .levels import LogLevel
from .template import BoundTemplate
from .values import color_for

logger = logging.getLogger(__name__)

# Cursor control sequences
CURSOR_UP = "\033[1A"
CLEAR_LINE = "\033[2K"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
ERASE_ROW = CURSOR_UP + "\r" + CLEAR_LINE

# Used whenever the terminal width cannot be probed
FALLBACK_WIDTH = 80


class RedrawPhase(enum.Enum):
    FRESH = "fresh"
    AWAITING_REDRAW = "awaiting-redraw"


@dataclass
class RedrawState:
    """
    Rows used by the most recently drawn line.

    Attributes:
        last_line_count: Terminal rows the previous line occupied.
        phase: FRESH until the first redraw-mode write.
    """

    last_line_count: int = 0
    phase: RedrawPhase = RedrawPhase.FRESH

    def reset(self) -> None:
        self.last_line_count = 0
        self.phase = RedrawPhase.FRESH


@dataclass(frozen=True)
class RenderedLine:
    """A log line in plain and ANSI-colored form."""

    plain: str
    colored: str


def format_timestamp(timestamp: datetime.datetime) -> str:
    """Format as ``yyyy-MM-dd HH:mm:ss:ff`` (ff = hundredths of a second)."""
    return f"{timestamp:%Y-%m-%d %H:%M:%S}:{timestamp.microsecond // 10000:02d}"


def row_count(length: int, width: int) -> int:
    """Rows a line of ``length`` characters takes on a ``width`` terminal."""
    return math.ceil(length / (width - 1))


def render_line(
    timestamp: datetime.datetime,
    level: LogLevel,
    caller: str,
    bound: BoundTemplate,
    use_background_color: bool = False,
) -> RenderedLine:
    """
    Build the plain and colored forms of one log line.

    Args:
        timestamp: Event time.
        level: Event level.
        caller: Caller identity shown next to the level tag.
        bound: Template with parameters already substituted.
        use_background_color: Add the static background to message spans.
    """
    stamp = format_timestamp(timestamp)
    plain = f"[{stamp}][{level.tag} {caller}] {bound.message}"

    background = colors.LITERAL_BACKGROUND if use_background_color else ""
    head = (
        colors.paint(f"[{stamp}]", colors.DIM)
        + "["
        + colors.paint(level.tag, colors.severity_color(level))
        + " "
        + colors.paint(caller, colors.WHITE)
        + "] "
    )
    body = []
    for segment in bound.segments:
        if segment.is_value:
            code = color_for(segment.value)
        else:
            code = colors.LITERAL_FOREGROUND
        body.append(colors.paint(segment.text, code + background))

    return RenderedLine(plain=plain, colored=head + "".join(body))


def probe_width(stream: TextIO) -> int:
    """
    Return the terminal width behind ``stream``, or FALLBACK_WIDTH.

    Streams that are not attached to a terminal (pipes, StringIO) and
    degenerate widths both fall back.
    """
    try:
        width = os.get_terminal_size(stream.fileno()).columns
    except (AttributeError, OSError, ValueError):
        logger.debug("Terminal width unavailable, using %d", FALLBACK_WIDTH)
        return FALLBACK_WIDTH
    if width < 2:
        return FALLBACK_WIDTH
    return width


class ConsoleRenderer:
    """
    Writes rendered lines to a text stream.

    Args:
        stream: Target stream; defaults to the current sys.stdout at write
            time so redirection and test capture keep working.
        width: Fixed terminal width, or a callable returning one. Defaults
            to probing the stream.
        color: Emit ANSI colors. Cursor control is emitted either way.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        width: Union[int, Callable[[], int], None] = None,
        color: bool = True,
    ) -> None:
        self._stream = stream
        self._width = width
        self.color = color

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def terminal_width(self) -> int:
        if self._width is None:
            return probe_width(self.stream)
        width = self._width() if callable(self._width) else self._width
        if width < 2:
            return FALLBACK_WIDTH
        return width

    def write(
        self,
        line: RenderedLine,
        state: RedrawState,
        overwrite: bool = False,
        initial_write: bool = False,
    ) -> None:
        """
        Draw one line.

        Args:
            line: The line to draw.
            state: Redraw state; only read and updated in overwrite mode.
            overwrite: Erase the previously drawn rows before drawing.
            initial_write: Start a new redraw sequence (overwrite mode only).
        """
        stream = self.stream
        text = line.colored if self.color else line.plain

        if not overwrite:
            stream.write(text + "\n")
            stream.flush()
            return

        width = self.terminal_width()
        stream.write(HIDE_CURSOR)
        try:
            if initial_write:
                prefix = "\n"
            elif state.phase is RedrawPhase.AWAITING_REDRAW:
                prefix = ERASE_ROW * state.last_line_count
            else:
                prefix = ""
            stream.write(prefix + text + "\n")
            state.last_line_count = row_count(len(line.plain), width)
            state.phase = RedrawPhase.AWAITING_REDRAW
        finally:
            stream.write(SHOW_CURSOR)
            stream.flush()
