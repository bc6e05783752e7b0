"""
Data models for the TUI log viewer.

Log lines from the per-process files of one app need a common
representation for merging, filtering and display.
"""

from dataclasses import dataclass
from typing import Optional, Any

from ..levels import LogLevel


@dataclass
class LogEntry:
    """
    A single parsed line from an app's log file.

    Attributes:
        app: The app whose log directory the line came from.
        pid: Process id taken from the log file name.
        timestamp: ``yyyy-MM-dd HH:mm:ss:ff`` stamp from the line.
        level: Parsed level, or None if the tag was not recognised.
        caller: Caller identity recorded on the line.
        message: The rendered message.
        raw: The original line.
        arrival_time: Monotonic time when the line was read.
        seq: Sequence number within its file (for stable sorting).
    """
    app: str
    pid: int
    timestamp: Optional[str]
    level: Optional[LogLevel]
    caller: Optional[str]
    message: Optional[str]
    raw: Any
    arrival_time: float
    seq: int
