"""
Daily, per-process log files.

Each process writes to its own file per day:

    <log root>/<AppName>/<yyyy-MM-dd>_<pid>.log

Lines are the plain (uncolored) console layout, UTF-8, one entry per line,
opened in append mode for every write so nothing already in the file is
lost. Processes writing on the same day never share a file, but nothing
stops two processes with the same pid on the same day from interleaving.
"""

from __future__ import annotations

import datetime
import os
from pathlib import Path
from typing import Optional

from ..errors import ValidationError
from .paths import log_root


def validate_app_name(app_name: str) -> str:
    """
    Check that an app name is usable as a single directory name.

    Raises:
        ValidationError: For empty names, "." or "..", or names containing
            a path separator.
    """
    name = app_name.strip()
    if not name or name in (".", ".."):
        raise ValidationError(f"Invalid app name: {app_name!r}", parameter="app_name")
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in name for sep in separators):
        raise ValidationError(
            f"App name must not contain path separators: {app_name!r}",
            parameter="app_name",
        )
    return name


def app_log_dir(app_name: str, root: Optional[Path] = None) -> Path:
    """
    Return the log directory for an app.

    Example:
        >>> app_log_dir("ModuleSync", Path("/tmp/logs"))
        PosixPath('/tmp/logs/ModuleSync')
    """
    base = root if root is not None else log_root()
    return base / validate_app_name(app_name)


def log_file_name(day: datetime.date, pid: int) -> str:
    """File name for one process on one day, e.g. ``2024-01-15_4242.log``."""
    return f"{day:%Y-%m-%d}_{pid}.log"


def log_file_path(
    app_name: str,
    day: Optional[datetime.date] = None,
    pid: Optional[int] = None,
    root: Optional[Path] = None,
) -> Path:
    """
    Resolve the log file for an app, day and process.

    Args:
        app_name: Application name (one directory level).
        day: Day of the file; defaults to today (local time).
        pid: Process id; defaults to the current process.
        root: Log root; defaults to log_root().
    """
    day = day if day is not None else datetime.date.today()
    pid = pid if pid is not None else os.getpid()
    return app_log_dir(app_name, root) / log_file_name(day, pid)


class FileSink:
    """
    Append-only writer for one app's daily log files.

    Attributes:
        app_name: The application whose logs are written.
        root: Log root, resolved when the sink is created.
        pid: Process id used in file names.

    Example:
        >>> sink = FileSink("ModuleSync")
        >>> sink.write("[2024-01-15 12:00:00:00][INF demo] hello", now)
        # Appends to <root>/ModuleSync/2024-01-15_<pid>.log
    """

    def __init__(
        self,
        app_name: str,
        root: Optional[Path] = None,
        pid: Optional[int] = None,
    ) -> None:
        self.app_name = validate_app_name(app_name)
        # Resolving the root here surfaces platform errors before any I/O
        self.root = root if root is not None else log_root()
        self.pid = pid if pid is not None else os.getpid()

    def path_for(self, timestamp: datetime.datetime) -> Path:
        return log_file_path(self.app_name, timestamp.date(), self.pid, self.root)

    def write(self, line: str, timestamp: datetime.datetime) -> Path:
        """
        Append one line to the file for the timestamp's day.

        Creates the directory tree on first use.

        Returns:
            Path of the file written.
        """
        path = self.path_for(timestamp)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        return path
