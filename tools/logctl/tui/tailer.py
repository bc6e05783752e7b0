"""
Real-time tailing of an app's log files.

Every process writing logs for an app on a given day has its own file
(``<yyyy-MM-dd>_<pid>.log``). The TailManager finds these files as they
appear and polls each one for new lines, parsing them back into LogEntry
objects.

Design Decisions:
    - Polling rather than inotify, so it behaves the same on every OS
    - Handles truncation by restarting from the top of the file
    - Buffers partial lines until their newline has been written
    - Picks up files from processes that start after the viewer
"""

import datetime
import re
import time
from pathlib import Path
from queue import Full, Queue
from typing import Dict, List, Optional

from ..errors import ValidationError
from ..levels import LogLevel
from ..utils.logfile import app_log_dir
from .model import LogEntry

# [yyyy-MM-dd HH:mm:ss:ff][LVL caller] message
LINE_PATTERN = re.compile(
    r"^\[(?P<ts>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}:\d{2})\]"
    r"\[(?P<level>[A-Z]{3}) (?P<caller>[^\]]*)\] "
    r"(?P<msg>.*)$"
)


def parse_line(line: str) -> Optional[dict]:
    """
    Split a log line into its fields.

    Returns:
        Dict with ts, level, caller and msg, or None if the line does not
        follow the log layout.
    """
    match = LINE_PATTERN.match(line)
    if not match:
        return None
    fields = match.groupdict()
    try:
        fields["level"] = LogLevel.parse(fields["level"])
    except ValidationError:
        fields["level"] = None
    return fields


def pid_from_path(path: Path) -> Optional[int]:
    """Extract the pid from ``<yyyy-MM-dd>_<pid>.log``."""
    _, _, pid = path.stem.partition("_")
    return int(pid) if pid.isdigit() else None


class FileTail:
    """
    Tail a single log file and emit LogEntry objects for new lines.

    Attributes:
        path: Path to the log file being tailed.
        app: App name to tag entries with.
        pid: Process id that owns the file.
        offset: Current read position in the file.
        partial: Incomplete trailing line from the last read.
        seq: Sequence counter for stable entry ordering.
    """

    def __init__(self, path: Path, app: str, pid: int):
        self.path = path
        self.app = app
        self.pid = pid
        self.offset = 0
        self.partial = ""
        self.seq = 0

    def _read_new_lines(self) -> List[str]:
        """Read new complete lines from the file since last poll."""
        if not self.path.exists():
            return []

        size = self.path.stat().st_size

        # Truncated or replaced: start over
        if size < self.offset:
            self.offset = 0
            self.partial = ""

        if size == self.offset:
            return []

        with self.path.open("rb") as f:
            f.seek(self.offset)
            data = f.read()
        # The file may have grown since stat(); advance by what was read
        self.offset += len(data)

        text = self.partial + data.decode("utf-8", errors="replace")
        lines = text.splitlines(keepends=False)

        # The last line is incomplete until its newline arrives
        if not text.endswith("\n"):
            self.partial = lines.pop() if lines else ""
        else:
            self.partial = ""

        return lines

    def poll(self) -> List[LogEntry]:
        """
        Read new log entries from the file since the last poll.

        Lines that do not follow the log layout are skipped.
        """
        entries = []
        for line in self._read_new_lines():
            fields = parse_line(line)
            if fields is None:
                continue

            self.seq += 1
            entries.append(LogEntry(
                app=self.app,
                pid=self.pid,
                timestamp=fields["ts"],
                level=fields["level"],
                caller=fields["caller"],
                message=fields["msg"],
                raw=line,
                arrival_time=time.monotonic(),
                seq=self.seq,
            ))

        return entries


class TailManager:
    """
    Manage the file tails for one app and one day.

    Attributes:
        app: The app being monitored.
        out_queue: Queue that receives LogEntry objects.
        tails: Map from pid to FileTail.
        app_dir: The app's log directory.
        day: Day whose files are followed.
    """

    def __init__(
        self,
        app: str,
        out_queue: Queue,
        root: Optional[Path] = None,
        day: Optional[datetime.date] = None,
    ):
        self.app = app
        self.out_queue = out_queue
        self.tails: Dict[int, FileTail] = {}
        self.app_dir = app_log_dir(app, root)
        self.day = day if day is not None else datetime.date.today()
        # Number of entries dropped because the queue was full
        self.dropped = 0

    def discover(self) -> None:
        """Start tailing any new per-process files for the day."""
        if not self.app_dir.exists():
            return
        for path in sorted(self.app_dir.glob(f"{self.day:%Y-%m-%d}_*.log")):
            pid = pid_from_path(path)
            if pid is None or pid in self.tails:
                continue
            self.tails[pid] = FileTail(path, self.app, pid)

    def tick(self) -> None:
        """
        Discover new files and push new entries to the output queue.

        Should be called periodically from a background thread. Entries
        are dropped rather than blocking when the queue is full.
        """
        self.discover()
        for tail in self.tails.values():
            for entry in tail.poll():
                try:
                    self.out_queue.put_nowait(entry)
                except Full:
                    self.dropped += 1
