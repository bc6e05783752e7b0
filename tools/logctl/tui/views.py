"""
Curses-based log viewer.

Shows a live, merged stream of every process's log lines for one app and
day.

Architecture:
    - Background thread: polls log files via TailManager
    - Main thread: merges events and renders via curses
    - Communication: bounded queue between producer and consumer
"""

import curses
import logging
import threading
import time
from collections import deque
from pathlib import Path
from queue import Queue, Empty
from typing import Optional

from ..levels import LogLevel
from .merger import EventMerger
from .tailer import TailManager

logger = logging.getLogger(__name__)


def format_entry(entry) -> str:
    """One display line for a log entry."""
    tag = entry.level.tag if entry.level is not None else "???"
    return f"{entry.timestamp} {entry.pid:>7} {tag} {entry.caller or '':<16} {entry.message or ''}"


def visible(entry, min_level: LogLevel) -> bool:
    """Entries with an unknown level are always shown."""
    return entry.level is None or entry.level >= min_level


def poll_forever(tailer, stop: threading.Event, interval: float = 0.25) -> None:
    """
    Tick the tailer until stop is set.

    Files can vanish between the existence check and the read; such a tick
    is skipped and polling carries on.
    """
    while not stop.is_set():
        try:
            tailer.tick()
        except OSError as e:
            logger.debug("Tail tick failed, retrying: %s", e)
        stop.wait(interval)


def run_log_viewer(
    stdscr,
    app: str,
    min_level: LogLevel = LogLevel.VERBOSE,
    root: Optional[Path] = None,
) -> None:
    """
    Run the interactive log viewer until the user presses q.

    Args:
        stdscr: Curses screen (provided by curses.wrapper).
        app: App whose logs to follow.
        min_level: Hide entries below this level.
        root: Log root override.

    Note:
        Call via curses.wrapper() so the terminal is restored on exit.
    """
    curses.curs_set(0)
    stdscr.nodelay(True)

    stop = threading.Event()
    log_queue: Queue = Queue(maxsize=2000)
    merger = EventMerger()
    visible_lines = deque(maxlen=500)
    tailer = TailManager(app, log_queue, root=root)

    thread = threading.Thread(target=poll_forever, args=(tailer, stop), daemon=True)
    thread.start()

    try:
        while True:
            ch = stdscr.getch()
            # q, Q or Ctrl+C
            if ch in (ord("q"), ord("Q"), 3):
                break

            try:
                while True:
                    merger.ingest(log_queue.get_nowait())
            except Empty:
                pass

            for entry in merger.drain():
                if visible(entry, min_level):
                    visible_lines.append(format_entry(entry))

            stdscr.erase()
            h, w = stdscr.getmaxyx()

            header = (
                f"logctl viewer - {app} ({tailer.day:%Y-%m-%d}, "
                f"{len(tailer.tails)} processes, >= {min_level.display_name})"
            )
            stdscr.addstr(0, 0, header[: w - 1])
            stdscr.addstr(1, 0, "-" * (w - 1))

            # Header takes 2 rows, footer 1
            start = max(0, len(visible_lines) - (h - 3))
            for idx, line in enumerate(list(visible_lines)[start:], start=2):
                if idx >= h - 1:
                    break
                stdscr.addstr(idx, 0, line[: w - 1])

            footer = f"Press q or Ctrl+C to exit | {len(merger)} held, {tailer.dropped} dropped"
            stdscr.addstr(h - 1, 0, footer[: w - 1])
            stdscr.refresh()

            # ~20 FPS
            time.sleep(0.05)
    finally:
        stop.set()
        thread.join(timeout=1.0)
