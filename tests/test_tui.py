"""Tests for the log viewer's file tailing, merging and app discovery."""
import datetime
import os
import threading
from queue import Queue

from logctl.config import SinkConfig
from logctl.levels import LogLevel
from logctl.logger import write_log
from logctl.tui.app_index import discover_apps
from logctl.tui.merger import EventMerger
from logctl.tui.model import LogEntry
from logctl.tui.tailer import FileTail, TailManager, parse_line, pid_from_path
from logctl.tui.views import format_entry, poll_forever, visible

LINE = "[2024-01-15 12:03:04:56][WRN sync.py] PSReadLine is at 2.3.4"


def make_entry(timestamp, seq=1, arrival=0.0, level=LogLevel.INFORMATION):
    return LogEntry(
        app="App", pid=100, timestamp=timestamp, level=level, caller="x",
        message=f"m{seq}", raw="", arrival_time=arrival, seq=seq,
    )


class TestParseLine:
    def test_fields(self):
        fields = parse_line(LINE)
        assert fields["ts"] == "2024-01-15 12:03:04:56"
        assert fields["level"] is LogLevel.WARNING
        assert fields["caller"] == "sync.py"
        assert fields["msg"] == "PSReadLine is at 2.3.4"

    def test_unknown_tag(self):
        fields = parse_line("[2024-01-15 12:03:04:56][XYZ a] b")
        assert fields["level"] is None

    def test_not_a_log_line(self):
        assert parse_line("Traceback (most recent call last):") is None

    def test_round_trip_with_logger(self, plain_console, context, log_root, fixed_time):
        write_log("Error", "{n} failed", [3], SinkConfig(app_name="App"),
                  context=context, console=plain_console, timestamp=fixed_time)
        fields = parse_line(plain_console.stream.getvalue().rstrip("\n"))
        assert fields["ts"] == "2024-01-15 12:03:04:56"
        assert fields["level"] is LogLevel.ERROR
        assert fields["caller"] == "tests"
        assert fields["msg"] == "3 failed"


def test_pid_from_path(tmp_path):
    assert pid_from_path(tmp_path / "2024-01-15_4321.log") == 4321
    assert pid_from_path(tmp_path / "notes.log") is None


class GrowingPath:
    """Path whose file gains a line between stat() and the read."""

    def __init__(self, path, extra):
        self._path = path
        self._extra = extra

    def exists(self):
        return self._path.exists()

    def stat(self):
        result = self._path.stat()
        if self._extra:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(self._extra)
            self._extra = None
        return result

    def open(self, mode):
        return self._path.open(mode)


class TestFileTail:
    def test_partial_lines_wait_for_newline(self, tmp_path):
        path = tmp_path / "2024-01-15_1.log"
        path.write_text(LINE + "\n" + LINE[:20], encoding="utf-8")
        tail = FileTail(path, "App", 1)

        entries = tail.poll()
        assert [e.message for e in entries] == ["PSReadLine is at 2.3.4"]

        with path.open("a", encoding="utf-8") as f:
            f.write(LINE[20:] + "\n")
        entries = tail.poll()
        assert len(entries) == 1
        assert entries[0].raw == LINE
        assert entries[0].seq == 2

    def test_truncation_restarts(self, tmp_path):
        path = tmp_path / "2024-01-15_1.log"
        path.write_text(LINE + "\n" + LINE + "\n", encoding="utf-8")
        tail = FileTail(path, "App", 1)
        assert len(tail.poll()) == 2

        path.write_text(LINE + "\n", encoding="utf-8")
        assert len(tail.poll()) == 1

    def test_missing_file(self, tmp_path):
        assert FileTail(tmp_path / "gone.log", "App", 1).poll() == []

    def test_growth_after_stat_is_not_read_twice(self, tmp_path):
        path = tmp_path / "2024-01-15_1.log"
        path.write_text(LINE + "\n", encoding="utf-8")
        tail = FileTail(GrowingPath(path, LINE + "\n"), "App", 1)
        assert len(tail.poll()) == 2
        assert tail.poll() == []
        assert tail.offset == path.stat().st_size

    def test_skips_foreign_lines(self, tmp_path):
        path = tmp_path / "2024-01-15_1.log"
        path.write_text("garbage\n" + LINE + "\n", encoding="utf-8")
        assert len(FileTail(path, "App", 1).poll()) == 1


class TestTailManager:
    def test_follows_every_process_file(self, log_root):
        app_dir = log_root / "App"
        app_dir.mkdir(parents=True)
        (app_dir / "2024-01-15_10.log").write_text(LINE + "\n", encoding="utf-8")
        (app_dir / "2024-01-15_20.log").write_text(LINE + "\n" + LINE + "\n", encoding="utf-8")
        (app_dir / "2024-01-14_30.log").write_text(LINE + "\n", encoding="utf-8")

        queue = Queue()
        manager = TailManager("App", queue, day=datetime.date(2024, 1, 15))
        manager.tick()
        assert sorted(manager.tails) == [10, 20]
        assert queue.qsize() == 3

        # A process that starts later is picked up on the next tick
        (app_dir / "2024-01-15_40.log").write_text(LINE + "\n", encoding="utf-8")
        manager.tick()
        assert 40 in manager.tails
        assert queue.qsize() == 4

    def test_full_queue_drops(self, log_root):
        app_dir = log_root / "App"
        app_dir.mkdir(parents=True)
        (app_dir / "2024-01-15_10.log").write_text((LINE + "\n") * 3, encoding="utf-8")
        manager = TailManager("App", Queue(maxsize=1), day=datetime.date(2024, 1, 15))
        manager.tick()
        assert manager.dropped == 2

    def test_missing_app_dir(self, log_root):
        manager = TailManager("Nobody", Queue())
        manager.tick()
        assert manager.tails == {}


class TestEventMerger:
    def test_orders_by_timestamp(self):
        merger = EventMerger()
        merger.ingest(make_entry("2024-01-15 12:00:02:00", seq=1))
        merger.ingest(make_entry("2024-01-15 12:00:00:00", seq=2))
        merger.ingest(make_entry("2024-01-15 12:00:01:00", seq=3))
        assert [e.seq for e in merger.drain(now=10.0)] == [2, 3, 1]
        assert merger.drain(now=10.0) == []
        assert len(merger) == 0

    def test_holds_until_settled(self):
        merger = EventMerger(settle=1.0)
        merger.ingest(make_entry("2024-01-15 12:00:00:00", arrival=5.0))
        assert merger.drain(now=5.5) == []
        assert len(merger.drain(now=6.5)) == 1

    def test_late_earlier_line_goes_first(self):
        merger = EventMerger(settle=1.0)
        merger.ingest(make_entry("2024-01-15 12:00:02:00", seq=1, arrival=0.0))
        merger.ingest(make_entry("2024-01-15 12:00:01:00", seq=2, arrival=0.5))
        # The earlier-stamped line is at the head and not yet settled
        assert merger.drain(now=1.2) == []
        assert [e.seq for e in merger.drain(now=2.0)] == [2, 1]

    def test_buffer_limit_forces_release(self):
        merger = EventMerger(max_buffer=1, settle=3600)
        merger.ingest(make_entry("2024-01-15 12:00:01:00", seq=1))
        merger.ingest(make_entry("2024-01-15 12:00:00:00", seq=2))
        assert [e.seq for e in merger.drain(now=0.0)] == [2]
        assert len(merger) == 1

    def test_flush(self):
        merger = EventMerger(settle=3600)
        merger.ingest(make_entry("2024-01-15 12:00:01:00", seq=1))
        merger.ingest(make_entry("2024-01-15 12:00:00:00", seq=2))
        assert [e.seq for e in merger.flush()] == [2, 1]
        assert len(merger) == 0


class TestViews:
    def test_format_entry(self):
        line = format_entry(make_entry("2024-01-15 12:00:00:00", level=LogLevel.WARNING))
        assert line.startswith("2024-01-15 12:00:00:00     100 WRN x")
        assert line.endswith("m1")

    def test_visible(self):
        assert visible(make_entry("t", level=LogLevel.ERROR), LogLevel.WARNING)
        assert not visible(make_entry("t", level=LogLevel.DEBUG), LogLevel.WARNING)
        assert visible(make_entry("t", level=None), LogLevel.CRITICAL)


class TestDiscoverApps:
    def test_empty_root(self, log_root):
        assert discover_apps() == []

    def test_summaries(self, log_root):
        for app, names in {"Old": ["2024-01-14_1.log"],
                           "New": ["2024-01-15_1.log", "2024-01-15_2.log", "2024-01-16_2.log"]}.items():
            (log_root / app).mkdir(parents=True)
            for name in names:
                (log_root / app / name).write_text(LINE + "\n", encoding="utf-8")
        (log_root / "Empty").mkdir()
        os.utime(log_root / "Old" / "2024-01-14_1.log", (1_000_000, 1_000_000))

        apps = discover_apps()
        assert [a["app"] for a in apps] == ["New", "Old"]
        assert apps[0]["files"] == 3
        assert apps[0]["processes"] == 2


class FlakyTailer:
    """Fails its first tick like a file deleted mid-poll, then stops the loop."""

    def __init__(self, stop):
        self.stop = stop
        self.calls = 0

    def tick(self):
        self.calls += 1
        if self.calls == 1:
            raise FileNotFoundError("2024-01-15_10.log")
        self.stop.set()


def test_poll_forever_survives_vanished_file():
    stop = threading.Event()
    tailer = FlakyTailer(stop)
    poll_forever(tailer, stop, interval=0)
    assert tailer.calls == 2
