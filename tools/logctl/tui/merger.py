"""
Time-ordered merging of lines from several per-process log files.

Each process of an app writes its own file and the tailer reads those files
one after another, so a line stamped 12:00:01 in one file can be read after
a line stamped 12:00:02 in another. The EventMerger holds entries for a
short settle window and releases them in timestamp order.
"""

import heapq
import time
from typing import List, Optional


class EventMerger:
    """
    Reorders log entries by their line timestamp.

    An entry leaves the merger once it is the oldest entry held and it has
    been held for ``settle`` seconds. Above ``max_buffer`` held entries the
    oldest are released whatever their age.

    Example:
        >>> merger = EventMerger(settle=0.25)
        >>> for entry in tail.poll():
        ...     merger.ingest(entry)
        >>> for entry in merger.drain():
        ...     print(entry.message)
    """

    def __init__(self, max_buffer: int = 500, settle: float = 0.25):
        self.max_buffer = max_buffer
        self.settle = settle
        self._heap = []
        self._count = 0

    def __len__(self) -> int:
        return len(self._heap)

    def ingest(self, entry) -> None:
        """Hold an entry until it can be released in order."""
        # pid and seq keep one file's lines in write order when stamps tie;
        # the counter keeps heapq from ever comparing entries
        self._count += 1
        key = (entry.timestamp or "", entry.pid, entry.seq, self._count)
        heapq.heappush(self._heap, (key, entry))

    def drain(self, now: Optional[float] = None) -> List:
        """
        Release the entries that are ready, oldest timestamp first.

        Args:
            now: Monotonic clock reading; defaults to time.monotonic().
        """
        now = time.monotonic() if now is None else now
        out = []
        while self._heap:
            _key, entry = self._heap[0]
            overflow = len(self._heap) > self.max_buffer
            settled = entry.arrival_time <= now - self.settle
            if not (overflow or settled):
                break
            out.append(heapq.heappop(self._heap)[1])
        return out

    def flush(self) -> List:
        """Release everything still held, in order."""
        out = [entry for _key, entry in sorted(self._heap)]
        self._heap.clear()
        return out
