"""Thread-safe newline-delimited JSON output."""

import sys
import threading
from typing import BinaryIO, Optional


class OutputSink:
    """
    Append-only line sink shared by all shard workers.

    Each line is encoded and written with a single write while holding the
    lock, so lines from different workers never interleave. Once halted the
    sink refuses further lines.
    """

    def __init__(self, stream: Optional[BinaryIO] = None, flush: bool = True):
        """
        Initialize the output sink.

        Args:
            stream: Binary stream to append to (defaults to stdout)
            flush: Flush the stream after every line
        """
        self.stream = stream if stream is not None else sys.stdout.buffer
        self.flush = flush
        self.lines_written = 0
        self.bytes_written = 0
        self._halted = False
        self._lock = threading.Lock()

    @property
    def halted(self) -> bool:
        return self._halted

    def halt(self) -> None:
        """Stop accepting lines."""
        with self._lock:
            self._halted = True

    def write_line(self, line: str) -> int:
        """
        Append one complete line.

        Args:
            line: Rendered JSON document ending in a newline

        Returns:
            Number of bytes written, 0 if the sink is halted
        """
        data = line.encode("utf-8")
        with self._lock:
            if self._halted:
                return 0
            self.stream.write(data)
            if self.flush:
                self.stream.flush()
            self.lines_written += 1
            self.bytes_written += len(data)
        return len(data)
