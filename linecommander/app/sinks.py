# linecommander/app/sinks.py
from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from linecommander.interfaces.output_sink import OutputSink


class StreamOutput(OutputSink):
    """Device lines to `out` (stdout), diagnostics to `err` (stderr)."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self._out = out
        self._err = err
        self._lock = threading.Lock()

    def line(self, text: str) -> None:
        self._emit(self._out or sys.stdout, text)

    def error(self, text: str) -> None:
        self._emit(self._err or sys.stderr, text)

    def _emit(self, stream: TextIO, text: str) -> None:
        # listen mode may print from a worker thread
        with self._lock:
            stream.write(text + "\n")
            stream.flush()


class ListOutput(OutputSink):
    """Keeps output in memory, e.g. to inspect what a loop printed."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.errors: list[str] = []

    def line(self, text: str) -> None:
        self.lines.append(text)

    def error(self, text: str) -> None:
        self.errors.append(text)
