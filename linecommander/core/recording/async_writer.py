# linecommander/core/recording/async_writer.py
from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from queue import Queue, Empty
from typing import List, Optional


class AsyncWriter:
    """
    Threaded, batched text-line appender.

    write() only queues; a daemon thread appends the queued lines to `path`
    every `flush_interval` seconds (and once more on close()), so the
    interactive loop never blocks on disk I/O.
    """

    def __init__(
        self,
        path: Path,
        flush_interval: float = 0.5,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._path = Path(path)
        self._flush_interval = float(flush_interval)
        self._log = logger or logging.getLogger(__name__)

        self._queue: Queue[str] = Queue()
        self._stop_event = threading.Event()
        self._lines_written = 0

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._thread = threading.Thread(target=self._worker, name="trace-writer", daemon=True)
        self._thread.start()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lines_written(self) -> int:
        return self._lines_written

    def write(self, line: str) -> None:
        """Queue a line (no-op after close())."""
        if self._stop_event.is_set():
            return
        self._queue.put(line)

    def close(self) -> None:
        """Flush what is queued and stop the worker. Idempotent."""
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        self._thread.join()

    def _worker(self) -> None:
        batch: List[str] = []
        last_flush = time.monotonic()

        while not self._stop_event.is_set() or not self._queue.empty():
            try:
                batch.append(self._queue.get(timeout=0.1))
            except Empty:
                pass

            now = time.monotonic()
            if batch and (now - last_flush >= self._flush_interval or self._stop_event.is_set()):
                self._append(batch)
                batch = []
                last_flush = now

        if batch:
            self._append(batch)

    def _append(self, batch: List[str]) -> None:
        # a failing disk must not kill the worker thread
        try:
            with open(self._path, "a", encoding="utf-8") as f:
                for line in batch:
                    f.write(line + "\n")
            self._lines_written += len(batch)
        except OSError:
            self._log.exception("ASYNC_WRITER_FLUSH_FAILED path=%s batch_len=%d", self._path, len(batch))
