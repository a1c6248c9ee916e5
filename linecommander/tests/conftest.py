from __future__ import annotations

import threading
import time
from typing import Optional

import pytest

from linecommander.transport.base import Transport
from linecommander.transport.errors import TransportEOFError


class FakeTransport(Transport):
    """
    Scripted duplex stream.

    `chunks` is consumed one item per read(): bytes are returned as-is,
    an exception instance is raised, None is "nothing arrived" (the read
    sleeps for its timeout). When the script runs dry the stream stays
    silent, or hits EOF if `eof_when_empty` is set.

    `replies` maps a written frame to chunks queued after that write, which
    lets a test play a device that answers each command.
    """

    def __init__(self, chunks=None, *, replies=None, eof_when_empty: bool = False, open_error=None):
        self.chunks = list(chunks or [])
        self.replies = dict(replies or {})
        self.eof_when_empty = eof_when_empty
        self.open_error = open_error

        self.writes: list[bytes] = []
        self.open_calls = 0
        self.close_calls = 0
        self.flush_calls = 0
        self.fail_write: Optional[Exception] = None
        self._lock = threading.Lock()

    def open(self) -> None:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error

    def close(self) -> None:
        self.close_calls += 1

    def describe(self) -> str:
        return "fake"

    def read(self, n: int, timeout: Optional[float] = None) -> bytes:
        with self._lock:
            dry = not self.chunks
            item = None if dry else self.chunks.pop(0)

        if isinstance(item, Exception):
            raise item
        if item is None:
            if dry and self.eof_when_empty:
                raise TransportEOFError("peer closed")
            if timeout:
                time.sleep(min(timeout, 0.02))
            return b""
        return item[:n]

    def write(self, data: bytes) -> int:
        if self.fail_write is not None:
            raise self.fail_write
        self.writes.append(data)
        with self._lock:
            self.chunks.extend(self.replies.get(data, []))
        return len(data)

    def flush(self) -> None:
        self.flush_calls += 1

    def push(self, *chunks) -> None:
        with self._lock:
            self.chunks.extend(chunks)


@pytest.fixture
def fake_transport():
    return FakeTransport
