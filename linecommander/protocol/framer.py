# linecommander/protocol/framer.py
"""
Line framing on top of a duplex byte stream.

Outgoing text is wrapped with a FrameTemplate; incoming bytes are buffered and
split into lines at b"\\n" (a trailing b"\\r" is dropped). A line is handed out
only once its terminator, or the end of the stream, has been seen.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from string import Formatter
from typing import Optional

from linecommander.core.errors import DeviceIOError, SessionClosedError
from linecommander.transport.base import Transport
from linecommander.transport.errors import TransportEOFError, TransportError


class FrameTemplate:
    """
    Pattern with exactly one positional placeholder, e.g. "{0}\\r\\n".
    """

    def __init__(self, pattern: str):
        fields = [name for _, name, _, _ in Formatter().parse(pattern) if name is not None]
        if fields not in (["0"], [""]):
            raise ValueError(f"frame template {pattern!r} must contain exactly one '{{0}}' placeholder")
        self.pattern = pattern

    @classmethod
    def with_terminator(cls, terminator: str) -> "FrameTemplate":
        escaped = terminator.replace("{", "{{").replace("}", "}}")
        return cls("{0}" + escaped)

    def render(self, text: str) -> str:
        return self.pattern.format(text)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FrameTemplate) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"FrameTemplate({self.pattern!r})"


class ReadStatus(str, Enum):
    LINE = "line"
    NO_DATA = "no_data"
    TIMEOUT = "timeout"
    END_OF_STREAM = "end_of_stream"


@dataclass(frozen=True)
class LineRead:
    status: ReadStatus
    text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ReadStatus.LINE


NO_DATA = LineRead(ReadStatus.NO_DATA)
TIMEOUT = LineRead(ReadStatus.TIMEOUT)
END_OF_STREAM = LineRead(ReadStatus.END_OF_STREAM)


class LineFramer:
    """
    Line-oriented channel over a Transport.

    The framer borrows the transport; opening and closing it is the owner's
    job. close() only marks the framer closed so that a read blocked in
    another thread gives up after at most one poll slice.
    """

    def __init__(
        self,
        transport: Transport,
        template: FrameTemplate,
        *,
        uppercase: bool = False,
        encoding: str = "utf-8",
        poll_interval_s: float = 0.05,
        read_size: int = 4096,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.template = template
        self.uppercase = bool(uppercase)
        self.encoding = encoding
        self.poll_interval_s = float(poll_interval_s)
        self.read_size = int(read_size)

        self._log = logger or logging.getLogger(__name__)
        self._buf = bytearray()
        self._eof = False
        self._closed = threading.Event()

    # ---------------- state ----------------
    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def at_eof(self) -> bool:
        return self._eof

    def close(self) -> None:
        self._closed.set()

    def _ensure_open(self) -> None:
        if self._closed.is_set():
            raise SessionClosedError("Session is closed.")

    # ---------------- TX ----------------
    def frame(self, text: str) -> bytes:
        if self.uppercase:
            text = text.upper()
        return self.template.render(text).encode(self.encoding)

    def send(self, text: str) -> int:
        self._ensure_open()
        raw = self.frame(text)
        try:
            self.transport.write(raw)
            self.transport.flush()
        except TransportError as e:
            if self._closed.is_set():
                raise SessionClosedError("Session closed while sending.") from None
            self._log.warning("SEND_FAILED len=%d err=%s", len(raw), e)
            raise DeviceIOError(
                "Could not send command to device.",
                hint=str(e),
                details={"transport": self.transport.describe(), "len": len(raw)},
            ) from None

        self._log.debug("SEND len=%d raw=%r", len(raw), raw)
        return len(raw)

    # ---------------- RX ----------------
    def has_buffered_line(self) -> bool:
        """True if a complete line can be read without waiting."""
        self._ensure_open()
        if not self._has_line() and not self._eof:
            self._fill(0.0)
        return self._has_line()

    def read_line(self, blocking: bool = True, timeout_s: Optional[float] = None) -> LineRead:
        """
        Return the next complete line.

        Non-blocking: NO_DATA if no line is ready right now.
        Blocking: TIMEOUT if no line completes within `timeout_s`
        (None waits until a line, EOF or close).
        END_OF_STREAM once the peer closed and the buffer is exhausted.
        """
        self._ensure_open()

        line = self._pop_line()
        if line is not None:
            return LineRead(ReadStatus.LINE, line)
        if self._eof:
            return END_OF_STREAM

        if not blocking:
            self._fill(0.0)
            line = self._pop_line()
            if line is not None:
                return LineRead(ReadStatus.LINE, line)
            return END_OF_STREAM if self._eof else NO_DATA

        deadline = None if timeout_s is None else time.monotonic() + max(0.0, float(timeout_s))
        while True:
            if deadline is None:
                slice_s = self.poll_interval_s
            else:
                slice_s = max(0.0, min(self.poll_interval_s, deadline - time.monotonic()))

            self._fill(slice_s)

            line = self._pop_line()
            if line is not None:
                return LineRead(ReadStatus.LINE, line)
            if self._eof:
                return END_OF_STREAM
            if deadline is not None and time.monotonic() >= deadline:
                return TIMEOUT

    # ---------------- buffer ----------------
    def _fill(self, timeout_s: float) -> None:
        self._ensure_open()
        try:
            data = self.transport.read(self.read_size, timeout_s)
        except TransportEOFError:
            self._log.info("RX_EOF transport=%s buffered=%d", self.transport.describe(), len(self._buf))
            self._eof = True
            return
        except TransportError as e:
            if self._closed.is_set():
                raise SessionClosedError("Session closed while reading.") from None
            self._log.warning("RX_FAILED err=%s", e)
            raise DeviceIOError(
                "Could not read from device.",
                hint=str(e),
                details={"transport": self.transport.describe()},
            ) from None

        if data:
            self._buf.extend(data)
        self._ensure_open()

    def _has_line(self) -> bool:
        return b"\n" in self._buf or (self._eof and len(self._buf) > 0)

    def _pop_line(self) -> Optional[str]:
        idx = self._buf.find(b"\n")
        if idx >= 0:
            raw = bytes(self._buf[:idx])
            del self._buf[: idx + 1]
        elif self._eof and self._buf:
            # trailing partial text at EOF is the final line
            raw = bytes(self._buf)
            self._buf.clear()
        else:
            return None

        if raw.endswith(b"\r"):
            raw = raw[:-1]
        text = raw.decode(self.encoding, errors="replace")
        self._log.debug("RX_LINE %r", text)
        return text
