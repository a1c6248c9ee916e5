# linecommander/runtime/session.py
from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from linecommander.app.config import CommanderConfig
from linecommander.core.errors import (
    CommanderError,
    DeviceConnectError,
    SessionClosedError,
    UnknownHostError,
)
from linecommander.interfaces.command_sink import CommandEvent, CommandSink
from linecommander.interfaces.input_source import InputSource
from linecommander.interfaces.output_sink import OutputSink
from linecommander.runtime.loop import InteractiveLoop
from linecommander.runtime.state import ExitReason
from linecommander.protocol import (
    CollectionPolicy,
    LineFramer,
    ReadStatus,
    Response,
    ResponseCollector,
)
from linecommander.transport.base import Transport
from linecommander.transport.errors import TransportError, TransportUnknownHostError


PAUSE_SLICE_S = 3600.0


class CommanderSession:
    """
    One conversation with one line-oriented device.

    Responsibilities:
      - open/close the transport it owns (close is idempotent and thread-safe)
      - send a command and collect its answer under the configured policy
      - drive the interactive loop or the listen-only loop
      - translate transport failures into operator-safe errors
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[CommanderConfig] = None,
        *,
        cmd_sink: Optional[CommandSink] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.config = config or CommanderConfig()
        self._cmd_sink = cmd_sink
        self._log = logger or logging.getLogger(__name__)

        self.framer = LineFramer(
            transport,
            self.config.frame_template(),
            uppercase=self.config.uppercase,
            encoding=self.config.encoding,
            poll_interval_s=self.config.poll_interval_s,
            logger=self._log,
        )
        self.collector = ResponseCollector(self.framer, logger=self._log)
        self.policy: CollectionPolicy = self.config.collection_policy()

        self._opened = False
        self._closed = threading.Event()
        self._close_lock = threading.Lock()
        self._seq = 0
        self._sent_at: Optional[float] = None

    # ---------------- lifecycle ----------------
    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed.is_set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def open(self) -> None:
        if self._closed.is_set():
            raise SessionClosedError("Session is closed and cannot be reopened.")
        if self._opened:
            return

        try:
            self.transport.open()
        except TransportUnknownHostError as e:
            self._log.error("TRANSPORT_UNKNOWN_HOST transport=%s", self.transport.describe())
            raise UnknownHostError(
                "Unknown host.",
                hint=str(e),
                details={"transport": self.transport.describe()},
            ) from None
        except TransportError as e:
            self._log.exception("TRANSPORT_OPEN_FAILED")
            raise DeviceConnectError(
                "Could not open device transport.",
                hint=str(e),
                details={"driver": type(self.transport).__name__},
            ) from None

        self._opened = True
        self._log.info("SESSION_OPEN transport=%s", self.transport.describe())

    def close(self) -> None:
        """Release the transport. Safe to call twice and from another thread."""
        with self._close_lock:
            if self._closed.is_set():
                return
            self._closed.set()

        self.framer.close()
        try:
            self.transport.close()
        except Exception:
            self._log.exception("Failed to close transport")
        self._log.info("SESSION_CLOSED")

    def __enter__(self) -> "CommanderSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> None:
        if self._closed.is_set():
            raise SessionClosedError("Session is closed.")
        if not self._opened:
            raise SessionClosedError("Session is not open.", hint="Call open() or use the session as a context manager.")

    # ---------------- exchange ----------------
    def send(self, text: str) -> None:
        """Frame and write one command."""
        self._require_open()
        self._seq += 1
        self._sent_at = time.perf_counter()
        self._trace("SEND", "send", {"text": text}, str(self._seq))
        try:
            self.framer.send(text)
        except CommanderError as e:
            self._trace("SEND", "error", {"code": e.code, "error": e.message}, str(self._seq))
            raise

    def collect(self, policy: Optional[CollectionPolicy] = None) -> Response:
        """Gather the answer to the last send() under `policy` (default: configured)."""
        self._require_open()
        request_id = str(self._seq) if self._seq else None
        try:
            response = self.collector.collect(policy or self.policy)
        except CommanderError as e:
            self._trace("SEND", "error", {"code": e.code, "error": e.message}, request_id)
            raise

        payload: dict = {"lines": list(response.lines)}
        if self._sent_at is not None:
            payload["rtt_ms"] = round((time.perf_counter() - self._sent_at) * 1000.0, 3)
            self._sent_at = None
        self._trace("SEND", response.outcome.value, payload, request_id)

        if response.end_of_stream:
            self._log.warning("DEVICE_EOF lines=%d", len(response.lines))
        return response

    def send_once(self, text: str, policy: Optional[CollectionPolicy] = None) -> Response:
        """Send one command and return its collected answer."""
        self.send(text)
        return self.collect(policy)

    # ---------------- unsolicited output ----------------
    @property
    def at_eof(self) -> bool:
        """The peer closed the stream and every line it sent has been taken."""
        return self.framer.at_eof and not self.framer.has_buffered_line()

    def has_pending(self) -> bool:
        self._require_open()
        return self.framer.has_buffered_line()

    def drain_pending(self) -> list[str]:
        """Take every line the device pushed on its own, without waiting."""
        self._require_open()
        lines: list[str] = []
        while self.framer.has_buffered_line():
            read = self.framer.read_line(blocking=False)
            if not read.ok:
                break
            lines.append(read.text or "")
        if lines:
            self._trace("UNSOLICITED", "recv", {"lines": list(lines)})
        return lines

    def pause(self, seconds: float) -> None:
        """Suspend the caller; close() cuts the pause short."""
        self._require_open()
        deadline = time.monotonic() + seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            # Event.wait overflows on very long timeouts
            if self._closed.wait(min(remaining, PAUSE_SLICE_S)):
                raise SessionClosedError("Session closed while sleeping.")

    # ---------------- loops ----------------
    def run_interactive(self, input_source: InputSource, output: OutputSink) -> ExitReason:
        """Run the read-send-print loop until it terminates; returns the ExitReason."""
        self._require_open()
        return InteractiveLoop(self, input_source, output, logger=self._log).run()

    def run_listen_only(self, output: OutputSink) -> None:
        """Print everything the device sends until closed or the peer hangs up."""
        self._require_open()
        self._log.info("LISTEN_START transport=%s", self.transport.describe())
        try:
            while True:
                read = self.framer.read_line(blocking=True, timeout_s=None)
                if read.status is ReadStatus.END_OF_STREAM:
                    output.error("Connection closed by device.")
                    break
                if read.ok:
                    output.line(read.text or "")
        except SessionClosedError:
            pass
        self._log.info("LISTEN_STOP")

    # ---------------- tracing ----------------
    def trace(self, name: str, kind: str, payload: Optional[dict] = None) -> None:
        self._trace(name, kind, payload)

    def _trace(self, name: str, kind: str, payload: Optional[dict], request_id: Optional[str] = None) -> None:
        if self._cmd_sink is None:
            return
        try:
            self._cmd_sink.on_command(CommandEvent(name=name, kind=kind, payload=payload, request_id=request_id))
        except Exception:
            self._log.exception("TRACE_SINK_ERROR")
