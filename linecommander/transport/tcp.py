# linecommander/transport/tcp.py
from __future__ import annotations

import socket
from typing import Optional

from .base import Transport
from .errors import TransportEOFError, TransportIOError, TransportOpenError, TransportUnknownHostError


class TCPTransport(Transport):
    """
    TCP (Telnet-style) transport on a plain stream socket.

    The connection is opened once and kept alive (SO_KEEPALIVE) for the
    lifetime of the session. An empty recv() means the peer closed the
    connection and is reported as TransportEOFError.
    """

    def __init__(self, host: str, port: int = 23, timeout: Optional[float] = 2.0, keepalive: bool = True):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.keepalive = keepalive
        self.sock: Optional[socket.socket] = None

    def open(self) -> None:
        if self.sock is not None:
            return
        try:
            self.sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        except socket.gaierror as e:
            self.sock = None
            raise TransportUnknownHostError(f"unknown host {self.host!r}: {e}") from None
        except OSError as e:
            self.sock = None
            raise TransportOpenError(f"could not connect to {self.host}:{self.port}: {e}") from None

        try:
            if self.keepalive:
                self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            # not every platform/socket type supports these options
            pass

    def close(self) -> None:
        if self.sock is not None:
            try:
                self.sock.close()
            finally:
                self.sock = None

    def is_open(self) -> bool:
        return self.sock is not None

    def describe(self) -> str:
        return f"{self.host}:{self.port}"

    def read(self, n: int, timeout: Optional[float] = None) -> bytes:
        sock = self.sock
        if sock is None:
            raise TransportIOError("read while transport not open")

        try:
            sock.settimeout(self.timeout if timeout is None else timeout)
            data = sock.recv(n)
        except (socket.timeout, BlockingIOError):
            return b""
        except OSError as e:
            self._drop(sock)
            raise TransportIOError(f"TCP read failed: {e}") from None

        if not data:
            raise TransportEOFError(f"connection closed by {self.host}:{self.port}")
        return data

    def write(self, data: bytes) -> int:
        sock = self.sock
        if sock is None:
            raise TransportIOError("write while transport not open")

        try:
            sock.settimeout(self.timeout)
            sock.sendall(data)
            return len(data)
        except OSError as e:
            self._drop(sock)
            raise TransportIOError(f"TCP write failed: {e}") from None

    def flush(self) -> None:
        if self.sock is None:
            raise TransportIOError("flush while transport not open")

    def _drop(self, sock: socket.socket) -> None:
        self.sock = None
        try:
            sock.close()
        except OSError:
            pass
