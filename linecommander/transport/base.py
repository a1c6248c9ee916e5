from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class Transport(ABC):
    """
    Abstract duplex byte stream (UART, TCP, ...).

    Contract:
      - open()/close() manage the underlying connection. close() is idempotent.
      - read(n, timeout) returns 1..n bytes, or b"" when nothing arrived within
        `timeout` seconds (0 = poll, None = transport default). It raises
        TransportEOFError once the peer has closed the stream.
      - write(data) returns the number of bytes written.
      - flush() forces pending output to be transmitted.
    """

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def read(self, n: int, timeout: Optional[float] = None) -> bytes: ...

    @abstractmethod
    def write(self, data: bytes) -> int: ...

    @abstractmethod
    def flush(self) -> None: ...

    def describe(self) -> str:
        return type(self).__name__

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
