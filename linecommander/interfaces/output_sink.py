from __future__ import annotations

from typing import Protocol


class OutputSink(Protocol):
    """Where device lines (line) and operator diagnostics (error) go."""

    def line(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...
