# linecommander/interfaces/command_sink.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol


@dataclass(frozen=True, slots=True)
class CommandEvent:
    """
    One step of a command/response exchange (for tracing/recording).
    Keep this small + stable; put details into payload.
    """
    name: str                   # e.g. "SEND", "DIRECTIVE", "UNSOLICITED"
    kind: str                   # "send" | "complete" | "timeout" | "end_of_stream" | "error" | "recv" | ...
    payload: Optional[Mapping[str, Any]] = None
    request_id: Optional[str] = None
    ts_utc: Optional[str] = None


class CommandSink(Protocol):
    def on_command(self, event: CommandEvent) -> None: ...
    def close(self) -> None: ...
