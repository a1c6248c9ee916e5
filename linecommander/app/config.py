# linecommander/app/config.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from linecommander.protocol import CollectionPolicy, FrameTemplate


APP_NAME = "linecommander"
VERSION = "0.1.1"

DEFAULT_PROMPT = "LC> "
DEFAULT_TCP_PORT = 23  # telnet
DEFAULT_BAUDRATE = 115200
DEFAULT_TIMEOUT_MS = 2000
DEFAULT_WAIT_MS = 1000

TERMINATORS = {
    "none": "",
    "cr": "\r",
    "lf": "\n",
    "crlf": "\r\n",
}


def frame_for_terminator(name: str) -> str:
    key = name.strip().lower()
    if key not in TERMINATORS:
        raise ValueError(f"unknown terminator {name!r} (use one of: {', '.join(TERMINATORS)})")
    return FrameTemplate.with_terminator(TERMINATORS[key]).pattern


@dataclass(frozen=True)
class CommanderConfig:
    """
    Per-session configuration (immutable once the session is built).
    """
    frame: str = "{0}"
    uppercase: bool = False
    expect_lines: int = 1
    wait_ms: int = DEFAULT_WAIT_MS
    goodbye_word: Optional[str] = None
    comment: Optional[str] = None
    escape: Optional[str] = None
    prompt: str = DEFAULT_PROMPT
    encoding: str = "utf-8"
    poll_interval_s: float = 0.05

    def __post_init__(self) -> None:
        FrameTemplate(self.frame)
        if self.wait_ms < 0:
            raise ValueError("wait_ms must be >= 0")
        if self.poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")
        # empty prefixes would match every line
        if self.comment == "":
            object.__setattr__(self, "comment", None)
        if self.escape == "":
            object.__setattr__(self, "escape", None)

    def frame_template(self) -> FrameTemplate:
        return FrameTemplate(self.frame)

    def collection_policy(self) -> CollectionPolicy:
        return CollectionPolicy(expect_lines=self.expect_lines, timeout_s=self.wait_ms / 1000.0)


def _timeout_s(timeout_ms: int) -> Optional[float]:
    # 0 = block without limit
    return timeout_ms / 1000.0 if timeout_ms > 0 else None


@dataclass(frozen=True)
class TransportConfig:
    """Driver key ("uart" / "tcp") + constructor params."""
    driver: str
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def tcp(cls, host: str, port: int = DEFAULT_TCP_PORT, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> "TransportConfig":
        return cls("tcp", {"host": host, "port": int(port), "timeout": _timeout_s(timeout_ms)})

    @classmethod
    def uart(cls, device: str, baudrate: int = DEFAULT_BAUDRATE, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> "TransportConfig":
        return cls("uart", {"port": device, "baudrate": int(baudrate), "timeout": _timeout_s(timeout_ms)})
