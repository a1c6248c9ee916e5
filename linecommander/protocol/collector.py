# linecommander/protocol/collector.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from .framer import LineFramer, ReadStatus


@dataclass(frozen=True)
class CollectionPolicy:
    """
    How to decide that an answer is complete.

    expect_lines > 0: read exactly that many lines, each within timeout_s.
    expect_lines <= 0: drain; take lines until none arrives within timeout_s.
    """
    expect_lines: int = 1
    timeout_s: float = 1.0

    def __post_init__(self) -> None:
        if self.timeout_s < 0:
            raise ValueError("timeout_s must be >= 0")
        if self.expect_lines < 0:
            object.__setattr__(self, "expect_lines", 0)

    @classmethod
    def fixed(cls, n: int, timeout_s: float) -> "CollectionPolicy":
        return cls(expect_lines=int(n), timeout_s=float(timeout_s))

    @classmethod
    def drain_within(cls, timeout_s: float) -> "CollectionPolicy":
        return cls(expect_lines=0, timeout_s=float(timeout_s))

    @property
    def drain(self) -> bool:
        return self.expect_lines <= 0


class Outcome(str, Enum):
    COMPLETE = "complete"
    TIMEOUT = "timeout"
    END_OF_STREAM = "end_of_stream"


@dataclass
class Response:
    lines: list[str] = field(default_factory=list)
    outcome: Outcome = Outcome.COMPLETE

    @property
    def end_of_stream(self) -> bool:
        return self.outcome is Outcome.END_OF_STREAM

    @property
    def timed_out(self) -> bool:
        return self.outcome is Outcome.TIMEOUT

    @property
    def last_line(self) -> Optional[str]:
        return self.lines[-1] if self.lines else None

    def ends_with(self, word: Optional[str]) -> bool:
        return word is not None and self.last_line == word

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)


class ResponseCollector:
    """Gathers the reply to one sent command."""

    def __init__(self, framer: LineFramer, *, logger: Optional[logging.Logger] = None):
        self.framer = framer
        self._log = logger or logging.getLogger(__name__)

    def collect(self, policy: CollectionPolicy) -> Response:
        response = Response()
        remaining = None if policy.drain else policy.expect_lines

        while remaining is None or remaining > 0:
            read = self.framer.read_line(blocking=True, timeout_s=policy.timeout_s)

            if read.status is ReadStatus.LINE:
                response.lines.append(read.text or "")
                if remaining is not None:
                    remaining -= 1
                continue

            if read.status is ReadStatus.END_OF_STREAM:
                response.outcome = Outcome.END_OF_STREAM
            elif remaining is not None:
                # silent device: keep what arrived
                response.outcome = Outcome.TIMEOUT
            break

        self._log.debug(
            "COLLECT_DONE expect=%d outcome=%s lines=%d",
            policy.expect_lines,
            response.outcome.value,
            len(response.lines),
        )
        return response
