# linecommander/runtime/state.py
from __future__ import annotations

from enum import Enum


class LoopState(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    DIRECTIVE = "directive"
    SEND = "send"
    COLLECTING = "collecting"
    PRINTING = "printing"
    TERMINATED = "terminated"


class ExitReason(str, Enum):
    END_OF_INPUT = "end_of_input"
    QUIT = "quit"
    GOODBYE = "goodbye"
    END_OF_STREAM = "end_of_stream"
    CLOSED = "closed"
