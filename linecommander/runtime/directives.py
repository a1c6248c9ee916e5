# linecommander/runtime/directives.py
"""
Session-level directives recognized before a line is sent to the device.

With a comment prefix "#" and an escape prefix "!":

    # anything        -> ignored
    !quit             -> leave the session
    !sleep 0.5        -> pause the loop for half a second
    !date             -> print the current date
    !other            -> "Unknown escape: !other"

Escape commands are matched by prefix, so "!quitnow" is a quit.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Optional

from linecommander.core.errors import DirectiveParseError


COMMENT = "comment"
QUIT = "quit"
SLEEP = "sleep"
DATE = "date"
UNKNOWN = "unknown"

ESCAPE_COMMANDS = (QUIT, SLEEP, DATE)


@dataclass(frozen=True)
class Directive:
    kind: str
    argument: str = ""
    text: str = ""     # line after the escape prefix


def parse_directive(
    line: str,
    *,
    comment_prefix: Optional[str] = None,
    escape_prefix: Optional[str] = None,
) -> Optional[Directive]:
    """Return the directive `line` carries, or None if it should be sent."""
    stripped = line.strip()

    if comment_prefix and stripped.startswith(comment_prefix):
        return Directive(COMMENT, text=stripped)

    if escape_prefix and stripped.startswith(escape_prefix):
        rest = stripped[len(escape_prefix):]
        for name in ESCAPE_COMMANDS:
            if rest.startswith(name):
                return Directive(name, argument=rest[len(name):].strip(), text=rest)
        return Directive(UNKNOWN, text=rest)

    return None


def sleep_seconds(directive: Directive) -> float:
    try:
        seconds = float(directive.argument)
    except ValueError:
        raise DirectiveParseError(
            f"Cannot parse sleep duration {directive.argument!r}.",
            hint="Usage: sleep <seconds>, e.g. sleep 0.5",
        ) from None

    if seconds < 0 or not math.isfinite(seconds):
        raise DirectiveParseError(f"Sleep duration must be a non-negative number, got {directive.argument!r}.")
    if seconds > threading.TIMEOUT_MAX:
        raise DirectiveParseError(
            f"Sleep duration {directive.argument!r} is too long.",
            hint=f"At most {threading.TIMEOUT_MAX:.0f} seconds.",
        )
    return seconds
