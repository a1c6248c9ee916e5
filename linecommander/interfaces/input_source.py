from __future__ import annotations

from typing import Optional, Protocol


class InputSource(Protocol):
    """
    Front end that supplies command lines to the interactive loop.

    read_line() returns the text without its line terminator, "" for an empty
    line, and None at end of input.
    """

    def read_line(self, prompt: str) -> Optional[str]: ...

    def record_history(self, text: str) -> None: ...
