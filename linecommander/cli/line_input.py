# linecommander/cli/line_input.py
"""
Input sources for the interactive loop.

ReadlineInput gives line editing and a persistent history file (GNU readline
through the standard library). StdinInput reads plain lines and is used when
stdin is not a terminal, e.g. `linecommander -i host < script.txt`.
"""

from __future__ import annotations

import logging
import os
import readline
import sys
from pathlib import Path
from typing import Mapping, Optional, TextIO

from linecommander.app.config import APP_NAME
from linecommander.interfaces.input_source import InputSource


def default_history_file(app_name: str, env: Optional[Mapping[str, str]] = None) -> Path:
    """$XDG_DATA_HOME/linecommander/<app_name>.rl (XDG base directory spec)."""
    env = os.environ if env is None else env
    data_home = env.get("XDG_DATA_HOME") or str(Path(env.get("HOME", str(Path.home()))) / ".local" / "share")
    return Path(data_home) / APP_NAME / f"{app_name}.rl"


class ReadlineInput(InputSource):

    def __init__(
        self,
        *,
        history_file: Optional[Path] = None,
        init_file: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.history_file = Path(history_file) if history_file else None
        self.init_file = Path(init_file) if init_file else None
        self._log = logger or logging.getLogger(__name__)
        self._opened = False

    def open(self) -> None:
        if self._opened:
            return
        # history is recorded explicitly through record_history()
        readline.set_auto_history(False)

        if self.init_file is not None:
            if self.init_file.exists():
                try:
                    readline.read_init_file(str(self.init_file))
                except OSError as e:
                    self._log.warning("READLINE_INIT_FAILED path=%s err=%s", self.init_file, e)
            else:
                self._log.warning("Cannot open readline configuration %s, ignoring", self.init_file)

        if self.history_file is not None:
            if self.history_file.exists():
                try:
                    readline.read_history_file(str(self.history_file))
                except OSError as e:
                    self._log.warning("HISTORY_READ_FAILED path=%s err=%s", self.history_file, e)
            else:
                self._log.info("HISTORY_NEW path=%s", self.history_file)
                self.history_file.parent.mkdir(parents=True, exist_ok=True)

        self._opened = True

    def close(self) -> None:
        if not self._opened:
            return
        self._opened = False
        if self.history_file is None:
            return
        try:
            readline.write_history_file(str(self.history_file))
            self._log.debug("HISTORY_WRITTEN path=%s", self.history_file)
        except OSError as e:
            self._log.warning("HISTORY_WRITE_FAILED path=%s err=%s", self.history_file, e)

    def read_line(self, prompt: str) -> Optional[str]:
        try:
            return input(prompt)
        except EOFError:
            return None

    def record_history(self, text: str) -> None:
        if not text:
            return
        size = readline.get_current_history_length()
        if size > 0 and readline.get_history_item(size) == text:
            return
        readline.add_history(text)

    def __enter__(self) -> "ReadlineInput":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class StdinInput(InputSource):
    """Unedited lines from a text stream; no prompt, no history."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def read_line(self, prompt: str) -> Optional[str]:
        line = (self._stream or sys.stdin).readline()
        if line == "":
            return None
        return line.rstrip("\r\n")

    def record_history(self, text: str) -> None:
        return None

    def __enter__(self) -> "StdinInput":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None
