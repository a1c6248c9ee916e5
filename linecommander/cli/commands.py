# linecommander/cli/commands.py
from __future__ import annotations

import logging
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from linecommander.app.config import APP_NAME, VERSION
from linecommander.app.sinks import StreamOutput
from linecommander.cli.line_input import ReadlineInput, StdinInput
from linecommander.interfaces import InputSource, OutputSink
from linecommander.runtime.session import CommanderSession


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_HANDLER = "linecommander.console"


# ---------------- Logging ----------------

def configure_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    stderr handler (WARNING, DEBUG with -v) plus an optional file handler.
    Both are added at most once to the root logger.
    """
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING

    console = next((h for h in root.handlers if h.get_name() == CONSOLE_HANDLER), None)
    if console is None:
        console = logging.StreamHandler(sys.stderr)
        console.set_name(CONSOLE_HANDLER)
        console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(console)
    console.setLevel(level)

    root_level = level
    if log_file is not None:
        _add_file_handler(root, Path(log_file))
        root_level = min(root_level, logging.INFO)

    if root.level == logging.NOTSET or root.level > root_level:
        root.setLevel(root_level)


def _add_file_handler(root: logging.Logger, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    target = str(path.resolve())
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(path, encoding="utf-8", delay=True)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)


def version_text() -> str:
    return f"{APP_NAME} {VERSION}"


# ---------------- Signals ----------------

@contextmanager
def close_on_sigterm(session: CommanderSession) -> Iterator[None]:
    """SIGTERM closes the session; the previous handler is restored afterwards."""
    def _handler(signum, frame) -> None:
        logging.getLogger(__name__).info("SIGTERM received, closing session")
        session.close()

    try:
        previous = signal.signal(signal.SIGTERM, _handler)
    except ValueError:
        # not on the main thread
        yield
        return

    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


# ---------------- Commands ----------------

def make_input(*, history_file: Optional[Path], init_file: Optional[Path]) -> InputSource:
    if sys.stdin.isatty():
        return ReadlineInput(history_file=history_file, init_file=init_file)
    return StdinInput()


def cmd_interactive(
    session: CommanderSession,
    *,
    input_source: InputSource,
    output: Optional[OutputSink] = None,
) -> int:
    out = output or StreamOutput()
    with close_on_sigterm(session), input_source:
        reason = session.run_interactive(input_source, out)
    logging.getLogger(__name__).debug("INTERACTIVE_DONE reason=%s", reason.value)
    return 0


def cmd_send(session: CommanderSession, command: str, *, output: Optional[OutputSink] = None) -> int:
    out = output or StreamOutput()
    with close_on_sigterm(session):
        response = session.send_once(command)
    for text in response.lines:
        out.line(text)
    if response.end_of_stream:
        out.error("Connection closed by device.")
    return 0


def cmd_listen(session: CommanderSession, *, output: Optional[OutputSink] = None) -> int:
    out = output or StreamOutput()
    with close_on_sigterm(session):
        session.run_listen_only(out)
    return 0
