# linecommander/runtime/loop.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

from linecommander.core.errors import CommanderError, DirectiveParseError, SessionClosedError
from linecommander.interfaces.input_source import InputSource
from linecommander.interfaces.output_sink import OutputSink
from linecommander.runtime import directives
from linecommander.runtime.directives import Directive, parse_directive
from linecommander.runtime.state import ExitReason, LoopState

if TYPE_CHECKING:
    from linecommander.runtime.session import CommanderSession


def format_date(now: datetime) -> str:
    return "*** Date: " + now.strftime("%a %b %d %H:%M:%S %Z %Y")


class InteractiveLoop:
    """
    Read a line, apply directives, send it, print the answer; repeat.

    AWAITING_INPUT -> DIRECTIVE | SEND -> COLLECTING -> PRINTING
                   -> AWAITING_INPUT | TERMINATED
    """

    def __init__(
        self,
        session: "CommanderSession",
        input_source: InputSource,
        output: OutputSink,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now().astimezone(),
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.input = input_source
        self.output = output
        self._clock = clock
        self._log = logger or logging.getLogger(__name__)

        cfg = session.config
        self.prompt = cfg.prompt
        self.goodbye_word = cfg.goodbye_word
        self.comment_prefix = cfg.comment
        self.escape_prefix = cfg.escape

        self.state = LoopState.AWAITING_INPUT
        self.exit_reason: Optional[ExitReason] = None

    @property
    def terminated(self) -> bool:
        return self.state is LoopState.TERMINATED

    def run(self) -> ExitReason:
        while self.step():
            pass
        self._log.info("LOOP_EXIT reason=%s", self.exit_reason.value if self.exit_reason else "-")
        return self.exit_reason or ExitReason.CLOSED

    def step(self) -> bool:
        """One pass through the state machine. False once terminated."""
        if self.terminated:
            return False

        self.state = LoopState.AWAITING_INPUT
        try:
            self._print_unsolicited()
            if self.session.at_eof:
                self.output.error("Connection closed by device.")
                return self._terminate(ExitReason.END_OF_STREAM)
        except SessionClosedError:
            return self._terminate(ExitReason.CLOSED)
        except CommanderError as e:
            self._report(e)

        line = self.input.read_line(self.prompt)
        if line is None:
            self.output.line("")
            return self._terminate(ExitReason.END_OF_INPUT)
        if line:
            self.input.record_history(line)

        directive = parse_directive(line, comment_prefix=self.comment_prefix, escape_prefix=self.escape_prefix)
        if directive is not None:
            self.state = LoopState.DIRECTIVE
            return self._apply(directive)

        try:
            if not line and self.session.has_pending():
                self._print_unsolicited()
                return True
            return self._exchange(line)
        except SessionClosedError:
            return self._terminate(ExitReason.CLOSED)
        except CommanderError as e:
            self._report(e)
            return True

    # ---------------- directives ----------------
    def _apply(self, directive: Directive) -> bool:
        kind = directive.kind
        if kind != directives.COMMENT:
            self.session.trace("DIRECTIVE", kind, {"text": directive.text})

        if kind == directives.COMMENT:
            return True

        if kind == directives.QUIT:
            self.output.line("")
            return self._terminate(ExitReason.QUIT)

        if kind == directives.SLEEP:
            try:
                seconds = directives.sleep_seconds(directive)
            except DirectiveParseError as e:
                self._report(e)
                return True
            self._log.debug("SLEEP seconds=%s", seconds)
            try:
                self.session.pause(seconds)
            except SessionClosedError:
                return self._terminate(ExitReason.CLOSED)
            return True

        if kind == directives.DATE:
            self.output.line(format_date(self._clock()))
            return True

        self.output.error(f"Unknown escape: {self.escape_prefix}{directive.text}")
        return True

    # ---------------- exchange ----------------
    def _exchange(self, line: str) -> bool:
        self.state = LoopState.SEND
        self.session.send(line)

        self.state = LoopState.COLLECTING
        response = self.session.collect()

        self.state = LoopState.PRINTING
        for text in response.lines:
            self.output.line(text)

        if response.end_of_stream:
            self.output.error("Connection closed by device.")
            return self._terminate(ExitReason.END_OF_STREAM)

        if response.ends_with(self.goodbye_word):
            return self._terminate(ExitReason.GOODBYE)

        return True

    def _print_unsolicited(self) -> None:
        for text in self.session.drain_pending():
            self.output.line(text)

    # ---------------- helpers ----------------
    def _report(self, e: CommanderError) -> None:
        self._log.warning("LOOP_ERROR code=%s msg=%s", e.code, e.message)
        self.output.error(f"{e.message} ({e.hint})" if e.hint else e.message)

    def _terminate(self, reason: ExitReason) -> bool:
        self.state = LoopState.TERMINATED
        self.exit_reason = reason
        return False
