from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone

from linecommander.app.config import CommanderConfig
from linecommander.app.sinks import ListOutput
from linecommander.runtime.loop import InteractiveLoop, format_date
from linecommander.runtime.session import CommanderSession
from linecommander.runtime.state import ExitReason, LoopState
from linecommander.transport.errors import TransportIOError


class ScriptedInput:
    """Feeds fixed lines; None (or running out) is end of input."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []
        self.history = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        return self.lines.pop(0) if self.lines else None

    def record_history(self, text):
        self.history.append(text)


def run(transport, lines, clock=None, **cfg):
    cfg.setdefault("wait_ms", 80)
    cfg.setdefault("poll_interval_s", 0.01)
    inp = ScriptedInput(lines)
    out = ListOutput()
    with CommanderSession(transport, CommanderConfig(**cfg)) as s:
        kw = {"clock": clock} if clock is not None else {}
        loop = InteractiveLoop(s, inp, out, **kw)
        reason = loop.run()
    return reason, loop, inp, out


def test_end_of_input_prints_blank_line_and_terminates(fake_transport):
    reason, loop, inp, out = run(fake_transport(), [], prompt="LC> ")

    assert reason is ExitReason.END_OF_INPUT
    assert loop.state is LoopState.TERMINATED
    assert out.lines == [""]
    assert inp.prompts == ["LC> "]


def test_line_is_sent_and_answer_printed(fake_transport):
    t = fake_transport(replies={b"VOL?\r": [b"VOL=12\r\n"]})

    reason, _, _, out = run(t, ["VOL?"], frame="{0}\r")

    assert t.writes == [b"VOL?\r"]
    assert out.lines == ["VOL=12", ""]
    assert reason is ExitReason.END_OF_INPUT


def test_goodbye_word_terminates_after_printing(fake_transport):
    t = fake_transport(replies={b"exit": [b"Bye!\n"]})

    reason, _, inp, out = run(t, ["exit", "never sent"], goodbye_word="Bye!")

    assert reason is ExitReason.GOODBYE
    assert out.lines == ["Bye!"]
    assert t.writes == [b"exit"]
    assert inp.lines == ["never sent"]


def test_goodbye_word_must_match_exactly(fake_transport):
    t = fake_transport(replies={b"exit": [b"Bye!!\n"]})

    reason, _, _, out = run(t, ["exit"], goodbye_word="Bye!")

    assert reason is ExitReason.END_OF_INPUT
    assert out.lines == ["Bye!!", ""]


def test_comment_is_not_sent(fake_transport):
    t = fake_transport()

    run(t, ["# power on sequence", "  #indented"], comment="#")

    assert t.writes == []


def test_history_records_non_empty_lines(fake_transport):
    _, _, inp, _ = run(fake_transport(), ["a", "", "# c"], comment="#", wait_ms=10)
    assert inp.history == ["a", "# c"]


def test_quit_prints_blank_line_and_stops(fake_transport):
    t = fake_transport()

    reason, _, inp, out = run(t, ["!quit", "PWR OFF"], escape="!")

    assert reason is ExitReason.QUIT
    assert out.lines == [""]
    assert t.writes == []
    assert inp.lines == ["PWR OFF"]


def test_sleep_pauses_the_loop(fake_transport):
    started = time.monotonic()
    reason, _, _, out = run(fake_transport(), ["!sleep 0.1"], escape="!")

    assert time.monotonic() - started >= 0.1
    assert reason is ExitReason.END_OF_INPUT
    assert out.errors == []


def test_bad_sleep_argument_is_reported_and_loop_continues(fake_transport):
    t = fake_transport(replies={b"next": [b"ok\n"]})

    reason, _, _, out = run(t, ["!sleep soon", "next"], escape="!")

    assert len(out.errors) == 1
    assert "soon" in out.errors[0]
    assert out.lines == ["ok", ""]
    assert reason is ExitReason.END_OF_INPUT


def test_date_prints_timestamp(fake_transport):
    fixed = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone(timedelta(hours=1), "CET"))

    _, _, _, out = run(fake_transport(), ["!date"], clock=lambda: fixed, escape="!")

    assert out.lines[0] == "*** Date: Tue Mar 05 14:07:09 CET 2024"


def test_format_date_without_timezone_name():
    assert format_date(datetime(2024, 1, 1, 0, 0, 0)) == "*** Date: Mon Jan 01 00:00:00  2024"


def test_unknown_escape_is_reported(fake_transport):
    t = fake_transport()

    _, _, _, out = run(t, ["!reboot"], escape="!")

    assert out.errors == ["Unknown escape: !reboot"]
    assert t.writes == []


def test_empty_line_prints_pending_output_instead_of_sending(fake_transport):
    # first poll (before the prompt) sees nothing, the second finds the event
    t = fake_transport([None, b"EVENT\n"])

    reason, _, _, out = run(t, [""])

    assert t.writes == []
    assert out.lines == ["EVENT", ""]
    assert reason is ExitReason.END_OF_INPUT


def test_empty_line_without_pending_output_is_sent(fake_transport):
    t = fake_transport(replies={b"\r": [b"READY\n"]})

    _, _, _, out = run(t, [""], frame="{0}\r")

    assert t.writes == [b"\r"]
    assert out.lines == ["READY", ""]


def test_unsolicited_output_is_printed_before_prompt(fake_transport):
    t = fake_transport([b"BOOT OK\n"])

    _, _, inp, out = run(t, [])

    assert out.lines == ["BOOT OK", ""]
    assert inp.prompts


def test_drain_mode_collects_everything(fake_transport):
    t = fake_transport(replies={b"HELP": [b"cmd1\ncmd2\n", b"cmd3\n"]})

    _, _, _, out = run(t, ["HELP"], expect_lines=0, wait_ms=60)

    assert out.lines == ["cmd1", "cmd2", "cmd3", ""]


def test_end_of_stream_terminates_under_fixed_count(fake_transport):
    t = fake_transport([None], replies={b"reboot": [b"rebooting\n"]}, eof_when_empty=True)

    reason, _, inp, out = run(t, ["reboot", "after"], expect_lines=3, wait_ms=500)

    assert reason is ExitReason.END_OF_STREAM
    assert out.lines == ["rebooting"]
    assert out.errors == ["Connection closed by device."]
    assert inp.lines == ["after"]


def test_io_error_is_reported_and_loop_continues(fake_transport):
    t = fake_transport(replies={b"two": [b"fine\n"]})
    t.fail_write = TransportIOError("write failed")

    class FlakyInput(ScriptedInput):
        def read_line(self, prompt):
            line = super().read_line(prompt)
            if line == "two":
                t.fail_write = None
            return line

    out = ListOutput()
    with CommanderSession(t, CommanderConfig(wait_ms=80, poll_interval_s=0.01)) as s:
        reason = InteractiveLoop(s, FlakyInput(["one", "two"]), out).run()

    assert reason is ExitReason.END_OF_INPUT
    assert len(out.errors) == 1
    assert "write failed" in out.errors[0]
    assert out.lines == ["fine", ""]


def test_closed_session_ends_loop(fake_transport):
    out = ListOutput()
    s = CommanderSession(fake_transport(), CommanderConfig(poll_interval_s=0.01))
    s.open()
    s.close()

    reason = InteractiveLoop(s, ScriptedInput(["x"]), out).run()

    assert reason is ExitReason.CLOSED
    assert out.lines == []


def test_huge_sleep_is_reported_and_loop_continues(fake_transport):
    t = fake_transport(replies={b"next": [b"ok\n"]})

    reason, _, _, out = run(t, ["!sleep 1e10", "next"], escape="!")

    assert reason is ExitReason.END_OF_INPUT
    assert len(out.errors) == 1
    assert "too long" in out.errors[0]
    assert out.lines == ["ok", ""]


def test_device_hanging_up_before_prompt_ends_loop(fake_transport):
    t = fake_transport(eof_when_empty=True)

    reason, _, inp, out = run(t, ["foo", "bar"])

    assert reason is ExitReason.END_OF_STREAM
    assert inp.prompts == []
    assert t.writes == []
    assert out.errors == ["Connection closed by device."]


def test_last_words_before_hang_up_are_printed(fake_transport):
    t = fake_transport([b"SHUTTING DOWN\n"], eof_when_empty=True)

    reason, _, inp, out = run(t, ["foo"])

    assert reason is ExitReason.END_OF_STREAM
    assert out.lines == ["SHUTTING DOWN"]
    assert inp.prompts == []
