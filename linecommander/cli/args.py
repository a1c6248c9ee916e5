# linecommander/cli/args.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from linecommander.app.config import (
    APP_NAME,
    DEFAULT_BAUDRATE,
    DEFAULT_PROMPT,
    DEFAULT_TCP_PORT,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_WAIT_MS,
    CommanderConfig,
    TransportConfig,
    frame_for_terminator,
)
from linecommander.app.profile import load_profile
from linecommander.cli.line_input import default_history_file
from linecommander.core.errors import ConfigError


# ---------------- argparse (two-stage) ----------------

def build_profile_parser() -> argparse.ArgumentParser:
    """
    Stage 1 parser: only --profile (and the connection selectors), so profile
    values can become stage 2 defaults.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--profile", default=None)
    parser.add_argument("-i", "--ip", default=None)
    parser.add_argument("-d", "--device", default=None)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """
    Stage 2 parser: the full command line.
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        add_help=False,
        description="Interactive terminal for line-oriented devices on a serial port or TCP socket.",
    )

    conn = parser.add_argument_group("connection")
    conn.add_argument("-i", "--ip", help="IP address or host name")
    conn.add_argument("-p", "--port", type=int, default=DEFAULT_TCP_PORT, help="TCP port number")
    conn.add_argument("-d", "--device", help="Serial device, e.g. /dev/ttyUSB0 or COM7")
    conn.add_argument("-b", "--baud", type=int, default=DEFAULT_BAUDRATE, help="Baud rate for serial devices")
    conn.add_argument("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT_MS, help="Connect/write timeout in milliseconds")

    frame = parser.add_argument_group("framing")
    frame.add_argument("-r", "--cr", "--return", dest="cr", action="store_true",
                       help="End the lines with carriage return (\\r, 0x0D)")
    frame.add_argument("-n", "--nl", "--newline", dest="newline", action="store_true",
                       help="End the lines with newline (\\n, 0x0A)")
    frame.add_argument("--crlf", action="store_true",
                       help="End the lines with carriage return and linefeed (\\r\\n)")
    frame.add_argument("--terminator", default="none", help=argparse.SUPPRESS)
    frame.add_argument("-u", "--uppercase", action="store_true", help="Turn inputs to UPPERCASE")
    frame.add_argument("--encoding", default="utf-8", help="Text encoding on the wire")

    answer = parser.add_argument_group("answers")
    answer.add_argument("-#", "--expect-lines", dest="expect_lines", type=int, default=1,
                        help="If > 0, number of return lines to expect. "
                             "If <= 0, take as many lines as arrive within --wait.")
    answer.add_argument("-w", "--wait", type=int, default=DEFAULT_WAIT_MS,
                        help="Milliseconds to wait for each answer line")
    answer.add_argument("-B", "--bye", help="Close the connection when this line is received")
    answer.add_argument("-l", "--listen", action="store_true",
                        help="Listen forever, just echo to stdout. Press Ctrl-C to stop.")

    inter = parser.add_argument_group("interactive")
    inter.add_argument("-P", "--prompt", default=DEFAULT_PROMPT, help="Prompt")
    inter.add_argument("--comment", help="Lines starting with this string are not sent")
    inter.add_argument("--escape", help="Escape sequence for the commands quit, sleep <s> and date")
    inter.add_argument("-a", "--appname", default=APP_NAME, help="Application name for readline / the history file")
    inter.add_argument("-c", "--config", help="Readline configuration (inputrc) file")
    inter.add_argument("-H", "--history", help="History file name")

    misc = parser.add_argument_group("misc")
    misc.add_argument("--profile", help="YAML profile with defaults for these options")
    misc.add_argument("--trace", help="Append a JSON-lines transcript of every exchange to this file")
    misc.add_argument("--log-file", dest="log_file", help="Also write the application log to this file")
    misc.add_argument("-v", "--verbose", action="store_true", help="Verbose (debug) logging on stderr")
    misc.add_argument("-V", "--version", action="store_true", help="Display version information")
    misc.add_argument("-h", "--help", "-?", action="help", help="Display help message")

    parser.add_argument("arguments", nargs="*", help="Command to send once (joined with spaces)")
    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    base, _unknown = build_profile_parser().parse_known_args(argv)

    parser = build_parser()
    if base.profile:
        defaults = load_profile(base.profile)
        # a connection chosen on the command line replaces the profile's
        if base.ip is not None or base.device is not None:
            defaults.pop("ip", None)
            defaults.pop("device", None)
        parser.set_defaults(**defaults)
    return parser.parse_args(argv)


# ---------------- namespace -> config ----------------

def resolve_frame(args: argparse.Namespace) -> str:
    """First explicit flag wins: --cr, then --nl, then --crlf, then the profile."""
    if args.cr:
        return frame_for_terminator("cr")
    if args.newline:
        return frame_for_terminator("lf")
    if args.crlf:
        return frame_for_terminator("crlf")
    try:
        return frame_for_terminator(args.terminator or "none")
    except ValueError as e:
        raise ConfigError(str(e)) from None


def session_config(args: argparse.Namespace) -> CommanderConfig:
    try:
        return CommanderConfig(
            frame=resolve_frame(args),
            uppercase=bool(args.uppercase),
            expect_lines=int(args.expect_lines),
            wait_ms=int(args.wait),
            goodbye_word=args.bye,
            comment=args.comment,
            escape=args.escape,
            prompt=args.prompt,
            encoding=args.encoding,
        )
    except ValueError as e:
        raise ConfigError("Invalid session options.", hint=str(e)) from None


def transport_config(args: argparse.Namespace) -> TransportConfig:
    if (args.ip is None) == (args.device is None):
        raise ConfigError(
            "Exactly one of the options --ip and --device must be given.",
            hint=f"Run: {APP_NAME} --help",
        )
    if args.timeout < 0:
        raise ConfigError("--timeout must be >= 0.")

    if args.ip is not None:
        return TransportConfig.tcp(args.ip, port=args.port, timeout_ms=args.timeout)
    return TransportConfig.uart(args.device, baudrate=args.baud, timeout_ms=args.timeout)


def history_path(args: argparse.Namespace) -> Path:
    return Path(args.history) if args.history else default_history_file(args.appname)
