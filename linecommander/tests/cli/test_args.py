from __future__ import annotations

from pathlib import Path

import pytest

from linecommander.cli.args import history_path, parse_args, resolve_frame, session_config, transport_config
from linecommander.core.errors import ConfigError


def test_defaults():
    args = parse_args(["-i", "host"])

    assert args.port == 23
    assert args.baud == 115200
    assert args.timeout == 2000
    assert args.wait == 1000
    assert args.expect_lines == 1
    assert args.prompt == "LC> "
    assert args.arguments == []
    assert resolve_frame(args) == "{0}"


@pytest.mark.parametrize(
    "flags, frame",
    [
        (["-r"], "{0}\r"),
        (["--nl"], "{0}\n"),
        (["--crlf"], "{0}\r\n"),
        (["--crlf", "-n", "-r"], "{0}\r"),
        (["--crlf", "--newline"], "{0}\n"),
    ],
)
def test_terminator_flags_first_wins(flags, frame):
    assert resolve_frame(parse_args(["-i", "h", *flags])) == frame


def test_positional_arguments_are_collected():
    args = parse_args(["-d", "/dev/ttyUSB0", "-#", "-1", "get", "status"])
    assert args.arguments == ["get", "status"]
    assert args.expect_lines == -1


def test_session_config_from_args():
    args = parse_args(["-i", "h", "-u", "-B", "Bye!", "--comment", "#", "--escape", "!", "-w", "300", "--crlf"])
    cfg = session_config(args)

    assert cfg.uppercase is True
    assert cfg.goodbye_word == "Bye!"
    assert cfg.comment == "#"
    assert cfg.escape == "!"
    assert cfg.frame == "{0}\r\n"
    assert cfg.collection_policy().timeout_s == 0.3


def test_negative_wait_is_a_config_error():
    with pytest.raises(ConfigError):
        session_config(parse_args(["-i", "h", "-w", "-5"]))


@pytest.mark.parametrize("argv", [[], ["-i", "h", "-d", "/dev/ttyS0"]])
def test_exactly_one_connection_is_required(argv):
    with pytest.raises(ConfigError) as ei:
        transport_config(parse_args(argv))
    assert ei.value.exit_code == 2


def test_transport_config_for_tcp_and_uart():
    tcp = transport_config(parse_args(["-i", "10.1.1.1", "-p", "5000", "-t", "500"]))
    uart = transport_config(parse_args(["-d", "COM3", "-b", "9600"]))

    assert tcp.driver == "tcp"
    assert tcp.params == {"host": "10.1.1.1", "port": 5000, "timeout": 0.5}
    assert uart.driver == "uart"
    assert uart.params == {"port": "COM3", "baudrate": 9600, "timeout": 2.0}


def test_profile_values_are_defaults(tmp_path):
    profile = tmp_path / "p.yaml"
    profile.write_text("session:\n  terminator: cr\n  wait: 250\ntransport:\n  ip: 10.0.0.2\n", encoding="utf-8")

    args = parse_args(["--profile", str(profile), "-w", "400"])

    assert args.ip == "10.0.0.2"
    assert args.wait == 400
    assert resolve_frame(args) == "{0}\r"


def test_command_line_connection_replaces_profile_connection(tmp_path):
    profile = tmp_path / "p.yaml"
    profile.write_text("transport:\n  ip: 10.0.0.2\n  baud: 9600\n", encoding="utf-8")

    args = parse_args(["--profile", str(profile), "-d", "/dev/ttyUSB1"])
    tc = transport_config(args)

    assert args.ip is None
    assert tc.params["port"] == "/dev/ttyUSB1"
    assert tc.params["baudrate"] == 9600


def test_history_path(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert history_path(parse_args(["-i", "h", "-a", "proj"])) == tmp_path / "linecommander" / "proj.rl"
    assert history_path(parse_args(["-i", "h", "-H", "/tmp/h.rl"])) == Path("/tmp/h.rl")


def test_help_aliases_exit_cleanly(capsys):
    for flag in ("-h", "--help", "-?"):
        with pytest.raises(SystemExit) as ei:
            parse_args([flag])
        assert ei.value.code == 0
    assert "--expect-lines" in capsys.readouterr().out
