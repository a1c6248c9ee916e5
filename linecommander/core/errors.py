# linecommander/core/errors.py
from __future__ import annotations


EXIT_SUCCESS = 0
EXIT_IO_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_UNKNOWN_HOST = 3


class CommanderError(Exception):
    """
    Base class for all expected operational errors in linecommander.
    """

    #: Stable machine-readable identifier (logs, traces).
    code: str = "unknown"

    #: Process exit code used by the CLI when this error ends the run.
    exit_code: int = EXIT_IO_ERROR

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / usage errors (no device access yet)
# ---------------------------------------------------------------------------

class ConfigError(CommanderError):
    """
    Command line or profile is invalid.

    Examples:
      - neither or both of --ip / --device given
      - unknown profile key, wrong value type
      - frame template without exactly one placeholder
    """
    code = "config_error"
    exit_code = EXIT_USAGE_ERROR


# ---------------------------------------------------------------------------
# Connection lifecycle errors
# ---------------------------------------------------------------------------

class DeviceConnectError(CommanderError):
    """
    Transport could not be opened.

    Examples:
      - serial device not found / permission denied / in use
      - TCP connection refused or timed out
    """
    code = "device_connect_error"


class UnknownHostError(DeviceConnectError):
    """Host name of a TCP device could not be resolved."""
    code = "unknown_host"
    exit_code = EXIT_UNKNOWN_HOST


class DeviceIOError(CommanderError):
    """
    Write or transient read failure on an open transport.

    The session stays usable; the interactive loop reports it and continues.
    """
    code = "device_io_error"


class SessionClosedError(CommanderError):
    """
    The session was closed (or cancelled) and can no longer send or receive.
    """
    code = "session_closed"


# ---------------------------------------------------------------------------
# Session directive errors
# ---------------------------------------------------------------------------

class DirectiveParseError(CommanderError):
    """
    An escape directive had a malformed argument (e.g. `sleep abc`).
    """
    code = "directive_parse_error"
    exit_code = EXIT_USAGE_ERROR
