# linecommander/cli/main.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from linecommander.core.errors import CommanderError, ConfigError, EXIT_SUCCESS
from linecommander.core.recording import CommandTraceLogger
from linecommander.runtime.session import CommanderSession
from linecommander.transport.errors import TransportError
from linecommander.transport.registry import TransportDriverRegistry

from linecommander.cli.args import history_path, parse_args, session_config, transport_config
from linecommander.cli.commands import (
    cmd_interactive,
    cmd_listen,
    cmd_send,
    configure_logging,
    make_input,
    version_text,
)


def main(argv: Optional[list[str]] = None) -> int:
    trace: Optional[CommandTraceLogger] = None
    try:
        args = parse_args(argv)
        if args.version:
            print(version_text())
            return EXIT_SUCCESS

        configure_logging(verbose=args.verbose, log_file=Path(args.log_file) if args.log_file else None)
        log = logging.getLogger("linecommander")

        config = session_config(args)
        tcfg = transport_config(args)
        try:
            transport = TransportDriverRegistry.default().create(tcfg.driver, **tcfg.params)
        except TransportError as e:
            raise ConfigError("Cannot set up the transport.", hint=str(e)) from None

        if args.trace:
            trace = CommandTraceLogger(logger=log, file_path=Path(args.trace))

        with CommanderSession(transport, config, cmd_sink=trace, logger=log) as session:
            if args.listen:
                return cmd_listen(session)
            if args.arguments:
                return cmd_send(session, " ".join(args.arguments))
            return cmd_interactive(
                session,
                input_source=make_input(
                    history_file=history_path(args),
                    init_file=Path(args.config) if args.config else None,
                ),
            )
    except CommanderError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        if e.hint:
            print(f"Hint: {e.hint}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        return EXIT_SUCCESS
    finally:
        if trace is not None:
            trace.close()


if __name__ == "__main__":
    raise SystemExit(main())
