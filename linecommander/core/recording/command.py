# linecommander/core/recording/command.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from linecommander.interfaces.command_sink import CommandEvent, CommandSink
from linecommander.core.recording.async_writer import AsyncWriter


@dataclass
class CommandTraceLogger(CommandSink):
    """
    Session transcript: one JSON object per exchange event, appended to
    `file_path` (when given) and mirrored to `logger` at DEBUG level.
    """
    logger: logging.Logger
    file_path: Optional[Path] = None
    flush_interval_s: float = 0.5

    def __post_init__(self) -> None:
        self._writer: Optional[AsyncWriter] = None
        if self.file_path is not None:
            self._writer = AsyncWriter(
                Path(self.file_path),
                flush_interval=self.flush_interval_s,
                logger=self.logger,
            )

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None

    def on_command(self, event: CommandEvent) -> None:
        self.logger.debug("TRACE %s kind=%s id=%s", event.name, event.kind, event.request_id or "-")
        if self._writer is None:
            return

        record = {
            "ts_utc": event.ts_utc or datetime.now(timezone.utc).isoformat(),
            "name": event.name,
            "kind": event.kind,
            "request_id": event.request_id,
            "payload": dict(event.payload) if event.payload is not None else None,
        }
        self._writer.write(json.dumps({k: v for k, v in record.items() if v is not None}, ensure_ascii=False))
