"""ReplayReader -- feeds a captured session log back through the pipeline.

A capture is plain text with one raw device line per row, exactly as it
came off the wire.  A row reading ``--- disconnected ---`` marks the
point where the link dropped; replay raises ``DeviceDisconnected`` there.
File I/O is offloaded to a thread via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import structlog

from heater_link.reader.base import DeviceDisconnected, LineReader

logger = structlog.get_logger(__name__)

DISCONNECT_MARKER = "--- disconnected ---"


class ReplayReader(LineReader):
    """Replays raw lines from a capture file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lines: List[str] = []
        self._pos = 0
        self._connected = False
        self.sent: List[str] = []

    # -- lifecycle ----------------------------------------------------------

    async def connect(self) -> None:
        self._lines = await asyncio.to_thread(_read_capture, self._path)
        self._pos = 0
        self._connected = True
        logger.info("replay_opened", path=str(self._path), lines=len(self._lines))

    async def disconnect(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    # -- line I/O -----------------------------------------------------------

    async def read_line(self) -> Optional[str]:
        self._check_connected()
        if self._pos >= len(self._lines):
            return None
        line = self._lines[self._pos]
        self._pos += 1
        if line.strip() == DISCONNECT_MARKER:
            self._connected = False
            raise DeviceDisconnected(f"capture {self._path.name} ends in a disconnect")
        return line

    async def write_line(self, line: str) -> None:
        # Nothing is listening on a replay; keep the command for inspection.
        self._check_connected()
        self.sent.append(line)
        logger.info("replay_command_dropped", line=line)

    # -- internal -----------------------------------------------------------

    def _check_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("ReplayReader is not connected")


def _read_capture(path: Path) -> List[str]:
    with open(path, encoding="utf-8", errors="replace", newline="") as fh:
        return [line.rstrip("\r\n") for line in fh]
