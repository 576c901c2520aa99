"""Relay child stdout/stderr lines into the aggregated, name-tagged log stream."""

from __future__ import annotations

import asyncio
import logging
from typing import IO, Optional


class OutputRelay:
    """Copies lines from one child stream to the ``devstack.process.<name>`` logger."""

    def __init__(
        self,
        name: str,
        stream: asyncio.StreamReader,
        *,
        label_width: int = 0,
        log_handle: Optional[IO[str]] = None,
        level: int = logging.INFO,
    ):
        self.name = name
        self.stream = stream
        self.label = name.ljust(label_width)
        self.log_handle = log_handle
        self.level = level
        self.logger = logging.getLogger(f"devstack.process.{name}")
        self.lines = 0

    async def run(self) -> None:
        split_line = False
        while True:
            try:
                raw = await self.stream.readuntil(b"\n")
            except asyncio.IncompleteReadError as exc:
                raw = exc.partial
            except asyncio.LimitOverrunError as exc:
                # longer than the reader limit; the bytes stay buffered until read here
                self._emit(self._decode(await self.stream.read(exc.consumed)))
                split_line = True
                continue
            if not raw:
                return
            line = self._decode(raw)
            if not (split_line and not line):
                self._emit(line)
            split_line = False

    @staticmethod
    def _decode(raw: bytes) -> str:
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")

    def _emit(self, line: str) -> None:
        self.lines += 1
        self.logger.log(self.level, "%s | %s", self.label, line)
        if self.log_handle is not None:
            self.log_handle.write(line + "\n")
            self.log_handle.flush()
