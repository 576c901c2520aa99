"""
Framed TCP ingestion endpoint.

Each frame is ``1-byte signal code | 4-byte big-endian length | payload`` where
the payload is an OTLP/JSON export request. Frames above the size limit close
the connection; frames with an unknown signal code are skipped.
"""

from __future__ import annotations

import asyncio
import logging
import struct
from typing import Any, Awaitable, Callable, Dict, Optional

from .otlp_json import OtlpFormatError, decode_payload
from .types import Signal

logger = logging.getLogger(__name__)

FRAME_HEADER = struct.Struct(">BI")

IngestCallback = Callable[[Signal, Dict[str, Any]], Awaitable[int]]


def encode_frame(signal: Signal, payload: bytes) -> bytes:
    return FRAME_HEADER.pack(signal.code, len(payload)) + payload


class FramedReceiver:
    def __init__(self, ingest: IngestCallback, host: str, port: int, max_frame_bytes: int):
        self.ingest = ingest
        self.host = host
        self.port = port
        self.max_frame_bytes = max_frame_bytes
        self._server: Optional[asyncio.AbstractServer] = None
        self.frames_received = 0

    async def start(self) -> None:
        self._server = await asyncio.start_server(self.handle_connection, self.host, self.port)
        logger.info("Framed OTLP receiver listening on %s:%s", self.host, self.bound_port)

    @property
    def bound_port(self) -> Optional[int]:
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        try:
            while await self._read_frame(reader, peer):
                pass
        except (ConnectionError, OSError) as exc:  # policy_guard: allow-silent-handler
            logger.debug("Framed connection from %s dropped: %s", peer, exc)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):  # policy_guard: allow-silent-handler
                pass

    async def _read_frame(self, reader: asyncio.StreamReader, peer: Any) -> bool:
        """Read and dispatch one frame; False ends the connection."""
        try:
            header = await reader.readexactly(FRAME_HEADER.size)
        except asyncio.IncompleteReadError as exc:
            if exc.partial:
                logger.warning("Truncated frame header from %s", peer)
            return False

        code, length = FRAME_HEADER.unpack(header)
        if length > self.max_frame_bytes:
            logger.warning(
                "Frame of %d bytes from %s exceeds limit of %d; closing connection", length, peer, self.max_frame_bytes
            )
            return False

        try:
            payload = await reader.readexactly(length)
        except asyncio.IncompleteReadError:
            logger.warning("Truncated frame payload from %s", peer)
            return False

        self.frames_received += 1
        try:
            signal = Signal.from_code(code)
        except ValueError:
            logger.warning("Skipping frame with unknown signal code %d from %s", code, peer)
            return True

        try:
            await self.ingest(signal, decode_payload(payload))
        except OtlpFormatError as exc:
            logger.warning("Rejected %s frame from %s: %s", signal.value, peer, exc)
        return True
