"""HTTP ingestion endpoint: ``POST /v1/{traces,metrics,logs}`` with OTLP/JSON bodies."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import orjson
from aiohttp import web

from .otlp_json import OtlpFormatError, decode_payload
from .types import Signal

logger = logging.getLogger(__name__)

IngestCallback = Callable[[Signal, Dict[str, Any]], Awaitable[int]]

_SUCCESS_BODY = orjson.dumps({"partialSuccess": {}})


def _json_response(payload: Dict[str, Any], status: int) -> web.Response:
    return web.Response(body=orjson.dumps(payload), status=status, content_type="application/json")


class HttpReceiver:
    def __init__(self, ingest: IngestCallback, host: str, port: int, max_body_bytes: int):
        self.ingest = ingest
        self.host = host
        self.port = port
        self.max_body_bytes = max_body_bytes
        self._runner: Optional[web.AppRunner] = None

    def build_app(self) -> web.Application:
        app = web.Application(client_max_size=self.max_body_bytes)
        app.router.add_post("/v1/{signal}", self.handle_export)
        return app

    async def start(self) -> None:
        self._runner = web.AppRunner(self.build_app(), access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("HTTP OTLP receiver listening on %s:%s", self.host, self.bound_port)

    @property
    def bound_port(self) -> Optional[int]:
        if self._runner is None or not self._runner.addresses:
            return None
        return self._runner.addresses[0][1]

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    async def handle_export(self, request: web.Request) -> web.Response:
        raw_signal = request.match_info["signal"]
        try:
            signal = Signal(raw_signal)
        except ValueError:
            return _json_response({"error": f"Unknown signal {raw_signal!r}"}, status=404)

        if request.content_type != "application/json":
            return _json_response(
                {"error": f"Unsupported content type {request.content_type!r}; expected application/json"},
                status=415,
            )

        raw = await request.read()
        try:
            payload = decode_payload(raw)
            count = await self.ingest(signal, payload)
        except OtlpFormatError as exc:
            logger.warning("Rejected %s export from %s: %s", signal.value, request.remote, exc)
            return _json_response({"error": str(exc)}, status=400)

        logger.debug("Accepted %d %s resource(s) over HTTP", count, signal.value)
        return web.Response(body=_SUCCESS_BODY, status=200, content_type="application/json")
