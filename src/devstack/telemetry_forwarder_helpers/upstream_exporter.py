"""POST re-assembled OTLP/JSON requests to the tunnelled collector."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
import orjson

from ..errors import UpstreamUnavailableError
from .types import Signal

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


class UpstreamExporter:
    """Holds one aiohttp session for the forwarder's lifetime."""

    def __init__(self, endpoint: str, timeout: float, session: Optional[aiohttp.ClientSession] = None):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    def url_for(self, signal: Signal) -> str:
        return f"{self.endpoint}/v1/{signal.value}"

    async def start(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True

    async def close(self) -> None:
        if self.session is None or not self._owns_session:
            return
        try:
            if not self.session.closed:
                await asyncio.wait_for(self.session.close(), timeout=5.0)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError):  # policy_guard: allow-silent-handler
            logger.warning("Error closing upstream HTTP session")
        finally:
            self.session = None

    async def export(self, signal: Signal, request: Dict[str, Any]) -> None:
        """
        Send one export request.

        Raises:
            UpstreamUnavailableError: Connection failure, timeout or non-2xx response
        """
        if self.session is None:
            await self.start()
        assert self.session is not None
        url = self.url_for(signal)
        try:
            async with self.session.post(url, data=orjson.dumps(request), headers=_JSON_HEADERS) as response:
                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise UpstreamUnavailableError(
                        url, reason=f"HTTP {response.status}: {body[:200]}", status=response.status
                    )
        except asyncio.TimeoutError as exc:
            raise UpstreamUnavailableError(url, reason="timeout") from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise UpstreamUnavailableError(url, reason=str(exc) or type(exc).__name__) from exc
        logger.debug("Exported %s request to %s", signal.value, url)
