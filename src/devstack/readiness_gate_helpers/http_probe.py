"""HTTP readiness probe matching a field in a JSON response body."""

import asyncio
import logging

import aiohttp
import orjson
from aiohttp import ClientError, ClientTimeout

from ..process_models import HealthCheckSpec
from .types import ProbeOutcome, ProbeResult

logger = logging.getLogger(__name__)

_MAX_DETAIL_CHARS = 120


class HttpReadinessProbe:
    """Issues one read-only GET per call and classifies the response."""

    def __init__(self, spec: HealthCheckSpec):
        self.spec = spec

    async def __call__(self) -> ProbeResult:
        timeout = ClientTimeout(total=self.spec.request_timeout)
        ssl_option = bool(self.spec.verify_tls)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self.spec.url, timeout=timeout, ssl=ssl_option) as response:
                    body = await response.text()
                    return self._classify(response.status, body)
        except asyncio.TimeoutError:  # Transient network/connection failure  # policy_guard: allow-silent-handler
            return ProbeResult(ProbeOutcome.CONNECTION_ERROR, detail="timeout")
        except (ClientError, OSError) as exc:  # policy_guard: allow-silent-handler
            return ProbeResult(ProbeOutcome.CONNECTION_ERROR, detail=type(exc).__name__)

    def _classify(self, status: int, body: str) -> ProbeResult:
        try:
            payload = orjson.loads(body) if body else None
        except orjson.JSONDecodeError:
            return ProbeResult(ProbeOutcome.NOT_READY, status=status, detail=f"non-JSON body: {body[:_MAX_DETAIL_CHARS]!r}")

        if isinstance(payload, dict) and str(payload.get(self.spec.expected_field)) == self.spec.expected_value:
            return ProbeResult(ProbeOutcome.READY, status=status)

        observed = payload.get(self.spec.expected_field) if isinstance(payload, dict) else None
        return ProbeResult(
            ProbeOutcome.NOT_READY,
            status=status,
            detail=f"{self.spec.expected_field}={observed!r}",
        )
