from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from devstack.process_models import HealthCheckSpec
from devstack.readiness_gate import ProbeOutcome, ProbeResult, ReadinessGate

NOT_READY = ProbeResult(ProbeOutcome.NOT_READY, status=503, detail="status='starting'")
REFUSED = ProbeResult(ProbeOutcome.CONNECTION_ERROR, detail="ClientConnectorError")
READY = ProbeResult(ProbeOutcome.READY, status=200)


@pytest.mark.asyncio
@pytest.mark.parametrize("ready_on", [1, 2, 5])
async def test_succeeds_after_exactly_n_polls(ready_on):
    probe = AsyncMock(side_effect=[NOT_READY] * (ready_on - 1) + [READY])
    sleep = AsyncMock()
    gate = ReadinessGate(HealthCheckSpec(url="https://backend.test/ready"), probe=probe, sleep=sleep)

    attempts = await gate.wait()

    assert attempts == ready_on
    assert probe.await_count == ready_on
    assert sleep.await_count == ready_on - 1


@pytest.mark.asyncio
async def test_sleeps_for_configured_interval():
    probe = AsyncMock(side_effect=[REFUSED, READY])
    sleep = AsyncMock()
    gate = ReadinessGate(HealthCheckSpec(url="https://backend.test/ready", poll_interval=0.25), probe=probe, sleep=sleep)

    await gate.wait()

    sleep.assert_awaited_once_with(0.25)


@pytest.mark.asyncio
async def test_logs_connection_errors_and_not_ready_distinctly(caplog):
    caplog.set_level(logging.INFO, logger="devstack.readiness_gate")
    probe = AsyncMock(side_effect=[REFUSED, NOT_READY, READY])
    gate = ReadinessGate(HealthCheckSpec(url="https://backend.test/ready"), probe=probe, sleep=AsyncMock(), name="frontend")

    await gate.wait()

    messages = [record.getMessage() for record in caplog.records]
    assert any("cannot reach" in message and "ClientConnectorError" in message for message in messages)
    assert any("not ready yet (HTTP 503" in message for message in messages)
    assert any("[frontend] ready after 3 poll(s)" in message for message in messages)
