"""
Telemetry Forwarder

Receives OTLP/JSON telemetry on two local endpoints (framed TCP and HTTP),
tags every resource with fixed attributes, batches per signal and relays the
batches to the collector exposed through the port-forward tunnel. Batches the
upstream rejects are mirrored to the debug sink and dropped.
"""

from __future__ import annotations

import asyncio
import logging
import signal as signal_module
from functools import partial
from typing import Any, Dict, List, Optional

from .batching import BatchManager
from .errors import UpstreamUnavailableError
from .telemetry_forwarder_helpers import (
    DebugSink,
    ForwarderSettings,
    FramedReceiver,
    HttpReceiver,
    ResourceTagger,
    Signal,
    TelemetryRecord,
    UpstreamExporter,
    build_request,
    get_forwarder_settings,
    split_request,
)

logger = logging.getLogger(__name__)


def _record_weight(record: TelemetryRecord) -> int:
    # spans, data points or log records; an empty resource still counts once
    return max(1, record.item_count)


class TelemetryForwarder:
    def __init__(
        self,
        settings: Optional[ForwarderSettings] = None,
        *,
        exporter: Optional[UpstreamExporter] = None,
        sink: Optional[DebugSink] = None,
    ):
        self.settings = settings or get_forwarder_settings()
        self.tagger = ResourceTagger(self.settings.resource_attributes)
        self.exporter = exporter or UpstreamExporter(self.settings.upstream_endpoint, self.settings.upstream_timeout)
        self.sink = sink or DebugSink(self.settings.debug_verbosity)
        self.batches: Dict[Signal, BatchManager[TelemetryRecord]] = {
            signal: BatchManager(
                self.settings.batch_size,
                self.settings.batch_timeout,
                partial(self._flush, signal),
                name=f"otlp-{signal.value}",
                weight=_record_weight,
            )
            for signal in Signal
        }
        self.http_receiver = HttpReceiver(
            self.ingest, self.settings.bind_host, self.settings.http_port, self.settings.max_frame_bytes
        )
        self.framed_receiver = FramedReceiver(
            self.ingest, self.settings.bind_host, self.settings.framed_port, self.settings.max_frame_bytes
        )
        self.forwarded_records = 0

    async def ingest(self, signal: Signal, payload: Dict[str, Any]) -> int:
        """Split, tag and enqueue one export request; returns the number of resource records."""
        records = split_request(signal, payload)
        batch = self.batches[signal]
        for record in records:
            await batch.add_item(self.tagger.tag(record))
        return len(records)

    async def _flush(self, signal: Signal, records: List[TelemetryRecord]) -> None:
        try:
            await self.exporter.export(signal, build_request(signal, records))
        except UpstreamUnavailableError as exc:
            self.sink.emit(signal, records, exc.reason)
            return
        self.forwarded_records += len(records)

    async def start(self) -> None:
        await self.exporter.start()
        await self.framed_receiver.start()
        await self.http_receiver.start()
        logger.info(
            "Forwarding telemetry to %s (batch size %d, timeout %ss)",
            self.settings.upstream_endpoint,
            self.settings.batch_size,
            self.settings.batch_timeout,
        )

    async def stop(self) -> None:
        """Stop accepting input, flush every pending batch, release the upstream session."""
        await self.http_receiver.stop()
        await self.framed_receiver.stop()
        for batch in self.batches.values():
            await batch.close()
        await self.exporter.close()
        logger.info(
            "Telemetry forwarder stopped (%d record(s) forwarded, %d dropped)",
            self.forwarded_records,
            self.sink.dropped_records,
        )

    async def serve_forever(self, stop_event: Optional[asyncio.Event] = None) -> None:
        stop_event = stop_event or asyncio.Event()
        loop = asyncio.get_running_loop()
        installed = []
        for sig in (signal_module.SIGINT, signal_module.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except (NotImplementedError, RuntimeError):  # policy_guard: allow-silent-handler
                continue
            installed.append(sig)

        try:
            await self.start()
            await stop_event.wait()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.stop()


__all__ = ["Signal", "TelemetryForwarder", "TelemetryRecord"]
