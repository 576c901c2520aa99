"""Local diagnostic sink for batches the upstream could not accept."""

from __future__ import annotations

import logging
from typing import Sequence

import orjson

from .otlp_json import attributes_to_dict
from .types import Signal, TelemetryRecord

logger = logging.getLogger(__name__)

_MAX_DETAIL_BYTES = 4096


class DebugSink:
    """Mirrors dropped batches into the log; ``detailed`` also dumps each resource."""

    def __init__(self, verbosity: str = "basic"):
        self.verbosity = verbosity
        self.dropped_records = 0

    def emit(self, signal: Signal, records: Sequence[TelemetryRecord], reason: str) -> None:
        items = sum(record.item_count for record in records)
        self.dropped_records += len(records)
        logger.warning(
            "Dropped %s batch: %d resource(s), %d item(s) (%s)",
            signal.value,
            len(records),
            items,
            reason,
        )
        if self.verbosity != "detailed":
            return
        for record in records:
            attributes = attributes_to_dict(record.resource.get("attributes"))
            body = orjson.dumps(record.body)
            if len(body) > _MAX_DETAIL_BYTES:
                body = body[:_MAX_DETAIL_BYTES] + b"...<truncated>"
            logger.info("  resource=%s body=%s", attributes, body.decode("utf-8", errors="replace"))
