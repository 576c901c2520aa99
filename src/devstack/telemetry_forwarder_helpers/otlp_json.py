"""OTLP/JSON request decoding, splitting and re-assembly."""

from __future__ import annotations

import time
from typing import Any, Dict, Iterable, List, Optional

import orjson

from .types import Signal, TelemetryRecord


class OtlpFormatError(ValueError):
    """Raised when a payload is not a valid OTLP/JSON export request."""


def decode_payload(raw: bytes) -> Dict[str, Any]:
    try:
        payload = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise OtlpFormatError(f"Malformed JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise OtlpFormatError(f"Export request must be a JSON object, got {type(payload).__name__}")
    return payload


def split_request(signal: Signal, payload: Dict[str, Any], received_at: Optional[float] = None) -> List[TelemetryRecord]:
    """Split an export request into one record per resource entry."""
    entries = payload.get(signal.resource_key)
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise OtlpFormatError(f"{signal.resource_key} must be a list")

    stamp = time.time() if received_at is None else received_at
    records = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise OtlpFormatError(f"{signal.resource_key} entries must be objects")
        resource = entry.get("resource") or {}
        if not isinstance(resource, dict):
            raise OtlpFormatError("resource must be an object")
        body = {key: value for key, value in entry.items() if key != "resource"}
        records.append(TelemetryRecord(signal=signal, resource=dict(resource), body=body, received_at=stamp))
    return records


def build_request(signal: Signal, records: Iterable[TelemetryRecord]) -> Dict[str, Any]:
    return {signal.resource_key: [record.to_resource_entry() for record in records]}


def string_attribute(key: str, value: str) -> Dict[str, Any]:
    return {"key": key, "value": {"stringValue": value}}


def attributes_to_dict(attributes: Optional[Iterable[Dict[str, Any]]]) -> Dict[str, Any]:
    """Flatten an OTLP/JSON ``KeyValue`` list into plain Python values."""
    result: Dict[str, Any] = {}
    for kv in attributes or []:
        if not isinstance(kv, dict) or "key" not in kv:
            continue
        result[kv["key"]] = any_value(kv.get("value") or {})
    return result


def any_value(value: Dict[str, Any]) -> Any:
    if "stringValue" in value:
        return value["stringValue"]
    if "boolValue" in value:
        return value["boolValue"]
    if "intValue" in value:
        # int64 is encoded as a JSON string in OTLP/JSON
        return int(value["intValue"])
    if "doubleValue" in value:
        return value["doubleValue"]
    if "arrayValue" in value:
        return [any_value(item) for item in (value["arrayValue"].get("values") or [])]
    if "kvlistValue" in value:
        return attributes_to_dict(value["kvlistValue"].get("values"))
    if "bytesValue" in value:
        return value["bytesValue"]
    return None
