from __future__ import annotations

import pytest

from devstack.telemetry_forwarder_helpers import (
    OtlpFormatError,
    Signal,
    attributes_to_dict,
    build_request,
    decode_payload,
    split_request,
)
from tests.helpers.otlp_payloads import span_request


def test_split_request_yields_one_record_per_resource():
    payload = span_request(spans=3)
    payload["resourceSpans"].append(span_request(service="search")["resourceSpans"][0])

    records = split_request(Signal.TRACES, payload, received_at=12.5)

    assert len(records) == 2
    assert records[0].item_count == 3
    assert records[1].received_at == 12.5
    assert attributes_to_dict(records[1].resource["attributes"]) == {"service.name": "search"}


def test_build_request_reassembles_entries():
    payload = span_request()
    records = split_request(Signal.TRACES, payload)

    assert build_request(Signal.TRACES, records) == payload


def test_missing_signal_key_is_empty():
    assert split_request(Signal.LOGS, {"resourceSpans": []}) == []


@pytest.mark.parametrize(
    "payload",
    [
        {"resourceMetrics": {}},
        {"resourceMetrics": ["not-an-object"]},
        {"resourceMetrics": [{"resource": "nope"}]},
    ],
)
def test_split_request_rejects_malformed_shapes(payload):
    with pytest.raises(OtlpFormatError):
        split_request(Signal.METRICS, payload)


def test_decode_payload_rejects_bad_json_and_non_objects():
    with pytest.raises(OtlpFormatError, match="Malformed JSON"):
        decode_payload(b"{not json")
    with pytest.raises(OtlpFormatError, match="JSON object"):
        decode_payload(b"[1, 2]")


def test_attributes_to_dict_handles_any_value_kinds():
    attributes = [
        {"key": "s", "value": {"stringValue": "x"}},
        {"key": "b", "value": {"boolValue": True}},
        {"key": "i", "value": {"intValue": "42"}},
        {"key": "d", "value": {"doubleValue": 1.5}},
        {"key": "a", "value": {"arrayValue": {"values": [{"stringValue": "y"}, {"intValue": "7"}]}}},
        {"key": "kv", "value": {"kvlistValue": {"values": [{"key": "inner", "value": {"boolValue": False}}]}}},
    ]

    assert attributes_to_dict(attributes) == {
        "s": "x",
        "b": True,
        "i": 42,
        "d": 1.5,
        "a": ["y", 7],
        "kv": {"inner": False},
    }


def test_signal_codes_round_trip():
    assert [signal.code for signal in Signal] == [1, 2, 3]
    assert Signal.from_code(3) is Signal.LOGS
    with pytest.raises(ValueError):
        Signal.from_code(9)
