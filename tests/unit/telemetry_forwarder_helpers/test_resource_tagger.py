from __future__ import annotations

from devstack.telemetry_forwarder_helpers import ResourceTagger, Signal, attributes_to_dict, split_request
from tests.helpers.otlp_payloads import span_request

TAGS = {"deployment.environment": "development", "service.namespace": "backstage-dev"}


def test_inserts_missing_attributes():
    record = split_request(Signal.TRACES, span_request())[0]

    tagged = ResourceTagger(TAGS).tag(record)

    assert attributes_to_dict(tagged.resource["attributes"]) == {"service.name": "catalog", **TAGS}
    assert "deployment.environment" not in attributes_to_dict(record.resource["attributes"])


def test_never_overwrites_existing_keys():
    existing = [{"key": "deployment.environment", "value": {"stringValue": "staging"}}]
    record = split_request(Signal.TRACES, span_request(extra_attributes=existing))[0]

    tagged = ResourceTagger(TAGS).tag(record)

    attributes = attributes_to_dict(tagged.resource["attributes"])
    assert attributes["deployment.environment"] == "staging"
    assert attributes["service.namespace"] == "backstage-dev"


def test_resource_without_attributes_gets_tags():
    record = split_request(Signal.LOGS, {"resourceLogs": [{"scopeLogs": []}]})[0]

    tagged = ResourceTagger(TAGS).tag(record)

    assert attributes_to_dict(tagged.resource["attributes"]) == TAGS
