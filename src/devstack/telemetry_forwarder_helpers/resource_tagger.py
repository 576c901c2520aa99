"""Insert fixed resource attributes without overwriting existing keys."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Mapping

from .otlp_json import string_attribute
from .types import TelemetryRecord


class ResourceTagger:
    def __init__(self, attributes: Mapping[str, str]):
        self.attributes: Dict[str, str] = dict(attributes)

    def tag(self, record: TelemetryRecord) -> TelemetryRecord:
        existing = list(record.resource.get("attributes") or [])
        present = {kv.get("key") for kv in existing if isinstance(kv, dict)}
        additions = [string_attribute(key, value) for key, value in self.attributes.items() if key not in present]
        if not additions:
            return record
        resource = dict(record.resource)
        resource["attributes"] = existing + additions
        return replace(record, resource=resource)
