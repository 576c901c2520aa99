"""Helper modules for TelemetryForwarder."""

from .debug_sink import DebugSink
from .framed_receiver import FramedReceiver, encode_frame
from .http_receiver import HttpReceiver
from .otlp_json import OtlpFormatError, attributes_to_dict, build_request, decode_payload, split_request
from .resource_tagger import ResourceTagger
from .settings import ForwarderSettings, get_forwarder_settings
from .types import Signal, TelemetryRecord
from .upstream_exporter import UpstreamExporter

__all__ = [
    "DebugSink",
    "ForwarderSettings",
    "FramedReceiver",
    "HttpReceiver",
    "OtlpFormatError",
    "ResourceTagger",
    "Signal",
    "TelemetryRecord",
    "UpstreamExporter",
    "attributes_to_dict",
    "build_request",
    "decode_payload",
    "encode_frame",
    "get_forwarder_settings",
    "split_request",
]
