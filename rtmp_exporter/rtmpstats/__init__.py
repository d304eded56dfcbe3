"""Parsing, remapping and aggregation of nginx_rtmp_module stat pages."""

from rtmp_exporter.rtmpstats.decoder import decode, decode_bytes
from rtmp_exporter.rtmpstats.errors import (
    CollisionError,
    DecodeError,
    MutationError,
    ScalarParseError,
    StatsError,
    StructuralDecodeError,
)
from rtmp_exporter.rtmpstats.models import (
    Application,
    AudioMeta,
    Client,
    ServerStats,
    Stream,
    VideoMeta,
)
from rtmp_exporter.rtmpstats.mutations import (
    Mutator,
    apply_mutators,
    with_client_mapper,
    with_stream_mapper,
)

__all__ = [
    "Application",
    "AudioMeta",
    "Client",
    "CollisionError",
    "DecodeError",
    "Mutator",
    "MutationError",
    "ScalarParseError",
    "ServerStats",
    "StatsError",
    "Stream",
    "StructuralDecodeError",
    "VideoMeta",
    "apply_mutators",
    "decode",
    "decode_bytes",
    "with_client_mapper",
    "with_stream_mapper",
]
