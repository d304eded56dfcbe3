"""Decode an nginx_rtmp_module stat page into ServerStats.

Each entity is described by a table of ``(tag path, attribute, decoder)``
rows. ``_decode_fields`` walks a table against one XML element; the tag
names are the ones emitted by the module's ``rtmp_stat`` handler and must
not be changed.
"""

from __future__ import annotations

import io
from datetime import timedelta
from typing import Any, BinaryIO, Callable
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from rtmp_exporter.rtmpstats.errors import ScalarParseError, StructuralDecodeError
from rtmp_exporter.rtmpstats.models import (
    Application,
    AudioMeta,
    Client,
    ServerStats,
    Stream,
    VideoMeta,
)
from rtmp_exporter.rtmpstats.mutations import Mutator, apply_mutators
from rtmp_exporter.rtmpstats.scalars import (
    is_present,
    parse_duration,
    parse_float,
    parse_int,
    parse_str,
    parse_timestamp,
    truncate_to_seconds,
)

FieldDecoder = Callable[[Element | None], Any]


def _text(parser: Callable[[str], Any], default: Any) -> FieldDecoder:
    """Decode an element's text with *parser*, or return *default* if absent."""
    def decode(element: Element | None) -> Any:
        if element is None:
            return default
        return parser(element.text or "")
    return decode


_STR = _text(parse_str, "")
_INT = _text(parse_int, 0)
_FLOAT = _text(parse_float, 0.0)
_DURATION = _text(parse_duration, timedelta(0))
_TIMESTAMP = _text(parse_timestamp, None)
_PRESENCE: FieldDecoder = is_present


_SERVER_FIELDS: tuple[tuple[str, str, FieldDecoder], ...] = (
    ("nginx_version", "nginx_version", _STR),
    ("nginx_rtmp_version", "nginx_rtmp_version", _STR),
    ("compiler", "compiler", _STR),
    ("built", "built", _TIMESTAMP),
    ("pid", "pid", _INT),
    ("uptime", "uptime", _DURATION),
    ("naccepted", "accepted", _INT),
    ("bw_in", "bitrate_in", _INT),
    ("bw_out", "bitrate_out", _INT),
    ("bytes_in", "bytes_in", _INT),
    ("bytes_out", "bytes_out", _INT),
)

_STREAM_FIELDS: tuple[tuple[str, str, FieldDecoder], ...] = (
    ("name", "name", _STR),
    ("time", "uptime", _DURATION),
    ("bw_in", "bitrate_in", _INT),
    ("bw_out", "bitrate_out", _INT),
    ("bytes_in", "bytes_in", _INT),
    ("bytes_out", "bytes_out", _INT),
    ("bw_video", "bitrate_video", _INT),
    ("bw_audio", "bitrate_audio", _INT),
    ("nclients", "num_clients", _INT),
    ("publishing", "publishing", _PRESENCE),
    ("active", "active", _PRESENCE),
)

# Relative to <meta><video>
_VIDEO_FIELDS: tuple[tuple[str, str, FieldDecoder], ...] = (
    ("width", "width", _INT),
    ("height", "height", _INT),
    ("frame_rate", "frame_rate", _INT),
    ("codec", "codec", _STR),
    ("profile", "profile", _STR),
    ("compat", "compat", _INT),
    ("level", "level", _FLOAT),
)

# Relative to <meta><audio>
_AUDIO_FIELDS: tuple[tuple[str, str, FieldDecoder], ...] = (
    ("codec", "codec", _STR),
    ("profile", "profile", _STR),
    ("channels", "channels", _INT),
    ("sample_rate", "sample_rate", _INT),
)

_CLIENT_FIELDS: tuple[tuple[str, str, FieldDecoder], ...] = (
    ("id", "id", _STR),
    ("address", "address", _STR),
    ("time", "uptime", _DURATION),
    ("flashver", "flash_version", _STR),
    ("pageurl", "page_url", _STR),
    ("swfurl", "swf_url", _STR),
    ("dropped", "dropped_frames", _INT),
    ("avsync", "av_sync", _INT),
    ("timestamp", "timestamp", _DURATION),
    ("active", "active", _PRESENCE),
    ("publishing", "publishing", _PRESENCE),
)


def _decode_fields(
    element: Element,
    fields: tuple[tuple[str, str, FieldDecoder], ...],
    scope: str,
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for path, attr, decoder in fields:
        try:
            values[attr] = decoder(element.find(path))
        except ScalarParseError as exc:
            raise ScalarParseError(
                str(exc), value=exc.value, field=f"{scope}/{path}",
            ) from exc
    return values


def _decode_client(element: Element) -> Client:
    client = Client(**_decode_fields(element, _CLIENT_FIELDS, "client"))
    client.entries_count = 1
    return client


def _decode_stream(element: Element) -> Stream:
    stream = Stream(**_decode_fields(element, _STREAM_FIELDS, "stream"))

    video = element.find("meta/video")
    if video is not None:
        stream.video = VideoMeta(
            **_decode_fields(video, _VIDEO_FIELDS, "stream/meta/video"),
        )
    audio = element.find("meta/audio")
    if audio is not None:
        stream.audio = AudioMeta(
            **_decode_fields(audio, _AUDIO_FIELDS, "stream/meta/audio"),
        )

    stream.clients = [_decode_client(c) for c in element.findall("client")]
    return stream


def _decode_application(element: Element) -> Application:
    return Application(
        name=_STR(element.find("name")),
        streams=[_decode_stream(s) for s in element.findall("live/stream")],
    )


def _decode_server(root: Element) -> ServerStats:
    stats = ServerStats(**_decode_fields(root, _SERVER_FIELDS, "rtmp"))
    # The module reports uptime with millisecond resolution, but only whole
    # seconds are meaningful for the server.
    stats.uptime = truncate_to_seconds(stats.uptime)
    stats.applications = [
        _decode_application(a) for a in root.findall("server/application")
    ]
    return stats


def decode(stream: BinaryIO, *mutators: Mutator) -> ServerStats:
    """Decode a stat page from a readable byte stream, then apply *mutators*.

    Raises DecodeError if the document can't be decoded and MutationError
    if one of the mutators fails. No partial result is returned.
    """
    try:
        root = ElementTree.parse(stream).getroot()
    except ElementTree.ParseError as exc:
        raise StructuralDecodeError(f"malformed stats document: {exc}") from exc

    stats = _decode_server(root)
    apply_mutators(stats, mutators)
    return stats


def decode_bytes(data: bytes, *mutators: Mutator) -> ServerStats:
    """Convenience wrapper around decode() for an in-memory document."""
    return decode(io.BytesIO(data), *mutators)
