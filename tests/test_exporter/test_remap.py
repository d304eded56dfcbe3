"""Tests for config-driven identifier rewriting."""

from __future__ import annotations

from rtmp_exporter.config.settings import MappingConfig, RewriteRule
from rtmp_exporter.exporter.remap import build_mutators, client_mapper, stream_mapper
from rtmp_exporter.rtmpstats import decode_bytes


def test_stream_mapper_first_full_match_wins():
    mapper = stream_mapper([
        RewriteRule(pattern=r"(?P<name>[a-z]+)_[0-9a-f]{4}", replacement=r"\g<name>"),
        RewriteRule(pattern=r".*", replacement="other"),
    ])
    assert mapper("camera_beef") == "camera"
    assert mapper("camera_beef_x") == "other"


def test_stream_mapper_requires_full_match():
    mapper = stream_mapper([RewriteRule(pattern="key", replacement="hidden")])
    assert mapper("key") == "hidden"
    assert mapper("secret_key") == "secret_key"


def test_client_mapper_stream_filter():
    mapper = client_mapper([
        RewriteRule(pattern=r".*", replacement="viewer", stream=r"private_.*"),
    ])
    assert mapper("private_room", "17") == "viewer"
    assert mapper("public", "17") == "17"


def test_build_mutators_empty_config():
    assert build_mutators(MappingConfig()) == []


def test_build_mutators_renames_streams_before_clients(stats_bytes):
    config = MappingConfig(
        streams=[RewriteRule(pattern="streamName", replacement="private_main")],
        clients=[RewriteRule(pattern=r"\d+", replacement="viewer", stream="private_.*")],
    )
    mutators = build_mutators(config)
    assert len(mutators) == 2

    stats = decode_bytes(stats_bytes, *mutators)
    stream = stats.applications[0].streams[0]
    assert stream.name == "private_main"
    assert [(c.id, c.entries_count) for c in stream.clients] == [("viewer", 4)]
    assert stream.publisher_id == "viewer"
