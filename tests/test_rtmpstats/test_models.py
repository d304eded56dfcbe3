"""Tests for the stats data models."""

from datetime import timedelta

from rtmp_exporter.rtmpstats.models import Client, Stream, VideoMeta


def test_client_defaults():
    client = Client()
    assert client.entries_count == 1
    assert client.active is False
    assert client.uptime == timedelta(0)


def test_client_add_keeps_first_informational_fields():
    a = Client(id="x", address="1.1.1.1", flash_version="A", page_url="p1",
               swf_url="s1", av_sync=-5)
    b = Client(id="x", address="2.2.2.2", flash_version="B", page_url="p2",
               swf_url="s2", av_sync=40)
    merged = a.add(b)
    assert (merged.address, merged.flash_version, merged.page_url,
            merged.swf_url, merged.av_sync) == ("1.1.1.1", "A", "p1", "s1", -5)


def test_client_add_takes_most_advanced_times():
    a = Client(uptime=timedelta(seconds=5), timestamp=timedelta(seconds=50))
    b = Client(uptime=timedelta(seconds=9), timestamp=timedelta(seconds=10))
    merged = a.add(b)
    assert merged.uptime == timedelta(seconds=9)
    assert merged.timestamp == timedelta(seconds=50)


def test_client_add_ors_flags_and_sums_counts():
    a = Client(publishing=True, dropped_frames=3, entries_count=2)
    b = Client(active=True, dropped_frames=4)
    merged = a.add(b)
    assert merged.active is True
    assert merged.publishing is True
    assert merged.dropped_frames == 7
    assert merged.entries_count == 3


def test_publisher_is_first_publishing_client():
    stream = Stream(clients=[
        Client(id="A"),
        Client(id="B", publishing=True),
        Client(id="C", publishing=True),
    ])
    assert stream.publisher is stream.clients[1]
    assert stream.publisher_id == "B"


def test_publisher_absent():
    stream = Stream(clients=[Client(id="A")])
    assert stream.publisher is None
    assert stream.publisher_id == ""


def test_video_resolution():
    assert VideoMeta(width=1280, height=720).resolution == "1280x720"
