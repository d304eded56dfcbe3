"""Tests for stat page retrieval."""

from __future__ import annotations

import httpx
import pytest

from rtmp_exporter.config.settings import StatsConfig
from rtmp_exporter.exporter.fetch import FetchError, StatsFetcher


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_requires_a_source():
    with pytest.raises(ValueError, match="stats.url or stats.file"):
        StatsFetcher(StatsConfig())


def test_fetch_from_file(file_stats_config, stats_bytes):
    fetcher = StatsFetcher(file_stats_config)
    assert fetcher.fetch() == stats_bytes
    assert fetcher.source == file_stats_config.file


def test_file_wins_over_url(stats_path, stats_bytes):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("url should not be requested")

    config = StatsConfig(url="http://rtmp/stat", file=str(stats_path))
    fetcher = StatsFetcher(config, client=_client(handler))
    assert fetcher.fetch() == stats_bytes


def test_missing_file(tmp_path):
    fetcher = StatsFetcher(StatsConfig(file=str(tmp_path / "nope.xml")))
    with pytest.raises(FetchError, match="opening file"):
        fetcher.fetch()


def test_fetch_from_url(stats_bytes):
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=stats_bytes)

    fetcher = StatsFetcher(StatsConfig(url="http://rtmp/stat"), client=_client(handler))
    assert fetcher.fetch() == stats_bytes
    assert requested == ["http://rtmp/stat"]


def test_url_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, content=b"unavailable")

    fetcher = StatsFetcher(StatsConfig(url="http://rtmp/stat"), client=_client(handler))
    with pytest.raises(FetchError, match="503"):
        fetcher.fetch()


def test_url_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    fetcher = StatsFetcher(StatsConfig(url="http://rtmp/stat"), client=_client(handler))
    with pytest.raises(FetchError, match="executing request") as exc_info:
        fetcher.fetch()
    assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)


def test_close_is_idempotent(file_stats_config):
    fetcher = StatsFetcher(file_stats_config)
    fetcher.close()
    fetcher.close()


def test_url_client_created_up_front():
    fetcher = StatsFetcher(StatsConfig(url="http://rtmp/stat"))
    assert isinstance(fetcher._client, httpx.Client)
    fetcher.close()


def test_file_source_has_no_client(file_stats_config):
    assert StatsFetcher(file_stats_config)._client is None


def test_fetch_after_close(stats_bytes):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=stats_bytes)

    fetcher = StatsFetcher(StatsConfig(url="http://rtmp/stat"), client=_client(handler))
    fetcher.close()
    with pytest.raises(FetchError, match="closed"):
        fetcher.fetch()
