"""Retrieval of the raw stat page from disk or over HTTP."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from rtmp_exporter.config.settings import StatsConfig

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """The stat page could not be retrieved."""


class StatsFetcher:
    """Reads the nginx_rtmp_module stat page.

    A configured file takes precedence over the URL. HTTP requests are
    bounded by the configured timeout.
    """

    def __init__(
        self,
        config: StatsConfig,
        client: httpx.Client | None = None,
    ) -> None:
        if not config.file and not config.url:
            raise ValueError("Either stats.url or stats.file must be set")
        self._config = config
        if client is None and not config.file:
            client = httpx.Client(timeout=config.timeout)
        self._client = client

    @property
    def source(self) -> str:
        return self._config.source

    def fetch(self) -> bytes:
        if self._config.file:
            return self._fetch_file(Path(self._config.file).expanduser())
        return self._fetch_url(self._config.url)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _fetch_file(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FetchError(f"opening file: {exc}") from exc

    def _fetch_url(self, url: str) -> bytes:
        if self._client is None:
            raise FetchError("fetcher is closed")
        try:
            response = self._client.get(url, timeout=self._config.timeout)
        except httpx.HTTPError as exc:
            raise FetchError(f"executing request: {exc}") from exc

        if response.is_error:
            raise FetchError(
                f"unexpected status {response.status_code} from {url}"
            )
        logger.debug("Fetched %d bytes from %s", len(response.content), url)
        return response.content
