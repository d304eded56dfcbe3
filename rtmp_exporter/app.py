"""Application orchestrator — wires together all components."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from prometheus_client import CollectorRegistry

from rtmp_exporter.config.settings import load_config
from rtmp_exporter.exporter import RTMPCollector, StatsFetcher, build_mutators

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class BufferedLogHandler(logging.Handler):
    """In-memory log handler that stores recent entries for API access."""

    def __init__(self, capacity: int = 500) -> None:
        super().__init__()
        self._entries: deque[dict[str, str]] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        self._entries.append({
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self.format(record),
        })

    def get_entries(self, lines: int = 50) -> list[dict[str, str]]:
        """Return the most recent *lines* log entries."""
        if lines <= 0:
            return []
        entries = list(self._entries)
        return entries[-lines:]


class Application:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config_path: str | Path | None = None,
        overrides: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self.settings = load_config(config_path, overrides)
        self.fetcher = StatsFetcher(self.settings.stats)
        self.mutators = build_mutators(self.settings.mapping)
        self.collector = RTMPCollector(self.fetcher, self.mutators)
        self.registry = CollectorRegistry()
        self.registry.register(self.collector)
        self._api_server = None
        self._log_handler: BufferedLogHandler | None = None

    async def start(self) -> None:
        """Configure logging and serve /metrics until stopped."""
        self._setup_logging()
        try:
            await self._serve()
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        logger.info("Shutting down...")
        self.fetcher.close()
        if self._api_server:
            self._api_server.should_exit = True
        logger.info("Shutdown complete.")

    def create_api(self):
        from rtmp_exporter.api.server import create_api_app

        app = create_api_app(self.registry, source=self.fetcher.source)
        if self._log_handler is not None:
            app.state.log_handler = self._log_handler
        return app

    async def _serve(self) -> None:
        import uvicorn

        config = uvicorn.Config(
            self.create_api(),
            host=self.settings.api.host,
            port=self.settings.api.port,
            log_level="warning",
        )
        self._api_server = uvicorn.Server(config)
        logger.info("Serving metrics for %s on %s:%d",
                    self.fetcher.source,
                    self.settings.api.host, self.settings.api.port)
        await self._api_server.serve()

    def _setup_logging(self) -> None:
        logging.root.setLevel(self.settings.logging.level)

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.root.addHandler(stream_handler)

        # Buffered handler for the /logs endpoint
        self._log_handler = BufferedLogHandler()
        logging.root.addHandler(self._log_handler)

        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
