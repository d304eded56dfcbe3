"""FastAPI server exposing the Prometheus metrics endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from rtmp_exporter import __version__


def create_api_app(registry: CollectorRegistry, source: str = "") -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="RTMP Exporter",
        description="Prometheus metrics for nginx_rtmp_module",
        version=__version__,
    )

    # Sync handler: collect() blocks on the stat page fetch.
    @app.get("/metrics")
    def metrics() -> Response:
        return Response(
            content=generate_latest(registry),
            media_type=CONTENT_TYPE_LATEST,
        )

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "source": source}

    @app.get("/logs")
    async def get_logs(lines: int = 50) -> list[dict[str, str]]:
        handler = getattr(app.state, "log_handler", None)
        if handler is None:
            return []
        return handler.get_entries(lines)

    return app
