"""Prometheus collector and stat page retrieval."""

from rtmp_exporter.exporter.collector import RTMPCollector, build_metrics
from rtmp_exporter.exporter.fetch import FetchError, StatsFetcher
from rtmp_exporter.exporter.remap import build_mutators

__all__ = [
    "FetchError",
    "RTMPCollector",
    "StatsFetcher",
    "build_metrics",
    "build_mutators",
]
