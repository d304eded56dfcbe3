"""Prometheus collector exposing nginx_rtmp_module statistics."""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from prometheus_client.core import (
    CounterMetricFamily,
    GaugeMetricFamily,
    Metric,
)
from prometheus_client.registry import Collector

from rtmp_exporter.exporter.fetch import FetchError, StatsFetcher
from rtmp_exporter.rtmpstats import (
    Mutator,
    ServerStats,
    StatsError,
    Stream,
    decode_bytes,
)

logger = logging.getLogger(__name__)

STREAM_LABELS = ["application", "stream", "publisher"]
CLIENT_LABELS = ["application", "stream", "client"]
INFO_LABELS = STREAM_LABELS + [
    "video_resolution", "frame_rate", "video_codec",
    "audio_codec", "audio_channels", "audio_sample_rate",
]


class RTMPCollector(Collector):
    """Scrapes the stat page on every collect() and reports it as metrics.

    Any fetch or decode failure is logged and nothing is reported for that
    scrape.
    """

    def __init__(
        self,
        fetcher: StatsFetcher,
        mutators: Sequence[Mutator] = (),
    ) -> None:
        self._fetcher = fetcher
        self._mutators = list(mutators)

    def get_stats(self) -> ServerStats:
        data = self._fetcher.fetch()
        return decode_bytes(data, *self._mutators)

    def collect(self) -> Iterator[Metric]:
        try:
            stats = self.get_stats()
        except (FetchError, StatsError) as exc:
            logger.error("failed to get stats from %s: %s",
                         self._fetcher.source, exc)
            return

        logger.debug("Collected %d applications from %s",
                     len(stats.applications), self._fetcher.source)
        yield from build_metrics(stats)


def build_metrics(stats: ServerStats) -> list[Metric]:
    """Translate a finalized ServerStats tree into metric families."""
    build_info = GaugeMetricFamily(
        "rtmp_nginx_build_info", "Info about the running nginx server",
        labels=["nginx_version", "nginx_rtmp_version", "compiler", "built"],
    )
    build_info.add_metric([
        stats.nginx_version, stats.nginx_rtmp_version, stats.compiler,
        stats.built.isoformat() if stats.built else "",
    ], 1)

    metrics: list[Metric] = [
        build_info,
        GaugeMetricFamily(
            "rtmp_server_uptime_seconds", "Uptime of the server in seconds",
            value=stats.uptime.total_seconds(),
        ),
        CounterMetricFamily(
            "rtmp_server_connections_accepted",
            "Total amount of connections accepted by the server",
            value=stats.accepted,
        ),
        GaugeMetricFamily(
            "rtmp_server_bitrate_in", "Current incoming bitrate to the server",
            value=stats.bitrate_in,
        ),
        GaugeMetricFamily(
            "rtmp_server_bitrate_out", "Current outgoing bitrate from the server",
            value=stats.bitrate_out,
        ),
        CounterMetricFamily(
            "rtmp_server_bytes_read", "Total amount of bytes read by the server",
            value=stats.bytes_in,
        ),
        CounterMetricFamily(
            "rtmp_server_bytes_sent", "Total amount of bytes sent by the server",
            value=stats.bytes_out,
        ),
    ]

    stream_uptime = GaugeMetricFamily(
        "rtmp_stream_uptime_seconds", "Uptime of the stream in seconds",
        labels=STREAM_LABELS,
    )
    stream_bitrate_in = GaugeMetricFamily(
        "rtmp_stream_bitrate_in",
        "Current incoming bitrate for the given stream",
        labels=STREAM_LABELS,
    )
    stream_bitrate_out = GaugeMetricFamily(
        "rtmp_stream_bitrate_out",
        "Current outgoing bitrate for the given stream",
        labels=STREAM_LABELS,
    )
    stream_bitrate_video = GaugeMetricFamily(
        "rtmp_stream_bitrate_video",
        "Current video bitrate for the given stream",
        labels=STREAM_LABELS,
    )
    stream_bitrate_audio = GaugeMetricFamily(
        "rtmp_stream_bitrate_audio",
        "Current audio bitrate for the given stream",
        labels=STREAM_LABELS,
    )
    stream_rx = CounterMetricFamily(
        "rtmp_stream_bytes_read",
        "Total amount of bytes read for the given stream",
        labels=STREAM_LABELS,
    )
    stream_tx = CounterMetricFamily(
        "rtmp_stream_bytes_sent",
        "Total amount of bytes sent by the given stream",
        labels=STREAM_LABELS,
    )
    stream_clients = GaugeMetricFamily(
        "rtmp_stream_current_clients",
        "Current number of clients connected to the given stream",
        labels=STREAM_LABELS,
    )
    stream_info = GaugeMetricFamily(
        "rtmp_stream_info", "Info for a specific stream", labels=INFO_LABELS,
    )

    client_uptime = GaugeMetricFamily(
        "rtmp_client_uptime_seconds",
        "Connection uptime of the given client in seconds",
        labels=CLIENT_LABELS,
    )
    client_dropped = CounterMetricFamily(
        "rtmp_client_dropped_frames",
        "Total amount of frames dropped for the given client",
        labels=CLIENT_LABELS,
    )
    client_connections = GaugeMetricFamily(
        "rtmp_client_connections",
        "Number of raw connections aggregated into the given client",
        labels=CLIENT_LABELS,
    )

    for app in stats.applications:
        for stream in app.streams:
            labels = [app.name, stream.name, stream.publisher_id]
            stream_uptime.add_metric(labels, stream.uptime.total_seconds())
            stream_bitrate_in.add_metric(labels, stream.bitrate_in)
            stream_bitrate_out.add_metric(labels, stream.bitrate_out)
            stream_bitrate_video.add_metric(labels, stream.bitrate_video)
            stream_bitrate_audio.add_metric(labels, stream.bitrate_audio)
            stream_rx.add_metric(labels, stream.bytes_in)
            stream_tx.add_metric(labels, stream.bytes_out)
            stream_clients.add_metric(labels, stream.num_clients)
            stream_info.add_metric(labels + _media_labels(stream), 1)

            for client in stream.clients:
                client_labels = [app.name, stream.name, client.id]
                client_uptime.add_metric(
                    client_labels, client.uptime.total_seconds(),
                )
                client_dropped.add_metric(client_labels, client.dropped_frames)
                client_connections.add_metric(
                    client_labels, client.entries_count,
                )

    metrics.extend([
        stream_uptime, stream_bitrate_in, stream_bitrate_out,
        stream_bitrate_video, stream_bitrate_audio, stream_rx, stream_tx,
        stream_clients, stream_info,
        client_uptime, client_dropped, client_connections,
    ])
    return metrics


def _media_labels(stream: Stream) -> list[str]:
    video, audio = stream.video, stream.audio
    return [
        video.resolution if video else "",
        str(video.frame_rate) if video else "",
        video.codec if video else "",
        audio.codec if audio else "",
        str(audio.channels) if audio else "",
        str(audio.sample_rate) if audio else "",
    ]
