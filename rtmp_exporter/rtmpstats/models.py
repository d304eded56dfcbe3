"""Typed model of the nginx_rtmp_module statistics page.

The tree is Server -> Applications -> Streams -> Clients. Each level owns
its children; nothing points back up.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass
class Client:
    id: str = ""
    address: str = ""
    uptime: timedelta = timedelta(0)
    flash_version: str = ""
    page_url: str = ""
    swf_url: str = ""
    dropped_frames: int = 0
    av_sync: int = 0
    timestamp: timedelta = timedelta(0)
    active: bool = False
    publishing: bool = False
    # Number of raw client records combined into this one. Never read from
    # the wire: 1 after decoding, grows when a client mapper merges ids.
    entries_count: int = 1

    def add(self, other: Client) -> Client:
        """Return the result of folding *other* into this client.

        Dropped frames and entry counts are summed, the most advanced uptime
        and timestamp win, flags are OR-ed. Informational fields are kept
        from ``self``.
        """
        return Client(
            id=self.id,
            address=self.address,
            uptime=max(self.uptime, other.uptime),
            flash_version=self.flash_version,
            page_url=self.page_url,
            swf_url=self.swf_url,
            dropped_frames=self.dropped_frames + other.dropped_frames,
            av_sync=self.av_sync,
            timestamp=max(self.timestamp, other.timestamp),
            active=self.active or other.active,
            publishing=self.publishing or other.publishing,
            entries_count=self.entries_count + other.entries_count,
        )


@dataclass
class VideoMeta:
    width: int = 0
    height: int = 0
    frame_rate: int = 0
    codec: str = ""
    profile: str = ""
    compat: int = 0
    level: float = 0.0

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class AudioMeta:
    codec: str = ""
    profile: str = ""
    channels: int = 0
    sample_rate: int = 0


@dataclass
class Stream:
    name: str = ""
    uptime: timedelta = timedelta(0)
    bitrate_in: int = 0
    bitrate_out: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    bitrate_video: int = 0
    bitrate_audio: int = 0
    num_clients: int = 0
    publishing: bool = False
    active: bool = False
    video: VideoMeta | None = None
    audio: AudioMeta | None = None
    clients: list[Client] = field(default_factory=list)

    @property
    def publisher(self) -> Client | None:
        """First client flagged as publishing, if any."""
        for client in self.clients:
            if client.publishing:
                return client
        return None

    @property
    def publisher_id(self) -> str:
        publisher = self.publisher
        return publisher.id if publisher is not None else ""


@dataclass
class Application:
    name: str = ""
    streams: list[Stream] = field(default_factory=list)


@dataclass
class ServerStats:
    nginx_version: str = ""
    nginx_rtmp_version: str = ""
    compiler: str = ""
    built: datetime | None = None
    pid: int = 0
    # Whole seconds; the wire value is truncated when decoded.
    uptime: timedelta = timedelta(0)
    accepted: int = 0
    bitrate_in: int = 0
    bitrate_out: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    applications: list[Application] = field(default_factory=list)
