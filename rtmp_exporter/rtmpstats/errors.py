"""Errors raised while decoding and mutating RTMP stats."""

from __future__ import annotations


class StatsError(ValueError):
    """Base class for every error raised by rtmpstats."""


class DecodeError(StatsError):
    """The status document could not be decoded."""


class StructuralDecodeError(DecodeError):
    """Malformed XML or a document without the expected structure."""


class ScalarParseError(DecodeError):
    """A field's raw text does not match its expected format."""

    def __init__(self, message: str, *, value: str = "", field: str = "") -> None:
        self.value = value
        self.field = field
        if field:
            message = f"<{field}>: {message}"
        super().__init__(message)


class MutationError(StatsError):
    """A mutator could not be applied to decoded stats."""


class CollisionError(MutationError):
    """Two streams in one application were mapped to the same name."""

    def __init__(self, name: str, application: str = "") -> None:
        self.name = name
        self.application = application
        super().__init__(f"a stream with the name {name} already exists")
