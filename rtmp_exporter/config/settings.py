"""YAML config loader with environment variable expansion."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


def _expand_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""
    pattern = re.compile(r"\$\{([^}]+)\}")
    def replacer(match: re.Match) -> str:
        var = match.group(1)
        return os.environ.get(var, match.group(0))
    return pattern.sub(replacer, value)


def _walk_and_expand(obj: object) -> object:
    """Recursively expand environment variables in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_expand(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_expand(item) for item in obj]
    return obj


class StatsConfig(BaseModel):
    url: str = ""
    file: str | None = None   # read from disk instead of url
    timeout: float = 5.0      # seconds, url only

    @property
    def source(self) -> str:
        return self.file or self.url


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value


class RewriteRule(BaseModel):
    pattern: str
    replacement: str
    stream: str | None = None   # client rules only: restrict to stream names

    @field_validator("pattern", "stream")
    @classmethod
    def _valid_regex(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"Invalid regex: {exc}") from exc
        return value

    @model_validator(mode="after")
    def _valid_replacement(self) -> RewriteRule:
        # group references in the template are resolved against the pattern
        try:
            re.compile(self.pattern).sub(self.replacement, "")
        except (re.error, IndexError) as exc:
            raise ValueError(f"Invalid replacement: {exc}") from exc
        return self


class MappingConfig(BaseModel):
    streams: list[RewriteRule] = Field(default_factory=list)
    clients: list[RewriteRule] = Field(default_factory=list)


class Settings(BaseModel):
    stats: StatsConfig = Field(default_factory=StatsConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    mapping: MappingConfig = Field(default_factory=MappingConfig)


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
) -> Settings:
    """Load configuration from a YAML file, falling back to defaults.

    *overrides* maps section name to field values (typically from the
    command line) and wins over the file.
    """
    if path is None:
        candidates = [
            Path("config.yaml"),
            Path("config.yml"),
            Path.home() / ".rtmp_exporter" / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    raw: dict[str, Any] = {}
    if path is not None:
        with open(Path(path)) as f:
            raw = yaml.safe_load(f) or {}
        raw = _walk_and_expand(raw)

    for section, values in (overrides or {}).items():
        values = {k: v for k, v in values.items() if v is not None}
        if values:
            raw[section] = {**(raw.get(section) or {}), **values}

    return Settings.model_validate(raw)
