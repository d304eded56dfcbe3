"""Build identifier mutators from configured rewrite rules."""

from __future__ import annotations

import re

from rtmp_exporter.config.settings import MappingConfig, RewriteRule
from rtmp_exporter.rtmpstats.mutations import (
    ClientMapper,
    Mutator,
    StreamMapper,
    with_client_mapper,
    with_stream_mapper,
)


class _CompiledRule:
    def __init__(self, rule: RewriteRule) -> None:
        self.pattern = re.compile(rule.pattern)
        self.replacement = rule.replacement
        self.stream = re.compile(rule.stream) if rule.stream is not None else None

    def rewrite(self, value: str) -> str | None:
        match = self.pattern.fullmatch(value)
        if match is None:
            return None
        return match.expand(self.replacement)


def _first_match(rules: list[_CompiledRule], value: str) -> str:
    for rule in rules:
        result = rule.rewrite(value)
        if result is not None:
            return result
    return value


def stream_mapper(rules: list[RewriteRule]) -> StreamMapper:
    compiled = [_CompiledRule(r) for r in rules]

    def mapper(name: str) -> str:
        return _first_match(compiled, name)
    return mapper


def client_mapper(rules: list[RewriteRule]) -> ClientMapper:
    compiled = [_CompiledRule(r) for r in rules]

    def mapper(stream: str, client_id: str) -> str:
        applicable = [
            r for r in compiled
            if r.stream is None or r.stream.fullmatch(stream)
        ]
        return _first_match(applicable, client_id)
    return mapper


def build_mutators(config: MappingConfig) -> list[Mutator]:
    """Return mutators for *config*: streams are renamed before clients.

    Client rules with a ``stream`` filter therefore match renamed streams.
    """
    mutators: list[Mutator] = []
    if config.streams:
        mutators.append(with_stream_mapper(stream_mapper(config.streams)))
    if config.clients:
        mutators.append(with_client_mapper(client_mapper(config.clients)))
    return mutators
