"""Remapping of stream and client identifiers after decoding.

RTMP servers commonly use secret keys as stream names or expose client ids
that operators don't want as metric labels. Mutators rewrite those values
once the whole page has been decoded.

Clients whose ids collide after mapping are aggregated with ``Client.add``;
the resulting ``entries_count`` tells how many records were merged.
Streams may not collide within an application.

A mutator never leaves the stats half-rewritten: replacement lists are
built for every scope first and only assigned once all of them succeeded.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Iterable

from rtmp_exporter.rtmpstats.errors import CollisionError
from rtmp_exporter.rtmpstats.models import Client, ServerStats, Stream

Mutator = Callable[[ServerStats], None]
StreamMapper = Callable[[str], str]
ClientMapper = Callable[[str, str], str]


def apply_mutators(stats: ServerStats, mutators: Iterable[Mutator]) -> None:
    """Apply *mutators* in order, stopping at the first one that raises.

    Earlier mutators are not rolled back.
    """
    for mutator in mutators:
        mutator(stats)


def with_stream_mapper(mapper: StreamMapper) -> Mutator:
    """Rename every stream with *mapper*.

    Raises CollisionError if two streams of the same application end up
    with the same name. Identical names in different applications are fine.
    """
    def mutate(stats: ServerStats) -> None:
        replacements: list[list[Stream]] = []
        for app in stats.applications:
            transformed: list[Stream] = []
            seen: set[str] = set()
            for stream in app.streams:
                name = mapper(stream.name)
                if name in seen:
                    raise CollisionError(name, app.name)
                seen.add(name)
                transformed.append(dataclasses.replace(stream, name=name))
            replacements.append(transformed)

        for app, streams in zip(stats.applications, replacements):
            app.streams = streams

    return mutate


def with_client_mapper(mapper: ClientMapper) -> Mutator:
    """Rewrite every client id with ``mapper(stream_name, client_id)``.

    Clients of one stream that map to the same id are merged in encounter
    order; the merged client takes the position of the first one.
    """
    def mutate(stats: ServerStats) -> None:
        replacements: list[tuple[Stream, list[Client]]] = []
        for app in stats.applications:
            for stream in app.streams:
                replacements.append((stream, _aggregate(stream, mapper)))

        for stream, clients in replacements:
            stream.clients = clients

    return mutate


def _aggregate(stream: Stream, mapper: ClientMapper) -> list[Client]:
    aggregated: list[Client] = []
    index_by_id: dict[str, int] = {}
    for client in stream.clients:
        client = dataclasses.replace(client, id=mapper(stream.name, client.id))
        index = index_by_id.get(client.id)
        if index is None:
            index_by_id[client.id] = len(aggregated)
            aggregated.append(client)
        else:
            aggregated[index] = aggregated[index].add(client)
    return aggregated
