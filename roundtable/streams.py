from __future__ import annotations

from dataclasses import dataclass
from typing import cast

import redis

from roundtable.core.events import MatchEvent


@dataclass(frozen=True, slots=True)
class EventStream:
    match_id: str

    @property
    def key(self) -> str:
        return f"match:{self.match_id}:events"


def event_fields(event: MatchEvent) -> dict[str, str]:
    """Flatten an event into Redis Stream fields (strings only)."""

    fields = {"type": event.type, "turn": str(event.turn), "ts": event.ts.isoformat()}
    for k, v in event.payload.items():
        fields[str(k)] = "" if v is None else str(v)
    return fields


# Approximate cap on entries kept per match stream.
STREAM_MAXLEN = 1000


def publish_event(*, r: redis.Redis, stream: EventStream, event: MatchEvent, maxlen: int | None = STREAM_MAXLEN) -> str:
    """Append a match event to the match's event stream, trimming it to about `maxlen`."""

    stream_id = r.xadd(stream.key, event_fields(event), maxlen=maxlen, approximate=maxlen is not None)
    return cast(str, stream_id)


def read_events(*, r: redis.Redis, stream: EventStream, count: int = 100) -> list[dict[str, str]]:
    """Oldest-first event fields from the match's stream."""

    return [fields for _id, fields in r.xrange(stream.key, count=count)]
