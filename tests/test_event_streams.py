from __future__ import annotations

import fakeredis
import redis

from roundtable.core.events import MatchEvent
from roundtable.streams import EventStream, event_fields, publish_event, read_events


def test_stream_key_is_per_match() -> None:
    assert EventStream(match_id="abc").key == "match:abc:events"


def test_event_fields_are_flat_strings() -> None:
    event = MatchEvent.now(type="theft", turn=4, payload={"actor_id": 2, "victim_id": 5, "note": None})

    fields = event_fields(event)

    assert fields["type"] == "theft"
    assert fields["turn"] == "4"
    assert fields["actor_id"] == "2"
    assert fields["note"] == ""
    assert all(isinstance(v, str) for v in fields.values())


def test_publish_then_read_in_order() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    stream = EventStream(match_id="m1")

    publish_event(r=r, stream=stream, event=MatchEvent.now(type="elimination", turn=1, payload={"victim_id": 3}))
    publish_event(r=r, stream=stream, event=MatchEvent.now(type="victory", turn=2, payload={"winner_id": 1}))

    events = read_events(r=r, stream=stream)
    assert [e["type"] for e in events] == ["elimination", "victory"]
    assert events[1]["winner_id"] == "1"
    assert read_events(r=r, stream=EventStream(match_id="other")) == []


def test_presenter_survives_redis_outage(monkeypatch) -> None:
    from uuid import uuid4

    from roundtable.match_store import WebPresenter
    from roundtable.websocket_hub import MatchWebSocketHub

    r = fakeredis.FakeRedis(decode_responses=True)

    def _boom(*args, **kwargs):
        raise redis.ConnectionError("down")

    monkeypatch.setattr(r, "xadd", _boom)
    presenter = WebPresenter(match_id=uuid4(), hub=MatchWebSocketHub(), r=r)

    presenter.notify(MatchEvent.now(type="error", turn=1, payload={"reason": "x"}))

    assert [e.type for e in presenter.recent_events] == ["error"]


def test_redis_url_from_env(monkeypatch) -> None:
    from roundtable.infra.redis_client import create_redis, get_redis_url

    monkeypatch.delenv("ROUNDTABLE_REDIS_URL", raising=False)
    assert get_redis_url() is None
    assert create_redis() is None

    monkeypatch.setenv("ROUNDTABLE_REDIS_URL", "redis://localhost:6379/0")
    assert get_redis_url() == "redis://localhost:6379/0"
