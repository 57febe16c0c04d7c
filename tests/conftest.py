from __future__ import annotations

from collections.abc import Callable, Generator

import pytest

from roundtable.core.participant import Category, Participant


@pytest.fixture()
def make_participant() -> Callable[..., Participant]:
    """Factory for participants with sequential ids unless one is given."""

    counter = iter(range(1, 10_000))

    def _make(
        name: str | None = None,
        *,
        wealth: int = 100,
        followers: int = 50,
        category: Category = Category.merchant,
        id: int | None = None,
    ) -> Participant:
        pid = id if id is not None else next(counter)
        return Participant(id=pid, name=name or f"P{pid}", wealth=wealth, followers=followers, category=category)

    return _make


@pytest.fixture()
def scenario_four(make_participant: Callable[..., Participant]) -> list[Participant]:
    """A(100w,50f,X), B(100w,50f,Y), C(50w,20f,X), D(200w,80f,Y) in seating order."""

    x, y = Category.merchant, Category.artisan
    return [
        make_participant("A", wealth=100, followers=50, category=x),
        make_participant("B", wealth=100, followers=50, category=y),
        make_participant("C", wealth=50, followers=20, category=x),
        make_participant("D", wealth=200, followers=80, category=y),
    ]


@pytest.fixture()
def client_and_registry():
    """FastAPI TestClient wired to a fresh registry with no pacing delay.

    Each test gets its own registry, so running matches never leak between tests.
    """

    import fakeredis
    from fastapi.testclient import TestClient

    from roundtable.api.deps import get_registry
    from roundtable.main import app
    from roundtable.match_store import MatchRegistry
    from roundtable.settings import LoopSettings

    r = fakeredis.FakeRedis(decode_responses=True)
    registry = MatchRegistry(settings=LoopSettings(pace_seconds=0.0), r=r)

    def _override() -> Generator[MatchRegistry, None, None]:
        yield registry

    app.dependency_overrides[get_registry] = _override
    with TestClient(app) as c:
        yield c, registry, r
        registry.shutdown()
    app.dependency_overrides.clear()
