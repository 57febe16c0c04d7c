from __future__ import annotations

import random
from collections import Counter

import pytest

from roundtable.engine import GameEngine
from roundtable.match_setup import MatchConfig


def _separable(engine: GameEngine) -> bool:
    counts = Counter(p.category for p in engine.table.participants())
    return max(counts.values()) * 2 <= engine.table.size()


def _assert_membership(engine: GameEngine, everyone: set[int]) -> None:
    seated = [p.id for p in engine.table.participants()]
    stacked = [p.id for p in engine.stack.contents()]

    assert len(seated) == len(set(seated))
    assert len(stacked) == len(set(stacked))
    assert not set(seated) & set(stacked)
    assert set(seated) | set(stacked) == everyone
    assert all(p.seated for p in engine.table.participants())
    assert not any(p.seated for p in engine.stack.contents())


@pytest.mark.parametrize("seed", range(40))
def test_random_match_keeps_invariants(seed: int) -> None:
    rng = random.Random(seed)
    participants = rng.randint(2, 12)
    config = MatchConfig(participants=participants, radius=rng.randint(1, participants - 1), seed=seed)
    engine = GameEngine.create(config)
    everyone = {p.id for p in engine.table.participants()}
    total = engine.state.totals()

    steps = 0
    while not engine.is_terminal and steps < 2000:
        if _separable(engine):
            assert engine.table.is_well_arranged()

        action = rng.choice(engine.legal_actions())
        assert engine.apply(action).ok
        steps += 1

        _assert_membership(engine, everyone)
        assert engine.state.totals() == total
        assert 0 <= engine.table.current_index < engine.table.size()

    assert engine.is_terminal
    assert engine.table.size() == 1
    assert engine.snapshot().winner is not None
