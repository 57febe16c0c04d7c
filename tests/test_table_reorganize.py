from __future__ import annotations

import random

from roundtable.core.participant import Category
from roundtable.core.table import Table
from roundtable.engine import GameEngine
from roundtable.match_setup import MatchConfig

X, Y, Z = Category.merchant, Category.artisan, Category.farmer


def _table(make_participant, cats: list[Category]) -> Table:
    return Table(radius=1, participants=[make_participant(category=c) for c in cats])


def test_already_separated_table_is_left_alone(make_participant) -> None:
    table = _table(make_participant, [X, Y, X, Y])
    before = [p.id for p in table.participants()]

    assert table.reorganize() == 0
    assert [p.id for p in table.participants()] == before


def test_pairs_are_separated(make_participant) -> None:
    table = _table(make_participant, [X, X, Y, Y])
    ids = {p.id for p in table.participants()}

    swaps = table.reorganize()

    assert swaps >= 1
    assert table.is_well_arranged()
    assert {p.id for p in table.participants()} == ids


def test_single_conflict_is_fixed_with_one_swap(make_participant) -> None:
    table = _table(make_participant, [X, X, Y, Z, Y])

    assert table.reorganize() == 1
    assert [p.category for p in table.participants()] == [X, Y, X, Z, Y]
    assert table.is_well_arranged()


def test_wraparound_conflict_is_detected_and_fixed(make_participant) -> None:
    table = _table(make_participant, [X, Y, Z, X])
    assert table.conflicts() == [(3, 0)]

    table.reorganize()

    assert table.is_well_arranged()


def test_unsatisfiable_arrangement_terminates(make_participant) -> None:
    # Three of four seats share a category; some conflict must remain.
    table = _table(make_participant, [X, X, X, Y])
    for _ in range(3):
        table.advance_turn()

    swaps = table.reorganize()

    assert swaps <= 2 * table.size()
    assert table.conflicts()
    assert 0 <= table.current_index < table.size()
    assert sorted(p.category for p in table.participants()) == sorted([X, X, X, Y])


def test_two_of_three_attempts_a_swap_and_keeps_everyone(make_participant) -> None:
    # B(Y) C(X) D(Y): D and B meet across the wrap and can't be separated.
    table = _table(make_participant, [Y, X, Y])
    ids = {p.id for p in table.participants()}

    swaps = table.reorganize()

    assert 1 <= swaps <= 6
    assert len(table.conflicts()) == 1
    assert {p.id for p in table.participants()} == ids


def test_reorganize_keeps_arena_and_order_in_sync(make_participant) -> None:
    rng = random.Random(7)
    cats = [rng.choice([X, Y, Z]) for _ in range(9)]
    table = _table(make_participant, cats)

    table.reorganize()

    for idx, p in enumerate(table.participants()):
        assert table.index_of(p) == idx
        assert p in table


def test_generated_six_seat_roster_is_well_arranged() -> None:
    engine = GameEngine.create(MatchConfig(participants=6, radius=2, seed=3))
    assert engine.table.is_well_arranged()
    assert engine.table.current() is engine.table.richest()
