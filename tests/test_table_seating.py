from __future__ import annotations

import pytest

from roundtable.core.table import Direction, Table


@pytest.fixture()
def five(make_participant) -> Table:
    # ids 1..5 seated in order; current index starts at 0.
    return Table(radius=2, participants=[make_participant(f"P{i}") for i in range(1, 6)])


def _ids(ps) -> list[int]:
    return [p.id for p in ps]


def test_neighbors_wrap_in_both_directions(five: Table) -> None:
    assert _ids(five.neighbors(Direction.right, 2)) == [2, 3]
    assert _ids(five.neighbors(Direction.left, 2)) == [5, 4]

    for _ in range(3):
        five.advance_turn()
    assert five.current_index == 3
    assert _ids(five.neighbors(Direction.right, 3)) == [5, 1, 2]
    assert _ids(five.neighbors(Direction.left, 3)) == [3, 2, 1]


def test_neighbors_never_include_current_and_cap_at_size_minus_one(five: Table) -> None:
    got = five.neighbors(Direction.right, 10)
    assert _ids(got) == [2, 3, 4, 5]
    assert five.current() not in got


@pytest.mark.parametrize("count", [0, -1])
def test_neighbors_with_non_positive_count_is_empty(five: Table, count: int) -> None:
    assert five.neighbors(Direction.right, count) == []


def test_neighbors_on_empty_or_single_table() -> None:
    assert Table(radius=1).neighbors(Direction.left, 1) == []


def test_single_seat_has_no_neighbors(make_participant) -> None:
    table = Table(radius=1, participants=[make_participant()])
    assert table.neighbors(Direction.right, 1) == []
    assert table.has_one_remaining()


def test_remove_before_current_shifts_index_down(five: Table) -> None:
    for _ in range(3):
        five.advance_turn()
    current = five.current()

    removed = five.remove(1)

    assert removed is not None and removed.id == 2
    assert not removed.seated
    assert five.current_index == 2
    assert five.current() is current


def test_remove_after_current_keeps_index(five: Table) -> None:
    five.advance_turn()
    current = five.current()
    five.remove(3)
    assert five.current_index == 1
    assert five.current() is current


def test_remove_last_seat_while_current_wraps_to_zero(five: Table) -> None:
    for _ in range(4):
        five.advance_turn()
    assert five.current_index == 4

    five.remove(4)

    assert five.current_index == 0
    assert five.current().id == 1


def test_remove_bad_index_returns_none(five: Table) -> None:
    assert five.remove(5) is None
    assert five.remove(-1) is None
    assert five.size() == 5


def test_seat_appends_at_end(five: Table, make_participant) -> None:
    late = make_participant("late", id=99)
    late.seated = False
    five.seat(late)
    assert five.participants()[-1] is late
    assert late.seated
    assert late in five


def test_seat_twice_is_rejected(five: Table) -> None:
    with pytest.raises(ValueError):
        five.seat(five.participants()[0])


def test_advance_turn_wraps_and_is_noop_for_single_seat(five: Table, make_participant) -> None:
    for _ in range(5):
        five.advance_turn()
    assert five.current_index == 0

    solo = Table(radius=1, participants=[make_participant()])
    solo.advance_turn()
    assert solo.current_index == 0


def test_extremes_break_ties_by_first_encountered(make_participant) -> None:
    a = make_participant("A", wealth=50, followers=9)
    b = make_participant("B", wealth=80, followers=3)
    c = make_participant("C", wealth=80, followers=3)
    d = make_participant("D", wealth=50, followers=1)
    table = Table(radius=1, participants=[a, b, c, d])

    assert table.richest() is b
    assert table.poorest() is a
    assert Table.fewest_followers([b, c]) is b
    assert Table.fewest_followers([a, b, c, d]) is d
    assert Table.fewest_followers([]) is None


def test_start_with_richest(make_participant) -> None:
    table = Table(
        radius=1,
        participants=[make_participant(wealth=5), make_participant(wealth=90), make_participant(wealth=90)],
    )
    table.start_with_richest()
    assert table.current_index == 1


def test_extremes_on_empty_table() -> None:
    table = Table(radius=1)
    assert table.richest() is None
    assert table.poorest() is None
    assert table.current() is None


def test_advance_turn_from_uses_the_participants_seat(five: Table) -> None:
    third = five.participants()[2]

    five.advance_turn_from(third)

    assert five.current().id == 4


def test_categories_count_seated_participants(make_participant) -> None:
    from roundtable.core.participant import Category

    table = Table(
        radius=1,
        participants=[
            make_participant(category=Category.banker),
            make_participant(category=Category.banker),
            make_participant(category=Category.farmer),
        ],
    )
    assert table.categories() == {Category.banker: 2, Category.farmer: 1}
