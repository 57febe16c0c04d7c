from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from enum import IntEnum

from roundtable.core.participant import Category, Participant

logger = logging.getLogger(__name__)


class Direction(IntEnum):
    """Rotational direction around the table, as an index step."""

    left = -1
    right = 1


class Table:
    """The round table: an arena of seated participants plus their seating order.

    `_arena` maps participant id -> record; `_order` is the circular seating
    order as a list of ids. All index arithmetic wraps modulo the current size
    and is recomputed after every seat/remove.
    """

    def __init__(self, *, radius: int, participants: Iterable[Participant] = ()) -> None:
        self.radius = radius
        self._arena: dict[int, Participant] = {}
        self._order: list[int] = []
        self._current = 0
        for p in participants:
            self.seat(p)

    # ---- basic access ----

    def __len__(self) -> int:
        return len(self._order)

    def size(self) -> int:
        return len(self._order)

    def is_empty(self) -> bool:
        return not self._order

    @property
    def current_index(self) -> int:
        return self._current

    def current(self) -> Participant | None:
        if not self._order or self._current >= len(self._order):
            return None
        return self._at(self._current)

    def participants(self) -> list[Participant]:
        """Seated participants in seating order (a new list each call)."""

        return [self._arena[pid] for pid in self._order]

    def index_of(self, participant: Participant) -> int | None:
        for idx, pid in enumerate(self._order):
            if self._arena[pid] is participant:
                return idx
        return None

    def __contains__(self, participant: object) -> bool:
        return isinstance(participant, Participant) and self._arena.get(participant.id) is participant

    def _at(self, index: int) -> Participant:
        return self._arena[self._order[index]]

    # ---- seating changes ----

    def seat(self, participant: Participant) -> None:
        """Append to the end of the seating order and mark seated."""

        if participant.id in self._arena:
            raise ValueError(f"Participant {participant.id} is already seated")
        self._arena[participant.id] = participant
        self._order.append(participant.id)
        participant.seated = True

    def remove(self, index: int) -> Participant | None:
        """Detach the participant at `index`, or return None for a bad index."""

        if not 0 <= index < len(self._order):
            return None

        pid = self._order.pop(index)
        removed = self._arena.pop(pid)
        removed.seated = False

        if index < self._current:
            self._current -= 1
        if self._current >= len(self._order):
            self._current = 0
        return removed

    def advance_turn(self) -> None:
        if len(self._order) <= 1:
            return
        self._current = (self._current + 1) % len(self._order)

    def advance_turn_from(self, participant: Participant) -> None:
        """Pass the turn to the seat after `participant`, wherever reorganizing moved it."""

        index = self.index_of(participant)
        if index is not None:
            self._current = index
        self.advance_turn()

    def start_with_richest(self) -> None:
        richest = self.richest()
        if richest is not None:
            self._current = self._order.index(richest.id)

    # ---- queries ----

    def neighbors(self, direction: Direction, count: int) -> list[Participant]:
        """Up to `count` consecutive participants next to the current one.

        Starts one seat away in `direction`, wraps around, and never includes the
        current participant itself.
        """

        size = len(self._order)
        if size == 0 or count <= 0:
            return []

        step = int(direction)
        reach = min(count, size - 1)
        return [self._at((self._current + k * step) % size) for k in range(1, reach + 1)]

    def richest(self) -> Participant | None:
        best: Participant | None = None
        for p in self.participants():
            if best is None or p.wealth > best.wealth:
                best = p
        return best

    def poorest(self) -> Participant | None:
        best: Participant | None = None
        for p in self.participants():
            if best is None or p.wealth < best.wealth:
                best = p
        return best

    @staticmethod
    def fewest_followers(candidates: Sequence[Participant]) -> Participant | None:
        best: Participant | None = None
        for p in candidates:
            if best is None or p.followers < best.followers:
                best = p
        return best

    def has_one_remaining(self) -> bool:
        return len(self._order) == 1

    def totals(self) -> tuple[int, int]:
        seated = self.participants()
        return sum(p.wealth for p in seated), sum(p.followers for p in seated)

    def categories(self) -> dict[Category, int]:
        return dict(Counter(p.category for p in self.participants()))

    # ---- adjacency ----

    def conflicts(self) -> list[tuple[int, int]]:
        """Index pairs (i, i+1 mod size) whose participants share a category."""

        size = len(self._order)
        if size < 2:
            return []
        pairs: list[tuple[int, int]] = []
        for i in range(size):
            nxt = (i + 1) % size
            if self._at(i).same_category(self._at(nxt)):
                pairs.append((i, nxt))
        return pairs

    def is_well_arranged(self) -> bool:
        return not self.conflicts()

    def reorganize(self) -> int:
        """Swap participants until no neighbours share a category, or give up.

        Each pass looks for the first conflicting pair (i, i+1) and swaps the
        occupant of i+1 with the first participant elsewhere that differs from
        seat i and does not create a fresh conflict around either swapped seat.
        Passes are capped at 2 * size; when the categories cannot be separated
        (one category holds more than half the seats) some conflict remains.

        Only the order changes: `current_index` is clamped but keeps pointing at
        a seat, not at a participant, so callers that care about who holds the
        turn must look them up again (see `advance_turn_from`).

        Returns the number of swaps performed.
        """

        size = len(self._order)
        swaps = 0
        if size >= 2:
            attempts = 0
            max_attempts = size * 2
            needs_pass = True

            while needs_pass and attempts < max_attempts:
                needs_pass = False
                for i in range(size):
                    slot = (i + 1) % size
                    if not self._at(i).same_category(self._at(slot)):
                        continue
                    j = self._swap_candidate(anchor=i, slot=slot)
                    if j is None:
                        continue
                    logger.debug("reorganize: swap seat %s <-> %s", slot, j)
                    self._order[slot], self._order[j] = self._order[j], self._order[slot]
                    swaps += 1
                    needs_pass = True
                    break
                attempts += 1

        if self._current >= len(self._order):
            self._current = 0
        return swaps

    def _swap_candidate(self, *, anchor: int, slot: int) -> int | None:
        size = len(self._order)
        anchor_p = self._at(anchor)

        for j in range(size):
            if j in (anchor, slot):
                continue
            if self._at(j).same_category(anchor_p):
                continue

            trial = list(self._order)
            trial[slot], trial[j] = trial[j], trial[slot]

            # Candidate against its new successor seat.
            moved_in = self._arena[trial[slot]]
            if moved_in.same_category(self._arena[trial[(slot + 1) % size]]):
                continue
            # Displaced participant against its new predecessor seat.
            moved_out = self._arena[trial[j]]
            if moved_out.same_category(self._arena[trial[(j - 1) % size]]):
                continue
            return j
        return None

    def __repr__(self) -> str:
        return f"Table(size={len(self._order)}, current={self._current}, radius={self.radius})"
