from __future__ import annotations

from collections import Counter

from roundtable.core.participant import Category, Participant


class DispossessedStack:
    """LIFO holding area for eliminated participants.

    The last participant to fall is the first one a rescue brings back.
    """

    def __init__(self) -> None:
        self._items: list[Participant] = []

    def push(self, participant: Participant) -> None:
        participant.seated = False
        self._items.append(participant)

    def pop(self) -> Participant | None:
        """Remove and return the top participant, marked seated.

        Returns None on an empty stack; callers are expected to probe with
        `is_empty()` or handle the None.
        """

        if not self._items:
            return None
        participant = self._items.pop()
        participant.seated = True
        return participant

    def peek_top(self) -> Participant | None:
        return self._items[-1] if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def contents(self) -> list[Participant]:
        """Bottom-to-top copy of the stack."""

        return list(self._items)

    def clear(self) -> None:
        for participant in self._items:
            participant.seated = False
        self._items.clear()

    def totals(self) -> tuple[int, int]:
        return sum(p.wealth for p in self._items), sum(p.followers for p in self._items)

    def categories(self) -> dict[Category, int]:
        return dict(Counter(p.category for p in self._items))

    def __repr__(self) -> str:
        return f"DispossessedStack(size={len(self._items)})"
