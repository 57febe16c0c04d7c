from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import CancelledError, Future, InvalidStateError
from typing import TYPE_CHECKING

from roundtable.api.models import ActionKind, MatchSnapshot

if TYPE_CHECKING:
    from roundtable.core.events import MatchEvent


class ActionSlot:
    """One-shot, single-value rendezvous between the turn loop and a presenter.

    The loop creates a fresh slot every turn and blocks in `wait()`; the
    presenter calls `fulfill()` from its own thread. Only the first fulfil
    counts; later ones are no-ops that return False.
    """

    def __init__(self) -> None:
        self._future: Future[ActionKind] = Future()

    def fulfill(self, action: ActionKind | str) -> bool:
        try:
            self._future.set_result(ActionKind(action))
        except InvalidStateError:
            return False
        return True

    def close(self) -> bool:
        """Mark the input channel as broken; a waiting loop wakes up with None."""

        return self._future.cancel()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def wait(self, timeout: float | None = None) -> ActionKind | None:
        try:
            return self._future.result(timeout=timeout)
        except (CancelledError, TimeoutError):
            return None


class Presenter(ABC):
    """Presentation-side collaborator of the turn loop.

    All methods are called from the loop's worker thread and must not block
    for long; user input comes back through the `ActionSlot` handed to
    `prompt()`. Snapshots are copies and safe to keep.
    """

    @abstractmethod
    def show(self, snapshot: MatchSnapshot) -> None:
        raise NotImplementedError

    @abstractmethod
    def prompt(self, snapshot: MatchSnapshot, legal_actions: list[ActionKind], slot: ActionSlot) -> None:
        """Ask for the next action. Fulfil `slot` (now or later) with the choice."""
        raise NotImplementedError

    @abstractmethod
    def notify(self, event: MatchEvent) -> None:
        raise NotImplementedError
