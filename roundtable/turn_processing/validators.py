from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roundtable.api.models import ActionKind, MatchPhase
from roundtable.core.errors import ActionError, ErrorKind

if TYPE_CHECKING:
    from roundtable.engine import MatchState


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    participant_id: int | None
    action: ActionKind


class TurnValidator(ABC):
    """A small, composable legality check for an action.

    Validators return an `ActionError` instead of raising: an illegal action is
    an expected outcome that the caller reports back to the presenter.
    """

    @abstractmethod
    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class OpenMatchValidator(TurnValidator):
    """Deny every action once the match is over."""

    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        if state.phase == MatchPhase.terminal:
            return ActionError(ErrorKind.illegal_action, "Match is over")
        if state.table.current() is None:
            return ActionError(ErrorKind.empty_collection, "No participant holds the turn")
        return None


@dataclass(frozen=True, slots=True)
class MinSeatsValidator(TurnValidator):
    """Require enough seated participants for a neighbour lookup."""

    min_seats: int = 2

    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        if state.table.size() < self.min_seats:
            return ActionError(ErrorKind.empty_collection, "No eligible neighbor")
        return None


@dataclass(frozen=True, slots=True)
class NonEmptyStackValidator(TurnValidator):
    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        if state.stack.is_empty():
            return ActionError(ErrorKind.empty_collection, "Nothing to rescue")
        return None


@dataclass(frozen=True, slots=True)
class PoorestActorValidator(TurnValidator):
    """Only the poorest seated participant (first found on ties) may steal."""

    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        if state.table.poorest() is not state.table.current():
            return ActionError(ErrorKind.illegal_action, "Only the poorest may steal")
        return None


@dataclass(frozen=True, slots=True)
class NotRichestValidator(TurnValidator):
    """The poorest can't also be the richest (single seat, or everyone level)."""

    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        if state.table.richest() is state.table.current():
            return ActionError(ErrorKind.illegal_action, "Cannot steal from self")
        return None


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[TurnValidator, ...]

    def check(self, *, ctx: ValidationContext, state: MatchState) -> ActionError | None:
        for v in self.validators:
            error = v.check(ctx=ctx, state=state)
            if error is not None:
                return error
        return None


_ELIMINATE = ValidatorPipeline(validators=(OpenMatchValidator(), MinSeatsValidator()))

DEFAULT_ACTION_PIPELINES: dict[ActionKind, ValidatorPipeline] = {
    ActionKind.eliminate_left: _ELIMINATE,
    ActionKind.eliminate_right: _ELIMINATE,
    ActionKind.rescue: ValidatorPipeline(validators=(OpenMatchValidator(), NonEmptyStackValidator())),
    ActionKind.theft: ValidatorPipeline(
        validators=(
            OpenMatchValidator(),
            PoorestActorValidator(),
            NotRichestValidator(),
        )
    ),
}


def pipeline_for_action(action: ActionKind | str) -> ValidatorPipeline:
    try:
        kind = ActionKind(action)
    except ValueError:
        raise ValueError(f"Unknown action: {action}") from None
    return DEFAULT_ACTION_PIPELINES[kind]
