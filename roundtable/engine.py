from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from roundtable.api.models import ActionKind, MatchPhase, MatchSnapshot, ParticipantView, ResourceTotals
from roundtable.core.errors import ActionError, ErrorKind
from roundtable.core.events import MatchEvent
from roundtable.core.participant import Participant
from roundtable.core.stack import DispossessedStack
from roundtable.core.table import Direction, Table
from roundtable.fsm import TurnFSM
from roundtable.match_setup import MatchConfig, build_participants, validate_match_config
from roundtable.turn_processing.validators import ValidationContext, pipeline_for_action

logger = logging.getLogger(__name__)


_DIRECTIONS: dict[ActionKind, Direction] = {
    ActionKind.eliminate_left: Direction.left,
    ActionKind.eliminate_right: Direction.right,
}


@dataclass(slots=True)
class MatchState:
    """Everything one match mutates. Owned exclusively by a GameEngine."""

    table: Table
    stack: DispossessedStack = field(default_factory=DispossessedStack)
    turn: int = 1
    phase: MatchPhase = MatchPhase.awaiting_action
    winner_id: int | None = None
    history: list[MatchEvent] = field(default_factory=list)

    def winner(self) -> Participant | None:
        if self.winner_id is None:
            return None
        return next((p for p in self.table.participants() if p.id == self.winner_id), None)

    def totals(self) -> tuple[int, int]:
        """Summed (wealth, followers) across the table and the stack."""

        tw, tf = self.table.totals()
        sw, sf = self.stack.totals()
        return tw + sw, tf + sf


@dataclass(frozen=True, slots=True)
class ActionOutcome:
    action: ActionKind
    error: ActionError | None = None
    events: list[MatchEvent] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


class GameEngine:
    """Resolves one action at a time against a MatchState.

    Not thread-safe: exactly one thread (the turn loop worker) may call
    `apply()`. Other threads only ever see `snapshot()` copies.
    """

    def __init__(self, state: MatchState, *, config: MatchConfig | None = None) -> None:
        self.state = state
        self.config = config
        self._fsm = TurnFSM(state)

    @classmethod
    def create(cls, config: MatchConfig, *, rng: random.Random | None = None) -> "GameEngine":
        """Validate `config`, seat a fresh roster and start with the richest.

        Raises IllegalConfiguration for bad setup parameters.
        """

        validate_match_config(config)
        rng = rng or random.Random(config.seed)
        table = Table(radius=config.radius, participants=build_participants(config=config, rng=rng))
        table.reorganize()
        table.start_with_richest()
        logger.info("match created: %d participants, radius=%d", table.size(), table.radius)
        return cls(MatchState(table=table), config=config)

    @classmethod
    def from_participants(
        cls,
        participants: list[Participant],
        *,
        radius: int,
        reorganize: bool = False,
    ) -> "GameEngine":
        """Build an engine around an explicit seating (used by tests and replays).

        The seating is kept as given unless `reorganize` is set; the richest
        participant starts.
        """

        table = Table(radius=radius, participants=participants)
        if reorganize:
            table.reorganize()
        table.start_with_richest()
        return cls(MatchState(table=table))

    def reset(self) -> None:
        """Start over with the same configuration and a freshly drawn roster."""

        if self.config is None:
            raise ValueError("Engine has no configuration to reset from")
        self.state.stack.clear()
        fresh = GameEngine.create(self.config)
        self.state = fresh.state
        self._fsm = TurnFSM(self.state)

    # ---- queries ----

    @property
    def table(self) -> Table:
        return self.state.table

    @property
    def stack(self) -> DispossessedStack:
        return self.state.stack

    @property
    def phase(self) -> MatchPhase:
        return self.state.phase

    @property
    def is_terminal(self) -> bool:
        return self.state.phase == MatchPhase.terminal

    def legal_actions(self) -> list[ActionKind]:
        return [a for a in ActionKind if self._check(a) is None]

    def snapshot(self) -> MatchSnapshot:
        current = self.table.current()
        winner = self.state.winner()
        richest = self.table.richest()
        poorest = self.table.poorest()
        table_w, table_f = self.table.totals()
        stack_w, stack_f = self.stack.totals()
        legal = self.legal_actions()
        return MatchSnapshot(
            seated=[ParticipantView.of(p) for p in self.table.participants()],
            current=ParticipantView.of(current) if current is not None else None,
            dispossessed=[ParticipantView.of(p) for p in self.stack.contents()],
            can_steal=ActionKind.theft in legal,
            can_rescue=ActionKind.rescue in legal,
            legal_actions=legal,
            turn=self.state.turn,
            radius=self.table.radius,
            phase=self.state.phase,
            is_terminal=self.is_terminal,
            winner=ParticipantView.of(winner) if winner is not None else None,
            richest=ParticipantView.of(richest) if richest is not None else None,
            poorest=ParticipantView.of(poorest) if poorest is not None else None,
            table_totals=ResourceTotals(wealth=table_w, followers=table_f),
            stack_totals=ResourceTotals(wealth=stack_w, followers=stack_f),
            table_categories=self.table.categories(),
            stack_categories=self.stack.categories(),
        )

    # ---- resolution ----

    def apply(self, action: ActionKind | str) -> ActionOutcome:
        """Resolve `action` for the participant holding the turn.

        Illegal actions leave state untouched and keep the turn with the same
        participant; the outcome carries the reason and an `error` event.
        """

        try:
            kind = ActionKind(action)
        except ValueError:
            raise ValueError(f"Unknown action: {action}") from None

        if self.is_terminal:
            return self._fail(kind, ActionError(ErrorKind.illegal_action, "Match is over"))

        self._fsm.begin()
        self._fsm.sync_phase_to_model()

        error = self._check(kind)
        actor = self.table.current()
        if error is None and actor is not None:
            if kind in _DIRECTIONS:
                result = self._eliminate(actor, _DIRECTIONS[kind])
            elif kind == ActionKind.rescue:
                result = self._rescue(actor)
            else:
                result = self._theft(actor)
            if isinstance(result, ActionError):
                error = result
            else:
                return self._finish(kind, result, actor)

        self._fsm.reject()
        self._fsm.sync_phase_to_model()
        return self._fail(kind, error or ActionError(ErrorKind.empty_collection, "No participant holds the turn"))

    def _check(self, kind: ActionKind) -> ActionError | None:
        current = self.table.current()
        ctx = ValidationContext(participant_id=current.id if current else None, action=kind)
        return pipeline_for_action(kind).check(ctx=ctx, state=self.state)

    def _eliminate(self, actor: Participant, direction: Direction) -> MatchEvent | ActionError:
        candidates = self.table.neighbors(direction, self.table.radius)
        victim = self.table.fewest_followers(candidates)
        if victim is None:
            return ActionError(ErrorKind.empty_collection, "No eligible neighbor")

        index = self.table.index_of(victim)
        if index is None:
            return ActionError(ErrorKind.empty_collection, "No eligible neighbor")

        wealth, followers = victim.give_everything_to(actor)
        self.table.remove(index)
        self.stack.push(victim)
        self.table.reorganize()

        return MatchEvent.now(
            type="elimination",
            turn=self.state.turn,
            payload={
                "victim_id": victim.id,
                "actor_id": actor.id,
                "direction": direction.name,
                "wealth": wealth,
                "followers": followers,
            },
        )

    def _rescue(self, actor: Participant) -> MatchEvent | ActionError:
        rescued = self.stack.pop()
        if rescued is None:
            return ActionError(ErrorKind.empty_collection, "Nothing to rescue")

        wealth, followers = actor.give_to(rescued, wealth=actor.wealth // 2, followers=actor.followers // 2)
        self.table.seat(rescued)
        self.table.reorganize()

        return MatchEvent.now(
            type="rescue",
            turn=self.state.turn,
            payload={
                "rescued_id": rescued.id,
                "actor_id": actor.id,
                "wealth": wealth,
                "followers": followers,
            },
        )

    def _theft(self, actor: Participant) -> MatchEvent | ActionError:
        richest = self.table.richest()
        if richest is None or richest is actor:
            return ActionError(ErrorKind.illegal_action, "Cannot steal from self")

        wealth, followers = richest.give_to(actor, wealth=richest.wealth // 3, followers=richest.followers // 3)

        return MatchEvent.now(
            type="theft",
            turn=self.state.turn,
            payload={
                "actor_id": actor.id,
                "victim_id": richest.id,
                "amount_wealth": wealth,
                "amount_followers": followers,
            },
        )

    def _finish(self, kind: ActionKind, event: MatchEvent, actor: Participant) -> ActionOutcome:
        events = [event]
        logger.info("turn %d: %s resolved %s", self.state.turn, kind.value, event.payload)

        if self.table.has_one_remaining():
            winner = self.table.participants()[0]
            self.state.winner_id = winner.id
            self._fsm.conclude()
            events.append(
                MatchEvent.now(
                    type="victory",
                    turn=self.state.turn,
                    payload={"winner_id": winner.id, "wealth": winner.wealth, "followers": winner.followers},
                )
            )
            logger.info("match over after turn %d: winner=%s", self.state.turn, winner.name)
        else:
            self.table.advance_turn_from(actor)
            self.state.turn += 1
            self._fsm.advance()

        self._fsm.sync_phase_to_model()
        self.state.history.extend(events)
        return ActionOutcome(action=kind, events=events)

    def _fail(self, kind: ActionKind, error: ActionError) -> ActionOutcome:
        logger.info("turn %d: %s rejected (%s: %s)", self.state.turn, kind.value, error.kind.value, error.reason)
        event = MatchEvent.now(
            type="error",
            turn=self.state.turn,
            payload={"action": kind.value, "kind": error.kind.value, "reason": error.reason},
        )
        self.state.history.append(event)
        return ActionOutcome(action=kind, error=error, events=[event])
