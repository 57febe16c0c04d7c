from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine import State, StateMachine

from roundtable.api.models import MatchPhase

if TYPE_CHECKING:
    from roundtable.engine import MatchState


class TurnFSM(StateMachine):
    """FSM wrapper around MatchState.

    - phases: awaiting action -> resolving -> awaiting action | terminal
    - actions are applied by the engine; the FSM only guards transitions.
    """

    awaiting_action = State(
        MatchPhase.awaiting_action.value,
        value=MatchPhase.awaiting_action.value,
        initial=True,
    )
    resolving = State(MatchPhase.resolving.value, value=MatchPhase.resolving.value)
    terminal = State(MatchPhase.terminal.value, value=MatchPhase.terminal.value, final=True)

    begin = awaiting_action.to(resolving)
    reject = resolving.to(awaiting_action)
    advance = resolving.to(awaiting_action)
    conclude = resolving.to(terminal)

    def __init__(self, match: MatchState):
        self.match = match
        super().__init__(start_value=match.phase.value)

    def sync_phase_to_model(self) -> None:
        self.match.phase = MatchPhase(str(self.current_state.value))
