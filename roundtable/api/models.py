from __future__ import annotations

from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from roundtable.core.participant import Category, Participant


class MatchPhase(StrEnum):
    awaiting_action = "awaiting_action"
    resolving = "resolving"
    terminal = "terminal"


class ActionKind(StrEnum):
    eliminate_left = "eliminate_left"
    eliminate_right = "eliminate_right"
    rescue = "rescue"
    theft = "theft"


class ParticipantView(BaseModel):
    """Read-only copy of a participant for presentation."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    wealth: int
    followers: int
    category: Category
    seated: bool

    @classmethod
    def of(cls, p: Participant) -> "ParticipantView":
        return cls(
            id=p.id,
            name=p.name,
            wealth=p.wealth,
            followers=p.followers,
            category=p.category,
            seated=p.seated,
        )


class ResourceTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    wealth: int = 0
    followers: int = 0


class MatchSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Filled in by the registry; the engine itself doesn't know its id.
    match_id: UUID | None = None

    seated: list[ParticipantView]
    current: ParticipantView | None = None
    # Bottom -> top.
    dispossessed: list[ParticipantView] = Field(default_factory=list)

    can_steal: bool = False
    can_rescue: bool = False
    legal_actions: list[ActionKind] = Field(default_factory=list)

    turn: int
    radius: int
    phase: MatchPhase
    is_terminal: bool = False
    winner: ParticipantView | None = None

    # Resource overview; extremes use first-encountered on ties.
    richest: ParticipantView | None = None
    poorest: ParticipantView | None = None
    table_totals: ResourceTotals = Field(default_factory=ResourceTotals)
    stack_totals: ResourceTotals = Field(default_factory=ResourceTotals)
    table_categories: dict[Category, int] = Field(default_factory=dict)
    stack_categories: dict[Category, int] = Field(default_factory=dict)


class MatchCreateRequest(BaseModel):
    participants: int = Field(..., ge=2, le=20)
    radius: int = Field(1, ge=1)

    random_resources: bool = True
    # Only used when random_resources is False.
    initial_wealth: int = 300
    initial_followers: int = 150

    seed: int | None = None


class ActionRequest(BaseModel):
    action: ActionKind


class ActionAccepted(BaseModel):
    match_id: UUID
    action: ActionKind
    turn: int


class MatchListResponse(BaseModel):
    matches: list[MatchSnapshot]


class PendingActionsResponse(BaseModel):
    match_id: UUID
    legal_actions: list[ActionKind]
