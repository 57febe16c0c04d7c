from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "elimination",
    "rescue",
    "theft",
    "victory",
    "error",
]


@dataclass(frozen=True, slots=True)
class MatchEvent:
    type: EventType
    turn: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, turn: int, payload: dict[str, Any]) -> "MatchEvent":
        return MatchEvent(type=type, turn=turn, payload=payload, ts=datetime.now(timezone.utc))

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.type, "turn": self.turn, "ts": self.ts.isoformat(), **self.payload}
