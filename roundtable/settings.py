from __future__ import annotations

import os
from dataclasses import dataclass

from roundtable.api.models import ActionKind


@dataclass(frozen=True, slots=True)
class LoopSettings:
    # Pause after each successful action, so a UI can animate it.
    pace_seconds: float = 0.3
    # How long to wait for the presenter before falling back; None waits forever.
    input_timeout_seconds: float | None = None
    # Applied when the presenter can't supply an action.
    default_action: ActionKind = ActionKind.eliminate_right

    @classmethod
    def from_env(cls) -> "LoopSettings":
        pace_ms = os.environ.get("ROUNDTABLE_PACE_MS")
        timeout_s = os.environ.get("ROUNDTABLE_INPUT_TIMEOUT_S")
        return cls(
            pace_seconds=int(pace_ms) / 1000 if pace_ms else 0.3,
            input_timeout_seconds=float(timeout_s) if timeout_s else None,
        )
