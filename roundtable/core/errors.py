from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class IllegalConfiguration(ValueError):
    """Bad setup parameters; the match is never created."""


class ErrorKind(StrEnum):
    illegal_action = "illegal_action"
    empty_collection = "empty_collection"
    input_channel_failure = "input_channel_failure"


@dataclass(frozen=True, slots=True)
class ActionError:
    """A recoverable failure, returned as a value rather than raised."""

    kind: ErrorKind
    reason: str

    def __str__(self) -> str:
        return self.reason
