from __future__ import annotations

import random
from dataclasses import dataclass

from roundtable.api.models import MatchCreateRequest
from roundtable.core.errors import IllegalConfiguration
from roundtable.core.participant import Category, Participant

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 20

# Fixed starting resources must fall inside these bounds.
FIXED_WEALTH_BOUNDS = (50, 1000)
FIXED_FOLLOWERS_BOUNDS = (25, 500)

# Randomized starting resources are drawn uniformly from these (inclusive) ranges.
RANDOM_WEALTH_RANGE = (100, 599)
RANDOM_FOLLOWERS_RANGE = (50, 249)

NAMES: tuple[str, ...] = (
    "Brother Ambrose",
    "Don Rodrigo",
    "Father Benedict",
    "Master Garcia",
    "Chaplain Ruiz",
    "Abbot Martin",
    "Prior Fernandez",
    "Canon Lopez",
    "Vicar Sanchez",
    "Dean Jimenez",
)

CATEGORY_CYCLE: tuple[Category, ...] = tuple(Category)


@dataclass(frozen=True, slots=True)
class MatchConfig:
    participants: int
    radius: int = 1
    random_resources: bool = True
    initial_wealth: int = 300
    initial_followers: int = 150
    seed: int | None = None

    @classmethod
    def from_request(cls, req: MatchCreateRequest) -> "MatchConfig":
        return cls(
            participants=req.participants,
            radius=req.radius,
            random_resources=req.random_resources,
            initial_wealth=req.initial_wealth,
            initial_followers=req.initial_followers,
            seed=req.seed,
        )


def validate_match_config(config: MatchConfig) -> None:
    if config.participants < MIN_PARTICIPANTS:
        raise IllegalConfiguration(f"At least {MIN_PARTICIPANTS} participants required")
    if config.participants > MAX_PARTICIPANTS:
        raise IllegalConfiguration(f"At most {MAX_PARTICIPANTS} participants allowed")
    if config.radius < 1 or config.radius >= config.participants:
        raise IllegalConfiguration(
            f"Elimination radius must be between 1 and {config.participants - 1} (got {config.radius})"
        )

    if config.random_resources:
        return

    lo, hi = FIXED_WEALTH_BOUNDS
    if not lo <= config.initial_wealth <= hi:
        raise IllegalConfiguration(f"Initial wealth must be between {lo} and {hi}")
    lo, hi = FIXED_FOLLOWERS_BOUNDS
    if not lo <= config.initial_followers <= hi:
        raise IllegalConfiguration(f"Initial followers must be between {lo} and {hi}")


def build_participants(*, config: MatchConfig, rng: random.Random) -> list[Participant]:
    """Create the starting roster.

    Categories cycle through `Category` in seat order; the table reorganizes
    them afterwards. Names past the built-in list fall back to "Participant N".
    """

    roster: list[Participant] = []
    for i in range(config.participants):
        name = NAMES[i] if i < len(NAMES) else f"Participant {i + 1}"
        if config.random_resources:
            wealth = rng.randint(*RANDOM_WEALTH_RANGE)
            followers = rng.randint(*RANDOM_FOLLOWERS_RANGE)
        else:
            wealth = config.initial_wealth
            followers = config.initial_followers
        roster.append(
            Participant(
                id=i + 1,
                name=name,
                wealth=wealth,
                followers=followers,
                category=CATEGORY_CYCLE[i % len(CATEGORY_CYCLE)],
            )
        )
    return roster
