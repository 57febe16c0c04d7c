from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Category(StrEnum):
    merchant = "merchant"
    artisan = "artisan"
    farmer = "farmer"
    rancher = "rancher"
    banker = "banker"


@dataclass(slots=True, eq=False)
class Participant:
    """A seated (or dispossessed) participant at the round table.

    Identity is the `id`; two records are the same participant only if they are
    the same object. Wealth and followers are clamped to >= 0 on every mutation.
    """

    id: int
    name: str
    wealth: int
    followers: int
    category: Category
    seated: bool = True

    def __post_init__(self) -> None:
        self.wealth = max(0, int(self.wealth))
        self.followers = max(0, int(self.followers))

    @property
    def total(self) -> int:
        return self.wealth + self.followers

    def same_category(self, other: Participant | None) -> bool:
        return other is not None and self.category == other.category

    def set_resources(self, *, wealth: int, followers: int) -> None:
        self.wealth = max(0, wealth)
        self.followers = max(0, followers)

    def give_everything_to(self, dest: Participant) -> tuple[int, int]:
        """Move all wealth and followers to `dest`. Returns the amounts moved."""

        wealth, followers = self.wealth, self.followers
        dest.set_resources(wealth=dest.wealth + wealth, followers=dest.followers + followers)
        self.set_resources(wealth=0, followers=0)
        return wealth, followers

    def give_to(self, dest: Participant, *, wealth: int, followers: int) -> tuple[int, int]:
        """Move an exact amount to `dest`, capped at what this participant holds.

        Capping keeps the transfer zero-sum even if a caller asks for more than
        is available.
        """

        wealth = min(max(0, wealth), self.wealth)
        followers = min(max(0, followers), self.followers)
        self.set_resources(wealth=self.wealth - wealth, followers=self.followers - followers)
        dest.set_resources(wealth=dest.wealth + wealth, followers=dest.followers + followers)
        return wealth, followers

    def __repr__(self) -> str:
        return (
            f"Participant(id={self.id}, name={self.name!r}, category={self.category.value}, "
            f"wealth={self.wealth}, followers={self.followers}, seated={self.seated})"
        )
