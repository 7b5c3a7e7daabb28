from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4

from .config import (
    DEFAULT_CLICK_POWER,
    DEFAULT_LEAGUE_LEVEL,
    DEFAULT_MONEY,
    DEFAULT_PASSIVE_INCOME,
    DEFAULT_STADIUM_CAPACITY,
    MATCH_DURATION_SECONDS,
    TRAIN_COST_PER_OVERALL,
    TRAIN_VALUE_GAIN,
)

POSITIONS = ("GK", "DEF", "MID", "FWD")


@dataclass(slots=True)
class Player:
    name: str
    overall: int
    value: int
    position: str
    player_id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self) -> None:
        if self.position not in POSITIONS:
            raise ValueError(f"Unknown position '{self.position}'.")

    @property
    def train_cost(self) -> int:
        return self.overall * TRAIN_COST_PER_OVERALL


@dataclass(slots=True)
class Roster:
    """Fixed-size, slot-addressed squad. Slots never appear or disappear after creation."""

    players: list[Player] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.players)

    def __iter__(self):
        return iter(self.players)

    def __getitem__(self, slot: int) -> Player:
        return self.players[self._check_slot(slot)]

    def _check_slot(self, slot: int) -> int:
        if not self.has_slot(slot):
            raise IndexError(f"Roster slot {slot} is out of range (0-{len(self.players) - 1}).")
        return slot

    def has_slot(self, slot: int) -> bool:
        return 0 <= slot < len(self.players)

    def replace(self, slot: int, player: Player) -> Player:
        idx = self._check_slot(slot)
        previous = self.players[idx]
        self.players[idx] = player
        return previous

    def train(self, slot: int) -> Player:
        player = self.players[self._check_slot(slot)]
        player.overall += 1
        player.value += TRAIN_VALUE_GAIN
        return player

    def total_overall(self) -> int:
        return sum(p.overall for p in self.players)


@dataclass(frozen=True, slots=True)
class LeagueTier:
    level: int
    name: str
    base_win_reward: float
    overall_multiplier: float
    min_factor: float
    max_factor: float
    promotion_threshold_overall: int
    promotion_cost: int

    def __post_init__(self) -> None:
        if not 0 < self.min_factor <= self.max_factor:
            raise ValueError(f"{self.name} opponent range must satisfy 0 < min <= max.")


@dataclass(slots=True)
class GameState:
    money: float = DEFAULT_MONEY
    click_power: int = DEFAULT_CLICK_POWER
    stadium_capacity: int = DEFAULT_STADIUM_CAPACITY
    passive_income_per_second: float = DEFAULT_PASSIVE_INCOME
    players: Roster = field(default_factory=Roster)
    current_league_level: int = DEFAULT_LEAGUE_LEVEL
    match_in_progress: bool = False
    match_time_left: int = MATCH_DURATION_SECONDS
    match_deadline: float | None = None

    @property
    def team_overall(self) -> int:
        return self.players.total_overall()


class RejectionReason(str, Enum):
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    ROSTER_EMPTY = "ROSTER_EMPTY"
    PROMOTION_BLOCKED_OVERALL = "PROMOTION_BLOCKED_OVERALL"
    PROMOTION_BLOCKED_MAXLEVEL = "PROMOTION_BLOCKED_MAXLEVEL"
    MATCH_SKIPPED_NO_PLAYERS = "MATCH_SKIPPED_NO_PLAYERS"
    CORRUPT_OR_MISSING_SAVE = "CORRUPT_OR_MISSING_SAVE"
    MATCH_IN_PROGRESS = "MATCH_IN_PROGRESS"
    SLOT_OUT_OF_RANGE = "SLOT_OUT_OF_RANGE"


@dataclass(slots=True)
class ActionResult:
    ok: bool
    message: str
    reason: RejectionReason | None = None

    @classmethod
    def success(cls, message: str) -> ActionResult:
        return cls(ok=True, message=message)

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str) -> ActionResult:
        return cls(ok=False, message=message, reason=reason)

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "reason": self.reason.value if self.reason is not None else None,
            "message": self.message,
        }
