from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum

from .models import LeagueTier

_log = logging.getLogger("kick_mogul.engine")


class MatchOutcome(str, Enum):
    DOMINANT_WIN = "DOMINANT_WIN"
    WIN = "WIN"
    DRAW = "DRAW"
    LOSS = "LOSS"


# Checked in order; the first ratio the team clears decides the outcome.
OUTCOME_THRESHOLDS: tuple[tuple[MatchOutcome, float], ...] = (
    (MatchOutcome.DOMINANT_WIN, 1.1),
    (MatchOutcome.WIN, 0.9),
    (MatchOutcome.DRAW, 0.7),
)

REWARD_FACTORS: dict[MatchOutcome, float] = {
    MatchOutcome.DOMINANT_WIN: 1.5,
    MatchOutcome.WIN: 1.0,
    MatchOutcome.DRAW: 0.5,
    MatchOutcome.LOSS: 0.1,
}

OUTCOME_RANK: dict[MatchOutcome, int] = {
    MatchOutcome.LOSS: 0,
    MatchOutcome.DRAW: 1,
    MatchOutcome.WIN: 2,
    MatchOutcome.DOMINANT_WIN: 3,
}


@dataclass(slots=True)
class MatchResult:
    outcome: MatchOutcome
    reward: float
    team_overall: int
    opponent_overall: int
    tier_level: int
    tier_name: str
    goals_for: int
    goals_against: int

    @property
    def scoreline(self) -> str:
        return f"{self.goals_for}-{self.goals_against}"

    @property
    def message(self) -> str:
        if self.outcome is MatchOutcome.DOMINANT_WIN:
            text = f"You crushed them! Won ({self.scoreline}) against {self.tier_name} opponent!"
        elif self.outcome is MatchOutcome.WIN:
            text = f"Solid victory! Won ({self.scoreline}) against {self.tier_name} opponent!"
        elif self.outcome is MatchOutcome.DRAW:
            text = f"Tough draw! You held your ground ({self.scoreline}) in the {self.tier_name}!"
        else:
            text = f"Loss... Time to train harder! ({self.scoreline}) in the {self.tier_name}."
        return f"Match Result: {text} Gained ${math.floor(self.reward):,}!"

    def to_dict(self) -> dict[str, object]:
        return {
            "outcome": self.outcome.value,
            "reward": self.reward,
            "team_overall": self.team_overall,
            "opponent_overall": self.opponent_overall,
            "tier_level": self.tier_level,
            "tier_name": self.tier_name,
            "scoreline": self.scoreline,
            "message": self.message,
        }


def sample_opponent_overall(team_overall: int, tier: LeagueTier, rng: random.Random) -> int:
    low = team_overall * tier.min_factor
    high = team_overall * tier.max_factor
    return math.floor(rng.random() * (high - low) + low)


def classify_outcome(team_overall: int, opponent_overall: int) -> MatchOutcome:
    for outcome, ratio in OUTCOME_THRESHOLDS:
        if team_overall > opponent_overall * ratio:
            return outcome
    return MatchOutcome.LOSS


def outcome_reward(outcome: MatchOutcome, team_overall: int, tier: LeagueTier) -> float:
    factor = REWARD_FACTORS[outcome]
    return tier.base_win_reward * factor + team_overall * tier.overall_multiplier * factor


def _sample_scoreline(outcome: MatchOutcome, rng: random.Random) -> tuple[int, int]:
    if outcome is MatchOutcome.DOMINANT_WIN:
        return rng.randint(2, 4), 0
    if outcome is MatchOutcome.WIN:
        return rng.randint(1, 2), 0
    if outcome is MatchOutcome.DRAW:
        goals = rng.randint(0, 1)
        return goals, goals
    return rng.randint(0, 1), rng.randint(2, 4)


def resolve_match(team_overall: int, tier: LeagueTier, rng: random.Random | None = None) -> MatchResult:
    if team_overall <= 0:
        raise ValueError("Cannot resolve a match for a team with no strength.")
    rng = rng if rng is not None else random.Random()
    opponent = sample_opponent_overall(team_overall, tier, rng)
    outcome = classify_outcome(team_overall, opponent)
    goals_for, goals_against = _sample_scoreline(outcome, rng)
    result = MatchResult(
        outcome=outcome,
        reward=outcome_reward(outcome, team_overall, tier),
        team_overall=team_overall,
        opponent_overall=opponent,
        tier_level=tier.level,
        tier_name=tier.name,
        goals_for=goals_for,
        goals_against=goals_against,
    )
    _log.debug("Resolved %s vs %s in %s: %s", team_overall, opponent, tier.name, outcome.value)
    return result
