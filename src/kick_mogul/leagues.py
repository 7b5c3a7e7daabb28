from __future__ import annotations

from .models import LeagueTier

LEAGUE_TIERS: tuple[LeagueTier, ...] = (
    LeagueTier(
        level=1,
        name="Amateur League",
        base_win_reward=100,
        overall_multiplier=0.5,
        min_factor=0.4,
        max_factor=0.7,
        promotion_threshold_overall=400,
        promotion_cost=5000,
    ),
    LeagueTier(
        level=2,
        name="Regional League",
        base_win_reward=500,
        overall_multiplier=1.0,
        min_factor=0.6,
        max_factor=0.9,
        promotion_threshold_overall=800,
        promotion_cost=20000,
    ),
    LeagueTier(
        level=3,
        name="National League",
        base_win_reward=2000,
        overall_multiplier=2.0,
        min_factor=0.8,
        max_factor=1.1,
        promotion_threshold_overall=1500,
        promotion_cost=100000,
    ),
    LeagueTier(
        level=4,
        name="Continental Championship",
        base_win_reward=5000,
        overall_multiplier=3.0,
        min_factor=1.0,
        max_factor=1.3,
        promotion_threshold_overall=2500,
        promotion_cost=500000,
    ),
)


def max_level(tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS) -> int:
    return tiers[-1].level if tiers else 0


def get_tier(level: int, tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS) -> LeagueTier | None:
    for tier in tiers:
        if tier.level == level:
            return tier
    return None


def next_tier(level: int, tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS) -> LeagueTier | None:
    return get_tier(level + 1, tiers)


def clamp_level(level: int, tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS) -> int:
    if not tiers:
        return 1
    return max(tiers[0].level, min(max_level(tiers), level))
