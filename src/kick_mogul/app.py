from __future__ import annotations

import math
from typing import Any

from .config import STADIUM_UPGRADE_STEP, TIER_COLORS
from .game import Game
from .models import LeagueTier, Roster


def upgrade_tier_visuals(level: int, levels_per_tier: int, max_tier: int = len(TIER_COLORS)) -> dict[str, Any]:
    """Badge colour and number for something at ``level`` (1-based)."""
    if levels_per_tier <= 0:
        raise ValueError("levels_per_tier must be positive.")
    zero_indexed = max(0, level - 1)
    tier_index = min(zero_indexed // levels_per_tier, max_tier - 1)
    return {
        "color": TIER_COLORS[tier_index] if 0 <= tier_index < len(TIER_COLORS) else TIER_COLORS[0],
        "tier_number": tier_index + 1,
    }


def format_money(amount: float) -> str:
    return f"${math.floor(amount):,}"


def format_time(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_squad(roster: Roster) -> str:
    lines = ["Slot Pos Player          OVR     Value  Train"]
    for idx, player in enumerate(roster):
        lines.append(
            f"{idx:>4} {player.position:<3} {player.name:<14} {player.overall:>4} {player.value:>9,} {player.train_cost:>6,}"
        )
    lines.append(f"Team overall: {roster.total_overall():,}")
    return "\n".join(lines)


def format_status(game: Game) -> str:
    state = game.state
    tier = game.current_tier
    lines = [
        f"Money: {format_money(state.money)} (+{state.passive_income_per_second:.1f}/sec)",
        f"Current League: {tier.name if tier is not None else 'Unknown League'}",
        f"Click power: {state.click_power}  Stadium: {state.stadium_capacity:,} seats",
    ]
    if state.match_in_progress:
        lines.append(
            f"Match in Progress: {format_time(state.match_time_left)} ({game.match_progress:.1f}%)"
        )
    else:
        lines.append("No match in progress.")
    return "\n".join(lines)


def status_payload(game: Game) -> dict[str, Any]:
    state = game.state
    tier = game.current_tier
    target = game.next_tier
    stadium_level = state.stadium_capacity // STADIUM_UPGRADE_STEP - 1
    payload = game.snapshot()
    payload.update(
        {
            "moneyDisplay": format_money(state.money),
            "teamOverall": state.players.total_overall(),
            "league": tier_payload(tier),
            "nextLeague": tier_payload(target),
            "canPromote": game.promotion_status().ok,
            "match": {
                "phase": game.timer.phase.value,
                "progress": round(game.match_progress, 2),
                "clock": format_time(state.match_time_left),
            },
            "lastMatch": game.last_match.to_dict() if game.last_match is not None else None,
            "lastLoadError": game.last_load_error,
            "visuals": {
                "league": upgrade_tier_visuals(state.current_league_level, 1),
                "clickPower": upgrade_tier_visuals(state.click_power, 10),
                "stadium": upgrade_tier_visuals(stadium_level, 2),
                "players": [upgrade_tier_visuals(p.overall, 5) for p in state.players],
            },
        }
    )
    return payload


def tier_payload(tier: LeagueTier | None) -> dict[str, Any] | None:
    if tier is None:
        return None
    return {
        "level": tier.level,
        "name": tier.name,
        "baseWinReward": tier.base_win_reward,
        "overallMultiplier": tier.overall_multiplier,
        "opponentOverallRange": {"minFactor": tier.min_factor, "maxFactor": tier.max_factor},
        "promotionThresholdOverall": tier.promotion_threshold_overall,
        "promotionCost": tier.promotion_cost,
    }
