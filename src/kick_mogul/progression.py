from __future__ import annotations

import logging

from .leagues import LEAGUE_TIERS, next_tier
from .models import ActionResult, GameState, LeagueTier, RejectionReason

_log = logging.getLogger("kick_mogul.progression")


def _gate(state: GameState, tiers: tuple[LeagueTier, ...]) -> tuple[LeagueTier | None, ActionResult]:
    target = next_tier(state.current_league_level, tiers)
    if target is None:
        return None, ActionResult.rejected(
            RejectionReason.PROMOTION_BLOCKED_MAXLEVEL,
            "You are already in the highest league!",
        )
    if state.money < target.promotion_cost:
        return target, ActionResult.rejected(
            RejectionReason.INSUFFICIENT_FUNDS,
            f"Not enough money for promotion! Needs ${target.promotion_cost:,}.",
        )
    team_overall = state.players.total_overall()
    if team_overall < target.promotion_threshold_overall:
        return target, ActionResult.rejected(
            RejectionReason.PROMOTION_BLOCKED_OVERALL,
            f"Your team is not strong enough for {target.name}! "
            f"Total OVR needed: {target.promotion_threshold_overall:,} (Your team: {team_overall:,}).",
        )
    return target, ActionResult.success(f"Ready for promotion to the {target.name}.")


def check_promotion(state: GameState, tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS) -> ActionResult:
    """Evaluate the promotion gate without touching the state.

    The money and team-strength requirements are the ones listed on the
    league being promoted into.
    """
    return _gate(state, tiers)[1]


def promote(state: GameState, tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS) -> ActionResult:
    target, verdict = _gate(state, tiers)
    if target is None or not verdict.ok:
        return verdict
    state.money -= target.promotion_cost
    state.current_league_level += 1
    _log.info("Promoted to %s (level %s)", target.name, target.level)
    return ActionResult.success(f"Congratulations! You've been promoted to the {target.name}!")
