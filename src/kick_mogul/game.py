from __future__ import annotations

import logging
import random
import time
from collections import deque
from typing import Any, Callable

from .config import (
    CLICK_UPGRADE_COST_PER_LEVEL,
    MATCH_DURATION_SECONDS,
    SAVE_KEY,
    STADIUM_UPGRADE_COST_PER_STEP,
    STADIUM_UPGRADE_STEP,
)
from .engine import MatchResult, resolve_match
from .leagues import LEAGUE_TIERS, clamp_level, get_tier, next_tier
from .models import ActionResult, GameState, LeagueTier, RejectionReason
from .names import PlayerFactory
from .progression import check_promotion, promote
from .storage import MemoryStore, SaveStore, default_state, load_state, save_state, serialize_state
from .timer import MatchTimer

_log = logging.getLogger("kick_mogul.game")


class Game:
    """Application context owning the single game state.

    Every user action reads the settled state, applies its whole mutation and
    writes a snapshot before returning, so callers only ever see complete
    transitions.
    """

    MAX_EVENTS = 50

    def __init__(
        self,
        store: SaveStore | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        tiers: tuple[LeagueTier, ...] = LEAGUE_TIERS,
        save_key: str = SAVE_KEY,
        match_duration: int = MATCH_DURATION_SECONDS,
    ) -> None:
        self.store: SaveStore = store if store is not None else MemoryStore()
        self.save_key = save_key
        self.tiers = tiers
        self._rng = rng if rng is not None else random.Random()
        self._factory = PlayerFactory(self._rng)
        self.timer = MatchTimer(on_complete=self._finish_match, duration=match_duration, clock=clock)
        self.last_load_error = ""
        self.last_match: MatchResult | None = None
        self.events: deque[dict[str, Any]] = deque(maxlen=self.MAX_EVENTS)

        loaded, error = load_state(self.store, self._factory, self.save_key)
        if loaded is None:
            self.last_load_error = error
            if error:
                self._notify(
                    ActionResult.rejected(RejectionReason.CORRUPT_OR_MISSING_SAVE, error),
                    kind="load",
                )
            self.state = self._fresh_state()
        else:
            self.state = loaded
        self.state.current_league_level = clamp_level(self.state.current_league_level, self.tiers)
        self._resume_match()
        self._save()

    def _fresh_state(self) -> GameState:
        state = default_state(self._factory)
        state.passive_income_per_second = state.stadium_capacity / 100
        return state

    def _notify(self, result: ActionResult, kind: str = "action") -> ActionResult:
        entry = result.to_dict()
        entry["kind"] = kind
        self.events.append(entry)
        return result

    def _save(self) -> None:
        save_state(self.store, self.state, self.save_key)

    def _sync_match_state(self) -> None:
        self.state.match_in_progress = self.timer.running
        self.state.match_time_left = self.timer.time_left
        self.state.match_deadline = self.timer.deadline

    def _resume_match(self) -> None:
        if not self.state.match_in_progress:
            self.timer.reset()
            self.state.match_time_left = self.timer.time_left
            self.state.match_deadline = None
            return
        self.timer.resume(self.state.match_time_left, self.state.match_deadline)
        self._sync_match_state()

    def _finish_match(self) -> None:
        team_overall = self.state.team_overall
        if team_overall <= 0:
            self.last_match = None
            self._notify(
                ActionResult.rejected(
                    RejectionReason.MATCH_SKIPPED_NO_PLAYERS,
                    "Match skipped: No players in your squad!",
                ),
                kind="match",
            )
            return
        tier = get_tier(self.state.current_league_level, self.tiers)
        if tier is None:
            # Levels are clamped on load, so only a tier table edited at runtime lands here.
            self.last_match = None
            _log.error("League tier data not found for level %s", self.state.current_league_level)
            return
        result = resolve_match(team_overall, tier, self._rng)
        self.state.money += result.reward
        self.last_match = result
        _log.info(
            "Match finished in %s: %s vs %s, %s, reward %.1f",
            tier.name,
            result.team_overall,
            result.opponent_overall,
            result.outcome.value,
            result.reward,
        )
        self._notify(ActionResult.success(result.message), kind="match")

    @property
    def current_tier(self) -> LeagueTier | None:
        return get_tier(self.state.current_league_level, self.tiers)

    @property
    def next_tier(self) -> LeagueTier | None:
        return next_tier(self.state.current_league_level, self.tiers)

    @property
    def match_progress(self) -> float:
        return self.timer.progress

    def tick(self) -> bool:
        """One second of game time: passive income, then the match clock.

        Returns True when this tick finished a match.
        """
        self.state.money += self.state.passive_income_per_second
        finished = self.timer.tick()
        self._sync_match_state()
        self._save()
        return finished

    def sell_tickets(self) -> ActionResult:
        self.state.money += self.state.click_power
        self._save()
        return ActionResult.success(f"Sold tickets for ${self.state.click_power:,}.")

    def buy_click_power_upgrade(self) -> ActionResult:
        cost = CLICK_UPGRADE_COST_PER_LEVEL * self.state.click_power
        if self.state.money < cost:
            return self._notify(
                ActionResult.rejected(RejectionReason.INSUFFICIENT_FUNDS, "Not enough money to boost ticket sales!")
            )
        self.state.money -= cost
        self.state.click_power += 1
        self._save()
        return ActionResult.success(f"Ticket sales boosted to ${self.state.click_power:,} per click.")

    def buy_stadium_upgrade(self) -> ActionResult:
        cost = STADIUM_UPGRADE_COST_PER_STEP * (self.state.stadium_capacity / STADIUM_UPGRADE_STEP)
        if self.state.money < cost:
            return self._notify(
                ActionResult.rejected(RejectionReason.INSUFFICIENT_FUNDS, "Not enough money to expand stadium!")
            )
        self.state.money -= cost
        self.state.stadium_capacity += STADIUM_UPGRADE_STEP
        self.state.passive_income_per_second = self.state.stadium_capacity / 100
        self._save()
        return ActionResult.success(
            f"Stadium expanded to {self.state.stadium_capacity:,} seats "
            f"(+{self.state.passive_income_per_second:.1f}/sec)."
        )

    def _slot_rejection(self, slot: int) -> ActionResult | None:
        if self.state.players.has_slot(slot):
            return None
        return self._notify(
            ActionResult.rejected(RejectionReason.SLOT_OUT_OF_RANGE, f"There is no player in slot {slot}.")
        )

    def train_player(self, slot: int) -> ActionResult:
        rejection = self._slot_rejection(slot)
        if rejection is not None:
            return rejection
        player = self.state.players[slot]
        cost = player.train_cost
        if self.state.money < cost:
            return self._notify(
                ActionResult.rejected(
                    RejectionReason.INSUFFICIENT_FUNDS,
                    f"Not enough money to train {player.name}! Needs ${cost:,}.",
                )
            )
        self.state.money -= cost
        trained = self.state.players.train(slot)
        self._save()
        return self._notify(ActionResult.success(f"Trained {trained.name}! Overall increased to {trained.overall}."))

    def recruit_player(self, slot: int) -> ActionResult:
        rejection = self._slot_rejection(slot)
        if rejection is not None:
            return rejection
        old_player = self.state.players[slot]
        candidate = self._factory.recruit_candidate(old_player)
        if self.state.money < candidate.value:
            return self._notify(
                ActionResult.rejected(
                    RejectionReason.INSUFFICIENT_FUNDS,
                    f"Not enough money to recruit a new {old_player.position}! Needs ${candidate.value:,}.",
                )
            )
        self.state.money -= candidate.value
        self.state.players.replace(slot, candidate)
        self._save()
        return self._notify(
            ActionResult.success(
                f"Recruited {candidate.name} (OVR: {candidate.overall}) for ${candidate.value:,}! "
                f"Replaced {old_player.name}."
            )
        )

    def start_match(self) -> ActionResult:
        if len(self.state.players) == 0:
            return self._notify(
                ActionResult.rejected(
                    RejectionReason.ROSTER_EMPTY,
                    "You need players in your squad to play a match!",
                )
            )
        if not self.timer.start():
            return self._notify(
                ActionResult.rejected(RejectionReason.MATCH_IN_PROGRESS, "A match is already in progress.")
            )
        self._sync_match_state()
        self._save()
        tier = self.current_tier
        league = tier.name if tier is not None else "league"
        return ActionResult.success(f"Kick-off! Match in the {league} has started.")

    def promote_league(self) -> ActionResult:
        result = promote(self.state, self.tiers)
        if result.ok:
            self._save()
        return self._notify(result)

    def promotion_status(self) -> ActionResult:
        return check_promotion(self.state, self.tiers)

    def reset_game(self) -> ActionResult:
        try:
            self.store.clear(self.save_key)
        except OSError as exc:
            _log.warning("Could not clear save %s: %s", self.save_key, exc)
        self.timer.reset()
        self.state = self._fresh_state()
        self.last_match = None
        self.last_load_error = ""
        self.events.clear()
        self._save()
        _log.info("Game reset to defaults")
        return ActionResult.success("Save cleared. A new game has started.")

    def snapshot(self) -> dict[str, Any]:
        return serialize_state(self.state)
