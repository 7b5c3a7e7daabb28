from __future__ import annotations

import random
import string

from .config import INITIAL_LINEUP, PLAYER_VALUE_PER_OVERALL, RECRUIT_OVERALL_GAIN
from .models import Player, Roster

FIRST_NAMES = [
    "Liam", "Noah", "Oliver", "Elijah", "William", "James", "Benjamin", "Lucas",
    "Henry", "Alexander", "Mateo", "Daniel", "Michael", "Ethan", "Jacob",
    "Logan", "Jackson", "Sebastian", "David", "Joseph",
]


class NameGenerator:
    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def next_name(self) -> str:
        first = self._rng.choice(FIRST_NAMES)
        initial = self._rng.choice(string.ascii_uppercase)
        return f"{first} {initial}"


class PlayerFactory:
    """Builds players for new squads and recruitment offers."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._names = NameGenerator(self._rng)

    def make_player(self, min_overall: int, max_overall: int, position: str) -> Player:
        overall = self._rng.randint(min_overall, max_overall)
        return Player(
            name=self._names.next_name(),
            overall=overall,
            value=overall * PLAYER_VALUE_PER_OVERALL,
            position=position,
        )

    def initial_lineup(self) -> Roster:
        return Roster([self.make_player(low, high, pos) for pos, low, high in INITIAL_LINEUP])

    def recruit_candidate(self, current: Player) -> Player:
        low, high = RECRUIT_OVERALL_GAIN
        return self.make_player(current.overall + low, current.overall + high, current.position)
