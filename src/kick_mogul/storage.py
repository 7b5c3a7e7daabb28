from __future__ import annotations

import json
import logging
import math
import shutil
from pathlib import Path
from typing import Any, Protocol

from .config import (
    DEFAULT_CLICK_POWER,
    DEFAULT_LEAGUE_LEVEL,
    DEFAULT_MONEY,
    DEFAULT_PASSIVE_INCOME,
    DEFAULT_STADIUM_CAPACITY,
    MATCH_DURATION_SECONDS,
    PLAYER_VALUE_PER_OVERALL,
    SAVE_KEY,
    SAVE_VERSION,
)
from .models import POSITIONS, GameState, Player, Roster
from .names import PlayerFactory

_log = logging.getLogger("kick_mogul.storage")


class SaveStore(Protocol):
    def load(self, key: str) -> str | None: ...

    def save(self, key: str, blob: str) -> None: ...

    def clear(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, blobs: dict[str, str] | None = None) -> None:
        self.blobs: dict[str, str] = dict(blobs or {})

    def load(self, key: str) -> str | None:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.blobs[key] = blob

    def clear(self, key: str) -> None:
        self.blobs.pop(key, None)


class JsonFileStore:
    """Keeps each key in ``<directory>/<key>.json`` with a ``.bak`` of the previous write."""

    def __init__(self, directory: str | Path, *, with_backup: bool = True) -> None:
        self.directory = Path(directory)
        self.with_backup = with_backup

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        if self.with_backup and path.exists():
            backup = path.with_suffix(path.suffix + ".bak")
            try:
                shutil.copy2(path, backup)
            except OSError:
                pass
        path.write_text(blob, encoding="utf-8")

    def clear(self, key: str) -> None:
        for path in (self.path_for(key), self.path_for(key).with_suffix(".json.bak")):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                _log.warning("Could not remove %s: %s", path, exc)


def _serialize_player(player: Player) -> dict[str, Any]:
    return {
        "id": player.player_id,
        "name": player.name,
        "overall": player.overall,
        "value": player.value,
        "position": player.position,
    }


def serialize_state(state: GameState) -> dict[str, Any]:
    return {
        "saveVersion": SAVE_VERSION,
        "money": state.money,
        "clickPower": state.click_power,
        "stadiumCapacity": state.stadium_capacity,
        "passiveIncomePerSecond": state.passive_income_per_second,
        "players": [_serialize_player(p) for p in state.players],
        "currentLeagueLevel": state.current_league_level,
        "matchInProgress": state.match_in_progress,
        "matchTimeLeft": state.match_time_left,
        "matchDeadline": state.match_deadline,
    }


def _finite(value: Any) -> float | None:
    """``value`` as a float, or None for non-numbers, NaN, infinities and overflowing ints."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _as_number(value: Any, fallback: float) -> float:
    number = _finite(value)
    return fallback if number is None else number


def _as_int(value: Any, fallback: int, minimum: int | None = None) -> int:
    number = _finite(value)
    if number is None:
        return fallback
    out = value if isinstance(value, int) else int(number)
    if minimum is not None and out < minimum:
        return fallback
    return out


def _deserialize_player(raw: Any) -> Player | None:
    if not isinstance(raw, dict):
        return None
    name = raw.get("name")
    position = raw.get("position")
    if not isinstance(name, str) or position not in POSITIONS:
        return None
    overall = _as_int(raw.get("overall"), -1, minimum=0)
    if overall < 0:
        return None
    value = _as_int(raw.get("value"), overall * PLAYER_VALUE_PER_OVERALL, minimum=0)
    kwargs: dict[str, Any] = {"name": name, "overall": overall, "value": value, "position": position}
    player_id = raw.get("id")
    if isinstance(player_id, str) and player_id:
        kwargs["player_id"] = player_id
    return Player(**kwargs)


def default_state(factory: PlayerFactory | None = None) -> GameState:
    factory = factory or PlayerFactory()
    return GameState(
        money=DEFAULT_MONEY,
        click_power=DEFAULT_CLICK_POWER,
        stadium_capacity=DEFAULT_STADIUM_CAPACITY,
        passive_income_per_second=DEFAULT_PASSIVE_INCOME,
        players=factory.initial_lineup(),
        current_league_level=DEFAULT_LEAGUE_LEVEL,
        match_in_progress=False,
        match_time_left=MATCH_DURATION_SECONDS,
        match_deadline=None,
    )


def deserialize_state(raw: dict[str, Any], factory: PlayerFactory | None = None) -> GameState:
    """Build a state from a decoded blob; every missing or invalid field takes its default."""
    raw_players = raw.get("players")
    if isinstance(raw_players, list):
        players = Roster([p for p in (_deserialize_player(entry) for entry in raw_players) if p is not None])
    else:
        players = (factory or PlayerFactory()).initial_lineup()

    deadline = _finite(raw.get("matchDeadline"))
    return GameState(
        money=_as_number(raw.get("money"), DEFAULT_MONEY),
        click_power=_as_int(raw.get("clickPower"), DEFAULT_CLICK_POWER, minimum=1),
        stadium_capacity=_as_int(raw.get("stadiumCapacity"), DEFAULT_STADIUM_CAPACITY, minimum=0),
        passive_income_per_second=_as_number(raw.get("passiveIncomePerSecond"), DEFAULT_PASSIVE_INCOME),
        players=players,
        current_league_level=_as_int(raw.get("currentLeagueLevel"), DEFAULT_LEAGUE_LEVEL, minimum=1),
        match_in_progress=raw.get("matchInProgress") is True,
        match_time_left=_as_int(raw.get("matchTimeLeft"), MATCH_DURATION_SECONDS),
        match_deadline=deadline,
    )


def decode_blob(blob: str | None) -> tuple[dict[str, Any] | None, str]:
    """Parse a stored blob. Returns the payload, or None with the reason it was unusable."""
    if blob is None:
        return None, ""
    try:
        raw = json.loads(blob)
    except (ValueError, RecursionError) as exc:
        return None, f"Save data is not valid JSON ({exc}); starting with defaults."
    if not isinstance(raw, dict):
        return None, "Save data has invalid format; starting with defaults."
    version = _as_int(raw.get("saveVersion"), 1)
    if version > SAVE_VERSION:
        return None, f"Unsupported save version {version}; app supports up to {SAVE_VERSION}."
    return raw, ""


def load_state(store: SaveStore, factory: PlayerFactory | None = None, key: str = SAVE_KEY) -> tuple[GameState | None, str]:
    """Read the saved game. ``(None, reason)`` means no usable save; reason is empty when none existed."""
    try:
        blob = store.load(key)
    except (OSError, ValueError) as exc:
        _log.warning("Failed to read save %s: %s", key, exc)
        return None, f"Failed to load save ({exc}); starting with defaults."
    raw, error = decode_blob(blob)
    if raw is None:
        if error:
            _log.warning(error)
        return None, error
    return deserialize_state(raw, factory), ""


def save_state(store: SaveStore, state: GameState, key: str = SAVE_KEY) -> bool:
    blob = json.dumps(serialize_state(state), indent=2)
    try:
        store.save(key, blob)
    except OSError as exc:
        _log.warning("Failed to write save %s: %s", key, exc)
        return False
    _log.debug("Saved %s (%s bytes)", key, len(blob))
    return True
