import json
import random

import pytest

from kick_mogul.config import SAVE_KEY, SAVE_VERSION
from kick_mogul.game import Game
from kick_mogul.models import Player, RejectionReason, Roster
from kick_mogul.names import PlayerFactory
from kick_mogul.storage import (
    JsonFileStore,
    MemoryStore,
    default_state,
    deserialize_state,
    load_state,
    save_state,
    serialize_state,
)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _game(store, clock: FakeClock | None = None, seed: int = 3) -> Game:
    return Game(store=store, rng=random.Random(seed), clock=clock or FakeClock())


def _blob(**fields) -> str:
    return json.dumps(fields)


def test_state_survives_round_trip() -> None:
    state = default_state(PlayerFactory(random.Random(9)))
    state.money = 1234.75
    state.click_power = 7
    state.stadium_capacity = 600
    state.passive_income_per_second = 6.0
    state.current_league_level = 3
    state.match_in_progress = True
    state.match_time_left = 87
    state.match_deadline = 1_000_087.5
    state.players.train(2)
    decoded = deserialize_state(json.loads(json.dumps(serialize_state(state))))
    assert decoded == state


def test_store_round_trip_keeps_empty_roster() -> None:
    store = MemoryStore()
    state = default_state(PlayerFactory(random.Random(1)))
    state.players = Roster([])
    assert save_state(store, state)
    loaded, error = load_state(store)
    assert error == ""
    assert loaded == state
    assert len(loaded.players) == 0


def test_missing_fields_fall_back_to_defaults() -> None:
    state = deserialize_state({}, PlayerFactory(random.Random(2)))
    assert state.money == 0
    assert state.click_power == 1
    assert state.stadium_capacity == 100
    assert state.passive_income_per_second == 0
    assert state.current_league_level == 1
    assert state.match_in_progress is False
    assert state.match_time_left == 300
    assert state.match_deadline is None
    assert [p.position for p in state.players] == ["GK", "DEF", "DEF", "MID", "MID", "FWD", "FWD"]


def test_invalid_fields_fall_back_individually() -> None:
    state = deserialize_state(
        {
            "money": "lots",
            "clickPower": 0,
            "stadiumCapacity": 300,
            "matchInProgress": "yes",
            "matchDeadline": "soon",
            "players": [
                {"id": "a1", "name": "Liam K", "overall": 61, "value": 6100, "position": "FWD"},
                {"name": "Ghost", "overall": 50, "position": "COACH"},
                "junk",
                {"name": "Noah B", "overall": 48, "position": "DEF"},
            ],
        }
    )
    assert state.money == 0
    assert state.click_power == 1
    assert state.stadium_capacity == 300
    assert state.match_in_progress is False
    assert state.match_deadline is None
    assert [p.name for p in state.players] == ["Liam K", "Noah B"]
    assert state.players[0].player_id == "a1"
    assert state.players[1].value == 4800


@pytest.mark.regression
def test_corrupt_save_starts_new_game() -> None:
    store = MemoryStore({SAVE_KEY: "{not json"})
    game = _game(store)
    assert "not valid JSON" in game.last_load_error
    assert game.state.money == 0
    assert len(game.state.players) == 7
    assert game.events[0]["reason"] == RejectionReason.CORRUPT_OR_MISSING_SAVE.value
    # The fresh game replaces the unreadable blob.
    assert json.loads(store.blobs[SAVE_KEY])["saveVersion"] == SAVE_VERSION


@pytest.mark.regression
def test_non_object_save_is_ignored() -> None:
    game = _game(MemoryStore({SAVE_KEY: "[1, 2, 3]"}))
    assert "invalid format" in game.last_load_error
    assert game.state.click_power == 1


@pytest.mark.regression
def test_rejects_future_save_version_with_clear_error() -> None:
    store = MemoryStore({SAVE_KEY: _blob(saveVersion=999, money=50_000)})
    game = _game(store)
    assert game.state.money == 0
    assert "Unsupported save version" in game.last_load_error


@pytest.mark.regression
def test_loads_save_without_version_or_deadline() -> None:
    players = [
        {"id": f"p{i}", "name": f"Player {i}", "overall": 60, "value": 6000, "position": "MID"}
        for i in range(7)
    ]
    store = MemoryStore(
        {
            SAVE_KEY: _blob(
                money=321.5,
                clickPower=4,
                stadiumCapacity=300,
                passiveIncomePerSecond=3,
                players=players,
                currentLeagueLevel=2,
                matchInProgress=True,
                matchTimeLeft=120,
            )
        }
    )
    clock = FakeClock(5000.0)
    game = _game(store, clock)
    assert game.last_load_error == ""
    assert game.state.money == 321.5
    assert game.state.current_league_level == 2
    assert game.state.match_in_progress is True
    assert game.state.match_time_left == 120
    assert game.state.match_deadline == 5120.0
    assert game.match_progress == pytest.approx(60.0)


@pytest.mark.regression
def test_exhausted_legacy_match_completes_on_load() -> None:
    store = MemoryStore({SAVE_KEY: _blob(money=0, matchInProgress=True, matchTimeLeft=0)})
    game = _game(store)
    assert game.state.match_in_progress is False
    assert game.state.match_time_left == 300
    assert game.last_match is not None
    assert game.state.money == pytest.approx(game.last_match.reward)


def test_running_match_resumes_from_deadline() -> None:
    store = MemoryStore()
    clock = FakeClock(10_000.0)
    game = _game(store, clock)
    game.start_match()
    for _ in range(100):
        clock.now += 1
        game.tick()
    assert game.state.match_time_left == 200

    clock.now += 50
    resumed = _game(store, clock)
    assert resumed.state.match_in_progress is True
    assert resumed.state.match_time_left == 150
    assert resumed.state.match_deadline == 10_300.0


def test_match_that_ended_while_away_pays_out_on_load() -> None:
    store = MemoryStore()
    clock = FakeClock(10_000.0)
    game = _game(store, clock)
    game.start_match()
    saved_money = game.state.money

    clock.now += 3600
    resumed = _game(store, clock)
    assert resumed.state.match_in_progress is False
    assert resumed.last_match is not None
    assert resumed.state.money == pytest.approx(saved_money + resumed.last_match.reward)


def test_unknown_league_level_is_clamped() -> None:
    game = _game(MemoryStore({SAVE_KEY: _blob(currentLeagueLevel=9)}))
    assert game.state.current_league_level == 4


def test_file_store_writes_backup_and_clears(tmp_path) -> None:
    store = JsonFileStore(tmp_path)
    state_path = tmp_path / f"{SAVE_KEY}.json"
    backup_path = tmp_path / f"{SAVE_KEY}.json.bak"

    game = _game(store)
    payload = json.loads(state_path.read_text(encoding="utf-8"))
    assert payload["saveVersion"] == SAVE_VERSION

    game.sell_tickets()
    assert backup_path.exists()

    game.reset_game()
    assert not backup_path.exists()
    assert json.loads(state_path.read_text(encoding="utf-8"))["money"] == 0


def test_file_store_game_reloads_progress(tmp_path) -> None:
    game = _game(JsonFileStore(tmp_path))
    game.state.money = 40
    game.buy_click_power_upgrade()
    game.state.players.replace(0, Player(name="Keeper Z", overall=70, value=7000, position="GK"))
    game.sell_tickets()

    reloaded = _game(JsonFileStore(tmp_path))
    assert reloaded.state.click_power == 2
    assert reloaded.state.money == 32
    assert reloaded.state.players[0].name == "Keeper Z"


@pytest.mark.regression
@pytest.mark.parametrize("bad", ["Infinity", "-Infinity", "NaN", "1e400", "1" + "0" * 400])
def test_non_finite_numbers_fall_back_to_defaults(bad: str) -> None:
    blob = (
        f'{{"saveVersion": {bad}, "money": {bad}, "clickPower": {bad}, "stadiumCapacity": {bad},'
        f' "passiveIncomePerSecond": {bad}, "currentLeagueLevel": {bad}, "matchTimeLeft": {bad},'
        f' "players": [{{"name": "Liam K", "overall": {bad}, "position": "GK"}},'
        f' {{"name": "Noah B", "overall": 48, "value": {bad}, "position": "DEF"}}]}}'
    )
    game = _game(MemoryStore({SAVE_KEY: blob}))
    assert game.last_load_error == ""
    assert game.state.money == 0
    assert game.state.click_power == 1
    assert game.state.stadium_capacity == 100
    assert game.state.passive_income_per_second == 0
    assert game.state.current_league_level == 1
    assert game.state.match_time_left == 300
    assert [p.name for p in game.state.players] == ["Noah B"]
    assert game.state.players[0].value == 4800


@pytest.mark.regression
@pytest.mark.parametrize("bad", ["Infinity", "-Infinity", "NaN", "1e400"])
def test_non_finite_deadline_resumes_from_countdown(bad: str) -> None:
    blob = f'{{"matchInProgress": true, "matchTimeLeft": 120, "matchDeadline": {bad}}}'
    clock = FakeClock(5000.0)
    game = _game(MemoryStore({SAVE_KEY: blob}), clock)
    assert game.state.match_in_progress is True
    assert game.state.match_time_left == 120
    assert game.state.match_deadline == 5120.0


@pytest.mark.regression
def test_exhausted_countdown_with_future_deadline_completes_on_load() -> None:
    store = MemoryStore(
        {SAVE_KEY: _blob(matchInProgress=True, matchTimeLeft=0, matchDeadline=1_000_200.0)}
    )
    game = _game(store)
    assert game.state.match_in_progress is False
    assert game.state.match_deadline is None
    assert game.last_match is not None


@pytest.mark.regression
def test_undecodable_save_file_starts_new_game(tmp_path) -> None:
    state_path = tmp_path / f"{SAVE_KEY}.json"
    state_path.write_bytes(b"\xff\xfe{\"money\": 10}")
    game = _game(JsonFileStore(tmp_path))
    assert game.last_load_error.startswith("Failed to load save")
    assert game.events[0]["reason"] == RejectionReason.CORRUPT_OR_MISSING_SAVE.value
    assert game.state.money == 0
    assert json.loads(state_path.read_text(encoding="utf-8"))["saveVersion"] == SAVE_VERSION
