from __future__ import annotations

import logging
import os
import random
from contextlib import asynccontextmanager
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from .app import format_squad, format_status, status_payload, tier_payload
from .config import TICK_SECONDS
from .game import Game
from .models import ActionResult, RejectionReason
from .storage import JsonFileStore, SaveStore

_log = logging.getLogger("kick_mogul.api")

DATA_DIR_ENV = "KICK_MOGUL_DATA_DIR"


class SlotSelection(BaseModel):
    slot: int


class GameService:
    def __init__(self, store: SaveStore | None = None, game: Game | None = None) -> None:
        if game is None:
            if store is None:
                data_root = Path(os.environ.get(DATA_DIR_ENV) or Path(__file__).resolve().parents[2])
                store = JsonFileStore(data_root)
            game = Game(store=store, rng=random.Random())
        self.game = game
        self._lock = Lock()
        self._stop = Event()
        self._ticker: Thread | None = None

    def start_ticker(self) -> None:
        if self._ticker is not None and self._ticker.is_alive():
            return
        self._stop.clear()
        self._ticker = Thread(target=self._run_ticker, name="kick-mogul-ticker", daemon=True)
        self._ticker.start()

    def stop_ticker(self) -> None:
        self._stop.set()
        if self._ticker is not None:
            self._ticker.join(timeout=TICK_SECONDS * 2)
        self._ticker = None

    def _run_ticker(self) -> None:
        while not self._stop.wait(TICK_SECONDS):
            with self._lock:
                self.game.tick()

    def state(self) -> dict[str, Any]:
        with self._lock:
            return status_payload(self.game)

    def status_text(self) -> str:
        with self._lock:
            return f"{format_status(self.game)}\n\n{format_squad(self.game.state.players)}\n"

    def events(self, limit: int = 20) -> list[dict[str, Any]]:
        with self._lock:
            return list(self.game.events)[-max(0, limit):]

    def perform(self, action: str, *args: Any) -> dict[str, Any]:
        with self._lock:
            result: ActionResult = getattr(self.game, action)(*args)
            if not result.ok:
                status = 404 if result.reason is RejectionReason.SLOT_OUT_OF_RANGE else 400
                raise HTTPException(status_code=status, detail=result.to_dict())
            payload = result.to_dict()
            payload["state"] = status_payload(self.game)
            return payload


def create_app(service: GameService | None = None) -> FastAPI:
    service = service or GameService()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        service.start_ticker()
        try:
            yield
        finally:
            service.stop_ticker()

    app = FastAPI(title="Kick Mogul API", version="0.1.0", lifespan=lifespan)
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/state")
    def state() -> dict[str, Any]:
        return service.state()

    @app.get("/api/status.txt", response_class=PlainTextResponse)
    def status_text() -> str:
        return service.status_text()

    @app.get("/api/leagues")
    def leagues() -> list[dict[str, Any]]:
        return [tier_payload(tier) for tier in service.game.tiers]

    @app.get("/api/events")
    def events(limit: int = 20) -> list[dict[str, Any]]:
        return service.events(limit=limit)

    @app.post("/api/tickets")
    def sell_tickets() -> dict[str, Any]:
        return service.perform("sell_tickets")

    @app.post("/api/upgrades/click-power")
    def buy_click_power() -> dict[str, Any]:
        return service.perform("buy_click_power_upgrade")

    @app.post("/api/upgrades/stadium")
    def buy_stadium() -> dict[str, Any]:
        return service.perform("buy_stadium_upgrade")

    @app.post("/api/players/train")
    def train_player(payload: SlotSelection) -> dict[str, Any]:
        return service.perform("train_player", payload.slot)

    @app.post("/api/players/recruit")
    def recruit_player(payload: SlotSelection) -> dict[str, Any]:
        return service.perform("recruit_player", payload.slot)

    @app.post("/api/match/start")
    def start_match() -> dict[str, Any]:
        return service.perform("start_match")

    @app.post("/api/league/promote")
    def promote_league() -> dict[str, Any]:
        return service.perform("promote_league")

    @app.post("/api/reset")
    def reset() -> dict[str, Any]:
        return service.perform("reset_game")

    return app


def serve(host: str = "127.0.0.1", port: int = 8000, log_level: str = "info") -> None:
    logging.basicConfig(level=log_level.upper())
    _log.info("Serving Kick Mogul on %s:%s", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_level=log_level)
