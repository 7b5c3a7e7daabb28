from __future__ import annotations

import logging
import math
import time
from enum import Enum
from typing import Callable

from .config import MATCH_DURATION_SECONDS

_log = logging.getLogger("kick_mogul.timer")


class MatchPhase(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"


class MatchTimer:
    """One-match-at-a-time countdown driven by external one-second ticks.

    The timer counts ticks, but it also keeps the wall-clock deadline of the
    running match so a restarted process can work out how much of the match is
    really left instead of trusting a stale countdown.
    """

    def __init__(
        self,
        on_complete: Callable[[], None],
        duration: int = MATCH_DURATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if duration <= 0:
            raise ValueError("Match duration must be positive.")
        self.duration = duration
        self._on_complete = on_complete
        self._clock = clock
        self.phase = MatchPhase.IDLE
        self.time_left = duration
        self.progress = 0.0
        self.deadline: float | None = None

    @property
    def running(self) -> bool:
        return self.phase is MatchPhase.RUNNING

    def _progress_for(self, time_left: int) -> float:
        return (self.duration - time_left) / self.duration * 100

    def start(self) -> bool:
        if self.running:
            return False
        self.phase = MatchPhase.RUNNING
        self.time_left = self.duration
        self.progress = 0.0
        self.deadline = self._clock() + self.duration
        return True

    def tick(self) -> bool:
        """Advance one second. Returns True on the tick that completes the match."""
        if not self.running:
            return False
        self.time_left = max(0, self.time_left - 1)
        self.progress = self._progress_for(self.time_left)
        if self.time_left <= 0:
            self._complete()
            return True
        return False

    def resume(self, time_left: int, deadline: float | None = None) -> bool:
        """Rebuild a match that was running when the last snapshot was taken.

        The saved countdown caps the remaining time and a saved deadline can only
        shorten it. Returns True when the match had already run out and was
        completed here.
        """
        remaining = int(time_left)
        if deadline is not None:
            remaining = min(remaining, math.ceil(deadline - self._clock()))
        remaining = max(0, min(self.duration, remaining))
        self.phase = MatchPhase.RUNNING
        self.time_left = remaining
        self.progress = self._progress_for(remaining)
        now = self._clock()
        self.deadline = now + remaining if deadline is None else min(deadline, now + remaining)
        _log.info("Resumed match with %s seconds left", remaining)
        if remaining <= 0:
            self._complete()
            return True
        return False

    def reset(self) -> None:
        self.phase = MatchPhase.IDLE
        self.time_left = self.duration
        self.progress = 0.0
        self.deadline = None

    def _complete(self) -> None:
        try:
            self._on_complete()
        finally:
            self.phase = MatchPhase.IDLE
            self.time_left = self.duration
            self.deadline = None

