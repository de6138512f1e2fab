"""Simulation clock.

Simulated time runs at ``rate`` simulated seconds per wall second while
playing. The clock stores an anchor pair (simulated time, wall time)
and derives the current time from it, so pausing, seeking or changing
the rate only moves the anchor and never accumulates rounding error.
"""

from __future__ import annotations

import enum
import logging
import math
import time as _time
from datetime import datetime, timezone
from typing import Callable, Optional

from orbital_engine.utils.constants import TIME_SPEEDS
from orbital_engine.utils.time_utils import add_seconds, ensure_utc, format_sim_time, format_speed

logger = logging.getLogger(__name__)

WallClock = Callable[[], float]  # monotonic seconds
NowProvider = Callable[[], datetime]


class ClockError(ValueError):
    """Invalid clock operation (zero rate, non-finite rate)."""


class ClockState(str, enum.Enum):
    PAUSED = "paused"
    RUNNING = "running"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimeController:
    """Play/pause/seek/rate control over simulated time.

    ``tick()`` must be called once per frame; every consumer in that
    frame reads the value it returned (or ``time``).
    """

    def __init__(
        self,
        start: Optional[datetime] = None,
        rate: float = 1.0,
        running: bool = True,
        wall_clock: WallClock = _time.monotonic,
        now: NowProvider = _utc_now,
    ):
        self._validate_rate(rate)
        self._wall_clock = wall_clock
        self._now = now
        self._rate = float(rate)
        self._running = running
        self._anchor_time = ensure_utc(start) if start is not None else ensure_utc(now())
        self._anchor_wall = wall_clock()
        self._time = self._anchor_time

    # --- read-only state ---

    @property
    def time(self) -> datetime:
        """Simulated time as of the last ``tick()`` (or control call)."""
        return self._time

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def running(self) -> bool:
        return self._running

    @property
    def state(self) -> ClockState:
        return ClockState.RUNNING if self._running else ClockState.PAUSED

    @property
    def time_label(self) -> str:
        return format_sim_time(self._time)

    @property
    def rate_label(self) -> str:
        return format_speed(self._rate)

    # --- frame ---

    def tick(self) -> datetime:
        """Advance to the current wall time and return the simulated time."""
        self._time = self._current()
        return self._time

    # --- controls ---

    def play(self) -> None:
        if self._running:
            return
        self._anchor_wall = self._wall_clock()
        self._running = True
        logger.debug("Clock playing at %s", self.rate_label)

    def pause(self) -> None:
        if not self._running:
            return
        self._rebase()
        self._running = False
        logger.debug("Clock paused at %s", self.time_label)

    def toggle(self) -> bool:
        """Flip play/pause; returns the new running state."""
        if self._running:
            self.pause()
        else:
            self.play()
        return self._running

    def set_rate(self, multiplier: float) -> None:
        """Change speed; time already elapsed keeps the old rate."""
        self._validate_rate(multiplier)
        self._rebase()
        self._rate = float(multiplier)

    def seek(self, timestamp: datetime) -> None:
        self._anchor_time = ensure_utc(timestamp)
        self._anchor_wall = self._wall_clock()
        self._time = self._anchor_time

    def reset_to_now(self) -> None:
        self.seek(self._now())
        self.set_rate(1.0)

    def reverse(self) -> None:
        self.set_rate(-self._rate)

    def increase_rate(self) -> float:
        """Step to the next faster preset, keeping direction."""
        speed = abs(self._rate)
        faster = [value for _, value in TIME_SPEEDS if value > speed]
        if faster:
            self.set_rate(self._sign() * faster[0])
        return self._rate

    def decrease_rate(self) -> float:
        """Step to the next slower preset, keeping direction."""
        speed = abs(self._rate)
        slower = [value for _, value in TIME_SPEEDS if value < speed]
        if slower:
            self.set_rate(self._sign() * slower[-1])
        return self._rate

    # --- internals ---

    def _current(self) -> datetime:
        if not self._running:
            return self._anchor_time
        elapsed = self._wall_clock() - self._anchor_wall
        return add_seconds(self._anchor_time, elapsed * self._rate)

    def _rebase(self) -> None:
        self._anchor_time = self._current()
        self._anchor_wall = self._wall_clock()
        self._time = self._anchor_time

    def _sign(self) -> float:
        return -1.0 if self._rate < 0 else 1.0

    @staticmethod
    def _validate_rate(rate: float) -> None:
        if rate == 0:
            raise ClockError("Clock rate must be non-zero; use pause() to stop time")
        if not math.isfinite(rate):
            raise ClockError(f"Clock rate must be finite, got {rate}")
