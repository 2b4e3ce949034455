"""Heartbeat bookkeeping for a single connection."""

from __future__ import annotations

import enum
import math
import time
from typing import Callable

Clock = Callable[[], float]


class HeartbeatStatus(enum.Enum):
    IDLE = "idle"  # disabled, or nothing read/written yet
    OK = "ok"
    DUE = "due"  # we should send a heartbeat frame
    MISSED = "missed"  # the peer went quiet for two intervals


def _round_half_up(value: float) -> int:
    if value < 0:
        return -_round_half_up(-value)
    return int(math.floor(value + 0.5))


class HeartbeatMonitor:
    """Tracks read/write activity against the negotiated heartbeat interval."""

    def __init__(
        self,
        interval: int = 0,
        *,
        initial_interval: int | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        if interval < 0:
            raise ValueError("heartbeat interval must be >= 0")
        self.interval = interval
        self.initial_interval = interval if initial_interval is None else initial_interval
        self.last_read: float | None = None
        self.last_write: float | None = None
        self._clock = clock

    @property
    def enabled(self) -> bool:
        return self.interval != 0

    def now(self) -> float:
        return self._clock()

    def record_read(self, at: float | None = None) -> None:
        self.last_read = self._clock() if at is None else at

    def record_write(self, at: float | None = None) -> None:
        self.last_write = self._clock() if at is None else at

    def reset(self) -> None:
        self.last_read = None
        self.last_write = None

    def disable(self) -> None:
        self.interval = 0

    def reenable(self) -> None:
        self.interval = self.initial_interval

    def check(self) -> HeartbeatStatus:
        if self.interval == 0 or self.last_read is None or self.last_write is None:
            return HeartbeatStatus.IDLE

        t = self._clock()
        t_read = _round_half_up(t - self.last_read)
        t_write = _round_half_up(t - self.last_write)

        if self.interval * 2 < t_read:
            return HeartbeatStatus.MISSED
        if self.interval / 2 < t_write:
            return HeartbeatStatus.DUE
        return HeartbeatStatus.OK

    def __repr__(self) -> str:
        return (
            f"HeartbeatMonitor(interval={self.interval}, initial_interval={self.initial_interval}, "
            f"last_read={self.last_read}, last_write={self.last_write})"
        )


__all__ = ["Clock", "HeartbeatMonitor", "HeartbeatStatus"]
