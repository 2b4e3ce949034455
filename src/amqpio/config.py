"""Options recognized by the transports."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .logger import LogLevel

SIGNALS_OPT_OUT_ENV = "AMQP_WITHOUT_SIGNALS"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class TransportOptions:
    host: str
    port: int = 5672
    heartbeat: int = 0
    initial_heartbeat: int | None = None
    keepalive: bool = False
    connect_timeout: float = 3.0
    read_write_timeout: float = 3.0
    use_ssl: bool = False
    dispatch_signals: bool = True
    log_level: LogLevel = "info"

    def __post_init__(self) -> None:
        if self.heartbeat < 0:
            raise ValueError("heartbeat must be >= 0")
        if self.initial_heartbeat is None:
            self.initial_heartbeat = self.heartbeat
        elif self.initial_heartbeat < 0:
            raise ValueError("initial_heartbeat must be >= 0")


def signals_disabled_by_env(environ: Mapping[str, str] | None = None) -> bool:
    """True when ``AMQP_WITHOUT_SIGNALS`` asks for signal dispatch to be skipped."""
    env = os.environ if environ is None else environ
    return env.get(SIGNALS_OPT_OUT_ENV, "").strip().lower() in _TRUTHY


__all__ = ["SIGNALS_OPT_OUT_ENV", "TransportOptions", "signals_disabled_by_env"]
