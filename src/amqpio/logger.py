"""Level-gated logging wrapper shared by every transport."""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

LogLevel = Literal["trace", "debug", "info", "warn", "error"]

LOGGER_NAME = "amqpio"
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

_LEVELS: dict[LogLevel, int] = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class LoggerProtocol(Protocol):
    """Logger exposing one method per level, e.g. a third-party or test logger.

    Anything with a ``log(level, msg, *args)`` method, ``logging.Logger``
    included, is accepted as well and preferred when present.
    """

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warn(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


class BoundLogger:
    """Wraps a ``logging.Logger`` and drops records below the bound level.

    Transports receive one of these and derive their own via :meth:`child`,
    so ``amqpio.tcp`` and ``amqpio.heartbeat`` records can be filtered
    separately while sharing a single threshold.
    """

    def __init__(
        self,
        logger: LoggerProtocol | logging.Logger | None = None,
        *,
        level: LogLevel = "info",
    ) -> None:
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")
        self._logger = logger or _default_logger()
        self._level = level

    @property
    def level(self) -> LogLevel:
        return self._level

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("trace", msg, args, kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("debug", msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("info", msg, args, kwargs)

    def warn(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("warn", msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._emit("error", msg, args, kwargs)

    def child(self, name: str) -> "BoundLogger":
        """Derive a logger for a sub-component at the same level.

        Python loggers get a dotted child (``amqpio.tcp``); duck-typed loggers
        have no hierarchy and are shared as-is.
        """
        if isinstance(self._logger, logging.Logger):
            return BoundLogger(self._logger.getChild(name), level=self._level)
        return BoundLogger(self._logger, level=self._level)

    def is_enabled(self, level: LogLevel) -> bool:
        return _LEVELS[level] >= _LEVELS[self._level]

    def _emit(self, level: LogLevel, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self.is_enabled(level):
            return
        try:
            if hasattr(self._logger, "log"):
                self._logger.log(_LEVELS[level], msg, *args, **kwargs)
                return
            handler = getattr(self._logger, level, None)
            if handler is None and level == "warn":
                handler = getattr(self._logger, "warning", None)
            if handler is not None:
                handler(msg, *args, **kwargs)
        except Exception:
            # A broken handler must not take the connection down with it
            pass


def _default_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(TRACE_LEVEL)
    return logger


def create_logger(*, logger: Any | None = None, level: LogLevel = "info") -> BoundLogger:
    if isinstance(logger, BoundLogger):
        return logger
    return BoundLogger(logger, level=level)


__all__ = ["BoundLogger", "LogLevel", "LoggerProtocol", "TRACE_LEVEL", "create_logger"]
