"""Exceptions raised by the amqpio transport layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .fault import FaultRecord


class AMQPError(Exception):
    """Base error for all transport failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class AMQPRuntimeError(AMQPError):
    """Raised when an operation fails in a way the caller may recover from."""


class IOWaitError(AMQPRuntimeError):
    """Raised when the readiness wait reports an I/O fault."""

    def __init__(self, message: str, *, code: int = 0, context: Any | None = None) -> None:
        super().__init__(message, context=context)
        self.code = code


class AMQPIOError(AMQPError):
    """Raised when reading from or writing to the transport fails."""

    def __init__(self, message: str, *, code: int = 0, context: Any | None = None) -> None:
        super().__init__(message, context=context)
        self.code = code


class AMQPTimeoutError(AMQPIOError):
    """Raised when a blocking read or write exceeds its timeout."""


class AMQPConnectionError(AMQPError):
    """Raised when the transport cannot reach the peer."""


class AMQPConnectionClosedError(AMQPError):
    """Raised when the connection is closed or was lost."""


class HeartbeatMissedError(AMQPConnectionClosedError):
    """Raised when the peer stopped sending heartbeats. The transport is closed."""


class CapturedFault(AMQPError):
    """A warning or platform error intercepted by :class:`~amqpio.fault.FaultCapture`."""

    def __init__(self, record: "FaultRecord") -> None:
        super().__init__(record.message, context=record)
        self.record = record

    @property
    def code(self) -> int:
        return self.record.code

    @property
    def filename(self) -> str | None:
        return self.record.filename

    @property
    def lineno(self) -> int | None:
        return self.record.lineno


__all__ = [
    "AMQPConnectionClosedError",
    "AMQPConnectionError",
    "AMQPError",
    "AMQPIOError",
    "AMQPRuntimeError",
    "AMQPTimeoutError",
    "CapturedFault",
    "HeartbeatMissedError",
    "IOWaitError",
]
