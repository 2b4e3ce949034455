"""Common transport abstractions."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Protocol, TypeVar, runtime_checkable

from ..config import TransportOptions, signals_disabled_by_env
from ..errors import CapturedFault, HeartbeatMissedError, IOWaitError
from ..fault import FaultCapture
from ..heartbeat import Clock, HeartbeatMonitor, HeartbeatStatus
from ..logger import BoundLogger, create_logger
from ..signals import SignalDispatcher
from ..wire import HEARTBEAT_FRAME

TransportT = TypeVar("TransportT", bound="AbstractTransport")


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@runtime_checkable
class Transport(Protocol):
    def read(self, n: int) -> bytes: ...

    def write(self, data: bytes) -> int | None: ...

    def close(self) -> None: ...

    def connect(self) -> None: ...

    def get_socket(self) -> Any: ...

    def select(self, sec: float | None, usec: int | None = 0) -> int: ...

    def reconnect(self) -> None: ...

    def disable_heartbeat(self) -> "Transport": ...

    def reenable_heartbeat(self) -> "Transport": ...


class AbstractTransport(ABC):
    """Base class for concrete transports.

    Subclasses provide the raw primitives (``read``, ``write``, ``close``,
    ``connect``, ``get_socket`` and ``do_select``). This class layers the
    heartbeat check, fault capture around the readiness poll and cooperative
    signal dispatch on top of them in :meth:`select`.

    Concrete ``read``/``write`` implementations are expected to call
    ``self.heartbeat.record_read()`` / ``record_write()`` after each
    successful transfer; the heartbeat check relies on those timestamps.
    """

    log_name = "transport"

    def __init__(
        self,
        host: str,
        port: int,
        *,
        heartbeat: int = 0,
        initial_heartbeat: int | None = None,
        keepalive: bool = False,
        dispatch_signals: bool = True,
        signal_dispatcher: SignalDispatcher | None = None,
        clock: Clock = time.monotonic,
        logger: BoundLogger | None = None,
    ) -> None:
        self._endpoint = Endpoint(host, port)
        self.keepalive = keepalive
        self._heartbeat = HeartbeatMonitor(
            heartbeat,
            initial_interval=initial_heartbeat,
            clock=clock,
        )
        self._logger = (logger or create_logger()).child(self.log_name)
        self._signal_dispatcher = signal_dispatcher or SignalDispatcher(logger=logger)
        self._can_dispatch_signals = (
            dispatch_signals
            and not signals_disabled_by_env()
            and self._signal_dispatcher.supported
        )

    @classmethod
    def from_options(cls: type[TransportT], options: TransportOptions, **overrides: Any) -> TransportT:
        params = cls._params_from_options(options)
        params.update(overrides)
        return cls(options.host, options.port, **params)

    @classmethod
    def _params_from_options(cls, options: TransportOptions) -> dict[str, Any]:
        return {
            "heartbeat": options.heartbeat,
            "initial_heartbeat": options.initial_heartbeat,
            "keepalive": options.keepalive,
            "dispatch_signals": options.dispatch_signals,
            "logger": create_logger(level=options.log_level),
        }

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def heartbeat(self) -> HeartbeatMonitor:
        return self._heartbeat

    @property
    def signal_dispatcher(self) -> SignalDispatcher:
        return self._signal_dispatcher

    @property
    def can_dispatch_signals(self) -> bool:
        return self._can_dispatch_signals

    def signal_wakeup_socket(self) -> Any:
        """Socket that turns readable when a dispatched signal arrives.

        ``do_select`` implementations add it to their poll set so a signal
        ends the wait early. ``None`` when signal dispatch is off.
        """
        if not self._can_dispatch_signals:
            return None
        return self._signal_dispatcher.wakeup_socket()

    @abstractmethod
    def read(self, n: int) -> bytes:
        """Return exactly ``n`` bytes, blocking until they arrive."""

    @abstractmethod
    def write(self, data: bytes) -> int | None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def connect(self) -> None:
        """Open the connection; raise a transport error if the peer is unreachable."""

    @abstractmethod
    def get_socket(self) -> Any:
        """Expose the underlying handle for use with an external event loop."""

    @abstractmethod
    def do_select(self, sec: float | None, usec: int | None) -> int | bool | None:
        """Wait for the transport to become readable.

        ``sec=None`` blocks indefinitely. Return the number of ready handles,
        or ``False``/``0`` when nothing became ready.
        """

    def select(self, sec: float | None, usec: int | None = 0) -> int:
        """Wait until data can be read, running heartbeat checks first.

        Returns ``0`` when the wait timed out or was interrupted with nothing
        ready. Raises :class:`HeartbeatMissedError` (transport now closed) or
        :class:`IOWaitError` when the poll itself reported a fault.
        """
        self.check_heartbeat()

        try:
            with FaultCapture(errors=(OSError,)):
                result = self.do_select(sec, usec)
        except CapturedFault as exc:
            self._logger.warn("I/O fault while waiting on %s: %s", self._endpoint, exc.message)
            raise IOWaitError(exc.message, code=exc.code, context=exc.record) from exc

        if self._can_dispatch_signals:
            self._signal_dispatcher.dispatch()

        if result is None or result is False:
            return 0
        self._logger.trace("select on %s -> %s", self._endpoint, result)
        return int(result)

    def reconnect(self) -> None:
        self._logger.info("Reconnecting to %s", self._endpoint)
        self.close()
        self.connect()

    def check_heartbeat(self) -> None:
        status = self._heartbeat.check()
        if status is HeartbeatStatus.MISSED:
            self._logger.error(
                "Missed server heartbeat from %s (interval=%ss)",
                self._endpoint,
                self._heartbeat.interval,
            )
            self.close()
            raise HeartbeatMissedError("Missed server heartbeat", context=self._endpoint)
        if status is HeartbeatStatus.DUE:
            self.write_heartbeat()

    def write_heartbeat(self) -> None:
        self._logger.debug("Sending heartbeat to %s", self._endpoint)
        self.write(HEARTBEAT_FRAME)

    def disable_heartbeat(self: TransportT) -> TransportT:
        self._heartbeat.disable()
        return self

    def reenable_heartbeat(self: TransportT) -> TransportT:
        self._heartbeat.reenable()
        return self

    def __enter__(self: TransportT) -> TransportT:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._endpoint}, heartbeat={self._heartbeat.interval})"


__all__ = ["AbstractTransport", "Endpoint", "Transport"]
