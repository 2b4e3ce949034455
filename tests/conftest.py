"""Shared fixtures: a controllable clock and an in-memory transport."""

from __future__ import annotations

import socket
from typing import Any, Callable, Iterator

import pytest

from amqpio.config import SIGNALS_OPT_OUT_ENV
from amqpio.errors import AMQPConnectionClosedError
from amqpio.signals import SignalDispatcher
from amqpio.transport.base import AbstractTransport


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemoryTransport(AbstractTransport):
    """Transport that keeps everything in lists so tests can inspect it."""

    log_name = "memory"

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5672,
        *,
        select_result: Any = 1,
        **kwargs: Any,
    ) -> None:
        super().__init__(host, port, **kwargs)
        self.calls: list[str] = []
        self.written: list[bytes] = []
        self.inbound = bytearray()
        self.select_args: list[tuple[Any, Any]] = []
        self.select_result = select_result
        self.close_error: Exception | None = None

    def read(self, n: int) -> bytes:
        if len(self.inbound) < n:
            raise AMQPConnectionClosedError("not enough data")
        data, self.inbound = bytes(self.inbound[:n]), self.inbound[n:]
        self.heartbeat.record_read()
        return data

    def write(self, data: bytes) -> int:
        self.calls.append("write")
        self.written.append(data)
        return len(data)

    def close(self) -> None:
        self.calls.append("close")
        if self.close_error is not None:
            raise self.close_error

    def connect(self) -> None:
        self.calls.append("connect")

    def get_socket(self) -> None:
        return None

    def do_select(self, sec: float | None, usec: int | None) -> Any:
        self.calls.append("do_select")
        self.select_args.append((sec, usec))
        if callable(self.select_result):
            return self.select_result()
        return self.select_result


@pytest.fixture(autouse=True)
def _signals_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(SIGNALS_OPT_OUT_ENV, raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_transport(clock: FakeClock) -> Callable[..., MemoryTransport]:
    def factory(**kwargs: Any) -> MemoryTransport:
        kwargs.setdefault("clock", clock)
        return MemoryTransport(**kwargs)

    return factory


@pytest.fixture
def dispatcher() -> Iterator[SignalDispatcher]:
    dispatcher = SignalDispatcher()
    try:
        yield dispatcher
    finally:
        dispatcher.unregister_all()


@pytest.fixture
def listener() -> Iterator[socket.socket]:
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    server.settimeout(5.0)
    try:
        yield server
    finally:
        server.close()
