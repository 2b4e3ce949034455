"""TCP/TLS transport using the standard library socket module."""

from __future__ import annotations

import select
import socket
import ssl
from typing import Any

from ..config import TransportOptions
from ..errors import (
    AMQPConnectionClosedError,
    AMQPConnectionError,
    AMQPIOError,
    AMQPTimeoutError,
)
from .base import AbstractTransport


class SocketTransport(AbstractTransport):
    log_name = "tcp"

    def __init__(
        self,
        host: str,
        port: int,
        *,
        connect_timeout: float = 3.0,
        read_write_timeout: float = 3.0,
        use_ssl: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(host, port, **kwargs)
        self._connect_timeout = connect_timeout
        self._read_write_timeout = read_write_timeout
        self._use_ssl = use_ssl
        self._socket: socket.socket | ssl.SSLSocket | None = None

    @classmethod
    def _params_from_options(cls, options: TransportOptions) -> dict[str, Any]:
        params = super()._params_from_options(options)
        params.update(
            connect_timeout=options.connect_timeout,
            read_write_timeout=options.read_write_timeout,
            use_ssl=options.use_ssl,
        )
        return params

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        self._reset()
        host, port = self.endpoint.host, self.endpoint.port
        self._logger.info("Connecting to %s (%s)", self.endpoint, "tls" if self._use_ssl else "tcp")
        try:
            raw_socket = socket.create_connection((host, port), timeout=self._connect_timeout)
            raw_socket.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            if self.keepalive:
                raw_socket.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
            raw_socket.settimeout(self._read_write_timeout)
            if self._use_ssl:
                context = ssl.create_default_context()
                self._socket = context.wrap_socket(raw_socket, server_hostname=host)
            else:
                self._socket = raw_socket
        except (OSError, ssl.SSLError) as exc:
            self._reset()
            raise AMQPConnectionError(f"Cannot connect to {host}:{port}: {exc}") from exc
        self.heartbeat.reset()

    def read(self, n: int) -> bytes:
        sock = self._require_socket()
        buf = bytearray()
        while len(buf) < n:
            try:
                chunk = sock.recv(n - len(buf))
            except (socket.timeout, TimeoutError) as exc:
                raise AMQPTimeoutError(
                    f"Read timeout after {self._read_write_timeout}s", context=self.endpoint
                ) from exc
            except OSError as exc:
                raise AMQPIOError(f"Error reading data: {exc}", code=exc.errno or 0) from exc
            if not chunk:
                raise AMQPConnectionClosedError(
                    f"Broken pipe or closed connection after {len(buf)} of {n} bytes",
                    context=self.endpoint,
                )
            buf += chunk
        self._logger.trace("Read %d bytes from %s", n, self.endpoint)
        self.heartbeat.record_read()
        return bytes(buf)

    def write(self, data: bytes) -> int:
        sock = self._require_socket()
        try:
            sock.sendall(data)
        except (socket.timeout, TimeoutError) as exc:
            raise AMQPTimeoutError(
                f"Write timeout after {self._read_write_timeout}s", context=self.endpoint
            ) from exc
        except OSError as exc:
            raise AMQPIOError(f"Error sending data: {exc}", code=exc.errno or 0) from exc
        self._logger.trace("Wrote %d bytes to %s", len(data), self.endpoint)
        self.heartbeat.record_write()
        return len(data)

    def close(self) -> None:
        if self._socket is not None:
            self._logger.info("Closing connection to %s", self.endpoint)
        self._reset()

    def get_socket(self) -> socket.socket | ssl.SSLSocket | None:
        return self._socket

    def do_select(self, sec: float | None, usec: int | None) -> int:
        sock = self._require_socket()
        timeout = None if sec is None else sec + (usec or 0) / 1_000_000
        # TLS may hold decrypted bytes the OS no longer reports as readable
        if isinstance(sock, ssl.SSLSocket) and sock.pending():
            return 1
        wakeup = self.signal_wakeup_socket()
        watched = [sock] if wakeup is None else [sock, wakeup]
        ready, _, _ = select.select(watched, [], [], timeout)
        if wakeup is not None and wakeup in ready:
            # interrupted by a signal; the transport dispatches it after the wait
            self.signal_dispatcher.drain_wakeup()
            ready.remove(wakeup)
        return len(ready)

    def _require_socket(self) -> socket.socket | ssl.SSLSocket:
        if self._socket is None:
            raise AMQPConnectionClosedError("Transport is not connected", context=self.endpoint)
        return self._socket

    def _reset(self) -> None:
        sock, self._socket = self._socket, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError as exc:
            self._logger.debug("Ignoring error while closing socket: %s", exc)


__all__ = ["SocketTransport"]
