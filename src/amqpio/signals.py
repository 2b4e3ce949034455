"""Deferred signal handling with a single, explicit dispatch point."""

from __future__ import annotations

import signal
import socket
import threading
from collections import deque
from types import FrameType
from typing import Any, Callable

from .logger import BoundLogger, create_logger

SignalCallback = Callable[[int], Any]


class SignalDispatcher:
    """Queues incoming signals and runs their callbacks when asked to.

    The OS-level handler installed by :meth:`register` only records the signal
    number. Callbacks run synchronously inside :meth:`dispatch`, which the
    transport calls once per readiness wait, so application code never runs in
    the middle of a frame read or write.

    While any handler is registered the dispatcher also owns a socket pair
    wired to :func:`signal.set_wakeup_fd`. Transports add
    :meth:`wakeup_socket` to their poll set so a signal ends a blocking wait
    instead of being retried behind it.
    """

    def __init__(self, *, logger: BoundLogger | None = None) -> None:
        self._logger = (logger or create_logger()).child("signals")
        self._queue: deque[int] = deque()
        self._callbacks: dict[int, SignalCallback] = {}
        self._previous: dict[int, Any] = {}
        self._wakeup: tuple[socket.socket, socket.socket] | None = None
        self._previous_wakeup_fd = -1
        self._supported = self.is_supported()

    @staticmethod
    def is_supported() -> bool:
        # signal.signal() only works from the main thread
        return hasattr(signal, "signal") and threading.current_thread() is threading.main_thread()

    @property
    def supported(self) -> bool:
        return self._supported

    def register(self, signum: int, callback: SignalCallback) -> None:
        if not self._supported:
            raise RuntimeError("Signal handlers can only be installed from the main thread")
        self._open_wakeup()
        previous = signal.signal(signum, self.notify)
        self._previous.setdefault(signum, previous)
        self._callbacks[signum] = callback
        self._logger.debug("Deferred handler registered for signal %d", signum)

    def unregister(self, signum: int) -> None:
        self._callbacks.pop(signum, None)
        if signum in self._previous:
            signal.signal(signum, self._previous.pop(signum))
        if not self._previous:
            self._close_wakeup()

    def unregister_all(self) -> None:
        for signum in list(self._previous):
            self.unregister(signum)
        self._queue.clear()
        self._close_wakeup()

    def notify(self, signum: int, frame: FrameType | None = None) -> None:
        del frame
        # Repeats of a signal still waiting for dispatch collapse into one entry
        if signum not in self._queue:
            self._queue.append(signum)

    def pending(self) -> tuple[int, ...]:
        return tuple(self._queue)

    def wakeup_socket(self) -> socket.socket | None:
        """Readable end of the wakeup pair, or ``None`` when nothing is registered."""
        return self._wakeup[0] if self._wakeup is not None else None

    def drain_wakeup(self) -> int:
        """Discard the bytes written by the interpreter for received signals."""
        sock = self.wakeup_socket()
        if sock is None:
            return 0
        drained = 0
        while True:
            try:
                chunk = sock.recv(4096)
            except (BlockingIOError, InterruptedError):
                break
            if not chunk:
                break
            drained += len(chunk)
        return drained

    def dispatch(self) -> int:
        """Run callbacks for every queued signal, oldest first.

        Returns the number of callbacks invoked. A callback that raises stops
        the dispatch; signals still queued stay queued for the next call.
        """
        dispatched = 0
        while self._queue:
            signum = self._queue.popleft()
            callback = self._callbacks.get(signum)
            if callback is None:
                continue
            self._logger.debug("Dispatching signal %d", signum)
            dispatched += 1
            callback(signum)
        return dispatched

    def _open_wakeup(self) -> None:
        if self._wakeup is not None:
            return
        reader, writer = socket.socketpair()
        reader.setblocking(False)
        writer.setblocking(False)
        try:
            self._previous_wakeup_fd = signal.set_wakeup_fd(writer.fileno(), warn_on_full_buffer=False)
        except (ValueError, OSError):
            reader.close()
            writer.close()
            raise
        self._wakeup = (reader, writer)

    def _close_wakeup(self) -> None:
        if self._wakeup is None:
            return
        reader, writer = self._wakeup
        self._wakeup = None
        signal.set_wakeup_fd(self._previous_wakeup_fd)
        self._previous_wakeup_fd = -1
        reader.close()
        writer.close()


__all__ = ["SignalCallback", "SignalDispatcher"]
