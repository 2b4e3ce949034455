import select
import signal
import threading

import pytest

from amqpio.signals import SignalDispatcher

requires_sigusr = pytest.mark.skipif(
    not hasattr(signal, "SIGUSR1") or not hasattr(signal, "raise_signal"),
    reason="needs SIGUSR1/SIGUSR2",
)


@requires_sigusr
def test_dispatch_runs_callbacks_in_arrival_order(dispatcher) -> None:
    seen: list[int] = []
    dispatcher.register(signal.SIGUSR1, seen.append)
    dispatcher.register(signal.SIGUSR2, seen.append)

    dispatcher.notify(signal.SIGUSR2)
    dispatcher.notify(signal.SIGUSR1)
    assert seen == []

    assert dispatcher.dispatch() == 2
    assert seen == [signal.SIGUSR2, signal.SIGUSR1]
    assert dispatcher.pending() == ()


@requires_sigusr
def test_os_signal_is_deferred_until_dispatch(dispatcher) -> None:
    seen: list[int] = []
    dispatcher.register(signal.SIGUSR1, seen.append)

    signal.raise_signal(signal.SIGUSR1)

    assert seen == []
    assert dispatcher.pending() == (signal.SIGUSR1,)
    dispatcher.dispatch()
    assert seen == [signal.SIGUSR1]


@requires_sigusr
def test_raising_callback_leaves_rest_queued(dispatcher) -> None:
    def stop(signum: int) -> None:
        raise KeyboardInterrupt

    seen: list[int] = []
    dispatcher.register(signal.SIGUSR1, stop)
    dispatcher.register(signal.SIGUSR2, seen.append)
    dispatcher.notify(signal.SIGUSR1)
    dispatcher.notify(signal.SIGUSR2)

    with pytest.raises(KeyboardInterrupt):
        dispatcher.dispatch()

    assert dispatcher.pending() == (signal.SIGUSR2,)
    assert dispatcher.dispatch() == 1
    assert seen == [signal.SIGUSR2]


def test_unknown_signals_are_dropped() -> None:
    dispatcher = SignalDispatcher()
    dispatcher.notify(12345)
    assert dispatcher.dispatch() == 0
    assert dispatcher.pending() == ()


@requires_sigusr
def test_unregister_restores_previous_handler() -> None:
    previous = signal.getsignal(signal.SIGUSR1)
    dispatcher = SignalDispatcher()
    dispatcher.register(signal.SIGUSR1, lambda signum: None)
    assert signal.getsignal(signal.SIGUSR1) == dispatcher.notify

    dispatcher.unregister(signal.SIGUSR1)

    assert signal.getsignal(signal.SIGUSR1) == previous


def test_not_supported_off_the_main_thread() -> None:
    result: list[bool] = []
    worker = threading.Thread(target=lambda: result.append(SignalDispatcher().supported))
    worker.start()
    worker.join()
    assert result == [False]
    assert SignalDispatcher().supported is True


def test_register_off_the_main_thread_fails() -> None:
    errors: list[BaseException] = []

    def target() -> None:
        try:
            SignalDispatcher().register(signal.SIGINT, lambda signum: None)
        except RuntimeError as exc:
            errors.append(exc)

    worker = threading.Thread(target=target)
    worker.start()
    worker.join()
    assert len(errors) == 1


def test_repeated_signals_collapse_while_queued() -> None:
    dispatcher = SignalDispatcher()
    for _ in range(1000):
        dispatcher.notify(10)
    dispatcher.notify(12)
    dispatcher.notify(10)
    assert dispatcher.pending() == (10, 12)


@requires_sigusr
def test_wakeup_socket_follows_registrations() -> None:
    def current_wakeup_fd() -> int:
        fd = signal.set_wakeup_fd(-1)
        signal.set_wakeup_fd(fd)
        return fd

    before = current_wakeup_fd()
    dispatcher = SignalDispatcher()
    assert dispatcher.wakeup_socket() is None

    dispatcher.register(signal.SIGUSR1, lambda signum: None)
    dispatcher.register(signal.SIGUSR2, lambda signum: None)
    wakeup = dispatcher.wakeup_socket()
    assert wakeup is not None
    assert current_wakeup_fd() != before

    dispatcher.unregister(signal.SIGUSR1)
    assert dispatcher.wakeup_socket() is wakeup

    dispatcher.unregister(signal.SIGUSR2)
    assert dispatcher.wakeup_socket() is None
    assert wakeup.fileno() == -1
    assert current_wakeup_fd() == before


@requires_sigusr
def test_raised_signal_makes_wakeup_socket_readable(dispatcher) -> None:
    dispatcher.register(signal.SIGUSR1, lambda signum: None)
    wakeup = dispatcher.wakeup_socket()

    signal.raise_signal(signal.SIGUSR1)

    ready, _, _ = select.select([wakeup], [], [], 1.0)
    assert ready == [wakeup]
    assert dispatcher.drain_wakeup() >= 1
    assert dispatcher.drain_wakeup() == 0
