import pytest

from amqpio.config import TransportOptions, signals_disabled_by_env


def test_initial_heartbeat_defaults_to_heartbeat() -> None:
    options = TransportOptions(host="localhost", heartbeat=30)
    assert options.initial_heartbeat == 30


def test_defaults() -> None:
    options = TransportOptions(host="localhost")
    assert options.port == 5672
    assert options.heartbeat == 0
    assert options.keepalive is False
    assert options.dispatch_signals is True


@pytest.mark.parametrize("field", ["heartbeat", "initial_heartbeat"])
def test_negative_heartbeat_rejected(field: str) -> None:
    with pytest.raises(ValueError):
        TransportOptions(host="localhost", **{field: -1})


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("true", True), ("YES", True), (" on ", True), ("0", False), ("", False), ("no", False)],
)
def test_signals_opt_out_env(value: str, expected: bool) -> None:
    assert signals_disabled_by_env({"AMQP_WITHOUT_SIGNALS": value}) is expected


def test_signals_opt_out_env_unset() -> None:
    assert signals_disabled_by_env({}) is False
