"""Connect to a broker, send the protocol header and keep the link alive with heartbeats."""

from __future__ import annotations

import os
import signal

from amqpio import (
    AMQPConnectionClosedError,
    AMQPConnectionError,
    HeartbeatMissedError,
    IOWaitError,
    SocketTransport,
    TransportOptions,
)

BROKER_HOST = os.getenv("AMQPIO_DEMO_HOST", "localhost")
BROKER_PORT = int(os.getenv("AMQPIO_DEMO_PORT", "5672"))
HEARTBEAT = int(os.getenv("AMQPIO_DEMO_HEARTBEAT", "10"))

PROTOCOL_HEADER = b"AMQP\x00\x00\x09\x01"


class Stop(Exception):
    pass


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def main() -> None:
    options = TransportOptions(
        host=BROKER_HOST,
        port=BROKER_PORT,
        heartbeat=HEARTBEAT,
        keepalive=True,
        log_level=os.getenv("AMQPIO_DEMO_LOG_LEVEL", "info"),  # type: ignore[arg-type]
    )
    transport = SocketTransport.from_options(options)

    def request_stop(signum: int) -> None:
        raise Stop()

    if transport.can_dispatch_signals:
        transport.signal_dispatcher.register(signal.SIGINT, request_stop)

    log_section(f"Connecting to {transport.endpoint}")
    try:
        transport.connect()
    except AMQPConnectionError as exc:
        print(f"→ Cannot connect: {exc}")
        raise SystemExit(1) from exc

    transport.write(PROTOCOL_HEADER)
    print("→ Protocol header sent, waiting for broker frames (Ctrl-C to stop)")

    try:
        while True:
            ready = transport.select(1, 0)
            if not ready:
                continue
            header = transport.read(7)
            size = int.from_bytes(header[3:7], "big")
            transport.read(size + 1)  # payload and frame-end
            print(f"→ Frame type={header[0]} channel={int.from_bytes(header[1:3], 'big')} size={size}")
    except Stop:
        print("→ Interrupted, closing")
    except HeartbeatMissedError:
        print("→ Broker stopped sending heartbeats, connection closed")
    except AMQPConnectionClosedError as exc:
        print(f"→ Connection closed by broker: {exc}")
    except IOWaitError as exc:
        print(f"→ I/O fault while waiting: {exc} (code {exc.code})")
    finally:
        transport.signal_dispatcher.unregister_all()
        transport.close()


if __name__ == "__main__":
    main()
