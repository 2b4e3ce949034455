"""Public surface for the amqpio transport layer."""

from .config import TransportOptions
from .errors import (
    AMQPConnectionClosedError,
    AMQPConnectionError,
    AMQPError,
    AMQPIOError,
    AMQPRuntimeError,
    AMQPTimeoutError,
    CapturedFault,
    HeartbeatMissedError,
    IOWaitError,
)
from .fault import FaultCapture, FaultRecord
from .heartbeat import HeartbeatMonitor, HeartbeatStatus
from .signals import SignalDispatcher
from .transport import AbstractTransport, Endpoint, SocketTransport, Transport
from .version import __version__
from .wire import HEARTBEAT_FRAME, FrameWriter

__all__ = [
    "__version__",
    "AMQPConnectionClosedError",
    "AMQPConnectionError",
    "AMQPError",
    "AMQPIOError",
    "AMQPRuntimeError",
    "AMQPTimeoutError",
    "AbstractTransport",
    "CapturedFault",
    "Endpoint",
    "FaultCapture",
    "FaultRecord",
    "FrameWriter",
    "HEARTBEAT_FRAME",
    "HeartbeatMissedError",
    "HeartbeatMonitor",
    "HeartbeatStatus",
    "IOWaitError",
    "SignalDispatcher",
    "SocketTransport",
    "Transport",
    "TransportOptions",
]
