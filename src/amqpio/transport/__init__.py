"""Transport implementations exposed to users."""

from .base import AbstractTransport, Endpoint, Transport
from .tcp import SocketTransport

__all__ = [
    "AbstractTransport",
    "Endpoint",
    "SocketTransport",
    "Transport",
]
