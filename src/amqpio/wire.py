"""Minimal big-endian frame writer and the heartbeat frame."""

from __future__ import annotations

import struct

FRAME_HEARTBEAT = 8
FRAME_END = 0xCE


class FrameWriter:
    """Accumulates network-order integers into a byte buffer."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def write_octet(self, value: int) -> "FrameWriter":
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Octet out of range: {value}")
        self._buffer += struct.pack(">B", value)
        return self

    def write_short(self, value: int) -> "FrameWriter":
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"Short out of range: {value}")
        self._buffer += struct.pack(">H", value)
        return self

    def write_long(self, value: int) -> "FrameWriter":
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError(f"Long out of range: {value}")
        self._buffer += struct.pack(">I", value)
        return self

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)


def heartbeat_frame() -> bytes:
    # type, channel 0, empty payload, frame-end
    return (
        FrameWriter()
        .write_octet(FRAME_HEARTBEAT)
        .write_short(0)
        .write_long(0)
        .write_octet(FRAME_END)
        .getvalue()
    )


HEARTBEAT_FRAME = heartbeat_frame()


__all__ = ["FRAME_END", "FRAME_HEARTBEAT", "FrameWriter", "HEARTBEAT_FRAME", "heartbeat_frame"]
