"""Byte-wise receiver for sensor replies on an RS-485 bus."""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional, Union

from mcukit.crc import crc16_modbus

BytesLike = Union[bytes, bytearray, memoryview]

MAX_LENGTH_BYTE = 20
_OVERHEAD = 5  # address, function, length and two CRC bytes


class FrameError(ValueError):
    """Raised when a received frame is malformed or fails its CRC."""


class _State(Enum):
    IDLE = auto()
    FUNCTION = auto()
    LENGTH = auto()
    DATA = auto()
    CRC_LOW = auto()
    CRC_HIGH = auto()


class SlaveFrameReceiver:
    """Collect a reply frame from a given slave address and function code.

    The length byte gives the size of the whole frame, so it is followed by
    ``length - 5`` data bytes and a two-byte CRC. Any unexpected byte drops
    back to waiting for the address.
    """

    def __init__(self, address: int, function: int) -> None:
        for name, value in (("address", address), ("function", function)):
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} must fit in one byte")
        self.address = address
        self.function = function
        self._reset()

    def _reset(self) -> None:
        self._state = _State.IDLE
        self._buffer = bytearray()
        self._remaining = 0

    def feed(self, byte: int) -> Optional[bytes]:
        """Take one byte; return the whole frame once its last byte arrives."""
        if not 0 <= byte <= 0xFF:
            raise ValueError("byte out of range")
        state = self._state

        if state is _State.IDLE and byte == self.address:
            self._buffer = bytearray([byte])
            self._state = _State.FUNCTION
        elif state is _State.FUNCTION and byte == self.function:
            self._buffer.append(byte)
            self._state = _State.LENGTH
        elif state is _State.LENGTH and _OVERHEAD <= byte < MAX_LENGTH_BYTE:
            self._buffer.append(byte)
            self._remaining = byte - _OVERHEAD
            self._state = _State.DATA
        elif state is _State.DATA and self._remaining > 0:
            self._buffer.append(byte)
            self._remaining -= 1
            if self._remaining == 0:
                self._state = _State.CRC_LOW
        elif state is _State.CRC_LOW:
            self._buffer.append(byte)
            self._state = _State.CRC_HIGH
        elif state is _State.CRC_HIGH:
            self._buffer.append(byte)
            frame = bytes(self._buffer)
            self._reset()
            return frame
        else:
            self._reset()
        return None


def parse_registers(frame: BytesLike) -> list[int]:
    """Check a frame's CRC and return its big-endian 16-bit registers.

    The register count is half the length byte, limited to the data present.
    """
    data = bytes(frame)
    if len(data) < _OVERHEAD:
        raise FrameError("frame too short")
    received = int.from_bytes(data[-2:], "little")
    if crc16_modbus(data[:-2]) != received:
        raise FrameError("CRC mismatch")
    payload = data[3:-2]
    registers = [(high << 8) | low for high, low in zip(payload[0::2], payload[1::2])]
    return registers[: data[2] >> 1]