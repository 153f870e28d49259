"""Frames from PMS-series particulate sensors: checksum, decoding and
byte-wise assembly with an idle timeout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

HEADER = b"BM"
RX_BUFFER_SIZE = 50
DEFAULT_TIMEOUT_TICKS = 20
LENGTH_FULL = 28  # PMS1003 / PMS5003
LENGTH_SHORT = 20  # PMS3003

_FIELDS = (
    "pm1_0_cf",
    "pm2_5_cf",
    "pm10_cf",
    "pm1_0",
    "pm2_5",
    "pm10",
    "count_0_3",
    "count_0_5",
    "count_1_0",
    "count_2_5",
    "count_5_0",
    "count_10",
)


@dataclass(frozen=True)
class PmReading:
    """Concentrations and particle counts decoded from one frame."""

    buffer_len: int
    pm1_0_cf: int
    pm2_5_cf: int
    pm10_cf: int
    pm1_0: int
    pm2_5: int
    pm10: int
    count_0_3: int = 0
    count_0_5: int = 0
    count_1_0: int = 0
    count_2_5: int = 0
    count_5_0: int = 0
    count_10: int = 0


def _frame_length(data: bytes) -> int:
    return int.from_bytes(data[2:4], "big")


def verify_frame(buffer: BytesLike) -> bool:
    """Tell whether ``buffer`` starts with ``BM`` and carries a valid checksum.

    The checksum is the 16-bit sum of every byte before it, stored big-endian
    after ``length + 2`` bytes.
    """
    data = bytes(buffer)
    if len(data) < 4 or data[:2] != HEADER:
        return False
    length = _frame_length(data)
    if len(data) < length + 4:
        return False
    calculated = sum(data[: length + 2]) & 0xFFFF
    received = int.from_bytes(data[length + 2:length + 4], "big")
    return calculated == received


def parse_frame(buffer: BytesLike) -> PmReading:
    """Decode the big-endian words of a 28- or 20-byte-length frame.

    A short (20) frame carries no particle counts; they are reported as zero.
    """
    data = bytes(buffer)
    if len(data) < 4:
        raise ValueError("frame too short")
    length = _frame_length(data)
    if length == LENGTH_FULL:
        names = _FIELDS
    elif length == LENGTH_SHORT:
        names = _FIELDS[:6]
    else:
        raise ValueError(f"unsupported frame length {length}")
    end = 4 + 2 * len(names)
    if len(data) < end:
        raise ValueError("frame truncated")
    words = data[4:end]
    values = {
        name: (high << 8) | low
        for name, high, low in zip(names, words[0::2], words[1::2])
    }
    return PmReading(buffer_len=length, **values)


class PmFrameAssembler:
    """Collect sensor bytes; a frame ends when the line stays idle.

    Every received byte restarts the timeout. Each ``tick`` counts it down;
    the tick after it reaches zero closes the frame, which is returned if it
    starts with ``BM`` and dropped otherwise.
    """

    def __init__(self, timeout_ticks: int = DEFAULT_TIMEOUT_TICKS) -> None:
        if timeout_ticks < 0:
            raise ValueError("timeout_ticks must not be negative")
        self.timeout_ticks = timeout_ticks
        self._remaining = 0
        self._buffer = bytearray()

    def feed(self, byte: int) -> None:
        """Store one received byte; bytes past the buffer size are dropped."""
        if not 0 <= byte <= 0xFF:
            raise ValueError("byte out of range")
        if len(self._buffer) < RX_BUFFER_SIZE:
            self._buffer.append(byte)
        self._remaining = self.timeout_ticks

    def tick(self) -> Optional[bytes]:
        """Advance the timeout by one tick; return a finished frame, if any."""
        if self._remaining:
            self._remaining -= 1
            return None
        frame = bytes(self._buffer)
        self._buffer.clear()
        if frame and frame[:2] == HEADER:
            return frame
        return None