"""CRC-16 as used by Modbus RTU framing."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_POLY_REFLECTED = 0xA001
_INITIAL = 0xFFFF


def _make_table() -> tuple[int, ...]:
    table = []
    for value in range(256):
        crc = value
        for _ in range(8):
            crc = (crc >> 1) ^ _POLY_REFLECTED if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _make_table()


def crc16_modbus(data: BytesLike) -> int:
    """Return the CRC-16/MODBUS value; it goes on the wire low byte first."""
    crc = _INITIAL
    for byte in bytes(data):
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc


def crc16(data: BytesLike) -> int:
    """Return the Modbus CRC with the first byte sent in the high byte.

    Writing the result big-endian after the message gives the wire order.
    """
    crc = crc16_modbus(data)
    return ((crc & 0xFF) << 8) | (crc >> 8)