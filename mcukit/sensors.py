"""Conversions of raw readings from one-wire and I2C temperature and
humidity sensors."""

from __future__ import annotations

from typing import Iterable


def _check_byte(value: int, name: str) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte")


def rw1820_temperature(tl: int, th: int) -> int:
    """Return the temperature in tenths of a degree from the scratchpad bytes.

    A high byte above 7 marks a negative reading; both bytes are then
    inverted before scaling. The power-on value 0x0550 reads as 850.
    """
    _check_byte(tl, "tl")
    _check_byte(th, "th")
    negative = th > 7
    if negative:
        th = ~th & 0xFF
        tl = ~tl & 0xFF
    raw = (th << 8) + tl
    if raw >= 0x8000:
        raw -= 0x10000
    value = int(raw * 0.625)
    return -value if negative else value


def assemble_lsb_first(bits: Iterable[int]) -> int:
    """Build a byte from eight bits received least significant first."""
    result = 0
    count = 0
    for bit in bits:
        if bit not in (0, 1):
            raise ValueError("bits must be 0 or 1")
        result = (bit << 7) | (result >> 1)
        count += 1
    if count != 8:
        raise ValueError("exactly eight bits are needed")
    return result


def _raw_word(msb: int, lsb: int) -> int:
    _check_byte(msb, "msb")
    _check_byte(lsb, "lsb")
    return ((msb << 8) | lsb) & ~0x0003


def sht20_temperature(msb: int, lsb: int) -> float:
    """Return degrees Celsius from a measurement; the two status bits are ignored."""
    return _raw_word(msb, lsb) * 0.00268127 - 46.85


def sht20_humidity(msb: int, lsb: int) -> float:
    """Return relative humidity in percent; the two status bits are ignored."""
    return _raw_word(msb, lsb) * 0.00190735 - 6