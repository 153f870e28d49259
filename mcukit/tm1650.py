"""Two-digit seven-segment display driven by a TM1650 controller."""

from __future__ import annotations

from typing import Callable

BRIGHTNESS_REGISTER = 0x48
ONES_REGISTER = 0x68
TENS_REGISTER = 0x6A
DOT = 0x80

BRIGHTNESS_TABLE = (0x11, 0x21, 0x31, 0x41, 0x51, 0x61, 0x71, 0x01)
SEGMENTS = (0x3F, 0x06, 0x5B, 0x4F, 0x66, 0x6D, 0x7D, 0x07, 0x7F, 0x6F)


def brightness_byte(level: int) -> int:
    """Return the display-control byte for brightness 0-7; other levels use level 0."""
    if 0 <= level < len(BRIGHTNESS_TABLE):
        return BRIGHTNESS_TABLE[level]
    return BRIGHTNESS_TABLE[0]


def display_bytes(value: int, dots: int = 0) -> tuple[int, int]:
    """Return the (ones, tens) segment bytes for ``value`` between 0 and 99.

    ``dots`` 1 lights the ones dot, 2 the tens dot; 3 and any other value
    light both.
    """
    if not 0 <= value <= 99:
        raise ValueError("value must be between 0 and 99")
    tens, ones = divmod(value, 10)
    ones_byte = SEGMENTS[ones]
    tens_byte = SEGMENTS[tens]
    if dots != 2:
        ones_byte |= DOT
    if dots != 1:
        tens_byte |= DOT
    return ones_byte, tens_byte


class TM1650:
    """Display driver writing through ``write_register(register, data)``."""

    def __init__(self, write_register: Callable[[int, int], None], brightness: int = 0) -> None:
        self._write = write_register
        self.set_brightness(brightness)

    def set_brightness(self, level: int) -> None:
        """Turn the display on at brightness ``level`` (0-7)."""
        self._write(BRIGHTNESS_REGISTER, brightness_byte(level))

    def display(self, value: int, dots: int = 0) -> None:
        """Show a two-digit ``value``; see :func:`display_bytes` for ``dots``."""
        ones, tens = display_bytes(value, dots)
        self._write(ONES_REGISTER, ones)
        self._write(TENS_REGISTER, tens)