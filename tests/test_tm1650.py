import pytest

from mcukit.tm1650 import TM1650, brightness_byte, display_bytes


@pytest.mark.parametrize(
    "level,expected",
    [(0, 0x11), (1, 0x21), (6, 0x71), (7, 0x01), (8, 0x11), (-1, 0x11)],
)
def test_brightness_byte(level, expected):
    assert brightness_byte(level) == expected


def test_display_ones_dot_only():
    assert display_bytes(42, 1) == (0x5B | 0x80, 0x66)


def test_display_tens_dot_only():
    assert display_bytes(42, 2) == (0x5B, 0x66 | 0x80)


@pytest.mark.parametrize("dots", [0, 3, 9])
def test_display_other_dot_values_light_both(dots):
    assert display_bytes(7, dots) == (0x07 | 0x80, 0x3F | 0x80)


def test_display_all_digits_distinct():
    ones = {display_bytes(v, 2)[0] for v in range(10)}
    assert len(ones) == 10


@pytest.mark.parametrize("value", [-1, 100, 255])
def test_display_rejects_out_of_range(value):
    with pytest.raises(ValueError):
        display_bytes(value)


def test_driver_writes_brightness_then_digits():
    writes = []
    display = TM1650(lambda reg, data: writes.append((reg, data)), brightness=3)
    display.display(99, 1)
    assert writes == [(0x48, 0x41), (0x68, 0x6F | 0x80), (0x6A, 0x6F)]


def test_driver_set_brightness():
    writes = []
    display = TM1650(lambda reg, data: writes.append((reg, data)))
    display.set_brightness(7)
    assert writes == [(0x48, 0x11), (0x48, 0x01)]


def test_driver_rejects_bad_value_without_writing():
    writes = []
    display = TM1650(lambda reg, data: writes.append((reg, data)))
    with pytest.raises(ValueError):
        display.display(100)
    assert len(writes) == 1