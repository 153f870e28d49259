"""Parse the position fields of an NMEA RMC sentence."""

from __future__ import annotations

from dataclasses import dataclass

DATA_BUF_LENGTH = 80

# Field buffers hold one terminator, so the usable width is one less.
_FIELD_WIDTHS = (
    ("utc_time", 10),
    ("status", 1),
    ("latitude", 9),
    ("north_south", 1),
    ("longitude", 10),
    ("east_west", 1),
)


class GpsError(ValueError):
    """Raised when a sentence cannot be parsed."""


@dataclass(frozen=True)
class GpsFix:
    """Time and position taken from an RMC sentence."""

    utc_time: str
    status: str
    latitude: str
    north_south: str
    longitude: str
    east_west: str

    @property
    def valid(self) -> bool:
        """True when the receiver marked the fix as usable."""
        return self.status[:1] == "A"


def is_rmc(sentence: str) -> bool:
    """Tell whether ``sentence`` looks like an RMC sentence (``$xxRMC``)."""
    return len(sentence) >= 6 and sentence[0] == "$" and sentence[4] == "M" and sentence[5] == "C"


def parse_rmc(sentence: str) -> GpsFix:
    """Extract time, status and position from an RMC sentence."""
    if not is_rmc(sentence):
        raise GpsError("not an RMC sentence")
    text = sentence[:DATA_BUF_LENGTH]
    _, sep, rest = text.partition(",")
    if not sep:
        raise GpsError("gps data err:1")
    parts = rest.split(",")
    if len(parts) <= len(_FIELD_WIDTHS):
        raise GpsError("gps data err:2")

    values = {}
    for (name, width), value in zip(_FIELD_WIDTHS, parts):
        if len(value) > width:
            raise GpsError(f"{name} field longer than {width} characters")
        values[name] = value
    return GpsFix(**values)