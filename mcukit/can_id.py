"""Layout of the 29-bit CAN extended identifier used on the device bus."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Optional, Sequence

BROADCAST_ADDR = 0xFF
GATEWAY_ADDR = 0x00
DEFAULT_SAMPLE_ID = 0x001000AC


class Fragmentation(IntEnum):
    """Fragmentation sub-field of the identifier."""

    NONE = 0
    FIRST = 1
    CONTINUATION = 2
    RESERVED = 3


# (attribute, bit offset, bit width, display name), lowest bits first
_LAYOUT = (
    ("protocol_version", 0, 2, "ProtocolVersion"),
    ("profile_id", 2, 1, "ProfileID"),
    ("dst_addr", 3, 8, "dstAddr"),
    ("src_addr", 11, 8, "srcAddr"),
    ("trans_seq", 19, 4, "transSeqNum"),
    ("fragmentation", 23, 2, "Fragmentation"),
    ("block_number", 25, 4, "BlkNumber"),
    ("reserved", 29, 3, "reserved"),
)


@dataclass(frozen=True)
class ExtendedId:
    """Fields packed into a 32-bit identifier word."""

    protocol_version: int = 0
    profile_id: int = 0
    dst_addr: int = 0
    src_addr: int = 0
    trans_seq: int = 0
    fragmentation: Fragmentation = Fragmentation.NONE
    block_number: int = 0
    reserved: int = 0

    def __post_init__(self) -> None:
        for name, _, width, _ in _LAYOUT:
            value = getattr(self, name)
            if not 0 <= value < (1 << width):
                raise ValueError(f"{name} must fit in {width} bits")
        object.__setattr__(self, "fragmentation", Fragmentation(self.fragmentation))

    @classmethod
    def from_int(cls, value: int) -> "ExtendedId":
        """Unpack a 32-bit identifier word."""
        if not 0 <= value <= 0xFFFFFFFF:
            raise ValueError("identifier must fit in 32 bits")
        return cls(**{name: (value >> shift) & ((1 << width) - 1) for name, shift, width, _ in _LAYOUT})

    def to_int(self) -> int:
        """Pack the fields into a 32-bit identifier word."""
        result = 0
        for name, shift, _, _ in _LAYOUT:
            result |= int(getattr(self, name)) << shift
        return result

    def describe(self) -> str:
        """Return one ``Name = 0x..`` line per field."""
        return "\n".join(f"{label} = {int(getattr(self, name)):#x}" for name, _, _, label in _LAYOUT)


assert {f.name for f in fields(ExtendedId)} == {name for name, *_ in _LAYOUT}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="mcukit-canid", description="Show the fields of a CAN extended id.")
    parser.add_argument("value", nargs="?", default=hex(DEFAULT_SAMPLE_ID), help="identifier, e.g. 0x001000AC")
    args = parser.parse_args(argv)
    try:
        ident = ExtendedId.from_int(int(args.value, 0))
    except ValueError as exc:
        parser.error(str(exc))
    print(ident.describe())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())