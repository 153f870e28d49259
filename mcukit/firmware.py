"""Firmware image tools: cut an application image at its erased tail and
strip the closing records of an Intel HEX file."""

from __future__ import annotations

import argparse
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

FIND_BYTE_LEN = 32
FILL_BYTE = 0xFF
MAX_IMAGE_SIZE = 128 * 1024

APP_BASE_ADDR = 0x0800B800
OPTION_PARA_ADDR = 0x0801D000
OPTION_PARA_FLAG = 0xB4B4B4B4
OPTION_RELATIVE_ADDR = OPTION_PARA_ADDR - APP_BASE_ADDR


class NoFillRunError(ValueError):
    """Raised when an image holds no run of fill bytes to cut at."""


@dataclass(frozen=True)
class OptionParams:
    """Trailer describing the option area appended to a cut image."""

    length: int
    flag: int = OPTION_PARA_FLAG
    addr: int = OPTION_PARA_ADDR

    def to_bytes(self) -> bytes:
        """Pack as three little-endian 32-bit words: flag, addr, length."""
        return struct.pack("<III", self.flag & 0xFFFFFFFF, self.addr & 0xFFFFFFFF, self.length & 0xFFFFFFFF)


def _check_size(data: bytes) -> None:
    if len(data) > MAX_IMAGE_SIZE:
        raise ValueError(f"image larger than {MAX_IMAGE_SIZE} bytes")


def find_fill_run(data: bytes, fill: int = FILL_BYTE, run_length: int = FIND_BYTE_LEN) -> Optional[int]:
    """Return the offset of the first run of ``run_length`` ``fill`` bytes, or None."""
    if run_length <= 0:
        raise ValueError("run_length must be positive")
    index = bytes(data).find(bytes([fill]) * run_length)
    return None if index < 0 else index


def cut_app(data: bytes) -> bytes:
    """Return the application part of an image, up to its first erased run."""
    data = bytes(data)
    _check_size(data)
    index = find_fill_run(data)
    if index is None:
        raise NoFillRunError(f"no run of {FIND_BYTE_LEN} fill bytes found")
    return data[:index]


def cut_app_with_options(data: bytes) -> bytes:
    """Cut the application and append fill, the option area and its trailer."""
    data = bytes(data)
    _check_size(data)
    if len(data) < OPTION_RELATIVE_ADDR:
        raise ValueError(f"image shorter than option area offset {OPTION_RELATIVE_ADDR:#x}")
    app = cut_app(data)
    options = data[OPTION_RELATIVE_ADDR:]
    params = OptionParams(length=len(options))
    return app + bytes([FILL_BYTE]) * FIND_BYTE_LEN + options + params.to_bytes()


def strip_hex_tail(text: str, lines: int = 2) -> str:
    """Drop the last ``lines`` newline-terminated lines of ``text``.

    Anything after the final newline is dropped as well.
    """
    total = text.count("\n")
    if total <= lines:
        raise ValueError(f"text has {total} lines, need more than {lines}")
    kept = text.split("\n")[: total - lines]
    return "".join(line + "\n" for line in kept)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcukit-firmware", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("bincut", "cut a binary image at its first erased run"),
        ("bincut-options", "cut a binary image and append its option area"),
        ("hexcut", "drop the last two lines of a HEX file"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("input", type=Path)
        cmd.add_argument("output", type=Path)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        if args.command == "hexcut":
            with open(args.input, encoding="latin-1", newline="") as src:
                text = src.read()
            print(f"rlines:{text.count(chr(10))}")
            result = strip_hex_tail(text)
            with open(args.output, "w", encoding="latin-1", newline="") as dst:
                dst.write(result)
            return 0

        data = args.input.read_bytes()
        if args.command == "bincut":
            result_bytes = cut_app(data)
        else:
            result_bytes = cut_app_with_options(data)
        args.output.write_bytes(result_bytes)
        return 0
    except NoFillRunError as exc:
        print(exc, file=sys.stderr)
        return 0
    except OSError as exc:
        print(f"Open file error! {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())