"""Key reading through a table of touch controllers and a board key map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

KeyMap = Sequence[tuple[int, int]]


def map_bits(mapping: Iterable[tuple[int, int]], value: int) -> int:
    """OR together the target bits of every entry whose source bits appear in ``value``."""
    result = 0
    for source, target in mapping:
        if source & value:
            result |= target
    return result


@dataclass(frozen=True)
class TouchChip:
    """A touch controller: how to detect it, how to poll it, how to map its bits.

    ``init`` returns True when the chip answers. ``poll`` returns the key
    register value, or None when the read failed. ``key_map`` pairs register
    bits with board key values.
    """

    name: str
    init: Callable[[], bool]
    poll: Callable[[], Optional[int]]
    key_map: KeyMap = field(default_factory=tuple)


class KeyReader:
    """Combine touch and mechanical keys into board-level key values.

    Until a chip has been found, each touch read tries the chips in order and
    keeps the first one whose ``init`` succeeds; that read reports no keys.
    """

    def __init__(self, chips: Sequence[TouchChip], board_map: KeyMap) -> None:
        self.chips = tuple(chips)
        self.board_map = tuple(board_map)
        self._active: Optional[TouchChip] = None

    @property
    def active(self) -> Optional[TouchChip]:
        """The touch chip in use, once one has been detected."""
        return self._active

    def read_touch(self) -> int:
        """Return the key value reported by the touch chip, or 0."""
        if self._active is None:
            for chip in self.chips:
                if chip.init():
                    self._active = chip
                    break
            return 0
        register = self._active.poll()
        if register is None:
            return 0
        return map_bits(self._active.key_map, register)

    def read(self, press_value: int = 0) -> int:
        """Merge touch keys with ``press_value`` and map them through the board map."""
        return map_bits(self.board_map, self.read_touch() | press_value)