"""Block-based memory pool with an allocation table, allocating from the top."""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

DEFAULT_POOL_SIZE = 40 * 1024
DEFAULT_BLOCK_SIZE = 32


class MemoryPool:
    """A byte pool split into equal blocks.

    Each table entry of an allocation holds the allocation's block count.
    Free space is searched from the highest block downwards.
    """

    def __init__(self, size: int = DEFAULT_POOL_SIZE, block_size: int = DEFAULT_BLOCK_SIZE) -> None:
        if block_size <= 0:
            raise ValueError("block_size must be positive")
        if size < block_size:
            raise ValueError("size must hold at least one block")
        self.size = size
        self.block_size = block_size
        self._table = [0] * (size // block_size)
        self._data = bytearray(size)

    def malloc(self, size: int) -> int:
        """Reserve ``size`` bytes and return their offset in the pool."""
        if size <= 0:
            raise ValueError("size must be positive")
        needed = -(-size // self.block_size)
        free_run = 0
        for index in reversed(range(len(self._table))):
            free_run = free_run + 1 if not self._table[index] else 0
            if free_run == needed:
                self._table[index:index + needed] = [needed] * needed
                return index * self.block_size
        raise MemoryError(f"no {needed} free consecutive blocks")

    def free(self, offset: int) -> None:
        """Release the allocation that starts at ``offset``."""
        if not 0 <= offset < self.size:
            raise ValueError("offset outside the pool")
        index = offset // self.block_size
        count = self._table[index]
        end = min(index + count, len(self._table))
        self._table[index:end] = [0] * (end - index)

    def realloc(self, offset: int, size: int) -> int:
        """Move an allocation into a new one of ``size`` bytes, keeping its data."""
        if not 0 <= offset < self.size:
            raise ValueError("offset outside the pool")
        new_offset = self.malloc(size)
        old_bytes = self._table[offset // self.block_size] * self.block_size
        length = min(size, old_bytes, self.size - offset)
        self._data[new_offset:new_offset + length] = self._data[offset:offset + length]
        self.free(offset)
        return new_offset

    def usage(self) -> int:
        """Return the percentage of blocks in use, rounded down."""
        used = sum(1 for entry in self._table if entry)
        return used * 100 // len(self._table)

    def read(self, offset: int, length: int) -> bytes:
        """Return ``length`` bytes of pool memory from ``offset``."""
        if length < 0 or offset < 0 or offset + length > self.size:
            raise ValueError("range outside the pool")
        return bytes(self._data[offset:offset + length])

    def write(self, offset: int, data: BytesLike) -> None:
        """Copy ``data`` into pool memory at ``offset``."""
        chunk = bytes(data)
        if offset < 0 or offset + len(chunk) > self.size:
            raise ValueError("range outside the pool")
        self._data[offset:offset + len(chunk)] = chunk