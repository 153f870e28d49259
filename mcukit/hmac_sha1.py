"""SHA-1 digest and HMAC-SHA1 producing an upper-case hex string."""

from __future__ import annotations

import struct
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

KEY_IOPAD_SIZE = 64
SHA1_DIGEST_SIZE = 20

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_INITIAL_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)


def _rotl(value: int, count: int) -> int:
    return ((value << count) | (value >> (32 - count))) & _MASK32


def _round_function(t: int, b: int, c: int, d: int) -> tuple[int, int]:
    if t < 20:
        return d ^ (b & (c ^ d)), 0x5A827999
    if t < 40:
        return b ^ c ^ d, 0x6ED9EBA1
    if t < 60:
        return (b & c) | (d & (b | c)), 0x8F1BBCDC
    return b ^ c ^ d, 0xCA62C1D6


def _compress(state: tuple[int, ...], block: bytes) -> tuple[int, ...]:
    """Process one 64-byte block and return the new chaining state."""
    words = list(struct.unpack(">16I", block))
    for t in range(16, 80):
        words.append(_rotl(words[t - 3] ^ words[t - 8] ^ words[t - 14] ^ words[t - 16], 1))

    a, b, c, d, e = state
    for t, word in enumerate(words):
        f, k = _round_function(t, b, c, d)
        a, b, c, d, e = (_rotl(a, 5) + f + e + k + word) & _MASK32, a, _rotl(b, 30), c, d

    return tuple((x + y) & _MASK32 for x, y in zip(state, (a, b, c, d, e)))


class Sha1:
    """Incremental SHA-1 hash."""

    digest_size = SHA1_DIGEST_SIZE
    block_size = KEY_IOPAD_SIZE

    def __init__(self, data: BytesLike = b"") -> None:
        self._state: tuple[int, ...] = _INITIAL_STATE
        self._pending = b""
        self._length = 0
        self.update(data)

    def update(self, data: BytesLike) -> "Sha1":
        """Feed more bytes into the hash."""
        chunk = bytes(data)
        self._length = (self._length + len(chunk)) & _MASK64
        pending = self._pending + chunk
        whole = len(pending) - len(pending) % 64
        state = self._state
        for offset in range(0, whole, 64):
            state = _compress(state, pending[offset:offset + 64])
        self._state = state
        self._pending = pending[whole:]
        return self

    def digest(self) -> bytes:
        """Return the 20-byte digest of everything fed so far."""
        bit_length = (self._length << 3) & _MASK64
        pad_len = (56 - (self._length + 1)) % 64
        tail = self._pending + b"\x80" + bytes(pad_len) + struct.pack(">Q", bit_length)
        state = self._state
        for offset in range(0, len(tail), 64):
            state = _compress(state, tail[offset:offset + 64])
        return struct.pack(">5I", *state)

    def hexdigest(self) -> str:
        """Return the digest as lower-case hex."""
        return self.digest().hex()


def _as_bytes(value: Union[str, BytesLike]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def hmac_sha1_hex(msg: Union[str, BytesLike], key: Union[str, BytesLike]) -> str:
    """Return HMAC-SHA1 of ``msg`` under ``key`` as 40 upper-case hex digits.

    The key is used directly as pad material, so it may be at most 64 bytes.
    """
    message = _as_bytes(msg)
    key_bytes = _as_bytes(key)
    if len(key_bytes) > KEY_IOPAD_SIZE:
        raise ValueError(f"key longer than {KEY_IOPAD_SIZE} bytes")

    padded = key_bytes.ljust(KEY_IOPAD_SIZE, b"\x00")
    inner_pad = bytes(b ^ 0x36 for b in padded)
    outer_pad = bytes(b ^ 0x5C for b in padded)

    inner = Sha1(inner_pad).update(message).digest()
    outer = Sha1(outer_pad).update(inner).digest()
    return outer.hex().upper()