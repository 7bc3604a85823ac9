# SPDX-License-Identifier: MIT
"""
blockrand.utils.bytes
=====================

Hex/bytes conversion with strict validation, plus the 32-byte helpers used
for seeds and block hashes on the wire (RPC/CLI) and in storage.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from ..constants import EMPTY_HASH, HASH_LEN, SEED_MAX

BytesLike = Union[bytes, bytearray, memoryview]

__all__ = [
    "is_hex",
    "from_hex",
    "to_hex",
    "as_bytes",
    "ensure_len",
    "ensure_hash32",
    "is_empty_hash",
    "int_to_bytes32",
    "bytes32_to_int",
    "seed_to_hex",
    "seed_from_hex",
]

_HEX_RE = re.compile(r"^(?:0x)?[0-9a-fA-F]*$")


def is_hex(s: str) -> bool:
    """True if *s* is even-length hex with an optional ``0x`` prefix."""
    if not isinstance(s, str) or not _HEX_RE.match(s):
        return False
    body = s[2:] if s.startswith(("0x", "0X")) else s
    return len(body) % 2 == 0


def from_hex(s: str) -> bytes:
    """Convert a hex string (optional ``0x``) to bytes; strict about characters and length."""
    if not isinstance(s, str):
        raise TypeError("from_hex expects a str")
    if not _HEX_RE.match(s):
        raise ValueError("invalid hex string (characters or whitespace)")
    body = s[2:] if s.startswith(("0x", "0X")) else s
    if len(body) % 2 != 0:
        raise ValueError("hex string must have an even number of nibbles")
    return bytes.fromhex(body)


def to_hex(b: BytesLike, *, prefix: str = "0x") -> str:
    return (prefix or "") + as_bytes(b).hex()


def as_bytes(x: BytesLike) -> bytes:
    """Normalize bytes-like to immutable :class:`bytes`."""
    if isinstance(x, bytes):
        return x
    if isinstance(x, (bytearray, memoryview)):
        return bytes(x)
    raise TypeError(f"expected bytes-like, got {type(x)!r}")


def ensure_len(b: BytesLike, expected: int, *, name: str = "value") -> bytes:
    bb = as_bytes(b)
    if len(bb) != expected:
        raise ValueError(f"{name} must be {expected} bytes, got {len(bb)}")
    return bb


def ensure_hash32(b: BytesLike, *, name: str = "hash") -> bytes:
    """A 32-byte, non-zero block hash."""
    bb = ensure_len(b, HASH_LEN, name=name)
    if bb == EMPTY_HASH:
        raise ValueError(f"{name} must not be the all-zero sentinel")
    return bb


def is_empty_hash(b: Optional[bytes]) -> bool:
    return b is None or len(b) == 0 or b == EMPTY_HASH


def int_to_bytes32(n: int) -> bytes:
    if not isinstance(n, int) or isinstance(n, bool):
        raise TypeError("expected int")
    if n < 0 or n > SEED_MAX:
        raise ValueError("value out of uint256 range")
    return n.to_bytes(HASH_LEN, "big")


def bytes32_to_int(b: BytesLike) -> int:
    return int.from_bytes(ensure_len(b, HASH_LEN), "big")


def seed_to_hex(seed: int) -> str:
    return to_hex(int_to_bytes32(seed))


def seed_from_hex(s: str) -> int:
    raw = from_hex(s)
    if len(raw) > HASH_LEN:
        raise ValueError(f"seed must fit in {HASH_LEN} bytes")
    return int.from_bytes(raw, "big")
