# SPDX-License-Identifier: MIT
"""
blockrand.utils.hash
====================

Thin SHA3 helpers plus **domain-separated** hashing used by every derivation
in the package (seeds, the internal counter, revealed numbers and the
simulated host's block hashes). Only stdlib `hashlib` is used.

Why domain separation?
----------------------
A seed, a counter step and a revealed number all hash small tuples of
integers and bytes. Prefixing each with its own tag and length-delimiting
every part keeps those contexts from ever producing interchangeable digests.

Conventions
-----------
* Domain prefix: ``blockrand.constants.DOMAIN_PREFIX``.
* Domain tag: short dotted strings, e.g. "seed.v1", "reveal.v1".
* Parts are bytes, str or non-negative int, TLV-encoded with a per-item
  type tag so ``(1, b"")`` and ``(b"\\x01",)`` never collide. Anything
  else (None, bool, negative ints) raises.
"""

from __future__ import annotations

from hashlib import sha3_256 as _sha3_256
from typing import Iterable, Union

from ..constants import DOMAIN_PREFIX

DomainLike = Union[str, bytes]
Part = Union[bytes, bytearray, memoryview, str, int]

__all__ = [
    "sha3_256",
    "dsha3_256",
    "dsha3_256_int",
]


def sha3_256(data: bytes) -> bytes:
    """Return SHA3-256(data)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("sha3_256 expects a bytes-like object")
    return _sha3_256(bytes(data)).digest()


# --------------------------------
# Stable, self-delimiting encoding
# --------------------------------

# Item type tags (single-byte, stable):
_TT_BYTES = b"\x01"
_TT_STR = b"\x02"
_TT_INT = b"\x03"


def _varint_u(n: int) -> bytes:
    """LEB128 unsigned varint."""
    if n < 0:
        raise ValueError("varint only supports non-negative integers")
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            break
    return bytes(out)


def _int_to_be(n: int) -> bytes:
    if n < 0:
        raise ValueError("only non-negative integers are supported")
    if n == 0:
        return b"\x00"
    return n.to_bytes((n.bit_length() + 7) // 8, "big")


def _encode_one(x: Part) -> bytes:
    if isinstance(x, (bytes, bytearray, memoryview)):
        b = bytes(x)
        return _TT_BYTES + _varint_u(len(b)) + b
    if isinstance(x, str):
        b = x.encode("utf-8")
        return _TT_STR + _varint_u(len(b)) + b
    # bool is an int subclass; no derivation hashes flags
    if isinstance(x, int) and not isinstance(x, bool):
        b = _int_to_be(x)
        return _TT_INT + _varint_u(len(b)) + b
    raise TypeError(f"unsupported part type: {type(x)!r}")


def _encode_parts(parts: Iterable[Part]) -> bytes:
    enc_items = [_encode_one(p) for p in parts]
    payload = b"".join(enc_items)
    return _varint_u(len(enc_items)) + _varint_u(len(payload)) + payload


def _domain_prefix(domain: DomainLike) -> bytes:
    tag = domain if isinstance(domain, bytes) else str(domain).encode("ascii", "strict")
    return DOMAIN_PREFIX + _varint_u(len(tag)) + tag + b"|"


def dsha3_256(domain: DomainLike, *parts: Part) -> bytes:
    """
    Domain-separated SHA3-256 over *parts*.

    Equivalent to:
        SHA3-256( DOMAIN_PREFIX || len(tag) || tag || '|' || ENCODE(parts) )
    """
    h = _sha3_256()
    h.update(_domain_prefix(domain))
    h.update(_encode_parts(parts))
    return h.digest()


def dsha3_256_int(domain: DomainLike, *parts: Part) -> int:
    """:func:`dsha3_256` read as a 256-bit big-endian unsigned integer."""
    return int.from_bytes(dsha3_256(domain, *parts), "big")
