"""
Logical buckets over a raw byte-oriented KeyValue backend.

This module provides the typed view the engine works against:

Buckets
-------
- SEEDS:     seed (uint256, 32B) → bound height (u64)        append-only
- HASHES:    height (u64)        → captured block hash (32B) write-once
- RECOVERY:  heights awaiting attestation, stored as a dense position array
             plus a height → position index, so removal is O(1)
             swap-with-last-and-pop and order carries no meaning; listing
             scans the index keys
- META:      singletons: pending slot height, internal counter, queue length
- ROLES:     owner identity and role membership flags

Key layout
----------
    key = PREFIX || (TAG?) || concat(u32_be(len(part)) || part for part in parts)

All helpers here are plain reads/writes; callers wrap them in
``kv.transaction()`` to make a whole engine call atomic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from ..constants import HASH_LEN, NO_HEIGHT
from ..utils.bytes import int_to_bytes32, is_empty_hash
from . import KeyValue

# --- Bucket prefix constants (single-byte, domain-separated) -----------------

SEEDS_PREFIX    = b"\x01"
HASHES_PREFIX   = b"\x02"
RECOVERY_PREFIX = b"\x03"
META_PREFIX     = b"\x05"
ROLES_PREFIX    = b"\x06"

# --- RECOVERY sub-tags -------------------------------------------------------

RECOVERY_SLOT_TAG  = b"S"   # position → height
RECOVERY_INDEX_TAG = b"I"   # height → position

# --- META names --------------------------------------------------------------

META_PENDING = b"pending_height"
META_COUNTER = b"counter"
META_RECOVERY_LEN = b"recovery_len"


# --- Key composition helpers -------------------------------------------------

def _be_u32(n: int) -> bytes:
    if n < 0 or n > 0xFFFFFFFF:
        raise ValueError("length out of range for u32")
    return n.to_bytes(4, "big")


def _u64(n: int) -> bytes:
    if n < 0:
        raise ValueError("height/position must be non-negative")
    return n.to_bytes(8, "big", signed=False)


def _from_u64(b: bytes) -> int:
    return int.from_bytes(b, "big", signed=False)


def _k(prefix: bytes, *parts: bytes) -> bytes:
    """Prefix + 4-byte len for each part to avoid accidental collisions."""
    return prefix + b"".join(_be_u32(len(p)) + p for p in parts)


def _k_tagged(prefix: bytes, tag: bytes, *parts: bytes) -> bytes:
    return prefix + tag + b"".join(_be_u32(len(p)) + p for p in parts)


def _utf8(s: str | bytes) -> bytes:
    return s if isinstance(s, bytes) else s.encode("utf-8")


# --- Public bucket API -------------------------------------------------------

@dataclass(frozen=True)
class RandomnessBuckets:
    """
    Namespaced view over a byte KV store holding all durable engine state.
    """
    kv: KeyValue

    # --- Seed registry -------------------------------------------------------

    def key_seed(self, seed: int) -> bytes:
        return _k(SEEDS_PREFIX, int_to_bytes32(seed))

    def seed_height(self, seed: int) -> int:
        """Bound height for `seed`, or NO_HEIGHT (0) if it was never registered."""
        v = self.kv.get(self.key_seed(seed))
        return NO_HEIGHT if v is None else _from_u64(v)

    def put_seed(self, seed: int, height: int) -> None:
        if height <= NO_HEIGHT:
            raise ValueError("seed must be bound to a real height (>= 1)")
        self.kv.put(self.key_seed(seed), _u64(height))

    # --- Captured block hashes -------------------------------------------------

    def key_hash(self, height: int) -> bytes:
        return _k(HASHES_PREFIX, _u64(height))

    def captured_hash(self, height: int) -> Optional[bytes]:
        """Captured hash for `height`, or None while it is missing."""
        v = self.kv.get(self.key_hash(height))
        return None if is_empty_hash(v) else v

    def has_captured_hash(self, height: int) -> bool:
        return self.captured_hash(height) is not None

    def put_captured_hash(self, height: int, value: bytes) -> bool:
        """
        Write the hash for `height` only if none is captured yet.

        Returns True if written, False if a hash was already present.
        """
        if len(value) != HASH_LEN or is_empty_hash(value):
            raise ValueError("captured hash must be 32 non-zero bytes")
        if self.has_captured_hash(height):
            return False
        self.kv.put(self.key_hash(height), bytes(value))
        return True

    # --- Recovery queue ----------------------------------------------------------

    def key_recovery_slot(self, position: int) -> bytes:
        return _k_tagged(RECOVERY_PREFIX, RECOVERY_SLOT_TAG, _u64(position))

    def key_recovery_index(self, height: int) -> bytes:
        return _k_tagged(RECOVERY_PREFIX, RECOVERY_INDEX_TAG, _u64(height))

    def recovery_len(self) -> int:
        v = self.get_meta(META_RECOVERY_LEN)
        return 0 if v is None else _from_u64(v)

    def _set_recovery_len(self, n: int) -> None:
        self.put_meta(META_RECOVERY_LEN, _u64(n))

    def in_recovery(self, height: int) -> bool:
        return self.kv.has(self.key_recovery_index(height))

    def recovery_add(self, height: int) -> bool:
        """Append `height` unless already queued. Returns True if added."""
        if self.in_recovery(height):
            return False
        n = self.recovery_len()
        self.kv.put(self.key_recovery_slot(n), _u64(height))
        self.kv.put(self.key_recovery_index(height), _u64(n))
        self._set_recovery_len(n + 1)
        return True

    def recovery_remove(self, height: int) -> bool:
        """
        Remove `height` by moving the last entry into its position.

        Returns False (and changes nothing) if `height` is not queued.
        """
        raw_pos = self.kv.get(self.key_recovery_index(height))
        if raw_pos is None:
            return False
        pos = _from_u64(raw_pos)
        last = self.recovery_len() - 1
        if pos != last:
            raw_last = self.kv.get(self.key_recovery_slot(last))
            if raw_last is None:
                raise RuntimeError(f"recovery queue corrupt: no entry at position {last}")
            last_height = _from_u64(raw_last)
            self.kv.put(self.key_recovery_slot(pos), _u64(last_height))
            self.kv.put(self.key_recovery_index(last_height), _u64(pos))
        self.kv.delete(self.key_recovery_slot(last))
        self.kv.delete(self.key_recovery_index(height))
        self._set_recovery_len(last)
        return True

    def iter_recovery(self) -> Iterator[int]:
        """Queued heights in ascending order, read off the height index."""
        for key, _ in self.kv.iter_prefix(RECOVERY_PREFIX + RECOVERY_INDEX_TAG):
            yield _from_u64(key[-8:])

    def recovery_heights(self) -> List[int]:
        return list(self.iter_recovery())

    # --- Pending slot --------------------------------------------------------

    def pending_height(self) -> Optional[int]:
        v = self.get_meta(META_PENDING)
        return None if v is None else _from_u64(v)

    def set_pending(self, height: int) -> None:
        if height <= NO_HEIGHT:
            raise ValueError("pending height must be >= 1")
        self.put_meta(META_PENDING, _u64(height))

    def clear_pending(self) -> None:
        self.del_meta(META_PENDING)

    # --- Counter -------------------------------------------------------------

    def counter(self) -> int:
        v = self.get_meta(META_COUNTER)
        return 0 if v is None else int.from_bytes(v, "big")

    def set_counter(self, value: int) -> None:
        self.put_meta(META_COUNTER, int_to_bytes32(value))

    # --- Roles ---------------------------------------------------------------

    def key_owner(self) -> bytes:
        return _k(ROLES_PREFIX, b"owner")

    def key_role_member(self, role: str, identity: str) -> bytes:
        return _k(ROLES_PREFIX, b"member", _utf8(role), _utf8(identity))

    # --- Meta ----------------------------------------------------------------

    def key_meta(self, name: str | bytes) -> bytes:
        return _k(META_PREFIX, _utf8(name))

    def put_meta(self, name: str | bytes, value: bytes) -> None:
        self.kv.put(self.key_meta(name), value)

    def get_meta(self, name: str | bytes) -> Optional[bytes]:
        return self.kv.get(self.key_meta(name))

    def del_meta(self, name: str | bytes) -> None:
        self.kv.delete(self.key_meta(name))


__all__ = [
    "RandomnessBuckets",
    "SEEDS_PREFIX",
    "HASHES_PREFIX",
    "RECOVERY_PREFIX",
    "META_PREFIX",
    "ROLES_PREFIX",
]
