# SPDX-License-Identifier: MIT
"""
Seed, counter and number derivations.

Definitions
-----------
    seed    = H_seed( beacon || timestamp || counter || gas_left || caller )   (0 → 1)
    counter = H_counter( timestamp || seed || gas_left )
    number  = H_reveal( seed || block_hash ) mod max + 1
    instant = seed mod max + 1

- H_* is domain-separated SHA3-256 (see `blockrand.utils.hash.dsha3_256`),
  read as a 256-bit big-endian integer.
- Every part is TLV-encoded, so e.g. (timestamp=1, counter=23) and
  (timestamp=12, counter=3) never hash the same.

All functions here are pure; state handling lives in the engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import DOMAIN_COUNTER, DOMAIN_REVEAL, DOMAIN_SEED, HASH_LEN
from ..errors import InvalidDivisor
from ..utils.bytes import ensure_len
from ..utils.hash import dsha3_256_int


@dataclass(frozen=True, slots=True)
class SeedInputs:
    """Host-provided entropy sampled at the current height."""
    beacon: int
    timestamp: int
    gas_left: int


def derive_seed(inputs: SeedInputs, counter: int, caller: str) -> int:
    """Fresh, never-zero seed for `caller`."""
    if not isinstance(caller, str):
        raise TypeError("caller must be a str identity")
    seed = dsha3_256_int(
        DOMAIN_SEED, inputs.beacon, inputs.timestamp, counter, inputs.gas_left, caller
    )
    return seed if seed != 0 else 1


def next_counter(inputs: SeedInputs, seed: int) -> int:
    return dsha3_256_int(DOMAIN_COUNTER, inputs.timestamp, seed, inputs.gas_left)


def _check_max(max_value: int) -> int:
    if not isinstance(max_value, int) or isinstance(max_value, bool):
        raise TypeError("max_value must be an int")
    if max_value < 0:
        raise ValueError("max_value must be non-negative")
    if max_value == 0:
        raise InvalidDivisor(max_value=0, reason="range [1, 0] is empty")
    return max_value


def number_from_reveal(seed: int, block_hash: bytes, max_value: int) -> int:
    """Deterministic number in [1, max_value] for a seed and its height's hash."""
    _check_max(max_value)
    h = ensure_len(block_hash, HASH_LEN, name="block_hash")
    return dsha3_256_int(DOMAIN_REVEAL, seed, h) % max_value + 1


def instant_from_seed(seed: int, max_value: int) -> int:
    _check_max(max_value)
    return seed % max_value + 1


__all__ = [
    "SeedInputs",
    "derive_seed",
    "next_counter",
    "number_from_reveal",
    "instant_from_seed",
]
