"""
blockrand constants.

This module centralizes:
- Domain separation tags for seed, counter and number derivations
- Host ledger lookup window and the (slightly smaller) capture window
- Sentinels for "no seed" / "missing hash"

Operational knobs may be overridden via `blockrand.config.EngineConfig`, but
code that needs stable compile-time defaults can import from here.
"""

from __future__ import annotations

# -----------------------------
# Domain separation (str tags)
# -----------------------------
# Keep these stable; changing them changes every derived seed and number.
DOMAIN_PREFIX: bytes = b"blockrand|"

DOMAIN_SEED: str = "seed.v1"
DOMAIN_COUNTER: str = "counter.v1"
DOMAIN_REVEAL: str = "reveal.v1"

# Simulated host derivations (SimulatedChain only)
DOMAIN_SIM_BLOCK_HASH: str = "sim.block-hash.v1"
DOMAIN_SIM_BEACON: str = "sim.beacon.v1"

# -----------------------------
# Host ledger windows (heights)
# -----------------------------
# How many of the most recent heights the host can return a hash for.
LOOKUP_WINDOW: int = 256
# Capture is attempted only while the pending height is at most this many
# heights old; kept below LOOKUP_WINDOW to leave slack for the host.
CAPTURE_WINDOW: int = 250

# -----------------------------
# Sizes & sentinels
# -----------------------------
HASH_LEN: int = 32
SEED_BITS: int = 256
SEED_MAX: int = (1 << SEED_BITS) - 1

NO_HEIGHT: int = 0          # SeedRegistry sentinel: seed does not exist
EMPTY_HASH: bytes = b"\x00" * HASH_LEN
NULL_IDENTITY: str = ""     # owner after renounce

__all__ = [
    "DOMAIN_PREFIX",
    "DOMAIN_SEED",
    "DOMAIN_COUNTER",
    "DOMAIN_REVEAL",
    "DOMAIN_SIM_BLOCK_HASH",
    "DOMAIN_SIM_BEACON",
    "LOOKUP_WINDOW",
    "CAPTURE_WINDOW",
    "HASH_LEN",
    "SEED_BITS",
    "SEED_MAX",
    "NO_HEIGHT",
    "EMPTY_HASH",
    "NULL_IDENTITY",
]
