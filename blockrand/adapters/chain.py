"""
Host ledger adapter.

The engine never talks to a ledger directly. It reads everything it needs
through the narrow, read-only `HashSource` protocol:

- current_height(): the height the current call executes at
- hash_of(height): the block hash of a recent height, or None outside the
  host's bounded lookup window (the current height itself is never available)
- beacon(): per-height entropy published by the host
- timestamp(): block timestamp of the current height
- gas_left(): remaining compute budget of the current call

`SimulatedChain` is a deterministic in-process implementation used by the
CLI simulator and the tests. Every block hash and beacon value is derived from
the configured chain seed with domain-separated SHA3-256, so two simulated
chains built from the same `ChainParams` agree byte-for-byte.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Set

from ..config import ChainParams
from ..constants import (DOMAIN_SIM_BEACON, DOMAIN_SIM_BLOCK_HASH,
                         LOOKUP_WINDOW)
from ..utils.hash import dsha3_256, dsha3_256_int

logger = logging.getLogger(__name__)


class HashSource(Protocol):
    """Read-only view of the host ledger for the current call."""

    def current_height(self) -> int: ...

    def hash_of(self, height: int) -> Optional[bytes]: ...

    def beacon(self) -> int: ...

    def timestamp(self) -> int: ...

    def gas_left(self) -> int: ...


class SimulatedChain:
    """
    Deterministic stand-in for a host ledger.

    Heights start at 1 and only move forward via `advance`. `hash_of(h)`
    answers for ``current - lookup_window <= h < current``; anything older,
    newer, or explicitly withheld with `withhold_hash` returns None.

    Example
    -------
    >>> chain = SimulatedChain()
    >>> chain.current_height()
    1
    >>> chain.advance(3)
    4
    >>> len(chain.hash_of(2))
    32
    """

    def __init__(
        self,
        *,
        chain_seed: str = "blockrand-devnet",
        genesis_time_unix: int = 1_700_000_000,
        block_time_s: int = 12,
        gas_limit: int = 30_000_000,
        lookup_window: int = LOOKUP_WINDOW,
        start_height: int = 1,
    ) -> None:
        if start_height < 1:
            raise ValueError("start_height must be >= 1")
        if lookup_window <= 0:
            raise ValueError("lookup_window must be > 0")
        self.chain_seed = chain_seed
        self.genesis_time_unix = genesis_time_unix
        self.block_time_s = block_time_s
        self.gas_limit = gas_limit
        self.lookup_window = lookup_window
        self._height = start_height
        self._gas_left = gas_limit
        self._withheld: Set[int] = set()

    @classmethod
    def from_params(cls, params: ChainParams, *, lookup_window: int = LOOKUP_WINDOW) -> "SimulatedChain":
        params.validate()
        return cls(
            chain_seed=params.chain_seed,
            genesis_time_unix=params.genesis_time_unix,
            block_time_s=params.block_time_s,
            gas_limit=params.gas_limit,
            lookup_window=lookup_window,
        )

    # ---- HashSource ---------------------------------------------------------

    def current_height(self) -> int:
        return self._height

    def hash_of(self, height: int) -> Optional[bytes]:
        if height < 1 or height >= self._height:
            return None
        if self._height - height > self.lookup_window:
            return None
        if height in self._withheld:
            return None
        return self.block_hash(height)

    def beacon(self) -> int:
        return dsha3_256_int(DOMAIN_SIM_BEACON, self.chain_seed, self._height)

    def timestamp(self) -> int:
        return self.genesis_time_unix + (self._height - 1) * self.block_time_s

    def gas_left(self) -> int:
        return self._gas_left

    # ---- Simulation controls --------------------------------------------------

    def block_hash(self, height: int) -> bytes:
        """The canonical hash of `height`, regardless of the lookup window."""
        return dsha3_256(DOMAIN_SIM_BLOCK_HASH, self.chain_seed, height)

    def advance(self, n: int = 1) -> int:
        """Move forward `n` heights and return the new current height."""
        if n < 0:
            raise ValueError("cannot move the chain backwards")
        self._height += n
        self._gas_left = self.gas_limit
        logger.debug("simulated chain advanced by %d to height %d", n, self._height)
        return self._height

    def set_gas_left(self, value: int) -> None:
        if value < 0:
            raise ValueError("gas_left must be non-negative")
        self._gas_left = value

    def withhold_hash(self, height: int) -> None:
        """Make `hash_of(height)` return None even inside the lookup window."""
        self._withheld.add(height)


__all__ = ["HashSource", "SimulatedChain"]
