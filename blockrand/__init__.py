"""
blockrand - seed/block-hash commit–reveal random numbers.

Two-phase randomness for ledger programs (lotteries, raffles, shuffles):

- ``commit_seed``     locks in beacon entropy and binds a seed to the current height,
- ``check_pending``   lazily captures that height's block hash on a later call,
- ``reveal_from_seed`` mixes the seed with the captured hash into a number in [1, max].

Heights whose hash could not be captured inside the host's lookup window are
parked in a recovery queue until a trusted attester supplies the hash.

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
