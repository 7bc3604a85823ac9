# SPDX-License-Identifier: MIT
"""
blockrand.commit_reveal
=======================

Seed commit / reveal lifecycle:

    1) `commit_seed` mints a seed bound to the current height and arms the
       pending slot.
    2) The next state-mutating call at a later height captures that height's
       hash (or, if too much time passed, queues it for attestation).
    3) `reveal_from_seed` turns the seed and the captured hash into a number.

Submodules:
    - derive.py   : pure seed / counter / number derivations.
    - pending.py  : pending-slot resolution.
    - recovery.py : role-gated attestation of missed hashes.
    - engine.py   : `RandomEngine`, which ties the above to a store and a host.
"""

from __future__ import annotations

from .engine import RandomEngine

__all__ = ["RandomEngine"]
