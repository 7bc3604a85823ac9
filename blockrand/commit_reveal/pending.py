# SPDX-License-Identifier: MIT
"""
Pending-slot resolution.

At most one height is armed at a time. Resolving it happens at the start of
every state-mutating seed/number call:

    slot empty                                 → nothing to do
    armed height == current height             → nothing to do yet
    age <= capture_window and host has a hash  → capture it, clear the slot
    otherwise                                  → queue for attestation, clear the slot

Running it twice in a row is the same as running it once.
"""

from __future__ import annotations

import logging

from ..adapters.chain import HashSource
from ..adapters.events import (EV_BLOCK_HASH_CAPTURED, EV_BLOCK_HASH_EXPIRED,
                               EventBuffer)
from ..store.kv import RandomnessBuckets
from ..types.core import PendingOutcome, PendingResolution
from ..utils.bytes import is_empty_hash, to_hex

logger = logging.getLogger(__name__)


def resolve_pending(
    buckets: RandomnessBuckets,
    source: HashSource,
    capture_window: int,
    events: EventBuffer,
) -> PendingOutcome:
    height = buckets.pending_height()
    if height is None:
        return PendingOutcome(PendingResolution.EMPTY)

    current = source.current_height()
    if height >= current:
        logger.debug("pending height %d is current; nothing to resolve", height)
        return PendingOutcome(PendingResolution.SAME_HEIGHT, height)

    age = current - height
    block_hash = source.hash_of(height) if age <= capture_window else None

    if block_hash is not None and not is_empty_hash(block_hash):
        if buckets.put_captured_hash(height, block_hash):
            events.add(EV_BLOCK_HASH_CAPTURED, height=height, hash=to_hex(block_hash))
            logger.info("captured block hash for height %d (age %d)", height, age)
        buckets.clear_pending()
        return PendingOutcome(PendingResolution.CAPTURED, height)

    buckets.recovery_add(height)
    buckets.clear_pending()
    events.add(EV_BLOCK_HASH_EXPIRED, height=height, age=age)
    logger.warning(
        "pending height %d expired (age %d, window %d); queued for attestation",
        height, age, capture_window,
    )
    return PendingOutcome(PendingResolution.EXPIRED, height)


__all__ = ["resolve_pending"]
