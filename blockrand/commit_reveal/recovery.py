# SPDX-License-Identifier: MIT
"""
Trusted attestation of block hashes the engine failed to capture.

Only identities the authorizer grants the attester role may write here. The
supplied hash is taken on trust; nothing checks it against the host.
"""

from __future__ import annotations

import logging

from ..access.roles import Authorizer
from ..adapters.events import EV_BLOCK_HASH_ATTESTED, EventBuffer
from ..errors import AlreadySet, PermissionDenied
from ..store.kv import RandomnessBuckets
from ..types.core import AttestOutcome, Role
from ..utils.bytes import ensure_hash32, to_hex

logger = logging.getLogger(__name__)


def attest(
    buckets: RandomnessBuckets,
    authorizer: Authorizer,
    caller: str,
    height: int,
    block_hash: bytes,
    events: EventBuffer,
) -> AttestOutcome:
    """
    Supply the hash for a queued height.

    Raises:
        PermissionDenied: caller is not an attester.
        ValueError: height < 1, or the hash is not 32 non-zero bytes.
        AlreadySet: the height already has a captured hash.

    Returns ABSENT without touching state when `height` is not queued.
    """
    if not authorizer.is_authorized(caller, Role.ATTESTER):
        raise PermissionDenied(caller=caller, role=Role.ATTESTER.value)
    if not isinstance(height, int) or isinstance(height, bool):
        raise TypeError("height must be an int")
    if height < 1:
        raise ValueError("height must be >= 1")
    value = ensure_hash32(block_hash, name="block_hash")

    if buckets.has_captured_hash(height):
        raise AlreadySet(height=height)

    if not buckets.recovery_remove(height):
        logger.debug("attestation for height %d ignored: not awaiting recovery", height)
        return AttestOutcome.ABSENT

    buckets.put_captured_hash(height, value)
    events.add(EV_BLOCK_HASH_ATTESTED, height=height, hash=to_hex(value), attester=caller)
    logger.info("block hash for height %d attested by %s", height, caller)
    return AttestOutcome.ACCEPTED


__all__ = ["attest"]
