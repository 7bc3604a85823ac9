"""
blockrand.access.roles
======================

Owner + attester role bookkeeping, persisted in the same key-value store as
the engine state.

Surface
-------
- `init_owner(owner)` sets the owner once; later calls leave it untouched
- `owner()` returns the current owner, or None (never set / renounced)
- `transfer_ownership(caller, new_owner)` owner-only, `new_owner` non-empty
- `renounce_ownership(caller)` owner-only, leaves the null identity as owner
- `add_attester(caller, who)` / `remove_attester(caller, who)` owner-only
- `is_attester(who)` and `is_authorized(identity, role)`

The engine only ever calls `is_authorized`; anything with that method can be
injected instead (see `Authorizer`).

Events
------
- OwnershipTransferred {"previous": str, "new": str}
- AttesterAdded        {"account": str, "sender": str}
- AttesterRemoved      {"account": str, "sender": str}
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..adapters.chain import HashSource
from ..adapters.events import (EV_ATTESTER_ADDED, EV_ATTESTER_REMOVED,
                               EV_OWNERSHIP_TRANSFERRED, EventBuffer,
                               EventSink, NullEventSink)
from ..constants import NULL_IDENTITY
from ..errors import PermissionDenied
from ..store.kv import RandomnessBuckets
from ..types.core import Role

logger = logging.getLogger(__name__)

_MEMBER = b"\x01"


class Authorizer(Protocol):
    def is_authorized(self, identity: str, role: Role) -> bool: ...


def _check_identity(name: str, value: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str identity")
    return value


class RoleRegistry:
    """Single owner plus an owner-managed attester set."""

    def __init__(
        self,
        buckets: RandomnessBuckets,
        *,
        sink: Optional[EventSink] = None,
        chain: Optional[HashSource] = None,
    ) -> None:
        self.buckets = buckets
        self.sink: EventSink = sink if sink is not None else NullEventSink()
        self.chain = chain

    # ---- Internals -----------------------------------------------------------

    def _buffer(self) -> EventBuffer:
        return EventBuffer(self.chain.current_height() if self.chain is not None else 0)

    def _require_owner(self, caller: str) -> None:
        owner = self.owner()
        if owner is None or owner != caller:
            raise PermissionDenied(caller=caller, role=Role.OWNER.value)

    def _set_owner(self, identity: str) -> None:
        self.buckets.kv.put(self.buckets.key_owner(), identity.encode("utf-8"))

    # ---- Owner ---------------------------------------------------------------

    def owner(self) -> Optional[str]:
        raw = self.buckets.kv.get(self.buckets.key_owner())
        if raw is None or len(raw) == 0:
            return None
        return raw.decode("utf-8")

    def init_owner(self, owner: str) -> bool:
        """
        Set the first owner. Returns False (and changes nothing) if an owner was
        ever set before, including one that has since renounced.
        """
        _check_identity("owner", owner)
        if owner == NULL_IDENTITY:
            raise ValueError("initial owner must be non-empty")
        buf = self._buffer()
        with self.buckets.kv.transaction():
            if self.buckets.kv.has(self.buckets.key_owner()):
                logger.debug("init_owner ignored: owner already initialized")
                return False
            self._set_owner(owner)
            buf.add(EV_OWNERSHIP_TRANSFERRED, previous=NULL_IDENTITY, new=owner)
        buf.flush(self.sink)
        logger.info("owner initialized to %s", owner)
        return True

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        _check_identity("new_owner", new_owner)
        buf = self._buffer()
        with self.buckets.kv.transaction():
            self._require_owner(caller)
            if new_owner == NULL_IDENTITY:
                raise ValueError("new owner must be non-empty; use renounce_ownership")
            self._set_owner(new_owner)
            buf.add(EV_OWNERSHIP_TRANSFERRED, previous=caller, new=new_owner)
        buf.flush(self.sink)
        logger.info("ownership transferred from %s to %s", caller, new_owner)

    def renounce_ownership(self, caller: str) -> None:
        buf = self._buffer()
        with self.buckets.kv.transaction():
            self._require_owner(caller)
            self._set_owner(NULL_IDENTITY)
            buf.add(EV_OWNERSHIP_TRANSFERRED, previous=caller, new=NULL_IDENTITY)
        buf.flush(self.sink)
        logger.info("ownership renounced by %s", caller)

    # ---- Attesters -------------------------------------------------------------

    def is_attester(self, who: str) -> bool:
        return self.buckets.kv.has(self.buckets.key_role_member(Role.ATTESTER.value, who))

    def add_attester(self, caller: str, who: str) -> bool:
        """Grant the attester role. Returns False if `who` already holds it."""
        _check_identity("who", who)
        if who == NULL_IDENTITY:
            raise ValueError("attester identity must be non-empty")
        buf = self._buffer()
        with self.buckets.kv.transaction():
            self._require_owner(caller)
            if self.is_attester(who):
                return False
            self.buckets.kv.put(self.buckets.key_role_member(Role.ATTESTER.value, who), _MEMBER)
            buf.add(EV_ATTESTER_ADDED, account=who, sender=caller)
        buf.flush(self.sink)
        logger.info("attester added: %s (by %s)", who, caller)
        return True

    def remove_attester(self, caller: str, who: str) -> bool:
        """Revoke the attester role. Returns False if `who` did not hold it."""
        buf = self._buffer()
        with self.buckets.kv.transaction():
            self._require_owner(caller)
            if not self.is_attester(who):
                return False
            self.buckets.kv.delete(self.buckets.key_role_member(Role.ATTESTER.value, who))
            buf.add(EV_ATTESTER_REMOVED, account=who, sender=caller)
        buf.flush(self.sink)
        logger.info("attester removed: %s (by %s)", who, caller)
        return True

    # ---- Authorizer ------------------------------------------------------------

    def is_authorized(self, identity: str, role: Role) -> bool:
        if identity == NULL_IDENTITY:
            return False
        if Role(role) is Role.OWNER:
            return self.owner() == identity
        return self.is_attester(identity)


__all__ = ["Authorizer", "RoleRegistry"]
