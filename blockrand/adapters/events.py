"""
Event delivery.

Canonical event names emitted by the engine, the role registry and the debug
facade, plus the sinks that receive them.

Events raised inside an engine call are collected in an `EventBuffer` and only
handed to the sink once the call's store transaction has committed; a failed
call drops its buffer.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol

from ..types.core import Event

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Canonical event names
# ------------------------------------------------------------------------------

# Access control
EV_OWNERSHIP_TRANSFERRED = "OwnershipTransferred"
EV_ATTESTER_ADDED = "AttesterAdded"
EV_ATTESTER_REMOVED = "AttesterRemoved"

# Engine
EV_BLOCK_HASH_CAPTURED = "BlockHashCaptured"
EV_BLOCK_HASH_EXPIRED = "BlockHashExpired"
EV_BLOCK_HASH_ATTESTED = "BlockHashAttested"
EV_SEED_COMMITTED = "SeedCommitted"

# Debug facade
EV_SEED_GENERATED = "SeedGenerated"
EV_NUMBER_GENERATED = "NumberGenerated"


class EventSink(Protocol):
    def emit(self, event: Event) -> None: ...


class NullEventSink:
    """Drops every event."""

    def emit(self, event: Event) -> None:
        return None


class LoggingEventSink:
    """Writes every event to the module logger at INFO."""

    def emit(self, event: Event) -> None:
        logger.info("event %s height=%d args=%s", event.name, event.height, event.args)


class MemoryEventSink:
    """Keeps events in a list; handy for tests and the CLI simulator."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def of(self, name: str) -> List[Event]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        self.events.clear()


class EventBuffer:
    """Collects events during one call and forwards them on `flush`."""

    def __init__(self, height: int) -> None:
        self.height = height
        self._pending: List[Event] = []

    def add(self, name: str, **args: Any) -> None:
        self._pending.append(Event(name=name, args=dict(args), height=self.height))

    def flush(self, sink: EventSink) -> None:
        for ev in self._pending:
            sink.emit(ev)
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)


def events_to_dicts(events: List[Event]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in events]


__all__ = [
    "EV_OWNERSHIP_TRANSFERRED",
    "EV_ATTESTER_ADDED",
    "EV_ATTESTER_REMOVED",
    "EV_BLOCK_HASH_CAPTURED",
    "EV_BLOCK_HASH_EXPIRED",
    "EV_BLOCK_HASH_ATTESTED",
    "EV_SEED_COMMITTED",
    "EV_SEED_GENERATED",
    "EV_NUMBER_GENERATED",
    "EventSink",
    "NullEventSink",
    "LoggingEventSink",
    "MemoryEventSink",
    "EventBuffer",
    "events_to_dicts",
]
