"""
blockrand - types package

Typed primitives and dataclasses shared across the engine:

  • core - Height, Identity, Role, PendingOutcome, AttestOutcome, Event, EngineStatus

Re-exported here for convenience:
    from blockrand.types import Height, Event, PendingResolution
"""

from __future__ import annotations

from .core import (AttestOutcome, EngineStatus, Event, Height, Identity,
                   PendingOutcome, PendingResolution, Role)

__all__ = [
    "Height",
    "Identity",
    "Role",
    "PendingResolution",
    "PendingOutcome",
    "AttestOutcome",
    "Event",
    "EngineStatus",
]
