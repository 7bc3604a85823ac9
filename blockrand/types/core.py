from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NewType, Optional, Tuple

"""
Core typed primitives for the commit–reveal engine.

Minimal and free of heavy dependencies so they can be shared by the engine,
stores, RPC surface and tests.

Types provided:
  • Height           - ledger sequence position (≥ 1 for real heights)
  • Identity         - opaque caller identity (address string)
  • Role             - roles understood by the authorizer
  • PendingOutcome   - what a pending-slot check did
  • AttestOutcome    - what an attestation did
  • Event            - notification emitted for off-system observers
  • EngineStatus     - read-only snapshot for RPC/CLI
"""

# ---- Simple newtypes ---------------------------------------------------------

Height = NewType("Height", int)
Identity = NewType("Identity", str)


def _require_nonneg(name: str, v: int) -> None:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be an int")
    if v < 0:
        raise ValueError(f"{name} must be non-negative (got {v})")


class Role(str, Enum):
    """Roles the engine asks the authorizer about."""

    OWNER = "owner"
    ATTESTER = "attester"


# ---- Outcomes ----------------------------------------------------------------


class PendingResolution(str, Enum):
    EMPTY = "empty"            # nothing armed
    SAME_HEIGHT = "same_height"  # armed height is the current one; nothing to resolve yet
    CAPTURED = "captured"      # hash written to the block-hash store
    EXPIRED = "expired"        # height moved to the recovery queue


@dataclass(frozen=True, slots=True)
class PendingOutcome:
    """
    Result of one pending-slot check.

    Fields:
      resolution - which branch ran
      height     - the armed height (None when the slot was empty)
    """

    resolution: PendingResolution
    height: Optional[int] = None

    @property
    def changed_state(self) -> bool:
        return self.resolution in (PendingResolution.CAPTURED, PendingResolution.EXPIRED)


class AttestOutcome(str, Enum):
    ACCEPTED = "accepted"  # height was in the recovery queue; hash stored
    ABSENT = "absent"      # height not in the recovery queue; nothing changed


# ---- Events ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Event:
    """
    A notification for off-system observers.

    Fields:
      name   - event name, e.g. "AttesterAdded"
      args   - JSON-friendly payload (ints, strs, 0x-hex strings)
      height - ledger height at which the emitting call ran
    """

    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    height: int = 0

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("event name must be a non-empty str")
        _require_nonneg("height", self.height)

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "height": self.height, "args": dict(self.args)}


# ---- Status snapshot -----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EngineStatus:
    """
    Read-only view of engine state.

    Fields:
      height           - current host height
      pending_height   - armed pending height (None if empty)
      pending_age      - heights since the armed height (0 if empty)
      recovery_length  - number of heights awaiting attestation
      recovery_heights - those heights (order not meaningful)
      capture_window   - configured automatic-capture window
    """

    height: int
    pending_height: Optional[int]
    pending_age: int
    recovery_length: int
    recovery_heights: Tuple[int, ...]
    capture_window: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "height": self.height,
            "pending_height": self.pending_height,
            "pending_age": self.pending_age,
            "recovery_length": self.recovery_length,
            "recovery_heights": list(self.recovery_heights),
            "capture_window": self.capture_window,
        }


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
