"""
blockrand errors.

A small, typed hierarchy of exceptions raised by the commit–reveal engine.
Callers can catch the base `BlockRandError` to handle every protocol
rejection, or the concrete subclasses for granular control.

Every error rejects the whole operation: the engine rolls back all state
changes made by the failing call (including its leading pending-slot check)
before the exception reaches the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional


class BlockRandError(Exception):
    """Base class for all blockrand protocol errors."""

    def __post_init__(self) -> None:
        # Subclasses are mutable dataclasses: contextlib writes __traceback__
        # on exceptions leaving a @contextmanager block.
        super().__init__(*(getattr(self, f.name) for f in fields(self)))


@dataclass(eq=False)
class PermissionDenied(BlockRandError):
    """
    Raised when a caller lacks the owner or attester role for a gated operation.

    Attributes:
        caller: The identity that attempted the call.
        role: The role that was required.
    """
    caller: str
    role: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"PermissionDenied: caller={self.caller!r} lacks role={self.role}"


@dataclass(eq=False)
class AlreadySet(BlockRandError):
    """
    Raised on an attempt to overwrite a captured block hash.

    Attributes:
        height: The height whose hash is already captured.
    """
    height: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"AlreadySet: block hash for height={self.height} is already captured"


@dataclass(eq=False)
class DuplicateSeed(BlockRandError):
    """
    Raised when a freshly derived seed collides with a registered one.

    Attributes:
        seed: The colliding seed value.
        height: Height the existing seed is bound to.
    """
    seed: int
    height: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"DuplicateSeed: seed=0x{self.seed:064x} already bound to height={self.height}"


@dataclass(eq=False)
class UnknownSeed(BlockRandError):
    """
    Raised when a reveal is requested for a seed that was never committed.

    Attributes:
        seed: The unknown seed value.
    """
    seed: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"UnknownSeed: seed=0x{self.seed:064x}"


@dataclass(eq=False)
class HashNotReady(BlockRandError):
    """
    Raised when a reveal arrives before the seed's height has a captured hash.

    Attributes:
        seed: The seed being revealed.
        height: Height the seed is bound to.
        in_recovery: True if the height already expired into the recovery queue
                     and now needs an attestation.
    """
    seed: int
    height: int
    in_recovery: bool = False

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        hint = " (awaiting attestation)" if self.in_recovery else ""
        return f"HashNotReady: height={self.height} has no captured hash{hint}"


@dataclass(eq=False)
class InvalidDivisor(BlockRandError):
    """
    Raised when `max_value` is zero (the number range would be empty).

    Attributes:
        max_value: The rejected value.
        reason: Optional explanation.
    """
    max_value: int
    reason: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        base = f"InvalidDivisor: max_value={self.max_value}"
        return f"{base} reason={self.reason}" if self.reason else base


__all__ = [
    "BlockRandError",
    "PermissionDenied",
    "AlreadySet",
    "DuplicateSeed",
    "UnknownSeed",
    "HashNotReady",
    "InvalidDivisor",
]
