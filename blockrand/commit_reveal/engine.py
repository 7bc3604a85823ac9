# SPDX-License-Identifier: MIT
"""
RandomEngine: seed commit, reveal, instant numbers and hash recovery.

Flow
----
    seed = engine.commit_seed(caller)          # phase 1, binds seed → current height
    ... at least one height later, any state-mutating call captures the hash ...
    n = engine.reveal_from_seed(seed, 100)     # phase 2, n ∈ [1, 100]

Each public operation is one unit of work:
  • it runs inside a single `kv.transaction()`;
  • it starts by resolving the pending slot (except attestation, which only
    touches the recovery queue);
  • if it raises, every write it made, including the pending-slot resolution,
    is rolled back and its events are dropped;
  • on success its events reach the sink and metrics are recorded.

The engine is not thread-safe. Hosts serialize calls (one at a time) the way a
ledger orders transactions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..access.roles import Authorizer, RoleRegistry
from ..adapters.chain import HashSource, SimulatedChain
from ..adapters.events import (EV_SEED_COMMITTED, EventBuffer, EventSink,
                               NullEventSink)
from ..config import EngineConfig
from ..constants import CAPTURE_WINDOW, NO_HEIGHT
from ..errors import (AlreadySet, DuplicateSeed, HashNotReady, InvalidDivisor,
                      PermissionDenied, UnknownSeed)
from ..metrics import METRICS, Metrics
from ..store import open_store
from ..store.kv import RandomnessBuckets
from ..types.core import AttestOutcome, EngineStatus, PendingOutcome
from ..utils.bytes import seed_to_hex
from .derive import (SeedInputs, derive_seed, instant_from_seed, next_counter,
                     number_from_reveal)
from .pending import resolve_pending
from .recovery import attest

logger = logging.getLogger(__name__)


_OUTCOMES = {
    DuplicateSeed: "duplicate",
    UnknownSeed: "unknown_seed",
    HashNotReady: "not_ready",
    InvalidDivisor: "invalid_divisor",
    PermissionDenied: "denied",
    AlreadySet: "already_set",
}


def _outcome_for(exc: BaseException) -> str:
    return _OUTCOMES.get(type(exc), "invalid")


def _check_seed(seed: int) -> int:
    if not isinstance(seed, int) or isinstance(seed, bool):
        raise TypeError("seed must be an int")
    return seed


@dataclass
class _Call:
    events: EventBuffer
    pending: List[PendingOutcome] = field(default_factory=list)


class RandomEngine:
    """
    Commit–reveal random-number engine over a `HashSource` and a KV store.

    Args:
        source: Host ledger view (height, recent hashes, beacon, timestamp, gas).
        buckets: Typed view over the KV store holding all engine state.
        authorizer: Answers `is_authorized(identity, Role.ATTESTER)` for attestations.
        sink: Receives events of committed operations.
        metrics: Prometheus instruments; defaults to the module singleton.
        capture_window: Max pending age (heights) for automatic capture.
    """

    def __init__(
        self,
        source: HashSource,
        buckets: RandomnessBuckets,
        authorizer: Authorizer,
        *,
        sink: Optional[EventSink] = None,
        metrics: Optional[Metrics] = None,
        capture_window: int = CAPTURE_WINDOW,
    ) -> None:
        if capture_window <= 0:
            raise ValueError("capture_window must be > 0")
        self.source = source
        self.buckets = buckets
        self.authorizer = authorizer
        self.sink: EventSink = sink if sink is not None else NullEventSink()
        self.metrics = metrics if metrics is not None else METRICS
        self.capture_window = capture_window

    @classmethod
    def from_config(
        cls,
        cfg: EngineConfig,
        *,
        source: Optional[HashSource] = None,
        authorizer: Optional[Authorizer] = None,
        sink: Optional[EventSink] = None,
        metrics: Optional[Metrics] = None,
    ) -> "RandomEngine":
        """
        Build an engine from configuration. Without an explicit `source` a
        `SimulatedChain` is created from `cfg.chain`; without an `authorizer` a
        `RoleRegistry` over the same store is used.
        """
        cfg.validate()
        buckets = RandomnessBuckets(open_store(cfg.storage_uri))
        if source is None:
            source = SimulatedChain.from_params(cfg.chain, lookup_window=cfg.lookup_window)
        if authorizer is None:
            authorizer = RoleRegistry(buckets, sink=sink, chain=source)
        if metrics is None and cfg.metrics_namespace != "blockrand":
            metrics = Metrics(namespace=cfg.metrics_namespace)
        logger.info(
            "engine configured: storage=%s capture_window=%d lookup_window=%d",
            cfg.storage_uri, cfg.capture_window, cfg.lookup_window,
        )
        return cls(
            source,
            buckets,
            authorizer,
            sink=sink,
            metrics=metrics,
            capture_window=cfg.capture_window,
        )

    # ------------------------------------------------------------------
    # Call plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self) -> Iterator[_Call]:
        call = _Call(events=EventBuffer(self.source.current_height()))
        with self.buckets.kv.transaction():
            yield call
        call.events.flush(self.sink)
        for out in call.pending:
            if out.changed_state:
                self.metrics.record_pending(out.resolution.value)
        self.metrics.set_recovery_length(self.buckets.recovery_len())

    def _resolve(self, call: _Call) -> PendingOutcome:
        out = resolve_pending(self.buckets, self.source, self.capture_window, call.events)
        call.pending.append(out)
        return out

    def _inputs(self) -> SeedInputs:
        return SeedInputs(
            beacon=self.source.beacon(),
            timestamp=self.source.timestamp(),
            gas_left=self.source.gas_left(),
        )

    def _fresh_seed(self, caller: str) -> int:
        inputs = self._inputs()
        seed = derive_seed(inputs, self.buckets.counter(), caller)
        self.buckets.set_counter(next_counter(inputs, seed))
        return seed

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def check_pending(self) -> PendingOutcome:
        """Resolve the pending slot: capture its hash, or queue it for recovery."""
        with self._operation() as call:
            return self._resolve(call)

    def commit_seed(self, caller: str) -> int:
        """
        Mint a seed bound to the current height and arm the pending slot.

        Raises:
            DuplicateSeed: the derived seed is already registered.
        """
        try:
            with self._operation() as call:
                self._resolve(call)
                seed = self._fresh_seed(caller)
                existing = self.buckets.seed_height(seed)
                if existing != NO_HEIGHT:
                    raise DuplicateSeed(seed=seed, height=existing)
                height = self.source.current_height()
                self.buckets.put_seed(seed, height)
                self.buckets.set_pending(height)
                call.events.add(EV_SEED_COMMITTED, seed=seed_to_hex(seed), height=height, caller=caller)
        except Exception as e:
            self.metrics.record_commit(_outcome_for(e))
            raise
        self.metrics.record_commit("accepted")
        logger.info("seed %s committed at height %d by %s", seed_to_hex(seed), height, caller)
        return seed

    def reveal_from_seed(self, seed: int, max_value: int) -> int:
        """
        Number in [1, max_value] for a committed seed whose height's hash is known.

        Repeating a reveal with the same arguments returns the same number.

        Raises:
            UnknownSeed: the seed was never committed.
            HashNotReady: the bound height has no captured hash yet.
            InvalidDivisor: max_value is 0.
        """
        _check_seed(seed)
        try:
            with self._operation() as call:
                self._resolve(call)
                height = self.buckets.seed_height(seed)
                if height == NO_HEIGHT:
                    raise UnknownSeed(seed=seed)
                block_hash = self.buckets.captured_hash(height)
                if block_hash is None:
                    raise HashNotReady(
                        seed=seed, height=height, in_recovery=self.buckets.in_recovery(height)
                    )
                number = number_from_reveal(seed, block_hash, max_value)
        except Exception as e:
            self.metrics.record_reveal(_outcome_for(e))
            raise
        self.metrics.record_reveal("accepted")
        logger.debug("seed %s revealed (height %d, max %d)", seed_to_hex(seed), height, max_value)
        return number

    def instant_number(self, caller: str, max_value: int) -> int:
        """
        Single-call number in [1, max_value] from a fresh, unregistered seed.

        Anyone who can observe the host's pending state before the call lands
        can predict the result; use commit/reveal for anything of value.
        """
        try:
            with self._operation() as call:
                self._resolve(call)
                seed = self._fresh_seed(caller)
                number = instant_from_seed(seed, max_value)
        except Exception as e:
            self.metrics.record_instant(_outcome_for(e))
            raise
        self.metrics.record_instant("accepted")
        return number

    def attest_block_hash(self, caller: str, height: int, block_hash: bytes) -> AttestOutcome:
        """
        Supply the hash of a height stuck in the recovery queue.

        Raises:
            PermissionDenied: caller is not an attester.
            AlreadySet: the height already has a captured hash.

        A height that is not queued is ignored (returns `AttestOutcome.ABSENT`).
        """
        try:
            with self._operation() as call:
                outcome = attest(self.buckets, self.authorizer, caller, height, block_hash, call.events)
        except Exception as e:
            self.metrics.record_attestation(_outcome_for(e))
            raise
        self.metrics.record_attestation(outcome.value)
        return outcome

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    def recovery_queue_length(self) -> int:
        return self.buckets.recovery_len()

    def recovery_heights(self) -> List[int]:
        return sorted(self.buckets.recovery_heights())

    def pending_height(self) -> Optional[int]:
        return self.buckets.pending_height()

    def pending_age(self) -> int:
        height = self.buckets.pending_height()
        if height is None:
            return 0
        return max(0, self.source.current_height() - height)

    def seed_height(self, seed: int) -> int:
        """Height `seed` is bound to, or 0 if it was never committed."""
        return self.buckets.seed_height(_check_seed(seed))

    def captured_hash(self, height: int) -> Optional[bytes]:
        return self.buckets.captured_hash(height)

    def status(self) -> EngineStatus:
        heights = self.recovery_heights()
        return EngineStatus(
            height=self.source.current_height(),
            pending_height=self.pending_height(),
            pending_age=self.pending_age(),
            recovery_length=len(heights),
            recovery_heights=tuple(heights),
            capture_window=self.capture_window,
        )


__all__ = ["RandomEngine"]
