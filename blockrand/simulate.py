"""
Local commit → advance → reveal walk on a `SimulatedChain`.

Used by `blockrand simulate` and handy in notebooks:

    >>> report = run_simulation(advance=300, attest=True)
    >>> report["check_pending"]["resolution"]
    'expired'
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import CollectorRegistry

from .access.roles import RoleRegistry
from .adapters.chain import SimulatedChain
from .adapters.events import MemoryEventSink, events_to_dicts
from .commit_reveal.engine import RandomEngine
from .errors import BlockRandError
from .metrics import Metrics
from .store.kv import RandomnessBuckets
from .store.memory import MemoryKeyValue
from .types.core import PendingResolution
from .utils.bytes import seed_to_hex, to_hex

SIM_OWNER = "owner"
SIM_ATTESTER = "attester"


def build_simulated_engine(chain: SimulatedChain, sink: MemoryEventSink) -> RandomEngine:
    """Engine over a fresh in-memory store with `owner` / `attester` roles set up."""
    buckets = RandomnessBuckets(MemoryKeyValue())
    roles = RoleRegistry(buckets, sink=sink, chain=chain)
    roles.init_owner(SIM_OWNER)
    roles.add_attester(SIM_OWNER, SIM_ATTESTER)
    return RandomEngine(
        chain,
        buckets,
        roles,
        sink=sink,
        metrics=Metrics(registry=CollectorRegistry()),
    )


def run_simulation(
    *,
    advance: int = 1,
    max_value: int = 100,
    caller: str = "alice",
    attest: bool = False,
    chain_seed: str = "blockrand-devnet",
) -> Dict[str, Any]:
    """
    Commit a seed, advance `advance` heights, resolve the pending slot, optionally
    attest an expired height, then try to reveal. Returns a JSON-friendly report.
    """
    chain = SimulatedChain(chain_seed=chain_seed)
    sink = MemoryEventSink()
    engine = build_simulated_engine(chain, sink)

    report: Dict[str, Any] = {}
    seed = engine.commit_seed(caller)
    commit_height = chain.current_height()
    report["commit"] = {"seed": seed_to_hex(seed), "height": commit_height}

    report["advanced_to"] = chain.advance(advance)

    outcome = engine.check_pending()
    report["check_pending"] = {"resolution": outcome.resolution.value, "height": outcome.height}

    if attest and outcome.resolution is PendingResolution.EXPIRED:
        block_hash = chain.block_hash(commit_height)
        att = engine.attest_block_hash(SIM_ATTESTER, commit_height, block_hash)
        report["attest"] = {"height": commit_height, "hash": to_hex(block_hash), "outcome": att.value}

    try:
        report["reveal"] = {"max_value": max_value, "number": engine.reveal_from_seed(seed, max_value)}
    except BlockRandError as e:
        report["reveal"] = {"max_value": max_value, "error": type(e).__name__, "message": str(e)}

    report["status"] = engine.status().to_dict()
    report["events"] = events_to_dicts(sink.events)
    return report


__all__ = ["run_simulation", "build_simulated_engine", "SIM_OWNER", "SIM_ATTESTER"]
