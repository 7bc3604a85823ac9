"""
Rejections leave a `@contextmanager` transaction as the exact error type,
carrying their fields, on both store backends.
"""

import pickle

import pytest
from prometheus_client import CollectorRegistry

import blockrand.commit_reveal.engine as engine_mod
from blockrand.access.roles import RoleRegistry
from blockrand.adapters.chain import SimulatedChain
from blockrand.adapters.events import MemoryEventSink
from blockrand.commit_reveal.engine import RandomEngine
from blockrand.errors import (AlreadySet, BlockRandError, DuplicateSeed,
                              HashNotReady, InvalidDivisor, PermissionDenied,
                              UnknownSeed)
from blockrand.metrics import Metrics
from blockrand.store.kv import RandomnessBuckets
from blockrand.store.memory import MemoryKeyValue
from blockrand.store.sqlite import SQLiteKeyValue


@pytest.fixture(params=["memory", "sqlite"])
def setup(request, tmp_path):
    kv = MemoryKeyValue() if request.param == "memory" else SQLiteKeyValue(str(tmp_path / "rand.db"))
    chain = SimulatedChain(start_height=100)
    buckets = RandomnessBuckets(kv)
    roles = RoleRegistry(buckets, chain=chain)
    roles.init_owner("owner")
    roles.add_attester("owner", "attester")
    registry = CollectorRegistry()
    eng = RandomEngine(
        chain, buckets, roles, sink=MemoryEventSink(), metrics=Metrics(registry=registry)
    )
    yield eng, chain, roles, registry
    kv.close()


def raised(exc_type, fn, *args):
    with pytest.raises(BlockRandError) as ei:
        fn(*args)
    assert type(ei.value) is exc_type
    assert not isinstance(ei.value, AttributeError)
    assert ei.value.__traceback__ is not None
    return ei.value


def test_reveal_at_commit_height(setup):
    eng, _, _, registry = setup
    seed = eng.commit_seed("alice")
    err = raised(HashNotReady, eng.reveal_from_seed, seed, 10)
    assert (err.seed, err.height, err.in_recovery) == (seed, 100, False)
    assert registry.get_sample_value(
        "blockrand_engine_reveals_total", {"outcome": "not_ready"}
    ) == 1.0


def test_reveal_of_expired_height(setup):
    eng, chain, _, _ = setup
    seed = eng.commit_seed("alice")
    chain.advance(300)
    eng.check_pending()
    err = raised(HashNotReady, eng.reveal_from_seed, seed, 10)
    assert err.in_recovery is True


def test_zero_max(setup):
    eng, chain, _, registry = setup
    seed = eng.commit_seed("alice")
    chain.advance(1)
    assert raised(InvalidDivisor, eng.reveal_from_seed, seed, 0).max_value == 0
    raised(InvalidDivisor, eng.instant_number, "bob", 0)
    assert registry.get_sample_value(
        "blockrand_engine_instant_total", {"outcome": "invalid_divisor"}
    ) == 1.0


def test_unknown_seed(setup):
    eng, _, _, _ = setup
    assert raised(UnknownSeed, eng.reveal_from_seed, 12345, 10).seed == 12345


def test_attestation_gates(setup):
    eng, chain, _, registry = setup
    eng.commit_seed("alice")
    chain.advance(300)
    eng.check_pending()
    h = chain.block_hash(100)

    err = raised(PermissionDenied, eng.attest_block_hash, "mallory", 100, h)
    assert err.caller == "mallory"
    eng.attest_block_hash("attester", 100, h)
    assert raised(AlreadySet, eng.attest_block_hash, "attester", 100, h).height == 100
    assert registry.get_sample_value(
        "blockrand_engine_attestations_total", {"outcome": "denied"}
    ) == 1.0


def test_duplicate_seed(setup, monkeypatch):
    eng, chain, _, _ = setup
    monkeypatch.setattr(engine_mod, "derive_seed", lambda *a: 42)
    eng.commit_seed("alice")
    chain.advance(1)
    err = raised(DuplicateSeed, eng.commit_seed, "alice")
    assert (err.seed, err.height) == (42, 100)


def test_role_gate(setup):
    _, _, roles, _ = setup
    err = raised(PermissionDenied, roles.add_attester, "mallory", "eve")
    assert err.caller == "mallory"
    assert not roles.is_attester("eve")


def test_errors_keep_args_and_pickle():
    err = HashNotReady(seed=7, height=3, in_recovery=True)
    assert err.args == (7, 3, True)
    clone = pickle.loads(pickle.dumps(err))
    assert type(clone) is HashNotReady
    assert (clone.seed, clone.height, clone.in_recovery) == (7, 3, True)
    assert "height=3" in str(err)
