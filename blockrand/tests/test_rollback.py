"""
A failing call leaves no trace: the pending-slot resolution it started with is
undone, the counter does not move, and none of its events are delivered.
"""

import pytest

import blockrand.commit_reveal.engine as engine_mod
from blockrand.access.roles import RoleRegistry
from blockrand.commit_reveal.engine import RandomEngine
from blockrand.errors import DuplicateSeed, HashNotReady, PermissionDenied
from blockrand.store.kv import RandomnessBuckets
from blockrand.store.sqlite import SQLiteKeyValue
from blockrand.types.core import PendingResolution


def test_failed_reveal_undoes_its_expiry(engine, chain, sink):
    s1 = engine.commit_seed("alice")
    chain.advance(300)
    sink.clear()

    with pytest.raises(HashNotReady):
        engine.reveal_from_seed(s1, 10)

    assert engine.pending_height() == 100
    assert engine.recovery_queue_length() == 0
    assert sink.events == []

    # A standalone check commits the same transition.
    assert engine.check_pending().resolution is PendingResolution.EXPIRED
    assert engine.recovery_heights() == [100]
    assert sink.names() == ["BlockHashExpired"]


def test_duplicate_seed_rolls_back_capture_and_counter(engine, chain, buckets, monkeypatch):
    monkeypatch.setattr(engine_mod, "derive_seed", lambda inputs, counter, caller: 42)

    assert engine.commit_seed("alice") == 42
    counter = buckets.counter()
    chain.advance(1)

    with pytest.raises(DuplicateSeed) as ei:
        engine.commit_seed("alice")
    assert ei.value.height == 100

    assert buckets.counter() == counter
    assert engine.pending_height() == 100
    assert engine.captured_hash(100) is None
    assert engine.seed_height(42) == 100


def test_denied_attestation_changes_nothing(engine, chain):
    engine.commit_seed("alice")
    chain.advance(300)
    engine.check_pending()

    with pytest.raises(PermissionDenied):
        engine.attest_block_hash("mallory", 100, chain.block_hash(100))
    assert engine.recovery_heights() == [100]
    assert engine.captured_hash(100) is None


def test_rollback_on_sqlite_backend(tmp_path, chain, sink, metrics):
    kv = SQLiteKeyValue(str(tmp_path / "state.db"))
    buckets = RandomnessBuckets(kv)
    roles = RoleRegistry(buckets, sink=sink, chain=chain)
    roles.init_owner("owner")
    roles.add_attester("owner", "attester")
    eng = RandomEngine(chain, buckets, roles, sink=sink, metrics=metrics)

    s1 = eng.commit_seed("alice")
    chain.advance(300)
    with pytest.raises(HashNotReady):
        eng.reveal_from_seed(s1, 10)
    assert eng.pending_height() == 100
    assert eng.recovery_queue_length() == 0

    eng.check_pending()
    eng.attest_block_hash("attester", 100, chain.block_hash(100))
    n = eng.reveal_from_seed(s1, 10)
    kv.close()

    # State survives a reopen.
    kv2 = SQLiteKeyValue(str(tmp_path / "state.db"))
    eng2 = RandomEngine(chain, RandomnessBuckets(kv2), roles, metrics=metrics)
    assert eng2.seed_height(s1) == 100
    assert eng2.reveal_from_seed(s1, 10) == n
    kv2.close()
