import pytest

from blockrand.adapters.events import MemoryEventSink
from blockrand.debug import DebugRandom
from blockrand.errors import HashNotReady


def sample(registry, name, **labels):
    v = registry.get_sample_value(f"blockrand_engine_{name}", labels or None)
    return 0.0 if v is None else v


def test_debug_facade_echoes_values(engine, chain):
    dsink = MemoryEventSink()
    dbg = DebugRandom(engine, sink=dsink)

    seed = dbg.commit_seed("alice")
    chain.advance(1)
    n = dbg.reveal_from_seed(seed, 6)
    m = dbg.instant_number("bob", 6)

    assert dsink.names() == ["SeedGenerated", "NumberGenerated", "NumberGenerated"]
    assert dsink.events[0].args["seed"] == "0x" + seed.to_bytes(32, "big").hex()
    assert dsink.events[1].args["number"] == n
    assert dsink.events[2].args["number"] == m
    assert engine.reveal_from_seed(seed, 6) == n


def test_debug_facade_propagates_errors(engine):
    dsink = MemoryEventSink()
    dbg = DebugRandom(engine, sink=dsink)
    seed = dbg.commit_seed("alice")
    with pytest.raises(HashNotReady):
        dbg.reveal_from_seed(seed, 6)
    assert dsink.names() == ["SeedGenerated"]


def test_metrics_follow_outcomes(engine, chain, registry):
    s1 = engine.commit_seed("alice")
    with pytest.raises(HashNotReady):
        engine.reveal_from_seed(s1, 10)
    chain.advance(1)
    engine.reveal_from_seed(s1, 10)

    s2 = engine.commit_seed("alice")
    chain.advance(300)
    engine.check_pending()
    engine.attest_block_hash("attester", engine.seed_height(s2), b"\x42" * 32)
    engine.attest_block_hash("attester", 5, b"\x42" * 32)

    assert sample(registry, "commits_total", outcome="accepted") == 2
    assert sample(registry, "reveals_total", outcome="not_ready") == 1
    assert sample(registry, "reveals_total", outcome="accepted") == 1
    assert sample(registry, "pending_resolutions_total", outcome="captured") == 1
    assert sample(registry, "pending_resolutions_total", outcome="expired") == 1
    assert sample(registry, "attestations_total", outcome="accepted") == 1
    assert sample(registry, "attestations_total", outcome="absent") == 1
    assert sample(registry, "recovery_queue_length") == 0


def test_rolled_back_resolution_is_not_counted(engine, chain, registry):
    s1 = engine.commit_seed("alice")
    chain.advance(300)
    with pytest.raises(HashNotReady):
        engine.reveal_from_seed(s1, 10)
    assert sample(registry, "pending_resolutions_total", outcome="expired") == 0
    engine.check_pending()
    assert sample(registry, "pending_resolutions_total", outcome="expired") == 1
    assert sample(registry, "recovery_queue_length") == 1


def test_unknown_outcome_folds_into_invalid(metrics, registry):
    metrics.record_commit("exploded")
    assert sample(registry, "commits_total", outcome="invalid") == 1
