import pytest

from blockrand.store import open_store
from blockrand.store.kv import RandomnessBuckets
from blockrand.store.memory import MemoryKeyValue
from blockrand.store.sqlite import SQLiteKeyValue


@pytest.fixture(params=["memory", "sqlite"])
def kv(request, tmp_path):
    if request.param == "memory":
        store = MemoryKeyValue()
    else:
        store = SQLiteKeyValue(str(tmp_path / "kv.db"))
    yield store
    store.close()


def test_put_get_delete(kv):
    assert kv.get(b"k") is None
    kv.put(b"k", b"v")
    assert kv.get(b"k") == b"v"
    assert kv.has(b"k")
    kv.delete(b"k")
    assert not kv.has(b"k")
    kv.delete(b"k")  # absent: no error


def test_rejects_non_bytes(kv):
    with pytest.raises(TypeError):
        kv.put("k", b"v")  # type: ignore[arg-type]


def test_iter_prefix_is_ordered_and_bounded(kv):
    for k in (b"\x01b", b"\x01a", b"\x02a", b"\x01\xff"):
        kv.put(k, k)
    keys = [k for k, _ in kv.iter_prefix(b"\x01")]
    assert keys == [b"\x01a", b"\x01b", b"\x01\xff"]


def test_recovery_heights_follow_the_index_after_swap_removes(kv):
    b = RandomnessBuckets(kv)
    for h in (40, 10, 300, 20):
        b.recovery_add(h)
    b.put_seed(7, 10)  # other buckets must not leak into the scan
    b.set_pending(55)

    assert b.recovery_heights() == [10, 20, 40, 300]
    assert b.recovery_remove(40) is True
    assert b.recovery_remove(10) is True
    assert b.recovery_heights() == [20, 300]
    assert b.recovery_len() == 2
    b.recovery_add(5)
    assert b.recovery_heights() == [5, 20, 300]


def test_transaction_commits(kv):
    with kv.transaction():
        kv.put(b"a", b"1")
        kv.put(b"b", b"2")
    assert kv.get(b"a") == b"1"
    assert kv.get(b"b") == b"2"


def test_transaction_rolls_back_everything(kv):
    kv.put(b"keep", b"old")
    with pytest.raises(RuntimeError):
        with kv.transaction():
            kv.put(b"keep", b"new")
            kv.put(b"fresh", b"x")
            kv.delete(b"keep")
            raise RuntimeError("boom")
    assert kv.get(b"keep") == b"old"
    assert kv.get(b"fresh") is None


def test_nested_transactions_join_the_outer_one(kv):
    with pytest.raises(RuntimeError):
        with kv.transaction():
            with kv.transaction():
                kv.put(b"inner", b"1")
            kv.put(b"outer", b"2")
            raise RuntimeError("boom")
    assert kv.get(b"inner") is None
    assert kv.get(b"outer") is None


def test_open_store_uris(tmp_path):
    assert isinstance(open_store("memory://"), MemoryKeyValue)
    s = open_store(f"sqlite://{tmp_path / 'x.db'}")
    assert isinstance(s, SQLiteKeyValue)
    s.close()
    with pytest.raises(ValueError):
        open_store("sqlite://")
    with pytest.raises(ValueError):
        open_store("redis://localhost")
