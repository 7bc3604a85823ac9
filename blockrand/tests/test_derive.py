import pytest

import blockrand.commit_reveal.derive as derive
from blockrand.commit_reveal.derive import (SeedInputs, derive_seed,
                                            instant_from_seed, next_counter,
                                            number_from_reveal)
from blockrand.errors import InvalidDivisor
from blockrand.utils.hash import dsha3_256

INPUTS = SeedInputs(beacon=0xBEEF, timestamp=1_700_000_000, gas_left=1_000_000)
HASH = bytes(range(32))


def test_seed_is_deterministic_and_input_sensitive():
    s = derive_seed(INPUTS, 0, "alice")
    assert s == derive_seed(INPUTS, 0, "alice")
    assert s != derive_seed(INPUTS, 1, "alice")
    assert s != derive_seed(INPUTS, 0, "bob")
    assert s != derive_seed(SeedInputs(beacon=0xBEF0, timestamp=INPUTS.timestamp, gas_left=INPUTS.gas_left), 0, "alice")
    assert 0 < s < 2**256


def test_zero_seed_becomes_one(monkeypatch):
    monkeypatch.setattr(derive, "dsha3_256_int", lambda *a: 0)
    assert derive_seed(INPUTS, 0, "alice") == 1


def test_counter_depends_on_seed():
    assert next_counter(INPUTS, 1) != next_counter(INPUTS, 2)


@pytest.mark.parametrize("max_value", [1, 2, 6, 10, 1_000, 2**256])
def test_reveal_number_in_range(max_value):
    for seed in (1, 2, 99, 2**255 + 7):
        n = number_from_reveal(seed, HASH, max_value)
        assert 1 <= n <= max_value
        assert n == number_from_reveal(seed, HASH, max_value)


def test_reveal_depends_on_hash():
    outs = {number_from_reveal(77, bytes([i]) * 32, 2**64) for i in range(1, 9)}
    assert len(outs) == 8


def test_instant_is_seed_mod_max_plus_one():
    assert instant_from_seed(10, 3) == 2
    assert instant_from_seed(9, 3) == 1
    assert instant_from_seed(5, 1) == 1


def test_zero_max_is_invalid_divisor():
    with pytest.raises(InvalidDivisor):
        number_from_reveal(1, HASH, 0)
    with pytest.raises(InvalidDivisor):
        instant_from_seed(1, 0)


def test_negative_or_non_int_max():
    with pytest.raises(ValueError):
        instant_from_seed(1, -3)
    with pytest.raises(TypeError):
        instant_from_seed(1, True)


def test_reveal_needs_32_byte_hash():
    with pytest.raises(ValueError):
        number_from_reveal(1, b"\x01" * 31, 10)


def test_hash_parts_are_typed():
    assert dsha3_256("seed.v1", 1) != dsha3_256("seed.v1", b"\x01")
    assert dsha3_256("seed.v1", 1) != dsha3_256("seed.v1", "1")
    assert dsha3_256("seed.v1", 1, b"") != dsha3_256("seed.v1", b"\x01")
    assert dsha3_256("seed.v1", bytearray(b"ab")) == dsha3_256("seed.v1", b"ab")


@pytest.mark.parametrize("part", [None, True, False, 1.5, [1]])
def test_hash_rejects_untyped_parts(part):
    with pytest.raises(TypeError):
        dsha3_256("seed.v1", part)


def test_hash_rejects_negative_ints():
    with pytest.raises(ValueError):
        dsha3_256("seed.v1", -1)
