import pytest

from blockrand.access.roles import RoleRegistry
from blockrand.errors import PermissionDenied
from blockrand.store.kv import RandomnessBuckets
from blockrand.store.memory import MemoryKeyValue
from blockrand.types.core import Role


@pytest.fixture
def reg(sink, chain):
    r = RoleRegistry(RandomnessBuckets(MemoryKeyValue()), sink=sink, chain=chain)
    r.init_owner("owner")
    return r


def test_init_owner_only_once(reg, sink):
    assert reg.owner() == "owner"
    assert reg.init_owner("someone") is False
    assert reg.owner() == "owner"
    (ev,) = sink.of("OwnershipTransferred")
    assert ev.args == {"previous": "", "new": "owner"}
    assert ev.height == 100


def test_transfer_ownership(reg, sink):
    reg.transfer_ownership("owner", "carol")
    assert reg.owner() == "carol"
    assert reg.is_authorized("carol", Role.OWNER)
    assert not reg.is_authorized("owner", Role.OWNER)
    assert sink.of("OwnershipTransferred")[-1].args == {"previous": "owner", "new": "carol"}

    with pytest.raises(PermissionDenied):
        reg.transfer_ownership("owner", "dave")


def test_transfer_to_null_identity_is_rejected(reg):
    with pytest.raises(ValueError):
        reg.transfer_ownership("owner", "")
    assert reg.owner() == "owner"


def test_renounce_leaves_no_owner(reg):
    reg.renounce_ownership("owner")
    assert reg.owner() is None
    assert not reg.is_authorized("owner", Role.OWNER)
    with pytest.raises(PermissionDenied):
        reg.add_attester("owner", "bob")
    # Renounced registries cannot be re-initialized.
    assert reg.init_owner("owner") is False


def test_attester_management(reg, sink):
    assert reg.add_attester("owner", "bob") is True
    assert reg.add_attester("owner", "bob") is False
    assert reg.is_attester("bob")
    assert reg.is_authorized("bob", Role.ATTESTER)
    assert not reg.is_authorized("owner", Role.ATTESTER)

    assert reg.remove_attester("owner", "bob") is True
    assert reg.remove_attester("owner", "bob") is False
    assert not reg.is_attester("bob")
    assert sink.names() == ["OwnershipTransferred", "AttesterAdded", "AttesterRemoved"]


def test_only_owner_manages_attesters(reg):
    with pytest.raises(PermissionDenied) as ei:
        reg.add_attester("mallory", "mallory")
    assert ei.value.role == "owner"
    reg.add_attester("owner", "bob")
    with pytest.raises(PermissionDenied):
        reg.remove_attester("bob", "bob")


def test_null_identity_is_never_authorized(reg):
    assert not reg.is_authorized("", Role.OWNER)
    assert not reg.is_authorized("", Role.ATTESTER)
