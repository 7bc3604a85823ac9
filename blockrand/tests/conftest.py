import pytest
from prometheus_client import CollectorRegistry

from blockrand.access.roles import RoleRegistry
from blockrand.adapters.chain import SimulatedChain
from blockrand.adapters.events import MemoryEventSink
from blockrand.commit_reveal.engine import RandomEngine
from blockrand.metrics import Metrics
from blockrand.store.kv import RandomnessBuckets
from blockrand.store.memory import MemoryKeyValue

OWNER = "owner"
ATTESTER = "attester"


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> Metrics:
    return Metrics(registry=registry)


@pytest.fixture
def chain() -> SimulatedChain:
    # Most scenarios are phrased around a commit at height 100.
    return SimulatedChain(start_height=100)


@pytest.fixture
def sink() -> MemoryEventSink:
    return MemoryEventSink()


@pytest.fixture
def buckets() -> RandomnessBuckets:
    return RandomnessBuckets(MemoryKeyValue())


@pytest.fixture
def roles(buckets, sink, chain) -> RoleRegistry:
    r = RoleRegistry(buckets, sink=sink, chain=chain)
    r.init_owner(OWNER)
    r.add_attester(OWNER, ATTESTER)
    sink.clear()
    return r


@pytest.fixture
def engine(chain, buckets, roles, sink, metrics) -> RandomEngine:
    return RandomEngine(chain, buckets, roles, sink=sink, metrics=metrics)
