"""
blockrand adapters package.

Integration shims that connect the engine to its surroundings:
  - chain:  the `HashSource` protocol the engine reads the host ledger through,
            plus `SimulatedChain`, a deterministic in-process host.
  - events: event names, sinks and the per-call `EventBuffer`.

Nothing is imported here; pick the adapter you need.
"""

__all__: list[str] = []
