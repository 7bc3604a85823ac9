"""
Debug facade: forwards to a `RandomEngine` and echoes every generated value
as an event, for integration tests and local tooling.

    dbg = DebugRandom(engine, sink=MemoryEventSink())
    seed = dbg.commit_seed("alice")      # emits SeedGenerated
    n = dbg.reveal_from_seed(seed, 6)    # emits NumberGenerated

Errors from the engine propagate unchanged and emit nothing.
"""

from __future__ import annotations

from typing import Optional

from .adapters.events import (EV_NUMBER_GENERATED, EV_SEED_GENERATED,
                              EventBuffer, EventSink, NullEventSink)
from .commit_reveal.engine import RandomEngine
from .utils.bytes import seed_to_hex


class DebugRandom:
    def __init__(self, engine: RandomEngine, *, sink: Optional[EventSink] = None) -> None:
        self.engine = engine
        self.sink: EventSink = sink if sink is not None else NullEventSink()

    def _emit(self, name: str, **args) -> None:
        buf = EventBuffer(self.engine.source.current_height())
        buf.add(name, **args)
        buf.flush(self.sink)

    def commit_seed(self, caller: str) -> int:
        seed = self.engine.commit_seed(caller)
        self._emit(EV_SEED_GENERATED, seed=seed_to_hex(seed), caller=caller)
        return seed

    def reveal_from_seed(self, seed: int, max_value: int) -> int:
        number = self.engine.reveal_from_seed(seed, max_value)
        self._emit(EV_NUMBER_GENERATED, number=number, seed=seed_to_hex(seed), max=max_value)
        return number

    def instant_number(self, caller: str, max_value: int) -> int:
        number = self.engine.instant_number(caller, max_value)
        self._emit(EV_NUMBER_GENERATED, number=number, caller=caller, max=max_value)
        return number


__all__ = ["DebugRandom"]
