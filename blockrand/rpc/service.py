"""
blockrand.rpc.service
---------------------

Wire-facing wrapper around `RandomEngine`: accepts and returns JSON-friendly
values (0x-hex seeds and hashes, plain ints) so the REST router and JSON-RPC
bindings share one set of handlers.

Engine errors are not translated here; transports decide how to surface them.
"""

from __future__ import annotations

from typing import Any, Dict

from ..commit_reveal.engine import RandomEngine
from ..utils.bytes import from_hex, seed_from_hex, seed_to_hex, to_hex
from ..version import __version__


class RandomnessService:
    def __init__(self, engine: RandomEngine) -> None:
        self.engine = engine

    # ---- Reads ---------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        out = self.engine.status().to_dict()
        out["version"] = __version__
        return out

    def get_recovery(self) -> Dict[str, Any]:
        heights = self.engine.recovery_heights()
        return {"length": len(heights), "heights": heights}

    def get_seed(self, seed_hex: str) -> Dict[str, Any]:
        seed = seed_from_hex(seed_hex)
        height = self.engine.seed_height(seed)
        block_hash = self.engine.captured_hash(height) if height else None
        return {
            "seed": seed_to_hex(seed),
            "height": height,
            "hash": to_hex(block_hash) if block_hash is not None else None,
        }

    # ---- Writes --------------------------------------------------------------

    def check_pending(self) -> Dict[str, Any]:
        out = self.engine.check_pending()
        return {"resolution": out.resolution.value, "height": out.height}

    def commit_seed(self, *, caller: str) -> Dict[str, Any]:
        seed = self.engine.commit_seed(caller)
        return {"seed": seed_to_hex(seed), "height": self.engine.seed_height(seed)}

    def reveal_from_seed(self, *, seed_hex: str, max_value: int) -> Dict[str, Any]:
        seed = seed_from_hex(seed_hex)
        number = self.engine.reveal_from_seed(seed, max_value)
        return {"seed": seed_to_hex(seed), "max_value": max_value, "number": number}

    def instant_number(self, *, caller: str, max_value: int) -> Dict[str, Any]:
        number = self.engine.instant_number(caller, max_value)
        return {"max_value": max_value, "number": number}

    def attest_block_hash(self, *, caller: str, height: int, hash_hex: str) -> Dict[str, Any]:
        outcome = self.engine.attest_block_hash(caller, height, from_hex(hash_hex))
        return {"height": height, "outcome": outcome.value}


__all__ = ["RandomnessService"]
