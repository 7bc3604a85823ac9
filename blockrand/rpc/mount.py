"""
blockrand.rpc.mount
-------------------

Mount the engine's HTTP surface (and, optionally, JSON-RPC methods) on a
FastAPI application.

REST (prefix `/rand` by default):
    GET  /status          → height, pending slot, recovery queue, version
    GET  /recovery        → heights awaiting attestation
    GET  /seed/{seed}     → bound height and captured hash of a seed
    POST /commit          → commit a seed for `caller`
    POST /reveal          → reveal a committed seed into [1, max_value]
    POST /instant         → single-call number in [1, max_value]
    POST /check_pending   → resolve the pending slot
    POST /attest          → attester-only hash for a queued height

JSON-RPC (if a registry is provided):
    rand.getStatus, rand.getRecovery, rand.getSeed, rand.checkPending,
    rand.commitSeed, rand.revealFromSeed, rand.instantNumber,
    rand.attestBlockHash

Handlers are async and call the engine directly on the event loop, so calls
from concurrent clients are executed one at a time.

Error mapping:
    PermissionDenied                        → 403
    UnknownSeed                             → 404
    HashNotReady, AlreadySet, DuplicateSeed → 409
    InvalidDivisor, ValueError, TypeError   → 400
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from ..commit_reveal.engine import RandomEngine
from ..errors import (AlreadySet, BlockRandError, DuplicateSeed, HashNotReady,
                      InvalidDivisor, PermissionDenied, UnknownSeed)
from ..utils.bytes import from_hex, is_hex
from .service import RandomnessService

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    PermissionDenied: 403,
    UnknownSeed: 404,
    HashNotReady: 409,
    AlreadySet: 409,
    DuplicateSeed: 409,
    InvalidDivisor: 400,
}


def _http_error(exc: Exception) -> HTTPException:
    code = _STATUS_CODES.get(type(exc), 400)
    return HTTPException(status_code=code, detail={"error": type(exc).__name__, "message": str(exc)})


def _call(fn: Callable[..., Dict[str, Any]], **kwargs: Any) -> Dict[str, Any]:
    try:
        return fn(**kwargs)
    except (BlockRandError, ValueError, TypeError) as e:
        logger.debug("rand RPC %s rejected: %s", fn.__name__, e)
        raise _http_error(e) from e


# --------------------------------------------------------------------------------------
# Request models
# --------------------------------------------------------------------------------------

def _hex_field(v: str) -> str:
    if not is_hex(v):
        raise ValueError("expected 0x-prefixed hex")
    return v


class CommitReq(BaseModel):
    caller: str = Field(..., min_length=1, description="Caller identity (address string)")


class RevealReq(BaseModel):
    seed: str = Field(..., description="0x-prefixed 32-byte seed")
    max_value: int = Field(..., ge=0, description="Upper bound of the number range (>= 1)")

    @field_validator("seed")
    @classmethod
    def _seed_hex(cls, v: str) -> str:
        return _hex_field(v)


class InstantReq(BaseModel):
    caller: str = Field(..., min_length=1)
    max_value: int = Field(..., ge=0)


class AttestReq(BaseModel):
    caller: str = Field(..., min_length=1, description="Attester identity")
    height: int = Field(..., ge=1)
    hash: str = Field(..., description="0x-prefixed 32-byte block hash")

    @field_validator("hash")
    @classmethod
    def _hash_hex(cls, v: str) -> str:
        if len(from_hex(_hex_field(v))) != 32:
            raise ValueError("hash must be 32 bytes")
        return v


# --------------------------------------------------------------------------------------
# REST router
# --------------------------------------------------------------------------------------

def get_router(service: RandomnessService, *, prefix: str = "/rand") -> APIRouter:
    r = APIRouter(prefix=prefix, tags=["randomness"])

    @r.get("/status")
    async def status() -> dict:
        return service.get_status()

    @r.get("/recovery")
    async def recovery() -> dict:
        return service.get_recovery()

    @r.get("/seed/{seed}")
    async def seed_info(seed: str) -> dict:
        info = _call(service.get_seed, seed_hex=seed)
        if info["height"] == 0:
            raise HTTPException(status_code=404, detail="seed not found")
        return info

    @r.post("/check_pending")
    async def check_pending() -> dict:
        return _call(service.check_pending)

    @r.post("/commit")
    async def post_commit(req: CommitReq) -> dict:
        return _call(service.commit_seed, caller=req.caller)

    @r.post("/reveal")
    async def post_reveal(req: RevealReq) -> dict:
        return _call(service.reveal_from_seed, seed_hex=req.seed, max_value=req.max_value)

    @r.post("/instant")
    async def post_instant(req: InstantReq) -> dict:
        return _call(service.instant_number, caller=req.caller, max_value=req.max_value)

    @r.post("/attest")
    async def post_attest(req: AttestReq) -> dict:
        return _call(service.attest_block_hash, caller=req.caller, height=req.height, hash_hex=req.hash)

    return r


# --------------------------------------------------------------------------------------
# JSON-RPC registration helpers
# --------------------------------------------------------------------------------------

def _rpc_register(registry: Any, name: str, fn: Any) -> None:
    """Register via `.add_method(name, fn)`, `.add(name, fn)` or `.register(name, fn)`."""
    for attr in ("add_method", "add", "register"):
        if hasattr(registry, attr):
            getattr(registry, attr)(name, fn)
            return
    raise TypeError("Unsupported JSON-RPC registry; expected add_method/add/register")


def bind_jsonrpc(service: RandomnessService, rpc_registry: Any) -> None:
    """
    Register `rand.*` methods. Engine errors propagate to the dispatcher
    unchanged.
    """
    async def _get_status(**_params: Any) -> dict:
        return service.get_status()

    async def _get_recovery(**_params: Any) -> dict:
        return service.get_recovery()

    async def _get_seed(seed: str, **_params: Any) -> dict:
        return service.get_seed(seed)

    async def _check_pending(**_params: Any) -> dict:
        return service.check_pending()

    async def _commit_seed(caller: str, **_params: Any) -> dict:
        return service.commit_seed(caller=caller)

    async def _reveal_from_seed(seed: str, max_value: int, **_params: Any) -> dict:
        return service.reveal_from_seed(seed_hex=seed, max_value=max_value)

    async def _instant_number(caller: str, max_value: int, **_params: Any) -> dict:
        return service.instant_number(caller=caller, max_value=max_value)

    async def _attest_block_hash(caller: str, height: int, hash: str, **_params: Any) -> dict:
        return service.attest_block_hash(caller=caller, height=height, hash_hex=hash)

    _rpc_register(rpc_registry, "rand.getStatus", _get_status)
    _rpc_register(rpc_registry, "rand.getRecovery", _get_recovery)
    _rpc_register(rpc_registry, "rand.getSeed", _get_seed)
    _rpc_register(rpc_registry, "rand.checkPending", _check_pending)
    _rpc_register(rpc_registry, "rand.commitSeed", _commit_seed)
    _rpc_register(rpc_registry, "rand.revealFromSeed", _reveal_from_seed)
    _rpc_register(rpc_registry, "rand.instantNumber", _instant_number)
    _rpc_register(rpc_registry, "rand.attestBlockHash", _attest_block_hash)


# --------------------------------------------------------------------------------------
# Mount helper
# --------------------------------------------------------------------------------------

def mount_randomness_rpc(
    app: FastAPI,
    *,
    engine: RandomEngine,
    rpc_registry: Optional[Any] = None,
    rest_prefix: str = "/rand",
) -> RandomnessService:
    """
    Mount the REST router (and optional JSON-RPC methods) for `engine` on `app`.

    Returns the `RandomnessService` the handlers share.
    """
    service = RandomnessService(engine)
    app.include_router(get_router(service, prefix=rest_prefix))
    if rpc_registry is not None:
        bind_jsonrpc(service, rpc_registry)
    logger.info("randomness RPC mounted at %s", rest_prefix)
    return service


__all__ = ["mount_randomness_rpc", "get_router", "bind_jsonrpc", "CommitReq", "RevealReq", "InstantReq", "AttestReq"]
