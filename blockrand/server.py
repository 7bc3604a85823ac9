"""
blockrand.server
----------------

Standalone FastAPI application around a `RandomEngine`, for devnets and local
integration work.

    uvicorn blockrand.server:create_app --factory
    # or
    blockrand serve --owner alice --attester bob

With the default configuration the engine runs on a `SimulatedChain`; in that
case an extra `POST /sim/advance` endpoint moves the chain forward so clients
can walk through commit → capture → reveal by hand.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import APIRouter, FastAPI, Query

from .access.roles import RoleRegistry
from .adapters.chain import SimulatedChain
from .adapters.events import LoggingEventSink
from .commit_reveal.engine import RandomEngine
from .config import EngineConfig, configure_logging
from .rpc.mount import mount_randomness_rpc
from .version import __version__

logger = logging.getLogger(__name__)


def _sim_router(chain: SimulatedChain) -> APIRouter:
    r = APIRouter(prefix="/sim", tags=["simulation"])

    @r.post("/advance")
    async def advance(n: int = Query(1, ge=0, le=100_000)) -> dict:
        return {"height": chain.advance(n)}

    return r


def create_app(
    cfg: Optional[EngineConfig] = None,
    *,
    engine: Optional[RandomEngine] = None,
    owner: Optional[str] = None,
    attesters: Iterable[str] = (),
) -> FastAPI:
    """
    Build the application. Without an explicit `engine` one is created from
    `cfg` (or the environment); `owner` / `attesters` seed its role registry.
    """
    if engine is None:
        cfg = cfg or EngineConfig.from_env()
        engine = RandomEngine.from_config(cfg, sink=LoggingEventSink())

    if owner is not None:
        if not isinstance(engine.authorizer, RoleRegistry):
            raise ValueError("owner/attesters can only be seeded into a RoleRegistry authorizer")
        roles = engine.authorizer
        roles.init_owner(owner)
        for who in attesters:
            roles.add_attester(owner, who)

    app = FastAPI(title="blockrand", version=__version__)
    mount_randomness_rpc(app, engine=engine)
    if isinstance(engine.source, SimulatedChain):
        app.include_router(_sim_router(engine.source))
    return app


def main(
    host: str = "127.0.0.1",
    port: int = 8650,
    owner: Optional[str] = None,
    attesters: Iterable[str] = (),
) -> None:  # pragma: no cover - process entrypoint
    cfg = EngineConfig.from_env()
    configure_logging(cfg.log_level)
    app = create_app(cfg, owner=owner, attesters=attesters)

    # Lazy import so the module is importable without uvicorn installed
    import uvicorn

    logger.info("serving blockrand %s on %s:%d", __version__, host, port)
    uvicorn.run(app, host=host, port=port, log_level=cfg.log_level.lower())


__all__ = ["create_app", "main"]
