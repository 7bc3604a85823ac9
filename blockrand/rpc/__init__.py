"""
blockrand.rpc
-------------

HTTP / JSON-RPC surface for the engine.

    from fastapi import FastAPI
    from blockrand.rpc import mount_randomness_rpc

    app = FastAPI()
    mount_randomness_rpc(app, engine=engine)

`blockrand.rpc.mount` pulls in FastAPI; import it only where it is installed.
"""

from __future__ import annotations

from .mount import bind_jsonrpc, get_router, mount_randomness_rpc
from .service import RandomnessService

__all__ = ["mount_randomness_rpc", "get_router", "bind_jsonrpc", "RandomnessService"]
