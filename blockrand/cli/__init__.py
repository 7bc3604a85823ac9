"""
blockrand.cli
-------------

Small convenience CLI for the blockrand REST surface.

Commands (remote, over HTTP):
  - status         : Current height, pending slot and recovery queue.
  - recovery       : Heights awaiting attestation.
  - commit         : Commit a seed for --caller.
  - reveal         : Reveal a committed seed into [1, --max].
  - instant        : Single-call number in [1, --max].
  - check-pending  : Resolve the pending slot.
  - attest         : Supply a block hash for a queued height (attester only).
  - advance        : Move a simulated server chain forward.

Local:
  - simulate       : Commit, advance and reveal against an in-process SimulatedChain.
  - serve          : Run the HTTP server (requires uvicorn).

Environment:
  BLOCKRAND_URL may be set to override the default endpoint.

Example:
  python -m blockrand.cli status
  python -m blockrand.cli commit --caller alice
  python -m blockrand.cli reveal --seed 0x… --max 6
  python -m blockrand.cli simulate --advance 300 --attest
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

import requests
import typer

__all__ = ["app", "main"]

_DEFAULT_URL = os.getenv("BLOCKRAND_URL") or "http://127.0.0.1:8650"


def _rest_call(
    url: str,
    path: str,
    payload: Optional[Dict[str, Any]] = None,
    *,
    method: str = "POST",
    params: Optional[Dict[str, Any]] = None,
    timeout: float = 10.0,
) -> Dict[str, Any]:
    """
    Minimal REST helper; exits with a readable message on transport or API errors.
    """
    endpoint = url.rstrip("/") + path
    try:
        if method == "GET":
            r = requests.get(endpoint, params=params, timeout=timeout)
        else:
            r = requests.post(endpoint, json=payload or {}, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise SystemExit(f"HTTP {method} {endpoint} failed: {e}")
    try:
        data = r.json()
    except ValueError:
        raise SystemExit(f"response not JSON (HTTP {r.status_code}): {r.text}")
    if r.status_code != 200:
        detail = data.get("detail", data) if isinstance(data, dict) else data
        raise SystemExit(f"API error HTTP {r.status_code}: {json.dumps(detail, indent=2)}")
    return data


def _echo(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2))


app = typer.Typer(
    name="blockrand",
    help="blockrand commit→reveal random numbers with block-hash recovery.",
    no_args_is_help=True,
    add_completion=False,
)


def _opt_url() -> str:
    return typer.Option(_DEFAULT_URL, "--url", help=f"Server base URL (default: {_DEFAULT_URL})")  # type: ignore[return-value]


@app.command("status")
def cmd_status(url: str = _opt_url()) -> None:
    """Show height, pending slot and recovery queue."""
    _echo(_rest_call(url, "/rand/status", method="GET"))


@app.command("recovery")
def cmd_recovery(url: str = _opt_url()) -> None:
    """List heights whose block hash must be attested."""
    _echo(_rest_call(url, "/rand/recovery", method="GET"))


@app.command("commit")
def cmd_commit(
    caller: str = typer.Option(..., "--caller", "-c", help="Caller identity (address string)."),
    url: str = _opt_url(),
) -> None:
    """
    Commit a seed bound to the server's current height.

    Keep the returned seed; reveal it once a later height has been reached.
    """
    _echo(_rest_call(url, "/rand/commit", {"caller": caller}))


@app.command("reveal")
def cmd_reveal(
    seed: str = typer.Option(..., "--seed", "-s", help="0x-hex seed returned by commit."),
    max_value: int = typer.Option(..., "--max", "-m", min=0, help="Upper bound of the range [1, max]."),
    url: str = _opt_url(),
) -> None:
    """Reveal a committed seed."""
    _echo(_rest_call(url, "/rand/reveal", {"seed": seed, "max_value": max_value}))


@app.command("instant")
def cmd_instant(
    caller: str = typer.Option(..., "--caller", "-c", help="Caller identity."),
    max_value: int = typer.Option(..., "--max", "-m", min=0, help="Upper bound of the range [1, max]."),
    url: str = _opt_url(),
) -> None:
    """Single-call number (predictable by anyone watching the host; low stakes only)."""
    _echo(_rest_call(url, "/rand/instant", {"caller": caller, "max_value": max_value}))


@app.command("check-pending")
def cmd_check_pending(url: str = _opt_url()) -> None:
    """Capture the pending height's hash, or move it to the recovery queue."""
    _echo(_rest_call(url, "/rand/check_pending"))


@app.command("attest")
def cmd_attest(
    caller: str = typer.Option(..., "--caller", "-c", help="Attester identity."),
    height: int = typer.Option(..., "--height", "-H", min=1, help="Queued height."),
    block_hash: str = typer.Option(..., "--hash", help="0x-hex 32-byte block hash."),
    url: str = _opt_url(),
) -> None:
    """Supply the block hash of a height in the recovery queue."""
    _echo(_rest_call(url, "/rand/attest", {"caller": caller, "height": height, "hash": block_hash}))


@app.command("advance")
def cmd_advance(
    n: int = typer.Option(1, "--count", "-n", min=0, help="Heights to advance."),
    url: str = _opt_url(),
) -> None:
    """Advance a server running on a simulated chain."""
    _echo(_rest_call(url, "/sim/advance", params={"n": n}))


@app.command("simulate")
def cmd_simulate(
    advance: int = typer.Option(1, "--advance", "-a", min=1, help="Heights between commit and reveal."),
    max_value: int = typer.Option(100, "--max", "-m", min=1, help="Upper bound of the range [1, max]."),
    caller: str = typer.Option("alice", "--caller", "-c", help="Committer identity."),
    attest: bool = typer.Option(False, "--attest", help="Attest the hash if the height expired."),
    chain_seed: str = typer.Option("blockrand-devnet", "--chain-seed", help="Simulated chain label."),
) -> None:
    """
    Walk commit → advance → reveal on an in-process simulated chain and print
    every step as JSON.
    """
    from ..simulate import run_simulation

    _echo(
        run_simulation(
            advance=advance,
            max_value=max_value,
            caller=caller,
            attest=attest,
            chain_seed=chain_seed,
        )
    )


@app.command("serve")
def cmd_serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8650, "--port", "-p"),
    owner: Optional[str] = typer.Option(None, "--owner", help="Initial owner identity."),
    attester: Optional[List[str]] = typer.Option(None, "--attester", help="Attester identity (repeatable)."),
) -> None:
    """Run the HTTP server (configuration from BLOCKRAND_* environment variables)."""
    from ..server import main as serve_main

    serve_main(host=host, port=port, owner=owner, attesters=attester or ())


def main(argv: Optional[Sequence[str]] = None) -> None:  # pragma: no cover - thin wrapper
    """Entry-point for the `blockrand` console script and `python -m blockrand.cli`."""
    try:
        app(args=list(argv) if argv is not None else None, prog_name="blockrand")
    except KeyboardInterrupt:
        typer.echo("", err=True)
        sys.exit(130)


if __name__ == "__main__":  # pragma: no cover
    main()
