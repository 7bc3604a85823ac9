"""
blockrand configuration.

Typed configuration objects and helpers for:
- the automatic-capture window and the host's hash lookup window
- where durable state lives (in-memory or SQLite)
- metrics namespace and log level
- parameters of the simulated host used by the CLI and tests

Provides:
- Dataclass-based configs with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML file
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import yaml

from .constants import CAPTURE_WINDOW, LOOKUP_WINDOW

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


# -------------------------
# Sub-configs
# -------------------------


@dataclass
class ChainParams:
    """
    Parameters for `blockrand.adapters.chain.SimulatedChain`.

    genesis_time_unix: timestamp of height 1
    block_time_s: seconds between heights
    chain_seed: label every simulated block hash and beacon is derived from
    gas_limit: remaining-compute budget reported to callers
    """

    genesis_time_unix: int = 1_700_000_000
    block_time_s: int = 12
    chain_seed: str = "blockrand-devnet"
    gas_limit: int = 30_000_000

    def validate(self) -> None:
        if self.genesis_time_unix < 0:
            raise ValueError("genesis_time_unix must be >= 0")
        if self.block_time_s <= 0:
            raise ValueError("block_time_s must be > 0")
        if not self.chain_seed:
            raise ValueError("chain_seed must be non-empty")
        if self.gas_limit <= 0:
            raise ValueError("gas_limit must be > 0")


# -------------------------
# Top-level config
# -------------------------


@dataclass
class EngineConfig:
    """
    Windows:
      - capture_window: max age (in heights) of the pending height for automatic capture
      - lookup_window: how many recent heights the host can return a hash for

    Storage / observability:
      - storage_uri: ``memory://`` or ``sqlite:///path/to.db``
      - metrics_namespace: Prometheus namespace for `blockrand.metrics.Metrics`
      - log_level: root level applied by `configure_logging`

    chain: nested `ChainParams` for the simulated host
    """

    capture_window: int = CAPTURE_WINDOW
    lookup_window: int = LOOKUP_WINDOW
    storage_uri: str = "memory://"
    metrics_namespace: str = "blockrand"
    log_level: str = "INFO"

    chain: ChainParams = field(default_factory=ChainParams)

    def validate(self) -> None:
        if self.capture_window <= 0:
            raise ValueError("capture_window must be > 0")
        if self.lookup_window <= 0:
            raise ValueError("lookup_window must be > 0")
        if self.capture_window > self.lookup_window:
            raise ValueError(
                f"capture_window ({self.capture_window}) must not exceed "
                f"lookup_window ({self.lookup_window})"
            )
        if "://" not in self.storage_uri:
            raise ValueError("storage_uri must be a URI (memory:// or sqlite://...)")
        if not self.metrics_namespace:
            raise ValueError("metrics_namespace must be non-empty")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        self.chain.validate()

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "BLOCKRAND_") -> "EngineConfig":
        """
        Load configuration from environment variables. All variables are optional.

        Supported keys:
          - BLOCKRAND_CAPTURE_WINDOW=250
          - BLOCKRAND_LOOKUP_WINDOW=256
          - BLOCKRAND_STORAGE_URI=sqlite:///var/lib/blockrand/state.db
          - BLOCKRAND_METRICS_NAMESPACE=blockrand
          - BLOCKRAND_LOG_LEVEL=DEBUG

          - BLOCKRAND_CHAIN_GENESIS_TIME_UNIX=1700000000
          - BLOCKRAND_CHAIN_BLOCK_TIME_S=12
          - BLOCKRAND_CHAIN_SEED=blockrand-devnet
          - BLOCKRAND_CHAIN_GAS_LIMIT=30000000
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                return cast(raw)
            except Exception as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e

        cfg = EngineConfig(
            capture_window=_get("CAPTURE_WINDOW", int, CAPTURE_WINDOW),
            lookup_window=_get("LOOKUP_WINDOW", int, LOOKUP_WINDOW),
            storage_uri=_get("STORAGE_URI", str, "memory://"),
            metrics_namespace=_get("METRICS_NAMESPACE", str, "blockrand"),
            log_level=_get("LOG_LEVEL", str, "INFO"),
            chain=ChainParams(
                genesis_time_unix=_get("CHAIN_GENESIS_TIME_UNIX", int, 1_700_000_000),
                block_time_s=_get("CHAIN_BLOCK_TIME_S", int, 12),
                chain_seed=_get("CHAIN_SEED", str, "blockrand-devnet"),
                gas_limit=_get("CHAIN_GAS_LIMIT", int, 30_000_000),
            ),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "EngineConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        structure. Example (YAML):

            capture_window: 250
            lookup_window: 256
            storage_uri: "sqlite:///var/lib/blockrand/state.db"
            chain:
              block_time_s: 2
              chain_seed: "local"
        """
        with open(path, "r", encoding="utf-8") as f:
            data = _parse_json_or_yaml(f.read(), path)

        chain_d = dict(data.pop("chain", None) or {})
        cfg = EngineConfig(
            capture_window=int(data.pop("capture_window", CAPTURE_WINDOW)),
            lookup_window=int(data.pop("lookup_window", LOOKUP_WINDOW)),
            storage_uri=str(data.pop("storage_uri", "memory://")),
            metrics_namespace=str(data.pop("metrics_namespace", "blockrand")),
            log_level=str(data.pop("log_level", "INFO")),
            chain=ChainParams(
                genesis_time_unix=int(chain_d.pop("genesis_time_unix", 1_700_000_000)),
                block_time_s=int(chain_d.pop("block_time_s", 12)),
                chain_seed=str(chain_d.pop("chain_seed", "blockrand-devnet")),
                gas_limit=int(chain_d.pop("gas_limit", 30_000_000)),
            ),
        )
        unknown = sorted(list(data) + [f"chain.{k}" for k in chain_d])
        if unknown:
            raise ValueError(f"unknown config keys in {path!r}: {', '.join(unknown)}")
        cfg.validate()
        return cfg


# -------------------------
# Utilities
# -------------------------


def _parse_json_or_yaml(text: str, path_hint: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse {path_hint!r} as JSON or YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"{path_hint!r} must contain a mapping at the top level")
    return data


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic stderr handler for CLI/server entry points."""
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


DEFAULT: EngineConfig = EngineConfig()


__all__ = [
    "ChainParams",
    "EngineConfig",
    "configure_logging",
    "DEFAULT",
]
