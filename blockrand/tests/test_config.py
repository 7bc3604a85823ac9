import json

import pytest

from blockrand.config import ChainParams, EngineConfig


def test_defaults_validate():
    cfg = EngineConfig()
    cfg.validate()
    assert cfg.capture_window == 250
    assert cfg.lookup_window == 256
    assert cfg.storage_uri == "memory://"
    assert json.loads(cfg.to_json())["chain"]["block_time_s"] == 12


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(capture_window=0),
        dict(capture_window=300, lookup_window=256),
        dict(storage_uri="state.db"),
        dict(log_level="LOUD"),
        dict(chain=ChainParams(block_time_s=0)),
        dict(chain=ChainParams(chain_seed="")),
    ],
)
def test_invalid_configs(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs).validate()


def test_from_env(monkeypatch):
    monkeypatch.setenv("BLOCKRAND_CAPTURE_WINDOW", "100")
    monkeypatch.setenv("BLOCKRAND_STORAGE_URI", "sqlite:///tmp/blockrand.db")
    monkeypatch.setenv("BLOCKRAND_CHAIN_SEED", "testnet")
    cfg = EngineConfig.from_env()
    assert cfg.capture_window == 100
    assert cfg.lookup_window == 256
    assert cfg.storage_uri == "sqlite:///tmp/blockrand.db"
    assert cfg.chain.chain_seed == "testnet"


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("RAND_LOG_LEVEL", "DEBUG")
    assert EngineConfig.from_env(prefix="RAND_").log_level == "DEBUG"


def test_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("BLOCKRAND_LOOKUP_WINDOW", "lots")
    with pytest.raises(ValueError, match="BLOCKRAND_LOOKUP_WINDOW"):
        EngineConfig.from_env()


def test_from_yaml_file(tmp_path):
    p = tmp_path / "blockrand.yaml"
    p.write_text(
        "capture_window: 64\n"
        "lookup_window: 128\n"
        "chain:\n"
        "  block_time_s: 2\n"
        "  chain_seed: local\n",
        encoding="utf-8",
    )
    cfg = EngineConfig.from_file(str(p))
    assert cfg.capture_window == 64
    assert cfg.lookup_window == 128
    assert cfg.chain.block_time_s == 2
    assert cfg.chain.chain_seed == "local"
    assert cfg.chain.gas_limit == 30_000_000


def test_from_json_file(tmp_path):
    p = tmp_path / "blockrand.json"
    p.write_text(json.dumps({"storage_uri": "memory://", "log_level": "WARNING"}), encoding="utf-8")
    cfg = EngineConfig.from_file(str(p))
    assert cfg.log_level == "WARNING"


def test_from_file_rejects_unknown_keys(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("capture_windw: 10\nchain:\n  seed: x\n", encoding="utf-8")
    with pytest.raises(ValueError) as ei:
        EngineConfig.from_file(str(p))
    assert "capture_windw" in str(ei.value)
    assert "chain.seed" in str(ei.value)


def test_engine_from_config(tmp_path, registry):
    from blockrand.commit_reveal.engine import RandomEngine
    from blockrand.metrics import Metrics

    cfg = EngineConfig(storage_uri=f"sqlite://{tmp_path / 'e.db'}", capture_window=5, lookup_window=8)
    eng = RandomEngine.from_config(cfg, metrics=Metrics(registry=registry))
    assert eng.capture_window == 5
    assert eng.source.lookup_window == 8

    seed = eng.commit_seed("alice")
    eng.source.advance(6)
    eng.check_pending()
    assert eng.recovery_heights() == [1]
    assert eng.seed_height(seed) == 1
    eng.buckets.kv.close()
