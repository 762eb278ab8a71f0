"""
Unit tests for engine configuration.

Tests cover:
1. Defaults and normalization
2. Validation errors
3. Environment and JSON file loading
4. Building engines from a config
"""

import json
from pathlib import Path

import pytest

from mmr.core.config import ENV_VARS, MMRConfig, load_config
from mmr.core.engine import EagerMMR, LazyMMR, create_mmr
from mmr.crypto import Keccak256Hasher, PoseidonHasher, Sha256Hasher


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Teardown restores every MMR_* variable, including ones python-dotenv sets.
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def no_dotenv(tmp_path):
    """An empty .env so python-dotenv does not pick up a stray file."""
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


class TestMMRConfig:
    """Tests for MMRConfig."""

    def test_defaults(self):
        config = MMRConfig()
        assert config.hasher == "sha256"
        assert config.variant == "eager"
        assert config.max_positions == 2**64
        assert config.log_level == "INFO"
        assert config.db_path is None

    def test_normalization(self):
        config = MMRConfig(hasher="KECCAK256", variant="Lazy", log_level="debug", db_path="x.db")
        assert config.hasher == "keccak256"
        assert config.variant == "lazy"
        assert config.log_level == "DEBUG"
        assert config.log_level_value == 10
        assert config.db_path == Path("x.db")

    @pytest.mark.parametrize("kwargs", [
        {"hasher": "md5"},
        {"variant": "greedy"},
        {"max_positions": 0},
        {"log_level": "LOUD"},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            MMRConfig(**kwargs)


class TestLoadConfig:
    """Tests for load_config."""

    def test_from_env(self, monkeypatch, no_dotenv):
        monkeypatch.setenv("MMR_HASHER", "poseidon")
        monkeypatch.setenv("MMR_VARIANT", "lazy")
        monkeypatch.setenv("MMR_MAX_POSITIONS", "1000")
        monkeypatch.setenv("MMR_LOG_TO_FILE", "yes")
        config = load_config(env_file=no_dotenv)
        assert config.hasher == "poseidon"
        assert config.variant == "lazy"
        assert config.max_positions == 1000
        assert config.log_to_file is True

    def test_from_dotenv_file(self, tmp_path):
        env_file = tmp_path / "mmr.env"
        env_file.write_text("MMR_VARIANT=lazy\nMMR_HASHER=keccak256\n")
        config = load_config(env_file=str(env_file))
        assert config.variant == "lazy"
        assert config.hasher == "keccak256"

    def test_json_overrides_env(self, tmp_path, monkeypatch, no_dotenv):
        monkeypatch.setenv("MMR_VARIANT", "lazy")
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"variant": "eager", "max_positions": 64}))
        config = load_config(config_path=str(path), env_file=no_dotenv)
        assert config.variant == "eager"
        assert config.max_positions == 64

    def test_unknown_json_key(self, tmp_path, no_dotenv):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"colour": "blue"}))
        with pytest.raises(ValueError):
            load_config(config_path=str(path), env_file=no_dotenv)

    def test_invalid_env_value(self, monkeypatch, no_dotenv):
        monkeypatch.setenv("MMR_HASHER", "blake3")
        with pytest.raises(ValueError):
            load_config(env_file=no_dotenv)


class TestCreateMMR:
    """Tests for building engines from a config."""

    def test_default(self):
        mmr = create_mmr()
        assert isinstance(mmr, EagerMMR)
        assert isinstance(mmr.hasher, Sha256Hasher)

    def test_variant_and_hasher(self):
        mmr = create_mmr(MMRConfig(variant="lazy", hasher="keccak256"))
        assert isinstance(mmr, LazyMMR)
        assert isinstance(mmr.hasher, Keccak256Hasher)

    def test_hasher_override(self):
        mmr = create_mmr(MMRConfig(hasher="keccak256"), hasher=PoseidonHasher())
        assert mmr.hasher.name == "poseidon"

    def test_max_positions(self):
        mmr = create_mmr(MMRConfig(max_positions=7))
        assert mmr.max_positions == 7

    def test_db_path(self, tmp_path):
        config = MMRConfig(db_path=tmp_path / "mmr.db")
        mmr = create_mmr(config)
        mmr.extend([b"a", b"b", b"c"])
        mmr.store.close()

        reloaded = create_mmr(config)
        assert reloaded.leaf_count == 3
        assert reloaded.stats()["persistent"] is True
        reloaded.store.close()
