"""Tests for bundlectl.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from bundlectl.core.config import (
    DEFAULT_BATCH_SIZE_LIMIT,
    DEFAULT_GATEWAY_URL,
    STRATEGY_BUNDLE,
    Config,
    Profile,
)
from bundlectl.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# Profile Tests
# =============================================================================


class TestProfile:
    """Tests for Profile dataclass."""

    def test_default_values(self):
        profile = Profile()
        assert profile.gateway_url == DEFAULT_GATEWAY_URL
        assert profile.strategy == STRATEGY_BUNDLE
        assert profile.batch_size_limit == DEFAULT_BATCH_SIZE_LIMIT
        assert profile.jwk_path is None
        assert profile.keypair_path is None

    def test_unknown_strategy(self):
        with pytest.raises(ConfigurationError):
            Profile(strategy="carrier-pigeon")

    def test_dict_round_trip(self):
        profile = Profile(strategy="per-unit", keypair_path="/keys/id.json", timeout=5)
        assert Profile.from_dict(profile.to_dict()) == profile


# =============================================================================
# Config Tests
# =============================================================================


class TestConfig:
    """Tests for Config loading and saving."""

    def test_load_missing_file_uses_defaults(self, temp_dir: Path):
        config = Config.load(temp_dir / "missing.yaml")

        assert config.profiles == {}
        assert config.get_profile() == Profile()

    def test_load_yaml(self, temp_dir: Path, sample_config_yaml: str):
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)

        config = Config.load(path)

        assert config.default_profile == "test"
        profile = config.get_profile()
        assert profile.strategy == "per-unit"
        assert profile.batch_size_limit == 1048576
        assert profile.app_name == "Test App"
        assert profile.keypair_path == "/keys/id.json"
        assert config.get_profile("production").jwk_path == "/keys/wallet.json"

    def test_missing_named_profile(self, temp_dir: Path):
        with pytest.raises(ProfileNotFoundError):
            Config.load(temp_dir / "missing.yaml").get_profile("staging")

    def test_invalid_yaml(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("profiles: [unclosed")

        with pytest.raises(ConfigurationError):
            Config.load(path)

    def test_env_overrides_active_profile(
        self, temp_dir: Path, sample_config_yaml: str, monkeypatch: pytest.MonkeyPatch
    ):
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)
        monkeypatch.setenv("BUNDLECTL_PROFILE", "production")
        monkeypatch.setenv("BUNDLECTL_GATEWAY_URL", "https://env-gateway.test")

        profile = Config.load(path).get_profile()

        assert profile.gateway_url == "https://env-gateway.test"
        assert profile.jwk_path == "/keys/wallet.json"

    def test_env_creates_default_profile(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BUNDLECTL_STRATEGY", "per-unit")
        monkeypatch.setenv("BUNDLECTL_KEYPAIR", "/env/id.json")

        profile = Config.load(temp_dir / "missing.yaml").get_profile()

        assert profile.strategy == "per-unit"
        assert profile.keypair_path == "/env/id.json"

    def test_save_and_reload(self, temp_dir: Path):
        path = temp_dir / "nested" / "config.yaml"
        config = Config(default_profile="main")
        config.add_profile("main", Profile(app_name="Saved", jwk_path="/w.json"))

        config.save(path)
        loaded = Config.load(path)

        assert loaded.default_profile == "main"
        assert loaded.has_profile("main")
        assert loaded.get_profile().app_name == "Saved"
