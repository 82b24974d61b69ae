"""Configuration management for bundlectl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from bundlectl.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "bundlectl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_GATEWAY_URL = "https://arweave.net"
DEFAULT_BUNDLER_URL = "https://node1.bundlr.network"
DEFAULT_APP_NAME = "bundlectl"
DEFAULT_TIMEOUT = 20

# Batches stay well below the aggregate transaction size limit (~250MB) to
# leave room for envelope overhead and to keep memory use bounded.
DEFAULT_BATCH_SIZE_LIMIT = 50 * 1024 * 1024

STRATEGY_BUNDLE = "bundle"
STRATEGY_PER_UNIT = "per-unit"
STRATEGIES = (STRATEGY_BUNDLE, STRATEGY_PER_UNIT)

# Environment variable names
ENV_PROFILE = "BUNDLECTL_PROFILE"
ENV_GATEWAY_URL = "BUNDLECTL_GATEWAY_URL"
ENV_BUNDLER_URL = "BUNDLECTL_BUNDLER_URL"
ENV_STRATEGY = "BUNDLECTL_STRATEGY"
ENV_JWK = "BUNDLECTL_JWK"
ENV_KEYPAIR = "BUNDLECTL_KEYPAIR"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for a storage network endpoint."""

    gateway_url: str = DEFAULT_GATEWAY_URL
    bundler_url: str = DEFAULT_BUNDLER_URL
    strategy: str = STRATEGY_BUNDLE
    batch_size_limit: int = DEFAULT_BATCH_SIZE_LIMIT
    app_name: str = DEFAULT_APP_NAME
    timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    jwk_path: Optional[str] = None
    keypair_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(
                f"Unknown upload strategy: {self.strategy}",
                field="strategy",
                value=self.strategy,
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "gateway_url": self.gateway_url,
            "bundler_url": self.bundler_url,
            "strategy": self.strategy,
            "batch_size_limit": self.batch_size_limit,
            "app_name": self.app_name,
            "timeout": self.timeout,
            "verify_ssl": self.verify_ssl,
            "jwk_path": self.jwk_path,
            "keypair_path": self.keypair_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            gateway_url=data.get("gateway_url", DEFAULT_GATEWAY_URL),
            bundler_url=data.get("bundler_url", DEFAULT_BUNDLER_URL),
            strategy=data.get("strategy", STRATEGY_BUNDLE),
            batch_size_limit=int(data.get("batch_size_limit", DEFAULT_BATCH_SIZE_LIMIT)),
            app_name=data.get("app_name", DEFAULT_APP_NAME),
            timeout=int(data.get("timeout", DEFAULT_TIMEOUT)),
            verify_ssl=data.get("verify_ssl", True),
            jwk_path=data.get("jwk_path"),
            keypair_path=data.get("keypair_path"),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")

                for name, pdata in data.get("profiles", {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except ConfigurationError:
                raise
            except Exception as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        # Environment overrides apply to the active profile, creating it if needed
        overrides = {
            "gateway_url": os.getenv(ENV_GATEWAY_URL),
            "bundler_url": os.getenv(ENV_BUNDLER_URL),
            "strategy": os.getenv(ENV_STRATEGY),
            "jwk_path": os.getenv(ENV_JWK),
            "keypair_path": os.getenv(ENV_KEYPAIR),
        }
        overrides = {k: v for k, v in overrides.items() if v}
        if overrides:
            active = config.profiles.get(config.default_profile, Profile())
            merged = {**active.to_dict(), **overrides}
            config.profiles[config.default_profile] = Profile.from_dict(merged)

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        A missing default profile falls back to built-in defaults so the
        tool works without a config file.

        Args:
            name: Profile name. If None, uses default_profile.

        Returns:
            Profile configuration.

        Raises:
            ProfileNotFoundError: If an explicitly named profile doesn't exist.
        """
        if name is None:
            return self.profiles.get(self.default_profile, Profile())
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(self, name: str, profile: Profile) -> Profile:
        """Add or update a profile."""
        self.profiles[name] = profile
        return profile
