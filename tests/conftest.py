"""Pytest configuration and fixtures for bundlectl tests."""

from __future__ import annotations

import hashlib
import json
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Generator

import pytest

from bundlectl.core.exceptions import NetworkError
from bundlectl.core.signing import SignedUnit, Tag, b64url_encode, encode_tags


class FakeSigner:
    """Deterministic in-memory signer."""

    signature_type = 99

    def __init__(self) -> None:
        self.signed: list[SignedUnit] = []

    @property
    def owner(self) -> bytes:
        return b"fake-owner"

    @property
    def address(self) -> str:
        return b64url_encode(hashlib.sha256(self.owner).digest())

    def sign(self, data: bytes, tags: Sequence[Tag]) -> SignedUnit:
        tags = tuple(tags)
        signature = hashlib.sha256(b"sig" + encode_tags(tags) + data).digest()
        unit = SignedUnit(
            data=data,
            tags=tags,
            owner=self.owner,
            signature=signature,
            signature_type=self.signature_type,
        )
        self.signed.append(unit)
        return unit


class FakeNetwork:
    """In-memory storage network recording every call."""

    def __init__(
        self,
        *,
        balance: int = 0,
        price_per_byte: int = 1,
        fail_on_unit: int | None = None,
        fail_aggregate: bool = False,
    ) -> None:
        self.balance = balance
        self.price_per_byte = price_per_byte
        self.fail_on_unit = fail_on_unit
        self.fail_aggregate = fail_aggregate
        self.aggregates: list[SignedUnit] = []
        self.units: list[SignedUnit] = []
        self.funded: list[tuple[int, str]] = []
        self.estimates: list[int] = []

    def post_aggregate_transaction(self, aggregate: SignedUnit) -> str:
        if self.fail_aggregate:
            raise NetworkError("https://gateway.test", "HTTP 503")
        self.aggregates.append(aggregate)
        return aggregate.id

    def estimate_cost(self, byte_count: int) -> int:
        self.estimates.append(byte_count)
        return byte_count * self.price_per_byte

    def get_balance(self, address: str) -> int:
        return self.balance

    def fund(self, amount: int, address: str) -> str:
        self.funded.append((amount, address))
        self.balance += amount
        return f"fund-{len(self.funded)}"

    def post_unit_transaction(self, unit: SignedUnit) -> str:
        if self.fail_on_unit is not None and len(self.units) == self.fail_on_unit:
            raise NetworkError("https://bundler.test", "HTTP 503")
        self.units.append(unit)
        return unit.id


AssetFactory = Callable[..., Path]


def write_asset(
    directory: Path,
    index: str,
    payload_size: int = 16,
    *,
    ext: str = ".png",
    metadata: dict | None = None,
) -> None:
    """Write one payload/metadata pair."""
    (directory / f"{index}{ext}").write_bytes((index.encode() + b"x" * payload_size)[:payload_size])
    doc = metadata or {
        "name": f"Asset #{index}",
        "symbol": "AST",
        "image": f"{index}{ext}",
        "attributes": [{"trait_type": "index", "value": index}],
        "properties": {
            "files": [{"type": "image/png", "uri": f"{index}{ext}"}],
            "category": "image",
        },
    }
    (directory / f"{index}.json").write_text(json.dumps(doc))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def assets_dir(temp_dir: Path) -> Path:
    """Empty assets directory inside the temp dir."""
    path = temp_dir / "assets"
    path.mkdir()
    return path


@pytest.fixture
def make_assets(assets_dir: Path) -> AssetFactory:
    """Factory writing ``count`` pairs with the given payload sizes."""

    def _make(*payload_sizes: int, ext: str = ".png") -> Path:
        for i, size in enumerate(payload_sizes):
            write_asset(assets_dir, str(i), size, ext=ext)
        return assets_dir

    return _make


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def fake_network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test

profiles:
  test:
    gateway_url: https://gateway.test
    bundler_url: https://bundler.test
    strategy: per-unit
    batch_size_limit: 1048576
    app_name: Test App
    timeout: 5
    keypair_path: /keys/id.json

  production:
    gateway_url: https://arweave.net
    strategy: bundle
    jwk_path: /keys/wallet.json
"""


@pytest.fixture
def network_factory() -> type[FakeNetwork]:
    """The fake network class, for tests needing custom balances or failures."""
    return FakeNetwork


@pytest.fixture
def signer_factory() -> type[FakeSigner]:
    return FakeSigner


@pytest.fixture
def asset_writer() -> Callable[..., None]:
    """Writes a single pair with custom metadata."""
    return write_asset


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the default config file at an empty temp location and clear env overrides."""
    for name in (
        "BUNDLECTL_PROFILE",
        "BUNDLECTL_GATEWAY_URL",
        "BUNDLECTL_BUNDLER_URL",
        "BUNDLECTL_STRATEGY",
        "BUNDLECTL_JWK",
        "BUNDLECTL_KEYPAIR",
    ):
        monkeypatch.delenv(name, raising=False)
    config_file = tmp_path / "bundlectl-config" / "config.yaml"
    monkeypatch.setattr("bundlectl.core.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("bundlectl.cli.config_cmd.CONFIG_FILE", config_file)
    return config_file
