"""Signing capability for bundlectl.

A signer turns bytes plus a set of tags into a :class:`SignedUnit`: an
immutable, addressable envelope ready for submission to the storage network.
Two key types are supported:

- ``ArweaveSigner``: RSA-PSS over an Arweave JWK wallet file.
- ``SolanaSigner``: Ed25519 over a Solana keypair file (``solana-keygen``
  JSON array of 64 integers).

The orchestrator only depends on the :class:`Signer` protocol.
"""

from __future__ import annotations

import base64
import hashlib
import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from bundlectl.core.config import STRATEGY_BUNDLE, STRATEGY_PER_UNIT
from bundlectl.core.exceptions import ConfigurationError, SigningError

# =============================================================================
# Constants
# =============================================================================

SIGNATURE_TYPE_ARWEAVE = 1
SIGNATURE_TYPE_ED25519 = 2

PSS_SALT_LENGTH = 32


# =============================================================================
# Encoding Helpers
# =============================================================================


def b64url_encode(data: bytes) -> str:
    """Base64url-encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Decode unpadded base64url."""
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _b64url_int(value: str) -> int:
    return int.from_bytes(b64url_decode(value), "big")


def _int_bytes(value: int) -> bytes:
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


@dataclass(frozen=True)
class Tag:
    """A name/value pair attached to a signed unit."""

    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


def encode_tags(tags: Sequence[Tag]) -> bytes:
    """Serialize tags to compact JSON bytes."""
    return json.dumps([t.to_dict() for t in tags], separators=(",", ":")).encode("utf-8")


def signing_message(signature_type: int, owner: bytes, tag_bytes: bytes, data: bytes) -> bytes:
    """Digest of every signed field, each length-prefixed."""
    digest = hashlib.sha384()
    for part in (b"unit", str(signature_type).encode("ascii"), owner, tag_bytes, data):
        digest.update(len(part).to_bytes(8, "little"))
        digest.update(part)
    return digest.digest()


# =============================================================================
# Signed Unit
# =============================================================================


@dataclass(frozen=True)
class SignedUnit:
    """Signed, content-addressed envelope around raw bytes and tags."""

    data: bytes
    tags: tuple[Tag, ...]
    owner: bytes
    signature: bytes
    signature_type: int

    @property
    def id(self) -> str:
        """Address of the unit, derived from its signature."""
        return b64url_encode(hashlib.sha256(self.signature).digest())

    @property
    def raw(self) -> bytes:
        """Serialized envelope as posted to the network."""
        tag_bytes = encode_tags(self.tags)
        return b"".join(
            [
                self.signature_type.to_bytes(2, "little"),
                self.signature,
                self.owner,
                len(self.tags).to_bytes(8, "little"),
                len(tag_bytes).to_bytes(8, "little"),
                tag_bytes,
                self.data,
            ]
        )

    def tag_value(self, name: str) -> str | None:
        """Return the first tag value with the given name."""
        for tag in self.tags:
            if tag.name == name:
                return tag.value
        return None


# =============================================================================
# Signer Protocol
# =============================================================================


@runtime_checkable
class Signer(Protocol):
    """Anything that can sign bytes with tags into an addressable unit."""

    signature_type: int

    @property
    def owner(self) -> bytes: ...

    def sign(self, data: bytes, tags: Sequence[Tag]) -> SignedUnit: ...


class KeySigner(ABC):
    """Shared behaviour for key-backed signers."""

    signature_type: int

    @property
    @abstractmethod
    def owner(self) -> bytes:
        """Public key bytes embedded in every signed unit."""

    @property
    def address(self) -> str:
        """Wallet address (base64url SHA-256 of the owner public key)."""
        return b64url_encode(hashlib.sha256(self.owner).digest())

    @abstractmethod
    def _sign_message(self, message: bytes) -> bytes: ...

    def sign(self, data: bytes, tags: Sequence[Tag]) -> SignedUnit:
        """Sign data and tags.

        Args:
            data: Raw bytes to wrap.
            tags: Tags to attach.

        Returns:
            Signed unit with its address assigned.
        """
        tags = tuple(tags)
        message = signing_message(self.signature_type, self.owner, encode_tags(tags), data)
        return SignedUnit(
            data=data,
            tags=tags,
            owner=self.owner,
            signature=self._sign_message(message),
            signature_type=self.signature_type,
        )

    def verify(self, unit: SignedUnit) -> bool:
        """Check a unit's signature against this signer's key."""
        if unit.owner != self.owner or unit.signature_type != self.signature_type:
            return False
        message = signing_message(
            unit.signature_type, unit.owner, encode_tags(unit.tags), unit.data
        )
        try:
            self._verify_message(unit.signature, message)
        except InvalidSignature:
            return False
        return True

    @abstractmethod
    def _verify_message(self, signature: bytes, message: bytes) -> None:
        """Raise ``InvalidSignature`` if signature does not match."""


class ArweaveSigner(KeySigner):
    """RSA-PSS signer backed by an Arweave JWK."""

    signature_type = SIGNATURE_TYPE_ARWEAVE

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self._key = private_key
        self._owner = _int_bytes(private_key.public_key().public_numbers().n)

    @classmethod
    def from_jwk(cls, jwk: dict[str, Any]) -> ArweaveSigner:
        """Build a signer from a JWK dictionary.

        Raises:
            SigningError: If the JWK is not a complete RSA private key.
        """
        try:
            public = rsa.RSAPublicNumbers(_b64url_int(jwk["e"]), _b64url_int(jwk["n"]))
            private = rsa.RSAPrivateNumbers(
                p=_b64url_int(jwk["p"]),
                q=_b64url_int(jwk["q"]),
                d=_b64url_int(jwk["d"]),
                dmp1=_b64url_int(jwk["dp"]),
                dmq1=_b64url_int(jwk["dq"]),
                iqmp=_b64url_int(jwk["qi"]),
                public_numbers=public,
            )
            return cls(private.private_key())
        except (KeyError, TypeError, ValueError) as e:
            raise SigningError(f"Invalid RSA JWK: {e}") from e

    def to_jwk(self) -> dict[str, str]:
        """Export the key as a JWK dictionary."""
        numbers = self._key.private_numbers()
        return {
            "kty": "RSA",
            "e": b64url_encode(_int_bytes(numbers.public_numbers.e)),
            "n": b64url_encode(_int_bytes(numbers.public_numbers.n)),
            "d": b64url_encode(_int_bytes(numbers.d)),
            "p": b64url_encode(_int_bytes(numbers.p)),
            "q": b64url_encode(_int_bytes(numbers.q)),
            "dp": b64url_encode(_int_bytes(numbers.dmp1)),
            "dq": b64url_encode(_int_bytes(numbers.dmq1)),
            "qi": b64url_encode(_int_bytes(numbers.iqmp)),
        }

    @property
    def owner(self) -> bytes:
        return self._owner

    def _pss(self) -> padding.PSS:
        return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=PSS_SALT_LENGTH)

    def _sign_message(self, message: bytes) -> bytes:
        return self._key.sign(message, self._pss(), hashes.SHA256())

    def _verify_message(self, signature: bytes, message: bytes) -> None:
        self._key.public_key().verify(signature, message, self._pss(), hashes.SHA256())


class SolanaSigner(KeySigner):
    """Ed25519 signer backed by a Solana keypair."""

    signature_type = SIGNATURE_TYPE_ED25519

    def __init__(self, secret_key: bytes):
        if len(secret_key) != 64:
            raise SigningError(f"Solana secret key must be 64 bytes, got {len(secret_key)}")
        self._key = Ed25519PrivateKey.from_private_bytes(secret_key[:32])
        self._owner = self._key.public_key().public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw
        )

    @property
    def owner(self) -> bytes:
        return self._owner

    def _sign_message(self, message: bytes) -> bytes:
        return self._key.sign(message)

    def _verify_message(self, signature: bytes, message: bytes) -> None:
        self._key.public_key().verify(signature, message)


# =============================================================================
# Loading
# =============================================================================


def load_jwk_signer(path: str | Path) -> ArweaveSigner:
    """Load an Arweave wallet file.

    Raises:
        SigningError: If the file is missing or not a valid JWK.
    """
    try:
        with open(Path(path).expanduser()) as f:
            jwk = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SigningError(f"Cannot read JWK wallet: {e}", str(path)) from e
    if not isinstance(jwk, dict):
        raise SigningError("JWK wallet must be a JSON object", str(path))
    return ArweaveSigner.from_jwk(jwk)


def load_keypair_signer(path: str | Path) -> SolanaSigner:
    """Load a Solana keypair file.

    Raises:
        SigningError: If the file is missing or not a 64-byte array.
    """
    try:
        with open(Path(path).expanduser()) as f:
            values = json.load(f)
        secret = bytes(values)
    except (OSError, json.JSONDecodeError, TypeError, ValueError) as e:
        raise SigningError(f"Cannot read Solana keypair: {e}", str(path)) from e
    return SolanaSigner(secret)


def load_signer(
    strategy: str,
    *,
    jwk_path: str | Path | None = None,
    keypair_path: str | Path | None = None,
) -> Signer:
    """Load the signer required by an upload strategy.

    The bundled strategy pays with an Arweave wallet; the per-unit strategy
    pays a bundler with a Solana keypair.

    Raises:
        ConfigurationError: If the credential for the strategy is missing.
    """
    if strategy == STRATEGY_PER_UNIT:
        if not keypair_path:
            raise ConfigurationError(
                "To pay for uploads with SOL, you need to pass a Solana keypair",
                field="keypair_path",
            )
        return load_keypair_signer(keypair_path)
    if strategy == STRATEGY_BUNDLE:
        if not jwk_path:
            raise ConfigurationError(
                "To pay for uploads with AR, you need to pass an Arweave JWK",
                field="jwk_path",
            )
        return load_jwk_signer(jwk_path)
    raise ConfigurationError(
        f"Unknown upload strategy: {strategy}", field="strategy", value=strategy
    )
