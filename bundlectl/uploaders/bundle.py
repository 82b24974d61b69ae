"""Aggregate bundle encoding.

Layout::

    item count            32 bytes, little endian
    header entries        per item: size (32 bytes LE) + decoded id (32 bytes)
    item envelopes        raw bytes of each signed unit, in header order
"""

from __future__ import annotations

from collections.abc import Sequence

from bundlectl.core.signing import SignedUnit, Signer, Tag, b64url_decode, b64url_encode
from bundlectl.uploaders.constants import APP_NAME_TAG, BUNDLE_FORMAT_TAGS

INT_FIELD_SIZE = 32
ID_FIELD_SIZE = 32
HEADER_ENTRY_SIZE = INT_FIELD_SIZE + ID_FIELD_SIZE


def encode_bundle(units: Sequence[SignedUnit]) -> bytes:
    """Concatenate signed units into a single bundle blob."""
    headers = bytearray(len(units).to_bytes(INT_FIELD_SIZE, "little"))
    bodies = []
    for unit in units:
        raw = unit.raw
        headers += len(raw).to_bytes(INT_FIELD_SIZE, "little")
        headers += b64url_decode(unit.id)
        bodies.append(raw)
    return bytes(headers) + b"".join(bodies)


def decode_bundle_header(blob: bytes) -> list[tuple[int, str]]:
    """Read the ``(size, id)`` entries from a bundle blob.

    Raises:
        ValueError: If the blob is shorter than its header claims.
    """
    if len(blob) < INT_FIELD_SIZE:
        raise ValueError("Bundle too short for item count")
    count = int.from_bytes(blob[:INT_FIELD_SIZE], "little")
    header_end = INT_FIELD_SIZE + count * HEADER_ENTRY_SIZE
    if len(blob) < header_end:
        raise ValueError(f"Bundle header truncated: expected {count} entries")

    entries = []
    offset = INT_FIELD_SIZE
    for _ in range(count):
        size = int.from_bytes(blob[offset : offset + INT_FIELD_SIZE], "little")
        unit_id = b64url_encode(blob[offset + INT_FIELD_SIZE : offset + HEADER_ENTRY_SIZE])
        entries.append((size, unit_id))
        offset += HEADER_ENTRY_SIZE

    if len(blob) - header_end != sum(size for size, _ in entries):
        raise ValueError("Bundle body size does not match header")
    return entries


def bundle_and_sign(units: Sequence[SignedUnit], signer: Signer, app_name: str) -> SignedUnit:
    """Encode units into a bundle and sign it as one aggregate unit."""
    tags = [Tag(name, value) for name, value in BUNDLE_FORMAT_TAGS]
    tags.append(Tag(APP_NAME_TAG, app_name))
    return signer.sign(encode_bundle(units), tags)
