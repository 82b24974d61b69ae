"""Signed unit construction and asset pair linking.

For each asset pair three units are signed, in order:

1. the payload (raw file bytes, content type inferred from the file name);
2. the metadata document, rewritten to point at the payload's URI;
3. the link document binding the payload and metadata addresses.
"""

from __future__ import annotations

import json
import logging
import mimetypes
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from bundlectl.core.exceptions import InvalidMetadataError
from bundlectl.core.signing import SignedUnit, Signer, Tag
from bundlectl.models.asset import (
    METADATA_FILENAME,
    IndexEntry,
    LinkDocument,
    MetadataDocument,
    PathEntry,
)
from bundlectl.uploaders.constants import (
    APP_NAME_TAG,
    CONTENT_TYPE_TAG,
    DEFAULT_APP_NAME,
    FALLBACK_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    LINK_DOCUMENT_CONTENT_TYPE,
)

logger = logging.getLogger(__name__)


def infer_content_type(path: str | Path) -> str:
    """Guess a payload's MIME type from its file name."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or FALLBACK_CONTENT_TYPE


def create_link_document(payload_id: str, metadata_id: str, payload_ext: str) -> LinkDocument:
    """Build the link document for a payload/metadata address pair.

    Args:
        payload_id: Address of the signed payload unit.
        metadata_id: Address of the signed metadata unit.
        payload_ext: Payload extension with leading dot, e.g. ``.png``.

    Returns:
        Link document whose index serves ``metadata.json``.
    """
    return LinkDocument(
        paths={
            f"image{payload_ext}": PathEntry(id=payload_id),
            METADATA_FILENAME: PathEntry(id=metadata_id),
        },
        index=IndexEntry(path=METADATA_FILENAME),
    )


# =============================================================================
# Signed Unit Builder
# =============================================================================


class UnitKind(Enum):
    """Kinds of unit produced per asset pair."""

    PAYLOAD = "payload"
    METADATA = "metadata"
    LINK = "link"


class SignedUnitBuilder:
    """Assembles bytes and tags per unit kind and signs them.

    Signing errors propagate unchanged.
    """

    def __init__(self, signer: Signer, app_name: str = DEFAULT_APP_NAME):
        self.signer = signer
        self.base_tags = (Tag(APP_NAME_TAG, app_name),)

    def tags_for(self, kind: UnitKind, content_type: str | None = None) -> tuple[Tag, ...]:
        """Tag set for a unit kind."""
        if kind is UnitKind.PAYLOAD:
            if not content_type:
                raise ValueError("Payload units need a content type")
            return (*self.base_tags, Tag(CONTENT_TYPE_TAG, content_type))
        if kind is UnitKind.METADATA:
            return (*self.base_tags, Tag(CONTENT_TYPE_TAG, JSON_CONTENT_TYPE))
        return (*self.base_tags, Tag(CONTENT_TYPE_TAG, LINK_DOCUMENT_CONTENT_TYPE))

    def build(
        self,
        kind: UnitKind,
        data: bytes,
        content_type: str | None = None,
        extra_tags: Sequence[Tag] = (),
    ) -> SignedUnit:
        """Sign data as a unit of the given kind."""
        return self.signer.sign(data, (*self.tags_for(kind, content_type), *extra_tags))

    def build_payload(self, path: str | Path, content_type: str) -> SignedUnit:
        """Read and sign a payload file."""
        data = Path(path).read_bytes()
        return self.build(UnitKind.PAYLOAD, data, content_type)

    def build_metadata(self, document: MetadataDocument) -> SignedUnit:
        return self.build(UnitKind.METADATA, document.to_json_bytes())

    def build_link(self, document: LinkDocument) -> SignedUnit:
        return self.build(UnitKind.LINK, document.to_json_bytes())


# =============================================================================
# Pair Linker
# =============================================================================


class PairLinker:
    """Points metadata documents at their payloads and builds link documents."""

    def load_metadata(self, metadata_path: str | Path) -> MetadataDocument:
        """Read and validate a metadata document.

        Raises:
            InvalidMetadataError: If the file is missing, not JSON, or lacks
                ``image`` / ``properties``.
        """
        path = Path(metadata_path)
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
            return MetadataDocument.model_validate(raw)
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            raise InvalidMetadataError(str(path), e) from e

    def apply_link(
        self,
        document: MetadataDocument,
        payload_uri: str,
        content_type: str,
    ) -> MetadataDocument:
        """Return a copy of document pointing at payload_uri."""
        return document.with_payload(payload_uri, content_type)

    def link(
        self,
        metadata_path: str | Path,
        payload_uri: str,
        content_type: str,
    ) -> MetadataDocument:
        """Read a metadata document and point it at its payload.

        The file on disk is left untouched.
        """
        return self.apply_link(self.load_metadata(metadata_path), payload_uri, content_type)

    def build_link_document(
        self,
        payload_id: str,
        metadata_id: str,
        payload_ext: str,
    ) -> LinkDocument:
        return create_link_document(payload_id, metadata_id, payload_ext)
