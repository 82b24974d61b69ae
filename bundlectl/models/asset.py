"""Asset pair models and the documents built from them."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field, PrivateAttr, model_validator

from .base import BaseModel

METADATA_FILENAME = "metadata.json"
PATH_MANIFEST = "arweave/paths"
PATH_MANIFEST_VERSION = "0.1.0"


# =============================================================================
# Asset Pairs
# =============================================================================


@dataclass(frozen=True)
class AssetKey:
    """An asset index and the extension (with leading dot) of its payload."""

    index: str
    media_ext: str


@dataclass(frozen=True)
class AssetPair:
    """A payload file and its metadata document sharing one key.

    Example, for key ``0``: payload ``/assets/0.png``, metadata ``/assets/0.json``.
    """

    key: str
    payload_path: Path
    metadata_path: Path


@dataclass(frozen=True)
class BatchRange:
    """How many leading pending pairs form the next batch, and their size."""

    count: int
    size: int


# =============================================================================
# Metadata Document
# =============================================================================


class FileEntry(BaseModel):
    """The ``properties.files`` entry written for an uploaded payload."""

    type: str
    uri: str


class SourceOrderedModel(BaseModel):
    """Model that dumps its keys in the order of the JSON it was parsed from.

    Unknown keys are preserved, so re-serializing a document only moves the
    values that were rewritten, never the keys around them.
    """

    model_config = ConfigDict(extra="allow", str_strip_whitespace=False)

    _key_order: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: Any) -> Any:
        model = handler(data)
        if isinstance(data, dict):
            model._key_order = list(data)
        return model

    def _in_source_order(self, dumped: dict[str, Any]) -> dict[str, Any]:
        keys = [key for key in self._key_order if key in dumped]
        keys += [key for key in dumped if key not in keys]
        return {key: dumped[key] for key in keys}


class MetadataProperties(SourceOrderedModel):
    """The ``properties`` block.

    Existing ``files`` entries are not validated; they are replaced wholesale
    when the document is linked to its payload.
    """

    files: list[Any] = Field(default_factory=list)


class MetadataDocument(SourceOrderedModel):
    """An asset's metadata JSON in its minimal form.

    Fields other than ``image`` and ``properties`` (name, symbol,
    attributes, ...) are carried through unchanged.
    """

    image: str
    properties: MetadataProperties

    def to_dict(self) -> dict[str, Any]:
        # Explicit nulls in the source document are kept
        data = self._in_source_order(self.model_dump(mode="json", by_alias=True))
        data["properties"] = self.properties._in_source_order(data["properties"])
        return data

    def with_payload(self, uri: str, content_type: str) -> MetadataDocument:
        """Copy pointing ``image`` and ``properties.files`` at a payload URI."""
        properties = self.properties.model_copy(
            update={"files": [FileEntry(type=content_type, uri=uri)]}
        )
        return self.model_copy(update={"image": uri, "properties": properties})


# =============================================================================
# Link Document
# =============================================================================


class PathEntry(BaseModel):
    """Address of one file in a link document."""

    id: str


class IndexEntry(BaseModel):
    """Default path served by a link document."""

    path: str = METADATA_FILENAME


class LinkDocument(BaseModel):
    """Path manifest binding a payload and its metadata document.

    Gateways serve ``metadata.json`` when the manifest's own address is
    requested, and ``image<ext>`` under the manifest's sub-path.
    """

    manifest: str = PATH_MANIFEST
    version: str = PATH_MANIFEST_VERSION
    paths: dict[str, PathEntry]
    index: IndexEntry = Field(default_factory=IndexEntry)

    @property
    def metadata_id(self) -> str:
        return self.paths[METADATA_FILENAME].id
