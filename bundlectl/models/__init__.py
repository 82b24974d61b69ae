"""Data models for bundlectl.

Provides asset pair types, pydantic document models, and progress tracking.
"""

from __future__ import annotations

from .asset import (
    METADATA_FILENAME,
    AssetKey,
    AssetPair,
    BatchRange,
    FileEntry,
    LinkDocument,
    MetadataDocument,
    MetadataProperties,
    PathEntry,
)
from .base import BaseModel
from .progress import BatchResult, OperationPhase, UploadProgress, UploadSummary

__all__ = [
    # Base
    "BaseModel",
    # Assets
    "METADATA_FILENAME",
    "AssetKey",
    "AssetPair",
    "BatchRange",
    "FileEntry",
    "MetadataProperties",
    "MetadataDocument",
    "PathEntry",
    "LinkDocument",
    # Progress
    "BatchResult",
    "OperationPhase",
    "UploadProgress",
    "UploadSummary",
]
