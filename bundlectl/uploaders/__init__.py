"""Batch upload pipeline for bundlectl.

This module provides:
- Asset pair resolution and size-bounded batch ranges
- Signed unit construction and pair linking
- Aggregate bundle encoding
- The pull-driven batch upload orchestrator

These are internal implementation details. Use `UploadService` from
`bundlectl.services.uploads` as the public API.
"""

from bundlectl.uploaders.bundle import bundle_and_sign, decode_bundle_header, encode_bundle
from bundlectl.uploaders.common import (
    LINK_DOCUMENT_OVERHEAD,
    compute_batch_range,
    discover_assets,
    iter_batch_ranges,
    measure_pair_size,
    resolve_asset_pairs,
)
from bundlectl.uploaders.constants import BATCH_SIZE_BYTE_LIMIT
from bundlectl.uploaders.orchestrator import (
    BatchUploadOrchestrator,
    BundledStrategy,
    OrchestratorState,
    PerUnitStrategy,
    SubmissionStrategy,
)
from bundlectl.uploaders.units import (
    PairLinker,
    SignedUnitBuilder,
    UnitKind,
    create_link_document,
    infer_content_type,
)

__all__ = [
    # Constants
    "BATCH_SIZE_BYTE_LIMIT",
    "LINK_DOCUMENT_OVERHEAD",
    # Batching
    "compute_batch_range",
    "discover_assets",
    "iter_batch_ranges",
    "measure_pair_size",
    "resolve_asset_pairs",
    # Units
    "PairLinker",
    "SignedUnitBuilder",
    "UnitKind",
    "create_link_document",
    "infer_content_type",
    # Bundles
    "bundle_and_sign",
    "decode_bundle_header",
    "encode_bundle",
    # Orchestration
    "BatchUploadOrchestrator",
    "BundledStrategy",
    "OrchestratorState",
    "PerUnitStrategy",
    "SubmissionStrategy",
]
