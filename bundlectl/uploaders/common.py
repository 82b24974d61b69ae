"""Common utilities for uploader modules.

Resolves asset pairs on disk and computes size-bounded batch ranges.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from bundlectl.core.exceptions import OversizedPairError, PathValidationError
from bundlectl.models.asset import AssetKey, AssetPair, BatchRange
from bundlectl.uploaders.constants import ADDRESS_LENGTH, BATCH_SIZE_BYTE_LIMIT, METADATA_EXT
from bundlectl.uploaders.units import create_link_document

logger = logging.getLogger(__name__)

# Byte size of a link document built from dummy addresses. Every pair gets
# one, so this is added to each pair's measured size.
LINK_DOCUMENT_OVERHEAD = len(
    create_link_document("A" * ADDRESS_LENGTH, "A" * ADDRESS_LENGTH, ".png").to_json_bytes()
)

FileSizer = Callable[[Path], int]


def size_mb(num_bytes: int) -> str:
    """Format a byte count as megabytes with three decimals."""
    return f"{num_bytes / (1024 * 1024):.3f}"


def _stat_size(path: Path) -> int:
    return os.stat(path).st_size


# =============================================================================
# Asset Pair Resolution
# =============================================================================


def resolve_asset_pairs(dirname: str | Path, assets: Iterable[AssetKey]) -> list[AssetPair]:
    """Build the ordered asset pairs for a list of asset keys.

    Only constructs paths; missing files surface later when they are read.

    Args:
        dirname: Directory holding ``<index><ext>`` and ``<index>.json`` files.
        assets: Asset keys in upload order.

    Returns:
        Asset pairs in the same order.
    """
    base = Path(dirname)
    return [
        AssetPair(
            key=asset.index,
            payload_path=base / f"{asset.index}{asset.media_ext}",
            metadata_path=base / f"{asset.index}{METADATA_EXT}",
        )
        for asset in assets
    ]


def _index_sort_key(index: str) -> tuple[int, int | str]:
    return (0, int(index)) if index.isdigit() else (1, index)


def discover_assets(dirname: str | Path) -> list[AssetKey]:
    """Find asset keys in a directory.

    Every non-hidden, non-JSON file with a sibling ``<stem>.json`` is a
    payload. Numeric indices sort numerically, then the rest by name.

    Raises:
        PathValidationError: If dirname is not a directory.
    """
    base = Path(dirname)
    if not base.is_dir():
        raise PathValidationError(str(dirname), "not a directory")

    assets: list[AssetKey] = []
    for path in base.iterdir():
        if not path.is_file() or path.name.startswith("."):
            continue
        if path.suffix.lower() == METADATA_EXT:
            continue
        if not (base / f"{path.stem}{METADATA_EXT}").is_file():
            logger.debug("Skipping %s: no metadata document", path.name)
            continue
        assets.append(AssetKey(index=path.stem, media_ext=path.suffix))

    return sorted(assets, key=lambda a: _index_sort_key(a.index))


# =============================================================================
# Batch Range
# =============================================================================


def measure_pair_size(
    pair: AssetPair,
    *,
    overhead: int = LINK_DOCUMENT_OVERHEAD,
    file_size: FileSizer = _stat_size,
) -> int:
    """Size in bytes of a pair's payload and metadata plus the per-pair overhead."""
    return overhead + file_size(pair.payload_path) + file_size(pair.metadata_path)


def compute_batch_range(
    pending: Sequence[AssetPair],
    ceiling: int = BATCH_SIZE_BYTE_LIMIT,
    overhead: int = LINK_DOCUMENT_OVERHEAD,
    *,
    file_size: FileSizer = _stat_size,
) -> BatchRange:
    """Count how many leading pending pairs fit under the ceiling.

    Pairs are taken greedily in order and never reordered. Accumulation stops
    as soon as the next pair would bring the total to or above the ceiling.

    Args:
        pending: Pairs not yet uploaded, in order.
        ceiling: Maximum cumulative batch size in bytes.
        overhead: Bytes added per pair for its link document.
        file_size: File size lookup, ``os.stat`` by default.

    Returns:
        The batch range; ``count`` is 0 only for an empty pending list.

    Raises:
        OversizedPairError: If the first pair alone reaches the ceiling.
    """
    total = 0
    count = 0
    for pair in pending:
        pair_size = measure_pair_size(pair, overhead=overhead, file_size=file_size)

        if total + pair_size >= ceiling:
            if count == 0:
                raise OversizedPairError(pair.key, pair_size, ceiling)
            break

        total += pair_size
        count += 1

    return BatchRange(count=count, size=total)


def iter_batch_ranges(
    pending: Sequence[AssetPair],
    ceiling: int = BATCH_SIZE_BYTE_LIMIT,
    overhead: int = LINK_DOCUMENT_OVERHEAD,
    *,
    file_size: FileSizer = _stat_size,
) -> list[tuple[list[AssetPair], BatchRange]]:
    """Split all pending pairs into consecutive batches without uploading."""
    remaining = list(pending)
    batches: list[tuple[list[AssetPair], BatchRange]] = []
    while remaining:
        batch_range = compute_batch_range(remaining, ceiling, overhead, file_size=file_size)
        batches.append((remaining[: batch_range.count], batch_range))
        del remaining[: batch_range.count]
    return batches

