"""Upload service for bundlectl.

Drives the batch orchestrator over an assets directory, persisting progress
to the upload cache after every batch so interrupted runs can resume.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from bundlectl.core.cache import UploadCache, default_cache_path
from bundlectl.core.client import StorageClient
from bundlectl.core.config import (
    DEFAULT_APP_NAME,
    DEFAULT_BATCH_SIZE_LIMIT,
    DEFAULT_GATEWAY_URL,
    STRATEGY_BUNDLE,
    STRATEGY_PER_UNIT,
    Profile,
)
from bundlectl.core.exceptions import ConfigurationError
from bundlectl.core.signing import Signer, load_signer
from bundlectl.core.validation import validate_assets_dir, validate_batch_size_limit
from bundlectl.models.asset import AssetPair
from bundlectl.models.progress import OperationPhase, UploadProgress, UploadSummary
from bundlectl.uploaders.common import discover_assets, iter_batch_ranges, resolve_asset_pairs
from bundlectl.uploaders.orchestrator import (
    BatchUploadOrchestrator,
    BundledStrategy,
    PerUnitStrategy,
    StorageNetwork,
    SubmissionStrategy,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[UploadProgress], None]


class UploadService:
    """Service for publishing asset pairs to the storage network."""

    def __init__(
        self,
        network: StorageNetwork,
        *,
        signer: Optional[Signer] = None,
        strategy: str = STRATEGY_BUNDLE,
        app_name: str = DEFAULT_APP_NAME,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        batch_size_limit: int = DEFAULT_BATCH_SIZE_LIMIT,
    ) -> None:
        """Initialize upload service.

        Args:
            network: Storage network client.
            signer: Signer for units; only needed for uploads.
            strategy: ``bundle`` or ``per-unit``.
            app_name: Value of the App-Name tag on every unit.
            gateway_url: Gateway used to build payload and link URIs.
            batch_size_limit: Batch size ceiling in bytes.
        """
        self.network = network
        self.signer = signer
        self.strategy = strategy
        self.app_name = app_name
        self.gateway_url = gateway_url
        self.batch_size_limit = validate_batch_size_limit(batch_size_limit)

    @classmethod
    def from_profile(
        cls,
        profile: Profile,
        *,
        network: Optional[StorageNetwork] = None,
        with_signer: bool = True,
    ) -> UploadService:
        """Build a service from a config profile.

        Raises:
            ConfigurationError: If the credential for the profile's strategy
                is missing.
        """
        signer = None
        if with_signer:
            signer = load_signer(
                profile.strategy,
                jwk_path=profile.jwk_path,
                keypair_path=profile.keypair_path,
            )
        if network is None:
            network = StorageClient(
                gateway_url=profile.gateway_url,
                bundler_url=profile.bundler_url,
                timeout=profile.timeout,
                verify_ssl=profile.verify_ssl,
            )
        return cls(
            network,
            signer=signer,
            strategy=profile.strategy,
            app_name=profile.app_name,
            gateway_url=profile.gateway_url,
            batch_size_limit=profile.batch_size_limit,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def make_strategy(self) -> SubmissionStrategy:
        """Submission strategy for the configured mode."""
        if self.strategy == STRATEGY_BUNDLE:
            return BundledStrategy(app_name=self.app_name)
        if self.strategy == STRATEGY_PER_UNIT:
            address = getattr(self.signer, "address", None)
            if not address:
                raise ConfigurationError(
                    "Per-unit uploads need a signer with a funding address",
                    field="keypair_path",
                )
            return PerUnitStrategy(funding_address=address)
        raise ConfigurationError(
            f"Unknown upload strategy: {self.strategy}", field="strategy", value=self.strategy
        )

    def collect_pairs(
        self,
        assets_dir: Path,
        cache: Optional[UploadCache] = None,
    ) -> tuple[list[AssetPair], int]:
        """Resolve the pairs still to upload.

        Returns:
            Tuple of (pending pairs, number skipped because already cached).
        """
        assets = discover_assets(assets_dir)
        pairs = resolve_asset_pairs(assets_dir, assets)
        if cache is None:
            return pairs, 0
        pending = [pair for pair in pairs if not cache.has(pair.key)]
        return pending, len(pairs) - len(pending)

    # =========================================================================
    # Operations
    # =========================================================================

    def plan(
        self, assets_dir: str | Path, cache_file: Optional[Path] = None
    ) -> list[dict[str, Any]]:
        """Compute the batches an upload would use, without signing or uploading.

        Returns:
            One row per batch with its index, pair count, size, and key span.
        """
        source = validate_assets_dir(assets_dir)
        cache = UploadCache.load(cache_file or default_cache_path(source))
        pending, _ = self.collect_pairs(source, cache)

        rows = []
        for i, (pairs, batch_range) in enumerate(
            iter_batch_ranges(pending, self.batch_size_limit), start=1
        ):
            rows.append(
                {
                    "batch": i,
                    "pairs": batch_range.count,
                    "size_mb": round(batch_range.size / (1024 * 1024), 3),
                    "first_key": pairs[0].key,
                    "last_key": pairs[-1].key,
                }
            )
        return rows

    def upload(
        self,
        assets_dir: str | Path,
        *,
        cache_file: Optional[Path] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> UploadSummary:
        """Upload every asset pair of a directory that is not yet cached.

        The cache is saved after each batch. Errors abort the current batch
        and propagate; earlier batches stay recorded.

        Args:
            assets_dir: Directory of ``<index><ext>`` / ``<index>.json`` pairs.
            cache_file: Cache path; defaults to one beside the directory.
            progress_callback: Optional callback for progress updates.

        Returns:
            UploadSummary with results.

        Raises:
            ConfigurationError: If no signer is configured.
        """
        if self.signer is None:
            raise ConfigurationError("Uploads need a signing credential", field="signer")

        start = time.time()

        def report(progress: UploadProgress) -> None:
            if progress_callback:
                progress_callback(progress)

        source = validate_assets_dir(assets_dir)
        cache = UploadCache.load(cache_file or default_cache_path(source))
        pending, skipped = self.collect_pairs(source, cache)
        total = len(pending)

        report(
            UploadProgress(
                phase=OperationPhase.PREPARING,
                total=total,
                message=f"{total} pair(s) to upload, {skipped} already uploaded",
            )
        )

        orchestrator = BatchUploadOrchestrator(
            pending,
            signer=self.signer,
            network=self.network,
            strategy=self.make_strategy(),
            ceiling=self.batch_size_limit,
            app_name=self.app_name,
            gateway_url=self.gateway_url,
            on_unit_submitted=lambda unit, tx_id: cache.record_unit(unit.id, tx_id),
        )

        bytes_sent = 0
        tx_ids: list[str] = []
        try:
            for result in orchestrator:
                if result.is_empty:
                    continue
                cache.record_batch(result)
                cache.save()
                bytes_sent += result.size
                tx_ids.extend(result.transaction_ids)
                report(
                    UploadProgress(
                        phase=OperationPhase.UPLOADING,
                        current=orchestrator.pairs_reported,
                        total=total,
                        batch_id=orchestrator.batches_completed,
                        bytes_sent=bytes_sent,
                        message=f"Uploaded batch {orchestrator.batches_completed} "
                        f"({len(result)} pair(s))",
                    )
                )
        except Exception as e:
            report(
                UploadProgress(
                    phase=OperationPhase.ERROR,
                    current=orchestrator.pairs_reported,
                    total=total,
                    bytes_sent=bytes_sent,
                    message=str(e),
                )
            )
            raise

        report(
            UploadProgress(
                phase=OperationPhase.COMPLETE,
                current=orchestrator.pairs_reported,
                total=total,
                bytes_sent=bytes_sent,
                message="Upload complete!",
            )
        )

        return UploadSummary(
            success=True,
            total_pairs=total + skipped,
            uploaded_pairs=orchestrator.pairs_reported,
            skipped_pairs=skipped,
            batches=orchestrator.batches_completed,
            total_bytes=bytes_sent,
            duration=time.time() - start,
            transaction_ids=tx_ids,
        )

    def status(self, assets_dir: str | Path, cache_file: Optional[Path] = None) -> dict[str, Any]:
        """Compare an assets directory against its upload cache."""
        source = validate_assets_dir(assets_dir)
        cache = UploadCache.load(cache_file or default_cache_path(source))
        pending, skipped = self.collect_pairs(source, cache)
        return {
            **cache.summary(),
            "total_pairs": len(pending) + skipped,
            "pending_pairs": len(pending),
        }
