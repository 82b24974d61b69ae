"""Batch upload orchestrator.

Processes pending asset pairs one size-bounded batch at a time. Each call to
:meth:`BatchUploadOrchestrator.advance` performs exactly one batch's worth of
signing and network work and returns its :class:`BatchResult`, so the caller
controls pacing and can persist progress between batches.

The very first call returns an empty result before any work is done.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Union

from bundlectl.core.config import DEFAULT_APP_NAME, DEFAULT_GATEWAY_URL
from bundlectl.core.logging import batch_log
from bundlectl.core.signing import SignedUnit, Signer
from bundlectl.models.asset import AssetPair, BatchRange, MetadataDocument
from bundlectl.models.progress import BatchResult
from bundlectl.uploaders.bundle import bundle_and_sign
from bundlectl.uploaders.common import LINK_DOCUMENT_OVERHEAD, compute_batch_range, size_mb
from bundlectl.uploaders.constants import BATCH_SIZE_BYTE_LIMIT
from bundlectl.uploaders.units import PairLinker, SignedUnitBuilder, infer_content_type

logger = logging.getLogger(__name__)

UnitJournal = Callable[[SignedUnit, str], None]


# =============================================================================
# Storage Network Capability
# =============================================================================


class StorageNetwork(Protocol):
    """Network operations the orchestrator needs. ``StorageClient`` implements it."""

    def post_aggregate_transaction(self, aggregate: SignedUnit) -> str: ...

    def estimate_cost(self, byte_count: int) -> int: ...

    def get_balance(self, address: str) -> int: ...

    def fund(self, amount: int, address: str) -> str: ...

    def post_unit_transaction(self, unit: SignedUnit) -> str: ...


# =============================================================================
# Submission Strategies
# =============================================================================


@dataclass(frozen=True)
class BundledStrategy:
    """Combine all units of a batch into one signed aggregate transaction.

    A failed post loses the whole batch; nothing becomes partially visible.
    """

    app_name: str = DEFAULT_APP_NAME

    def submit(
        self,
        units: Sequence[SignedUnit],
        *,
        network: StorageNetwork,
        signer: Signer,
        on_unit_submitted: Optional[UnitJournal] = None,
    ) -> list[str]:
        aggregate = bundle_and_sign(units, signer, self.app_name)
        logger.info(
            "Bundled %d units into %s (%sMB)", len(units), aggregate.id, size_mb(len(aggregate.raw))
        )
        tx_id = network.post_aggregate_transaction(aggregate)
        logger.info("Bundle uploaded: %s", tx_id)
        if on_unit_submitted:
            for unit in units:
                on_unit_submitted(unit, tx_id)
        return [tx_id]


@dataclass(frozen=True)
class PerUnitStrategy:
    """Fund the bundler account, then post each unit as its own transaction.

    Units are posted sequentially in build order. If a post fails partway,
    the earlier units of the batch are already stored; ``on_unit_submitted``
    is called after every successful post so they can be journaled.
    """

    funding_address: str

    def submit(
        self,
        units: Sequence[SignedUnit],
        *,
        network: StorageNetwork,
        signer: Signer,
        on_unit_submitted: Optional[UnitJournal] = None,
    ) -> list[str]:
        byte_count = sum(len(unit.data) for unit in units)
        cost = network.estimate_cost(byte_count)
        balance = network.get_balance(self.funding_address)
        logger.info(
            "Batch of %d bytes costs %d (balance %d)", byte_count, cost, balance
        )
        if balance < cost:
            network.fund(cost - balance, self.funding_address)

        tx_ids = []
        for unit in units:
            tx_id = network.post_unit_transaction(unit)
            logger.debug("Uploaded unit %s as %s", unit.id, tx_id)
            if on_unit_submitted:
                on_unit_submitted(unit, tx_id)
            tx_ids.append(tx_id)
        logger.info("Uploaded %d units in separate transactions", len(tx_ids))
        return tx_ids


SubmissionStrategy = Union[BundledStrategy, PerUnitStrategy]


# =============================================================================
# Orchestrator
# =============================================================================


class OrchestratorState(Enum):
    """Orchestrator lifecycle states."""

    IDLE = "idle"
    RANGE_COMPUTED = "range_computed"
    PAIRS_PROCESSED = "pairs_processed"
    SUBMITTED = "submitted"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = {OrchestratorState.DONE, OrchestratorState.FAILED}


@dataclass
class _ProcessedPair:
    key: str
    units: tuple[SignedUnit, SignedUnit, SignedUnit]
    link_uri: str
    metadata: MetadataDocument


class BatchUploadOrchestrator:
    """Pull-driven, resumable batch uploader.

    Example::

        orchestrator = BatchUploadOrchestrator(pairs, signer=signer, network=client,
                                               strategy=BundledStrategy())
        for result in orchestrator:
            cache.record(result)

    Any error while processing or submitting a batch aborts that batch,
    moves the orchestrator to ``FAILED`` and is re-raised unchanged. Results
    already returned stay valid; :attr:`remaining` lists the pairs that were
    never reported.
    """

    def __init__(
        self,
        pairs: Sequence[AssetPair],
        *,
        signer: Signer,
        network: StorageNetwork,
        strategy: SubmissionStrategy,
        ceiling: int = BATCH_SIZE_BYTE_LIMIT,
        app_name: str = DEFAULT_APP_NAME,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        overhead: int = LINK_DOCUMENT_OVERHEAD,
        on_unit_submitted: Optional[UnitJournal] = None,
    ) -> None:
        self.signer = signer
        self.network = network
        self.strategy = strategy
        self.ceiling = ceiling
        self.overhead = overhead
        self.gateway_url = gateway_url.rstrip("/")
        self.on_unit_submitted = on_unit_submitted
        self.builder = SignedUnitBuilder(signer, app_name)
        self.linker = PairLinker()

        self.state = OrchestratorState.IDLE
        self.batches_completed = 0
        self.pairs_reported = 0
        self._pending: list[AssetPair] = list(pairs)
        self._active: list[AssetPair] = []
        self._started = False

    # =========================================================================
    # Iteration
    # =========================================================================

    @property
    def has_more(self) -> bool:
        """Whether another call to :meth:`advance` can return a result."""
        if self.state in TERMINAL_STATES:
            return False
        return not self._started or bool(self._pending)

    @property
    def remaining(self) -> list[AssetPair]:
        """Pairs not yet reported to the caller, including an aborted batch."""
        return [*self._active, *self._pending]

    def __iter__(self) -> Iterator[BatchResult]:
        return self

    def __next__(self) -> BatchResult:
        result = self.advance()
        if result is None:
            raise StopIteration
        return result

    def advance(self) -> Optional[BatchResult]:
        """Upload the next batch.

        Returns:
            The batch result, the empty initial result on the first call, or
            None once every pair has been reported.
        """
        if self.state in TERMINAL_STATES:
            return None

        if not self._started:
            self._started = True
            return BatchResult()

        if not self._pending:
            self.state = OrchestratorState.DONE
            return None

        batch_number = self.batches_completed + 1
        try:
            batch_range = self._take_batch()
            logger.info(
                "Computed batch range, including %d file pair(s) totaling %sMB",
                batch_range.count,
                size_mb(batch_range.size),
            )
            with batch_log(
                logger, batch_number, pairs=batch_range.count, size_mb=size_mb(batch_range.size)
            ) as log:
                processed = []
                for pair in self._active:
                    processed.append(self._process_pair(pair))
                    log.pair_done(pair.key)
                self.state = OrchestratorState.PAIRS_PROCESSED

                units = [unit for item in processed for unit in item.units]
                tx_ids = self.strategy.submit(
                    units,
                    network=self.network,
                    signer=self.signer,
                    on_unit_submitted=self.on_unit_submitted,
                )
                self.state = OrchestratorState.SUBMITTED
        except Exception:
            self.state = OrchestratorState.FAILED
            logger.error(
                "Batch %d aborted; %d pair(s) not yet reported, starting at %s",
                batch_number,
                len(self.remaining),
                self.remaining[0].key if self.remaining else "-",
            )
            raise

        result = BatchResult(
            keys=[item.key for item in processed],
            link_uris=[item.link_uri for item in processed],
            updated_metadata=[item.metadata for item in processed],
            size=batch_range.size,
            transaction_ids=tx_ids,
        )
        self._active = []
        self.batches_completed += 1
        self.pairs_reported += len(result)
        self.state = OrchestratorState.IDLE
        return result

    # =========================================================================
    # Batch Steps
    # =========================================================================

    def _take_batch(self) -> BatchRange:
        batch_range = compute_batch_range(self._pending, self.ceiling, self.overhead)
        self._active = self._pending[: batch_range.count]
        del self._pending[: batch_range.count]
        self.state = OrchestratorState.RANGE_COMPUTED
        return batch_range

    def _uri(self, address: str) -> str:
        return f"{self.gateway_url}/{address}"

    def _process_pair(self, pair: AssetPair) -> _ProcessedPair:
        logger.debug("Processing file pair %s", pair.key)

        # Metadata is validated before anything is signed for this pair
        document = self.linker.load_metadata(pair.metadata_path)

        content_type = infer_content_type(pair.payload_path)
        payload_unit = self.builder.build_payload(pair.payload_path, content_type)
        payload_uri = self._uri(payload_unit.id)

        updated = self.linker.apply_link(document, payload_uri, content_type)
        metadata_unit = self.builder.build_metadata(updated)

        link_document = self.linker.build_link_document(
            payload_unit.id, metadata_unit.id, pair.payload_path.suffix
        )
        link_unit = self.builder.build_link(link_document)
        return _ProcessedPair(
            key=pair.key,
            units=(payload_unit, metadata_unit, link_unit),
            link_uri=self._uri(link_unit.id),
            metadata=updated,
        )
