"""Progress and result models for batch uploads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .asset import MetadataDocument


class OperationPhase(Enum):
    """Operation phases for progress tracking."""

    PREPARING = "preparing"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class BatchResult:
    """Outcome of one uploaded batch, handed to the caller on each step."""

    keys: List[str] = field(default_factory=list)
    link_uris: List[str] = field(default_factory=list)
    updated_metadata: List[MetadataDocument] = field(default_factory=list)
    size: int = 0
    transaction_ids: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True for the initial result yielded before any work."""
        return not self.keys

    def __len__(self) -> int:
        return len(self.keys)


@dataclass
class UploadProgress:
    """Progress information for upload callbacks."""

    phase: OperationPhase
    current: int = 0
    total: int = 0
    message: str = ""
    batch_id: int = 0
    bytes_sent: int = 0

    @property
    def mb_sent(self) -> float:
        """Return megabytes sent."""
        return self.bytes_sent / (1024 * 1024)


@dataclass
class UploadSummary:
    """Summary of the complete upload operation."""

    success: bool
    total_pairs: int
    uploaded_pairs: int
    skipped_pairs: int
    batches: int
    total_bytes: int
    duration: float
    transaction_ids: List[str] = field(default_factory=list)

    @property
    def total_size_mb(self) -> float:
        return self.total_bytes / (1024 * 1024)

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_size_mb / self.duration
