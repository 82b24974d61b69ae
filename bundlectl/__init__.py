"""bundlectl - Batch-publish asset pairs to content-addressed storage.

Each asset is a payload file plus a metadata document. This package:
- Groups pairs into size-bounded batches
- Signs payload, metadata, and a linking path manifest for every pair
- Submits each batch as one bundle or as individual transactions
- Records progress so interrupted uploads can resume
"""

__version__ = "0.1.0"

from bundlectl.core.client import StorageClient
from bundlectl.core.config import Config, Profile
from bundlectl.core.exceptions import (
    BundleCtlError,
    ConfigurationError,
    InvalidMetadataError,
    NetworkError,
    OversizedPairError,
    SigningError,
    ValidationError,
)
from bundlectl.uploaders.orchestrator import BatchUploadOrchestrator

__all__ = [
    "__version__",
    "StorageClient",
    "Config",
    "Profile",
    "BatchUploadOrchestrator",
    "BundleCtlError",
    "ConfigurationError",
    "InvalidMetadataError",
    "NetworkError",
    "OversizedPairError",
    "SigningError",
    "ValidationError",
]
