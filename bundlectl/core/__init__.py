"""Core modules for bundlectl."""

from bundlectl.core.cache import UploadCache
from bundlectl.core.client import StorageClient
from bundlectl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from bundlectl.core.exceptions import (
    AuthenticationError,
    BundleCtlError,
    ConfigurationError,
    ConnectionError,
    InvalidMetadataError,
    NetworkError,
    OperationError,
    OversizedPairError,
    RetryExhaustedError,
    SigningError,
    UploadError,
    ValidationError,
)
from bundlectl.core.logging import BatchLog, batch_log, setup_logging
from bundlectl.core.signing import (
    ArweaveSigner,
    SignedUnit,
    Signer,
    SolanaSigner,
    Tag,
    load_signer,
)

__all__ = [
    # Exceptions
    "BundleCtlError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "InvalidMetadataError",
    "NetworkError",
    "OperationError",
    "OversizedPairError",
    "RetryExhaustedError",
    "SigningError",
    "UploadError",
    "ValidationError",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "StorageClient",
    # Signing
    "ArweaveSigner",
    "SolanaSigner",
    "SignedUnit",
    "Signer",
    "Tag",
    "load_signer",
    # Cache
    "UploadCache",
    # Logging
    "setup_logging",
    "BatchLog",
    "batch_log",
]
