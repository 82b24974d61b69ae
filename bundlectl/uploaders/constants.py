"""Shared constants for uploader modules."""

from bundlectl.core.config import DEFAULT_APP_NAME, DEFAULT_BATCH_SIZE_LIMIT  # noqa: F401

# =============================================================================
# Batching
# =============================================================================

# Ceiling for the cumulative size of the asset pairs in one batch
BATCH_SIZE_BYTE_LIMIT = DEFAULT_BATCH_SIZE_LIMIT

# Metadata document extension; payload extensions vary per asset
METADATA_EXT = ".json"

# =============================================================================
# Tags
# =============================================================================

APP_NAME_TAG = "App-Name"
CONTENT_TYPE_TAG = "Content-Type"

JSON_CONTENT_TYPE = "application/json"
LINK_DOCUMENT_CONTENT_TYPE = "application/x.arweave-manifest+json"
FALLBACK_CONTENT_TYPE = "application/octet-stream"

# Tags marking an aggregate transaction as a bundle of signed units
BUNDLE_FORMAT_TAGS = (
    ("Bundle-Format", "binary"),
    ("Bundle-Version", "2.0.0"),
)

# Length of an address string (base64url of a 32-byte digest)
ADDRESS_LENGTH = 43
