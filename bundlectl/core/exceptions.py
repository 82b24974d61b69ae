"""Exception hierarchy for bundlectl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class BundleCtlError(Exception):
    """Base exception for all bundlectl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BundleCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(BundleCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class PathValidationError(ValidationError):
    """Path validation failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid path: {path} - {reason}", field="path", value=path)
        self.path = path
        self.reason = reason


# =============================================================================
# Asset Errors
# =============================================================================


class AssetError(BundleCtlError):
    """Error related to an asset pair."""


class OversizedPairError(AssetError):
    """A single asset pair does not fit under the batch size ceiling.

    The pair cannot be split, so no progress is possible past it.
    """

    def __init__(self, key: str, size: int, ceiling: int):
        super().__init__(
            f"Asset pair {key} too big ({size / (1024 * 1024):.3f}MB) "
            f"for batch size limit of {ceiling / (1024 * 1024):.3f}MB",
            {"key": key, "size": size, "ceiling": ceiling},
        )
        self.key = key
        self.size = size
        self.ceiling = ceiling


class InvalidMetadataError(AssetError):
    """Metadata document is missing or malformed."""

    def __init__(self, path: str, cause: Exception | str):
        super().__init__(f"Invalid metadata document: {path}: {cause}", {"path": path})
        self.path = path
        self.cause = cause


# =============================================================================
# Signing Errors
# =============================================================================


class SigningError(BundleCtlError):
    """Credential could not be loaded or used for signing."""

    def __init__(self, message: str, key_path: str | None = None):
        details = {"key_path": key_path} if key_path else {}
        super().__init__(message, details)
        self.key_path = key_path


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(BundleCtlError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class RetryExhaustedError(ConnectionError):
    """All retry attempts failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception | None = None):
        msg = f"Operation '{operation}' failed after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


class AuthenticationError(BundleCtlError):
    """The storage node rejected the request's credentials."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(BundleCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during upload."""

    def __init__(
        self,
        message: str,
        unit_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if unit_id:
            full_details["unit"] = unit_id
        super().__init__("upload", message, full_details)
        self.unit_id = unit_id


class FundingError(OperationError):
    """Funding the bundler account failed."""

    def __init__(self, message: str, amount: int | None = None):
        details = {"amount": amount} if amount is not None else {}
        super().__init__("fund", message, details)
        self.amount = amount
