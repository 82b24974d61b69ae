"""Input validation helpers for bundlectl."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from bundlectl.core.exceptions import InvalidURLError, PathValidationError, ValidationError


def validate_server_url(url: str) -> str:
    """Validate and normalize a gateway or bundler URL.

    Args:
        url: URL to validate.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If the URL has no http(s) scheme or no host.
    """
    if not url or not url.strip():
        raise InvalidURLError(url, "URL is empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")

    return url.rstrip("/")


def validate_batch_size_limit(limit: int) -> int:
    """Validate a batch size ceiling in bytes.

    Raises:
        ValidationError: If the ceiling is not positive.
    """
    if limit <= 0:
        raise ValidationError(
            f"Batch size limit must be positive: {limit}",
            field="batch_size_limit",
            value=limit,
        )
    return limit


def validate_assets_dir(path: str | Path) -> Path:
    """Validate that an assets directory exists.

    Raises:
        PathValidationError: If the path is missing or not a directory.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise PathValidationError(str(path), "does not exist")
    if not p.is_dir():
        raise PathValidationError(str(path), "not a directory")
    return p
