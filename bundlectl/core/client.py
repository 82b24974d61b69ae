"""HTTP client for the storage network.

Talks to two kinds of nodes:

- a gateway, which accepts whole (aggregate) transactions;
- a bundler, which prices, funds, and accepts individual signed units.

Provides retry logic with exponential backoff on transient failures.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from bundlectl.core.config import DEFAULT_BUNDLER_URL, DEFAULT_GATEWAY_URL, DEFAULT_TIMEOUT
from bundlectl.core.exceptions import (
    AuthenticationError,
    FundingError,
    NetworkError,
    RetryExhaustedError,
    ServerUnreachableError,
    UploadError,
)
from bundlectl.core.signing import SignedUnit
from bundlectl.core.validation import validate_server_url

# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
OCTET_STREAM = {"Content-Type": "application/octet-stream"}


# =============================================================================
# StorageClient
# =============================================================================


@dataclass
class StorageClient:
    """HTTP client for gateway and bundler nodes with retry."""

    gateway_url: str = DEFAULT_GATEWAY_URL
    bundler_url: str = DEFAULT_BUNDLER_URL
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base: int = RETRY_BACKOFF_BASE
    verify_ssl: bool = True
    transport: httpx.BaseTransport | None = field(default=None, repr=False)
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URLs."""
        self.gateway_url = validate_server_url(self.gateway_url)
        self.bundler_url = validate_server_url(self.bundler_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> StorageClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # HTTP
    # =========================================================================

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute HTTP request with retry logic.

        Args:
            method: HTTP method.
            url: Absolute URL.
            params: Query parameters.
            json: JSON body.
            content: Raw body.
            headers: Additional headers.

        Returns:
            HTTP response.

        Raises:
            AuthenticationError: On HTTP 401/403.
            UploadError: On other non-retryable HTTP errors.
            RetryExhaustedError: If all retries fail.
        """
        client = self._get_client()
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                resp = client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    content=content,
                    headers=headers,
                )

                if resp.status_code in (401, 403):
                    raise AuthenticationError(url, f"HTTP {resp.status_code}")

                if resp.status_code in RETRYABLE_STATUS_CODES:
                    last_error = NetworkError(url, f"HTTP {resp.status_code}")
                else:
                    if resp.is_error:
                        raise UploadError(
                            f"HTTP {resp.status_code}: {resp.text[:200]}",
                            details={"url": url},
                        )
                    return resp

            except httpx.ConnectError:
                last_error = ServerUnreachableError(url)
            except httpx.TimeoutException:
                last_error = NetworkError(url, f"Timeout after {self.timeout}s")

            # Retry with backoff
            if attempt < self.max_retries:
                time.sleep(self.backoff_base ** (attempt + 1))

        raise RetryExhaustedError(f"{method} {url}", self.max_retries + 1, last_error)

    # =========================================================================
    # Gateway
    # =========================================================================

    def post_aggregate_transaction(self, aggregate: SignedUnit) -> str:
        """Post a signed aggregate (bundle) as a single transaction.

        Returns:
            Transaction id.
        """
        self._request(
            "POST",
            f"{self.gateway_url}/tx",
            content=aggregate.raw,
            headers=OCTET_STREAM,
        )
        return aggregate.id

    # =========================================================================
    # Bundler
    # =========================================================================

    def estimate_cost(self, byte_count: int) -> int:
        """Price, in the bundler's base currency unit, of storing byte_count bytes."""
        resp = self._request("GET", f"{self.bundler_url}/price/{byte_count}")
        try:
            return int(resp.text.strip())
        except ValueError as e:
            raise UploadError(f"Unexpected price response: {resp.text[:200]}") from e

    def get_balance(self, address: str) -> int:
        """Current bundler balance for an address."""
        resp = self._request(
            "GET",
            f"{self.bundler_url}/account/balance",
            params={"address": address},
        )
        data = resp.json()
        return int(data.get("balance", 0))

    def fund(self, amount: int, address: str) -> str:
        """Top up the bundler account.

        Returns:
            Funding transaction id.

        Raises:
            FundingError: If the bundler does not confirm the top-up.
        """
        resp = self._request(
            "POST",
            f"{self.bundler_url}/account/fund",
            json={"amount": amount, "address": address},
        )
        data = resp.json()
        tx_id = data.get("id")
        if not tx_id:
            raise FundingError("Bundler did not confirm funding", amount=amount)
        return str(tx_id)

    def post_unit_transaction(self, unit: SignedUnit) -> str:
        """Post a single signed unit to the bundler.

        Returns:
            Transaction id reported by the bundler (defaults to the unit id).
        """
        resp = self._request(
            "POST",
            f"{self.bundler_url}/tx",
            content=unit.raw,
            headers=OCTET_STREAM,
        )
        if resp.headers.get("content-type", "").startswith("application/json"):
            return str(resp.json().get("id", unit.id))
        return unit.id
