"""Tests for the storage network HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from bundlectl.core.client import StorageClient
from bundlectl.core.exceptions import (
    AuthenticationError,
    FundingError,
    InvalidURLError,
    RetryExhaustedError,
    ServerUnreachableError,
    UploadError,
)
from bundlectl.core.signing import Tag

GATEWAY = "https://gateway.test"
BUNDLER = "https://bundler.test"


def _client(handler, **kwargs) -> StorageClient:
    return StorageClient(
        gateway_url=GATEWAY,
        bundler_url=BUNDLER,
        backoff_base=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class Recorder:
    """MockTransport handler replaying canned responses."""

    def __init__(self, *responses: httpx.Response | Exception):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return httpx.Response(
            response.status_code, headers=response.headers, content=response.content
        )


class TestStorageClientInit:
    def test_urls_are_normalized(self):
        client = StorageClient(gateway_url="https://gateway.test/", bundler_url=BUNDLER)
        assert client.gateway_url == GATEWAY

    def test_invalid_url(self):
        with pytest.raises(InvalidURLError):
            StorageClient(gateway_url="ftp://gateway.test")

    def test_context_manager_closes(self):
        with _client(Recorder(httpx.Response(200))) as client:
            client._get_client()
        assert client._client is None


class TestGateway:
    def test_post_aggregate_sends_raw_envelope(self, fake_signer):
        recorder = Recorder(httpx.Response(200, text="OK"))
        aggregate = fake_signer.sign(b"bundle-bytes", [Tag("Bundle-Format", "binary")])

        tx_id = _client(recorder).post_aggregate_transaction(aggregate)

        assert tx_id == aggregate.id
        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{GATEWAY}/tx"
        assert request.content == aggregate.raw
        assert request.headers["content-type"] == "application/octet-stream"


class TestBundler:
    def test_estimate_cost(self):
        recorder = Recorder(httpx.Response(200, text="12345\n"))

        assert _client(recorder).estimate_cost(2048) == 12345
        assert str(recorder.requests[0].url) == f"{BUNDLER}/price/2048"

    def test_estimate_cost_bad_response(self):
        with pytest.raises(UploadError):
            _client(Recorder(httpx.Response(200, text="not a number"))).estimate_cost(1)

    def test_get_balance(self):
        recorder = Recorder(httpx.Response(200, json={"balance": "500"}))

        assert _client(recorder).get_balance("addr") == 500
        assert recorder.requests[0].url.params["address"] == "addr"

    def test_fund(self):
        recorder = Recorder(httpx.Response(200, json={"id": "fund-tx"}))

        assert _client(recorder).fund(42, "addr") == "fund-tx"
        assert json.loads(recorder.requests[0].content) == {"amount": 42, "address": "addr"}

    def test_fund_unconfirmed(self):
        with pytest.raises(FundingError) as exc_info:
            _client(Recorder(httpx.Response(200, json={}))).fund(42, "addr")
        assert exc_info.value.amount == 42

    def test_post_unit_uses_reported_id(self, fake_signer):
        unit = fake_signer.sign(b"data", [])
        recorder = Recorder(httpx.Response(200, json={"id": "bundler-id"}))

        assert _client(recorder).post_unit_transaction(unit) == "bundler-id"
        assert str(recorder.requests[0].url) == f"{BUNDLER}/tx"

    def test_post_unit_defaults_to_unit_id(self, fake_signer):
        unit = fake_signer.sign(b"data", [])

        assert _client(Recorder(httpx.Response(200, text="OK"))).post_unit_transaction(unit) == (
            unit.id
        )


class TestRetries:
    def test_retries_transient_status(self):
        recorder = Recorder(httpx.Response(503), httpx.Response(200, text="7"))

        assert _client(recorder).estimate_cost(1) == 7
        assert len(recorder.requests) == 2

    def test_retries_connect_errors(self):
        recorder = Recorder(httpx.ConnectError("refused"), httpx.Response(200, text="7"))

        assert _client(recorder).estimate_cost(1) == 7

    def test_exhausted_retries(self):
        recorder = Recorder(httpx.Response(502))

        with pytest.raises(RetryExhaustedError) as exc_info:
            _client(recorder, max_retries=2).estimate_cost(1)

        assert exc_info.value.attempts == 3
        assert len(recorder.requests) == 3

    def test_exhausted_connect_errors_keep_last_error(self):
        with pytest.raises(RetryExhaustedError) as exc_info:
            _client(Recorder(httpx.ConnectError("refused")), max_retries=1).estimate_cost(1)

        assert isinstance(exc_info.value.last_error, ServerUnreachableError)

    def test_auth_errors_are_not_retried(self):
        recorder = Recorder(httpx.Response(401))

        with pytest.raises(AuthenticationError):
            _client(recorder).estimate_cost(1)
        assert len(recorder.requests) == 1

    def test_client_errors_are_not_retried(self):
        recorder = Recorder(httpx.Response(400, text="bad envelope"))

        with pytest.raises(UploadError, match="bad envelope"):
            _client(recorder).estimate_cost(1)
        assert len(recorder.requests) == 1
