"""Tests for bundlectl package imports and exports."""

from __future__ import annotations


class TestPackageImports:
    """Tests for package imports."""

    def test_import_bundlectl(self):
        import bundlectl

        assert hasattr(bundlectl, "__version__")
        assert bundlectl.BatchUploadOrchestrator is not None

    def test_import_core_modules(self):
        from bundlectl.core import (
            cache,
            client,
            config,
            exceptions,
            logging,
            output,
            signing,
            validation,
        )

        assert cache is not None
        assert client is not None
        assert config is not None
        assert exceptions is not None
        assert logging is not None
        assert output is not None
        assert signing is not None
        assert validation is not None

    def test_import_uploaders(self):
        from bundlectl.uploaders import bundle, common, constants, orchestrator, units

        assert bundle is not None
        assert common is not None
        assert constants is not None
        assert orchestrator is not None
        assert units is not None

    def test_import_cli(self):
        from bundlectl.cli import common, config_cmd, main, upload

        assert main is not None
        assert common is not None
        assert config_cmd is not None
        assert upload is not None


class TestExceptionHierarchy:
    """Tests for exception hierarchy."""

    def test_base_error(self):
        from bundlectl.core.exceptions import BundleCtlError

        exc = BundleCtlError("test error", {"key": "0"})
        assert str(exc) == "test error (key=0)"
        assert isinstance(exc, Exception)

    def test_oversized_pair_error(self):
        from bundlectl.core.exceptions import AssetError, OversizedPairError

        exc = OversizedPairError("7", 3 * 1024 * 1024, 1024 * 1024)
        assert isinstance(exc, AssetError)
        assert "Asset pair 7 too big (3.000MB)" in str(exc)
        assert "1.000MB" in str(exc)

    def test_network_errors(self):
        from bundlectl.core.exceptions import ConnectionError, NetworkError, RetryExhaustedError

        exc = NetworkError("https://arweave.net", "connection failed")
        assert "arweave.net" in str(exc)
        assert isinstance(RetryExhaustedError("POST /tx", 3, exc), ConnectionError)

    def test_upload_error_details(self):
        from bundlectl.core.exceptions import OperationError, UploadError

        exc = UploadError("rejected", unit_id="abc")
        assert isinstance(exc, OperationError)
        assert exc.details == {"operation": "upload", "unit": "abc"}
