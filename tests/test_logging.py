"""Tests for logging setup and the per-batch log scope."""

from __future__ import annotations

import logging

import pytest

from bundlectl.core.logging import BatchLog, batch_log, setup_logging

LOGGER = logging.getLogger("bundlectl.tests")


class TestBatchLog:
    def test_logs_start_and_completion(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.DEBUG, logger="bundlectl.tests")

        with batch_log(LOGGER, 3, pairs=2, size_mb="0.001") as log:
            log.pair_done("0")
            log.pair_done("1")

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Batch 3 started (pairs=2 size_mb=0.001)"
        assert "Batch 3: processed file pair 1" in messages
        assert messages[-1].startswith("Batch 3 uploaded 2 pair(s) in ")
        assert log.pairs_done == 2

    def test_failure_is_logged_and_reraised(self, caplog: pytest.LogCaptureFixture):
        caplog.set_level(logging.INFO, logger="bundlectl.tests")

        with pytest.raises(RuntimeError, match="boom"):
            with batch_log(LOGGER, 1) as log:
                log.pair_done("0")
                raise RuntimeError("boom")

        error = caplog.records[-1]
        assert error.levelno == logging.ERROR
        assert "Batch 1 failed" in error.getMessage()
        assert "1 pair(s) processed: boom" in error.getMessage()

    def test_elapsed_before_entry(self):
        assert BatchLog(LOGGER, 1).elapsed == 0.0


class TestSetupLogging:
    def test_quiets_http_clients(self):
        setup_logging(verbose=True)

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
