"""Logging setup and per-batch log context for bundlectl."""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure root logging on stderr.

    ``quiet`` wins over ``verbose``. HTTP client chatter is kept at WARNING.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, stream=sys.stderr)

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# =============================================================================
# Batch Log
# =============================================================================


class BatchLog:
    """Timed log scope for one batch upload.

    Logs a start line with the batch fields on entry, and a completion line
    (pair count, elapsed seconds) or a failure line on exit. Exceptions are
    never suppressed.
    """

    def __init__(self, logger: logging.Logger, batch: int, **fields: Any):
        self.logger = logger
        self.batch = batch
        self.fields = fields
        self.pairs_done = 0
        self._started = 0.0

    @property
    def elapsed(self) -> float:
        if not self._started:
            return 0.0
        return time.monotonic() - self._started

    def _fields(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.fields.items())

    def __enter__(self) -> BatchLog:
        self._started = time.monotonic()
        self.logger.info("Batch %d started (%s)", self.batch, self._fields())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is not None:
            self.logger.error(
                "Batch %d failed after %.2fs with %d pair(s) processed: %s",
                self.batch,
                self.elapsed,
                self.pairs_done,
                exc_val,
            )
            return
        self.logger.info(
            "Batch %d uploaded %d pair(s) in %.2fs", self.batch, self.pairs_done, self.elapsed
        )

    def pair_done(self, key: str) -> None:
        """Record that a pair's units are built."""
        self.pairs_done += 1
        self.logger.debug("Batch %d: processed file pair %s", self.batch, key)


@contextmanager
def batch_log(
    logger: Optional[logging.Logger], batch: int, **fields: Any
) -> Generator[BatchLog, None, None]:
    """Open a :class:`BatchLog` on ``logger`` (the bundlectl logger by default)."""
    with BatchLog(logger or logging.getLogger("bundlectl"), batch, **fields) as log:
        yield log
