"""
backend/session.py

AnalysisSession: the "dataset context".

Owns one Aggregator (and through it one ThreatModel, so weights learned on
one upload carry over to the next) and the current AggregateMetrics.

Upload flow:
  validate extension → (lock) → read → decode → parse → aggregate → swap

The metrics are replaced in a single assignment, only after a successful
analysis; any failure leaves the previous result in place. One analysis
runs at a time: a second upload while one is in flight is rejected with
AnalysisInProgress, and so are apply_config() and reset() until it ends.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator

from .aggregation import Aggregator
from .config import settings
from .errors import (
    AnalysisFailed,
    AnalysisInProgress,
    DatasetReadError,
    LeakGuardError,
    NoDataAvailable,
    UnsupportedFileType,
)
from .ingest import decode_upload, parse_csv_text, validate_filename
from .metrics import METRICS
from .models import AggregateMetrics
from .report import format_report, report_filename
from .scoring import ModelState

logger = logging.getLogger(__name__)


class AnalysisSession:
    def __init__(self, aggregator: Aggregator | None = None) -> None:
        self.aggregator = aggregator or Aggregator()
        self.metrics: AggregateMetrics | None = None
        self.report_list_limit = settings.REPORT_LIST_LIMIT
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_content(self, filename: str, content: bytes) -> AggregateMetrics:
        METRICS.uploads_received.inc()
        self._validate(filename)
        self._acquire()
        try:
            return self._analyze(filename, content)
        finally:
            self._lock.release()

    async def analyze_upload(
        self, filename: str, read: Callable[[int], Awaitable[bytes]]
    ) -> AggregateMetrics:
        """
        Validate first, then read; the read is skipped for rejected names.

        At most MAX_UPLOAD_BYTES + 1 bytes are read, enough for
        decode_upload to reject an oversized file. The lock stays held
        until the worker thread finishes, even if this coroutine is
        cancelled.
        """
        METRICS.uploads_received.inc()
        self._validate(filename)
        self._acquire()
        try:
            try:
                content = await read(settings.MAX_UPLOAD_BYTES + 1)
            except Exception as exc:
                METRICS.uploads_rejected.inc()
                logger.warning("Could not read upload %r: %s", filename, exc)
                raise DatasetReadError(f"could not read {filename!r}: {exc}") from exc
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(None, self._analyze, filename, content)
        except BaseException:
            self._lock.release()
            raise
        future.add_done_callback(self._worker_done)
        return await asyncio.shield(future)

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def require_metrics(self) -> AggregateMetrics:
        if self.metrics is None:
            raise NoDataAvailable("No data available")
        return self.metrics

    def generate_report(self) -> str:
        metrics = self.require_metrics()
        report = format_report(metrics, list_limit=self.report_list_limit)
        METRICS.reports_generated.inc()
        return report

    def report_filename(self) -> str:
        return report_filename(self.require_metrics())

    # ------------------------------------------------------------------
    # Tunables
    # ------------------------------------------------------------------

    def apply_config(
        self,
        risk_threshold: float | None = None,
        min_training_rows: int | None = None,
        report_list_limit: int | None = None,
    ) -> None:
        """Raises AnalysisInProgress while an analysis is running."""
        with self._idle("change configuration"):
            if risk_threshold is not None:
                self.aggregator.scorer.threshold = risk_threshold
                self.aggregator.model.threshold = risk_threshold
            if min_training_rows is not None:
                self.aggregator.min_training_rows = min_training_rows
            if report_list_limit is not None:
                self.report_list_limit = report_list_limit

    def reset(self) -> None:
        """Forget the current metrics and any learned weights."""
        with self._idle("reset the session"):
            self.metrics = None
            self.aggregator.model.state = ModelState()
        logger.info("Session reset")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _idle(self, action: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            logger.warning("Cannot %s: an analysis is in progress", action)
            raise AnalysisInProgress(f"Cannot {action} while an analysis is running")
        try:
            yield
        finally:
            self._lock.release()

    def _worker_done(self, future: asyncio.Future) -> None:
        self._lock.release()
        # _analyze has already logged any failure
        if not future.cancelled():
            future.exception()

    def _validate(self, filename: str) -> None:
        try:
            validate_filename(filename)
        except UnsupportedFileType as exc:
            METRICS.uploads_rejected.inc()
            logger.warning("Rejected upload: %s", exc)
            raise

    def _acquire(self) -> None:
        if not self._lock.acquire(blocking=False):
            METRICS.uploads_rejected.inc()
            logger.warning("Rejected upload: another analysis is in progress")
            raise AnalysisInProgress("An analysis is already running")

    def _analyze(self, filename: str, content: bytes) -> AggregateMetrics:
        logger.info("Analyzing %r (%d bytes)", filename, len(content))
        try:
            dataset = parse_csv_text(decode_upload(content))
            metrics = self.aggregator.aggregate(dataset)
        except DatasetReadError as exc:
            METRICS.uploads_rejected.inc()
            logger.warning("Rejected upload %r: %s", filename, exc)
            raise
        except LeakGuardError:
            METRICS.analyses_failed.inc()
            raise
        except Exception as exc:
            METRICS.analyses_failed.inc()
            logger.exception("Analysis of %r failed", filename)
            raise AnalysisFailed(f"analysis of {filename!r} failed: {exc}") from exc

        self.metrics = metrics
        METRICS.analyses_completed.inc()
        logger.info(
            "Analysis of %r complete: %d record(s), %d threat(s)",
            filename, metrics.records_analyzed, metrics.threats_detected,
        )
        return metrics
