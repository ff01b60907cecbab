"""Recurring cleanup of retired heatmap detections.

The scheduler reads a snapshot of the store, reconciles it and deletes every
retired detection. Deletions are applied in sequential batches; inside a batch
they run concurrently on a small thread pool. One failed deletion never aborts
the run.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from wastemap.config.settings import Settings
from wastemap.detection.reconciler import DetectionReconciler, ReconcileResult
from wastemap.store.base import DetectionNotFoundError, DetectionStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500  # Firestore batch write limit


@dataclass
class CleanupStats:
    """Counts from a single cleanup run."""

    total_processed: int = 0
    cleaned_count: int = 0
    removed_count: int = 0
    error_count: int = 0
    already_absent_count: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_processed": self.total_processed,
            "cleaned_count": self.cleaned_count,
            "removed_count": self.removed_count,
            "error_count": self.error_count,
            "already_absent_count": self.already_absent_count,
            "timestamp": self.timestamp.isoformat(),
        }

    def summary(self) -> Dict[str, int]:
        """Result shown for a manual "clean now" trigger."""
        return {"removed_detections": self.removed_count, "errors": self.error_count}


class ScheduleHandle:
    """Handle for a running schedule, returned by :meth:`CleanupScheduler.start`."""

    def __init__(self, interval_seconds: float):
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        """True until the schedule is stopped."""
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the schedule thread, including any in-flight run."""
        if self._thread is not None:
            self._thread.join(timeout)


def _batches(ids: List[str], size: int) -> Iterator[List[str]]:
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


class CleanupScheduler:
    """Periodically reconciles the store and deletes retired detections.

    Runs are not serialised: a manual :meth:`run_once` may overlap a scheduled
    one. Both work from their own snapshot and deleting an id that is already
    gone is counted as ``already_absent``, not as an error.

    Attributes:
        store: Detection store to read from and delete in
        reconciler: Engine deciding which records to retire
        batch_size: Maximum deletions per batch
        max_workers: Concurrent deletions within a batch
    """

    def __init__(
        self,
        store: DetectionStore,
        reconciler: Optional[DetectionReconciler] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_workers: int = 4,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.store = store
        self.reconciler = reconciler or DetectionReconciler()
        self.batch_size = batch_size
        self.max_workers = max_workers
        self._last_stats: Optional[CleanupStats] = None
        self._stats_lock = threading.Lock()

    @classmethod
    def from_settings(cls, store: DetectionStore, settings: Settings) -> "CleanupScheduler":
        """Build a scheduler from application settings."""
        return cls(
            store,
            reconciler=DetectionReconciler(
                lat_threshold=settings.reconcile.lat_threshold,
                lon_threshold=settings.reconcile.lon_threshold,
            ),
            batch_size=settings.cleanup.batch_size,
            max_workers=settings.cleanup.max_workers,
        )

    def run_once(self) -> CleanupStats:
        """Reconcile the store and delete retired detections.

        Returns:
            Statistics for this run

        Raises:
            StoreReadError: If the store snapshot could not be read
        """
        logger.info("Starting cleanup run")
        records = self.store.list_detections()
        stats = self.apply(self.reconciler.reconcile(records))

        logger.info(
            "Cleanup finished: %d processed, %d cleaned signals, %d removed, "
            "%d already absent, %d errors",
            stats.total_processed,
            stats.cleaned_count,
            stats.removed_count,
            stats.already_absent_count,
            stats.error_count,
        )

        with self._stats_lock:
            self._last_stats = stats
        return stats

    def apply(self, result: ReconcileResult) -> CleanupStats:
        """Delete the detections retired by an already computed reconciliation.

        Failed deletions are counted, never raised.
        """
        stats = CleanupStats(
            total_processed=len(result.active_records)
            + len(result.cleaned_records)
            + len(result.invalid_records)
            + len(result.retired_ids),
            cleaned_count=len(result.cleaned_records),
        )

        retired_ids = result.retired_ids
        if not retired_ids:
            logger.info("Nothing to clean (%d detections checked)", stats.total_processed)
        else:
            self._delete_all(retired_ids, stats)
        return stats

    def get_stats(self) -> Optional[CleanupStats]:
        """Statistics of the last completed run, or None before any run."""
        with self._stats_lock:
            return self._last_stats

    def start(self, interval_seconds: float) -> ScheduleHandle:
        """Run a cleanup now and then every ``interval_seconds``.

        Returns:
            Handle to pass to :meth:`stop`
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        handle = ScheduleHandle(interval_seconds)
        thread = threading.Thread(
            target=self._loop,
            args=(handle,),
            name="wastemap-cleanup",
            daemon=True,
        )
        handle._thread = thread
        logger.info("Starting automatic cleanup every %.0f seconds", interval_seconds)
        thread.start()
        return handle

    def stop(self, handle: ScheduleHandle) -> None:
        """Cancel future runs. Stopping a stopped handle does nothing."""
        if handle.stopped:
            return
        logger.info("Stopping automatic cleanup")
        handle._stop_event.set()

    def _loop(self, handle: ScheduleHandle) -> None:
        while not handle.stopped:
            self._run_scheduled()
            if handle._stop_event.wait(handle.interval_seconds):
                break

    def _run_scheduled(self) -> None:
        try:
            self.run_once()
        except Exception:
            # Retried on the next tick
            logger.exception("Scheduled cleanup failed")

    def _delete_all(self, ids: List[str], stats: CleanupStats) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for number, batch in enumerate(_batches(ids, self.batch_size), start=1):
                futures = {pool.submit(self._delete_one, record_id): record_id for record_id in batch}
                for future in as_completed(futures):
                    record_id = futures[future]
                    try:
                        deleted = future.result()
                    except Exception:
                        logger.exception("Failed to delete detection %s", record_id)
                        stats.error_count += 1
                        continue
                    if deleted:
                        stats.removed_count += 1
                    else:
                        logger.debug("Detection %s was already removed", record_id)
                        stats.already_absent_count += 1
                logger.debug("Committed batch %d of %d deletions", number, len(batch))

    def _delete_one(self, record_id: str) -> bool:
        try:
            return bool(self.store.delete_detection(record_id))
        except DetectionNotFoundError:
            return False
