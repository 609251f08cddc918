"""
Periodic publication of accumulated disk statistics.

DiskStatsPublisher sums the valid increments of a device over a publish period
(one hour by default) and hands a DiskStatsReport to a callback whenever the
period is complete.
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, List, Optional

from ..models.disk import DiskStats, DiskStatsReport
from .sampler import DiskStatsSampler, add_disk_stats, get_disk_perf

logger = logging.getLogger(__name__)


class DiskStatsPublisher:
    """
    Accumulates disk increments and publishes them once per period.

    Attributes:
        period_ms: Span of accumulated intervals per report, in milliseconds.
        reports: The newest `max_reports` published reports, oldest first.
    """

    def __init__(
        self,
        period_seconds: float = 3600.0,
        on_publish: Optional[Callable[[DiskStatsReport], None]] = None,
        max_reports: int = 100,
    ):
        if period_seconds <= 0:
            raise ValueError(f"period_seconds must be > 0, got {period_seconds}")
        self.period_ms = int(period_seconds * 1000)
        self.reports: Deque[DiskStatsReport] = deque(maxlen=max_reports)
        self._on_publish = on_publish
        self._sampler = DiskStatsSampler()
        self._accumulate = DiskStats()
        self._lock = threading.RLock()

    @property
    def previous(self) -> Optional[DiskStats]:
        return self._sampler.previous

    def update(self, stats: DiskStats) -> Optional[DiskStatsReport]:
        """
        Feed one raw snapshot.

        Returns:
            The report published by this call, if the period completed.
        """
        with self._lock:
            result = self._sampler.sample(stats)
            if result is None:
                return None
            inc, _ = result
            add_disk_stats(inc, self._accumulate)

            span = self._accumulate.end_time - self._accumulate.start_time
            if span < self.period_ms:
                return None
            report = self._publish_locked("periodic")

        self._notify(report)
        return report

    def flush(self) -> Optional[DiskStatsReport]:
        """Publish whatever has been accumulated so far."""
        with self._lock:
            if self._accumulate.counter == 0:
                return None
            report = self._publish_locked("flush")
        self._notify(report)
        return report

    def _publish_locked(self, reason: str) -> DiskStatsReport:
        acc = self._accumulate
        report = DiskStatsReport(stats=acc, perf=get_disk_perf(acc), reason=reason)
        self.reports.append(report)
        self._accumulate = DiskStats()
        logger.info(
            f"Disk stats ({reason}): {acc.counter} intervals, "
            f"read {acc.read_ios} ios / {acc.read_sectors} sectors, "
            f"write {acc.write_ios} ios / {acc.write_sectors} sectors, "
            f"avg busy {acc.io_avg:.1f} ms/interval"
        )
        return report

    def _notify(self, report: DiskStatsReport) -> None:
        if self._on_publish is None:
            return
        try:
            self._on_publish(report)
        except Exception as e:
            logger.warning(f"Disk stats publish callback failed: {e}")

    def get_reports(self) -> List[DiskStatsReport]:
        with self._lock:
            return list(self.reports)
