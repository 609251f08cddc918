"""
Differential sampling of block-device counters.

The kernel exposes cumulative, monotonically increasing counters. This module
turns two consecutive snapshots into an increment (`get_inc_disk_stats`),
an increment into per-interval rates (`get_disk_perf`), and keeps the
previous snapshot between ticks (`DiskStatsSampler`).
"""

import logging
from typing import Optional, Tuple

from ..models.disk import MONOTONIC_FIELDS, DiskPerf, DiskStats

logger = logging.getLogger(__name__)

SECTOR_SIZE = 512
MSEC_PER_SEC = 1000


def get_inc_disk_stats(prev: DiskStats, curr: DiskStats) -> Optional[DiskStats]:
    """
    Compute the field-wise increment between two snapshots of the same device.

    Args:
        prev: The earlier snapshot.
        curr: The later snapshot.

    Returns:
        The increment covering (prev.end_time, curr.end_time], or None if the
        interval is degenerate (no elapsed time) or any monotonic counter went
        backwards (counter reset).
    """
    if curr.end_time <= prev.end_time:
        logger.debug(
            f"Discarding disk interval with no elapsed time "
            f"({prev.end_time} -> {curr.end_time} ms)"
        )
        return None

    inc = DiskStats()
    for name in MONOTONIC_FIELDS:
        delta = getattr(curr, name) - getattr(prev, name)
        if delta < 0:
            logger.debug(
                f"Discarding disk interval: counter '{name}' went backwards "
                f"({getattr(prev, name)} -> {getattr(curr, name)})"
            )
            return None
        setattr(inc, name, delta)

    # In-flight is an instantaneous gauge, not a counter.
    inc.io_in_flight = curr.io_in_flight
    inc.start_time = prev.end_time
    inc.end_time = curr.end_time
    inc.counter = 1
    inc.io_avg = float(inc.io_ticks)
    return inc


def add_disk_stats(src: DiskStats, dst: DiskStats) -> None:
    """
    Accumulate the increment `src` into `dst`, in place.

    `dst` spans from its first accumulated interval to the end of `src`;
    `io_avg` becomes the running mean of the per-interval busy time.
    """
    if dst.counter == 0:
        dst.start_time = src.start_time
    for name in MONOTONIC_FIELDS:
        setattr(dst, name, getattr(dst, name) + getattr(src, name))
    dst.io_in_flight = src.io_in_flight
    dst.end_time = src.end_time

    total = dst.counter + src.counter
    if total:
        dst.io_avg = (dst.io_avg * dst.counter + src.io_avg * src.counter) / total
    dst.counter = total


def get_disk_perf(inc: DiskStats) -> DiskPerf:
    """
    Convert an increment into per-second rates and average queue depth.

    Rates are computed as `delta * 1000 / elapsed_ms` so that whole-number
    inputs over whole-millisecond intervals stay exact.
    """
    elapsed_ms = inc.end_time - inc.start_time
    if elapsed_ms <= 0:
        return DiskPerf()

    return DiskPerf(
        read_perf=inc.read_sectors * SECTOR_SIZE * MSEC_PER_SEC / elapsed_ms,
        read_ios=inc.read_ios * MSEC_PER_SEC / elapsed_ms,
        write_perf=inc.write_sectors * SECTOR_SIZE * MSEC_PER_SEC / elapsed_ms,
        write_ios=inc.write_ios * MSEC_PER_SEC / elapsed_ms,
        queue=inc.io_in_queue / elapsed_ms,
    )


class DiskStatsSampler:
    """
    Holds the previous snapshot and yields one (increment, perf) pair per
    valid interval.

    The previous snapshot always advances to the newest reading, including
    when the interval is discarded, so a counter reset costs exactly one
    interval.
    """

    def __init__(self) -> None:
        self.previous: Optional[DiskStats] = None
        self.discarded = 0

    def sample(self, stats: DiskStats) -> Optional[Tuple[DiskStats, DiskPerf]]:
        """
        Feed a new snapshot.

        Returns:
            (increment, perf) for a valid interval, or None for the first
            snapshot and for discarded intervals.
        """
        prev = self.previous
        self.previous = stats.copy()

        if prev is None:
            logger.debug("First disk snapshot stored, no interval yet")
            return None

        inc = get_inc_disk_stats(prev, stats)
        if inc is None:
            self.discarded += 1
            return None

        return inc, get_disk_perf(inc)

    def reset(self) -> None:
        self.previous = None
