"""
Disk stall detection against a rolling performance baseline.

The DiskStatsMonitor keeps the last `window` per-interval DiskPerf samples,
one StreamStats per metric, and the resulting baseline (mean and standard
deviation). Every accepted interval is compared against that baseline: lower
throughput/IOPS or a deeper queue than `sigma` standard deviations away from
the mean marks the device as stalled.
"""

import logging
import threading
from collections import deque
from dataclasses import replace
from typing import Any, Callable, Deque, Dict, List, Optional

from ..models.disk import DiskPerf, DiskStats, StallEpisode
from .sampler import DiskStatsSampler, add_disk_stats
from .stream_stats import StreamStats

logger = logging.getLogger(__name__)

# Metrics where a drop is bad. Queue depth is the only lower-is-better metric.
HIGHER_IS_BETTER = ("read_perf", "read_ios", "write_perf", "write_ios")
PERF_METRICS = HIGHER_IS_BETTER + ("queue",)

DEFAULT_WINDOW_SIZE = 5
DEFAULT_SIGMA = 1.0


class DiskStatsMonitor:
    """
    Stateful stall detector fed with raw DiskStats snapshots.

    `valid` turns true once the window has been filled for the first time and
    never reverts. `stall` is recomputed on every accepted interval and is
    always false while the monitor is not valid. A discarded interval clears
    it.

    Updates and reads are serialized with a single reentrant lock, so a
    reporting thread never observes a half-evicted window.
    """

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        sigma: float = DEFAULT_SIGMA,
        max_episodes: int = 100,
        on_stall_episode: Optional[Callable[[StallEpisode], None]] = None,
    ):
        """
        Initializes the monitor.

        Args:
            window_size: Number of recent intervals kept for the baseline.
            sigma: Standard deviations a metric may move in the unfavorable
                   direction before the interval counts as stalled.
            max_episodes: Number of finished stall episodes kept in memory.
            on_stall_episode: Optional callback invoked with every finished
                              StallEpisode.

        Raises:
            ValueError: If window_size < 1 or sigma < 0.
        """
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        if sigma < 0:
            raise ValueError(f"sigma must be >= 0, got {sigma}")

        self.window = window_size
        self.sigma = sigma
        self.valid = False
        self.stall = False
        self.mean = DiskPerf()
        self.std = DiskPerf()

        self._buffer: Deque[DiskPerf] = deque()
        self._stats: Dict[str, StreamStats] = {m: StreamStats() for m in PERF_METRICS}
        self._sampler = DiskStatsSampler()
        self._lock = threading.RLock()

        self._current_episode: Optional[StallEpisode] = None
        self._episodes: Deque[StallEpisode] = deque(maxlen=max_episodes)
        self._on_stall_episode = on_stall_episode
        self.accepted = 0

        logger.debug(f"DiskStatsMonitor initialized (window={window_size}, sigma={sigma})")

    # --- Window and baseline ---

    def add(self, perf: DiskPerf) -> None:
        """
        Push a sample into the window, evicting the oldest one on overflow.
        """
        with self._lock:
            self._buffer.append(perf)
            if len(self._buffer) > self.window:
                oldest = self._buffer.popleft()
                for metric, stats in self._stats.items():
                    stats.evict(getattr(oldest, metric))
            for metric, stats in self._stats.items():
                stats.add(getattr(perf, metric))

            if not self.valid and len(self._buffer) >= self.window:
                self.valid = True
                logger.info(
                    f"Disk baseline established after {len(self._buffer)} intervals"
                )

    def refresh_baseline(self) -> None:
        """Recompute the cached mean/std from the per-metric accumulators."""
        with self._lock:
            self.mean = DiskPerf(**{m: s.get_mean() for m, s in self._stats.items()})
            self.std = DiskPerf(**{m: s.get_std() for m, s in self._stats.items()})

    def detect(self, perf: DiskPerf) -> bool:
        """
        Check a sample against the cached baseline.

        A zero standard deviation means zero tolerance: any move in the
        unfavorable direction is reported.

        Returns:
            True if any metric deviates unfavorably by more than sigma * std.
        """
        with self._lock:
            for metric in HIGHER_IS_BETTER:
                if getattr(self.mean, metric) - getattr(perf, metric) > self.sigma * getattr(self.std, metric):
                    return True
            return perf.queue - self.mean.queue > self.sigma * self.std.queue

    # --- Driver ---

    def update(self, stats: DiskStats) -> bool:
        """
        Feed one raw snapshot of the device counters.

        The first snapshot only primes the sampler. Intervals with no elapsed
        time or with a counter that went backwards are discarded: the window
        and the baseline are left untouched, and a stall in progress is
        cleared because the tick is never reported as a stall.

        Returns:
            True if this tick was an accepted, stalled interval.
        """
        finished: Optional[StallEpisode] = None
        with self._lock:
            discarded_before = self._sampler.discarded
            result = self._sampler.sample(stats)
            if result is None:
                if self._sampler.discarded != discarded_before and self.stall:
                    finished = self._close_episode()
                    self.stall = False
                stalled = False
            else:
                inc, perf = result
                self.accepted += 1
                self.add(perf)
                self.refresh_baseline()
                stalled = self.valid and self.detect(perf)

                if stalled:
                    self._record_stalled_interval(inc, perf)
                elif self.stall:
                    finished = self._close_episode()
                self.stall = stalled

        if finished is not None and self._on_stall_episode is not None:
            try:
                self._on_stall_episode(finished)
            except Exception as e:
                logger.warning(f"Stall episode callback failed: {e}")
        return stalled

    def _record_stalled_interval(self, inc: DiskStats, perf: DiskPerf) -> None:
        if self._current_episode is None:
            self._current_episode = StallEpisode(
                accumulated=DiskStats(),
                mean=self.mean,
                std=self.std,
                started_at=inc.start_time,
                trigger=perf,
            )
            logger.warning(
                f"Disk stall detected: perf={perf.to_dict()} "
                f"mean={self.mean.to_dict()} std={self.std.to_dict()} sigma={self.sigma}"
            )
        episode = self._current_episode
        add_disk_stats(inc, episode.accumulated)
        episode.intervals += 1
        episode.ended_at = inc.end_time

    def _close_episode(self) -> Optional[StallEpisode]:
        episode = self._current_episode
        self._current_episode = None
        if episode is None:
            return None
        episode.mean = self.mean
        episode.std = self.std
        self._episodes.append(episode)
        logger.info(
            f"Disk stall cleared after {episode.intervals} intervals "
            f"({episode.duration_ms} ms)"
        )
        return episode

    # --- Read-only views ---

    @property
    def window_occupancy(self) -> int:
        with self._lock:
            return len(self._buffer)

    def get_episodes(self) -> List[StallEpisode]:
        """Finished stall episodes, oldest first."""
        with self._lock:
            return list(self._episodes)

    def get_state(self) -> Dict[str, Any]:
        """
        A consistent copy of the monitor state for reporting.
        """
        with self._lock:
            return {
                "valid": self.valid,
                "stall": self.stall,
                "window": self.window,
                "sigma": self.sigma,
                "samples_in_window": len(self._buffer),
                "accepted_intervals": self.accepted,
                "discarded_intervals": self._sampler.discarded,
                "mean": replace(self.mean),
                "std": replace(self.std),
                "episodes": len(self._episodes),
                "stall_in_progress": self._current_episode is not None,
            }
