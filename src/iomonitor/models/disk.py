"""
Disk statistics data models.

This module contains the raw block-device counter snapshot read from
`/sys/block/<dev>/stat`, the per-interval performance record derived from two
consecutive snapshots, and the report/episode records emitted by the disk
monitoring components.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Optional


# Counters that must never decrease between two valid reads of the same device.
MONOTONIC_FIELDS = (
    "read_ios",
    "read_merges",
    "read_sectors",
    "read_ticks",
    "write_ios",
    "write_merges",
    "write_sectors",
    "write_ticks",
    "io_ticks",
    "io_in_queue",
)


@dataclass
class DiskStats:
    """
    A snapshot (or an increment) of the kernel block-device counters.

    Timestamps are monotonic milliseconds. `counter` and `io_avg` are
    bookkeeping fields that only matter for display.
    """

    read_ios: int = 0
    read_merges: int = 0
    read_sectors: int = 0
    read_ticks: int = 0  # ms spent on reads
    write_ios: int = 0
    write_merges: int = 0
    write_sectors: int = 0
    write_ticks: int = 0  # ms spent on writes
    io_in_flight: int = 0  # may legitimately be zero
    io_ticks: int = 0  # ms the device was busy
    io_in_queue: int = 0  # weighted ms spent in queue
    start_time: int = 0
    end_time: int = 0
    counter: int = 0
    io_avg: float = 0.0

    def copy(self) -> "DiskStats":
        return replace(self)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class DiskPerf:
    """
    Per-interval performance derived from a DiskStats increment.

    Throughputs are bytes per second, IOPS are operations per second and
    `queue` is the average queue depth over the interval.
    """

    read_perf: float = 0.0
    read_ios: float = 0.0
    write_perf: float = 0.0
    write_ios: float = 0.0
    queue: float = 0.0

    def is_zero(self) -> bool:
        return not (
            self.read_perf
            or self.read_ios
            or self.write_perf
            or self.write_ios
            or self.queue
        )

    def to_dict(self) -> dict:
        return {
            "read_perf": self.read_perf,
            "read_ios": self.read_ios,
            "write_perf": self.write_perf,
            "write_ios": self.write_ios,
            "queue": self.queue,
        }


@dataclass
class DiskStatsReport:
    """Accumulated disk statistics over one publish period."""

    # Sum of all accepted increments in the period.
    stats: DiskStats
    # Performance derived from the accumulated increment.
    perf: DiskPerf
    # Why the report was emitted ("periodic" or "flush").
    reason: str = "periodic"

    def to_dict(self) -> dict:
        row = {f"stats_{k}": v for k, v in self.stats.to_dict().items()}
        row.update({f"perf_{k}": v for k, v in self.perf.to_dict().items()})
        row["reason"] = self.reason
        return row


@dataclass
class StallEpisode:
    """
    A contiguous run of intervals flagged as stalled by the disk monitor.
    """

    # Sum of the raw increments observed while stalled.
    accumulated: DiskStats
    # Baseline at the time the episode ended.
    mean: DiskPerf
    std: DiskPerf
    # Number of accepted intervals in the episode.
    intervals: int = 0
    # Monotonic ms timestamps of the first and last stalled interval.
    started_at: int = 0
    ended_at: Optional[int] = None
    # Perf of the interval that opened the episode.
    trigger: DiskPerf = field(default_factory=DiskPerf)

    @property
    def duration_ms(self) -> int:
        if self.ended_at is None:
            return 0
        return self.ended_at - self.started_at

    def to_dict(self) -> dict:
        row = {
            "intervals": self.intervals,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "duration_ms": self.duration_ms,
        }
        row.update({f"trigger_{k}": v for k, v in self.trigger.to_dict().items()})
        row.update({f"mean_{k}": v for k, v in self.mean.to_dict().items()})
        row.update({f"std_{k}": v for k, v in self.std.to_dict().items()})
        row.update({f"acc_{k}": v for k, v in self.accumulated.to_dict().items()})
        return row


@dataclass
class EmmcInfo:
    """Flash health fields decoded from an eMMC EXT_CSD register."""

    # Human-readable eMMC spec revision, e.g. "5.0".
    mmc_ver: str
    # Pre-EOL information (1 normal, 2 warning, 3 urgent).
    eol: int
    # Device lifetime estimates in 10% steps for type A and type B memory.
    lifetime_a: int
    lifetime_b: int

    def to_dict(self) -> dict:
        return {
            "mmc_ver": self.mmc_ver,
            "eol": self.eol,
            "lifetime_a": self.lifetime_a,
            "lifetime_b": self.lifetime_b,
        }
