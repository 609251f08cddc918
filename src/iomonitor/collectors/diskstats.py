"""
Block-device counters from `/sys/block/<dev>/stat`.

The stat file holds a single line of whitespace-separated counters:

    read_ios read_merges read_sectors read_ticks
    write_ios write_merges write_sectors write_ticks
    in_flight io_ticks time_in_queue
    [discard_ios discard_merges discard_sectors discard_ticks
     flush_ios flush_ticks]

Only the first eleven fields are used; newer kernels append discard and flush
counters which are ignored.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from ..models.disk import DiskStats
from .base import AbstractReader

logger = logging.getLogger(__name__)

DISK_STATS_FIELDS = (
    "read_ios",
    "read_merges",
    "read_sectors",
    "read_ticks",
    "write_ios",
    "write_merges",
    "write_sectors",
    "write_ticks",
    "io_in_flight",
    "io_ticks",
    "io_in_queue",
)

# Probed in order when the configured device is "auto".
DEFAULT_DEVICES = ("mmcblk0", "sda", "nvme0n1", "vda")


def monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


def parse_disk_stats(
    path: Union[str, Path], now_ms: Optional[int] = None
) -> Optional[DiskStats]:
    """
    Parse a block-device stat file.

    Args:
        path: Path to the `stat` file.
        now_ms: Timestamp to stamp on the snapshot; defaults to the
                monotonic clock in milliseconds.

    Returns:
        A DiskStats snapshot, or None if the file is missing, unreadable or
        malformed.
    """
    try:
        text = Path(path).read_text()
    except (FileNotFoundError, PermissionError, OSError) as e:
        logger.debug(f"Cannot read disk stats from {path}: {e}")
        return None

    parts = text.split()
    if len(parts) < len(DISK_STATS_FIELDS):
        logger.debug(f"Malformed disk stats in {path}: {len(parts)} fields")
        return None

    try:
        values = [int(p) for p in parts[: len(DISK_STATS_FIELDS)]]
    except ValueError:
        logger.debug(f"Non-numeric disk stats in {path}: {text.strip()!r}")
        return None

    stats = DiskStats(**dict(zip(DISK_STATS_FIELDS, values)))
    stats.end_time = monotonic_ms() if now_ms is None else now_ms
    stats.start_time = stats.end_time
    return stats


def resolve_device(device: str, sysfs_block_dir: Path = Path("/sys/block")) -> Optional[str]:
    """
    Resolve "auto" to the first common block device that exposes a stat file.

    Returns:
        The device name, or None if nothing suitable exists.
    """
    if device != "auto":
        return device
    for candidate in DEFAULT_DEVICES:
        if (sysfs_block_dir / candidate / "stat").exists():
            logger.info(f"Auto-selected block device: {candidate}")
            return candidate
    logger.warning(f"No block device found under {sysfs_block_dir} among {DEFAULT_DEVICES}")
    return None


class DiskStatsReader(AbstractReader):
    """
    Reads DiskStats snapshots for a single block device.
    """

    def __init__(
        self,
        device: str = "auto",
        sysfs_block_dir: Union[str, Path] = "/sys/block",
        clock: Callable[[], int] = monotonic_ms,
    ):
        super().__init__(device=device, sysfs_block_dir=str(sysfs_block_dir))
        self.sysfs_block_dir = Path(sysfs_block_dir)
        self.device = resolve_device(device, self.sysfs_block_dir)
        self._clock = clock

    @property
    def stat_path(self) -> Optional[Path]:
        if self.device is None:
            return None
        return self.sysfs_block_dir / self.device / "stat"

    def read(self) -> Optional[DiskStats]:
        path = self.stat_path
        if path is None:
            self._record(False)
            return None
        stats = parse_disk_stats(path, now_ms=self._clock())
        self._record(stats is not None)
        return stats
