"""
Raw snapshot readers for storage health monitoring.

This package provides the only components that touch kernel interfaces:

- Block-device counters from `/sys/block/<dev>/stat`
- Per-process I/O counters using psutil (plus `/proc/<pid>/io`)
- eMMC flash health from the debugfs EXT_CSD dump

Every reader returns an "unavailable" value (None or an empty list) instead of
raising when its input cannot be read.
"""

from .base import AbstractReader
from .diskstats import DiskStatsReader, parse_disk_stats, resolve_device
from .emmc import EmmcInfoReader, parse_emmc_ecsd
from .task_io import TaskIOCollector

__all__ = [
    "AbstractReader",
    "DiskStatsReader",
    "EmmcInfoReader",
    "TaskIOCollector",
    "parse_disk_stats",
    "parse_emmc_ecsd",
    "resolve_device",
]
