"""
Storage health monitoring state machines.

This package contains the streaming statistics, the differential disk sampler,
the disk stall monitor, the periodic disk stats publisher and the per-command
process I/O tracker.
"""

from .disk_monitor import DiskStatsMonitor
from .disk_publisher import DiskStatsPublisher
from .sampler import DiskStatsSampler, add_disk_stats, get_disk_perf, get_inc_disk_stats
from .stream_stats import StreamStats
from .task_tracker import TaskIOTracker

__all__ = [
    "DiskStatsMonitor",
    "DiskStatsPublisher",
    "DiskStatsSampler",
    "StreamStats",
    "TaskIOTracker",
    "add_disk_stats",
    "get_disk_perf",
    "get_inc_disk_stats",
]
