"""
iomonitor: block device stall detection and per-process storage I/O accounting.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures (disk counters, task I/O, config)
- validation: Input validation and error handling
- collectors: Raw readers for /sys/block stats, process I/O and eMMC health
- monitoring: Rolling statistics, stall detection and task I/O tracking
- orchestration: Periodic chores and signal handling
- storage: Persisting results
- cli: Command-line interface

Usage:
    From command line:
        iomonitor [options]

    Programmatically:
        from iomonitor import StorageHealthService, get_config
        service = StorageHealthService(get_config().monitor)
        service.start()
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .orchestration import StorageHealthService
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    DiskPerf,
    DiskStats,
    EmmcInfo,
    MonitorConfig,
    StallEpisode,
    TaskInfo,
)

# Core state machines
from .monitoring import (
    DiskStatsMonitor,
    DiskStatsPublisher,
    StreamStats,
    TaskIOTracker,
)

# Validation utilities
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "StorageHealthService",
    "main_cli",
    # Models
    "AppConfig",
    "DiskPerf",
    "DiskStats",
    "EmmcInfo",
    "MonitorConfig",
    "StallEpisode",
    "TaskInfo",
    # State machines
    "DiskStatsMonitor",
    "DiskStatsPublisher",
    "StreamStats",
    "TaskIOTracker",
    # Validation
    "ValidationError",
]
