"""
Data models and structures for the storage health monitor.

This module provides the data models used throughout the application,
organized by their functional purpose:

Configuration Models:
- Application-wide configuration settings
- Disk monitor, task tracker and eMMC polling parameters

Disk Models:
- Raw block-device counter snapshots and their increments
- Derived per-interval performance records
- Published reports and stall episodes
- Flash (eMMC) health information

Task Models:
- Per-process I/O accounting records, also used for per-command aggregates

All models use type hints and dataclasses for better code clarity and IDE support.
"""

# Configuration models
from .config import AppConfig, DiskConfig, EmmcConfig, MonitorConfig, TaskConfig

# Disk models
from .disk import DiskPerf, DiskStats, DiskStatsReport, EmmcInfo, StallEpisode

# Task models
from .tasks import MAX_COMMAND_LENGTH, TaskInfo

__all__ = [
    # Configuration
    "AppConfig",
    "DiskConfig",
    "EmmcConfig",
    "MonitorConfig",
    "TaskConfig",
    # Disk
    "DiskPerf",
    "DiskStats",
    "DiskStatsReport",
    "EmmcInfo",
    "StallEpisode",
    # Tasks
    "MAX_COMMAND_LENGTH",
    "TaskInfo",
]
