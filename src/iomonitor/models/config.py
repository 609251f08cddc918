"""
Configuration data models.

This module contains all configuration-related data structures for disk
monitoring, process I/O tracking, flash health polling and storage of results.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..config.storage_config import StorageConfig


@dataclass
class DiskConfig:
    """
    Settings for the disk stall monitor and the disk stats publisher,
    loaded from `[monitor.disk]`.
    """

    # Block device name under /sys/block, or "auto" to probe common devices.
    device: str = "auto"
    # Seconds between two reads of the device counters.
    interval_seconds: float = 5.0
    # Number of recent intervals kept for the baseline.
    window_size: int = 5
    # Standard deviations a sample may deviate before it counts as a stall.
    sigma: float = 1.0
    # Span (seconds) of accumulated increments per published report.
    publish_interval_seconds: float = 3600.0
    # Number of finished stall episodes kept in memory.
    max_stall_episodes: int = 100
    # Root of the sysfs block tree; overridable for tests.
    sysfs_block_dir: Path = Path("/sys/block")


@dataclass
class TaskConfig:
    """Settings for the per-process I/O tracker, loaded from `[monitor.tasks]`."""

    interval_seconds: float = 60.0
    # Only processes whose name or command line match are tracked.
    process_pattern: str = ".*"


@dataclass
class EmmcConfig:
    """Settings for eMMC health polling, loaded from `[monitor.emmc]`."""

    enabled: bool = False
    ext_csd_path: Path = Path("/d/mmc0/mmc0:0001/ext_csd")
    interval_seconds: float = 86400.0


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor's global behavior, loaded from `config.toml`.
    """

    # [monitor.general]
    log_root_dir: Path
    log_level: str

    # [monitor.disk] / [monitor.tasks] / [monitor.emmc]
    disk: DiskConfig = field(default_factory=DiskConfig)
    tasks: TaskConfig = field(default_factory=TaskConfig)
    emmc: EmmcConfig = field(default_factory=EmmcConfig)

    # [monitor.general] - 关闭服务时等待线程退出的时间（秒）
    graceful_shutdown_timeout: float = 5.0

    # [monitor.storage]
    storage: Optional["StorageConfig"] = None


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    # The global monitor configuration.
    monitor: MonitorConfig
    # The file the configuration was loaded from.
    source_path: Optional[Path] = None
