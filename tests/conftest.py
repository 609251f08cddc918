"""
Pytest configuration and shared fixtures for the iomonitor test suite.

This module provides common fixtures, builders for disk counter snapshots and
task records, and configuration files for the tests.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data(temp_dir):
    """Sample `[monitor]` configuration data for testing."""
    return {
        "general": {
            "log_root_dir": str(temp_dir / "logs"),
            "log_level": "DEBUG",
            "graceful_shutdown_timeout": 2.0,
        },
        "disk": {
            "device": "sda",
            "sysfs_block_dir": str(temp_dir / "sys" / "block"),
            "interval_seconds": 0.05,
            "window_size": 5,
            "sigma": 1.0,
            "publish_interval_seconds": 60.0,
            "max_stall_episodes": 10,
        },
        "tasks": {
            "interval_seconds": 0.05,
            "process_pattern": ".*",
        },
        "emmc": {
            "enabled": False,
        },
        "storage": {
            "format": "parquet",
            "compression": "snappy",
            "generate_csv": False,
        },
    }


# ============================================================================
# Builders
# ============================================================================


class DiskStatsBuilder:
    """
    Produces cumulative DiskStats snapshots from per-tick increments.

    Mirrors how the kernel counters grow: every `advance()` adds the given
    increments to the running totals and moves the clock forward.
    """

    def __init__(self, start_ms: int = 1000):
        from iomonitor.models.disk import DiskStats

        self.current = DiskStats(start_time=start_ms, end_time=start_ms)

    def advance(self, elapsed_ms: int = 100, **increments) -> "DiskStats":
        stats = self.current.copy()
        for name, value in increments.items():
            setattr(stats, name, getattr(stats, name) + value)
        stats.end_time += elapsed_ms
        stats.start_time = stats.end_time
        self.current = stats
        return stats.copy()


@pytest.fixture
def disk_stats_builder():
    return DiskStatsBuilder()


def make_task(pid, cmd, starttime=100.0, **counters):
    from iomonitor.models.tasks import TaskInfo

    return TaskInfo(pid=pid, cmd=cmd, starttime=starttime, **counters)


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def sysfs_block(temp_dir):
    """
    A fake /sys/block tree with one `sda` device.

    Returns a callable writing the stat line for the device.
    """
    block_dir = temp_dir / "sys" / "block"
    (block_dir / "sda").mkdir(parents=True)

    def write_stat(*values, device="sda"):
        (block_dir / device).mkdir(parents=True, exist_ok=True)
        (block_dir / device / "stat").write_text(
            " ".join(f"{v:>8}" for v in values) + "\n"
        )

    write_stat.block_dir = block_dir
    return write_stat


@pytest.fixture
def mock_process():
    """A psutil.Process stand-in with I/O counters."""
    proc = Mock()
    proc.pid = 4242
    proc.as_dict.return_value = {
        "pid": 4242,
        "name": "writer",
        "cmdline": ["/usr/bin/writer", "--fast"],
        "create_time": 1700000000.5,
    }
    proc.io_counters.return_value = Mock(
        read_count=10,
        write_count=20,
        read_bytes=4096,
        write_bytes=8192,
        read_chars=5000,
        write_chars=9000,
    )
    return proc


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"monitor": sample_config_data}, f)

    return {
        "config": config_file,
        "dir": temp_dir,
    }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from iomonitor.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)
