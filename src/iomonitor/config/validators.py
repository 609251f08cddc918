"""
Configuration validation utilities.

This module turns the raw `[monitor]` tables of `config.toml` into a validated
MonitorConfig, one section at a time.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import DiskConfig, EmmcConfig, MonitorConfig, TaskConfig
from ..validation import (
    ValidationError,
    validate_block_device_name,
    validate_boolean,
    validate_enum_choice,
    validate_path,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_disk_settings(disk_settings: Dict[str, Any]) -> DiskConfig:
    """
    Validate the `[monitor.disk]` section.

    Raises:
        ValidationError: If validation fails
    """
    device = validate_block_device_name(
        disk_settings.get("device", "auto"), field_name="monitor.disk.device"
    )

    interval_seconds = validate_positive_float(
        disk_settings.get("interval_seconds", 5.0),
        min_value=0.01,
        max_value=3600.0,
        field_name="monitor.disk.interval_seconds",
    )

    window_size = validate_positive_integer(
        disk_settings.get("window_size", 5),
        min_value=2,  # a single sample has no spread
        max_value=10000,
        field_name="monitor.disk.window_size",
    )

    sigma = validate_positive_float(
        disk_settings.get("sigma", 1.0),
        min_value=0.0,
        max_value=100.0,
        field_name="monitor.disk.sigma",
    )

    publish_interval_seconds = validate_positive_float(
        disk_settings.get("publish_interval_seconds", 3600.0),
        min_value=1.0,
        max_value=7 * 86400.0,
        field_name="monitor.disk.publish_interval_seconds",
    )

    max_stall_episodes = validate_positive_integer(
        disk_settings.get("max_stall_episodes", 100),
        min_value=1,
        max_value=100000,
        field_name="monitor.disk.max_stall_episodes",
    )

    return DiskConfig(
        device=device,
        interval_seconds=interval_seconds,
        window_size=window_size,
        sigma=sigma,
        publish_interval_seconds=publish_interval_seconds,
        max_stall_episodes=max_stall_episodes,
        sysfs_block_dir=validate_path(
            disk_settings.get("sysfs_block_dir", "/sys/block"),
            field_name="monitor.disk.sysfs_block_dir",
        ),
    )


def validate_task_settings(task_settings: Dict[str, Any]) -> TaskConfig:
    """
    Validate the `[monitor.tasks]` section.

    Raises:
        ValidationError: If validation fails
    """
    interval_seconds = validate_positive_float(
        task_settings.get("interval_seconds", 60.0),
        min_value=0.1,
        max_value=86400.0,
        field_name="monitor.tasks.interval_seconds",
    )

    process_pattern = validate_regex_pattern(
        task_settings.get("process_pattern", ".*"),
        field_name="monitor.tasks.process_pattern",
    )

    return TaskConfig(interval_seconds=interval_seconds, process_pattern=process_pattern)


def validate_emmc_settings(emmc_settings: Dict[str, Any]) -> EmmcConfig:
    """
    Validate the `[monitor.emmc]` section.

    Raises:
        ValidationError: If validation fails
    """
    enabled = validate_boolean(emmc_settings.get("enabled", False), field_name="monitor.emmc.enabled")

    ext_csd_path = validate_path(
        emmc_settings.get("ext_csd_path", "/d/mmc0/mmc0:0001/ext_csd"),
        field_name="monitor.emmc.ext_csd_path",
    )

    interval_seconds = validate_positive_float(
        emmc_settings.get("interval_seconds", 86400.0),
        min_value=1.0,
        max_value=30 * 86400.0,
        field_name="monitor.emmc.interval_seconds",
    )

    return EmmcConfig(
        enabled=enabled,
        ext_csd_path=ext_csd_path,
        interval_seconds=interval_seconds,
    )


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw monitor configuration from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    general_settings = monitor_data.get("general", {})

    try:
        log_level = validate_enum_choice(
            general_settings.get("log_level", "INFO"),
            valid_choices=LOG_LEVELS,
            field_name="monitor.general.log_level",
            case_sensitive=False,
        )

        graceful_shutdown_timeout = validate_positive_float(
            general_settings.get("graceful_shutdown_timeout", 5.0),
            min_value=0.1,  # 100ms minimum
            max_value=60.0,  # 1m maximum
            field_name="monitor.general.graceful_shutdown_timeout",
        )

        # Validate log root directory (create if it doesn't exist)
        log_root_dir = Path(general_settings.get("log_root_dir", "logs"))
        try:
            log_root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValidationError(f"Cannot create log directory '{log_root_dir}': {e}")

        disk = validate_disk_settings(monitor_data.get("disk", {}))
        tasks = validate_task_settings(monitor_data.get("tasks", {}))
        emmc = validate_emmc_settings(monitor_data.get("emmc", {}))

        try:
            storage = StorageConfig.from_dict(monitor_data.get("storage", {}))
        except ValueError as e:
            raise ValidationError(f"monitor.storage: {e}")

        return MonitorConfig(
            # from [monitor.general]
            log_root_dir=log_root_dir,
            log_level=log_level,
            graceful_shutdown_timeout=graceful_shutdown_timeout,
            # from [monitor.disk], [monitor.tasks], [monitor.emmc]
            disk=disk,
            tasks=tasks,
            emmc=emmc,
            # from [monitor.storage]
            storage=storage,
        )

    except ValidationError as e:
        logger.error(f"Monitor configuration validation failed: {e}")
        raise
