"""
Command-line interface for the iomonitor storage health monitor.

This module provides the `iomonitor` entry point: it loads and validates the
configuration, runs the StorageHealthService until signalled (or for a fixed
duration) and persists the collected results on exit.
"""

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from ..collectors import TaskIOCollector
from ..config import get_config, set_config_path
from ..models.config import MonitorConfig
from ..monitoring import TaskIOTracker
from ..orchestration import SignalHandler, StorageHealthService
from ..storage import DataStorageManager
from ..validation import ValidationError, handle_cli_error, validate_block_device_name

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iomonitor",
        description="Monitor block device stalls and per-process storage I/O.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.toml (defaults to conf/config.toml of the installation).",
    )
    parser.add_argument(
        "-d",
        "--device",
        type=str,
        help="Block device to monitor (e.g. 'sda'), overrides monitor.disk.device.",
    )
    parser.add_argument(
        "-t",
        "--duration",
        type=float,
        default=0.0,
        help="Seconds to run before exiting; 0 runs until SIGINT/SIGTERM.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help="Directory for results. Defaults to a timestamped run directory under monitor.general.log_root_dir.",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Take one process I/O poll, print the per-command table and exit.",
    )
    return parser


def dump_task_io(monitor_config: MonitorConfig) -> List[str]:
    """
    One task poll, formatted as a per-command table sorted by storage writes.
    """
    tracker = TaskIOTracker()
    tracker.poll_and_reconcile(TaskIOCollector(monitor_config.tasks.process_pattern).read())
    tasks = sorted(tracker.merged_by_command().values(), key=lambda t: (-t.write_bytes, t.cmd))

    lines = [
        f"{'command':<40} {'rchar':>14} {'wchar':>14} {'read_bytes':>14} {'write_bytes':>14}"
    ]
    for task in tasks:
        lines.append(
            f"{task.cmd[:40]:<40} {task.rchar:>14} {task.wchar:>14} "
            f"{task.read_bytes:>14} {task.write_bytes:>14}"
        )
    return lines


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for the iomonitor application.

    Raises:
        SystemExit: On configuration errors or invalid arguments.
    """
    args = build_parser().parse_args(argv)

    if args.config:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    monitor_config = app_config.monitor
    logging.getLogger().setLevel(monitor_config.log_level)

    if args.device:
        try:
            device = validate_block_device_name(args.device, field_name="--device")
        except ValidationError as e:
            handle_cli_error(error=e, context="argument validation", exit_code=2, logger=logger)
        monitor_config = dataclasses.replace(
            monitor_config, disk=dataclasses.replace(monitor_config.disk, device=device)
        )

    if args.duration < 0:
        handle_cli_error(
            error=ValueError(f"--duration must be >= 0, got {args.duration}"),
            context="argument validation",
            exit_code=2,
            logger=logger,
        )

    if args.dump:
        for line in dump_task_io(monitor_config):
            print(line)
        return

    output_dir = args.output_dir or (
        Path(monitor_config.log_root_dir) / f"run_{time.strftime('%Y%m%d_%H%M%S')}"
    )

    service = StorageHealthService(monitor_config)
    started_at = time.time()
    with SignalHandler(service):
        service.start()
        try:
            service.wait(args.duration)
        finally:
            service.stop()

    snapshot = service.snapshot()
    try:
        manager = DataStorageManager(output_dir, monitor_config.storage)
        manager.save_snapshot(
            snapshot,
            metadata={
                "device": snapshot["device"],
                "started_at": started_at,
                "finished_at": time.time(),
                "config_path": str(app_config.source_path),
                "window_size": monitor_config.disk.window_size,
                "sigma": monitor_config.disk.sigma,
                "disk_interval_seconds": monitor_config.disk.interval_seconds,
                "task_interval_seconds": monitor_config.tasks.interval_seconds,
                "emmc": snapshot["emmc"].to_dict() if snapshot["emmc"] else None,
            },
        )
    except OSError as e:
        handle_cli_error(error=e, context="saving results", exit_code=1, logger=logger)

    logger.info(f"Results written to {output_dir}")


if __name__ == "__main__":
    main_cli()
