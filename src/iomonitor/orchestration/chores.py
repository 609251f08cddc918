"""
Periodic chores of the storage health service.

The service owns the three state machines (disk stall monitor, disk stats
publisher, process I/O tracker) together with their readers, and drives each
of them from its own PeriodicWorker thread. Every state machine serializes
access through its own lock, so `snapshot()` may be called from any thread.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from ..collectors import DiskStatsReader, EmmcInfoReader, TaskIOCollector
from ..models.config import MonitorConfig
from ..models.disk import DiskStatsReport, EmmcInfo, StallEpisode
from ..monitoring import DiskStatsMonitor, DiskStatsPublisher, TaskIOTracker

logger = logging.getLogger(__name__)


class PeriodicWorker:
    """
    Runs `target` every `interval` seconds on a daemon thread.

    An exception raised by a single tick is logged and the loop carries on.
    """

    def __init__(self, name: str, interval: float, target: Callable[[], Any], run_immediately: bool = True):
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.name = name
        self.interval = interval
        self.target = target
        self.run_immediately = run_immediately

        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None
        self.running = False
        self.ticks = 0
        self.failures = 0

    def start(self) -> None:
        if self.running:
            logger.warning(f"PeriodicWorker {self.name} already running")
            return

        self.running = True
        self.stop_event.clear()
        self.thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self.thread.start()
        logger.debug(f"PeriodicWorker {self.name} started (interval={self.interval}s)")

    def stop(self, timeout: float = 5.0) -> bool:
        """
        Signal the loop to stop and wait for the thread.

        Returns:
            True if the thread finished within `timeout`.
        """
        if not self.running:
            return True

        self.running = False
        self.stop_event.set()

        if self.thread and self.thread.is_alive():
            self.thread.join(timeout=timeout)
            if self.thread.is_alive():
                logger.warning(f"PeriodicWorker {self.name} did not stop within {timeout}s")
                return False
        logger.debug(f"PeriodicWorker {self.name} stopped after {self.ticks} ticks")
        return True

    def run_once(self) -> None:
        self.ticks += 1
        try:
            self.target()
        except Exception as e:
            self.failures += 1
            logger.error(f"Error in periodic task {self.name}: {e}", exc_info=True)

    def _loop(self) -> None:
        if not self.run_immediately and self.stop_event.wait(timeout=self.interval):
            return

        while not self.stop_event.is_set():
            tick_start = time.monotonic()
            self.run_once()

            elapsed = time.monotonic() - tick_start
            sleep_time = self.interval - elapsed
            if sleep_time <= 0:
                logger.warning(
                    f"{self.name} tick took {elapsed:.3f}s, longer than interval {self.interval:.3f}s"
                )
                continue
            if self.stop_event.wait(timeout=sleep_time):
                break


class StorageHealthService:
    """
    Wires readers to state machines and schedules the periodic chores.

    Readers can be injected, which is how the tests drive the service
    against fake sysfs trees and canned process tables.
    """

    def __init__(
        self,
        config: MonitorConfig,
        disk_reader: Optional[DiskStatsReader] = None,
        task_collector: Optional[TaskIOCollector] = None,
        emmc_reader: Optional[EmmcInfoReader] = None,
    ):
        self.config = config
        disk_cfg = config.disk

        self.disk_reader = disk_reader or DiskStatsReader(
            device=disk_cfg.device, sysfs_block_dir=disk_cfg.sysfs_block_dir
        )
        self.task_collector = task_collector or TaskIOCollector(
            process_pattern=config.tasks.process_pattern
        )
        if emmc_reader is None and config.emmc.enabled:
            emmc_reader = EmmcInfoReader(config.emmc.ext_csd_path)
        self.emmc_reader = emmc_reader

        self.monitor = DiskStatsMonitor(
            window_size=disk_cfg.window_size,
            sigma=disk_cfg.sigma,
            max_episodes=disk_cfg.max_stall_episodes,
        )
        self.publisher = DiskStatsPublisher(period_seconds=disk_cfg.publish_interval_seconds)
        self.tracker = TaskIOTracker()

        self.shutdown_requested = threading.Event()
        self._emmc_lock = threading.Lock()
        self._emmc_info: Optional[EmmcInfo] = None
        self._workers: List[PeriodicWorker] = []
        self.started = False

        if self.disk_reader.device is None:
            logger.warning(
                f"No block device found for '{disk_cfg.device}' under {disk_cfg.sysfs_block_dir}; "
                "disk monitoring will be idle"
            )

    # --- Ticks ---

    def disk_tick(self) -> bool:
        """
        Read one disk snapshot and feed it to the monitor and the publisher.

        Returns:
            The monitor's stall flag after this tick.
        """
        stats = self.disk_reader.read()
        if stats is None:
            logger.debug("Disk stats unavailable, skipping tick")
            return self.monitor.stall
        self.monitor.update(stats)
        self.publisher.update(stats)
        return self.monitor.stall

    def task_tick(self) -> int:
        """
        Poll the process table and reconcile it into the tracker.

        Returns:
            Number of processes that exited since the previous poll.
        """
        tasks = self.task_collector.read()
        exited = self.tracker.poll_and_reconcile(tasks)
        logger.debug(f"Task poll: {len(tasks)} live, {len(exited)} exited")
        return len(exited)

    def emmc_tick(self) -> Optional[EmmcInfo]:
        if self.emmc_reader is None:
            return None
        info = self.emmc_reader.read()
        if info is not None:
            with self._emmc_lock:
                self._emmc_info = info
        return info

    @property
    def emmc_info(self) -> Optional[EmmcInfo]:
        with self._emmc_lock:
            return self._emmc_info

    # --- Lifecycle ---

    def start(self) -> None:
        if self.started:
            logger.warning("StorageHealthService already started")
            return

        self.shutdown_requested.clear()
        self._workers = [
            PeriodicWorker("disk-stats", self.config.disk.interval_seconds, self.disk_tick),
            PeriodicWorker("task-io", self.config.tasks.interval_seconds, self.task_tick),
        ]
        if self.emmc_reader is not None:
            self._workers.append(
                PeriodicWorker("emmc-info", self.config.emmc.interval_seconds, self.emmc_tick)
            )
        for worker in self._workers:
            worker.start()
        self.started = True
        logger.info(
            f"Storage health service started (device={self.disk_reader.device}, "
            f"workers={[w.name for w in self._workers]})"
        )

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop all workers and flush the publisher.

        Returns:
            True if every worker stopped within the timeout.
        """
        if timeout is None:
            timeout = self.config.graceful_shutdown_timeout
        self.shutdown_requested.set()
        if not self.started:
            return True

        all_stopped = True
        for worker in self._workers:
            all_stopped = worker.stop(timeout=timeout) and all_stopped
        self.publisher.flush()
        self.started = False
        logger.info("Storage health service stopped")
        return all_stopped

    def wait(self, duration: float = 0.0) -> None:
        """Block until shutdown is requested or `duration` seconds pass (0 = forever)."""
        self.shutdown_requested.wait(timeout=duration if duration > 0 else None)

    # --- Reporting ---

    def get_episodes(self) -> List[StallEpisode]:
        return self.monitor.get_episodes()

    def get_reports(self) -> List[DiskStatsReport]:
        return self.publisher.get_reports()

    def snapshot(self) -> Dict[str, Any]:
        """
        A read-only report of the current state of every chore.
        """
        return {
            "device": self.disk_reader.device,
            "disk": self.monitor.get_state(),
            "episodes": self.monitor.get_episodes(),
            "reports": self.publisher.get_reports(),
            "tasks": self.tracker.merged_by_command(),
            "task_polls": self.tracker.polls,
            "exited_tasks": self.tracker.exited_total,
            "emmc": self.emmc_info,
            "readers": {
                "disk": self.disk_reader.get_stats(),
                "tasks": self.task_collector.get_stats(),
                "emmc": self.emmc_reader.get_stats() if self.emmc_reader else None,
            },
        }
