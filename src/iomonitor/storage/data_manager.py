"""
Data storage manager for storage health results.

This module provides a high-level interface for persisting what the service
collected: the merged per-command I/O table, the periodic disk reports, the
stall episodes and a human-readable summary.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import polars as pl

from ..config.storage_config import StorageConfig
from ..models.disk import DiskStatsReport, EmmcInfo, StallEpisode
from ..models.tasks import TaskInfo
from ..validation import handle_file_error
from .factory import create_storage

logger = logging.getLogger(__name__)

TASK_IO_TABLE = "task_io"
DISK_REPORTS_TABLE = "disk_reports"
STALL_EPISODES_TABLE = "stall_episodes"
SUMMARY_FILE = "summary.log"
METADATA_FILE = "metadata.json"

# Number of commands listed in the summary
SUMMARY_TOP_COMMANDS = 10


class DataStorageManager:
    """
    High-level storage manager for one output directory.

    Tables go through the backend chosen by `StorageConfig.format`; when
    `generate_csv` is set every table is also written as CSV next to it.
    """

    def __init__(self, output_dir: Union[str, Path], storage_config: Optional[StorageConfig] = None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        storage_config = storage_config or StorageConfig()
        self.storage_format = storage_config.format
        self.compression = storage_config.compression
        self.generate_csv = storage_config.generate_csv
        self.storage = create_storage(self.storage_format, self.compression)

        logger.debug(
            f"Initialized DataStorageManager with format: {self.storage_format} at {self.output_dir}"
        )

    def _table_path(self, table: str) -> Path:
        return self.output_dir / f"{table}{self.storage.extension}"

    def _save_table(self, table: str, rows: List[Dict[str, Any]]) -> Optional[Path]:
        if not rows:
            logger.warning(f"No rows to save for {table}")
            return None

        df = pl.DataFrame(rows)
        file_path = self._table_path(table)
        self.storage.save_dataframe(df, file_path)
        logger.info(f"Saved {len(df)} rows to: {file_path}")

        if self.generate_csv and self.storage_format != "json":
            csv_path = self.output_dir / f"{table}.csv"
            df.write_csv(csv_path)
            logger.info(f"Saved CSV copy to: {csv_path}")
        return file_path

    # --- Writers ---

    def save_task_io(self, tasks: Union[Mapping[str, TaskInfo], Iterable[TaskInfo]]) -> Optional[Path]:
        """
        Save the merged per-command I/O view, sorted by storage write bytes.

        Args:
            tasks: Either the command-keyed mapping returned by
                   TaskIOTracker.merged_by_command() or a list of TaskInfo.
        """
        if isinstance(tasks, Mapping):
            tasks = tasks.values()
        rows = sorted(
            (t.to_dict() for t in tasks),
            key=lambda row: (-row["write_bytes"], row["cmd"]),
        )
        return self._save_table(TASK_IO_TABLE, rows)

    def save_disk_reports(self, reports: Iterable[DiskStatsReport]) -> Optional[Path]:
        return self._save_table(DISK_REPORTS_TABLE, [r.to_dict() for r in reports])

    def save_stall_episodes(self, episodes: Iterable[StallEpisode]) -> Optional[Path]:
        return self._save_table(STALL_EPISODES_TABLE, [e.to_dict() for e in episodes])

    def save_metadata(self, metadata: Dict[str, Any]) -> Path:
        """Run metadata is always JSON, regardless of the table format."""
        metadata_path = self.output_dir / METADATA_FILE
        self.storage.save_dict(metadata, metadata_path)
        logger.debug(f"Saved metadata to: {metadata_path}")
        return metadata_path

    def save_summary_log(self, snapshot: Dict[str, Any]) -> Path:
        """
        Write a human-readable summary of a StorageHealthService snapshot.

        The summary lists the monitor flags and baseline, the stall episodes,
        the commands with the most storage writes and, when known, the eMMC
        health fields.
        """
        summary_path = self.output_dir / SUMMARY_FILE
        disk = snapshot.get("disk", {})
        tasks: Mapping[str, TaskInfo] = snapshot.get("tasks", {})
        episodes: List[StallEpisode] = snapshot.get("episodes", [])
        emmc: Optional[EmmcInfo] = snapshot.get("emmc")

        with open(summary_path, "w", encoding="utf-8") as f:
            f.write("Storage Health Summary\n")
            f.write("======================\n\n")
            f.write(f"Device: {snapshot.get('device') or 'none'}\n")
            f.write(
                f"Baseline valid: {disk.get('valid', False)}, "
                f"stalled: {disk.get('stall', False)} "
                f"(window={disk.get('window')}, sigma={disk.get('sigma')})\n"
            )
            f.write(
                f"Intervals: {disk.get('accepted_intervals', 0)} accepted, "
                f"{disk.get('discarded_intervals', 0)} discarded\n"
            )
            mean, std = disk.get("mean"), disk.get("std")
            if mean is not None and std is not None:
                f.write("\n--- Baseline (mean / std) ---\n")
                for metric, value in mean.to_dict().items():
                    f.write(f"  {metric}: {value:.2f} / {getattr(std, metric):.2f}\n")

            f.write(f"\n--- Stall Episodes ({len(episodes)}) ---\n")
            for episode in episodes:
                f.write(
                    f"  {episode.intervals} intervals, {episode.duration_ms} ms, "
                    f"{episode.accumulated.write_sectors} sectors written\n"
                )

            f.write(f"\n--- Top Commands by Storage Writes ({len(tasks)} total) ---\n")
            top = sorted(tasks.values(), key=lambda t: (-t.write_bytes, t.cmd))
            for task in top[:SUMMARY_TOP_COMMANDS]:
                f.write(
                    f"  {task.cmd}: write_bytes={task.write_bytes}, "
                    f"read_bytes={task.read_bytes}, wchar={task.wchar}, rchar={task.rchar}\n"
                )

            if emmc is not None:
                f.write("\n--- eMMC ---\n")
                f.write(
                    f"  version {emmc.mmc_ver}, pre-EOL {emmc.eol}, "
                    f"lifetime A {emmc.lifetime_a}, B {emmc.lifetime_b}\n"
                )

        logger.info(f"Saved summary log to: {summary_path}")
        return summary_path

    def save_snapshot(self, snapshot: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> None:
        """Persist every part of a service snapshot."""
        try:
            logger.info("Saving storage health results...")
            self.save_task_io(snapshot.get("tasks", {}))
            self.save_disk_reports(snapshot.get("reports", []))
            self.save_stall_episodes(snapshot.get("episodes", []))
            if metadata is not None:
                self.save_metadata(metadata)
            self.save_summary_log(snapshot)
            logger.info(f"Successfully saved results to: {self.output_dir}")
        except Exception as e:
            handle_file_error(e, f"saving results to {self.output_dir}", logger=logger)

    # --- Readers ---

    def load_task_io(self, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Load the per-command I/O table with optional column pruning.

        Raises:
            FileNotFoundError: If no table was saved in this directory
        """
        file_path = self._table_path(TASK_IO_TABLE)
        if not self.storage.file_exists(file_path):
            raise FileNotFoundError(f"No task I/O table found in {self.output_dir}")
        return self.storage.load_dataframe(file_path, columns)

    def get_storage_info(self) -> Dict[str, Any]:
        """
        Storage configuration plus size of every result file present.
        """
        info: Dict[str, Any] = {
            "storage_format": self.storage_format,
            "compression": self.compression,
            "output_dir": str(self.output_dir),
            "files": {},
        }
        candidates = [
            f"{table}{ext}"
            for table in (TASK_IO_TABLE, DISK_REPORTS_TABLE, STALL_EPISODES_TABLE)
            for ext in (self.storage.extension, ".csv")
        ] + [SUMMARY_FILE, METADATA_FILE]
        for filename in candidates:
            file_path = self.output_dir / filename
            if file_path.exists():
                info["files"][filename] = {
                    "size_bytes": self.storage.get_file_size(file_path),
                    "exists": True,
                }
        return info
