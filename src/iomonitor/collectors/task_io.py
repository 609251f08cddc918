"""
Per-process I/O collector implementation using the 'psutil' library.

This module provides the TaskIOCollector class, which enumerates running
processes and builds a TaskInfo record from each process's cumulative I/O
counters (the same values the kernel exposes in `/proc/<pid>/io`).
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

import psutil

from ..models.tasks import MAX_COMMAND_LENGTH, TaskInfo
from .base import AbstractReader

logger = logging.getLogger(__name__)


def read_cancelled_write_bytes(pid: int, proc_root: Path = Path("/proc")) -> int:
    """
    Read `cancelled_write_bytes` from `/proc/<pid>/io`.

    psutil does not expose this counter, so it is parsed directly. Returns 0
    when the file cannot be read.
    """
    try:
        with open(proc_root / str(pid) / "io", "r") as f:
            for line in f:
                key, _, value = line.partition(":")
                if key.strip() == "cancelled_write_bytes":
                    return int(value.strip())
    except (FileNotFoundError, PermissionError, ProcessLookupError, OSError, ValueError):
        pass
    return 0


def command_name(cmdline: Optional[List[str]], name: Optional[str]) -> str:
    """
    The command a process is attributed to: its first argument, or the
    process name for processes without a command line (kernel threads).
    """
    cmd = cmdline[0] if cmdline and cmdline[0] else (name or "")
    return cmd[:MAX_COMMAND_LENGTH]


class TaskIOCollector(AbstractReader):
    """
    Collects a TaskInfo for every observable process using psutil.

    Attributes:
        compiled_pattern: Only processes whose name or command line match are
                          collected.
    """

    def __init__(self, process_pattern: str = ".*", proc_root: str = "/proc"):
        """
        Initializes the TaskIOCollector.

        Args:
            process_pattern: Regex pattern to match processes.
            proc_root: Root of the proc filesystem, used for the counters
                       psutil does not provide.

        Raises:
            ValueError: If the pattern is not a valid regular expression.
        """
        super().__init__(process_pattern=process_pattern)
        self.process_pattern = process_pattern
        self.proc_root = Path(proc_root)
        try:
            self.compiled_pattern: re.Pattern = re.compile(process_pattern)
        except re.error as e:
            logger.error(f"Invalid regex pattern for TaskIOCollector: '{process_pattern}'. Error: {e}")
            raise ValueError(f"Invalid regular expression pattern: {process_pattern}") from e

        self._iter_attrs = ["pid", "name", "cmdline", "create_time"]

    def _get_task_for_process(self, proc: psutil.Process) -> Optional[TaskInfo]:
        """
        Build a TaskInfo for a single process, or None if it does not match,
        vanished or denied access.
        """
        try:
            info = proc.as_dict(attrs=self._iter_attrs)
            cmdline = info.get("cmdline") or []
            proc_name = info.get("name") or ""

            if not (
                self.compiled_pattern.search(proc_name)
                or self.compiled_pattern.search(" ".join(cmdline))
            ):
                return None

            io = proc.io_counters()
            pid = info["pid"]
            return TaskInfo(
                pid=pid,
                rchar=getattr(io, "read_chars", 0),
                wchar=getattr(io, "write_chars", 0),
                syscr=io.read_count,
                syscw=io.write_count,
                read_bytes=io.read_bytes,
                write_bytes=io.write_bytes,
                cancelled_write_bytes=read_cancelled_write_bytes(pid, self.proc_root),
                starttime=info.get("create_time") or 0.0,
                cmd=command_name(cmdline, proc_name),
            )

        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            # Expected for short-lived and privileged processes.
            return None
        except Exception as e:
            pid_val = proc.pid if hasattr(proc, "pid") else "unknown"
            logger.warning(f"Unknown error reading I/O of PID {pid_val}: {e}", exc_info=False)
            return None

    def read(self) -> List[TaskInfo]:
        """
        Scan all processes once.

        Returns:
            TaskInfo for every matching, readable process; an empty list if
            the process table cannot be enumerated.
        """
        tasks: List[TaskInfo] = []
        try:
            for proc in psutil.process_iter(self._iter_attrs):
                task = self._get_task_for_process(proc)
                if task is not None:
                    tasks.append(task)
        except Exception as e:
            logger.warning(f"Process enumeration failed: {e}")
            self._record(False)
            return []

        self._record(True)
        logger.debug(f"Collected I/O counters of {len(tasks)} processes")
        return tasks
