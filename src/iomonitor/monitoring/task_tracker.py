"""
Per-command I/O attribution across process churn.

TaskIOTracker keeps two tables: the live table (pid -> latest TaskInfo) and the
historical table (command -> summed final counters of every exited process).
Each poll diffs the previous live pids against the fresh snapshot; processes
that disappeared have their last-seen counters folded into the historical
table exactly once.
"""

import logging
import threading
from typing import Dict, Iterable, List

from ..models.tasks import TaskInfo

logger = logging.getLogger(__name__)


class TaskIOTracker:
    """
    Reconciles successive process snapshots into durable per-command totals.

    A process is identified by its pid and start time: a pid that reappears
    with a different start time is a new process, and its predecessor is
    treated as exited.
    """

    def __init__(self):
        self._running: Dict[int, TaskInfo] = {}
        self._old: Dict[str, TaskInfo] = {}
        self._lock = threading.RLock()
        self.polls = 0
        self.exited_total = 0

    def poll_and_reconcile(self, tasks: Iterable[TaskInfo]) -> List[TaskInfo]:
        """
        Replace the live table with a fresh snapshot.

        Args:
            tasks: TaskInfo for every currently observable process. A process
                   missing from this list (exited, or unreadable this tick) is
                   treated as exited.

        Returns:
            The last-seen records of the processes that exited since the
            previous poll.
        """
        new_running: Dict[int, TaskInfo] = {}
        for task in tasks:
            new_running[task.pid] = task.copy()

        with self._lock:
            exited = []
            for pid, old_task in self._running.items():
                new_task = new_running.get(pid)
                if new_task is None or new_task.starttime != old_task.starttime:
                    exited.append(old_task)

            for task in exited:
                self._retire(task)

            self._running = new_running
            self.polls += 1
            self.exited_total += len(exited)

        if exited:
            logger.debug(
                f"Task poll {self.polls}: {len(new_running)} running, "
                f"{len(exited)} exited"
            )
        return exited

    def _retire(self, task: TaskInfo) -> None:
        entry = self._old.get(task.cmd)
        if entry is None:
            self._old[task.cmd] = task.as_aggregate()
        else:
            entry.add_counters(task)

    def live_snapshot(self) -> Dict[int, TaskInfo]:
        """
        A copy of the live table keyed by pid. Only valid until the next poll.
        """
        with self._lock:
            return {pid: task.copy() for pid, task in self._running.items()}

    def history_snapshot(self) -> Dict[str, TaskInfo]:
        """A copy of the historical table keyed by command name."""
        with self._lock:
            return {cmd: task.copy() for cmd, task in self._old.items()}

    def merged_by_command(self) -> Dict[str, TaskInfo]:
        """
        All I/O ever attributed to each command, live and exited processes
        combined.

        `pid` and `starttime` are kept only when a single live process is the
        sole contributor for its command; otherwise they are zero.
        """
        with self._lock:
            merged: Dict[str, TaskInfo] = {}
            for task in self._running.values():
                entry = merged.get(task.cmd)
                if entry is None:
                    merged[task.cmd] = task.copy()
                else:
                    entry.add_counters(task)
                    entry.pid = 0
                    entry.starttime = 0.0

            for cmd, old in self._old.items():
                entry = merged.get(cmd)
                if entry is None:
                    merged[cmd] = old.copy()
                else:
                    entry.add_counters(old)
                    entry.pid = 0
                    entry.starttime = 0.0
            return merged

    def get_tasks(self) -> List[TaskInfo]:
        """The merged per-command view as a list, sorted by command name."""
        merged = self.merged_by_command()
        return [merged[cmd] for cmd in sorted(merged)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._running)
