"""
Per-process I/O accounting data models.
"""

from dataclasses import dataclass, replace

# Command names longer than this are truncated by the collector.
MAX_COMMAND_LENGTH = 64

# Cumulative counters summed when tasks are aggregated by command name.
TASK_COUNTER_FIELDS = (
    "rchar",
    "wchar",
    "syscr",
    "syscw",
    "read_bytes",
    "write_bytes",
    "cancelled_write_bytes",
)


@dataclass
class TaskInfo:
    """
    I/O attribution for a single process (or an aggregate of processes).

    The counters mirror `/proc/<pid>/io`. In aggregated records `pid` and
    `starttime` are zero.
    """

    pid: int = 0
    # Characters read/written through read(2)/write(2) and friends.
    rchar: int = 0
    wchar: int = 0
    # Number of read/write syscalls.
    syscr: int = 0
    syscw: int = 0
    # Bytes actually fetched from / sent to the storage layer.
    read_bytes: int = 0
    write_bytes: int = 0
    # Bytes written then truncated or discarded before reaching storage.
    cancelled_write_bytes: int = 0
    # Process start time; immutable for the lifetime of a pid.
    starttime: float = 0.0
    cmd: str = ""

    def copy(self) -> "TaskInfo":
        return replace(self)

    def add_counters(self, other: "TaskInfo") -> None:
        """Add the counters of `other` into this record, in place."""
        for name in TASK_COUNTER_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(other, name))

    def as_aggregate(self) -> "TaskInfo":
        """Return a copy with the per-process identity fields cleared."""
        return replace(self, pid=0, starttime=0.0)

    def to_dict(self) -> dict:
        return {
            "cmd": self.cmd,
            "pid": self.pid,
            "starttime": self.starttime,
            "rchar": self.rchar,
            "wchar": self.wchar,
            "syscr": self.syscr,
            "syscw": self.syscw,
            "read_bytes": self.read_bytes,
            "write_bytes": self.write_bytes,
            "cancelled_write_bytes": self.cancelled_write_bytes,
        }
