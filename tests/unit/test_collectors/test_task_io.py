"""
Unit tests for the psutil-based process I/O collector.
"""

from unittest.mock import Mock, patch

import psutil
import pytest

from iomonitor.collectors.task_io import (
    TaskIOCollector,
    command_name,
    read_cancelled_write_bytes,
)
from iomonitor.models.tasks import MAX_COMMAND_LENGTH

PROC_IO = """rchar: 5000
wchar: 9000
syscr: 10
syscw: 20
read_bytes: 4096
write_bytes: 8192
cancelled_write_bytes: 1024
"""


@pytest.mark.unit
class TestHelpers:
    """Test cases for the module-level helpers."""

    def test_command_from_cmdline(self):
        """The first argument names the command."""
        assert command_name(["/system/bin/app_process", "-Xzygote"], "zygote") == "/system/bin/app_process"

    def test_command_falls_back_to_name(self):
        """Kernel threads have no command line."""
        assert command_name([], "kworker/0:1") == "kworker/0:1"
        assert command_name(None, None) == ""

    def test_command_truncated(self):
        """Long commands are cut to the maximum length."""
        assert len(command_name(["x" * 200], "x")) == MAX_COMMAND_LENGTH

    def test_cancelled_write_bytes(self, temp_dir):
        """The counter psutil lacks is parsed from /proc/<pid>/io."""
        (temp_dir / "42").mkdir()
        (temp_dir / "42" / "io").write_text(PROC_IO)
        assert read_cancelled_write_bytes(42, temp_dir) == 1024

    def test_cancelled_write_bytes_unreadable(self, temp_dir):
        """A missing io file yields zero."""
        assert read_cancelled_write_bytes(42, temp_dir) == 0


@pytest.mark.unit
class TestTaskIOCollector:
    """Test cases for TaskIOCollector."""

    def test_invalid_pattern(self):
        """A pattern that does not compile is rejected."""
        with pytest.raises(ValueError):
            TaskIOCollector("([")

    def test_builds_task_info(self, mock_process, temp_dir):
        """psutil counters map onto the /proc/<pid>/io names."""
        (temp_dir / "4242").mkdir()
        (temp_dir / "4242" / "io").write_text(PROC_IO)
        collector = TaskIOCollector(proc_root=str(temp_dir))

        with patch("iomonitor.collectors.task_io.psutil.process_iter", return_value=[mock_process]):
            tasks = collector.read()

        assert len(tasks) == 1
        task = tasks[0]
        assert task.pid == 4242
        assert task.cmd == "/usr/bin/writer"
        assert task.rchar == 5000
        assert task.wchar == 9000
        assert task.syscr == 10
        assert task.syscw == 20
        assert task.read_bytes == 4096
        assert task.write_bytes == 8192
        assert task.cancelled_write_bytes == 1024
        assert task.starttime == 1700000000.5
        assert collector.reads_ok == 1

    def test_pattern_filters(self, mock_process):
        """Non-matching processes are skipped."""
        collector = TaskIOCollector("^sshd$")
        with patch("iomonitor.collectors.task_io.psutil.process_iter", return_value=[mock_process]):
            assert collector.read() == []

    def test_vanished_process_is_omitted(self, mock_process):
        """Processes that exit or deny access during the scan are skipped."""
        gone = Mock()
        gone.pid = 1
        gone.as_dict.side_effect = psutil.NoSuchProcess(1)
        denied = Mock()
        denied.pid = 2
        denied.as_dict.return_value = {"pid": 2, "name": "init", "cmdline": [], "create_time": 1.0}
        denied.io_counters.side_effect = psutil.AccessDenied(2)

        collector = TaskIOCollector()
        with patch(
            "iomonitor.collectors.task_io.psutil.process_iter",
            return_value=[gone, denied, mock_process],
        ):
            tasks = collector.read()

        assert [t.pid for t in tasks] == [4242]

    def test_enumeration_failure(self):
        """A failing process table yields an empty snapshot."""
        collector = TaskIOCollector()
        with patch(
            "iomonitor.collectors.task_io.psutil.process_iter",
            side_effect=OSError("no /proc"),
        ):
            assert collector.read() == []
        assert collector.reads_failed == 1
