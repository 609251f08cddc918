"""
Unit tests for reads racing with updates on the shared state machines.

A writer thread drives the state machine while the test thread keeps taking
reports; every report must describe a state the writer actually produced.
"""

import threading

import pytest

from iomonitor.monitoring.disk_monitor import DiskStatsMonitor
from iomonitor.monitoring.task_tracker import TaskIOTracker

NORMAL_INC = dict(read_ios=200, read_sectors=200, write_ios=100, write_sectors=100, io_ticks=600, io_in_queue=300)
STALL_INC = dict(NORMAL_INC, read_sectors=20, write_sectors=10, io_in_queue=1200)

UPDATES = 2000


def run_concurrently(writer, reader):
    """Run `writer` on a thread and call `reader` until it finishes."""
    errors = []

    def guarded():
        try:
            writer()
        except Exception as e:
            errors.append(e)

    thread = threading.Thread(target=guarded, daemon=True)
    thread.start()
    reads = 0
    while thread.is_alive():
        reader()
        reads += 1
    thread.join(timeout=10.0)
    reader()

    assert not errors
    return reads + 1


@pytest.mark.unit
class TestConcurrentReads:
    """Reporting while another thread updates."""

    def test_monitor_state_is_consistent(self, disk_stats_builder):
        """get_state never sees an overfull window or a stall before validity."""
        monitor = DiskStatsMonitor(window_size=5)
        violations = []
        last_accepted = [0]

        def writer():
            for i in range(UPDATES):
                increments = STALL_INC if i % 50 == 49 else NORMAL_INC
                monitor.update(disk_stats_builder.advance(**increments))

        def reader():
            state = monitor.get_state()
            if state["samples_in_window"] > state["window"]:
                violations.append(f"window overflow: {state['samples_in_window']}")
            if state["stall"] and not state["valid"]:
                violations.append("stall reported before the baseline was valid")
            if state["accepted_intervals"] < last_accepted[0]:
                violations.append("accepted interval count went backwards")
            last_accepted[0] = state["accepted_intervals"]

        run_concurrently(writer, reader)

        assert violations == []
        assert monitor.get_state()["accepted_intervals"] == UPDATES - 1

    def test_merged_totals_never_lose_exited_tasks(self, task_factory):
        """
        A process replaced on every poll is retired and re-added atomically,
        so the merged per-command total only ever grows in whole steps.
        """
        tracker = TaskIOTracker()
        violations = []
        last_total = [0]

        def writer():
            for pid in range(1, UPDATES + 1):
                tracker.poll_and_reconcile([task_factory(pid, "dd", write_bytes=10)])

        def reader():
            merged = tracker.merged_by_command()
            total = merged["dd"].write_bytes if "dd" in merged else 0
            if total % 10 or total < last_total[0]:
                violations.append(f"inconsistent total {total} after {last_total[0]}")
            last_total[0] = total

        run_concurrently(writer, reader)

        assert violations == []
        assert tracker.merged_by_command()["dd"].write_bytes == 10 * UPDATES
        assert tracker.exited_total == UPDATES - 1
