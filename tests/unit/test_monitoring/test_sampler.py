"""
Unit tests for the differential disk sampler.
"""

import pytest

from iomonitor.models.disk import DiskPerf, DiskStats
from iomonitor.monitoring.sampler import (
    DiskStatsSampler,
    add_disk_stats,
    get_disk_perf,
    get_inc_disk_stats,
)


@pytest.mark.unit
class TestIncrement:
    """Test cases for get_inc_disk_stats."""

    def test_field_wise_delta(self):
        """Counters are subtracted and the interval is stamped."""
        prev = DiskStats(read_ios=10, write_sectors=100, io_ticks=50, io_in_flight=3, end_time=1000)
        curr = DiskStats(read_ios=25, write_sectors=180, io_ticks=90, io_in_flight=1, end_time=2000)

        inc = get_inc_disk_stats(prev, curr)

        assert inc.read_ios == 15
        assert inc.write_sectors == 80
        assert inc.io_ticks == 40
        assert inc.io_in_flight == 1
        assert inc.start_time == 1000
        assert inc.end_time == 2000
        assert inc.counter == 1
        assert inc.io_avg == 40.0

    def test_no_elapsed_time_is_discarded(self):
        """Equal or earlier timestamps yield no increment."""
        prev = DiskStats(read_ios=1, end_time=1000)
        assert get_inc_disk_stats(prev, DiskStats(read_ios=2, end_time=1000)) is None
        assert get_inc_disk_stats(prev, DiskStats(read_ios=2, end_time=900)) is None

    def test_counter_reset_is_discarded(self):
        """A counter going backwards discards the interval."""
        prev = DiskStats(write_ios=500, end_time=1000)
        curr = DiskStats(write_ios=3, end_time=2000)
        assert get_inc_disk_stats(prev, curr) is None

    def test_in_flight_may_drop(self):
        """io_in_flight is a gauge and may decrease."""
        prev = DiskStats(io_in_flight=8, end_time=1000)
        curr = DiskStats(io_in_flight=0, end_time=1100)
        inc = get_inc_disk_stats(prev, curr)
        assert inc is not None
        assert inc.io_in_flight == 0


@pytest.mark.unit
class TestPerf:
    """Test cases for get_disk_perf."""

    def test_rates(self):
        """Sectors become bytes per second, ios become ios per second."""
        inc = DiskStats(
            read_ios=200, read_sectors=200, write_ios=100, write_sectors=100,
            io_in_queue=300, start_time=0, end_time=100,
        )
        perf = get_disk_perf(inc)

        assert perf.read_perf == 1024000.0
        assert perf.read_ios == 2000.0
        assert perf.write_perf == 512000.0
        assert perf.write_ios == 1000.0
        assert perf.queue == 3.0

    def test_zero_duration_gives_zero_perf(self):
        """A degenerate interval yields an all-zero perf."""
        perf = get_disk_perf(DiskStats(read_ios=10, start_time=5, end_time=5))
        assert perf == DiskPerf()
        assert perf.is_zero()


@pytest.mark.unit
class TestAccumulate:
    """Test cases for add_disk_stats."""

    def test_accumulates_span_and_running_mean(self):
        """The accumulator spans all intervals and averages io_ticks."""
        acc = DiskStats()
        add_disk_stats(DiskStats(read_ios=5, io_ticks=10, start_time=0, end_time=100, counter=1, io_avg=10.0), acc)
        add_disk_stats(DiskStats(read_ios=7, io_ticks=30, start_time=100, end_time=250, counter=1, io_avg=30.0), acc)

        assert acc.read_ios == 12
        assert acc.io_ticks == 40
        assert acc.start_time == 0
        assert acc.end_time == 250
        assert acc.counter == 2
        assert acc.io_avg == pytest.approx(20.0)


@pytest.mark.unit
class TestDiskStatsSampler:
    """Test cases for DiskStatsSampler."""

    def test_first_snapshot_primes(self, disk_stats_builder):
        """The first reading only stores the previous snapshot."""
        sampler = DiskStatsSampler()
        assert sampler.sample(disk_stats_builder.advance(read_ios=5)) is None
        assert sampler.previous is not None

    def test_yields_increment_and_perf(self, disk_stats_builder):
        """The second reading yields an interval."""
        sampler = DiskStatsSampler()
        sampler.sample(disk_stats_builder.advance())
        inc, perf = sampler.sample(disk_stats_builder.advance(100, write_ios=100, write_sectors=100))

        assert inc.write_ios == 100
        assert perf.write_perf == 512000.0

    def test_discard_advances_previous(self, disk_stats_builder):
        """After a counter reset only one interval is lost."""
        sampler = DiskStatsSampler()
        sampler.sample(disk_stats_builder.advance(read_ios=1000))

        reset = DiskStats(read_ios=10, start_time=2000, end_time=2000)
        assert sampler.sample(reset) is None
        assert sampler.discarded == 1
        assert sampler.previous.read_ios == 10

        after = DiskStats(read_ios=30, start_time=2100, end_time=2100)
        inc, _ = sampler.sample(after)
        assert inc.read_ios == 20

    def test_previous_is_a_copy(self, disk_stats_builder):
        """Mutating the caller's snapshot does not corrupt the sampler."""
        sampler = DiskStatsSampler()
        stats = disk_stats_builder.advance(read_ios=5)
        sampler.sample(stats)
        stats.read_ios = 10**9
        assert sampler.previous.read_ios == 5

    def test_reset(self, disk_stats_builder):
        """reset() makes the next reading prime again."""
        sampler = DiskStatsSampler()
        sampler.sample(disk_stats_builder.advance())
        sampler.reset()
        assert sampler.sample(disk_stats_builder.advance()) is None
