"""
Unit tests for the stats registry.
"""

import threading

import pytest

from syncserver.core.stats import StatsRegistry, StatsSnapshot, format_uptime
from syncserver.http.status_codes import ResponseOutcome


class TestStatsRegistry:

    def test_starts_at_zero(self, stats: StatsRegistry):
        snap = stats.snapshot()

        assert snap == StatsSnapshot()
        assert snap.count("2xx") == snap.count("4xx") == snap.count("5xx") == 0

    def test_open_counts_active_and_total(self, stats: StatsRegistry):
        stats.connection_opened()
        stats.connection_opened()
        stats.connection_closed()

        snap = stats.snapshot()
        assert snap.active_connections == 1
        assert snap.total_requests == 2

    def test_close_without_open_raises(self, stats: StatsRegistry):
        with pytest.raises(RuntimeError):
            stats.connection_closed()

        assert stats.active_connections == 0

    def test_record_bytes(self, stats: StatsRegistry):
        stats.record_bytes(received=10)
        stats.record_bytes(transmitted=7)
        stats.record_bytes(received=1, transmitted=2)

        snap = stats.snapshot()
        assert snap.bytes_received == 11
        assert snap.bytes_transmitted == 9

    def test_negative_bytes_rejected(self, stats: StatsRegistry):
        with pytest.raises(ValueError):
            stats.record_bytes(received=-1)

    def test_record_outcome(self, stats: StatsRegistry):
        stats.record_outcome(ResponseOutcome.OK)
        stats.record_outcome(ResponseOutcome.OK)
        stats.record_outcome(ResponseOutcome.NOT_FOUND)
        stats.record_outcome(ResponseOutcome.SERVER_ERROR)

        snap = stats.snapshot()
        assert snap.count("2xx") == 2
        assert snap.count("4xx") == 1
        assert snap.count("5xx") == 1

    def test_snapshot_is_a_copy(self, stats: StatsRegistry):
        snap = stats.snapshot()
        stats.record_outcome(ResponseOutcome.OK)

        assert snap.count("2xx") == 0

    def test_concurrent_updates_are_not_lost(self, stats: StatsRegistry):
        """Many threads hammering the registry must not lose increments."""
        threads_count = 8
        iterations = 2000

        def worker():
            for _ in range(iterations):
                stats.connection_opened()
                stats.record_bytes(received=3, transmitted=5)
                stats.record_outcome(ResponseOutcome.OK)
                stats.connection_closed()

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        total = threads_count * iterations
        snap = stats.snapshot()
        assert snap.active_connections == 0
        assert snap.total_requests == total
        assert snap.bytes_received == 3 * total
        assert snap.bytes_transmitted == 5 * total
        assert snap.count("2xx") == total

    def test_snapshots_during_updates_stay_consistent(self, stats: StatsRegistry):
        """Active can never exceed total in any snapshot."""
        stop = threading.Event()
        bad = []

        def writer():
            while not stop.is_set():
                stats.connection_opened()
                stats.connection_closed()

        def reader():
            for _ in range(5000):
                snap = stats.snapshot()
                if snap.active_connections > snap.total_requests:
                    bad.append(snap)

        writers = [threading.Thread(target=writer) for _ in range(4)]
        for t in writers:
            t.start()
        reader()
        stop.set()
        for t in writers:
            t.join()

        assert bad == []


class TestFormatUptime:

    @pytest.mark.parametrize("seconds, expected", [
        (0, "0 days, 00:00:00"),
        (59.9, "0 days, 00:00:59"),
        (3661, "0 days, 01:01:01"),
        (90061, "1 days, 01:01:01"),
        (-5, "0 days, 00:00:00"),
    ])
    def test_format(self, seconds: float, expected: str):
        assert format_uptime(seconds) == expected
