from __future__ import annotations

import unittest

from reqstats.stats import RequestStats
from reqstats.store import MetricsStore
from tests.support.fixtures import MS, ManualClock, ManualTimer, RecordingSend


class RequestStatsTests(unittest.TestCase):
    def test_begin_end_and_data(self) -> None:
        timer = ManualTimer()
        stats = RequestStats(timer=timer)

        start, recorder = stats.begin(RecordingSend())
        timer.advance(8 * MS)
        stats.end(start, recorder, "/x", "GET", "ua")
        start, _ = stats.begin(RecordingSend())
        timer.advance(2 * MS)
        stats.end_with_status(start, 500, "/x", "GET", "ua")

        snapshot = stats.data()
        self.assertEqual(snapshot.total_count, 2)
        self.assertEqual(snapshot.total_status_code_count, {"200": 1, "500": 1})
        self.assertEqual(snapshot.average_response_time, "5ms")

    def test_uses_injected_store(self) -> None:
        store = MetricsStore(process_id=9)

        stats = RequestStats(store)

        self.assertIs(stats.store, store)
        self.assertEqual(stats.data().pid, 9)

    def test_context_manager_runs_scheduler(self) -> None:
        with RequestStats(clock=ManualClock()) as stats:
            self.assertTrue(stats.scheduler.running)

        self.assertFalse(stats.scheduler.running)

    def test_instances_are_isolated(self) -> None:
        first = RequestStats()
        second = RequestStats()

        first.store.record(MS, 200, "/", "GET", "ua")

        self.assertEqual(first.data().total_count, 1)
        self.assertEqual(second.data().total_count, 0)

    def test_legacy_zero_minimum_is_forwarded(self) -> None:
        stats = RequestStats(legacy_zero_minimum=True)
        stats.store.record(0, 200, "/", "GET", "ua")
        stats.store.record(MS, 200, "/", "GET", "ua")

        self.assertEqual(stats.data().url_lowest_response, {"/": float(MS)})


if __name__ == "__main__":
    unittest.main()
