import threading
import unittest
from datetime import datetime
from unittest.mock import MagicMock

from scheduler.runner import PeriodicJob, build_jobs, in_trading_window


class TestTradingWindow(unittest.TestCase):
    def test_weekday_hours(self):
        monday = datetime(2025, 8, 4)
        self.assertTrue(in_trading_window(monday.replace(hour=9, minute=0)))
        self.assertTrue(in_trading_window(monday.replace(hour=15, minute=59)))
        self.assertFalse(in_trading_window(monday.replace(hour=8, minute=59)))
        self.assertFalse(in_trading_window(monday.replace(hour=16, minute=0)))

    def test_weekend(self):
        saturday = datetime(2025, 8, 2, 10, 0)
        self.assertFalse(in_trading_window(saturday))


class TestPeriodicJob(unittest.TestCase):
    def setUp(self):
        self.stop = threading.Event()

    def test_window_closed_skips_task(self):
        task = MagicMock()
        job = PeriodicJob("quote-job", task, (0, 0), self.stop, window=lambda: False)
        self.assertFalse(job.run_once())
        task.assert_not_called()

    def test_exception_is_logged_not_raised(self):
        job = PeriodicJob("news-job", MagicMock(side_effect=RuntimeError("db down")), (0, 0), self.stop)
        self.assertFalse(job.run_once())
        self.assertEqual(job.run_count, 1)

    def test_run_loops_until_stopped(self):
        calls = []

        def task():
            calls.append(1)
            if len(calls) == 3:
                self.stop.set()

        PeriodicJob("page-job", task, (0, 0), self.stop).run()
        self.assertEqual(len(calls), 3)

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            PeriodicJob("bad", MagicMock(), (10, 5), self.stop)


class TestBuildJobs(unittest.TestCase):
    def test_page_job_only_with_start_url(self):
        stop = threading.Event()
        self.assertEqual([j.name for j in build_jobs(stop, MagicMock(), start_url="")],
                         ["quote-job", "news-job"])
        self.assertEqual([j.name for j in build_jobs(stop, MagicMock(), start_url="https://example.com/")],
                         ["quote-job", "news-job", "page-job"])


if __name__ == "__main__":
    unittest.main()
