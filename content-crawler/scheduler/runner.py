"""
FILE DESCRIPTION: Jittered periodic triggering of the crawl pipelines.
KEY FUNCTIONS/CLASSES: PeriodicJob, Scheduler, in_trading_window, build_jobs

Each job runs on its own thread and waits a random delay, drawn from its
interval range, between the end of one run and the start of the next.
Every run opens and closes its own database connection.
"""

import random
import threading
import time
from contextlib import closing
from datetime import datetime
from zoneinfo import ZoneInfo

from crawler.core import (
    MARKET_TIMEZONE, QUOTE_CODES, QUOTE_JOB_INTERVAL, NEWS_JOB_INTERVAL,
    PAGE_JOB_INTERVAL, START_URL, MAX_DEPTH, CRAWL_DELAY_MIN, CRAWL_DELAY_MAX, logger,
)
from crawler.db import get_connection
from crawler.engine import PageCrawler
from crawler.mysql_storage import MySQLPageStore, MySQLLinkEdgeStore
from crawler.throttle import Throttle
from quotes.engine import QuoteCrawler
from quotes.mysql_storage import MySQLQuoteStore
from articles.engine import ArticlePipeline
from articles.mysql_storage import MySQLArticleStore
from articles.sources import SOURCES


def in_trading_window(now=None, tz=MARKET_TIMEZONE):
    """
    Mon-Fri 09:00-15:59 exchange time. Naive datetimes are taken as exchange time.
    """
    if now is None:
        now = datetime.now(ZoneInfo(tz))
    elif now.tzinfo is not None:
        now = now.astimezone(ZoneInfo(tz))
    return now.weekday() < 5 and 9 <= now.hour < 16


class PeriodicJob(threading.Thread):
    """
    FLOW: Checks the optional window -> Runs the task once (last-resort log on exception) ->
    Waits a jittered delay on the stop event -> Repeats until stopped.
    """
    def __init__(self, name, task, interval, stop_event, window=None):
        super().__init__(name=name, daemon=True)
        low, high = interval
        if low < 0 or high < low:
            raise ValueError(f"invalid interval for {name}: {interval}")
        self.task = task
        self.interval = interval
        self.stop_event = stop_event
        self.window = window
        self.run_count = 0

    def log(self, level, msg):
        getattr(logger, level)(msg, extra={'context': self.name})

    def run_once(self) -> bool:
        if self.window is not None and not self.window():
            self.log("debug", "Outside run window, skipping")
            return False

        self.run_count += 1
        started = time.time()
        self.log("info", f"Run #{self.run_count} started")
        try:
            self.task()
        except Exception as e:
            logger.exception(f"Run #{self.run_count} failed: {e}", extra={'context': self.name})
            return False
        self.log("info", f"Run #{self.run_count} completed in {time.time() - started:.1f}s")
        return True

    def run(self):
        while not self.stop_event.is_set():
            self.run_once()
            if self.stop_event.wait(random.uniform(*self.interval)):
                break
        self.log("info", "Stopped")


class Scheduler:
    def __init__(self, jobs, stop_event):
        self.jobs = jobs
        self.stop_event = stop_event

    def start(self):
        for job in self.jobs:
            logger.info(f"Scheduling {job.name} every {job.interval[0]:.0f}-{job.interval[1]:.0f}s",
                        extra={'context': 'scheduler'})
            job.start()

    def stop(self):
        self.stop_event.set()

    def join(self, timeout=None):
        for job in self.jobs:
            job.join(timeout)

    def run_forever(self):
        self.start()
        try:
            while any(job.is_alive() for job in self.jobs):
                self.stop_event.wait(1)
        except KeyboardInterrupt:
            logger.info("Shutdown requested", extra={'context': 'scheduler'})
        finally:
            self.stop()
            self.join(timeout=30)


# === JOB TASKS ===

def quote_task(connection_factory=get_connection, codes=None):
    with closing(connection_factory()) as conn:
        QuoteCrawler(MySQLQuoteStore(conn)).crawl_codes(codes or QUOTE_CODES)


def news_task(stop_event, connection_factory=get_connection, sources=None):
    for name in sources or SOURCES:
        with closing(connection_factory()) as conn:
            ArticlePipeline(SOURCES[name], MySQLArticleStore(conn), stop_event=stop_event).run()
        if stop_event.is_set():
            break


def page_task(stop_event, start_url, max_depth=MAX_DEPTH, connection_factory=get_connection):
    with closing(connection_factory()) as conn:
        crawler = PageCrawler(
            MySQLPageStore(conn), MySQLLinkEdgeStore(conn),
            throttle=Throttle(CRAWL_DELAY_MIN, CRAWL_DELAY_MAX, stop_event, name="page-crawler"),
        )
        crawler.crawl(start_url, max_depth)


def build_jobs(stop_event, connection_factory=get_connection, start_url=START_URL):
    jobs = [
        PeriodicJob("quote-job", lambda: quote_task(connection_factory),
                    QUOTE_JOB_INTERVAL, stop_event, window=in_trading_window),
        PeriodicJob("news-job", lambda: news_task(stop_event, connection_factory),
                    NEWS_JOB_INTERVAL, stop_event),
    ]
    if start_url:
        jobs.append(PeriodicJob("page-job", lambda: page_task(stop_event, start_url, connection_factory=connection_factory),
                                PAGE_JOB_INTERVAL, stop_event))
    return jobs
