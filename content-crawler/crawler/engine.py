"""
FILE DESCRIPTION: Orchestration module for the generic breadth-first page crawl.
CONSOLIDATED FROM: frontier.py, queue.py, worker.py
KEY FUNCTIONS/CLASSES: Frontier, PageCrawler
"""

from collections import deque
from datetime import datetime

from crawler.core import MAX_DEPTH, MAX_QUEUE_SIZE, CRAWL_DELAY_MIN, CRAWL_DELAY_MAX, logger
from crawler.models import CrawlTask, CrawlSummary, PageRecord, LinkEdge
from crawler.policy import LinkPolicy
from crawler.processor import LinkUtility, PageFetcher, PageParser, LinkExtractor
from crawler.throttle import Throttle


# === FRONTIER MANAGEMENT ===

class Frontier:
    """
    FLOW: Holds the FIFO work queue and the run-scoped visited set ->
    Rejects too-deep, already-visited and already-stored URLs at enqueue time ->
    Marks every accepted URL visited so the first enqueuer wins.
    """
    def __init__(self, max_depth, max_queue_size=MAX_QUEUE_SIZE, is_stored=None):
        self.max_depth = max_depth
        self.max_queue_size = max_queue_size
        self.is_stored = is_stored or (lambda url: False)
        self.queue = deque()
        self.visited = set()

    def seed(self, url):
        self.visited.add(url)
        self.queue.append(CrawlTask(url=url, depth=0, parent_id=None))

    def enqueue(self, url, depth, parent_id=None) -> str:
        """
        Returns:
        - "enqueued" if queued
        - "too_deep" if depth exceeds max_depth
        - "duplicate" if already visited in this run
        - "stored" if the URL already exists in storage
        - "queue_full" if the queue cap is reached
        """
        if depth > self.max_depth:
            return "too_deep"
        if url in self.visited:
            return "duplicate"
        if self.is_stored(url):
            self.visited.add(url)
            return "stored"
        if self.max_queue_size and len(self.queue) >= self.max_queue_size:
            return "queue_full"

        self.visited.add(url)
        self.queue.append(CrawlTask(url=url, depth=depth, parent_id=parent_id))
        return "enqueued"

    def dequeue(self):
        return self.queue.popleft() if self.queue else None

    def __len__(self):
        return len(self.queue)


# === PAGE CRAWLER ===

class PageCrawler:
    """
    FLOW: Seeds the Frontier -> Dequeues a task -> Skips too-deep or already stored URLs ->
    Fetches and persists a PageRecord (failures included) -> Extracts, classifies and stores links ->
    Enqueues same-domain children at depth + 1 -> Pauses after every fetched task -> Repeats until empty.
    """
    def __init__(self, page_store, link_store, fetcher=None, throttle=None,
                 max_queue_size=MAX_QUEUE_SIZE, name="page-crawler"):
        self.page_store = page_store
        self.link_store = link_store
        self.fetcher = fetcher or PageFetcher()
        self.throttle = throttle or Throttle(CRAWL_DELAY_MIN, CRAWL_DELAY_MAX, name=name)
        self.max_queue_size = max_queue_size
        self.name = name

    def log(self, level, msg):
        getattr(logger, level)(msg, extra={'context': self.name})

    def _is_stored(self, url):
        return self.page_store.find_by_url(url) is not None

    def crawl(self, start_url, max_depth=MAX_DEPTH) -> CrawlSummary:
        if not start_url:
            raise ValueError("start_url is required")
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")

        summary = CrawlSummary(start_url=start_url, max_depth=max_depth)
        frontier = Frontier(max_depth, self.max_queue_size, is_stored=self._is_stored)
        frontier.seed(start_url)
        self.log("info", f"Crawl started at {start_url} (max depth {max_depth})")

        while True:
            task = frontier.dequeue()
            if task is None:
                break

            if task.depth > max_depth:
                summary.skipped_depth += 1
                continue
            if self._is_stored(task.url):
                summary.skipped_stored += 1
                self.log("info", f"Already in DB: {task.url}")
                continue

            try:
                with self.throttle.spacing():
                    self._visit(task, frontier, summary)
            except Exception as e:
                summary.failed_count += 1
                summary.failure_reasons[type(e).__name__] += 1
                logger.exception(f"Process error for {task.url}: {e}", extra={'context': self.name})

            if self.throttle.interrupted:
                summary.interrupted = True
                self.log("warning", f"Interrupted, abandoning {len(frontier)} queued URLs")
                break

        self.log(
            "info",
            f"Crawl finished: saved={summary.pages_saved} links={summary.links_saved} "
            f"skipped_stored={summary.skipped_stored} failed={summary.failed_count}"
        )
        return summary

    def _visit(self, task, frontier, summary):
        response = self.fetcher.fetch(task.url)
        now = datetime.now()
        domain = LinkUtility.get_domain(task.url)

        parent_id = None
        if task.parent_id is not None:
            parent = self.page_store.find_by_id(task.parent_id)
            parent_id = parent.id if parent else None

        if not response.ok:
            self.page_store.save(PageRecord(
                url=task.url, domain=domain, depth=task.depth, crawled_at=now,
                status_code=response.status_code, content_type=response.content_type,
                parent_id=parent_id, error_message=response.error,
            ))
            summary.pages_saved += 1
            summary.failed_count += 1
            summary.failure_reasons[response.status.value] += 1
            self.log("error", f"Fetch failed for {task.url}: {response.error}")
            return

        soup = PageParser.soup(response.body)
        page = self.page_store.save(PageRecord(
            url=task.url, domain=domain, depth=task.depth, crawled_at=now,
            html_content=response.body,
            title=PageParser.title(soup),
            meta_description=PageParser.meta_description(soup),
            status_code=response.status_code, content_type=response.content_type,
            parent_id=parent_id,
        ))
        summary.pages_saved += 1
        self.log("info", f"DB: Inserted {task.url} (depth {task.depth})")

        for link_url, link_text in LinkExtractor.extract_links(soup, task.url):
            edge = LinkEdge(
                source_page_id=page.id, link_url=link_url, link_text=link_text,
                link_type=LinkPolicy.classify(link_url, domain), crawled_at=now,
            )
            if self.link_store.save(edge):
                summary.links_saved += 1

            if not LinkPolicy.is_same_domain(link_url, task.url):
                continue
            if frontier.enqueue(link_url, task.depth + 1, parent_id=page.id) == "queue_full":
                summary.queue_overflow += 1
