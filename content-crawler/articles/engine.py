"""
FILE DESCRIPTION: Two-phase article pipeline (index-page link harvest, then paced detail fetch).
KEY FUNCTIONS/CLASSES: ArticlePipeline
"""

import re
import threading
from datetime import datetime
from urllib.parse import urlparse

from crawler.core import CRAWL_DELAY_MIN, CRAWL_DELAY_MAX, logger
from crawler.processor import LinkUtility, PageFetcher, PageParser
from crawler.throttle import Throttle
from articles.models import ArticleRecord, ArticleRunSummary


class ArticlePipeline:
    """
    FLOW: Phase 1 fetches every index page of the source and collects article links
    (registered domain + path pattern, deduplicated) -> Phase 2 drains the queue:
    skip stored -> long randomized delay -> fetch with the source referrer -> parse -> persist.

    A failing article never stops the queue. Setting stop_event abandons what is left.
    """
    def __init__(self, source, article_store, fetcher=None, index_throttle=None,
                 detail_throttle=None, stop_event=None):
        self.source = source
        self.article_store = article_store
        self.fetcher = fetcher or PageFetcher()
        self.stop_event = stop_event or threading.Event()
        self.index_throttle = index_throttle or Throttle(
            CRAWL_DELAY_MIN, CRAWL_DELAY_MAX, self.stop_event, name=source.name)
        self.detail_throttle = detail_throttle or Throttle(
            source.delay_min, source.delay_max, self.stop_event, name=source.name)
        self.name = f"{source.name}-articles"
        self._path_regex = re.compile(source.path_pattern)

    def log(self, level, msg):
        getattr(logger, level)(msg, extra={'context': self.name})

    def run(self) -> ArticleRunSummary:
        summary = ArticleRunSummary(source=self.source.name)
        self.log("info", f"Run started ({len(self.source.index_urls)} index pages)")

        queue = self.harvest(summary)
        if not summary.interrupted:
            self.drain(queue, summary)

        self.log(
            "info",
            f"Run finished: harvested={summary.harvested} saved={summary.saved} "
            f"skipped_stored={summary.skipped_stored} failed={summary.failed_count}"
        )
        return summary

    # --- phase 1 ---

    def is_article_url(self, url) -> bool:
        if LinkUtility.registered_domain(url) != self.source.domain:
            return False
        return bool(self._path_regex.search(urlparse(url).path))

    def harvest(self, summary=None):
        summary = summary or ArticleRunSummary(source=self.source.name)
        visited = set()
        queue = []

        for i, index_url in enumerate(self.source.index_urls):
            if i > 0 and not self.index_throttle.pause():
                summary.interrupted = True
                self.log("warning", "Interrupted during index harvest")
                break

            response = self.fetcher.fetch(index_url, referrer=self.source.referrer)
            summary.index_pages += 1
            if not response.ok:
                summary.failure_reasons[response.status.value] += 1
                self.log("error", f"Index fetch failed for {index_url}: {response.error}")
                continue

            found = 0
            soup = PageParser.soup(response.body)
            for a in soup.select(self.source.anchor_selector):
                url = LinkUtility.resolve(a.get("href"), index_url)
                if not url or url in visited or not self.is_article_url(url):
                    continue
                visited.add(url)
                queue.append(url)
                found += 1
            self.log("info", f"Harvested {found} article links from {index_url}")

        summary.harvested = len(queue)
        return queue

    # --- phase 2 ---

    def drain(self, queue, summary=None):
        summary = summary or ArticleRunSummary(source=self.source.name)

        for position, url in enumerate(queue):
            if self.article_store.find_by_url(url) is not None:
                summary.skipped_stored += 1
                continue

            if not self.detail_throttle.pause():
                summary.interrupted = True
                self.log("warning", f"Interrupted, abandoning {len(queue) - position} queued articles")
                break

            try:
                self._process(url, summary)
            except Exception as e:
                summary.failed_count += 1
                summary.failure_reasons[type(e).__name__] += 1
                logger.exception(f"Article failed {url}: {e}", extra={'context': self.name})

        return summary

    def _process(self, url, summary):
        response = self.fetcher.fetch(url, referrer=self.source.referrer)
        if not response.ok:
            summary.failed_count += 1
            summary.failure_reasons[response.status.value] += 1
            self.log("error", f"Article fetch failed for {url}: {response.error}")
            return

        fields = self.source.parse(PageParser.soup(response.body), url)
        article = self.article_store.save(ArticleRecord(
            article_url=url,
            source=self.source.name,
            crawled_at=datetime.now(),
            status_code=response.status_code,
            html_content=response.body if self.source.keep_html else None,
            **fields,
        ))
        summary.saved += 1
        self.log("info", f"Saved article {article.id}: {article.title}")
