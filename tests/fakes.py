"""
In-memory stores and a scripted fetcher for exercising the engines without MySQL or network.
"""

import dataclasses
import itertools

from crawler.models import FetchResponse, FetchStatus
from crawler.storage import PageStore, LinkEdgeStore
from crawler.throttle import Throttle
from quotes.storage import QuoteStore
from articles.storage import ArticleStore


def html_response(url, body, status_code=200):
    return FetchResponse(url=url, status=FetchStatus.OK, status_code=status_code,
                         content_type="text/html; charset=utf-8", body=body)


class FakeFetcher:
    """Serves canned bodies by URL; anything unknown is a transport failure."""

    def __init__(self, pages=None, errors=None):
        self.pages = dict(pages or {})
        self.errors = dict(errors or {})
        self.calls = []

    def fetch(self, url, referrer=None):
        self.calls.append((url, referrer))
        if url in self.errors:
            raise self.errors[url]
        page = self.pages.get(url)
        if page is None:
            return FetchResponse(url=url, status=FetchStatus.TRANSPORT_FAILURE,
                                 error="ConnectionError: unreachable")
        if isinstance(page, FetchResponse):
            return page
        return html_response(url, page)

    @property
    def fetched_urls(self):
        return [url for url, _ in self.calls]


class CountingThrottle(Throttle):
    """Zero-delay throttle that counts pauses and can trip its stop event after N pauses."""

    def __init__(self, stop_after=None, stop_event=None):
        super().__init__(0, 0, stop_event)
        self.pauses = 0
        self.stop_after = stop_after

    def pause(self):
        if self.interrupted:
            return False
        self.pauses += 1
        if self.stop_after is not None and self.pauses >= self.stop_after:
            self.stop_event.set()
            return False
        return True


class InMemoryPageStore(PageStore):
    def __init__(self):
        self.by_url = {}
        self.by_id = {}
        self._ids = itertools.count(1)

    def find_by_url(self, url):
        return self.by_url.get(url)

    def find_by_id(self, page_id):
        return self.by_id.get(page_id)

    def save(self, page):
        if page.url in self.by_url:
            return self.by_url[page.url]
        saved = dataclasses.replace(page, id=next(self._ids))
        self.by_url[saved.url] = saved
        self.by_id[saved.id] = saved
        return saved


class InMemoryLinkEdgeStore(LinkEdgeStore):
    def __init__(self):
        self.edges = {}

    def save(self, edge):
        key = (edge.source_page_id, edge.link_url)
        if key in self.edges:
            return False
        self.edges[key] = edge
        return True


class InMemoryQuoteStore(QuoteStore):
    def __init__(self):
        self.records = []

    def save(self, quote):
        saved = dataclasses.replace(quote, id=len(self.records) + 1)
        self.records.append(saved)
        return saved

    def find_by_id(self, quote_id):
        return next((q for q in self.records if q.id == quote_id), None)

    def find_latest(self, stock_code):
        matches = [q for q in self.records if q.stock_code == stock_code and q.error_message is None]
        return matches[-1] if matches else None


class InMemoryArticleStore(ArticleStore):
    def __init__(self, articles=()):
        self.by_url = {}
        self.by_id = {}
        for article in articles:
            self.save(article)

    def find_by_url(self, article_url):
        return self.by_url.get(article_url)

    def find_by_id(self, article_id):
        return self.by_id.get(article_id)

    def save(self, article):
        if article.article_url in self.by_url:
            return self.by_url[article.article_url]
        saved = dataclasses.replace(article, id=len(self.by_id) + 1)
        self.by_url[saved.article_url] = saved
        self.by_id[saved.id] = saved
        return saved
