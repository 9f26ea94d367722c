from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


@dataclass(frozen=True)
class CrawlTask:
    """
    Unit of work owned by the Frontier.
    Created when a link is queued and consumed when dequeued. Never persisted.
    """
    url: str
    depth: int = 0
    parent_id: Optional[int] = None


class FetchStatus(Enum):
    OK = "OK"
    CONTENT_MISMATCH = "CONTENT_MISMATCH"    # non-200 or non-HTML
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"  # network, timeout, malformed URL


@dataclass(frozen=True)
class FetchResponse:
    """
    Outcome of one HTTP GET.

    INVARIANT: status == OK implies status_code == 200 and a text/html content type.
    TRANSPORT_FAILURE carries no status_code, only the error text.
    """
    url: str
    status: FetchStatus
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    body: str = ""
    error: Optional[str] = None
    fetch_time_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


@dataclass(frozen=True)
class PageRecord:
    """One crawled URL. Written once; a URL present in storage is never fetched again."""
    url: str
    domain: str
    depth: int
    crawled_at: datetime
    html_content: Optional[str] = None
    title: Optional[str] = None
    meta_description: Optional[str] = None
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    parent_id: Optional[int] = None
    error_message: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class LinkEdge:
    source_page_id: int
    link_url: str
    link_type: str
    crawled_at: datetime
    link_text: Optional[str] = None
    id: Optional[int] = None


@dataclass
class CrawlSummary:
    """Counters returned by a generic page crawl run."""
    start_url: str
    max_depth: int
    pages_saved: int = 0
    links_saved: int = 0
    skipped_stored: int = 0
    skipped_depth: int = 0
    queue_overflow: int = 0
    failed_count: int = 0
    interrupted: bool = False
    failure_reasons: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def as_dict(self):
        return {
            "start_url": self.start_url,
            "max_depth": self.max_depth,
            "pages_saved": self.pages_saved,
            "links_saved": self.links_saved,
            "skipped_stored": self.skipped_stored,
            "skipped_depth": self.skipped_depth,
            "queue_overflow": self.queue_overflow,
            "failed_count": self.failed_count,
            "interrupted": self.interrupted,
            "failure_reasons": dict(self.failure_reasons),
        }
