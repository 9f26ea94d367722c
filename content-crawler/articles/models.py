from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple


@dataclass(frozen=True)
class ArticleRecord:
    """
    One news article. article_url is the unique key across runs.
    Translation columns are filled by a downstream consumer, never by the crawler.
    """
    article_url: str
    source: str
    crawled_at: datetime
    media: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None
    body_text: Optional[str] = None
    html_content: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    title_translated: Optional[str] = None
    body_translated: Optional[str] = None
    translated_at: Optional[datetime] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class ArticleSource:
    """
    Everything that differs between news sites: where to harvest links,
    which links count as articles, how politely to fetch them and how to parse them.
    """
    name: str
    index_urls: Tuple[str, ...]
    anchor_selector: str
    path_pattern: str
    domain: str
    referrer: str
    delay_min: float
    delay_max: float
    parse: Callable
    keep_html: bool = False


@dataclass
class ArticleRunSummary:
    source: str
    index_pages: int = 0
    harvested: int = 0
    saved: int = 0
    skipped_stored: int = 0
    failed_count: int = 0
    interrupted: bool = False
    failure_reasons: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def as_dict(self):
        return {
            "source": self.source,
            "index_pages": self.index_pages,
            "harvested": self.harvested,
            "saved": self.saved,
            "skipped_stored": self.skipped_stored,
            "failed_count": self.failed_count,
            "interrupted": self.interrupted,
            "failure_reasons": dict(self.failure_reasons),
        }
