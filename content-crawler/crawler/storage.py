from abc import ABC, abstractmethod
from typing import Optional
from crawler.models import PageRecord, LinkEdge


class PageStore(ABC):
    """
    Abstract interface for crawled page storage.
    URL is the unique key; records are written once and never updated.
    """

    @abstractmethod
    def find_by_url(self, url: str) -> Optional[PageRecord]:
        pass

    @abstractmethod
    def find_by_id(self, page_id: int) -> Optional[PageRecord]:
        pass

    @abstractmethod
    def save(self, page: PageRecord) -> PageRecord:
        """
        Persist the page and return it with its id.
        If the URL already exists, the stored record is returned unchanged.
        """
        pass


class LinkEdgeStore(ABC):
    """Abstract interface for outgoing link storage. (source_page_id, link_url) is unique."""

    @abstractmethod
    def save(self, edge: LinkEdge) -> bool:
        """Returns True if a new edge was written, False if it already existed."""
        pass
