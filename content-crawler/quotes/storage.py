from abc import ABC, abstractmethod
from typing import Optional
from quotes.models import QuoteRecord


class QuoteStore(ABC):
    """
    Abstract interface for quote snapshots.
    Append-only: one row per crawl attempt, no uniqueness on URL.
    """

    @abstractmethod
    def save(self, quote: QuoteRecord) -> QuoteRecord:
        pass

    @abstractmethod
    def find_by_id(self, quote_id: int) -> Optional[QuoteRecord]:
        pass

    @abstractmethod
    def find_latest(self, stock_code: str) -> Optional[QuoteRecord]:
        """Most recent successful snapshot for the code."""
        pass
