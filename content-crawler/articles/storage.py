from abc import ABC, abstractmethod
from typing import Optional
from articles.models import ArticleRecord


class ArticleStore(ABC):
    """
    Abstract interface for article storage.
    article_url is unique; an article already stored is never fetched again.
    """

    @abstractmethod
    def find_by_url(self, article_url: str) -> Optional[ArticleRecord]:
        pass

    @abstractmethod
    def find_by_id(self, article_id: int) -> Optional[ArticleRecord]:
        pass

    @abstractmethod
    def save(self, article: ArticleRecord) -> ArticleRecord:
        pass
