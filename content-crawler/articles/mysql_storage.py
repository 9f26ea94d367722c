import dataclasses
from typing import Optional
from articles.models import ArticleRecord
from articles.storage import ArticleStore
from crawler.mysql_storage import url_hash


class MySQLArticleStore(ArticleStore):
    """
    MySQL implementation of ArticleStore.
    INSERT IGNORE on article_url_hash; a lost race returns the row that won.
    """

    _COLUMNS = (
        "article_url", "source", "media", "category", "title", "body_text", "html_content",
        "author", "published_at", "crawled_at", "status_code", "error_message",
        "title_translated", "body_translated", "translated_at",
    )

    def __init__(self, connection_pool):
        self._pool = connection_pool

    def find_by_url(self, article_url: str) -> Optional[ArticleRecord]:
        sql = f"SELECT id, {', '.join(self._COLUMNS)} FROM articles WHERE article_url_hash = %s"
        with self._pool.cursor() as cursor:
            cursor.execute(sql, (url_hash(article_url),))
            row = cursor.fetchone()
            if row:
                return self._row_to_article(row)
        return None

    def find_by_id(self, article_id: int) -> Optional[ArticleRecord]:
        sql = f"SELECT id, {', '.join(self._COLUMNS)} FROM articles WHERE id = %s"
        with self._pool.cursor() as cursor:
            cursor.execute(sql, (article_id,))
            row = cursor.fetchone()
            if row:
                return self._row_to_article(row)
        return None

    def save(self, article: ArticleRecord) -> ArticleRecord:
        columns = self._COLUMNS + ("article_url_hash",)
        sql = f"""
            INSERT IGNORE INTO articles ({', '.join(columns)})
            VALUES ({', '.join(['%s'] * len(columns))})
        """
        values = tuple(getattr(article, name) for name in self._COLUMNS) + (url_hash(article.article_url),)
        with self._pool.cursor() as cursor:
            affected = cursor.execute(sql, values)
            self._pool.commit()
            if affected > 0:
                return dataclasses.replace(article, id=cursor.lastrowid)

        existing = self.find_by_url(article.article_url)
        return existing if existing is not None else article

    def _row_to_article(self, row) -> ArticleRecord:
        return ArticleRecord(id=row[0], **dict(zip(self._COLUMNS, row[1:])))
