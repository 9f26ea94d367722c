import hashlib
import dataclasses
from typing import Optional
from crawler.models import PageRecord, LinkEdge
from crawler.storage import PageStore, LinkEdgeStore


def url_hash(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class MySQLPageStore(PageStore):
    """
    MySQL implementation of PageStore.
    Uniqueness is enforced by url_hash; concurrent writers of the same URL converge on one row.
    """

    _COLUMNS = """
        id, url, domain, html_content, title, meta_description, status_code,
        content_type, crawled_at, depth, parent_id, error_message
    """

    def __init__(self, connection_pool):
        self._pool = connection_pool

    def find_by_url(self, url: str) -> Optional[PageRecord]:
        sql = f"SELECT {self._COLUMNS} FROM crawled_pages WHERE url_hash = %s"
        with self._pool.cursor() as cursor:
            cursor.execute(sql, (url_hash(url),))
            row = cursor.fetchone()
            if row:
                return self._row_to_page(row)
        return None

    def find_by_id(self, page_id: int) -> Optional[PageRecord]:
        sql = f"SELECT {self._COLUMNS} FROM crawled_pages WHERE id = %s"
        with self._pool.cursor() as cursor:
            cursor.execute(sql, (page_id,))
            row = cursor.fetchone()
            if row:
                return self._row_to_page(row)
        return None

    def save(self, page: PageRecord) -> PageRecord:
        sql = """
            INSERT IGNORE INTO crawled_pages (
                url, url_hash, domain, html_content, title, meta_description,
                status_code, content_type, crawled_at, depth, parent_id, error_message
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """
        with self._pool.cursor() as cursor:
            affected = cursor.execute(sql, (
                page.url, url_hash(page.url), page.domain, page.html_content, page.title,
                page.meta_description, page.status_code, page.content_type,
                page.crawled_at, page.depth, page.parent_id, page.error_message
            ))
            self._pool.commit()
            if affected > 0:
                return dataclasses.replace(page, id=cursor.lastrowid)

        existing = self.find_by_url(page.url)
        return existing if existing is not None else page

    def _row_to_page(self, row) -> PageRecord:
        return PageRecord(
            id=row[0],
            url=row[1],
            domain=row[2],
            html_content=row[3],
            title=row[4],
            meta_description=row[5],
            status_code=row[6],
            content_type=row[7],
            crawled_at=row[8],
            depth=row[9],
            parent_id=row[10],
            error_message=row[11]
        )


class MySQLLinkEdgeStore(LinkEdgeStore):
    """MySQL implementation of LinkEdgeStore keyed on (source_page_id, link_url_hash)."""

    def __init__(self, connection_pool):
        self._pool = connection_pool

    def save(self, edge: LinkEdge) -> bool:
        sql = """
            INSERT IGNORE INTO extracted_links (
                source_page_id, link_url, link_url_hash, link_text, link_type, crawled_at
            ) VALUES (%s, %s, %s, %s, %s, %s)
        """
        with self._pool.cursor() as cursor:
            affected = cursor.execute(sql, (
                edge.source_page_id, edge.link_url, url_hash(edge.link_url),
                edge.link_text, edge.link_type, edge.crawled_at
            ))
            self._pool.commit()
            return affected > 0
