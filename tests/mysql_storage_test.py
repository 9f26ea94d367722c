"""
MySQL stores against a mocked PyMySQL connection.
"""

import unittest
from datetime import datetime
from unittest.mock import MagicMock

from crawler.models import PageRecord, LinkEdge
from crawler.mysql_storage import MySQLPageStore, MySQLLinkEdgeStore, url_hash
from crawler.db import initialize_schema, verify_schema, REQUIRED_TABLES
from quotes.models import QuoteRecord
from quotes.mysql_storage import MySQLQuoteStore
from articles.models import ArticleRecord
from articles.mysql_storage import MySQLArticleStore

NOW = datetime(2025, 8, 1, 10, 5, 0)


class TestPageStore(unittest.TestCase):
    def setUp(self):
        self.mock_pool = MagicMock()
        self.cursor = self.mock_pool.cursor.return_value.__enter__.return_value
        self.store = MySQLPageStore(self.mock_pool)
        self.page = PageRecord(url="https://example.com/", domain="example.com", depth=0, crawled_at=NOW)

    def test_new_page_gets_lastrowid(self):
        self.cursor.execute.return_value = 1
        self.cursor.lastrowid = 42

        saved = self.store.save(self.page)

        self.assertEqual(saved.id, 42)
        sql, params = self.cursor.execute.call_args[0]
        self.assertIn("INSERT IGNORE INTO crawled_pages", sql)
        self.assertEqual(params[1], url_hash("https://example.com/"))
        self.mock_pool.commit.assert_called_once()

    def test_ignored_insert_returns_existing_row(self):
        row = (7, "https://example.com/", "example.com", "<html>", "Home", None, 200,
               "text/html", NOW, 0, None, None)
        self.cursor.execute.side_effect = [0, None]
        self.cursor.fetchone.return_value = row

        saved = self.store.save(self.page)

        self.assertEqual(saved.id, 7)
        self.assertEqual(saved.title, "Home")

    def test_find_by_id_missing(self):
        self.cursor.fetchone.return_value = None
        self.assertIsNone(self.store.find_by_id(99))


class TestLinkEdgeStore(unittest.TestCase):
    def test_duplicate_edge_reports_false(self):
        mock_pool = MagicMock()
        cursor = mock_pool.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = [1, 0]
        store = MySQLLinkEdgeStore(mock_pool)
        edge = LinkEdge(source_page_id=1, link_url="https://example.com/a", link_type="internal", crawled_at=NOW)

        self.assertTrue(store.save(edge))
        self.assertFalse(store.save(edge))


class TestQuoteStore(unittest.TestCase):
    def test_save_writes_every_column(self):
        mock_pool = MagicMock()
        cursor = mock_pool.cursor.return_value.__enter__.return_value
        cursor.lastrowid = 5
        store = MySQLQuoteStore(mock_pool)

        saved = store.save(QuoteRecord(source_url="u", collected_at=NOW, current_price=70000))

        sql, params = cursor.execute.call_args[0]
        self.assertEqual(len(params), len(QuoteRecord.column_names()))
        self.assertEqual(sql.count("%s"), len(params))
        self.assertIn(70000, params)
        self.assertEqual(saved.id, 5)

    def test_row_round_trip(self):
        mock_pool = MagicMock()
        cursor = mock_pool.cursor.return_value.__enter__.return_value
        columns = QuoteRecord.column_names()
        values = {name: None for name in columns}
        values.update(source_url="u", collected_at=NOW, stock_code="005930", volume=123)
        cursor.fetchone.return_value = (3,) + tuple(values[name] for name in columns)

        record = MySQLQuoteStore(mock_pool).find_latest("005930")

        self.assertEqual((record.id, record.stock_code, record.volume), (3, "005930", 123))


class TestArticleStore(unittest.TestCase):
    def test_save_and_lookup_use_url_hash(self):
        mock_pool = MagicMock()
        cursor = mock_pool.cursor.return_value.__enter__.return_value
        cursor.execute.return_value = 1
        cursor.lastrowid = 11
        store = MySQLArticleStore(mock_pool)
        article = ArticleRecord(article_url="https://n.news.naver.com/a", source="naver", crawled_at=NOW)

        saved = store.save(article)

        self.assertEqual(saved.id, 11)
        sql, params = cursor.execute.call_args[0]
        self.assertIn("INSERT IGNORE INTO articles", sql)
        self.assertEqual(params[-1], url_hash(article.article_url))


class TestSchema(unittest.TestCase):
    def test_initialize_creates_every_table(self):
        mock_pool = MagicMock()
        cursor = mock_pool.cursor.return_value.__enter__.return_value

        initialize_schema(mock_pool)

        self.assertEqual(cursor.execute.call_count, len(REQUIRED_TABLES))
        mock_pool.commit.assert_called_once()

    def test_verify_reports_missing(self):
        mock_pool = MagicMock()
        cursor = mock_pool.cursor.return_value.__enter__.return_value
        cursor.fetchall.return_value = [("crawled_pages",), ("extracted_links",)]
        self.assertFalse(verify_schema(mock_pool))

        cursor.fetchall.return_value = [(name,) for name in REQUIRED_TABLES]
        self.assertTrue(verify_schema(mock_pool))


if __name__ == "__main__":
    unittest.main()
