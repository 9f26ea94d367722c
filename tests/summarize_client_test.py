import unittest
from datetime import datetime
from unittest.mock import MagicMock

import requests

from articles.models import ArticleRecord
from summarize.client import SummarizeClient, SummarizeService
from summarize.models import SummaryResult
from tests.fakes import InMemoryArticleStore


class TestSummarizeClient(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.response = self.session.post.return_value
        self.client = SummarizeClient(base_url="http://summarizer:8000/", timeout=5, session=self.session)

    def test_success_populates_result(self):
        self.response.json.return_value = {"responseCode": 200, "summary": "요약", "keywords": ["반도체", "수출"]}

        result = self.client.summarize("본문")

        self.assertEqual(result, SummaryResult(summary="요약", keywords=["반도체", "수출"]))
        self.session.post.assert_called_once_with(
            "http://summarizer:8000/api/v1/summarize", json={"text": "본문"}, timeout=5)

    def test_other_response_code_is_empty(self):
        self.response.json.return_value = {"responseCode": 500, "summary": "ignored", "keywords": ["x"]}
        self.assertTrue(self.client.summarize("본문").empty)

    def test_transport_error_is_empty(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError("refused")
        self.assertTrue(self.client.summarize("본문").empty)

    def test_invalid_json_is_empty(self):
        self.response.json.side_effect = ValueError("not json")
        self.assertTrue(self.client.summarize("본문").empty)

    def test_blank_text_rejected(self):
        with self.assertRaises(ValueError):
            self.client.summarize("  ")
        self.session.post.assert_not_called()


class TestSummarizeService(unittest.TestCase):
    def setUp(self):
        now = datetime.now()
        self.store = InMemoryArticleStore([
            ArticleRecord(article_url="https://n.news.naver.com/1", source="naver", crawled_at=now, body_text="본문"),
            ArticleRecord(article_url="https://n.news.naver.com/2", source="naver", crawled_at=now),
        ])
        self.client = MagicMock()
        self.client.summarize.return_value = SummaryResult(summary="요약", keywords=["k"])
        self.service = SummarizeService(self.store, client=self.client)

    def test_summarizes_body(self):
        self.assertEqual(self.service.summarize_article(1).summary, "요약")
        self.client.summarize.assert_called_once_with("본문")

    def test_missing_article(self):
        self.assertIsNone(self.service.summarize_article(99))

    def test_article_without_body(self):
        self.assertTrue(self.service.summarize_article(2).empty)
        self.client.summarize.assert_not_called()

    def test_api_shape(self):
        self.assertEqual(SummaryResult(summary="s", keywords=["a"]).as_dict(),
                         {"summarizedArticle": "s", "extractedKeywords": ["a"]})


if __name__ == "__main__":
    unittest.main()
