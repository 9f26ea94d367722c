import threading
import unittest

from api.app import create_app
from summarize.models import SummaryResult


class TestApi(unittest.TestCase):
    def setUp(self):
        self.summaries = {1: SummaryResult(summary="요약", keywords=["반도체"])}
        self.news_started = threading.Event()
        self.release_news = threading.Event()

        def news_run():
            self.news_started.set()
            self.release_news.wait(5)

        app = create_app(summarize=self.summaries.get, news_run=news_run)
        app.testing = True
        self.client = app.test_client()

    def tearDown(self):
        self.release_news.set()

    def test_summary(self):
        resp = self.client.get("/api/v1/summary?id=1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"summarizedArticle": "요약", "extractedKeywords": ["반도체"]})

    def test_summary_unknown_article(self):
        self.assertEqual(self.client.get("/api/v1/summary?id=2").status_code, 404)

    def test_summary_requires_integer_id(self):
        self.assertEqual(self.client.get("/api/v1/summary").status_code, 400)
        self.assertEqual(self.client.get("/api/v1/summary?id=abc").status_code, 400)

    def test_news_trigger_runs_in_background(self):
        resp = self.client.post("/api/v1/news")
        self.assertEqual(resp.status_code, 202)
        self.assertTrue(self.news_started.wait(5))

        # a second trigger while the first run is active is refused
        self.assertEqual(self.client.post("/api/v1/news").status_code, 409)


if __name__ == "__main__":
    unittest.main()
