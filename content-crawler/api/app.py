"""
Flask API for article summaries and manual news-crawl triggering.
"""

import threading
from contextlib import closing

from flask import Flask, jsonify, request

from crawler.core import logger
from crawler.db import get_connection
from articles.engine import ArticlePipeline
from articles.mysql_storage import MySQLArticleStore
from articles.sources import NAVER
from summarize.client import SummarizeService


def default_summarize(article_id):
    with closing(get_connection()) as conn:
        return SummarizeService(MySQLArticleStore(conn)).summarize_article(article_id)


def default_news_run():
    with closing(get_connection()) as conn:
        return ArticlePipeline(NAVER, MySQLArticleStore(conn)).run()


def create_app(summarize=default_summarize, news_run=default_news_run):
    """
    summarize(article_id) -> SummaryResult or None, news_run() -> run summary.
    Both are injectable so the routes can be exercised without MySQL.
    """
    app = Flask(__name__)
    news_lock = threading.Lock()

    # ============================================================
    # SUMMARY
    # ============================================================

    @app.route('/api/v1/summary', methods=['GET'])
    def summary():
        raw_id = request.args.get('id', '')
        try:
            article_id = int(raw_id)
        except ValueError:
            return jsonify({"error": "query parameter 'id' must be an integer"}), 400

        result = summarize(article_id)
        if result is None:
            return jsonify({"error": f"article {article_id} not found"}), 404
        return jsonify(result.as_dict())

    # ============================================================
    # NEWS CRAWL TRIGGER
    # ============================================================

    def _run_news():
        try:
            news_run()
        except Exception as e:
            logger.exception(f"Manual news crawl failed: {e}", extra={'context': 'api'})
        finally:
            news_lock.release()

    @app.route('/api/v1/news', methods=['POST'])
    def trigger_news():
        if not news_lock.acquire(blocking=False):
            return jsonify({"status": "already running"}), 409
        threading.Thread(target=_run_news, name="news-manual", daemon=True).start()
        logger.info("Manual news crawl started", extra={'context': 'api'})
        return jsonify({"status": "started"}), 202

    return app


app = create_app()
