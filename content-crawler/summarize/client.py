"""
FILE DESCRIPTION: Client for the downstream summarization API and the article-facing service.
KEY FUNCTIONS/CLASSES: SummarizeClient, SummarizeService
"""

import requests
from crawler.core import SUMMARIZE_API_URL, SUMMARIZE_TIMEOUT, logger
from summarize.models import SummaryResult

SUMMARIZE_PATH = "/api/v1/summarize"


class SummarizeClient:
    """
    FLOW: POSTs {"text": ...} -> Accepts the payload only when responseCode == 200 ->
    Any other outcome (HTTP error, bad JSON, other responseCode) is logged and yields an empty result.
    """
    def __init__(self, base_url=SUMMARIZE_API_URL, timeout=SUMMARIZE_TIMEOUT, session=None):
        self.endpoint = base_url.rstrip("/") + SUMMARIZE_PATH
        self.timeout = timeout
        self.session = session or requests.Session()

    def summarize(self, text) -> SummaryResult:
        if not text or not text.strip():
            raise ValueError("text to summarize is empty")

        try:
            r = self.session.post(self.endpoint, json={"text": text}, timeout=self.timeout)
            r.raise_for_status()
            payload = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Summarize request failed: {e}", extra={'context': 'summarize'})
            return SummaryResult()

        if not isinstance(payload, dict) or payload.get("responseCode") != 200:
            code = payload.get("responseCode") if isinstance(payload, dict) else None
            logger.error(f"Summarize API answered responseCode={code}", extra={'context': 'summarize'})
            return SummaryResult()

        keywords = payload.get("keywords") or []
        return SummaryResult(summary=payload.get("summary"), keywords=[str(k) for k in keywords])


class SummarizeService:
    """Looks up an article and summarizes its body text."""

    def __init__(self, article_store, client=None):
        self.article_store = article_store
        self.client = client or SummarizeClient()

    def summarize_article(self, article_id):
        """Returns None when the article does not exist."""
        article = self.article_store.find_by_id(article_id)
        if article is None:
            return None
        if not article.body_text:
            logger.warning(f"Article {article_id} has no body text", extra={'context': 'summarize'})
            return SummaryResult()
        return self.client.summarize(article.body_text)
