"""
FILE DESCRIPTION: Single-page quote crawl producing one QuoteRecord per attempt.
KEY FUNCTIONS/CLASSES: QuoteCrawler
"""

import dataclasses
from datetime import datetime

from crawler.core import QUOTE_BASE_URL, QUOTE_CODES, logger
from crawler.processor import LinkUtility, PageFetcher, PageParser
from extraction.quote import QuoteExtractor
from quotes.models import QuoteRecord


class QuoteCrawler:
    """
    FLOW: Fetches the quote page once -> On failure persists an error-only record ->
    Otherwise runs the QuoteExtractor -> Persists one record with whatever fields were found.
    """
    def __init__(self, quote_store, fetcher=None, extractor=None, base_url=QUOTE_BASE_URL, name="quote-crawler"):
        self.quote_store = quote_store
        self.fetcher = fetcher or PageFetcher()
        self.extractor = extractor or QuoteExtractor()
        self.base_url = base_url
        self.name = name

    def log(self, level, msg):
        getattr(logger, level)(msg, extra={'context': self.name})

    def url_for(self, code):
        if not code or not code.strip():
            raise ValueError("stock code is required")
        return f"{self.base_url}{code.strip()}"

    def crawl_code(self, code) -> QuoteRecord:
        return self.crawl(self.url_for(code))

    def crawl_codes(self, codes=None):
        """Crawl each code in turn; one failing code never stops the rest."""
        records = []
        for code in codes or QUOTE_CODES:
            try:
                records.append(self.crawl_code(code))
            except Exception as e:
                logger.exception(f"Quote crawl failed for {code}: {e}", extra={'context': self.name})
        return records

    def crawl(self, url) -> QuoteRecord:
        if not url:
            raise ValueError("url is required")

        code = LinkUtility.query_param(url, "code")
        response = self.fetcher.fetch(url)
        if not response.ok:
            self.log("error", f"Quote fetch failed for {url}: {response.error}")
            return self.quote_store.save(QuoteRecord.failure(url, response.error, stock_code=code))

        fields = self.extractor.extract(PageParser.soup(response.body))
        if code and not fields.get("stock_code"):
            fields["stock_code"] = code

        record = dataclasses.replace(
            QuoteRecord(source_url=url, collected_at=datetime.now(), status_code=response.status_code),
            **fields,
        )
        saved = self.quote_store.save(record)
        found = sum(1 for v in fields.values() if v is not None)
        self.log("info", f"Saved quote {saved.stock_code} ({saved.stock_name}) with {found} fields from {url}")
        return saved
