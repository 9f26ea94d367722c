"""
FILE DESCRIPTION: Content processing pipeline handling network fetching, page parsing, and link extraction.
CONSOLIDATED FROM: fetcher.py, parser.py, url_utils.py
KEY FUNCTIONS/CLASSES: LinkUtility, PageFetcher, PageParser, LinkExtractor
"""

import time
import requests
import tldextract
from bs4 import BeautifulSoup
from urllib.parse import urlparse, urlunparse, urljoin, parse_qs
from crawler.core import USER_AGENT, REFERRER, REQUEST_TIMEOUT, HTML_PARSER, logger
from crawler.models import FetchResponse, FetchStatus
from crawler.policy import LinkPolicy

# Bundled public suffix snapshot only; never reaches out to the network.
_TLD_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())

MAX_LINK_TEXT = 500

# === LINK UTILITY ===

class LinkUtility:

    @staticmethod
    def get_domain(url: str) -> str:
        """Lowercased host with any leading "www." removed. Empty string for unparseable URLs."""
        return LinkPolicy.host_key(url)

    @staticmethod
    def registered_domain(url: str) -> str:
        """Registrable domain (e.g. "naver.com" for "n.news.naver.com")."""
        ext = _TLD_EXTRACT(url)
        if not ext.domain or not ext.suffix:
            return ""
        return f"{ext.domain}.{ext.suffix}".lower()

    @staticmethod
    def strip_fragment(url: str) -> str:
        p = urlparse(url)
        return urlunparse((p.scheme, p.netloc, p.path, p.params, p.query, ""))

    @staticmethod
    def resolve(href: str, base_url: str) -> str:
        """Absolute, fragment-free form of href relative to base_url. Empty string if unresolvable."""
        href = (href or "").strip()
        if not href:
            return ""
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            return ""
        if urlparse(absolute).scheme not in ("http", "https"):
            return ""
        return LinkUtility.strip_fragment(absolute)

    @staticmethod
    def query_param(url: str, name: str):
        values = parse_qs(urlparse(url).query).get(name)
        return values[0] if values else None


# === PAGE FETCHER ===

class PageFetcher:
    """
    FLOW: Sends one GET with the fixed browser-like identity -> Classifies the response
    (OK / CONTENT_MISMATCH / TRANSPORT_FAILURE) -> Returns a FetchResponse. Never raises.
    """
    def __init__(self, user_agent=USER_AGENT, referrer=REFERRER, timeout=REQUEST_TIMEOUT, session=None):
        self.user_agent = user_agent
        self.referrer = referrer
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, referrer=None):
        return {
            "User-Agent": self.user_agent,
            "Referer": referrer or self.referrer,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        }

    def fetch(self, url, referrer=None) -> FetchResponse:
        start_time = time.time()
        try:
            r = self.session.get(url, headers=self._headers(referrer), timeout=self.timeout, allow_redirects=True)
        except (requests.exceptions.RequestException, ValueError) as e:
            fetch_time_ms = int((time.time() - start_time) * 1000)
            logger.warning(f"Fetch failed for {url}: {e}", extra={'context': 'fetcher'})
            return FetchResponse(
                url=url, status=FetchStatus.TRANSPORT_FAILURE,
                error=f"{type(e).__name__}: {e}", fetch_time_ms=fetch_time_ms,
            )

        fetch_time_ms = int((time.time() - start_time) * 1000)
        content_type = r.headers.get("Content-Type", "")

        if r.status_code != 200 or not content_type.lower().startswith("text/html"):
            return FetchResponse(
                url=url, status=FetchStatus.CONTENT_MISMATCH,
                status_code=r.status_code, content_type=content_type,
                error=f"Non-HTML content or non-200 status: {r.status_code}, Type: {content_type}",
                fetch_time_ms=fetch_time_ms,
            )

        # Korean portals often omit the charset; fall back to detection instead of ISO-8859-1.
        if "charset" not in content_type.lower():
            r.encoding = r.apparent_encoding

        return FetchResponse(
            url=url, status=FetchStatus.OK, status_code=r.status_code,
            content_type=content_type, body=r.text, fetch_time_ms=fetch_time_ms,
        )


# === PAGE PARSER ===

class PageParser:
    """Title and description lookup for generic pages."""

    @staticmethod
    def soup(html):
        return BeautifulSoup(html or "", HTML_PARSER)

    @staticmethod
    def title(soup):
        if soup.title is None:
            return None
        return soup.title.get_text(strip=True) or None

    @staticmethod
    def meta_description(soup):
        for attrs in ({"property": "og:description"}, {"name": "description"}):
            tag = soup.find("meta", attrs=attrs)
            if tag and tag.get("content"):
                return tag["content"].strip()
        return None


# === LINK EXTRACTOR ===

class LinkExtractor:
    """
    FLOW: Walks all a[href] -> Drops empty, fragment-only and non-navigational hrefs ->
    Resolves to absolute and strips the fragment -> Suppresses repeats within the page ->
    Returns (url, text) pairs in document order.
    """
    @staticmethod
    def extract_links(soup, base_url):
        seen = set()
        links = []
        for a in soup.find_all("a", href=True):
            href = a["href"]
            if LinkPolicy.is_skippable_href(href):
                continue
            url = LinkUtility.resolve(href, base_url)
            if not url or url in seen:
                continue
            seen.add(url)
            text = " ".join(a.get_text(" ").split())[:MAX_LINK_TEXT] or None
            links.append((url, text))
        return links
