"""
FILE DESCRIPTION: Source definitions and detail-page parsers for the article pipelines.
KEY FUNCTIONS/CLASSES: NAVER, CNN, SOURCES, parse_naver_article, parse_cnn_article
"""

from datetime import datetime
from urllib.parse import urlparse

from crawler.core import (
    NAVER_NEWS_URLS, NAVER_REFERRER, NAVER_DELAY_MIN, NAVER_DELAY_MAX,
    CNN_URL, CNN_REFERRER, CNN_DELAY_MIN, CNN_DELAY_MAX, logger,
)
from extraction.normalizer import clean_text, text_of, own_text
from articles.models import ArticleSource

NAVER_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CNN_DATE_FORMAT = "%b %d, %Y, %I:%M %p"


def _select_text(soup, selector):
    return text_of(soup.select_one(selector))


# === NAVER ===

def parse_naver_article(soup, url):
    logo = soup.select_one("a.media_end_head_top_logo img")
    media = None
    if logo is not None:
        media = clean_text(logo.get("title") or logo.get("alt")) or None

    title = _select_text(soup, "h2#title_area span") or _select_text(soup, "h2#title_area")

    body = soup.select_one("div#newsct_article")
    body_text = body.get_text("\n", strip=True) if body is not None else None

    published_at = None
    stamp = soup.select_one("span.media_end_head_info_datestamp_time")
    raw_date = stamp.get("data-date-time") if stamp is not None else None
    if raw_date:
        try:
            published_at = datetime.strptime(raw_date.strip(), NAVER_DATE_FORMAT)
        except ValueError:
            logger.warning(f"Unparseable date '{raw_date}' on {url}", extra={'context': 'naver'})
    else:
        logger.warning(f"No publish date on {url}", extra={'context': 'naver'})

    return {
        "media": media,
        "title": title,
        "body_text": body_text,
        "author": _select_text(soup, "em.media_end_head_journalist_name"),
        "category": _select_text(soup, "li.Nlist_item._LNB_ITEM.is_active"),
        "published_at": published_at,
    }


# === CNN ===

def cnn_category(url):
    """First path segment after /YYYY/MM/DD/, e.g. "politics"."""
    segments = [s for s in urlparse(url).path.split("/") if s]
    for i in range(len(segments) - 3):
        if all(s.isdigit() for s in segments[i:i + 3]):
            return segments[i + 3]
    return None


def parse_cnn_date(text, url=None):
    """Falls back to now when the stamp is missing or unreadable."""
    cleaned = clean_text((text or "").replace("PUBLISHED", "").replace("Updated", "").replace(" ET", ""))
    if cleaned:
        try:
            return datetime.strptime(cleaned, CNN_DATE_FORMAT)
        except ValueError:
            pass
    logger.warning(f"Unparseable date '{cleaned}' on {url}, using crawl time", extra={'context': 'cnn'})
    return datetime.now()


def parse_cnn_article(soup, url):
    paragraphs = [
        p.get_text(" ", strip=True)
        for p in soup.select("div.article__content > p[data-component-name='paragraph']")
    ]
    stamp = soup.select_one("div.timestamp__published")
    return {
        "media": "CNN",
        "title": _select_text(soup, "h1.headline__text"),
        "body_text": "\n\n".join(p for p in paragraphs if p) or None,
        "author": own_text(soup.select_one("span.byline__name")) or None,
        "category": cnn_category(url),
        "published_at": parse_cnn_date(stamp.get_text() if stamp is not None else None, url),
    }


NAVER = ArticleSource(
    name="naver",
    index_urls=tuple(NAVER_NEWS_URLS),
    anchor_selector="a._NLOG_IMPRESSION",
    path_pattern=r"/article/\d+/\d+",
    domain="naver.com",
    referrer=NAVER_REFERRER,
    delay_min=NAVER_DELAY_MIN,
    delay_max=NAVER_DELAY_MAX,
    parse=parse_naver_article,
    keep_html=True,
)

CNN = ArticleSource(
    name="cnn",
    index_urls=(CNN_URL,),
    anchor_selector="a.container__link.container__link--type-article[href]",
    path_pattern=r"/\d{4}/\d{2}/\d{2}/",
    domain="cnn.com",
    referrer=CNN_REFERRER,
    delay_min=CNN_DELAY_MIN,
    delay_max=CNN_DELAY_MAX,
    parse=parse_cnn_article,
)

SOURCES = {source.name: source for source in (NAVER, CNN)}


def get_source(name):
    try:
        return SOURCES[name]
    except KeyError:
        raise ValueError(f"unknown article source '{name}', expected one of {sorted(SOURCES)}") from None
