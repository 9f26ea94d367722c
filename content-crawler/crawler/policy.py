"""
Centralized link policy for skipping hrefs, scoping domains and classifying links.

All extension and scheme rules live here. Other modules should import and
use LinkPolicy instead of duplicating extension lists or ad-hoc checks.
"""

import re
from urllib.parse import urlparse


class LinkPolicy:
    """
    Central policy for link filtering and classification.

    Methods:
    - is_skippable_href(href): True for empty, fragment-only and non-navigational hrefs
    - host_key(url): lowercased host without a leading "www."
    - is_same_domain(url, current_url): True if both share the same host_key
    - classify(url, base_domain): internal | external | image | document | unknown
    """

    SKIP_PREFIXES = ("#", "mailto:", "tel:", "javascript:")

    IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "bmp", "svg")
    DOCUMENT_EXTENSIONS = ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx")

    _IMAGE_REGEX = re.compile(r"\.(" + "|".join(IMAGE_EXTENSIONS) + r")$", re.IGNORECASE)
    _DOCUMENT_REGEX = re.compile(r"\.(" + "|".join(DOCUMENT_EXTENSIONS) + r")$", re.IGNORECASE)

    INTERNAL = "internal"
    EXTERNAL = "external"
    IMAGE = "image"
    DOCUMENT = "document"
    UNKNOWN = "unknown"

    @classmethod
    def is_skippable_href(cls, href: str) -> bool:
        h = (href or "").strip()
        if not h:
            return True
        return h.lower().startswith(cls.SKIP_PREFIXES)

    @staticmethod
    def host_key(url: str) -> str:
        try:
            host = (urlparse(url).hostname or "").lower()
        except ValueError:
            return ""
        return host[4:] if host.startswith("www.") else host

    @classmethod
    def is_same_domain(cls, url: str, current_url: str) -> bool:
        key = cls.host_key(url)
        return bool(key) and key == cls.host_key(current_url)

    @classmethod
    def classify(cls, url: str, base_domain: str) -> str:
        """
        First match wins: empty -> unknown, contains base_domain -> internal,
        image extension -> image, document extension -> document, else external.
        """
        if not url:
            return cls.UNKNOWN
        if base_domain and base_domain in url:
            return cls.INTERNAL
        if cls._IMAGE_REGEX.search(url):
            return cls.IMAGE
        if cls._DOCUMENT_REGEX.search(url):
            return cls.DOCUMENT
        return cls.EXTERNAL
