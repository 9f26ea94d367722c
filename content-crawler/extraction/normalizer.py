"""
Tolerant conversion of scraped strings into typed values.
Nothing here raises on malformed input; unusable values come back as None.
"""

import re
from bs4 import NavigableString

INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1

_WHITESPACE = re.compile(r"\s+")
_FRACTION = re.compile(r"(\d)\.\d+")
_NON_DIGIT = re.compile(r"[^\d]")


def clean_text(text):
    """Collapse runs of whitespace (including nbsp) and trim. None stays None."""
    if text is None:
        return None
    return _WHITESPACE.sub(" ", text.replace("\xa0", " ")).strip()


def text_of(tag):
    """Whitespace-collapsed text of a tag and all its descendants."""
    if tag is None:
        return None
    return clean_text(tag.get_text())


def own_text(tag):
    """Text of the tag's direct string children only, ignoring nested elements."""
    if tag is None:
        return None
    parts = [str(child) for child in tag.children if isinstance(child, NavigableString)]
    return clean_text("".join(parts))


def clean_number(text):
    """
    "1,186.35" -> "1186", "-2,300원" -> "-2300", "l" -> None.
    The fractional tail is dropped before anything else, then every character
    except digits goes; a minus sign survives only in leading position.
    """
    if text is None:
        return None
    s = _FRACTION.sub(r"\1", text.strip())
    digits = _NON_DIGIT.sub("", s)
    if not digits:
        return None
    return f"-{digits}" if s.startswith("-") else digits


def _parse_bounded(text, low, high):
    cleaned = clean_number(text)
    if cleaned is None:
        return None
    value = int(cleaned)
    if value < low or value > high:
        return None
    return value


def parse_int(text):
    return _parse_bounded(text, INT_MIN, INT_MAX)


def parse_long(text):
    return _parse_bounded(text, LONG_MIN, LONG_MAX)


def split_pair(text, pattern):
    """
    Split a combined cell such as "100원 l 1주" with a two-group pattern.
    On mismatch the whole cleaned text is the first value and the second is None.
    """
    cleaned = clean_text(text)
    if not cleaned:
        return None, None
    m = re.search(pattern, cleaned)
    if not m:
        return cleaned, None
    return m.group(1).strip(), m.group(2).strip()
