"""
FILE DESCRIPTION: Best-effort field extraction for the stock quote page.
KEY FUNCTIONS/CLASSES: QuoteExtractor
"""

import re
from crawler.core import logger
from extraction.normalizer import clean_text, text_of, own_text, split_pair
from extraction.rules import (
    COMPARATIVE_TABLE, COMPARATIVE_ROWS, COMPARATIVE_DEFERRED, DIRECTION_ARROWS,
    DETAIL_SECTION, DETAIL_TABLES, PRICE_SUMMARY_LABELS, PRICE_TODAY, PRICE_SUMMARY,
    to_typed_fields,
)

_WHITESPACE = re.compile(r"\s+")
_CODE_CHARS = re.compile(r"[^0-9A-Za-z]")
_NON_HANGUL = re.compile(r"[^가-힣]")


def _put(raw, field, value):
    # First value found for a field wins.
    if value and field not in raw:
        raw[field] = value


class QuoteExtractor:
    """
    FLOW: Comparative-table pass (first instrument column) -> Detail-section pass (rule table) ->
    Price-summary pass -> Identity fallbacks -> Typed conversion.

    Every pass is independent; a missing or reshaped block only leaves its fields unset.
    """

    PASSES = ("_comparative_pass", "_detail_pass", "_price_summary_pass", "_identity_pass")

    def extract_raw(self, soup):
        raw = {}
        for name in self.PASSES:
            try:
                getattr(self, name)(soup, raw)
            except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"{name} skipped: {e}", extra={'context': 'quote-extractor'})
        return raw

    def extract(self, soup):
        return to_typed_fields(self.extract_raw(soup))

    # --- passes ---

    def _comparative_pass(self, soup, raw):
        table = soup.select_one(COMPARATIVE_TABLE)
        if table is None:
            return

        for th in table.select("thead tr th[scope='col']"):
            anchor = th.find("a")
            if anchor is None:
                continue
            _put(raw, "stock_name", own_text(anchor))
            code = th.find("em")
            if code is not None:
                _put(raw, "stock_code", _CODE_CHARS.sub("", code.get_text()))
            break

        for tr in table.select("tbody tr"):
            th = tr.select_one("th[scope='row']") or tr.find("th")
            td = tr.find("td")
            if th is None or td is None:
                continue
            span = th.find("span")
            label = text_of(span) if span is not None else text_of(th)
            if label in COMPARATIVE_DEFERRED or label not in COMPARATIVE_ROWS:
                continue

            field, transform = COMPARATIVE_ROWS[label]
            if transform == "text":
                _put(raw, field, text_of(td))
                continue

            em = td.find("em")
            value = text_of(em) if em is not None else text_of(td)
            for word, arrow in DIRECTION_ARROWS.items():
                value = value.replace(word, arrow if transform == "arrow" else "")
            _put(raw, field, clean_text(value))

    def _detail_pass(self, soup, raw):
        section = soup.select_one(DETAIL_SECTION)
        if section is None:
            return

        for selector, rules in DETAIL_TABLES:
            for table in section.select(selector):
                for tr in table.find_all("tr"):
                    th = tr.find("th")
                    td = tr.find("td")
                    if th is None or td is None:
                        continue
                    label = _WHITESPACE.sub("", th.get_text())
                    rule = next((r for r in rules if label.startswith(r.label)), None)
                    if rule is not None:
                        self._apply_detail_rule(rule, td, raw)

    @staticmethod
    def _apply_detail_rule(rule, td, raw):
        if rule.mode == "split":
            first, second = split_pair(td.get_text(), rule.pattern)
            _put(raw, rule.fields[0], first)
            _put(raw, rule.fields[1], second)
            return

        em = td.find("em")
        if rule.mode == "em":
            value = text_of(em) if em is not None else text_of(td)
        elif rule.mode == "combined":
            value = text_of(em.parent) if em is not None else text_of(td)
        else:
            value = text_of(td)
        _put(raw, rule.fields[0], value)

    def _price_summary_pass(self, soup, raw):
        for label_tag in soup.select(PRICE_SUMMARY_LABELS):
            field = PRICE_SUMMARY.get(_NON_HANGUL.sub("", label_tag.get_text()))
            em = label_tag.find_next_sibling("em")
            if not field or em is None:
                continue
            value_tag = em.select_one("span.blind")
            _put(raw, field, text_of(value_tag) if value_tag is not None else text_of(em))

    def _identity_pass(self, soup, raw):
        """Header-area fallbacks for name, code and price when the peer table is absent."""
        name = soup.select_one("div.wrap_company h2 a") or soup.select_one("div.wrap_company h2")
        if name is not None:
            _put(raw, "stock_name", text_of(name))
        code = soup.select_one("div.wrap_company div.description span.code")
        if code is not None:
            _put(raw, "stock_code", text_of(code))
        today = soup.select_one(PRICE_TODAY)
        if today is not None:
            _put(raw, "current_price", text_of(today))
