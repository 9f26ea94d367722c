"""
PageFetcher outcome classification and Throttle behaviour.
"""

import threading
import unittest
from unittest.mock import MagicMock

import requests

from crawler.models import FetchStatus
from crawler.processor import PageFetcher
from crawler.throttle import Throttle


def fake_response(status_code=200, content_type="text/html; charset=utf-8", text="<html></html>"):
    r = MagicMock()
    r.status_code = status_code
    r.headers = {"Content-Type": content_type} if content_type is not None else {}
    r.text = text
    return r


class TestPageFetcher(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.fetcher = PageFetcher(user_agent="UA/1.0", referrer="https://www.naver.com", timeout=3,
                                   session=self.session)

    def test_ok_sends_identity_headers(self):
        self.session.get.return_value = fake_response(text="<p>hi</p>")

        result = self.fetcher.fetch("https://example.com/")

        self.assertEqual(result.status, FetchStatus.OK)
        self.assertEqual(result.body, "<p>hi</p>")
        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["headers"]["User-Agent"], "UA/1.0")
        self.assertEqual(kwargs["headers"]["Referer"], "https://www.naver.com")
        self.assertEqual(kwargs["timeout"], 3)

    def test_referrer_override(self):
        self.session.get.return_value = fake_response()
        self.fetcher.fetch("https://edition.cnn.com/x", referrer="https://edition.cnn.com/")
        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["headers"]["Referer"], "https://edition.cnn.com/")

    def test_non_200_is_content_mismatch(self):
        self.session.get.return_value = fake_response(status_code=404)
        result = self.fetcher.fetch("https://example.com/missing")
        self.assertEqual(result.status, FetchStatus.CONTENT_MISMATCH)
        self.assertEqual(result.status_code, 404)
        self.assertEqual(result.error,
                         "Non-HTML content or non-200 status: 404, Type: text/html; charset=utf-8")

    def test_non_html_is_content_mismatch(self):
        self.session.get.return_value = fake_response(content_type="application/pdf")
        result = self.fetcher.fetch("https://example.com/doc.pdf")
        self.assertEqual(result.status, FetchStatus.CONTENT_MISMATCH)
        self.assertEqual(result.body, "")

    def test_missing_charset_uses_detected_encoding(self):
        r = fake_response(content_type="text/html")
        r.apparent_encoding = "EUC-KR"
        self.session.get.return_value = r
        self.fetcher.fetch("https://finance.naver.com/item/main.naver?code=005930")
        self.assertEqual(r.encoding, "EUC-KR")

    def test_transport_failure_never_raises(self):
        self.session.get.side_effect = requests.exceptions.Timeout("timed out")
        result = self.fetcher.fetch("https://example.com/slow")
        self.assertEqual(result.status, FetchStatus.TRANSPORT_FAILURE)
        self.assertIsNone(result.status_code)
        self.assertIn("Timeout", result.error)

    def test_malformed_url_is_transport_failure(self):
        self.session.get.side_effect = requests.exceptions.InvalidURL("bad")
        self.assertEqual(self.fetcher.fetch("http://").status, FetchStatus.TRANSPORT_FAILURE)


class TestThrottle(unittest.TestCase):
    def test_zero_delay(self):
        self.assertTrue(Throttle(0, 0).pause())

    def test_stop_event_interrupts(self):
        stop = threading.Event()
        throttle = Throttle(5, 10, stop)
        stop.set()
        self.assertFalse(throttle.pause())
        self.assertTrue(throttle.interrupted)

    def test_invalid_range(self):
        with self.assertRaises(ValueError):
            Throttle(4, 1)

    def test_spacing_pauses_even_when_block_raises(self):
        throttle = Throttle(0, 0)
        throttle.pause = MagicMock(return_value=True)
        with self.assertRaises(RuntimeError):
            with throttle.spacing():
                raise RuntimeError("task failed")
        throttle.pause.assert_called_once()


if __name__ == "__main__":
    unittest.main()
